"""Dashboard overview route."""

from fastapi import APIRouter, Depends

from backend.db.deps import get_quality_service
from backend.services.dashboard import DashboardOverview
from backend.services.quality_service import QualityService

router = APIRouter()


@router.get("/", response_model=DashboardOverview)
def get_dashboard(service: QualityService = Depends(get_quality_service)) -> DashboardOverview:
    """KPI counts, per-part pass/fail overview and items needing attention."""
    return service.dashboard()

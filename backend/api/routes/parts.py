"""API routes for the parts catalog."""

from fastapi import APIRouter, Depends, Query, status

from backend.db.deps import get_quality_service
from backend.models.common import ActionResult, LifecycleStatus
from backend.models.pagination import Page, paginate
from backend.models.part import Part, PartCreate, PartUpdate
from backend.services.quality_service import QualityService

router = APIRouter()


@router.get("/", response_model=Page[Part])
def list_parts(
    status_filter: LifecycleStatus | None = Query(None, alias="status", description="Active or Archived"),
    search: str | None = Query(None, description="Substring of part code or name"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum rows to return"),
    offset: int = Query(0, ge=0, description="Number of rows to skip"),
    service: QualityService = Depends(get_quality_service),
) -> Page[Part]:
    return paginate(service.list_parts(status_filter, search), limit, offset)


@router.get("/{part_id}", response_model=Part)
def get_part(part_id: str, service: QualityService = Depends(get_quality_service)) -> Part:
    return service.get_part(part_id)


@router.post("/", response_model=ActionResult[Part], status_code=status.HTTP_201_CREATED)
def create_part(payload: PartCreate, service: QualityService = Depends(get_quality_service)) -> ActionResult[Part]:
    return service.create_part(payload)


@router.put("/{part_id}", response_model=ActionResult[Part])
def update_part(
    part_id: str,
    payload: PartUpdate,
    service: QualityService = Depends(get_quality_service),
) -> ActionResult[Part]:
    return service.update_part(part_id, payload)


@router.post("/{part_id}/archive", response_model=ActionResult[Part])
def archive_part(part_id: str, service: QualityService = Depends(get_quality_service)) -> ActionResult[Part]:
    return service.archive_part(part_id)


@router.post("/{part_id}/restore", response_model=ActionResult[Part])
def restore_part(part_id: str, service: QualityService = Depends(get_quality_service)) -> ActionResult[Part]:
    return service.restore_part(part_id)


@router.post("/{part_id}/revisions", response_model=ActionResult[Part], status_code=status.HTTP_201_CREATED)
def revise_part(part_id: str, service: QualityService = Depends(get_quality_service)) -> ActionResult[Part]:
    """Archive the part and create its next revision."""
    return service.revise_part(part_id)

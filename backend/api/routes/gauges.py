"""API routes for inspection gauges."""

from fastapi import APIRouter, Depends, Query, status

from backend.db.deps import get_quality_service
from backend.models.common import ActionResult
from backend.models.gauge import Gauge, GaugeCreate, GaugeStatus, GaugeUpdate
from backend.models.pagination import Page, paginate
from backend.services.quality_service import QualityService

router = APIRouter()


@router.get("/", response_model=Page[Gauge])
def list_gauges(
    status_filter: GaugeStatus | None = Query(None, alias="status", description="Filter by gauge status"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    service: QualityService = Depends(get_quality_service),
) -> Page[Gauge]:
    return paginate(service.list_gauges(status_filter), limit, offset)


@router.get("/{gauge_id}", response_model=Gauge)
def get_gauge(gauge_id: str, service: QualityService = Depends(get_quality_service)) -> Gauge:
    return service.get_gauge(gauge_id)


@router.post("/", response_model=ActionResult[Gauge], status_code=status.HTTP_201_CREATED)
def create_gauge(payload: GaugeCreate, service: QualityService = Depends(get_quality_service)) -> ActionResult[Gauge]:
    return service.create_gauge(payload)


@router.put("/{gauge_id}", response_model=ActionResult[Gauge])
def update_gauge(
    gauge_id: str,
    payload: GaugeUpdate,
    service: QualityService = Depends(get_quality_service),
) -> ActionResult[Gauge]:
    return service.update_gauge(gauge_id, payload)


@router.delete("/{gauge_id}", response_model=ActionResult[Gauge])
def delete_gauge(gauge_id: str, service: QualityService = Depends(get_quality_service)) -> ActionResult[Gauge]:
    return service.delete_gauge(gauge_id)

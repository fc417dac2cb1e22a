"""API routes for production sampling and incoming inspection."""

from fastapi import APIRouter, Body, Depends, Query, status

from backend.core.ledger import ParameterSummary
from backend.db.deps import get_quality_service
from backend.models.common import ActionResult
from backend.models.drawing import BubblePlacement
from backend.models.pagination import Page, paginate
from backend.models.sample import (
    CompleteSampleRequest,
    MeasurementInput,
    ReceivingRequest,
    Sample,
    SampleCreate,
    SampleOrigin,
    SampleStatus,
)
from backend.services.quality_service import QualityService

router = APIRouter()


@router.get("/", response_model=Page[Sample])
def list_samples(
    origin: SampleOrigin | None = Query(None, description="production or inspection"),
    status_filter: SampleStatus | None = Query(None, alias="status", description="Filter by sample status"),
    part_id: str | None = Query(None, description="Only samples of this part"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    service: QualityService = Depends(get_quality_service),
) -> Page[Sample]:
    return paginate(service.list_samples(origin, status_filter, part_id), limit, offset)


@router.post("/", response_model=ActionResult[Sample], status_code=status.HTTP_201_CREATED)
def create_sample(payload: SampleCreate, service: QualityService = Depends(get_quality_service)) -> ActionResult[Sample]:
    """Create a Pending production sample."""
    return service.create_sample(payload.part_id, payload.control_plan_id, payload.batch_number)


@router.post("/receiving", response_model=ActionResult[list[Sample]], status_code=status.HTTP_201_CREATED)
def receive_batch(
    payload: ReceivingRequest,
    service: QualityService = Depends(get_quality_service),
) -> ActionResult[list[Sample]]:
    """Create inspection samples for a received delivery of a part."""
    return service.receive_batch(payload.part_code, payload.count, payload.batch_number)


@router.get("/{sample_id}", response_model=Sample)
def get_sample(sample_id: str, service: QualityService = Depends(get_quality_service)) -> Sample:
    return service.get_sample(sample_id)


@router.post("/{sample_id}/start", response_model=ActionResult[Sample])
def start_sample(sample_id: str, service: QualityService = Depends(get_quality_service)) -> ActionResult[Sample]:
    return service.start_sample(sample_id)


@router.post("/{sample_id}/measurements", response_model=ActionResult[Sample], status_code=status.HTTP_201_CREATED)
def record_measurement(
    sample_id: str,
    payload: MeasurementInput,
    service: QualityService = Depends(get_quality_service),
) -> ActionResult[Sample]:
    return service.record_measurement(sample_id, payload)


@router.delete("/{sample_id}/measurements/{measurement_id}", response_model=ActionResult[Sample])
def remove_measurement(
    sample_id: str,
    measurement_id: str,
    service: QualityService = Depends(get_quality_service),
) -> ActionResult[Sample]:
    return service.remove_measurement(sample_id, measurement_id)


@router.put("/{sample_id}/bubbles", response_model=ActionResult[Sample])
def place_bubble(
    sample_id: str,
    payload: BubblePlacement,
    service: QualityService = Depends(get_quality_service),
) -> ActionResult[Sample]:
    """Place the parameter's bubble on the drawing, or move it if already placed."""
    return service.place_bubble(sample_id, payload)


@router.get("/{sample_id}/summary", response_model=list[ParameterSummary])
def summarize_sample(
    sample_id: str,
    service: QualityService = Depends(get_quality_service),
) -> list[ParameterSummary]:
    """Per-parameter ``x / y OK`` counts in control-plan order."""
    return service.summarize_sample(sample_id)


@router.post("/{sample_id}/complete", response_model=ActionResult[Sample])
def complete_sample(
    sample_id: str,
    payload: CompleteSampleRequest | None = Body(None),
    service: QualityService = Depends(get_quality_service),
) -> ActionResult[Sample]:
    final = payload.measurements if payload is not None else None
    return service.complete_sample(sample_id, final)


@router.post("/{sample_id}/analysis")
def analyze_sample(sample_id: str, service: QualityService = Depends(get_quality_service)) -> dict[str, str]:
    """Return the analysis text for the sample's current readings."""
    return {"sample_id": sample_id, "analysis": service.analyze_sample(sample_id)}

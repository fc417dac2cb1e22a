"""API routes for control plans and their parameters."""

from fastapi import APIRouter, Body, Depends, Query, status

from backend.db.deps import get_quality_service
from backend.models.common import ActionResult, LifecycleStatus
from backend.models.control_plan import ControlPlan, ControlPlanCreate, ControlPlanUpdate, ParameterInput
from backend.models.pagination import Page, paginate
from backend.services.quality_service import QualityService

router = APIRouter()


@router.get("/", response_model=Page[ControlPlan])
def list_control_plans(
    part_id: str | None = Query(None, description="Only plans for this part"),
    status_filter: LifecycleStatus | None = Query(None, alias="status", description="Active or Archived"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    service: QualityService = Depends(get_quality_service),
) -> Page[ControlPlan]:
    return paginate(service.list_control_plans(part_id, status_filter), limit, offset)


@router.get("/{plan_id}", response_model=ControlPlan)
def get_control_plan(plan_id: str, service: QualityService = Depends(get_quality_service)) -> ControlPlan:
    return service.get_control_plan(plan_id)


@router.post("/", response_model=ActionResult[ControlPlan], status_code=status.HTTP_201_CREATED)
def create_control_plan(
    payload: ControlPlanCreate,
    service: QualityService = Depends(get_quality_service),
) -> ActionResult[ControlPlan]:
    return service.create_control_plan(payload)


@router.put("/{plan_id}", response_model=ActionResult[ControlPlan])
def update_control_plan(
    plan_id: str,
    payload: ControlPlanUpdate,
    service: QualityService = Depends(get_quality_service),
) -> ActionResult[ControlPlan]:
    return service.update_control_plan(plan_id, payload)


@router.post("/{plan_id}/archive", response_model=ActionResult[ControlPlan])
def archive_control_plan(plan_id: str, service: QualityService = Depends(get_quality_service)) -> ActionResult[ControlPlan]:
    return service.archive_control_plan(plan_id)


@router.post("/{plan_id}/restore", response_model=ActionResult[ControlPlan])
def restore_control_plan(plan_id: str, service: QualityService = Depends(get_quality_service)) -> ActionResult[ControlPlan]:
    return service.restore_control_plan(plan_id)


@router.post("/{plan_id}/revisions", response_model=ActionResult[ControlPlan], status_code=status.HTTP_201_CREATED)
def revise_control_plan(plan_id: str, service: QualityService = Depends(get_quality_service)) -> ActionResult[ControlPlan]:
    """Archive the plan and create its next version with copied parameters."""
    return service.revise_control_plan(plan_id)


@router.post("/{plan_id}/parameters", response_model=ActionResult[ControlPlan], status_code=status.HTTP_201_CREATED)
def add_parameter(
    plan_id: str,
    payload: ParameterInput = Body(...),
    service: QualityService = Depends(get_quality_service),
) -> ActionResult[ControlPlan]:
    return service.add_parameter(plan_id, payload)


@router.put("/{plan_id}/parameters/{parameter_id}", response_model=ActionResult[ControlPlan])
def update_parameter(
    plan_id: str,
    parameter_id: str,
    payload: ParameterInput = Body(...),
    service: QualityService = Depends(get_quality_service),
) -> ActionResult[ControlPlan]:
    return service.update_parameter(plan_id, parameter_id, payload)


@router.delete("/{plan_id}/parameters/{parameter_id}", response_model=ActionResult[ControlPlan])
def delete_parameter(
    plan_id: str,
    parameter_id: str,
    service: QualityService = Depends(get_quality_service),
) -> ActionResult[ControlPlan]:
    return service.delete_parameter(plan_id, parameter_id)

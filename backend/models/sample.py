"""Sample and measurement models.

A sample belongs to exactly one workflow path, fixed by its origin:

* production: Pending -> In Progress -> Completed
* inspection: Inspection Pending -> Inspection Completed
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, model_validator

from backend.models.common import FrozenModel
from backend.models.drawing import Bubble


class SampleOrigin(str, Enum):
    PRODUCTION = "production"
    INSPECTION = "inspection"


class SampleStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    INSPECTION_PENDING = "Inspection Pending"
    INSPECTION_COMPLETED = "Inspection Completed"


SAMPLE_PATHS: dict[SampleOrigin, tuple[SampleStatus, ...]] = {
    SampleOrigin.PRODUCTION: (
        SampleStatus.PENDING,
        SampleStatus.IN_PROGRESS,
        SampleStatus.COMPLETED,
    ),
    SampleOrigin.INSPECTION: (
        SampleStatus.INSPECTION_PENDING,
        SampleStatus.INSPECTION_COMPLETED,
    ),
}


def origin_for_status(status: SampleStatus) -> SampleOrigin:
    for origin, path in SAMPLE_PATHS.items():
        if status in path:
            return origin
    raise ValueError(f"Unknown sample status: {status}")


class Measurement(FrozenModel):
    """One reading for one parameter.

    Exactly one of ``value`` / ``boolean_value`` is set. ``is_ok`` is the
    verdict at the time the reading was recorded and is never recomputed.
    """
    id: str
    parameter_id: str
    value: float | None = None
    boolean_value: bool | None = None
    timestamp: datetime
    is_ok: bool

    @model_validator(mode="after")
    def _exactly_one_reading(self) -> "Measurement":
        if (self.value is None) == (self.boolean_value is None):
            raise ValueError("measurement needs exactly one of value or boolean_value")
        return self

    @property
    def reading(self) -> float | bool:
        return self.boolean_value if self.value is None else self.value


class Sample(FrozenModel):
    id: str
    part_id: str
    control_plan_id: str
    batch_number: str
    created_at: datetime
    measurements: tuple[Measurement, ...] = ()
    bubbles: tuple[Bubble, ...] = ()
    origin: SampleOrigin
    status: SampleStatus

    @model_validator(mode="before")
    @classmethod
    def _infer_origin(cls, data: Any) -> Any:
        # Seed files may omit the origin; it follows from the status.
        if isinstance(data, dict) and data.get("origin") is None and data.get("status"):
            data = {**data, "origin": origin_for_status(SampleStatus(data["status"]))}
        return data

    @model_validator(mode="after")
    def _status_on_path(self) -> "Sample":
        if self.status not in SAMPLE_PATHS[self.origin]:
            raise ValueError(
                f"status '{self.status.value}' is not valid for a {self.origin.value} sample"
            )
        return self

    @property
    def path(self) -> tuple[SampleStatus, ...]:
        return SAMPLE_PATHS[self.origin]

    @property
    def is_terminal(self) -> bool:
        return self.status == self.path[-1]


class SampleCreate(BaseModel):
    part_id: str
    control_plan_id: str
    batch_number: str


class ReceivingRequest(BaseModel):
    part_code: str
    count: int = 3
    batch_number: str = ""


class MeasurementInput(BaseModel):
    parameter_id: str
    # Validated by the tolerance evaluator so type errors map to InvalidInput.
    value: Any = None


class CompleteSampleRequest(BaseModel):
    """Final readings; when omitted the sample's recorded measurements are kept."""
    measurements: list[MeasurementInput] | None = None


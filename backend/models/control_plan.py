"""Control plan and measurement parameter models."""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, field_validator

from backend.models.common import FrozenModel, LifecycleStatus


class NumericParameter(FrozenModel):
    """A dimension checked against ``nominal`` with asymmetric tolerances."""
    type: Literal["numeric"] = "numeric"
    id: str
    name: str
    nominal: float = 0.0
    tol_plus: float = Field(0.0, ge=0)
    tol_minus: float = Field(0.0, ge=0)
    unit: str = ""

    @field_validator("nominal", "tol_plus", "tol_minus", mode="before")
    @classmethod
    def _absent_means_zero(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    @property
    def lower_limit(self) -> float:
        return self.nominal - self.tol_minus

    @property
    def upper_limit(self) -> float:
        return self.nominal + self.tol_plus


class BooleanParameter(FrozenModel):
    """An attribute check; ``expected_value`` is the state considered OK."""
    type: Literal["boolean"] = "boolean"
    id: str
    name: str
    expected_value: bool


MeasurementParameter = Annotated[
    Union[NumericParameter, BooleanParameter],
    Field(discriminator="type"),
]


class ControlPlan(FrozenModel):
    """Versioned list of parameters to measure on a part.

    Parameter order is the display and evaluation order.
    """
    id: str
    part_id: str
    name: str
    version: int = Field(1, ge=1)
    parameters: tuple[MeasurementParameter, ...] = ()
    status: LifecycleStatus = LifecycleStatus.ACTIVE
    drawing_image_url: str | None = None

    def get_parameter(self, parameter_id: str) -> NumericParameter | BooleanParameter | None:
        for parameter in self.parameters:
            if parameter.id == parameter_id:
                return parameter
        return None


class NumericParameterInput(BaseModel):
    type: Literal["numeric"] = "numeric"
    name: str = Field(..., min_length=1)
    nominal: float = 0.0
    tol_plus: float = Field(0.0, ge=0)
    tol_minus: float = Field(0.0, ge=0)
    unit: str = ""


class BooleanParameterInput(BaseModel):
    type: Literal["boolean"] = "boolean"
    name: str = Field(..., min_length=1)
    expected_value: bool


ParameterInput = Annotated[
    Union[NumericParameterInput, BooleanParameterInput],
    Field(discriminator="type"),
]


class ControlPlanCreate(BaseModel):
    part_id: str
    name: str = Field(..., min_length=1)
    version: int = Field(1, ge=1)
    parameters: list[ParameterInput] = Field(default_factory=list)
    drawing_image_url: str | None = None


class ControlPlanUpdate(BaseModel):
    part_id: str | None = None
    name: str | None = Field(None, min_length=1)
    drawing_image_url: str | None = None

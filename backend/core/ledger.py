"""Measurement ledger for one sample.

Numeric parameters keep a history of readings; a boolean parameter holds a
single current state, so a new reading replaces the previous one.
"""

from collections.abc import Sequence
from datetime import datetime
from enum import Enum

from pydantic import computed_field

from backend.core import logger
from backend.core.errors import NotFound, UnknownParameter
from backend.core.tolerance import evaluate
from backend.models.common import FrozenModel, new_id, utcnow
from backend.models.control_plan import BooleanParameter, ControlPlan
from backend.models.sample import Measurement


class SummaryIndicator(str, Enum):
    """Badge colour for a parameter: green, red or neutral."""

    OK = "ok"
    NOK = "nok"
    NEUTRAL = "neutral"


class ParameterSummary(FrozenModel):
    parameter_id: str
    ok_count: int
    total_count: int

    @computed_field
    @property
    def indicator(self) -> SummaryIndicator:
        if self.total_count == 0:
            return SummaryIndicator.NEUTRAL
        if self.ok_count == self.total_count:
            return SummaryIndicator.OK
        return SummaryIndicator.NOK

    @computed_field
    @property
    def label(self) -> str:
        return f"{self.ok_count} / {self.total_count} OK"


def add_measurement(
    measurements: Sequence[Measurement],
    plan: ControlPlan,
    parameter_id: str,
    raw_value: object,
    *,
    timestamp: datetime | None = None,
) -> tuple[Measurement, ...]:
    """Evaluate ``raw_value`` and return the new measurement sequence.

    The new reading is always the last element of the result.
    """
    parameter = plan.get_parameter(parameter_id)
    if parameter is None:
        raise UnknownParameter(
            f"Parameter '{parameter_id}' is not part of control plan '{plan.name}' (v{plan.version})"
        )

    is_ok = evaluate(parameter, raw_value)
    reading = (
        {"boolean_value": raw_value}
        if isinstance(parameter, BooleanParameter)
        else {"value": float(raw_value)}
    )
    measurement = Measurement(
        id=new_id("M-"),
        parameter_id=parameter_id,
        timestamp=timestamp or utcnow(),
        is_ok=is_ok,
        **reading,
    )
    logger.debug(
        "Recorded %s for %s (%s): %s",
        measurement.reading,
        parameter.name,
        parameter_id,
        "OK" if is_ok else "NOK",
    )

    if isinstance(parameter, BooleanParameter):
        kept = [m for m in measurements if m.parameter_id != parameter_id]
        return (*kept, measurement)
    return (*measurements, measurement)


def delete_measurement(
    measurements: Sequence[Measurement],
    measurement_id: str,
    *,
    strict: bool = False,
) -> tuple[Measurement, ...]:
    """Drop one measurement. Remaining verdicts are left untouched."""
    remaining = tuple(m for m in measurements if m.id != measurement_id)
    if strict and len(remaining) == len(measurements):
        raise NotFound(f"Measurement '{measurement_id}' not found")
    return remaining


def summarize(measurements: Sequence[Measurement], parameter_id: str) -> ParameterSummary:
    readings = [m for m in measurements if m.parameter_id == parameter_id]
    return ParameterSummary(
        parameter_id=parameter_id,
        ok_count=sum(1 for m in readings if m.is_ok),
        total_count=len(readings),
    )


def summarize_all(measurements: Sequence[Measurement], plan: ControlPlan) -> list[ParameterSummary]:
    """One summary per plan parameter, in plan order."""
    return [summarize(measurements, parameter.id) for parameter in plan.parameters]

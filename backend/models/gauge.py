"""Inspection gauge models."""

from datetime import date
from enum import Enum

from pydantic import BaseModel, Field

from backend.models.common import FrozenModel


class GaugeStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    DUE_FOR_CALIBRATION = "Due for Calibration"


class Gauge(FrozenModel):
    """A measuring instrument. Informational only; samples do not reference gauges."""
    id: str
    name: str
    type: str = ""
    serial_number: str = ""
    last_calibration: date | None = None
    next_calibration: date | None = None
    status: GaugeStatus = GaugeStatus.ACTIVE


class GaugeCreate(BaseModel):
    name: str = Field(..., min_length=1)
    type: str = ""
    serial_number: str = ""
    last_calibration: date | None = None
    next_calibration: date | None = None
    status: GaugeStatus = GaugeStatus.ACTIVE


class GaugeUpdate(BaseModel):
    name: str | None = Field(None, min_length=1)
    type: str | None = None
    serial_number: str | None = None
    last_calibration: date | None = None
    next_calibration: date | None = None
    status: GaugeStatus | None = None

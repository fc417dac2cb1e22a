"""Shared model primitives: lifecycle status, identifiers and action results."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class LifecycleStatus(str, Enum):
    """Status of a revisioned catalog record (Part or Control Plan)."""

    ACTIVE = "Active"
    ARCHIVED = "Archived"


class FrozenModel(BaseModel):
    """Immutable record. Changes go through ``model_copy(update=...)``."""

    model_config = ConfigDict(frozen=True)


class ActionResult(BaseModel, Generic[T]):
    """Outcome of a state-changing action, with text for the operator."""

    ok: bool = True
    message: str
    data: T


def new_id(prefix: str) -> str:
    """Return a fresh identifier such as ``P3F9A0C21B7``."""
    return f"{prefix}{uuid.uuid4().hex[:10].upper()}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)

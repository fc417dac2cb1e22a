"""Part catalog models used by the API."""

from pydantic import BaseModel, Field

from backend.models.common import FrozenModel, LifecycleStatus


class Part(FrozenModel):
    """A catalogued part at one revision.

    Revisions of the same part share ``part_code``; at most one of them is
    expected to be Active.
    """
    id: str
    part_code: str
    name: str
    drawing_number: str = ""
    material: str = ""
    image_url: str = ""
    revision: int = Field(1, ge=1)
    status: LifecycleStatus = LifecycleStatus.ACTIVE


class PartCreate(BaseModel):
    part_code: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    drawing_number: str = ""
    material: str = ""
    image_url: str = ""


class PartUpdate(BaseModel):
    part_code: str | None = Field(None, min_length=1)
    name: str | None = Field(None, min_length=1)
    drawing_number: str | None = None
    material: str | None = None
    image_url: str | None = None

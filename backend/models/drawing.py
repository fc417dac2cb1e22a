"""Drawing annotation bubbles.

Positions are percentages of the drawing's width and height, measured from
the top-left corner.
"""

from pydantic import BaseModel, Field

from backend.models.common import FrozenModel


class Bubble(FrozenModel):
    """Numbered marker linking a spot on the drawing to one parameter."""
    number: int = Field(..., ge=1)
    parameter_id: str
    x: float = Field(..., ge=0, le=100)
    y: float = Field(..., ge=0, le=100)


class BubblePlacement(BaseModel):
    parameter_id: str
    # Validated by the annotation rules so bad values map to InvalidInput.
    x: float
    y: float

"""Bubble placement on a sample's drawing.

A parameter has at most one bubble. Placing it again moves the existing
bubble and keeps its number.
"""

import math
from collections.abc import Sequence

from backend.core import logger
from backend.core.errors import InvalidInput, UnknownParameter
from backend.models.control_plan import ControlPlan
from backend.models.drawing import Bubble


def place_bubble(
    bubbles: Sequence[Bubble],
    plan: ControlPlan,
    parameter_id: str,
    x: float,
    y: float,
) -> tuple[Bubble, ...]:
    """Place or move the bubble for ``parameter_id``.

    Coordinates outside the drawing are clamped to its edges.
    """
    parameter = plan.get_parameter(parameter_id)
    if parameter is None:
        raise UnknownParameter(
            f"Parameter '{parameter_id}' is not part of control plan '{plan.name}' (v{plan.version})"
        )
    if not (math.isfinite(x) and math.isfinite(y)):
        raise InvalidInput(f"Bubble position must be finite, got ({x!r}, {y!r})")

    position = {"x": _clamp(x), "y": _clamp(y)}
    existing = bubble_for(bubbles, parameter_id)
    if existing is not None:
        moved = existing.model_copy(update=position)
        logger.debug("Moved bubble %s for %s to (%.1f, %.1f)", moved.number, parameter.name, moved.x, moved.y)
        return tuple(moved if b.parameter_id == parameter_id else b for b in bubbles)

    number = max((b.number for b in bubbles), default=0) + 1
    bubble = Bubble(number=number, parameter_id=parameter_id, **position)
    logger.debug("Placed bubble %s for %s at (%.1f, %.1f)", number, parameter.name, bubble.x, bubble.y)
    return (*bubbles, bubble)


def bubble_for(bubbles: Sequence[Bubble], parameter_id: str) -> Bubble | None:
    return next((b for b in bubbles if b.parameter_id == parameter_id), None)


def _clamp(value: float) -> float:
    return min(100.0, max(0.0, float(value)))

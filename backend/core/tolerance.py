"""Pass/fail evaluation of a single reading against its parameter."""

import math
from numbers import Real

from backend.core.errors import InvalidInput
from backend.models.control_plan import BooleanParameter, NumericParameter


def evaluate(parameter: NumericParameter | BooleanParameter, candidate: object) -> bool:
    """Return True when ``candidate`` is OK for ``parameter``.

    Numeric limits are inclusive on both sides. Raises :class:`InvalidInput`
    when the candidate does not match the parameter type.
    """
    if isinstance(parameter, NumericParameter):
        return _evaluate_numeric(parameter, candidate)
    if isinstance(parameter, BooleanParameter):
        return _evaluate_boolean(parameter, candidate)
    raise InvalidInput(f"Unsupported parameter type: {type(parameter).__name__}")


def _evaluate_numeric(parameter: NumericParameter, candidate: object) -> bool:
    # bool is a subclass of int; a checkbox value is never a dimension.
    if isinstance(candidate, bool) or not isinstance(candidate, Real):
        raise InvalidInput(
            f"Parameter '{parameter.name}' expects a number, got {candidate!r}"
        )
    try:
        number = float(candidate)
    except OverflowError:
        number = math.inf
    if not math.isfinite(number):
        raise InvalidInput(
            f"Parameter '{parameter.name}' expects a finite number, got {_short(candidate)}"
        )
    return parameter.lower_limit <= number <= parameter.upper_limit


def _evaluate_boolean(parameter: BooleanParameter, candidate: object) -> bool:
    if not isinstance(candidate, bool):
        raise InvalidInput(
            f"Parameter '{parameter.name}' expects true or false, got {candidate!r}"
        )
    return candidate == parameter.expected_value


def _short(candidate: object) -> str:
    text = repr(candidate)
    return text if len(text) <= 40 else f"{text[:37]}..."

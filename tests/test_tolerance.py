import math

import pytest

from backend.core.errors import InvalidInput
from backend.core.tolerance import evaluate
from backend.models.control_plan import BooleanParameter, NumericParameter


def _diameter(**overrides):
    fields = {"id": "MP001", "name": "Outer Diameter", "nominal": 50.00, "tol_plus": 0.05, "tol_minus": 0.05, "unit": "mm"}
    fields.update(overrides)
    return NumericParameter(**fields)


@pytest.mark.parametrize(
    "value, expected",
    [
        (50.05, True),
        (50.051, False),
        (49.95, True),
        (49.949, False),
        (50.0, True),
    ],
)
def test_numeric_limits_are_inclusive(value, expected):
    assert evaluate(_diameter(), value) is expected


def test_asymmetric_tolerance():
    parameter = _diameter(tol_plus=0.1, tol_minus=0.0)
    assert evaluate(parameter, 50.1)
    assert not evaluate(parameter, 49.999)


def test_missing_tolerances_only_accept_nominal():
    parameter = NumericParameter(id="MP9", name="Pin", nominal=10, tol_plus=None, tol_minus=None)
    assert parameter.tol_plus == 0 and parameter.tol_minus == 0
    assert evaluate(parameter, 10)
    assert not evaluate(parameter, 10.0001)


def test_integers_are_numbers():
    assert evaluate(_diameter(), 50)


@pytest.mark.parametrize("bad", ["50.0", None, True, math.nan, math.inf, -math.inf, 10**400, -(10**400)])
def test_numeric_rejects_non_finite_or_non_numbers(bad):
    with pytest.raises(InvalidInput):
        evaluate(_diameter(), bad)


def test_boolean_no_burrs():
    burrs = BooleanParameter(id="MP007", name="Visual Check: Burrs", expected_value=False)
    assert evaluate(burrs, False) is True
    assert evaluate(burrs, True) is False


def test_boolean_matches_expected_value():
    logo = BooleanParameter(id="MP008", name="Logo Present", expected_value=True)
    for value in (True, False):
        assert evaluate(logo, value) == (value == logo.expected_value)


@pytest.mark.parametrize("bad", [1, 0, "true", None])
def test_boolean_rejects_non_bool(bad):
    logo = BooleanParameter(id="MP008", name="Logo Present", expected_value=True)
    with pytest.raises(InvalidInput):
        evaluate(logo, bad)

import math

import pytest
from pydantic import ValidationError

from backend.core.annotations import bubble_for, place_bubble
from backend.core.errors import InvalidInput, UnknownParameter
from backend.models.drawing import Bubble, BubblePlacement
from backend.models.sample import SampleStatus


def test_first_placement_adds_numbered_bubbles(snapshot):
    plan = snapshot.control_plan("CP01")
    bubbles = place_bubble((), plan, "MP001", 12.5, 40.0)
    bubbles = place_bubble(bubbles, plan, "MP007", 70.0, 10.0)

    assert [(b.number, b.parameter_id) for b in bubbles] == [(1, "MP001"), (2, "MP007")]
    assert (bubbles[0].x, bubbles[0].y) == (12.5, 40.0)


def test_second_placement_moves_the_bubble(snapshot):
    plan = snapshot.control_plan("CP01")
    bubbles = place_bubble((), plan, "MP001", 10.0, 10.0)
    bubbles = place_bubble(bubbles, plan, "MP002", 20.0, 20.0)

    moved = place_bubble(bubbles, plan, "MP001", 55.0, 65.0)

    assert len(moved) == 2
    assert bubble_for(moved, "MP001") == Bubble(number=1, parameter_id="MP001", x=55.0, y=65.0)
    assert bubble_for(moved, "MP002") == bubbles[1]


@pytest.mark.parametrize(
    "x, y, expected",
    [(-5.0, 50.0, (0.0, 50.0)), (100.5, 120.0, (100.0, 100.0)), (0.0, 100.0, (0.0, 100.0))],
)
def test_positions_are_clamped_to_the_drawing(snapshot, x, y, expected):
    bubbles = place_bubble((), snapshot.control_plan("CP01"), "MP003", x, y)
    assert (bubbles[0].x, bubbles[0].y) == expected


def test_bubble_model_rejects_positions_off_the_drawing():
    with pytest.raises(ValidationError):
        Bubble(number=1, parameter_id="MP001", x=101.0, y=50.0)
    with pytest.raises(ValidationError):
        Bubble(number=1, parameter_id="MP001", x=50.0, y=-0.1)


def test_placement_errors(snapshot):
    plan = snapshot.control_plan("CP02")
    with pytest.raises(UnknownParameter):
        place_bubble((), plan, "MP001", 10.0, 10.0)
    with pytest.raises(InvalidInput):
        place_bubble((), plan, "MP003", math.nan, 10.0)


def test_service_keeps_bubbles_on_the_sample(service):
    service.place_bubble("S003", BubblePlacement(parameter_id="MP001", x=30, y=30))
    result = service.place_bubble("S003", BubblePlacement(parameter_id="MP001", x=35, y=40))

    sample = service.get_sample("S003")
    assert result.message == "Bubble 1 has been placed."
    assert [(b.x, b.y) for b in sample.bubbles] == [(35.0, 40.0)]
    # annotating does not touch measurements or status
    assert sample.status is SampleStatus.PENDING
    assert sample.measurements == ()

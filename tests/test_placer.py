"""
Unit tests for EventPlacer.
"""

import pytest

from src.dayplan.errors import EventConflictError, InvalidEventError
from src.dayplan.models import BlockKind, Event, SlotState
from src.dayplan.placer import EventPlacer


def test_places_events_with_default_priority():
    events = [
        Event(name="Team Meeting", start_slot=30, end_slot=32),
        Event(name="Breakfast", start_slot=14, end_slot=15),
    ]

    placed = EventPlacer(default_event_priority=50).place(events)

    assert [(b.name, b.start_slot, b.duration) for b in placed.blocks] == [
        ("Breakfast", 14, 1),
        ("Team Meeting", 30, 2),
    ]
    assert all(b.kind is BlockKind.EVENT for b in placed.blocks)
    assert all(b.priority == 50 for b in placed.blocks)
    assert placed.blocks[1].completion_slot == 32
    assert placed.snapshot[14] is SlotState.EVENT
    assert placed.snapshot[31] is SlotState.EVENT
    assert placed.snapshot[32] is SlotState.FREE


def test_default_priority_is_configurable():
    placed = EventPlacer(default_event_priority=70).place(
        [Event(name="Lunch", start_slot=24, end_slot=26)]
    )

    assert placed.blocks[0].priority == 70


def test_conflict_names_later_event_and_first_slot():
    events = [
        Event(name="Gym", start_slot=16, end_slot=20),
        Event(name="Call", start_slot=18, end_slot=22),
    ]

    with pytest.raises(EventConflictError) as exc_info:
        EventPlacer().place(events)

    assert exc_info.value.event_name == "Call"
    assert exc_info.value.slot == 18


def test_same_start_conflict_reports_second_in_insertion_order():
    events = [
        Event(name="First", start_slot=10, end_slot=12),
        Event(name="Second", start_slot=10, end_slot=11),
    ]

    with pytest.raises(EventConflictError) as exc_info:
        EventPlacer().place(events)

    assert exc_info.value.event_name == "Second"
    assert exc_info.value.slot == 10


@pytest.mark.parametrize(
    "start,end",
    [(-1, 2), (40, 49), (12, 12), (12, 10)],
)
def test_out_of_day_bounds_raise_invalid_event(start, end):
    event = Event(name="Broken", start_slot=start, end_slot=end)

    with pytest.raises(InvalidEventError) as exc_info:
        EventPlacer().place([event])

    assert exc_info.value.event_name == "Broken"


def test_non_integer_bounds_raise_invalid_event():
    # model_copy skips validation, the same way a mutated roster entry would
    event = Event(name="Half", start_slot=3, end_slot=5).model_copy(
        update={"end_slot": 4.5}
    )

    with pytest.raises(InvalidEventError, match="integers"):
        EventPlacer().place([event])


def test_fail_fast_on_first_invalid_event():
    events = [
        Event(name="Early bad", start_slot=2, end_slot=1),
        Event(name="Late bad", start_slot=40, end_slot=50),
    ]

    with pytest.raises(InvalidEventError) as exc_info:
        EventPlacer().place(events)

    assert exc_info.value.event_name == "Early bad"


def test_touching_events_do_not_conflict():
    placed = EventPlacer().place(
        [
            Event(name="A", start_slot=0, end_slot=2),
            Event(name="B", start_slot=2, end_slot=48),
        ]
    )

    assert placed.snapshot.is_range_free(0, 48) is False
    assert len(placed.blocks) == 2

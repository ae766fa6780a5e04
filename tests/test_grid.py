"""
Unit tests for SlotGrid and GridSnapshot.
"""

import pytest

from src.dayplan.errors import BoundsError, ConflictError
from src.dayplan.grid import SlotGrid
from src.dayplan.models import SlotState


def test_new_grid_is_all_free():
    grid = SlotGrid()

    assert len(grid) == 48
    assert grid.is_range_free(0, 48)
    assert grid.free_slot_count() == 48


def test_mark_range_is_half_open():
    grid = SlotGrid()
    grid.mark_range(14, 16, SlotState.EVENT)

    assert grid[13] is SlotState.FREE
    assert grid[14] is SlotState.EVENT
    assert grid[15] is SlotState.EVENT
    assert grid[16] is SlotState.FREE
    assert grid.is_range_free(16, 20)


def test_mark_range_conflict_reports_first_occupied_slot_and_marks_nothing():
    grid = SlotGrid()
    grid.mark_range(20, 22, SlotState.EVENT)

    with pytest.raises(ConflictError) as exc_info:
        grid.mark_range(18, 24, SlotState.TASK)

    assert exc_info.value.slot == 20
    assert grid.is_range_free(18, 20)
    assert grid[22] is SlotState.FREE


@pytest.mark.parametrize("start,end", [(-1, 2), (40, 49), (5, 5), (6, 3)])
def test_bad_ranges_raise_bounds_error(start, end):
    grid = SlotGrid()

    with pytest.raises(BoundsError):
        grid.mark_range(start, end, SlotState.EVENT)
    with pytest.raises(BoundsError):
        grid.is_range_free(start, end)


def test_mark_range_rejects_free_state():
    with pytest.raises(ValueError):
        SlotGrid().mark_range(0, 1, SlotState.FREE)


def test_snapshot_does_not_alias_grid():
    grid = SlotGrid()
    grid.mark_range(0, 2, SlotState.EVENT)
    snapshot = grid.snapshot()

    grid.mark_range(10, 12, SlotState.TASK)

    assert snapshot.is_range_free(10, 12)
    assert snapshot.first_conflict(0, 5) == 0


def test_thawed_snapshot_is_independent():
    grid = SlotGrid()
    snapshot = grid.snapshot()

    thawed = snapshot.thaw()
    thawed.mark_range(3, 4, SlotState.TASK)

    assert snapshot.is_range_free(3, 4)
    assert grid.is_range_free(3, 4)
    assert thawed.first_conflict(0, 10) == 3

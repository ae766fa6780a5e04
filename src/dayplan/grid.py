"""Half-hour occupancy grid for a single day.

SlotGrid owns conflict detection. Ranges are half-open [start, end). Callers
are expected to bounds-check first; the grid still raises BoundsError on a
bad range rather than silently clamping.
"""

from typing import Iterable, Optional, Sequence

from src.dayplan.errors import BoundsError, ConflictError
from src.dayplan.models import SlotState
from src.dayplan.utils import SLOTS_PER_DAY


def _check_range(start: int, end: int) -> None:
    if start < 0 or end > SLOTS_PER_DAY or end <= start:
        raise BoundsError(start, end)


def _first_conflict(states: Sequence[SlotState], start: int, end: int) -> Optional[int]:
    for slot in range(start, end):
        if states[slot] is not SlotState.FREE:
            return slot
    return None


class GridSnapshot:
    """Immutable copy of a SlotGrid, safe to hand to validators."""

    __slots__ = ("_states",)

    def __init__(self, states: Iterable[SlotState]) -> None:
        self._states = tuple(states)

    def __len__(self) -> int:
        return len(self._states)

    def __getitem__(self, slot: int) -> SlotState:
        return self._states[slot]

    def is_range_free(self, start: int, end: int) -> bool:
        _check_range(start, end)
        return _first_conflict(self._states, start, end) is None

    def first_conflict(self, start: int, end: int) -> Optional[int]:
        _check_range(start, end)
        return _first_conflict(self._states, start, end)

    def thaw(self) -> "SlotGrid":
        """Return an independent mutable grid with the same occupancy."""
        return SlotGrid(self._states)


class SlotGrid:
    """Mutable 48-slot occupancy array over FREE / EVENT / TASK."""

    def __init__(self, states: Optional[Iterable[SlotState]] = None) -> None:
        if states is None:
            self._states = [SlotState.FREE] * SLOTS_PER_DAY
        else:
            self._states = list(states)
        if len(self._states) != SLOTS_PER_DAY:
            raise ValueError(
                f"SlotGrid needs {SLOTS_PER_DAY} slots, got {len(self._states)}"
            )

    def __len__(self) -> int:
        return len(self._states)

    def __getitem__(self, slot: int) -> SlotState:
        return self._states[slot]

    def is_range_free(self, start: int, end: int) -> bool:
        _check_range(start, end)
        return _first_conflict(self._states, start, end) is None

    def first_conflict(self, start: int, end: int) -> Optional[int]:
        """Return the first non-free slot in [start, end), or None."""
        _check_range(start, end)
        return _first_conflict(self._states, start, end)

    def mark_range(self, start: int, end: int, state: SlotState) -> None:
        """Occupy [start, end) with `state`.

        Raises:
            BoundsError: If the range is empty or leaves the day.
            ConflictError: If any slot in the range is not FREE. Nothing is
                marked in that case.
        """
        if state is SlotState.FREE:
            raise ValueError("mark_range needs an occupied state")
        _check_range(start, end)
        slot = _first_conflict(self._states, start, end)
        if slot is not None:
            raise ConflictError(slot, self._states[slot].value)
        for index in range(start, end):
            self._states[index] = state

    def free_slot_count(self) -> int:
        return sum(1 for state in self._states if state is SlotState.FREE)

    def snapshot(self) -> GridSnapshot:
        return GridSnapshot(self._states)

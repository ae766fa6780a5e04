"""EventPlacer - stamps caller events onto a fresh SlotGrid.

Events are caller-controlled, so any problem here is a caller bug: the first
invalid or overlapping event stops placement immediately.
"""

from dataclasses import dataclass
from typing import Iterable

from src.dayplan.errors import ConflictError, EventConflictError, InvalidEventError
from src.dayplan.grid import GridSnapshot, SlotGrid
from src.dayplan.logging import get_logger
from src.dayplan.models import BlockKind, Event, ScheduledBlock, SlotState
from src.dayplan.utils import SLOTS_PER_DAY, is_strict_int

log = get_logger(__name__)


@dataclass(frozen=True)
class PlacedEvents:
    """Fixed event blocks plus the occupancy they leave behind."""

    blocks: tuple[ScheduledBlock, ...]
    snapshot: GridSnapshot


class EventPlacer:
    """Deterministic placement of immovable events."""

    def __init__(self, default_event_priority: int = 50) -> None:
        self.default_event_priority = default_event_priority

    def place(self, events: Iterable[Event]) -> PlacedEvents:
        """Place every event on a fresh grid.

        Events are visited in start order (stable, so ties keep insertion
        order). That order only decides which name a same-slot conflict
        reports.

        Raises:
            InvalidEventError: First event with non-integer or out-of-day bounds.
            EventConflictError: First event overlapping an earlier one.
        """
        grid = SlotGrid()
        blocks: list[ScheduledBlock] = []

        for event in sorted(events, key=lambda e: e.start_slot):
            self._validate(event)
            try:
                grid.mark_range(event.start_slot, event.end_slot, SlotState.EVENT)
            except ConflictError as e:
                log.error(
                    "event_conflict",
                    event_name=event.name,
                    conflict_slot=e.slot,
                )
                raise EventConflictError(event.name, e.slot) from e

            blocks.append(
                ScheduledBlock(
                    name=event.name,
                    start_slot=event.start_slot,
                    duration=event.end_slot - event.start_slot,
                    kind=BlockKind.EVENT,
                    priority=self.default_event_priority,
                )
            )

        log.debug(
            "events_placed",
            count=len(blocks),
            free_slots=grid.free_slot_count(),
        )
        return PlacedEvents(blocks=tuple(blocks), snapshot=grid.snapshot())

    @staticmethod
    def _validate(event: Event) -> None:
        start, end = event.start_slot, event.end_slot
        if not is_strict_int(start) or not is_strict_int(end):
            raise InvalidEventError(event.name, "time bounds must be integers")
        if start < 0:
            raise InvalidEventError(event.name, f"start slot {start} is negative")
        if end > SLOTS_PER_DAY:
            raise InvalidEventError(
                event.name, f"end slot {end} is past slot {SLOTS_PER_DAY}"
            )
        if end <= start:
            raise InvalidEventError(
                event.name, f"end slot {end} is not after start slot {start}"
            )

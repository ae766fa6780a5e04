"""ScheduleGenerator - the public entry point for one schedule owner.

Holds the roster and a sequence counter, and allows a single generation in
flight at a time. Roster mutations take the same lock, so they never
interleave with a running generation on the same instance.
"""

import threading
from datetime import datetime
from typing import Optional
from uuid import UUID

import structlog

from src.dayplan.assembler import ScheduleAssembler
from src.dayplan.config import PlannerConfig, get_config
from src.dayplan.logging import get_logger
from src.dayplan.models import Event, ScheduleResult, Task
from src.dayplan.proposal import Proposer
from src.dayplan.roster import Roster

log = get_logger(__name__)


class ScheduleGenerator:
    """Roster management plus `generate_schedule`.

    Example:
        generator = ScheduleGenerator()
        generator.add_event("Breakfast", 14, 15)
        generator.add_task("Math Homework", deadline, 6, 80)
        result = generator.generate_schedule(GeminiProposer.from_config())
    """

    def __init__(
        self,
        config: Optional[PlannerConfig] = None,
        assembler: Optional[ScheduleAssembler] = None,
    ) -> None:
        self.config = config or get_config()
        self.roster = Roster()
        self.assembler = assembler or ScheduleAssembler.from_config(self.config)
        self._lock = threading.RLock()
        self._sequence_number = 0

    @property
    def sequence_number(self) -> int:
        """Number of successful generations so far."""
        return self._sequence_number

    @property
    def events(self) -> list[Event]:
        with self._lock:
            return self.roster.events

    @property
    def tasks(self) -> list[Task]:
        with self._lock:
            return self.roster.tasks

    def add_event(
        self,
        name: str,
        start_slot: int,
        end_slot: int,
        repeat_marker: Optional[str] = None,
    ) -> UUID:
        with self._lock:
            return self.roster.add_event(name, start_slot, end_slot, repeat_marker)

    def edit_event(
        self,
        handle: UUID,
        name: str,
        start_slot: int,
        end_slot: int,
        repeat_marker: Optional[str] = None,
    ) -> None:
        with self._lock:
            self.roster.edit_event(handle, name, start_slot, end_slot, repeat_marker)

    def delete_event(self, handle: UUID) -> None:
        with self._lock:
            self.roster.delete_event(handle)

    def add_task(
        self,
        name: str,
        deadline: datetime,
        expected_completion_slots: int,
        priority: int,
    ) -> UUID:
        with self._lock:
            return self.roster.add_task(
                name, deadline, expected_completion_slots, priority
            )

    def edit_task(
        self,
        handle: UUID,
        name: str,
        deadline: datetime,
        expected_completion_slots: int,
        completion_level: int,
        priority: int,
    ) -> None:
        with self._lock:
            self.roster.edit_task(
                handle,
                name,
                deadline,
                expected_completion_slots,
                completion_level,
                priority,
            )

    def delete_task(self, handle: UUID) -> None:
        with self._lock:
            self.roster.delete_task(handle)

    def generate_schedule(self, proposer: Proposer) -> ScheduleResult:
        """Generate a fresh schedule from the current roster.

        Raises:
            InvalidEventError, EventConflictError: Caller events are bad.
            ScheduleGenerationFailed: Proposals kept failing or timed out.
        """
        with self._lock:
            events = self.roster.events
            tasks = self.roster.tasks
            with structlog.contextvars.bound_contextvars(
                generation=self._sequence_number + 1
            ):
                log.info("schedule_generation_started", events=len(events), tasks=len(tasks))
                blocks = self.assembler.assemble(events, tasks, proposer)
                self._sequence_number += 1
                log.info("schedule_generation_finished", blocks=len(blocks))
            return ScheduleResult(
                sequence_number=self._sequence_number, blocks=tuple(blocks)
            )

"""Handle-keyed store of the caller's events and tasks.

Every add issues an opaque UUID handle. Edits replace the entry in place, so
roster order (which breaks event-placement ties) survives an edit. Two
entries may share a name; only handles identify them.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import ValidationError

from src.dayplan.errors import InvalidEventError, InvalidTaskError, UnknownHandleError
from src.dayplan.logging import get_logger
from src.dayplan.models import Event, Task

log = get_logger(__name__)


class Roster:
    """Ordered event and task collections for one schedule owner."""

    def __init__(self) -> None:
        self._events: dict[UUID, Event] = {}
        self._tasks: dict[UUID, Task] = {}

    @property
    def events(self) -> list[Event]:
        return list(self._events.values())

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks.values())

    def get_event(self, handle: UUID) -> Event:
        try:
            return self._events[handle]
        except KeyError:
            raise UnknownHandleError(f"Event {handle} not found in schedule") from None

    def get_task(self, handle: UUID) -> Task:
        try:
            return self._tasks[handle]
        except KeyError:
            raise UnknownHandleError(f"Task {handle} not found in schedule") from None

    # Events

    def add_event(
        self,
        name: str,
        start_slot: int,
        end_slot: int,
        repeat_marker: Optional[str] = None,
    ) -> UUID:
        event = self._build_event(name, start_slot, end_slot, repeat_marker)
        handle = uuid4()
        self._events[handle] = event
        log.debug("event_added", handle=str(handle), event_name=name, start_slot=start_slot)
        return handle

    def edit_event(
        self,
        handle: UUID,
        name: str,
        start_slot: int,
        end_slot: int,
        repeat_marker: Optional[str] = None,
    ) -> None:
        self.get_event(handle)
        self._events[handle] = self._build_event(name, start_slot, end_slot, repeat_marker)
        log.debug("event_edited", handle=str(handle), event_name=name)

    def delete_event(self, handle: UUID) -> None:
        self.get_event(handle)
        del self._events[handle]
        log.debug("event_deleted", handle=str(handle))

    # Tasks

    def add_task(
        self,
        name: str,
        deadline: datetime,
        expected_completion_slots: int,
        priority: int,
    ) -> UUID:
        task = self._build_task(
            name=name,
            deadline=deadline,
            expected_completion_slots=expected_completion_slots,
            completion_level=0,
            priority=priority,
        )
        handle = uuid4()
        self._tasks[handle] = task
        log.debug("task_added", handle=str(handle), task=name)
        return handle

    def edit_task(
        self,
        handle: UUID,
        name: str,
        deadline: datetime,
        expected_completion_slots: int,
        completion_level: int,
        priority: int,
    ) -> None:
        self.get_task(handle)
        self._tasks[handle] = self._build_task(
            name=name,
            deadline=deadline,
            expected_completion_slots=expected_completion_slots,
            completion_level=completion_level,
            priority=priority,
        )
        log.debug("task_edited", handle=str(handle), task=name)

    def delete_task(self, handle: UUID) -> None:
        self.get_task(handle)
        del self._tasks[handle]
        log.debug("task_deleted", handle=str(handle))

    @staticmethod
    def _build_event(
        name: str, start_slot: int, end_slot: int, repeat_marker: Optional[str]
    ) -> Event:
        try:
            return Event(
                name=name,
                start_slot=start_slot,
                end_slot=end_slot,
                repeat_marker=repeat_marker,
            )
        except ValidationError as e:
            raise InvalidEventError(str(name), str(e)) from e

    @staticmethod
    def _build_task(**fields) -> Task:
        try:
            return Task(**fields)
        except ValidationError as e:
            raise InvalidTaskError(
                f"Task {fields.get('name')} is invalid: {e}", details=e.errors()
            ) from e

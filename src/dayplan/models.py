"""Pydantic models for day planning data.

All data structures use Pydantic v2 for validation, serialization, and type safety.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, computed_field
from pydantic.alias_generators import to_camel


class SlotState(str, Enum):
    """Occupancy state of a single half-hour slot."""

    FREE = "free"
    EVENT = "event"
    TASK = "task"


class BlockKind(str, Enum):
    """What produced a scheduled block."""

    EVENT = "event"
    TASK = "task"


class Event(BaseModel):
    """An immovable event pinned to the caller's slot range.

    Bounds (0 <= start_slot < end_slot <= 48) are checked when the event is
    placed, not here, so a roster can hold an event that later fails generation.
    """

    name: str = Field(min_length=1)
    start_slot: StrictInt
    end_slot: StrictInt  # exclusive
    repeat_marker: Optional[str] = None  # opaque, stored only


class Task(BaseModel):
    """A flexible piece of work the proposer places into free slots."""

    name: str
    deadline: datetime
    expected_completion_slots: StrictInt = Field(ge=1)
    completion_level: int = Field(default=0, ge=0, le=100)  # percent
    priority: int = Field(ge=0, le=100)  # percent

    @property
    def deadline_epoch_millis(self) -> int:
        return int(self.deadline.timestamp() * 1000)


class ScheduledBlock(BaseModel):
    """One contiguous run of slots in a generated schedule.

    Derived and ephemeral: rebuilt on every generation.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    start_slot: int = Field(ge=0)
    duration: int = Field(ge=1)
    kind: BlockKind
    priority: int

    @computed_field  # type: ignore[prop-decorator]
    @property
    def completion_slot(self) -> int:
        return self.start_slot + self.duration

    @property
    def slots(self) -> range:
        return range(self.start_slot, self.completion_slot)


class ScheduleResult(BaseModel):
    """Outcome of one successful generation, blocks ordered by priority descending."""

    model_config = ConfigDict(frozen=True)

    sequence_number: int
    blocks: tuple[ScheduledBlock, ...]


class AssignmentIssue(BaseModel):
    """Why a single proposed assignment was rejected."""

    model_config = ConfigDict(frozen=True)

    index: int  # position in the proposer's assignments list
    code: str  # not_an_object, missing_task, non_integer, start_out_of_range, ...
    message: str
    task: Optional[str] = None
    slot: Optional[int] = None


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


class FixedEventRange(_CamelModel):
    name: str
    start_slot: int
    end_slot: int


class TaskSpec(_CamelModel):
    name: str
    expected_completion_slots: int
    priority: int
    deadline_epoch_millis: int


class ProposalRequest(_CamelModel):
    """What the proposer sees: fixed event ranges and the task roster."""

    fixed_events: tuple[FixedEventRange, ...] = ()
    tasks: tuple[TaskSpec, ...] = ()

    def to_payload(self) -> dict:
        """Serialize with the camelCase keys proposers expect."""
        return self.model_dump(mode="json", by_alias=True)

"""AssignmentValidator - turns untrusted proposer assignments into task blocks.

Candidates are checked in the order the proposer listed them against a running
occupancy view: the fixed-event snapshot plus every candidate accepted earlier
in the same pass. Order matters and is never re-sorted.

Per candidate, the first failing rule records an AssignmentIssue and the
candidate is skipped:

1. structure  - an object with a non-empty "task" string and integer
                "startTime" / "duration"
2. bounds     - 0 <= startTime <= 47, duration >= 1, startTime + duration <= 48
3. existence  - "task" names at least one roster task
4. overlap    - the whole proposed range is free in the running view

Quota is recovered locally, never reported: a task name whose remaining
capacity is used up drops the candidate, and an oversized candidate is
clipped to what remains. Only the clipped slots are reserved.

Same-name tasks share one quota and one priority, both taken from the first
roster entry with that name.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

from src.dayplan.errors import InvalidAssignmentsError
from src.dayplan.grid import GridSnapshot
from src.dayplan.logging import get_logger
from src.dayplan.models import (
    AssignmentIssue,
    BlockKind,
    ScheduledBlock,
    SlotState,
    Task,
)
from src.dayplan.utils import SLOTS_PER_DAY, is_strict_int

log = get_logger(__name__)


@dataclass(frozen=True)
class _Candidate:
    task: str
    start_slot: int
    duration: int


def _as_int(value: Any) -> Optional[int]:
    """Coerce a JSON number to int when it is integral; None otherwise."""
    if is_strict_int(value):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


class AssignmentValidator:
    """Filters, clips and accepts proposed task assignments."""

    def __init__(self, default_event_priority: int = 50) -> None:
        self.default_event_priority = default_event_priority

    def validate(
        self,
        snapshot: GridSnapshot,
        tasks: Sequence[Task],
        assignments: Iterable[Any],
    ) -> list[ScheduledBlock]:
        """Validate one proposal.

        Args:
            snapshot: Occupancy after fixed events were placed.
            tasks: Full task roster, in roster order.
            assignments: Raw entries from the proposer's "assignments" list.

        Returns:
            Accepted task blocks in proposer order (possibly clipped).

        Raises:
            InvalidAssignmentsError: If any candidate broke rules 1-4. Carries
                every issue found, not just the first.
        """
        roster: dict[str, list[Task]] = {}
        for task in tasks:
            roster.setdefault(task.name, []).append(task)

        running = snapshot.thaw()
        scheduled_so_far: dict[str, int] = {}
        issues: list[AssignmentIssue] = []
        accepted: list[_Candidate] = []

        for index, entry in enumerate(assignments):
            candidate = self._check_candidate(index, entry, issues)
            if candidate is None:
                continue

            if candidate.task not in roster:
                issues.append(
                    AssignmentIssue(
                        index=index,
                        code="unknown_task",
                        task=candidate.task,
                        message=f"Unknown task {candidate.task}",
                    )
                )
                continue

            end = candidate.start_slot + candidate.duration
            conflict = running.first_conflict(candidate.start_slot, end)
            if conflict is not None:
                issues.append(
                    AssignmentIssue(
                        index=index,
                        code="overlap",
                        task=candidate.task,
                        slot=conflict,
                        message=(
                            f"Block for {candidate.task} overlaps an occupied "
                            f"slot at {conflict}"
                        ),
                    )
                )
                continue

            expected = roster[candidate.task][0].expected_completion_slots
            used = scheduled_so_far.get(candidate.task, 0)
            remaining = max(0, expected - used)
            if remaining <= 0:
                log.debug(
                    "assignment_dropped",
                    task=candidate.task,
                    start_slot=candidate.start_slot,
                    reason="quota_exhausted",
                )
                continue

            place = min(remaining, candidate.duration)
            if place < candidate.duration:
                log.info(
                    "assignment_clipped",
                    task=candidate.task,
                    start_slot=candidate.start_slot,
                    proposed=candidate.duration,
                    accepted=place,
                )

            running.mark_range(
                candidate.start_slot, candidate.start_slot + place, SlotState.TASK
            )
            scheduled_so_far[candidate.task] = used + place
            accepted.append(_Candidate(candidate.task, candidate.start_slot, place))

        if issues:
            log.warning(
                "assignments_rejected",
                issues=len(issues),
                first_issue=issues[0].message,
            )
            raise InvalidAssignmentsError(issues)

        return [self._to_block(c, roster) for c in accepted]

    @staticmethod
    def _check_candidate(
        index: int, entry: Any, issues: list[AssignmentIssue]
    ) -> Optional[_Candidate]:
        """Apply structure and bounds rules; append an issue and return None on failure."""

        def reject(code: str, message: str, task: Optional[str] = None) -> None:
            issues.append(
                AssignmentIssue(index=index, code=code, task=task, message=message)
            )

        if not isinstance(entry, dict):
            reject("not_an_object", "Non-object assignment entry")
            return None

        task = entry.get("task")
        if not isinstance(task, str) or task.strip() == "":
            reject("missing_task", "Assignment missing task name")
            return None

        start = _as_int(entry.get("startTime"))
        duration = _as_int(entry.get("duration"))
        if start is None or duration is None:
            reject("non_integer", f"Assignment for {task} has non-integer times", task)
            return None

        if start < 0 or start > SLOTS_PER_DAY - 1:
            reject("start_out_of_range", f"Start out of range for {task}", task)
            return None
        if duration <= 0:
            reject("non_positive_duration", f"Non-positive duration for {task}", task)
            return None
        if start + duration > SLOTS_PER_DAY:
            reject("exceeds_day", f"Block exceeds day for {task}", task)
            return None

        return _Candidate(task=task, start_slot=start, duration=duration)

    def _to_block(
        self, candidate: _Candidate, roster: dict[str, list[Task]]
    ) -> ScheduledBlock:
        matches = roster.get(candidate.task)
        if matches:
            priority = matches[0].priority
        else:
            # Only reachable if the roster changed mid-pass.
            log.error("roster_consistency_fault", task=candidate.task)
            priority = self.default_event_priority

        return ScheduledBlock(
            name=candidate.task,
            start_slot=candidate.start_slot,
            duration=candidate.duration,
            kind=BlockKind.TASK,
            priority=priority,
        )

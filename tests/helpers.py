"""Test helpers: a scripted proposer and small model factories."""

import json
from datetime import datetime, timedelta, timezone
from itertools import combinations

from src.dayplan.models import ProposalRequest, ScheduledBlock, Task


class ScriptedProposer:
    """Proposer that replays canned responses and records every request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[ProposalRequest] = []

    def __call__(self, request: ProposalRequest) -> str:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError("proposer called more often than scripted")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        if isinstance(response, (dict, list)):
            return json.dumps(response)
        return response

    @property
    def calls(self) -> int:
        return len(self.requests)


def assignments(*entries: tuple) -> dict:
    """Build a proposer payload from (task, start, duration) tuples."""
    return {
        "assignments": [
            {"task": task, "startTime": start, "duration": duration}
            for task, start, duration in entries
        ]
    }


def make_task(
    name: str,
    expected_completion_slots: int = 4,
    priority: int = 50,
    deadline: datetime | None = None,
) -> Task:
    return Task(
        name=name,
        deadline=deadline or datetime.now(timezone.utc) + timedelta(hours=6),
        expected_completion_slots=expected_completion_slots,
        priority=priority,
    )


def assert_no_overlap(blocks: list[ScheduledBlock]) -> None:
    for a, b in combinations(blocks, 2):
        assert set(a.slots).isdisjoint(b.slots), f"{a} overlaps {b}"


def assert_within_day(blocks: list[ScheduledBlock]) -> None:
    for block in blocks:
        assert 0 <= block.start_slot
        assert block.start_slot + block.duration <= 48

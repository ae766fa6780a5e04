"""Proposal request building and proposer response parsing.

Proposers answer with free text that should contain exactly one JSON object:

    {"assignments": [{"task": "Math Homework", "startTime": 18, "duration": 4}]}

LLM proposers often wrap it in prose or code fences, so parsing is two-stage:
a strict parse of the whole text, then the first top-level brace-balanced
span. The first JSON object wins.
"""

import json
from typing import Any, Iterable, Optional, Protocol

from src.dayplan.errors import MalformedResponseError
from src.dayplan.logging import get_logger
from src.dayplan.models import (
    BlockKind,
    FixedEventRange,
    ProposalRequest,
    ScheduledBlock,
    Task,
    TaskSpec,
)
from src.dayplan.utils import SLOTS_PER_DAY

log = get_logger(__name__)


class Proposer(Protocol):
    """Anything that turns a ProposalRequest into response text."""

    def __call__(self, request: ProposalRequest) -> str: ...


def build_request(
    event_blocks: Iterable[ScheduledBlock], tasks: Iterable[Task]
) -> ProposalRequest:
    """Build the proposer request from placed event blocks and the task roster."""
    fixed = tuple(
        FixedEventRange(
            name=block.name,
            start_slot=block.start_slot,
            end_slot=block.completion_slot,
        )
        for block in event_blocks
        if block.kind is BlockKind.EVENT
    )
    specs = tuple(
        TaskSpec(
            name=task.name,
            expected_completion_slots=task.expected_completion_slots,
            priority=task.priority,
            deadline_epoch_millis=task.deadline_epoch_millis,
        )
        for task in tasks
    )
    return ProposalRequest(fixed_events=fixed, tasks=specs)


def build_prompt(request: ProposalRequest) -> str:
    """Render the instruction text for LLM-backed proposers."""
    payload = request.to_payload()
    fixed_section = json.dumps(payload["fixedEvents"], indent=2)
    tasks_section = json.dumps(payload["tasks"], indent=2)
    last_slot = SLOTS_PER_DAY - 1

    return f"""You are a helpful scheduling assistant. Time is split into {SLOTS_PER_DAY} half-hour slots (0 to {last_slot}).
Fixed events cannot be moved or overlapped. Schedule the tasks into remaining free slots.

Return ONLY valid JSON with this exact structure and keys:
{{
  "assignments": [
    {{ "task": string, "startTime": number, "duration": number }}
  ]
}}

Hard constraints:
- Do not overlap any fixed events listed below (endSlot is exclusive).
- Use only integer slots within 0..{last_slot}.
- duration must be >= 1 and the sum of durations per task should be <= expectedCompletionSlots for that task.
- You may split a task into multiple blocks.
- Prefer scheduling tasks earlier when possible, and consider sooner deadlines and higher priority first.

FIXED_EVENTS:
{fixed_section}

TASKS:
{tasks_section}"""


def _first_balanced_object(text: str) -> Optional[str]:
    """Return the first top-level {...} span, ignoring braces inside strings."""
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None


def _loads(text: str) -> Any:
    # Deeply nested input exhausts the decoder's recursion limit
    try:
        return json.loads(text)
    except RecursionError as e:
        raise ValueError("JSON nested too deeply") from e


def extract_json_object(text: str) -> dict[str, Any]:
    """Extract the first JSON object from proposer text.

    A strict parse wins when it yields an object. Anything else (prose,
    code fences, an array wrapping the object) falls back to the first
    brace-balanced span.

    Raises:
        MalformedResponseError: If no object is found or it does not parse.
    """
    if not isinstance(text, str):
        raise MalformedResponseError(
            f"Proposer returned {type(text).__name__}, expected text"
        )

    try:
        data = _loads(text)
    except ValueError:
        data = None
    if isinstance(data, dict):
        return data

    span = _first_balanced_object(text)
    if span is None:
        if data is not None:
            raise MalformedResponseError(
                f"Proposer JSON root is {type(data).__name__}, expected object", text
            )
        raise MalformedResponseError("No JSON found in proposer response", text)
    try:
        data = _loads(span)
    except ValueError as e:
        raise MalformedResponseError(
            f"Proposer JSON did not parse: {e}", text
        ) from e
    log.debug("proposal_json_extracted", offset=text.find(span), length=len(span))
    return data


def parse_assignments(text: str) -> list[Any]:
    """Return the raw, still untrusted, assignments list from proposer text.

    Raises:
        MalformedResponseError: If the text has no object with an
            "assignments" list.
    """
    data = extract_json_object(text)
    assignments = data.get("assignments")
    if not isinstance(assignments, list):
        raise MalformedResponseError(
            "Invalid proposer response: missing assignments[]", text
        )
    return assignments

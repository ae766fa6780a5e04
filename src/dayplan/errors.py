"""Error hierarchy for schedule generation.

Errors are split into transient failures (a fresh proposal may succeed) and
permanent failures (caller data problems or an exhausted retry budget). The
assembler's tenacity loop retries on TransientError only.

Example usage with tenacity:
    Retrying(retry=retry_if_exception_type(TransientError), stop=stop_after_attempt(2))
"""

from typing import Any, Optional


class PlannerError(Exception):
    """Base exception for all planner errors."""

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


class TransientError(PlannerError):
    """Failure caused by a single proposal that may succeed on retry.

    Examples: unparseable proposer text, invalid assignments, a proposer
    backend returning 503.
    """

    pass


class PermanentError(PlannerError):
    """Failure that won't succeed on retry.

    Examples: malformed or overlapping caller events, unknown roster handles.
    """

    pass


class BoundsError(PermanentError):
    """Slot range outside [0, 48) or empty."""

    def __init__(self, start: int, end: int) -> None:
        super().__init__(
            f"Slot range [{start}, {end}) is out of bounds",
            details={"start": start, "end": end},
        )
        self.start = start
        self.end = end


class ConflictError(PermanentError):
    """Slot range overlaps a slot that is already occupied."""

    def __init__(self, slot: int, occupant: str) -> None:
        super().__init__(
            f"Slot {slot} is already occupied by {occupant}",
            details={"slot": slot, "occupant": occupant},
        )
        self.slot = slot
        self.occupant = occupant


class InvalidEventError(PermanentError):
    """Caller-supplied event data is malformed."""

    def __init__(self, event_name: str, reason: str) -> None:
        super().__init__(
            f"Event {event_name} is invalid: {reason}",
            details={"event": event_name, "reason": reason},
        )
        self.event_name = event_name


class InvalidTaskError(PermanentError):
    """Caller-supplied task data is malformed."""

    pass


class EventConflictError(PermanentError):
    """Two caller events overlap."""

    def __init__(self, event_name: str, slot: int) -> None:
        super().__init__(
            f"Event {event_name} conflicts with another event at slot {slot}",
            details={"event": event_name, "slot": slot},
        )
        self.event_name = event_name
        self.slot = slot


class UnknownHandleError(PermanentError):
    """Roster handle does not refer to a stored event or task."""

    pass


class ProposalTimeoutError(PermanentError):
    """Proposer did not answer in time.

    Not retried: a timeout ends the generation the same way an exhausted
    retry budget does.
    """

    pass


class MalformedResponseError(TransientError):
    """Proposer text did not contain a JSON object of the expected shape."""

    def __init__(self, message: str, raw_text: str = "") -> None:
        super().__init__(message, details={"raw_text": raw_text})
        self.raw_text = raw_text


class InvalidAssignmentsError(TransientError):
    """Proposed assignments violate structural, bounds, existence or overlap rules.

    Carries every issue found in one proposal, in proposer order.
    """

    def __init__(self, issues: list) -> None:
        descriptions = [issue.message for issue in issues]
        super().__init__(
            "Proposer provided invalid assignments:\n- " + "\n- ".join(descriptions),
            details={"issues": descriptions},
        )
        self.issues = list(issues)

    @property
    def descriptions(self) -> list[str]:
        return [issue.message for issue in self.issues]


class ProposerRequestError(TransientError):
    """Network or HTTP failure while calling a concrete proposer backend."""

    pass


class ScheduleGenerationFailed(PermanentError):
    """Generation gave up: retry budget exhausted or proposal timed out."""

    def __init__(self, attempts: int, cause: Optional[BaseException]) -> None:
        super().__init__(
            f"Schedule generation failed after {attempts} attempt(s): {cause}",
            details={"attempts": attempts, "cause": repr(cause)},
        )
        self.attempts = attempts
        self.cause = cause

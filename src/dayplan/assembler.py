"""ScheduleAssembler - runs one generation as an explicit state machine.

    IDLE -> EVENTS_PLACED -> AWAITING_PROPOSAL -> VALIDATING -> ASSEMBLED
                                   ^                  |
                                   +---- retry -------+
    any state -> FAILED

Event placement errors are terminal. A PermanentError from the proposer (timeout,
rejected request) ends the generation without retry. MalformedResponseError and
InvalidAssignmentsError consume the retry budget; the proposer is then asked
again with the same request. Proposer calls are strictly sequential.
"""

import contextvars
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from enum import Enum
from typing import Optional, Sequence

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from src.dayplan.config import PlannerConfig
from src.dayplan.errors import (
    PermanentError,
    ProposalTimeoutError,
    ScheduleGenerationFailed,
    TransientError,
)
from src.dayplan.grid import GridSnapshot
from src.dayplan.logging import get_logger
from src.dayplan.merger import BlockMerger
from src.dayplan.models import Event, ProposalRequest, ScheduledBlock, Task
from src.dayplan.placer import EventPlacer
from src.dayplan.proposal import Proposer, build_request, parse_assignments
from src.dayplan.validator import AssignmentValidator

log = get_logger(__name__)


class AssemblerState(str, Enum):
    IDLE = "idle"
    EVENTS_PLACED = "events_placed"
    AWAITING_PROPOSAL = "awaiting_proposal"
    VALIDATING = "validating"
    ASSEMBLED = "assembled"
    FAILED = "failed"


_ALLOWED_TRANSITIONS: dict[AssemblerState, frozenset[AssemblerState]] = {
    AssemblerState.IDLE: frozenset({AssemblerState.EVENTS_PLACED, AssemblerState.FAILED}),
    AssemblerState.EVENTS_PLACED: frozenset({AssemblerState.AWAITING_PROPOSAL}),
    # Self-loop: a transient proposer failure (e.g. HTTP 503) retries before validation.
    AssemblerState.AWAITING_PROPOSAL: frozenset(
        {
            AssemblerState.AWAITING_PROPOSAL,
            AssemblerState.VALIDATING,
            AssemblerState.FAILED,
        }
    ),
    AssemblerState.VALIDATING: frozenset(
        {
            AssemblerState.AWAITING_PROPOSAL,
            AssemblerState.ASSEMBLED,
            AssemblerState.FAILED,
        }
    ),
    AssemblerState.ASSEMBLED: frozenset(),
    AssemblerState.FAILED: frozenset(),
}


class ScheduleAssembler:
    """Orchestrates placement, proposal rounds, validation, merge and ordering."""

    def __init__(
        self,
        placer: EventPlacer,
        validator: AssignmentValidator,
        merger: BlockMerger,
        *,
        max_attempts: int = 2,
        retry_wait_seconds: float = 0.0,
        proposal_timeout_seconds: Optional[float] = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.placer = placer
        self.validator = validator
        self.merger = merger
        self.max_attempts = max_attempts
        self.retry_wait_seconds = retry_wait_seconds
        self.proposal_timeout_seconds = proposal_timeout_seconds
        self.state = AssemblerState.IDLE
        self.history: list[AssemblerState] = [AssemblerState.IDLE]
        self.attempts = 0

    @classmethod
    def from_config(cls, config: PlannerConfig) -> "ScheduleAssembler":
        return cls(
            placer=EventPlacer(config.default_event_priority),
            validator=AssignmentValidator(config.default_event_priority),
            merger=BlockMerger(),
            max_attempts=config.max_proposal_attempts,
            retry_wait_seconds=config.proposal_retry_wait_seconds,
            proposal_timeout_seconds=config.proposal_timeout_seconds,
        )

    def assemble(
        self,
        events: Sequence[Event],
        tasks: Sequence[Task],
        proposer: Proposer,
    ) -> list[ScheduledBlock]:
        """Run one generation and return blocks ordered by priority descending.

        Raises:
            InvalidEventError, EventConflictError: Caller events are bad.
            ScheduleGenerationFailed: Retry budget exhausted, or the proposer timed
                out or rejected the request.
        """
        self._reset()

        try:
            placed = self.placer.place(events)
        except Exception:
            self._transition(AssemblerState.FAILED)
            raise
        self._transition(AssemblerState.EVENTS_PLACED)

        request = build_request(placed.blocks, tasks)
        task_blocks = self._run_proposal_rounds(proposer, request, placed.snapshot, tasks)

        merged = self.merger.merge([*placed.blocks, *task_blocks])
        ordered = sorted(merged, key=lambda b: -b.priority)
        self._transition(AssemblerState.ASSEMBLED)

        log.info(
            "schedule_assembled",
            attempts=self.attempts,
            event_blocks=len(placed.blocks),
            task_blocks=len(task_blocks),
            merged_blocks=len(ordered),
        )
        return ordered

    def _run_proposal_rounds(
        self,
        proposer: Proposer,
        request: ProposalRequest,
        snapshot: GridSnapshot,
        tasks: Sequence[Task],
    ) -> list[ScheduledBlock]:
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.retry_wait_seconds),
            retry=retry_if_exception_type(TransientError),
            after=self._log_rejected_proposal,
        )

        try:
            for attempt in retrying:
                with attempt:
                    self.attempts = attempt.retry_state.attempt_number
                    self._transition(AssemblerState.AWAITING_PROPOSAL)
                    text = self._call_proposer(proposer, request)
                    self._transition(AssemblerState.VALIDATING)
                    assignments = parse_assignments(text)
                    return self.validator.validate(snapshot, tasks, assignments)
        except RetryError as e:
            cause = e.last_attempt.exception()
            self._transition(AssemblerState.FAILED)
            log.error(
                "schedule_generation_failed",
                attempts=self.attempts,
                reason="retry_budget_exhausted",
                error=str(cause),
            )
            raise ScheduleGenerationFailed(self.attempts, cause) from cause
        except PermanentError as e:
            self._transition(AssemblerState.FAILED)
            log.error(
                "schedule_generation_failed",
                attempts=self.attempts,
                reason=(
                    "proposal_timeout"
                    if isinstance(e, ProposalTimeoutError)
                    else "proposer_rejected"
                ),
                error=str(e),
            )
            raise ScheduleGenerationFailed(self.attempts, e) from e
        except Exception:
            self._transition(AssemblerState.FAILED)
            raise

        raise AssertionError("tenacity ended without an outcome")  # pragma: no cover

    def _call_proposer(self, proposer: Proposer, request: ProposalRequest) -> str:
        if self.proposal_timeout_seconds is None:
            return proposer(request)

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="proposer")
        try:
            # Worker threads start with an empty context; carry the bound log keys over
            context = contextvars.copy_context()
            future = executor.submit(context.run, proposer, request)
            try:
                return future.result(timeout=self.proposal_timeout_seconds)
            except FutureTimeoutError:
                raise ProposalTimeoutError(
                    f"Proposer did not answer within {self.proposal_timeout_seconds}s"
                ) from None
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _log_rejected_proposal(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        issues = getattr(error, "issues", None)
        log.warning(
            "proposal_rejected",
            attempt=retry_state.attempt_number,
            max_attempts=self.max_attempts,
            error_type=type(error).__name__,
            issues=[issue.message for issue in issues] if issues else None,
        )

    def _transition(self, new_state: AssemblerState) -> None:
        if new_state not in _ALLOWED_TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Illegal assembler transition {self.state.value} -> {new_state.value}"
            )
        self.state = new_state
        self.history.append(new_state)

    def _reset(self) -> None:
        self.state = AssemblerState.IDLE
        self.history = [AssemblerState.IDLE]
        self.attempts = 0

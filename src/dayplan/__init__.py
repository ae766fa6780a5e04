"""Day planner: fixed events plus proposer-placed tasks on a 48-slot day.

Events are placed deterministically; task assignments come from an external
proposer and are validated, clipped and merged here.
"""

from src.dayplan.errors import (
    EventConflictError,
    InvalidAssignmentsError,
    InvalidEventError,
    MalformedResponseError,
    ScheduleGenerationFailed,
)
from src.dayplan.gemini import GeminiProposer
from src.dayplan.generator import ScheduleGenerator
from src.dayplan.models import BlockKind, ProposalRequest, ScheduledBlock, ScheduleResult

__all__ = [
    "ScheduleGenerator",
    "GeminiProposer",
    "ProposalRequest",
    "ScheduleResult",
    "ScheduledBlock",
    "BlockKind",
    "EventConflictError",
    "InvalidAssignmentsError",
    "InvalidEventError",
    "MalformedResponseError",
    "ScheduleGenerationFailed",
]

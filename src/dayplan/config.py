"""Planner configuration loaded from environment variables."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class PlannerConfig(BaseSettings):
    """Planner configuration loaded from environment variables.

    Settings are loaded from environment variables with sensible defaults.
    For local development, create a .env file in the project root.
    """

    # Scheduling policy
    default_event_priority: int = Field(
        default=50,
        ge=0,
        le=100,
        description="Priority stamped on event blocks (and fallback for task blocks)",
    )
    max_proposal_attempts: int = Field(
        default=2,
        ge=1,
        description="Total proposer calls per generation (1 initial + retries)",
    )
    proposal_retry_wait_seconds: float = Field(
        default=0.0,
        ge=0.0,
        description="Fixed wait between a rejected proposal and the next call",
    )
    proposal_timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0.0,
        description="Upper bound on a single proposer call (None = unbounded)",
    )

    # Gemini proposer
    gemini_api_key: str = Field(
        default="",
        description="API key for the Gemini generateContent endpoint",
    )
    gemini_model: str = Field(
        default="gemini-2.5-flash-lite",
        description="Gemini model used to propose task assignments",
    )
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Gemini REST API base URL",
    )
    gemini_request_timeout_seconds: float = Field(
        default=60.0,
        gt=0.0,
        description="HTTP timeout for a single Gemini request",
    )

    model_config = {
        "env_prefix": "DAYPLAN_",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Singleton pattern
_config: PlannerConfig | None = None


def get_config() -> PlannerConfig:
    """Get the planner configuration singleton.

    Returns:
        PlannerConfig: Planner configuration instance
    """
    global _config
    if _config is None:
        _config = PlannerConfig()
    return _config

"""Shared fixtures for planner tests."""

from datetime import datetime, timezone

import pytest

from src.dayplan.config import PlannerConfig
from src.dayplan.generator import ScheduleGenerator


@pytest.fixture
def config() -> PlannerConfig:
    return PlannerConfig(
        default_event_priority=50,
        max_proposal_attempts=2,
        proposal_retry_wait_seconds=0.0,
        proposal_timeout_seconds=None,
        gemini_api_key="test-key",
    )


@pytest.fixture
def generator(config: PlannerConfig) -> ScheduleGenerator:
    return ScheduleGenerator(config=config)


@pytest.fixture
def deadline() -> datetime:
    return datetime(2026, 10, 18, 18, 0, tzinfo=timezone.utc)

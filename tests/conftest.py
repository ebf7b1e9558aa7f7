"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from podium.config.settings import DebateConfig
from podium.debate_engine.models import Debate
from podium.models.providers.scripted_agent import ScriptedAgent


# =============================================================================
# SHARED FIXTURES - Available to all test modules
# =============================================================================


class RecordingCallback:
    """Async event callback that remembers every event it receives."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    async def __call__(self, event_type: str, data: dict[str, Any]) -> None:
        self.events.append((event_type, data))

    def of_type(self, event_type: str) -> list[dict[str, Any]]:
        return [data for kind, data in self.events if kind == event_type]


class InMemoryTranscriptStore:
    """Transcript store that keeps partial saves in memory."""

    def __init__(self, fail_with: Exception | None = None) -> None:
        self.saved: list[Debate] = []
        self.fail_with = fail_with

    def save_partial(self, debate: Debate) -> str:
        if self.fail_with is not None:
            raise self.fail_with
        self.saved.append(debate)
        return f"memory://partial-{debate.id}"


@pytest.fixture
def sample_debate_topic() -> str:
    """Provide a standard debate topic for testing."""
    return "Should AI be regulated?"


@pytest.fixture
def debate_config() -> DebateConfig:
    """Short budgets so timeout paths finish quickly."""
    return DebateConfig(time_limit=2, preparation_time=2, word_limit=500)


@pytest.fixture
def pro_agent() -> ScriptedAgent:
    return ScriptedAgent(
        "pro-bot",
        {
            "preparation": "Pro research notes on oversight.",
            "opening": "Pro opening: regulation keeps AI accountable.",
            "rebuttal": "Pro rebuttal: innovation thrives under clear rules.",
            "closing": "Pro closing: vote for accountable AI.",
        },
        default_response="Pro answer.",
    )


@pytest.fixture
def con_agent() -> ScriptedAgent:
    return ScriptedAgent(
        "con-bot",
        {
            "preparation": "Con research notes on innovation.",
            "opening": "Con opening: regulation stifles progress.",
            "rebuttal": "Con rebuttal: accountability exists without new law.",
            "closing": "Con closing: keep AI free to improve.",
        },
        default_response="Con answer.",
    )


@pytest.fixture
def recorder() -> RecordingCallback:
    return RecordingCallback()


@pytest.fixture
def transcript_store() -> InMemoryTranscriptStore:
    return InMemoryTranscriptStore()


# =============================================================================
# PYTEST CONFIGURATION HOOKS
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )

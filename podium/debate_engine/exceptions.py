"""Exceptions raised by the debate engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .types import DebatePhase

if TYPE_CHECKING:
    from .models import Debate


class DebateEngineError(Exception):
    """Base class for all debate engine errors.

    ``debate`` is set by ``DebateOrchestrator.run_full_debate`` to the debate
    value that was running when the error escaped, already in ERROR.
    """

    debate: Debate | None = None


class InvalidTopic(DebateEngineError, ValueError):
    """Raised when a debate topic is empty or whitespace-only."""


class InvalidTransition(DebateEngineError):
    """Raised when a phase operation is called out of order."""

    def __init__(self, current: DebatePhase, requested: DebatePhase):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Invalid state transition: cannot transition from {current.value} to {requested.value}"
        )


class GenerationError(DebateEngineError):
    """Base class for failures while obtaining text from a position agent."""

    def __init__(self, message: str, agent_name: str | None = None):
        super().__init__(message)
        self.agent_name = agent_name


class GenerationTimeout(GenerationError):
    """A generation call exceeded its deadline."""


class GenerationFailure(GenerationError):
    """A generation call failed for a reason other than a timeout."""


class PhaseFailure(GenerationError):
    """A side produced no salvageable content during a concurrent phase."""

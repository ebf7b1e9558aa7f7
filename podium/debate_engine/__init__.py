"""Debate orchestration and flow management."""

from .core import DebateOrchestrator
from .types import DebatePhase, EventCallback, Position
from .models import Debate, DebateContext, DebateErrorRecord, DebateRound, Statement
from .exceptions import (
    DebateEngineError,
    GenerationError,
    GenerationFailure,
    GenerationTimeout,
    InvalidTopic,
    InvalidTransition,
    PhaseFailure,
)
from .prompt_builder import PromptBuilder
from .context_builder import ContextBuilder
from .state_machine import PhaseStateMachine
from .executor import TimeoutRetryExecutor
from .preparation import PreparationCoordinator
from .error_handler import CriticalErrorHandler, TranscriptStore
from .transcript import TranscriptManager

__all__ = [
    "DebateOrchestrator",
    "DebatePhase",
    "EventCallback",
    "Position",
    "Debate",
    "DebateContext",
    "DebateErrorRecord",
    "DebateRound",
    "Statement",
    "DebateEngineError",
    "GenerationError",
    "GenerationFailure",
    "GenerationTimeout",
    "InvalidTopic",
    "InvalidTransition",
    "PhaseFailure",
    "PromptBuilder",
    "ContextBuilder",
    "PhaseStateMachine",
    "TimeoutRetryExecutor",
    "PreparationCoordinator",
    "CriticalErrorHandler",
    "TranscriptStore",
    "TranscriptManager",
]

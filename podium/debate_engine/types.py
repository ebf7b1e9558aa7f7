"""Shared types and enums for the debate engine."""

from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, TypedDict


class PhaseEventData(TypedDict):
    """Data structure for phase_started and phase_completed event callbacks."""

    debate_id: str
    phase: str
    round_count: int


class ChunkEventData(TypedDict):
    """Data structure for preparation_chunk and statement_chunk event callbacks."""

    agent_name: str
    position: str
    phase: str
    chunk: str
    word_count: int


class TimeoutEventData(TypedDict):
    """Data structure for preparation_timeout and preparation_salvaged event callbacks."""

    agent_name: str
    position: str
    partial_content: str
    word_count: int


class StatementResetEventData(TypedDict):
    """Data structure for statement_reset event callbacks, sent before a streaming retry."""

    agent_name: str
    position: str
    phase: str


class MessageCompleteEventData(TypedDict):
    """Data structure for message_complete event callbacks."""

    agent_name: str
    position: str
    phase: str
    content: str
    word_count: int
    generation_time_ms: int


# Callback type alias for orchestration events: (event_type, data)
type EventCallback = Callable[[str, dict[str, Any]], Awaitable[None]]


class DebatePhase(Enum):
    """Phases of a debate, in execution order."""

    INITIALIZED = "initialized"
    PREPARATION = "preparation"
    OPENING = "opening"
    REBUTTAL = "rebuttal"
    CROSS_EXAMINATION = "cross_examination"
    CLOSING = "closing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (DebatePhase.COMPLETED, DebatePhase.ERROR)


class Position(Enum):
    """Debate positions."""

    PRO = "pro"
    CON = "con"

    @property
    def opponent(self) -> "Position":
        return Position.CON if self is Position.PRO else Position.PRO

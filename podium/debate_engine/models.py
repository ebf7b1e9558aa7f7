"""Data models for the debate engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING
import uuid

from podium.config.settings import DebateConfig
from .types import DebatePhase, Position
from .utils import count_words

if TYPE_CHECKING:
    from podium.models.providers.base_agent import PositionAgent


@dataclass(frozen=True)
class Statement:
    """One side's contribution to a round."""

    agent_name: str
    position: Position
    content: str
    word_count: int
    generated_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def create(cls, agent_name: str, position: Position, content: str) -> Statement:
        return cls(
            agent_name=agent_name,
            position=position,
            content=content,
            word_count=count_words(content),
        )


@dataclass(frozen=True)
class DebateRound:
    """The recorded output of one phase."""

    phase: DebatePhase
    pro_statement: Statement | None = None
    con_statement: Statement | None = None
    timestamp: datetime = field(default_factory=datetime.now)

    def statement_for(self, position: Position) -> Statement | None:
        return self.pro_statement if position is Position.PRO else self.con_statement

    def statements(self) -> list[Statement]:
        """Statements in this round, pro first."""
        return [s for s in (self.pro_statement, self.con_statement) if s is not None]


@dataclass(frozen=True)
class DebateErrorRecord:
    """An error recorded against a debate."""

    message: str
    phase: DebatePhase
    round: DebatePhase | None = None
    agent_name: str | None = None
    error_type: str = "Exception"
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class Debate:
    """A debate between two position agents.

    Phase operations return a new ``Debate`` built with ``dataclasses.replace``;
    callers keep the returned value going forward.
    """

    topic: str
    config: DebateConfig
    pro_agent: PositionAgent
    con_agent: PositionAgent
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    phase: DebatePhase = DebatePhase.INITIALIZED
    rounds: list[DebateRound] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)
    completed_at: datetime | None = None
    errors: list[DebateErrorRecord] = field(default_factory=list)

    def agent_for(self, position: Position) -> PositionAgent:
        return self.pro_agent if position is Position.PRO else self.con_agent

    def round_for(self, phase: DebatePhase) -> DebateRound | None:
        for debate_round in self.rounds:
            if debate_round.phase is phase:
                return debate_round
        return None


@dataclass
class DebateContext:
    """What a position agent may see when generating for one phase."""

    topic: str
    position: Position
    phase: DebatePhase
    previous_statements: list[Statement] = field(default_factory=list)
    preparation_material: str | None = None
    word_limit: int | None = None

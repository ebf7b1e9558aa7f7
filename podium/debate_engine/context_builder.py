"""Builds the per-call view of a debate that a position agent is allowed to see."""

from .models import Debate, DebateContext, Statement
from .types import DebatePhase, Position

CLOSING_SOURCE_PHASES = (
    DebatePhase.OPENING,
    DebatePhase.REBUTTAL,
    DebatePhase.CROSS_EXAMINATION,
)


class ContextBuilder:
    """Assembles a DebateContext from a debate and a target phase.

    Pure: performs no I/O and never mutates the debate.
    """

    def build(
        self, debate: Debate, position: Position, phase: DebatePhase
    ) -> DebateContext:
        context = DebateContext(
            topic=debate.topic,
            position=position,
            phase=phase,
            word_limit=debate.config.word_limit,
        )

        # Own preparation notes only; the opponent's are never disclosed
        preparation_round = debate.round_for(DebatePhase.PREPARATION)
        if preparation_round and phase is not DebatePhase.PREPARATION:
            own_notes = preparation_round.statement_for(position)
            if own_notes is not None:
                context.preparation_material = own_notes.content

        if phase is DebatePhase.REBUTTAL:
            context.previous_statements = self._opponent_statements(
                debate, position, (DebatePhase.OPENING,)
            )
        elif phase is DebatePhase.CROSS_EXAMINATION:
            context.previous_statements = self._opponent_statements(
                debate, position, (DebatePhase.OPENING, DebatePhase.REBUTTAL)
            )
        elif phase is DebatePhase.CLOSING:
            context.previous_statements = self._all_statements(
                debate, CLOSING_SOURCE_PHASES
            )

        return context

    def _opponent_statements(
        self,
        debate: Debate,
        position: Position,
        phases: tuple[DebatePhase, ...],
    ) -> list[Statement]:
        statements: list[Statement] = []
        for phase in phases:
            debate_round = debate.round_for(phase)
            if debate_round is None:
                continue
            statement = debate_round.statement_for(position.opponent)
            if statement is not None:
                statements.append(statement)
        return statements

    def _all_statements(
        self, debate: Debate, phases: tuple[DebatePhase, ...]
    ) -> list[Statement]:
        """Both sides' statements from ``phases``, in the order the rounds were recorded."""
        return [
            statement
            for debate_round in debate.rounds
            if debate_round.phase in phases
            for statement in debate_round.statements()
        ]

"""Phase transition rules for a debate."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .exceptions import InvalidTransition
from .types import DebatePhase

if TYPE_CHECKING:
    from .models import Debate

logger = logging.getLogger(__name__)

# Each non-terminal phase has exactly one forward successor; ERROR is added below.
_FORWARD: dict[DebatePhase, DebatePhase] = {
    DebatePhase.INITIALIZED: DebatePhase.PREPARATION,
    DebatePhase.PREPARATION: DebatePhase.OPENING,
    DebatePhase.OPENING: DebatePhase.REBUTTAL,
    DebatePhase.REBUTTAL: DebatePhase.CROSS_EXAMINATION,
    DebatePhase.CROSS_EXAMINATION: DebatePhase.CLOSING,
    DebatePhase.CLOSING: DebatePhase.COMPLETED,
}

VALID_TRANSITIONS: dict[DebatePhase, frozenset[DebatePhase]] = {
    phase: (
        frozenset()
        if phase.is_terminal
        else frozenset({_FORWARD[phase], DebatePhase.ERROR})
    )
    for phase in DebatePhase
}


class PhaseStateMachine:
    """Validates phase transitions. Holds no state beyond the debate's ``phase`` field."""

    def can_transition(self, current: DebatePhase, requested: DebatePhase) -> bool:
        return requested in VALID_TRANSITIONS[current]

    def validate(self, current: DebatePhase, requested: DebatePhase) -> None:
        """Raise InvalidTransition unless ``current -> requested`` is in the table."""
        if not self.can_transition(current, requested):
            logger.warning(f"Rejected transition {current.value} -> {requested.value}")
            raise InvalidTransition(current, requested)

    def transition(self, current: DebatePhase, requested: DebatePhase) -> DebatePhase:
        self.validate(current, requested)
        return requested

    def next_phase(self, current: DebatePhase) -> DebatePhase | None:
        """The forward successor of ``current``, or None for terminal phases."""
        return _FORWARD.get(current)

    def get_current_state(self, debate: Debate) -> DebatePhase:
        return debate.phase

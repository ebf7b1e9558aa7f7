"""Recording of unrecovered phase failures."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from .models import Debate, DebateErrorRecord
from .types import DebatePhase, EventCallback

logger = logging.getLogger(__name__)


class TranscriptStore(Protocol):
    """Persistence collaborator for partial transcripts."""

    def save_partial(self, debate: Debate) -> str:
        """Save ``debate`` as a partial transcript and return its location."""
        ...


class CriticalErrorHandler:
    """Records a failure, saves a partial transcript and moves the debate to ERROR.

    The caller re-raises the original error after ``handle`` returns.
    """

    def __init__(
        self,
        transcript_store: TranscriptStore | None = None,
        event_callback: EventCallback | None = None,
    ):
        self.transcript_store = transcript_store
        self._event_callback = event_callback

    async def handle(
        self,
        debate: Debate,
        error: BaseException,
        round: DebatePhase | None = None,
    ) -> DebateErrorRecord:
        record = DebateErrorRecord(
            message=str(error) or type(error).__name__,
            phase=debate.phase,
            round=round,
            agent_name=getattr(error, "agent_name", None),
            error_type=type(error).__name__,
        )
        debate.errors.append(record)

        logger.error(
            f"[Debate Error] debate={debate.id} phase={debate.phase.value} "
            f"round={round.value if round else None} agent={record.agent_name}: {record.message}"
        )

        location = await self._save_partial(debate)

        debate.phase = DebatePhase.ERROR

        if self._event_callback is not None:
            try:
                await self._event_callback(
                    "debate_error",
                    {
                        "debate_id": debate.id,
                        "message": record.message,
                        "round": round.value if round else None,
                        "agent_name": record.agent_name,
                        "partial_transcript": location,
                    },
                )
            except Exception as e:
                logger.error(f"Error event callback failed: {e}")

        return record

    async def _save_partial(self, debate: Debate) -> str | None:
        if self.transcript_store is None:
            logger.warning(
                f"No transcript store configured - partial transcript for debate {debate.id} not saved"
            )
            return None

        try:
            location = await asyncio.to_thread(self.transcript_store.save_partial, debate)
        except Exception as save_error:
            logger.error(f"Failed to save partial transcript: {save_error}")
            return None

        logger.warning(f"Partial transcript saved to: {location}")
        return location

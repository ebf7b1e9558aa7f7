"""Transcript management for debates using JSON files."""

from datetime import datetime
from pathlib import Path
from typing import Any, TypedDict
import json
import logging

from .models import Debate, DebateRound, Statement
from .types import DebatePhase

logger = logging.getLogger(__name__)


class ParticipantInfo(TypedDict):
    """Information about a debate participant."""

    name: str
    position: str


class TranscriptMetadata(TypedDict):
    """Metadata for a debate transcript."""

    id: str
    topic: str
    participants: dict[str, ParticipantInfo]
    final_phase: str
    round_count: int
    statement_count: int
    word_count: int
    total_duration_s: float
    created_at: str
    completed_at: str | None
    saved_at: str


class TranscriptManager:
    """Manages saving and loading of debate transcripts as JSON files."""

    def __init__(self, transcript_dir: str | Path = "transcripts"):
        self.transcript_dir = Path(transcript_dir)

    def save_transcript(self, debate: Debate) -> str:
        """Save a debate transcript and return the file path."""
        return self._write(f"{debate.id}.json", self.to_dict(debate))

    def save_partial(self, debate: Debate) -> str:
        """Save an incomplete debate, tagged as partial, and return the file path."""
        data = self.to_dict(debate)
        data["partial"] = True
        return self._write(f"partial-{debate.id}.json", data)

    def load_transcript(self, debate_id: str, partial: bool = False) -> dict[str, Any]:
        """Load a saved transcript by debate ID."""
        file_name = f"partial-{debate_id}.json" if partial else f"{debate_id}.json"
        with open(self.transcript_dir / file_name, "r", encoding="utf-8") as f:
            return json.load(f)

    def _write(self, file_name: str, data: dict[str, Any]) -> str:
        self.transcript_dir.mkdir(parents=True, exist_ok=True)
        path = self.transcript_dir / file_name
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save transcript to {path}: {e}")
            raise
        logger.info(f"Saved transcript to {path}")
        return str(path)

    def visible_rounds(self, debate: Debate) -> list[DebateRound]:
        """Rounds to include in a transcript; preparation is hidden unless configured."""
        return [
            r
            for r in debate.rounds
            if r.phase is not DebatePhase.PREPARATION or debate.config.show_preparation
        ]

    def to_dict(self, debate: Debate) -> dict[str, Any]:
        """Convert a Debate to a dictionary for JSON serialization."""
        rounds = self.visible_rounds(debate)
        total_duration = (
            (debate.completed_at - debate.created_at).total_seconds()
            if debate.completed_at
            else 0.0
        )
        metadata: TranscriptMetadata = {
            "id": debate.id,
            "topic": debate.topic,
            "participants": {
                "pro": {"name": debate.pro_agent.name, "position": "pro"},
                "con": {"name": debate.con_agent.name, "position": "con"},
            },
            "final_phase": debate.phase.value,
            "round_count": len(debate.rounds),
            "statement_count": sum(len(r.statements()) for r in rounds),
            "word_count": sum(s.word_count for r in rounds for s in r.statements()),
            "total_duration_s": total_duration,
            "created_at": debate.created_at.isoformat(),
            "completed_at": debate.completed_at.isoformat() if debate.completed_at else None,
            "saved_at": datetime.now().isoformat(),
        }
        return {
            "metadata": metadata,
            "config": debate.config.model_dump(),
            "rounds": [
                {
                    "phase": r.phase.value,
                    "timestamp": r.timestamp.isoformat(),
                    "pro_statement": _statement_to_dict(r.pro_statement),
                    "con_statement": _statement_to_dict(r.con_statement),
                }
                for r in rounds
            ],
            "errors": [
                {
                    "timestamp": e.timestamp.isoformat(),
                    "message": e.message,
                    "phase": e.phase.value,
                    "round": e.round.value if e.round else None,
                    "agent_name": e.agent_name,
                    "error_type": e.error_type,
                }
                for e in debate.errors
            ],
        }

    def format_transcript(self, debate: Debate) -> str:
        """Format transcript as plain text."""
        lines = [
            "DEBATE TRANSCRIPT",
            f"Topic: {debate.topic}",
            f"Affirmative: {debate.pro_agent.name}",
            f"Negative: {debate.con_agent.name}",
            f"Status: {debate.phase.value}",
            "",
            "=" * 80,
        ]

        for debate_round in self.visible_rounds(debate):
            lines.extend(["", debate_round.phase.value.replace("_", " ").upper(), "-" * 40])
            for statement in debate_round.statements():
                lines.extend(
                    [
                        f"[{statement.agent_name.upper()} ({statement.position.value.upper()})]",
                        statement.content.strip(),
                        f"    Words: {statement.word_count} | Time: {statement.generated_at.strftime('%H:%M:%S')}",
                        "",
                    ]
                )

        lines.extend(["=" * 80, f"END OF TRANSCRIPT - {len(debate.rounds)} rounds"])
        return "\n".join(lines)


def _statement_to_dict(statement: Statement | None) -> dict[str, Any] | None:
    if statement is None:
        return None
    return {
        "agent_name": statement.agent_name,
        "position": statement.position.value,
        "content": statement.content,
        "word_count": statement.word_count,
        "generated_at": statement.generated_at.isoformat(),
    }

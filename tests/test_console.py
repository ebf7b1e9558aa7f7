"""Tests for console progress output."""

import asyncio
import io

import pytest

from podium.console import ConsoleReporter
from podium.debate_engine.core import DebateOrchestrator
from podium.models.providers.scripted_agent import ScriptedAgent


@pytest.mark.unit
def test_reporter_prints_streamed_statement_once() -> None:
    out = io.StringIO()
    reporter = ConsoleReporter(stream=out)

    async def replay() -> None:
        await reporter("phase_started", {"debate_id": "d1", "phase": "opening", "round_count": 1})
        for chunk in ("Regulate ", "now."):
            await reporter(
                "statement_chunk",
                {"agent_name": "pro-bot", "position": "pro", "phase": "opening", "chunk": chunk, "word_count": 0},
            )
        await reporter(
            "message_complete",
            {"agent_name": "pro-bot", "position": "pro", "phase": "opening", "content": "Regulate now.", "word_count": 2, "generation_time_ms": 5},
        )

    asyncio.run(replay())

    text = out.getvalue()
    assert "=== OPENING ===" in text
    assert "[pro-bot (AFFIRMATIVE)]" in text
    assert text.count("Regulate now.") == 1


@pytest.mark.unit
def test_reporter_hides_preparation_chunks() -> None:
    out = io.StringIO()
    reporter = ConsoleReporter(show_preparation=False, stream=out)

    asyncio.run(
        reporter(
            "preparation_chunk",
            {"agent_name": "con-bot", "position": "con", "phase": "preparation", "chunk": "secret", "word_count": 1},
        )
    )

    assert "secret" not in out.getvalue()


@pytest.mark.integration
def test_reporter_follows_full_debate(debate_config, pro_agent, con_agent) -> None:
    out = io.StringIO()
    orchestrator = DebateOrchestrator(event_callback=ConsoleReporter(stream=out))
    debate = orchestrator.initialize_debate("Should AI be regulated?", debate_config, pro_agent, con_agent)

    asyncio.run(orchestrator.run_full_debate(debate))

    text = out.getvalue()
    for title in ("PREPARATION", "OPENING", "REBUTTAL", "CROSS EXAMINATION", "CLOSING"):
        assert f"=== {title} ===" in text
    assert "Con closing: keep AI free to improve." in text
    assert "[con-bot (NEGATIVE)]" in text


@pytest.mark.unit
def test_unknown_events_are_ignored() -> None:
    out = io.StringIO()

    asyncio.run(ConsoleReporter(stream=out)("something_new", {}))

    assert out.getvalue() == ""


@pytest.mark.unit
def test_reporter_marks_discarded_partial_response() -> None:
    out = io.StringIO()
    reporter = ConsoleReporter(stream=out)
    chunk = {"agent_name": "pro-bot", "position": "pro", "phase": "opening", "word_count": 0}

    async def replay() -> None:
        await reporter("statement_chunk", {**chunk, "chunk": "Regulate "})
        await reporter("statement_reset", {"agent_name": "pro-bot", "position": "pro", "phase": "opening"})
        for word in ("Regulate ", "now."):
            await reporter("statement_chunk", {**chunk, "chunk": word})

    asyncio.run(replay())

    assert out.getvalue().splitlines() == [
        "[pro-bot (AFFIRMATIVE)]",
        "Regulate ",
        "(discarding partial response from pro-bot)",
        "[pro-bot (AFFIRMATIVE)]",
        "Regulate now.",
    ]

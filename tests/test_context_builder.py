"""Tests for per-phase context assembly."""

from dataclasses import replace

import pytest

from podium.config.settings import DebateConfig
from podium.debate_engine.context_builder import ContextBuilder
from podium.debate_engine.models import Debate, DebateRound, Statement
from podium.debate_engine.types import DebatePhase, Position
from podium.models.providers.scripted_agent import ScriptedAgent


def _round(phase: DebatePhase, pro: str, con: str) -> DebateRound:
    return DebateRound(
        phase=phase,
        pro_statement=Statement.create("pro-bot", Position.PRO, pro),
        con_statement=Statement.create("con-bot", Position.CON, con),
    )


@pytest.fixture
def debate() -> Debate:
    return Debate(
        topic="Should AI be regulated?",
        config=DebateConfig(word_limit=250),
        pro_agent=ScriptedAgent("pro-bot"),
        con_agent=ScriptedAgent("con-bot"),
        phase=DebatePhase.CROSS_EXAMINATION,
        rounds=[
            _round(DebatePhase.PREPARATION, "pro notes", "con notes"),
            _round(DebatePhase.OPENING, "pro opening", "con opening"),
            _round(DebatePhase.REBUTTAL, "pro rebuttal", "con rebuttal"),
            _round(DebatePhase.CROSS_EXAMINATION, "pro cross", "con cross"),
        ],
    )


def _contents(statements: list[Statement]) -> list[str]:
    return [s.content for s in statements]


@pytest.mark.unit
def test_opening_sees_no_statements(debate: Debate) -> None:
    context = ContextBuilder().build(debate, Position.PRO, DebatePhase.OPENING)

    assert context.previous_statements == []
    assert context.topic == "Should AI be regulated?"
    assert context.word_limit == 250


@pytest.mark.unit
def test_rebuttal_sees_only_opponent_opening(debate: Debate) -> None:
    builder = ContextBuilder()

    pro = builder.build(debate, Position.PRO, DebatePhase.REBUTTAL)
    con = builder.build(debate, Position.CON, DebatePhase.REBUTTAL)

    assert _contents(pro.previous_statements) == ["con opening"]
    assert _contents(con.previous_statements) == ["pro opening"]


@pytest.mark.unit
def test_cross_examination_sees_opponent_opening_and_rebuttal(debate: Debate) -> None:
    context = ContextBuilder().build(debate, Position.CON, DebatePhase.CROSS_EXAMINATION)

    assert _contents(context.previous_statements) == ["pro opening", "pro rebuttal"]


@pytest.mark.unit
def test_closing_sees_everything_but_preparation(debate: Debate) -> None:
    context = ContextBuilder().build(debate, Position.PRO, DebatePhase.CLOSING)

    assert _contents(context.previous_statements) == [
        "pro opening",
        "con opening",
        "pro rebuttal",
        "con rebuttal",
        "pro cross",
        "con cross",
    ]


@pytest.mark.unit
def test_only_own_preparation_is_attached(debate: Debate) -> None:
    builder = ContextBuilder()

    pro = builder.build(debate, Position.PRO, DebatePhase.CLOSING)
    con = builder.build(debate, Position.CON, DebatePhase.OPENING)

    assert pro.preparation_material == "pro notes"
    assert con.preparation_material == "con notes"
    assert all("notes" not in s.content for s in pro.previous_statements)


@pytest.mark.unit
def test_preparation_phase_gets_no_material(debate: Debate) -> None:
    fresh = replace(debate, rounds=[], phase=DebatePhase.INITIALIZED)

    context = ContextBuilder().build(fresh, Position.PRO, DebatePhase.PREPARATION)

    assert context.preparation_material is None
    assert context.previous_statements == []


@pytest.mark.unit
def test_build_does_not_mutate_debate(debate: Debate) -> None:
    rounds_before = list(debate.rounds)

    ContextBuilder().build(debate, Position.PRO, DebatePhase.CLOSING)

    assert debate.rounds == rounds_before
    assert debate.phase is DebatePhase.CROSS_EXAMINATION

"""Tests for position agent providers."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import httpx
import pytest
from httpx import Request
from openai import APITimeoutError

from podium.config.settings import ModelConfig, SystemConfig
from podium.debate_engine.exceptions import GenerationFailure, GenerationTimeout
from podium.debate_engine.models import DebateContext, Statement
from podium.debate_engine.types import DebatePhase, Position
from podium.models.providers import (
    AgentFactory,
    OllamaAgent,
    OpenRouterAgent,
    ScriptedAgent,
)


class FakeCompletions:
    """Simplified ``chat.completions`` endpoint for testing."""

    def __init__(self, *responses):
        self._responses = list(responses)
        self.requests: list[dict] = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        if not self._responses:
            raise AssertionError("No fake responses left")
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeClient:
    """Stand-in for AsyncOpenAI exposing only ``chat.completions``."""

    def __init__(self, *responses):
        self.chat = SimpleNamespace(completions=FakeCompletions(*responses))


def _completion(text: str) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


def _context(phase: DebatePhase = DebatePhase.REBUTTAL) -> DebateContext:
    return DebateContext(
        topic="Should AI be regulated?",
        position=Position.CON,
        phase=phase,
        previous_statements=[
            Statement.create("pro-bot", Position.PRO, "Regulation keeps AI accountable.")
        ],
        preparation_material="Con notes.",
        word_limit=300,
    )


@pytest.mark.unit
def test_factory_creates_configured_agents() -> None:
    system = SystemConfig()

    ollama = AgentFactory.create_agent(ModelConfig(name="llama3.2:3b"), system)
    scripted = AgentFactory.create_agent(
        ModelConfig(name="mock-con", provider="mock", responses={"con": "No."}), system
    )

    assert isinstance(ollama, OllamaAgent)
    assert isinstance(scripted, ScriptedAgent)
    assert scripted.name == "mock-con"
    assert set(AgentFactory.get_available_providers()) == {"ollama", "openrouter", "mock"}


@pytest.mark.unit
def test_ollama_generate_sends_debate_messages() -> None:
    client = FakeClient(_completion("  Con rebuttal.  "))
    agent = OllamaAgent(ModelConfig(name="llama3.2:3b", max_tokens=300), SystemConfig(), client=client)

    result = asyncio.run(agent.generate("Deliver your rebuttal.", _context()))

    assert result == "Con rebuttal."
    request = client.chat.completions.requests[0]
    assert request["model"] == "llama3.2:3b"
    assert request["max_tokens"] == 300
    assert request["extra_body"] == {"keep_alive": "5m", "repeat_penalty": 1.1}
    system_message, history, prompt = request["messages"]
    assert "Negative" in system_message["content"]
    assert "Con notes." in system_message["content"]
    assert "Regulation keeps AI accountable." in history["content"]
    assert prompt == {"role": "user", "content": "Deliver your rebuttal."}


@pytest.mark.unit
def test_timeout_from_backend_is_translated() -> None:
    timeout = APITimeoutError(request=Request("POST", "http://localhost:11434/v1/chat/completions"))
    agent = OllamaAgent(ModelConfig(name="llama3.2:3b"), SystemConfig(), client=FakeClient(timeout))

    with pytest.raises(GenerationTimeout) as exc_info:
        asyncio.run(agent.generate("prompt", _context()))

    assert exc_info.value.agent_name == "llama3.2:3b"
    assert exc_info.value.__cause__ is timeout


@pytest.mark.unit
def test_other_backend_errors_are_failures() -> None:
    error = httpx.ConnectError("connection refused")
    agent = OllamaAgent(ModelConfig(name="llama3.2:3b"), SystemConfig(), client=FakeClient(error))

    with pytest.raises(GenerationFailure):
        asyncio.run(agent.generate("prompt", _context()))


@pytest.mark.unit
def test_openrouter_without_key_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    agent = OpenRouterAgent(ModelConfig(name="openai/gpt-4o-mini", provider="openrouter"), SystemConfig())

    with pytest.raises(GenerationFailure, match="API key"):
        asyncio.run(agent.generate("prompt", _context()))


@pytest.mark.unit
def test_openrouter_generate_excludes_reasoning() -> None:
    client = FakeClient(_completion("Con answer."))
    agent = OpenRouterAgent(
        ModelConfig(name="openai/gpt-4o-mini", provider="openrouter"), SystemConfig(), client=client
    )

    assert asyncio.run(agent.generate("prompt", _context())) == "Con answer."
    assert client.chat.completions.requests[0]["extra_body"] == {"reasoning": {"exclude": True}}


@pytest.mark.unit
@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("", ("", False)),
        (": OPENROUTER PROCESSING", ("", False)),
        ("data: [DONE]", ("", True)),
        ("data: {not json", ("", False)),
        ('data: {"choices": [{"delta": {"content": "Hello"}}]}', ("Hello", False)),
        (
            'data: {"choices": [{"delta": {"content": "!"}, "finish_reason": "stop"}]}',
            ("!", True),
        ),
        ('data: {"choices": []}', ("", False)),
    ],
)
def test_parse_sse_line(line: str, expected: tuple[str, bool]) -> None:
    agent = OpenRouterAgent(
        ModelConfig(name="openai/gpt-4o-mini", provider="openrouter"),
        SystemConfig(),
        client=FakeClient(),
    )

    assert agent._parse_sse_line(line) == expected


@pytest.mark.unit
def test_parse_sse_error_payload() -> None:
    agent = OpenRouterAgent(
        ModelConfig(name="openai/gpt-4o-mini", provider="openrouter"),
        SystemConfig(),
        client=FakeClient(),
    )

    with pytest.raises(GenerationFailure, match="rate limited"):
        agent._parse_sse_line('data: {"error": {"message": "rate limited"}}')


@pytest.mark.unit
def test_scripted_agent_lookup_order() -> None:
    agent = ScriptedAgent(
        "scripted",
        {"exact prompt": "by prompt", "rebuttal": "by phase", "con": "by position"},
    )

    assert asyncio.run(agent.generate("exact prompt", _context())) == "by prompt"
    assert asyncio.run(agent.generate("other", _context())) == "by phase"
    assert asyncio.run(agent.generate("other", _context(DebatePhase.CLOSING))) == "by position"
    assert agent.call_count == 3


@pytest.mark.unit
def test_scripted_agent_streams_words() -> None:
    agent = ScriptedAgent("scripted", {"con": "one two  three"}, streaming=True)

    async def collect() -> list[str]:
        return [chunk async for chunk in agent.generate_stream("prompt", _context())]

    assert asyncio.run(collect()) == ["one ", "two  ", "three"]


def _patch_http_transport(monkeypatch: pytest.MonkeyPatch, handler) -> None:
    real_client = httpx.AsyncClient
    monkeypatch.setattr(
        httpx,
        "AsyncClient",
        lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs),
    )


@pytest.mark.unit
def test_ollama_health_check_queries_tags(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json={"models": []})

    _patch_http_transport(monkeypatch, handler)
    agent = OllamaAgent(
        ModelConfig(name="llama3.2:3b"), SystemConfig(ollama_base_url="http://ollama.test:11434/")
    )

    assert asyncio.run(agent.is_running())
    assert seen == ["http://ollama.test:11434/api/tags"]


@pytest.mark.unit
def test_ollama_health_check_fails_when_unreachable(monkeypatch: pytest.MonkeyPatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    _patch_http_transport(monkeypatch, handler)
    agent = OllamaAgent(ModelConfig(name="llama3.2:3b"), SystemConfig())

    assert not asyncio.run(agent.is_running())

import asyncio
import logging
import re
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Self

from .base_agent import PositionAgent

if TYPE_CHECKING:
    from podium.config.settings import ModelConfig, SystemConfig
    from podium.debate_engine.models import DebateContext

logger = logging.getLogger(__name__)

_CHUNK_PATTERN = re.compile(r"\S+\s*")


class ScriptedAgent(PositionAgent):
    """Agent that answers from fixed responses, for tests and offline runs.

    Responses are looked up by exact prompt, then by phase value
    (e.g. ``"opening"``), then by position value (``"pro"``/``"con"``),
    falling back to ``default_response``.
    """

    def __init__(
        self,
        name: str = "scripted",
        responses: dict[str, str] | None = None,
        default_response: str | None = None,
        *,
        streaming: bool = False,
        delay: float = 0.0,
        chunk_delay: float = 0.0,
        fail_with: Exception | None = None,
        fail_times: int | None = None,
        fail_after_chunks: int | None = None,
    ):
        self._name = name
        self.responses = dict(responses or {})
        self.default_response = default_response or f"Scripted response from {name}"
        self.streaming = streaming
        self.delay = delay
        self.chunk_delay = chunk_delay
        self.fail_with = fail_with
        self.fail_times = fail_times
        self.fail_after_chunks = fail_after_chunks
        self.call_count = 0
        self.prompts: list[str] = []

    @property
    def name(self) -> str:
        return self._name

    @classmethod
    def from_config(
        cls, model_config: "ModelConfig", system_config: "SystemConfig"
    ) -> Self:
        return cls(
            name=model_config.name,
            responses=model_config.responses,
            streaming=model_config.streaming,
            chunk_delay=model_config.chunk_delay,
        )

    def supports_streaming(self) -> bool:
        return self.streaming

    def response_for(self, prompt: str, context: "DebateContext") -> str:
        for key in (prompt, context.phase.value, context.position.value):
            if key in self.responses:
                return self.responses[key]
        return self.default_response

    def _should_fail(self) -> bool:
        if self.fail_with is None:
            return False
        return self.fail_times is None or self.call_count <= self.fail_times

    async def generate(self, prompt: str, context: "DebateContext") -> str:
        self.call_count += 1
        self.prompts.append(prompt)

        if self.delay > 0:
            await asyncio.sleep(self.delay)

        if self._should_fail() and self.fail_after_chunks is None:
            raise self.fail_with

        return self.response_for(prompt, context)

    async def generate_stream(
        self, prompt: str, context: "DebateContext"
    ) -> AsyncIterator[str]:
        self.call_count += 1
        self.prompts.append(prompt)

        if self.delay > 0:
            await asyncio.sleep(self.delay)

        failing = self._should_fail()
        if failing and not self.fail_after_chunks:
            raise self.fail_with

        chunks = _CHUNK_PATTERN.findall(self.response_for(prompt, context))
        for index, chunk in enumerate(chunks):
            if failing and index == self.fail_after_chunks:
                logger.debug(f"{self.name} failing after {index} chunks")
                raise self.fail_with
            if self.chunk_delay > 0:
                await asyncio.sleep(self.chunk_delay)
            yield chunk

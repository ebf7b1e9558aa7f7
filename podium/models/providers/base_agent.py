from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Self

import httpx
from openai import APITimeoutError, OpenAIError

from podium.debate_engine.exceptions import (
    GenerationError,
    GenerationFailure,
    GenerationTimeout,
)
from podium.debate_engine.prompt_builder import PromptBuilder

if TYPE_CHECKING:
    from podium.config.settings import ModelConfig, SystemConfig
    from podium.debate_engine.models import DebateContext


class PositionAgent(ABC):
    """Abstract base class for the generator behind one debate side."""

    prompt_builder = PromptBuilder()

    @property
    @abstractmethod
    def name(self) -> str:
        """Display name of this agent."""
        pass

    @classmethod
    @abstractmethod
    def from_config(
        cls, model_config: "ModelConfig", system_config: "SystemConfig"
    ) -> Self:
        """Create an agent from its configuration."""
        pass

    @abstractmethod
    async def generate(self, prompt: str, context: "DebateContext") -> str:
        """Generate a complete response."""
        pass

    def supports_streaming(self) -> bool:
        """Check if this agent yields its response incrementally."""
        return False

    async def generate_stream(
        self, prompt: str, context: "DebateContext"
    ) -> AsyncIterator[str]:
        """
        Generate a response as an async iterator of text chunks.

        Note:
            Default implementation falls back to non-streaming generate() and
            yields the complete response as a single chunk.
            Agents should override this method to implement true streaming.
        """
        yield await self.generate(prompt, context)

    def _translate_error(self, exc: Exception) -> GenerationError:
        """Map a backend exception onto the engine's timeout/failure classes."""
        if isinstance(exc, GenerationError):
            return exc
        if isinstance(exc, (APITimeoutError, httpx.TimeoutException)):
            return GenerationTimeout(
                f"{self.name} timed out: {exc}", agent_name=self.name
            )
        if isinstance(exc, (OpenAIError, httpx.HTTPError)):
            return GenerationFailure(
                f"{self.name} backend error: {type(exc).__name__}: {exc}",
                agent_name=self.name,
            )
        return GenerationFailure(
            f"{self.name} failed: {type(exc).__name__}: {exc}", agent_name=self.name
        )

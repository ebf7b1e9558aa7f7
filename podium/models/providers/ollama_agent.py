import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any, Self

import httpx
from openai import AsyncOpenAI

from .base_agent import PositionAgent

if TYPE_CHECKING:
    from openai.types.chat import ChatCompletion
    from podium.config.settings import ModelConfig, SystemConfig
    from podium.debate_engine.models import DebateContext

logger = logging.getLogger(__name__)


class OllamaAgent(PositionAgent):
    """Position agent backed by a local Ollama server's OpenAI-compatible API."""

    def __init__(
        self,
        model_config: "ModelConfig",
        system_config: "SystemConfig",
        client: AsyncOpenAI | None = None,
    ):
        self.model_config = model_config
        self.system_config = system_config
        self._ollama_base_url = system_config.ollama_base_url.rstrip("/")
        self._client = client or AsyncOpenAI(
            base_url=f"{self._ollama_base_url}/v1",
            api_key="ollama",  # Ollama doesn't require real API key
            timeout=system_config.ollama.timeout,
            max_retries=0,  # retries are owned by the debate executor
        )

    @classmethod
    def from_config(
        cls, model_config: "ModelConfig", system_config: "SystemConfig"
    ) -> Self:
        return cls(model_config, system_config)

    @property
    def name(self) -> str:
        return self.model_config.name

    def supports_streaming(self) -> bool:
        return self.model_config.streaming

    async def is_running(self) -> bool:
        """Fast health check to see if Ollama server is running."""
        try:
            async with httpx.AsyncClient(timeout=1.0) as client:
                response = await client.get(f"{self._ollama_base_url}/api/tags")
                response.raise_for_status()
                return True
        except httpx.HTTPError as e:
            logger.debug(f"Ollama health check failed: {e}")
            return False

    def _build_params(self, prompt: str, context: "DebateContext") -> dict[str, Any]:
        params: dict[str, Any] = {
            "model": self.model_config.name,
            "messages": self.prompt_builder.build_messages(prompt, context),
            "max_tokens": self.model_config.max_tokens,
            "temperature": self.model_config.temperature,
        }

        ollama_config = self.system_config.ollama
        extra_body: dict[str, Any] = {}
        if ollama_config.keep_alive is not None:
            extra_body["keep_alive"] = ollama_config.keep_alive
        if ollama_config.repeat_penalty is not None:
            extra_body["repeat_penalty"] = ollama_config.repeat_penalty
        if extra_body:
            params["extra_body"] = extra_body

        return params

    async def generate(self, prompt: str, context: "DebateContext") -> str:
        """Generate a response using Ollama."""
        params = self._build_params(prompt, context)
        try:
            response: "ChatCompletion" = await self._client.chat.completions.create(**params)
        except Exception as e:
            logger.error(f"Ollama generation failed for {self.model_config.name}: {e}")
            raise self._translate_error(e) from e

        content = response.choices[0].message.content or ""
        logger.debug(f"Generated {len(content)} chars from Ollama model {self.model_config.name}")
        return content.strip()

    async def generate_stream(
        self, prompt: str, context: "DebateContext"
    ) -> AsyncIterator[str]:
        """Stream a response from Ollama chunk by chunk."""
        params = self._build_params(prompt, context)
        total_chars = 0
        try:
            stream = await self._client.chat.completions.create(**params, stream=True)
            async for event in stream:
                if not event.choices:
                    continue
                chunk = event.choices[0].delta.content
                if chunk:
                    total_chars += len(chunk)
                    yield chunk
        except Exception as e:
            logger.error(f"Ollama streaming failed for {self.model_config.name} after {total_chars} chars: {e}")
            raise self._translate_error(e) from e

        logger.debug(f"Ollama streaming completed: {total_chars} chars from {self.model_config.name}")

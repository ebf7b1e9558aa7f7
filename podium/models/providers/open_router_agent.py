import json
import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any, Self

import httpx
from openai import AsyncOpenAI

from podium.debate_engine.exceptions import GenerationFailure
from .base_agent import PositionAgent

if TYPE_CHECKING:
    from openai.types.chat import ChatCompletion
    from podium.config.settings import ModelConfig, SystemConfig
    from podium.debate_engine.models import DebateContext

logger = logging.getLogger(__name__)


class OpenRouterAgent(PositionAgent):
    """Position agent backed by the OpenRouter chat completions API."""

    def __init__(
        self,
        model_config: "ModelConfig",
        system_config: "SystemConfig",
        client: AsyncOpenAI | None = None,
    ):
        self.model_config = model_config
        self.system_config = system_config
        self._api_key = system_config.openrouter.resolve_api_key()

        if client is not None:
            self._client: AsyncOpenAI | None = client
        elif not self._api_key:
            logger.warning(
                "No OpenRouter API key found. Set OPENROUTER_API_KEY or configure in system settings."
            )
            self._client = None
        else:
            self._client = AsyncOpenAI(
                base_url=system_config.openrouter.base_url,
                api_key=self._api_key,
                timeout=system_config.openrouter.timeout,
                max_retries=0,  # retries are owned by the debate executor
                default_headers=self._tracking_headers(),
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

    def _tracking_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.system_config.openrouter.site_url:
            headers["HTTP-Referer"] = self.system_config.openrouter.site_url
        if self.system_config.openrouter.app_name:
            headers["X-Title"] = self.system_config.openrouter.app_name
        return headers

    def _require_client(self) -> AsyncOpenAI:
        if self._client is None:
            raise GenerationFailure(
                "OpenRouter client not initialized - check API key", agent_name=self.name
            )
        return self._client

    async def generate(self, prompt: str, context: "DebateContext") -> str:
        """Generate a response using OpenRouter."""
        client = self._require_client()
        try:
            response: "ChatCompletion" = await client.chat.completions.create(
                model=self.model_config.name,
                messages=self.prompt_builder.build_messages(prompt, context),  # type: ignore[arg-type]
                max_tokens=self.model_config.max_tokens,
                temperature=self.model_config.temperature,
                extra_body={"reasoning": {"exclude": True}},
            )
        except Exception as e:
            logger.error(f"OpenRouter generation failed for {self.model_config.name}: {e}")
            raise self._translate_error(e) from e

        content = response.choices[0].message.content or ""
        logger.debug(f"Generated {len(content)} chars from OpenRouter model {self.model_config.name}")
        return content.strip()

    async def generate_stream(
        self, prompt: str, context: "DebateContext"
    ) -> AsyncIterator[str]:
        """Stream a response from OpenRouter using server-sent events."""
        if not self._api_key:
            raise GenerationFailure(
                "OpenRouter API key missing - cannot stream", agent_name=self.name
            )

        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            **self._tracking_headers(),
        }
        payload = {
            "model": self.model_config.name,
            "messages": self.prompt_builder.build_messages(prompt, context),
            "max_tokens": self.model_config.max_tokens,
            "temperature": self.model_config.temperature,
            "stream": True,
            "reasoning": {"exclude": True},
        }

        total_chars = 0
        try:
            async with httpx.AsyncClient() as client:
                async with client.stream(
                    "POST",
                    f"{self.system_config.openrouter.base_url}/chat/completions",
                    json=payload,
                    headers=headers,
                    timeout=self.system_config.openrouter.timeout,
                ) as response:
                    response.raise_for_status()

                    async for line in response.aiter_lines():
                        chunk, finished = self._parse_sse_line(line)
                        if chunk:
                            total_chars += len(chunk)
                            yield chunk
                        if finished:
                            break
        except Exception as e:
            logger.error(f"OpenRouter streaming failed for {self.model_config.name} after {total_chars} chars: {e}")
            raise self._translate_error(e) from e

        logger.debug(f"OpenRouter streaming completed: {total_chars} chars from {self.model_config.name}")

    def _parse_sse_line(self, line: str) -> tuple[str, bool]:
        """Return ``(content_chunk, finished)`` for one SSE line."""
        line = line.strip()

        # Skip empty lines and comments
        if not line or line.startswith(":") or not line.startswith("data: "):
            return "", False

        data = line[6:]
        if data == "[DONE]":
            return "", True

        try:
            parsed: dict[str, Any] = json.loads(data)
        except json.JSONDecodeError:
            logger.debug(f"Skipping invalid JSON in stream: {data[:100]}...")
            return "", False

        if "error" in parsed:
            error_msg = parsed["error"].get("message", "Unknown streaming error")
            raise GenerationFailure(f"Streaming error: {error_msg}", agent_name=self.name)

        choices = parsed.get("choices", [])
        if not choices:
            return "", False

        content_chunk = choices[0].get("delta", {}).get("content") or ""
        return content_chunk, bool(choices[0].get("finish_reason"))

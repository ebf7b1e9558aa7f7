"""Deadline enforcement with a single retry for timed-out generation calls."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from .exceptions import (
    DebateEngineError,
    GenerationFailure,
    GenerationTimeout,
)
from .types import EventCallback

if TYPE_CHECKING:
    from podium.models.providers.base_agent import PositionAgent
    from .models import DebateContext

logger = logging.getLogger(__name__)

RETRY_TIMEOUT_MULTIPLIER = 1.5


def is_timeout(error: BaseException) -> bool:
    return isinstance(error, (TimeoutError, GenerationTimeout))


class TimeoutRetryExecutor:
    """Runs one generation call under a deadline.

    A timeout is retried exactly once with ``budget * retry_multiplier``.
    Any other failure is raised immediately without retry.
    """

    def __init__(
        self,
        retry_multiplier: float = RETRY_TIMEOUT_MULTIPLIER,
        event_callback: EventCallback | None = None,
    ):
        self.retry_multiplier = retry_multiplier
        self._event_callback = event_callback

    async def generate_with_timeout(
        self,
        agent: PositionAgent,
        prompt: str,
        context: DebateContext,
        budget_seconds: float,
        *,
        deadline: float | None = None,
    ) -> str:
        """Generate a complete response from ``agent`` within ``budget_seconds``."""
        return await self.run(
            lambda: agent.generate(prompt, context),
            budget_seconds,
            agent_name=agent.name,
            deadline=deadline,
        )

    async def run(
        self,
        call: Callable[[], Awaitable[str]],
        budget_seconds: float,
        *,
        agent_name: str,
        deadline: float | None = None,
    ) -> str:
        """Await ``call()`` under a deadline, retrying once on timeout.

        Args:
            call: Zero-argument factory producing a fresh generation awaitable per attempt
            budget_seconds: Deadline for the first attempt
            agent_name: Agent name used in errors and log lines
            deadline: Optional event loop time that no attempt may run past.
                Both attempts are shortened to fit, and the retry is skipped
                once the deadline has passed

        Returns:
            The generated text

        Raises:
            GenerationTimeout: The retry also exceeded its deadline, or ``deadline``
                left no time to retry
            GenerationFailure: A non-timeout failure, on either attempt
        """
        loop = asyncio.get_running_loop()
        if deadline is not None:
            budget_seconds = min(budget_seconds, max(deadline - loop.time(), 0.0))

        try:
            return await asyncio.wait_for(call(), timeout=budget_seconds)
        except DebateEngineError as error:
            if not is_timeout(error):
                raise
            first_error: Exception = error
        except TimeoutError as error:
            first_error = error
        except Exception as error:
            raise GenerationFailure(
                f"{agent_name} failed: {type(error).__name__}: {error}",
                agent_name=agent_name,
            ) from error

        retry_budget = budget_seconds * self.retry_multiplier
        if deadline is not None:
            remaining = deadline - loop.time()
            if remaining <= 0:
                message = (
                    f"Request timed out at the phase deadline: {_describe(first_error, budget_seconds)}"
                )
                logger.warning(f"{agent_name}: {message}; not retrying")
                raise GenerationTimeout(message, agent_name=agent_name) from first_error
            retry_budget = min(retry_budget, remaining)

        logger.warning(
            f"Request to {agent_name} timed out after {budget_seconds:.2f}s, "
            f"retrying with {retry_budget:.2f}s timeout..."
        )
        await self._emit(
            "generation_retry",
            {
                "agent_name": agent_name,
                "budget_seconds": budget_seconds,
                "retry_budget_seconds": retry_budget,
                "reason": _describe(first_error, budget_seconds),
            },
        )

        try:
            return await asyncio.wait_for(call(), timeout=retry_budget)
        except Exception as retry_error:
            message = (
                f"Request failed after retry: {_describe(retry_error, retry_budget)} "
                f"(first attempt: {_describe(first_error, budget_seconds)})"
            )
            logger.error(f"{agent_name}: {message}")
            if is_timeout(retry_error):
                raise GenerationTimeout(message, agent_name=agent_name) from retry_error
            raise GenerationFailure(message, agent_name=agent_name) from retry_error

    async def _emit(self, event_type: str, data: dict) -> None:
        if self._event_callback is not None:
            await self._event_callback(event_type, data)


def _describe(error: BaseException, budget_seconds: float) -> str:
    if isinstance(error, TimeoutError) and not str(error):
        return f"Model generation timeout after {budget_seconds:.2f}s"
    return str(error) or type(error).__name__

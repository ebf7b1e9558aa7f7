"""Concurrent preparation for both sides under one shared deadline.

Each side runs in its own task and owns a ``SideProgress`` record. Streaming
agents are consumed through their async chunk iterator, and every chunk is
appended to the record before the next one is requested. The coordinator
only reads the records: it waits for the earliest of the shared deadline or
both tasks finishing, then takes whatever content each side has.

Sides still running at the deadline are not cancelled. They finish in the
background and their output is discarded once the records are sealed.
Non-streaming calls are capped at the shared deadline, so a retry never
starts once the phase is over.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from .exceptions import GenerationTimeout, PhaseFailure
from .executor import TimeoutRetryExecutor
from .types import DebatePhase, EventCallback, Position
from .utils import count_words

if TYPE_CHECKING:
    from podium.models.providers.base_agent import PositionAgent
    from .models import DebateContext

logger = logging.getLogger(__name__)


@dataclass
class PreparationAssignment:
    """What one side is asked to prepare."""

    position: Position
    agent: PositionAgent
    prompt: str
    context: DebateContext


@dataclass
class SideProgress:
    """Accumulated output of one side. Written only by that side's task."""

    position: Position
    agent_name: str
    content: str = ""
    word_count: int = 0
    complete: bool = False
    error: Exception | None = None
    sealed: bool = False

    def append(self, chunk: str) -> bool:
        """Record one chunk; returns False once the record is sealed."""
        if self.sealed:
            return False
        content = self.content + chunk
        self.content, self.word_count = content, count_words(content)
        return True

    def finish(self, content: str | None = None) -> None:
        if self.sealed:
            return
        if content is not None:
            self.content, self.word_count = content, count_words(content)
        self.complete = True

    def fail(self, error: Exception) -> None:
        if self.sealed:
            logger.debug(f"Ignoring late failure from {self.agent_name}: {error}")
            return
        self.error = error

    def seal(self) -> None:
        self.sealed = True

    @property
    def finished(self) -> bool:
        return self.complete or self.error is not None


@dataclass
class PreparationResult:
    """One side's resolved preparation output."""

    position: Position
    agent_name: str
    content: str
    word_count: int
    completed: bool
    timed_out: bool = False
    salvaged: bool = False
    error: str | None = None


@dataclass
class PreparationCoordinator:
    """Runs both sides' preparation concurrently against ``phase_budget`` seconds."""

    executor: TimeoutRetryExecutor
    phase_budget: float
    call_budget: float
    event_callback: EventCallback | None = None

    # Strong references to side tasks that may outlive the coordinator
    _background: ClassVar[set[asyncio.Task[None]]] = set()

    async def run(
        self, assignments: list[PreparationAssignment]
    ) -> dict[Position, PreparationResult]:
        """Resolve when every side has finished or the shared deadline passes.

        Raises:
            PhaseFailure: A side failed before the deadline with no content to salvage
        """
        progress = {
            a.position: SideProgress(position=a.position, agent_name=a.agent.name)
            for a in assignments
        }
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.phase_budget
        tasks: dict[asyncio.Task[None], Position] = {}
        for assignment in assignments:
            task = asyncio.create_task(
                self._prepare_side(assignment, progress[assignment.position], deadline),
                name=f"preparation-{assignment.position.value}",
            )
            self._background.add(task)
            task.add_done_callback(self._background.discard)
            tasks[task] = assignment.position

        results: dict[Position, PreparationResult] = {}
        pending = set(tasks)
        expired: set[asyncio.Task[None]] = set()

        try:
            while pending:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    break
                done, pending = await asyncio.wait(
                    pending, timeout=remaining, return_when=asyncio.FIRST_COMPLETED
                )
                for task in done:
                    side = progress[tasks[task]]
                    if side.finished:
                        results[side.position] = await self._resolve_finished(side)
                    else:
                        # Ran into the shared deadline without finishing
                        expired.add(task)
        finally:
            for side in progress.values():
                side.seal()

        # Sides that finished exactly at the deadline still count as finished
        for task in [t for t in pending if progress[tasks[t]].finished]:
            pending.discard(task)
            side = progress[tasks[task]]
            results[side.position] = await self._resolve_finished(side)

        pending |= expired
        if pending:
            logger.warning(
                f"Preparation time limit of {self.phase_budget:g} seconds reached. "
                "Proceeding to next phase..."
            )
            for task in pending:
                side = progress[tasks[task]]
                results[side.position] = await self._resolve_timed_out(side)

        return results

    async def _prepare_side(
        self, assignment: PreparationAssignment, side: SideProgress, deadline: float
    ) -> None:
        """Produce one side's preparation; failures are recorded on ``side``."""
        agent = assignment.agent
        try:
            if agent.supports_streaming():
                async for chunk in agent.generate_stream(
                    assignment.prompt, assignment.context
                ):
                    if side.append(chunk):
                        await self._emit(
                            "preparation_chunk",
                            {
                                "agent_name": side.agent_name,
                                "position": side.position.value,
                                "phase": DebatePhase.PREPARATION.value,
                                "chunk": chunk,
                                "word_count": side.word_count,
                            },
                        )
                side.finish()
            else:
                # The shared deadline caps both attempts, so no retry starts after it
                text = await self.executor.generate_with_timeout(
                    agent,
                    assignment.prompt,
                    assignment.context,
                    self.call_budget,
                    deadline=deadline,
                )
                side.finish(text)
        except GenerationTimeout as error:
            if asyncio.get_running_loop().time() >= deadline:
                logger.debug(f"{side.agent_name} stopped at the preparation deadline: {error}")
                return
            side.fail(error)
        except Exception as error:
            logger.debug(f"Preparation task for {side.agent_name} failed: {error}")
            side.fail(error)

    async def _resolve_finished(self, side: SideProgress) -> PreparationResult:
        if side.error is None:
            logger.info(
                f"{side.agent_name} ({side.position.value}) finished preparation: {side.word_count} words"
            )
            await self._emit(
                "preparation_complete",
                {
                    "agent_name": side.agent_name,
                    "position": side.position.value,
                    "word_count": side.word_count,
                },
            )
            return self._result(side, completed=True)

        error = side.error
        if not side.content:
            logger.error(
                f"Preparation failed for {side.agent_name} ({side.position.value}) with no partial content: {error}"
            )
            raise PhaseFailure(
                f"Preparation failed for {side.agent_name} ({side.position.value}) "
                f"with no content to salvage: {error}",
                agent_name=side.agent_name,
            ) from error

        logger.warning(
            f"Using partial content from {side.agent_name} ({side.word_count} words) after error: {error}"
        )
        await self._emit("preparation_salvaged", self._partial_event(side))
        return self._result(side, completed=False, salvaged=True, error=str(error))

    async def _resolve_timed_out(self, side: SideProgress) -> PreparationResult:
        logger.warning(
            f"{side.agent_name} ({side.position.value}) did not finish preparing; "
            f"keeping {side.word_count} words"
        )
        await self._emit("preparation_timeout", self._partial_event(side))
        return self._result(side, completed=False, timed_out=True)

    def _result(self, side: SideProgress, **status: Any) -> PreparationResult:
        return PreparationResult(
            position=side.position,
            agent_name=side.agent_name,
            content=side.content,
            word_count=side.word_count,
            **status,
        )

    def _partial_event(self, side: SideProgress) -> dict[str, Any]:
        return {
            "agent_name": side.agent_name,
            "position": side.position.value,
            "partial_content": side.content,
            "word_count": side.word_count,
        }

    async def _emit(self, event_type: str, data: dict[str, Any]) -> None:
        if self.event_callback is not None:
            await self.event_callback(event_type, data)

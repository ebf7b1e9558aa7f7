"""Core debate engine for orchestrating two-party debates."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import replace
from datetime import datetime
from typing import TYPE_CHECKING, Any
import logging
import time

from podium.config.settings import DebateConfig
from .context_builder import ContextBuilder
from .error_handler import CriticalErrorHandler, TranscriptStore
from .exceptions import DebateEngineError, InvalidTopic
from .executor import TimeoutRetryExecutor
from .models import Debate, DebateContext, DebateRound, Statement
from .preparation import PreparationAssignment, PreparationCoordinator
from .prompt_builder import PromptBuilder
from .state_machine import PhaseStateMachine
from .types import DebatePhase, EventCallback, Position
from .utils import count_words, enforce_word_limit

if TYPE_CHECKING:
    from podium.models.providers.base_agent import PositionAgent

logger = logging.getLogger(__name__)

type StatementPair = tuple[Statement, Statement]


class DebateOrchestrator:
    """Runs the phases of a debate in order.

    Every phase operation validates the transition before contacting an
    agent, appends exactly one round and returns a new ``Debate``. Failures
    inside a phase are recorded by the critical error handler, which moves
    the passed-in debate to ERROR, and then re-raised.
    """

    def __init__(
        self,
        transcript_store: TranscriptStore | None = None,
        event_callback: EventCallback | None = None,
    ):
        self._event_callback = event_callback
        self.state_machine = PhaseStateMachine()
        self.context_builder = ContextBuilder()
        self.prompt_builder = PromptBuilder()
        self.executor = TimeoutRetryExecutor(event_callback=event_callback)
        self.error_handler = CriticalErrorHandler(transcript_store, event_callback)

    def initialize_debate(
        self,
        topic: str,
        config: DebateConfig,
        pro_agent: PositionAgent,
        con_agent: PositionAgent,
    ) -> Debate:
        """Create a new debate in the INITIALIZED phase."""
        if not topic or not topic.strip():
            raise InvalidTopic(
                "Invalid debate topic: Topic must contain at least one non-whitespace character"
            )

        debate = Debate(
            topic=topic,
            config=config,
            pro_agent=pro_agent,
            con_agent=con_agent,
        )
        logger.info(
            f"Initialized debate {debate.id}: '{topic}' ({pro_agent.name} vs {con_agent.name})"
        )
        return debate

    def get_current_state(self, debate: Debate) -> DebatePhase:
        return self.state_machine.get_current_state(debate)

    async def execute_preparation(self, debate: Debate) -> Debate:
        """Both sides research the topic concurrently under the shared preparation budget."""

        async def produce() -> StatementPair:
            config = debate.config
            coordinator = PreparationCoordinator(
                executor=self.executor,
                phase_budget=config.preparation_time,
                call_budget=min(config.time_limit, config.preparation_time),
                event_callback=self._event_callback,
            )
            assignments = [
                PreparationAssignment(
                    position=position,
                    agent=debate.agent_for(position),
                    prompt=self.prompt_builder.preparation_prompt(debate.topic, position),
                    context=self.context_builder.build(
                        debate, position, DebatePhase.PREPARATION
                    ),
                )
                for position in Position
            ]
            results = await coordinator.run(assignments)
            pro, con = (
                Statement.create(r.agent_name, r.position, r.content)
                for r in (results[Position.PRO], results[Position.CON])
            )
            return pro, con

        return await self._run_phase(debate, DebatePhase.PREPARATION, produce)

    async def execute_opening_statements(self, debate: Debate) -> Debate:
        """The pro side opens, then the con side."""

        async def produce() -> StatementPair:
            pro, con = [
                await self._generate_statement(
                    debate,
                    position,
                    DebatePhase.OPENING,
                    self.prompt_builder.opening_prompt(debate.topic, position),
                )
                for position in Position
            ]
            return pro, con

        return await self._run_phase(debate, DebatePhase.OPENING, produce)

    async def execute_rebuttals(self, debate: Debate) -> Debate:
        """Each side answers the opponent's opening statement."""

        async def produce() -> StatementPair:
            opening = debate.round_for(DebatePhase.OPENING)
            statements: list[Statement] = []
            for position in Position:
                opponent_opening = opening.statement_for(position.opponent) if opening else None
                statements.append(
                    await self._generate_statement(
                        debate,
                        position,
                        DebatePhase.REBUTTAL,
                        self.prompt_builder.rebuttal_prompt(
                            debate.topic,
                            position,
                            opponent_opening.content if opponent_opening else "",
                        ),
                    )
                )
            return statements[0], statements[1]

        return await self._run_phase(debate, DebatePhase.REBUTTAL, produce)

    async def execute_cross_examination(self, debate: Debate) -> Debate:
        """Pro asks, con answers, con asks, pro answers; strictly one call at a time."""

        async def produce() -> StatementPair:
            phase = DebatePhase.CROSS_EXAMINATION
            pro_context = self.context_builder.build(debate, Position.PRO, phase)
            con_context = self.context_builder.build(debate, Position.CON, phase)
            builder = self.prompt_builder
            start_time = time.time()

            pro_question = await self._generate_text(
                debate,
                Position.PRO,
                builder.cross_examination_question_prompt(
                    debate.topic, Position.PRO, builder.format_previous_statements(pro_context)
                ),
                pro_context,
            )
            con_answer = await self._generate_text(
                debate,
                Position.CON,
                builder.cross_examination_answer_prompt(debate.topic, Position.CON, pro_question),
                con_context,
            )
            con_question = await self._generate_text(
                debate,
                Position.CON,
                builder.cross_examination_question_prompt(
                    debate.topic, Position.CON, builder.format_previous_statements(con_context)
                ),
                con_context,
            )
            pro_answer = await self._generate_text(
                debate,
                Position.PRO,
                builder.cross_examination_answer_prompt(debate.topic, Position.PRO, con_question),
                pro_context,
            )

            pro = Statement.create(
                debate.pro_agent.name,
                Position.PRO,
                f"Question: {pro_question}\n\nResponse to opponent: {pro_answer}",
            )
            con = Statement.create(
                debate.con_agent.name,
                Position.CON,
                f"Response to opponent: {con_answer}\n\nQuestion: {con_question}",
            )
            elapsed_ms = int((time.time() - start_time) * 1000)
            for statement in (pro, con):
                await self._emit_message(statement, phase, generation_time_ms=elapsed_ms)
            return pro, con

        return await self._run_phase(debate, DebatePhase.CROSS_EXAMINATION, produce)

    async def execute_closing_statements(self, debate: Debate) -> Debate:
        """Each side closes with every prior statement in view."""

        async def produce() -> StatementPair:
            summary_context = self.context_builder.build(
                debate, Position.PRO, DebatePhase.CLOSING
            )
            debate_summary = self.prompt_builder.format_previous_statements(summary_context)
            pro, con = [
                await self._generate_statement(
                    debate,
                    position,
                    DebatePhase.CLOSING,
                    self.prompt_builder.closing_prompt(debate.topic, position, debate_summary),
                )
                for position in Position
            ]
            return pro, con

        return await self._run_phase(debate, DebatePhase.CLOSING, produce)

    def complete_debate(self, debate: Debate) -> Debate:
        """Mark a debate whose closing statements are recorded as completed."""
        phase = self.state_machine.transition(debate.phase, DebatePhase.COMPLETED)
        completed = replace(
            debate,
            phase=phase,
            rounds=list(debate.rounds),
            errors=list(debate.errors),
            completed_at=datetime.now(),
        )
        duration = (completed.completed_at - completed.created_at).total_seconds()
        logger.info(f"Debate {debate.id} completed in {duration:.1f}s with {len(completed.rounds)} rounds")
        return completed

    async def run_full_debate(self, debate: Debate) -> Debate:
        """Run every phase in order and complete the debate.

        Raises:
            DebateEngineError: A step failed; its ``debate`` attribute holds the
                debate as it stood when the step failed, in the ERROR phase
        """
        logger.info(f"Starting full debate execution for {debate.id}")
        steps: list[Callable[[Debate], Awaitable[Debate]]] = [
            self.execute_preparation,
            self.execute_opening_statements,
            self.execute_rebuttals,
            self.execute_cross_examination,
            self.execute_closing_statements,
        ]
        for step in steps:
            try:
                debate = await step(debate)
            except DebateEngineError as error:
                # The failed step moved its input to ERROR; hand that value back
                error.debate = debate
                raise
        return self.complete_debate(debate)

    async def _run_phase(
        self,
        debate: Debate,
        phase: DebatePhase,
        produce: Callable[[], Awaitable[StatementPair]],
    ) -> Debate:
        """Validate, produce both statements, and return the debate with one new round."""
        self.state_machine.validate(debate.phase, phase)

        try:
            await self._emit_phase("phase_started", debate, phase)
            pro, con = await produce()
            updated = replace(
                debate,
                phase=self.state_machine.transition(debate.phase, phase),
                rounds=[*debate.rounds, DebateRound(phase=phase, pro_statement=pro, con_statement=con)],
                errors=list(debate.errors),
            )
            await self._emit_phase("phase_completed", updated, phase)
        except Exception as error:
            await self.error_handler.handle(debate, error, phase)
            raise

        logger.info(f"Debate {debate.id}: {phase.value} recorded ({pro.word_count} / {con.word_count} words)")
        return updated

    async def _generate_statement(
        self,
        debate: Debate,
        position: Position,
        phase: DebatePhase,
        prompt: str,
    ) -> Statement:
        context = self.context_builder.build(debate, position, phase)
        start_time = time.time()
        content = await self._generate_text(debate, position, prompt, context)
        generation_time = time.time() - start_time

        statement = Statement.create(debate.agent_for(position).name, position, content)
        await self._emit_message(
            statement, phase, generation_time_ms=int(generation_time * 1000)
        )
        return statement

    async def _generate_text(
        self,
        debate: Debate,
        position: Position,
        prompt: str,
        context: DebateContext,
    ) -> str:
        """One generation call under the per-call budget, trimmed to the word limit."""
        agent = debate.agent_for(position)
        budget = debate.config.time_limit

        if agent.supports_streaming():
            attempts = 0

            async def stream_attempt() -> str:
                nonlocal attempts
                attempts += 1
                if attempts > 1:
                    # Chunks from the timed-out attempt were already emitted
                    await self._emit(
                        "statement_reset",
                        {
                            "agent_name": agent.name,
                            "position": context.position.value,
                            "phase": context.phase.value,
                        },
                    )
                return await self._collect_stream(agent, prompt, context)

            response = await self.executor.run(
                stream_attempt, budget, agent_name=agent.name
            )
        else:
            response = await self.executor.generate_with_timeout(
                agent, prompt, context, budget
            )

        return enforce_word_limit(response.strip(), debate.config.word_limit)

    async def _collect_stream(
        self, agent: PositionAgent, prompt: str, context: DebateContext
    ) -> str:
        content = ""
        async for chunk in agent.generate_stream(prompt, context):
            content += chunk
            await self._emit(
                "statement_chunk",
                {
                    "agent_name": agent.name,
                    "position": context.position.value,
                    "phase": context.phase.value,
                    "chunk": chunk,
                    "word_count": count_words(content),
                },
            )
        return content

    async def _emit_phase(self, event_type: str, debate: Debate, phase: DebatePhase) -> None:
        await self._emit(
            event_type,
            {"debate_id": debate.id, "phase": phase.value, "round_count": len(debate.rounds)},
        )

    async def _emit_message(
        self, statement: Statement, phase: DebatePhase, generation_time_ms: int
    ) -> None:
        await self._emit(
            "message_complete",
            {
                "agent_name": statement.agent_name,
                "position": statement.position.value,
                "phase": phase.value,
                "content": statement.content,
                "word_count": statement.word_count,
                "generation_time_ms": generation_time_ms,
            },
        )

    async def _emit(self, event_type: str, data: dict[str, Any]) -> None:
        if self._event_callback is not None:
            await self._event_callback(event_type, data)

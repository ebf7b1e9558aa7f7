#!/usr/bin/env python3
"""Command-line entry point for running a single debate."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from podium.config.settings import AppConfig, get_default_config
from podium.console import ConsoleReporter
from podium.debate_engine import DebateEngineError, DebateOrchestrator, TranscriptManager
from podium.models.providers import AgentFactory, OllamaAgent, PositionAgent

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO"):
    """Configure logging for the command-line runner."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    # Suppress noisy third-party loggers
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="podium",
        description="Run a structured debate between two language models.",
    )
    parser.add_argument("--config", type=Path, help="Path to a JSON or YAML config file")
    parser.add_argument("--topic", help="Debate topic (overrides the config file)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (overrides the config file)",
    )
    return parser.parse_args(argv)


async def backends_available(agents: list[PositionAgent]) -> bool:
    """Check that every local Ollama server an agent depends on is reachable."""
    available = True
    for agent in agents:
        if isinstance(agent, OllamaAgent) and not await agent.is_running():
            logger.error(
                f"Ollama server for {agent.name} is not reachable at "
                f"{agent.system_config.ollama_base_url}. Is 'ollama serve' running?"
            )
            available = False
    return available


async def run_debate(config: AppConfig, topic: str) -> int:
    """Run one debate end to end and return the process exit code."""
    transcripts = TranscriptManager(config.system.transcript_dir)
    reporter = ConsoleReporter(show_preparation=config.debate.show_preparation)
    orchestrator = DebateOrchestrator(
        transcript_store=transcripts if config.system.save_transcripts else None,
        event_callback=reporter,
    )

    pro_agent = AgentFactory.create_agent(config.models["pro"], config.system)
    con_agent = AgentFactory.create_agent(config.models["con"], config.system)
    if not await backends_available([pro_agent, con_agent]):
        return 1

    debate = orchestrator.initialize_debate(topic, config.debate, pro_agent, con_agent)

    try:
        debate = await orchestrator.run_full_debate(debate)
    except DebateEngineError as e:
        failed = e.debate or debate
        logger.error(f"Debate {failed.id} ended in {failed.phase.value}: {e}")
        return 1

    if config.system.save_transcripts:
        path = await asyncio.to_thread(transcripts.save_transcript, debate)
        print(f"\nTranscript saved to: {path}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = get_default_config(args.config)
    except (OSError, ValueError) as e:
        setup_logging()
        logger.error(f"Could not load configuration: {e}")
        return 1

    setup_logging(args.log_level or config.system.log_level)

    topic = args.topic or config.debate.topic
    if not topic:
        logger.error("No debate topic given; pass --topic or set debate.topic in the config")
        return 1

    try:
        return asyncio.run(run_debate(config, topic))
    except (DebateEngineError, ValueError) as e:
        logger.error(f"Debate could not start: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nDebate interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())

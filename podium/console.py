"""Live console output for a running debate."""

import sys
from typing import Any, TextIO

SIDE_LABELS = {"pro": "AFFIRMATIVE", "con": "NEGATIVE"}


class ConsoleReporter:
    """Event callback that prints debate progress as it happens.

    Pass an instance as ``event_callback`` to ``DebateOrchestrator``.
    """

    def __init__(self, show_preparation: bool = True, stream: TextIO = sys.stdout):
        self.show_preparation = show_preparation
        self.stream = stream
        self._streaming_agent: str | None = None

    async def __call__(self, event_type: str, data: dict[str, Any]) -> None:
        handler = getattr(self, f"_on_{event_type}", None)
        if handler is not None:
            handler(data)

    def _write(self, text: str = "") -> None:
        self.stream.write(text + "\n")
        self.stream.flush()

    def _end_stream(self) -> None:
        if self._streaming_agent is not None:
            self._write()
            self._streaming_agent = None

    def _on_phase_started(self, data: dict[str, Any]) -> None:
        self._end_stream()
        title = data["phase"].replace("_", " ").upper()
        self._write()
        self._write(f"=== {title} ===")

    def _on_preparation_chunk(self, data: dict[str, Any]) -> None:
        if self.show_preparation:
            self._on_statement_chunk(data)

    def _on_statement_chunk(self, data: dict[str, Any]) -> None:
        agent = data["agent_name"]
        if self._streaming_agent != agent:
            self._end_stream()
            self._write(f"[{agent} ({SIDE_LABELS[data['position']]})]")
            self._streaming_agent = agent
        self.stream.write(data["chunk"])
        self.stream.flush()

    def _on_preparation_complete(self, data: dict[str, Any]) -> None:
        self._end_stream()
        self._write(f"{data['agent_name']} finished preparing ({data['word_count']} words)")

    def _on_preparation_timeout(self, data: dict[str, Any]) -> None:
        self._end_stream()
        self._write(
            f"{data['agent_name']} ran out of preparation time; "
            f"using {data['word_count']} words of partial notes"
        )

    def _on_preparation_salvaged(self, data: dict[str, Any]) -> None:
        self._end_stream()
        self._write(
            f"{data['agent_name']} hit an error while preparing; "
            f"keeping {data['word_count']} words"
        )

    def _on_generation_retry(self, data: dict[str, Any]) -> None:
        self._end_stream()
        self._write(
            f"{data['agent_name']} timed out, retrying with "
            f"{data['retry_budget_seconds']:.0f}s..."
        )

    def _on_statement_reset(self, data: dict[str, Any]) -> None:
        self._end_stream()
        self._write(f"(discarding partial response from {data['agent_name']})")

    def _on_message_complete(self, data: dict[str, Any]) -> None:
        streamed = self._streaming_agent == data["agent_name"]
        self._end_stream()
        if streamed:
            return
        self._write(f"[{data['agent_name']} ({SIDE_LABELS[data['position']]})]")
        self._write(data["content"])

    def _on_debate_error(self, data: dict[str, Any]) -> None:
        self._end_stream()
        self._write(f"Debate failed: {data['message']}")
        if data.get("partial_transcript"):
            self._write(f"Partial transcript: {data['partial_transcript']}")

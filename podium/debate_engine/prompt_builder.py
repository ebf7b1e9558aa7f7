"""Prompt text for each debate phase and chat-message assembly for agents."""

from .models import DebateContext
from .types import DebatePhase, Position

SIDE_LABELS = {
    Position.PRO: "Affirmative",
    Position.CON: "Negative",
}

STANCES = {
    Position.PRO: "You support the motion and argue that it is correct.",
    Position.CON: "You oppose the motion and argue that it is wrong.",
}


class PromptBuilder:
    """Builds phase prompts and the message list sent to chat-style backends."""

    def preparation_prompt(self, topic: str, position: Position) -> str:
        return (
            f'Prepare for a formal debate on: "{topic}". '
            f"You argue the {SIDE_LABELS[position].lower()} side. "
            "Research the topic and list your strongest arguments, supporting evidence "
            "and the objections you expect from your opponent."
        )

    def opening_prompt(self, topic: str, position: Position) -> str:
        return (
            f'Deliver your opening statement on: "{topic}". '
            "Present your main arguments clearly and persuasively."
        )

    def rebuttal_prompt(self, topic: str, position: Position, opponent_opening: str) -> str:
        return (
            f'Deliver your rebuttal on: "{topic}". '
            "Address the weaknesses in your opponent's opening statement:\n\n"
            f"{opponent_opening}"
        )

    def cross_examination_question_prompt(
        self, topic: str, position: Position, opponent_statements: str
    ) -> str:
        return (
            f'Cross-examination on: "{topic}". '
            "Ask your opponent one pointed question that exposes a weakness in their case. "
            f"Their statements so far:\n\n{opponent_statements}"
        )

    def cross_examination_answer_prompt(
        self, topic: str, position: Position, question: str
    ) -> str:
        return (
            f'Cross-examination on: "{topic}". '
            f"Answer your opponent's question directly and defend your position:\n\n{question}"
        )

    def closing_prompt(self, topic: str, position: Position, debate_summary: str) -> str:
        return (
            f'Deliver your closing statement on: "{topic}". '
            "Summarize your case and make your final appeal. The debate so far:\n\n"
            f"{debate_summary}"
        )

    def format_previous_statements(self, context: DebateContext) -> str:
        if not context.previous_statements:
            return "(no previous statements)"
        return "\n\n".join(
            f"[{SIDE_LABELS[s.position]} - {s.agent_name}]\n{s.content}"
            for s in context.previous_statements
        )

    def system_prompt(self, context: DebateContext) -> str:
        lines = [
            f'You are participating in a formal debate about: "{context.topic}"',
            f"YOUR SIDE: {SIDE_LABELS[context.position]}. {STANCES[context.position]}",
            f"CURRENT PHASE: {context.phase.value.replace('_', ' ')}",
        ]
        if context.word_limit and context.phase is not DebatePhase.PREPARATION:
            lines.append(f"WORD LIMIT: {context.word_limit} words")
        if context.preparation_material:
            lines.append(
                f"YOUR PRIVATE PREPARATION NOTES:\n{context.preparation_material}"
            )
        lines.append(
            "Speak directly as your side without labels, prefixes or markdown formatting."
        )
        return "\n\n".join(lines)

    def build_messages(self, prompt: str, context: DebateContext) -> list[dict[str, str]]:
        """Build the chat message list for a single generation call."""
        messages = [{"role": "system", "content": self.system_prompt(context)}]
        if context.previous_statements:
            messages.append(
                {
                    "role": "user",
                    "content": "Previous statements:\n\n"
                    + self.format_previous_statements(context),
                }
            )
        messages.append({"role": "user", "content": prompt})
        return messages

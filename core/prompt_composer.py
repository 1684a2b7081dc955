"""
core/prompt_composer.py

Builds the backend-agnostic system/user prompt pair for a provider call.

The system prompt is a fixed template read from `config/parenting_system_prompt.txt`
(voice and tone, safety escalation, formatting conventions). The user prompt carries
the request-specific parts: the quoted question, the child's age, an urgency tag when
it is above low, an optional research block from web search and the recent topics of
the session so the answer can acknowledge what was discussed before.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from shared.models import CallerContext, ConversationTurn, Level, QuestionAnalysis

CLOSING_INSTRUCTION = (
    "Provide helpful, practical parenting advice. Be concise, supportive, "
    "and focus on actionable solutions."
)


@dataclass(frozen=True)
class ComposedPrompt:
    system: str
    user: str


class PromptComposer:
    """
    Composes prompts from the question, caller hints, analysis, search text and memory.

    Args:
        system_prompt (str): The fixed system template.
        categorize_fn: Optional callable mapping a past question to its topic; when set,
            recent user turns are summarized as "Recent topics" in the user prompt.
    """

    def __init__(self, system_prompt: str, categorize_fn=None):
        self.system_prompt = system_prompt.strip()
        self.categorize = categorize_fn

    def compose(
        self,
        question: str,
        caller_context: Optional[CallerContext],
        analysis: QuestionAnalysis,
        search_text: str = "",
        memory_turns: Sequence[ConversationTurn] = (),
    ) -> ComposedPrompt:
        child_age = (caller_context.child_age if caller_context else None) or analysis.child_age
        urgency = (caller_context.urgency if caller_context and caller_context.urgency else analysis.urgency)

        user = f'Parent\'s Question: "{question.strip()}"\n\n'
        if child_age:
            user += f"Child's Age: {child_age}\n"
        if urgency is not Level.LOW:
            user += f"Urgency: {urgency.value}\n"
        if search_text:
            user += f"\nLatest Research:\n{search_text}\n"

        topics = self._recent_topics(memory_turns)
        if topics:
            user += f"\nRecent topics in this conversation: {', '.join(topics)}\n"

        user += f"\n{CLOSING_INSTRUCTION}"
        return ComposedPrompt(system=self.system_prompt, user=user)

    def _recent_topics(self, memory_turns: Sequence[ConversationTurn]):
        if self.categorize is None:
            return []
        topics = []
        for turn in memory_turns:
            if turn.role != "user":
                continue
            topic = self.categorize(turn.content)
            if topic not in topics:
                topics.append(topic)
        return topics

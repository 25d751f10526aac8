"""
Follow-up question suggestions shown after an answer.

Advisory only; any strategy can be swapped in through the conversation
manager's constructor.
"""

from abc import ABC, abstractmethod
from typing import List

from domain.models import MeetingTranscript, ScoredChunk
from shared_utils.constants import Defaults


class FollowupStrategy(ABC):
    """Produces follow-up questions for a completed exchange."""

    @abstractmethod
    def suggest(self, user_message: str, response: str, context_chunks: List[ScoredChunk]) -> List[str]:
        pass


class KeywordFollowupStrategy(FollowupStrategy):
    """Keyword triggers on the answer, plus a summary prompt."""

    TRIGGERS = (
        ("action item", "Who is responsible for each action item?"),
        ("decision", "What were the main factors in this decision?"),
        ("next step", "When are these next steps due?"),
    )
    SUMMARY_QUESTION = "Can you give me a quick summary?"

    def __init__(self, max_suggestions: int = Defaults.MAX_FOLLOWUPS):
        self.max_suggestions = max_suggestions

    def suggest(self, user_message: str, response: str, context_chunks: List[ScoredChunk]) -> List[str]:
        answer = response.lower()
        suggestions = [question for keyword, question in self.TRIGGERS if keyword in answer]
        if "summary" not in user_message.lower():
            suggestions.append(self.SUMMARY_QUESTION)
        return suggestions[: self.max_suggestions]


def meeting_starter_questions(
    transcript: MeetingTranscript,
    max_questions: int = Defaults.MAX_MEETING_SUGGESTIONS,
) -> List[str]:
    """Fixed starter questions chosen from what the meeting has on record."""
    questions = []
    if transcript.action_items:
        questions.append("What are the action items from this meeting?")
        questions.append("Who is responsible for each task?")
    if transcript.summary:
        questions.append("What were the main decisions made?")
        questions.append("What topics were discussed?")
    questions.append("Can you summarize this meeting in 30 seconds?")
    questions.append("What are the key takeaways?")
    return questions[:max_questions]

"""
Prompt and context assembly for grounded answers.
"""

from typing import List, Optional

from domain.models import ScoredChunk
from core_intelligence.engine.citations import format_timestamp

NO_ANSWER_REPLY = "I don't see information about that in the meeting transcript"

SYSTEM_PROMPT_TEMPLATE = f"""You are a helpful AI assistant that answers questions about meeting transcripts and notes.

INSTRUCTIONS:
1. Answer questions based ONLY on the provided meeting context
2. If the answer is not in the context, say "{NO_ANSWER_REPLY}"
3. Be concise and direct
4. When citing specific information, reference the meeting title and timestamp if available
5. If asked about action items, decisions, or key points, summarize them clearly

CONTEXT:
{{context}}"""


def build_context(
    chunks: List[ScoredChunk],
    meeting_title: Optional[str] = None,
    meeting_summary: Optional[str] = None,
) -> str:
    """Summary block (when known) followed by one block per chunk."""
    context = ""

    if meeting_summary:
        context += f"## Meeting Summary: {meeting_title or ''}\n{meeting_summary}\n\n"

    if chunks:
        context += "## Relevant Transcript Excerpts\n\n"
        for scored in chunks:
            chunk = scored.chunk
            timestamp = format_timestamp(chunk.start_time)
            header = f"**{chunk.meeting_title}**"
            if timestamp:
                header += f" [{timestamp}]"
            speaker = f"{chunk.speakers[0]}: " if chunk.speakers else ""
            context += f"{header}\n{speaker}{chunk.text}\n\n"

    return context


def build_system_prompt(context: str) -> str:
    return SYSTEM_PROMPT_TEMPLATE.format(context=context)

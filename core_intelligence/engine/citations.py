"""
Citation building from the chunks supplied to a generation call.
"""

from typing import List, Optional

from domain.models import Citation, ScoredChunk
from shared_utils.constants import Defaults


def format_timestamp(seconds: Optional[float]) -> Optional[str]:
    """``m:ss`` (or ``h:mm:ss`` past the hour); None when the time is unknown."""
    if seconds is None:
        return None
    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def _excerpt(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars].rstrip() + "..."


def build_citations(
    context_chunks: List[ScoredChunk],
    excerpt_chars: int = Defaults.CITATION_EXCERPT_CHARS,
) -> List[Citation]:
    """One citation per context chunk, in context order."""
    citations = []
    for scored in context_chunks:
        chunk = scored.chunk
        citations.append(
            Citation(
                meeting_id=chunk.meeting_id,
                meeting_title=chunk.meeting_title,
                timestamp=format_timestamp(chunk.start_time),
                text=_excerpt(chunk.text, excerpt_chars),
                speaker=chunk.speakers[0] if chunk.speakers else None,
                relevance=min(1.0, max(0.0, scored.similarity)),
                chunk_index=chunk.index,
            )
        )
    return citations

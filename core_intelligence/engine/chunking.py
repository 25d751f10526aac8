"""
Word-window chunking of transcript text and timed segments.

Token budgets are approximated by whitespace-delimited words: a window of
``words_per_chunk`` words is emitted when full and the next window is seeded
with its last ``overlap_words`` words.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from domain.models import SegmentChunk, TranscriptSegment
from shared_utils.constants import Defaults
from shared_utils.error_handler import ValidationError


@dataclass(frozen=True)
class _Word:
    text: str
    speaker: Optional[str] = None
    start_time: Optional[float] = None
    end_time: Optional[float] = None


@dataclass
class _Window:
    words: List[_Word] = field(default_factory=list)
    fresh: int = 0  # words added since the window was last seeded

    def to_chunk(self) -> SegmentChunk:
        speakers: List[str] = []
        starts = [w.start_time for w in self.words if w.start_time is not None]
        ends = [w.end_time for w in self.words if w.end_time is not None]
        for word in self.words:
            if word.speaker and word.speaker not in speakers:
                speakers.append(word.speaker)
        return SegmentChunk(
            text=" ".join(w.text for w in self.words),
            start_time=min(starts) if starts else None,
            end_time=max(ends) if ends else None,
            speakers=speakers,
        )


class TranscriptChunker:
    """Deterministic overlapping chunker."""

    def __init__(self, words_per_chunk: int, overlap_words: int):
        if words_per_chunk < 1:
            raise ValidationError("words_per_chunk must be >= 1")
        if overlap_words < 0 or overlap_words >= words_per_chunk:
            raise ValidationError(
                "overlap_words must be >= 0 and smaller than words_per_chunk",
                context={"words_per_chunk": words_per_chunk, "overlap_words": overlap_words},
            )
        self.words_per_chunk = words_per_chunk
        self.overlap_words = overlap_words

    @classmethod
    def from_token_budget(
        cls,
        chunk_size_tokens: int = Defaults.CHUNK_SIZE_TOKENS,
        overlap_tokens: int = Defaults.CHUNK_OVERLAP_TOKENS,
        words_per_token: float = Defaults.WORDS_PER_TOKEN,
    ) -> "TranscriptChunker":
        """500 tokens / 50 overlap at 0.75 words per token gives 375 / 37 words."""
        return cls(
            words_per_chunk=int(chunk_size_tokens * words_per_token),
            overlap_words=int(overlap_tokens * words_per_token),
        )

    @property
    def config(self) -> Tuple[int, int]:
        return self.words_per_chunk, self.overlap_words

    def chunk_text(self, text: str) -> List[str]:
        """Split plain text into overlapping chunk strings."""
        words = (_Word(text=w) for w in (text or "").split())
        return [c.text for c in self._run(words)]

    def chunk_segments(self, segments: Iterable[TranscriptSegment]) -> List[SegmentChunk]:
        """Split timed segments, carrying speakers and time span per chunk.

        Every word inherits its segment's speaker and timing, so a chunk
        spans the min start and max end of the segments it touches.
        """
        words = (
            _Word(
                text=w,
                speaker=segment.speaker,
                start_time=segment.start_time,
                end_time=segment.end_time,
            )
            for segment in segments
            for w in segment.text.split()
        )
        return self._run(words)

    def _run(self, words: Iterable[_Word]) -> List[SegmentChunk]:
        chunks: List[SegmentChunk] = []
        window = _Window()

        for word in words:
            window.words.append(word)
            window.fresh += 1
            if len(window.words) == self.words_per_chunk:
                chunks.append(window.to_chunk())
                seed = window.words[-self.overlap_words:] if self.overlap_words else []
                window = _Window(words=list(seed))

        # Trailing partial window; a window holding only the seeded overlap adds nothing new
        if window.fresh > 0:
            chunks.append(window.to_chunk())

        return chunks

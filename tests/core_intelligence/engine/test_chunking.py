"""
Tests for core_intelligence.engine.chunking.TranscriptChunker.
"""

import pytest

from core_intelligence.engine.chunking import TranscriptChunker
from domain.models import TranscriptSegment
from shared_utils.error_handler import ValidationError


def _words(n: int) -> str:
    return " ".join(f"w{i}" for i in range(1, n + 1))


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class TestConfiguration:
    def test_default_token_budget(self) -> None:
        chunker = TranscriptChunker.from_token_budget()
        assert chunker.config == (375, 37)

    def test_custom_token_budget(self) -> None:
        chunker = TranscriptChunker.from_token_budget(100, 20, 0.5)
        assert chunker.config == (50, 10)

    def test_overlap_must_be_smaller_than_chunk(self) -> None:
        with pytest.raises(ValidationError):
            TranscriptChunker(words_per_chunk=3, overlap_words=3)

    def test_chunk_size_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            TranscriptChunker(words_per_chunk=0, overlap_words=0)


# ---------------------------------------------------------------------------
# chunk_text
# ---------------------------------------------------------------------------

class TestChunkText:
    def test_empty_input(self) -> None:
        chunker = TranscriptChunker(4, 1)
        assert chunker.chunk_text("") == []
        assert chunker.chunk_text("   \n\t ") == []

    def test_short_text_is_one_chunk(self) -> None:
        assert TranscriptChunker(4, 1).chunk_text("a b c") == ["a b c"]

    def test_overlap_seeds_next_chunk(self) -> None:
        chunks = TranscriptChunker(4, 1).chunk_text(_words(8))
        assert chunks == ["w1 w2 w3 w4", "w4 w5 w6 w7", "w7 w8"]

    def test_trailing_partial_window_is_emitted(self) -> None:
        chunks = TranscriptChunker(2, 0).chunk_text(_words(5))
        assert chunks == ["w1 w2", "w3 w4", "w5"]

    def test_exact_fit_adds_no_overlap_only_chunk(self) -> None:
        chunks = TranscriptChunker(4, 1).chunk_text(_words(7))
        assert chunks == ["w1 w2 w3 w4", "w4 w5 w6 w7"]

    def test_whitespace_is_normalised(self) -> None:
        assert TranscriptChunker(10, 2).chunk_text("a\n\nb\t c") == ["a b c"]

    def test_every_word_is_covered(self) -> None:
        text = _words(1000)
        chunks = TranscriptChunker(375, 37).chunk_text(text)
        covered = set()
        for chunk in chunks:
            covered.update(chunk.split())
        assert covered == set(text.split())
        assert all(len(c.split()) <= 375 for c in chunks)

    def test_thousand_words_gives_three_chunks(self) -> None:
        chunks = TranscriptChunker(375, 37).chunk_text(_words(1000))

        assert len(chunks) == 3
        assert chunks[1].split()[:37] == chunks[0].split()[-37:]
        assert chunks[2].split()[:37] == chunks[1].split()[-37:]
        assert [len(c.split()) for c in chunks] == [375, 375, 324]

    def test_deterministic(self) -> None:
        chunker = TranscriptChunker(5, 2)
        text = _words(37)
        assert chunker.chunk_text(text) == chunker.chunk_text(text)


# ---------------------------------------------------------------------------
# chunk_segments
# ---------------------------------------------------------------------------

class TestChunkSegments:
    def test_empty_segments(self) -> None:
        assert TranscriptChunker(4, 1).chunk_segments([]) == []

    def test_speakers_and_times_follow_window(self) -> None:
        segments = [
            TranscriptSegment(speaker="Alice", text="one two", start_time=0.0, end_time=5.0),
            TranscriptSegment(speaker="Bob", text="three four five", start_time=5.0, end_time=10.0),
        ]
        chunks = TranscriptChunker(3, 1).chunk_segments(segments)

        assert [c.text for c in chunks] == ["one two three", "three four five"]
        assert chunks[0].speakers == ["Alice", "Bob"]
        assert (chunks[0].start_time, chunks[0].end_time) == (0.0, 10.0)
        assert chunks[1].speakers == ["Bob"]
        assert (chunks[1].start_time, chunks[1].end_time) == (5.0, 10.0)

    def test_speakers_keep_first_appearance_order(self) -> None:
        segments = [
            TranscriptSegment(speaker="Carol", text="hi"),
            TranscriptSegment(speaker="Alice", text="hello"),
            TranscriptSegment(speaker="Carol", text="bye"),
        ]
        chunks = TranscriptChunker(10, 2).chunk_segments(segments)
        assert chunks[0].speakers == ["Carol", "Alice"]

    def test_untimed_segments_have_no_times(self) -> None:
        segments = [TranscriptSegment(speaker="Alice", text="no timing here")]
        chunk = TranscriptChunker(10, 2).chunk_segments(segments)[0]
        assert chunk.start_time is None
        assert chunk.end_time is None

    def test_sample_transcript(self, sample_transcript) -> None:
        chunks = TranscriptChunker(20, 5).chunk_segments(sample_transcript.segments)
        assert len(chunks) >= 2
        assert chunks[0].start_time == 0.0
        assert chunks[-1].end_time == 90.0

    def test_consecutive_chunks_share_exact_overlap(self) -> None:
        segments = [
            TranscriptSegment(
                speaker=f"S{i % 3}",
                text=" ".join(f"s{i}w{j}" for j in range(5)),
                start_time=i * 10.0,
                end_time=i * 10.0 + 9.0,
            )
            for i in range(20)
        ]
        chunks = TranscriptChunker(10, 3).chunk_segments(segments)

        assert len(chunks) > 5
        assert len(chunks[0].text.split()) == 10
        for previous, current in zip(chunks, chunks[1:]):
            before, after = previous.text.split(), current.text.split()
            assert after[:3] == before[-3:]
            assert len(set(before) & set(after)) == 3

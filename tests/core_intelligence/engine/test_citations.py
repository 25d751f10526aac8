"""
Tests for core_intelligence.engine.citations.
"""

import pytest

from conftest import make_scored
from core_intelligence.engine.citations import build_citations, format_timestamp


class TestFormatTimestamp:
    @pytest.mark.parametrize(
        "seconds, expected",
        [
            (None, None),
            (0, "0:00"),
            (75, "1:15"),
            (75.9, "1:15"),
            (3725, "1:02:05"),
        ],
    )
    def test_formats(self, seconds, expected) -> None:
        assert format_timestamp(seconds) == expected


class TestBuildCitations:
    def test_one_citation_per_chunk_in_order(self) -> None:
        chunks = [make_scored(0.9, index=2), make_scored(0.8, index=5)]
        citations = build_citations(chunks)
        assert [c.chunk_index for c in citations] == [2, 5]

    def test_fields(self) -> None:
        citation = build_citations([make_scored(0.82, speakers=["Bob", "Alice"])])[0]
        assert citation.meeting_id == "m-1"
        assert citation.meeting_title == "Daily Standup"
        assert citation.timestamp == "1:15"
        assert citation.speaker == "Bob"
        assert citation.relevance == 0.82

    def test_excerpt_is_bounded(self) -> None:
        citation = build_citations([make_scored(text="word " * 100)], excerpt_chars=50)[0]
        assert citation.text.endswith("...")
        assert len(citation.text) <= 53

    def test_short_text_kept_whole(self) -> None:
        citation = build_citations([make_scored(text="Short.")])[0]
        assert citation.text == "Short."

    def test_missing_speaker_and_time(self) -> None:
        citation = build_citations([make_scored(speakers=[], start_time=None)])[0]
        assert citation.speaker is None
        assert citation.timestamp is None

    def test_relevance_clamped(self) -> None:
        citation = build_citations([make_scored(-0.2)])[0]
        assert citation.relevance == 0.0

    def test_empty(self) -> None:
        assert build_citations([]) == []

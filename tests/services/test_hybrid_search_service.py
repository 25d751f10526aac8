"""
Tests for services.hybrid_search_service.HybridSearchService.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from conftest import make_scored
from domain.models import DateRange, LexicalDocumentType, LexicalResult, ResultSource
from services.hybrid_search_service import HybridSearchService
from shared_utils.error_handler import ValidationError


def _lexical(meeting_id: str, score: float) -> LexicalResult:
    return LexicalResult(
        id=f"{meeting_id}:summary",
        type=LexicalDocumentType.SUMMARY,
        meeting_id=meeting_id,
        meeting_title=f"Meeting {meeting_id}",
        title="Summary",
        preview="...",
        score=score,
    )


@pytest.fixture()
def retrievers():
    semantic = MagicMock()
    semantic.search_similar.return_value = []
    lexical = MagicMock()
    lexical.search_text.return_value = []
    return semantic, lexical


@pytest.fixture()
def service(retrievers) -> HybridSearchService:
    semantic, lexical = retrievers
    return HybridSearchService(
        semantic_retriever=semantic, lexical_retriever=lexical, threshold=0.6, max_limit=50
    )


class TestHybridSearch:
    def test_merges_both_sources(self, service, retrievers) -> None:
        semantic, lexical = retrievers
        semantic.search_similar.return_value = [make_scored(0.8, meeting_id="m-1")]
        lexical.search_text.return_value = [_lexical("m-1", 0.9), _lexical("m-2", 0.4)]

        results = service.hybrid_search("org-1", "deploy")

        assert [r.meeting_id for r in results] == ["m-1", "m-2"]
        assert results[0].source == ResultSource.BOTH
        assert results[0].score == pytest.approx(0.9)
        assert results[1].source == ResultSource.LEXICAL

    def test_candidate_count_doubled_and_capped(self, service, retrievers) -> None:
        semantic, lexical = retrievers
        service.hybrid_search("org-1", "deploy", limit=5)
        assert semantic.search_similar.call_args[0][2] == 10
        assert semantic.search_similar.call_args[0][3] == 0.6
        service.hybrid_search("org-1", "deploy", limit=40)
        assert lexical.search_text.call_args[0][2] == 50

    def test_date_range_goes_to_lexical(self, service, retrievers) -> None:
        _, lexical = retrievers
        window = DateRange(start=datetime(2026, 1, 1, tzinfo=timezone.utc))
        service.hybrid_search("org-1", "deploy", date_range=window)
        assert lexical.search_text.call_args.kwargs["date_range"] == window

    def test_meeting_subset_scope(self, service, retrievers) -> None:
        semantic, _ = retrievers
        service.hybrid_search("org-1", "deploy", meeting_ids=["m-1", "m-2"])
        scope = semantic.search_similar.call_args[0][1]
        assert scope.meeting_ids == ["m-1", "m-2"]

    def test_limit_truncates(self, service, retrievers) -> None:
        _, lexical = retrievers
        lexical.search_text.return_value = [_lexical(f"m-{i}", 0.5) for i in range(6)]
        assert len(service.hybrid_search("org-1", "deploy", limit=3)) == 3

    def test_empty_query_rejected(self, service) -> None:
        with pytest.raises(ValidationError):
            service.hybrid_search("org-1", "  ")

"""
Tests for services.lexical_retriever.
"""

import pytest

from domain.models import (
    DateRange,
    LexicalDocument,
    LexicalDocumentType,
    LexicalHit,
    RetrievalScope,
)
from services.lexical_retriever import LexicalRetriever, normalize_score
from shared_utils.error_handler import ExternalServiceError


ORG_SCOPE = RetrievalScope(organization_id="org-1")


def _hit(score: float = 2.0, organization_id: str = "org-1", meeting_id: str = "m-1", content=None) -> LexicalHit:
    return LexicalHit(
        document=LexicalDocument(
            id=f"{meeting_id}:transcript",
            type=LexicalDocumentType.TRANSCRIPT,
            meeting_id=meeting_id,
            organization_id=organization_id,
            meeting_title="Daily Standup",
            title="Daily Standup",
            content=content or "We agreed to deploy on Friday. Deploy checklist is ready.",
        ),
        score=score,
        matched_terms=["deploy"],
    )


@pytest.fixture()
def retriever(mock_lexical_index) -> LexicalRetriever:
    return LexicalRetriever(lexical_index=mock_lexical_index)


class TestNormalizeScore:
    def test_zero_and_negative(self) -> None:
        assert normalize_score(0.0) == 0.0
        assert normalize_score(-3.0) == 0.0

    def test_bounded_and_monotonic(self) -> None:
        assert normalize_score(1.0) == pytest.approx(0.5)
        assert normalize_score(3.0) == pytest.approx(0.75)
        assert normalize_score(1000.0) < 1.0


class TestSearchText:
    def test_result_fields(self, retriever, mock_lexical_index) -> None:
        mock_lexical_index.search.return_value = [_hit(score=3.0)]
        results = retriever.search_text("deploy", ORG_SCOPE)

        assert len(results) == 1
        result = results[0]
        assert result.id == "m-1:transcript"
        assert result.score == pytest.approx(0.75)
        assert "**deploy**" in result.preview.lower()
        assert result.highlights
        assert all("**" in h for h in result.highlights)

    def test_operator_only_query_skips_backend(self, retriever, mock_lexical_index) -> None:
        assert retriever.search_text("&|!()", ORG_SCOPE) == []
        assert retriever.search_text("", ORG_SCOPE) == []
        mock_lexical_index.search.assert_not_called()

    def test_terms_and_filters_forwarded(self, retriever, mock_lexical_index) -> None:
        date_range = DateRange(start=None, end=None)
        retriever.search_text(
            "Deploy & Friday", ORG_SCOPE, limit=5,
            date_range=date_range, types=[LexicalDocumentType.SUMMARY],
        )
        mock_lexical_index.search.assert_called_once_with(
            ["deploy", "friday"], ORG_SCOPE, 5,
            date_range=date_range, types=[LexicalDocumentType.SUMMARY],
        )

    def test_foreign_hits_dropped(self, retriever, mock_lexical_index) -> None:
        mock_lexical_index.search.return_value = [_hit(organization_id="org-2"), _hit()]
        results = retriever.search_text("deploy", ORG_SCOPE)
        assert len(results) == 1

    def test_empty_subset(self, retriever, mock_lexical_index) -> None:
        scope = RetrievalScope(organization_id="org-1", meeting_ids=[])
        assert retriever.search_text("deploy", scope) == []
        mock_lexical_index.search.assert_not_called()

    def test_backend_failure_degrades(self, retriever, mock_lexical_index) -> None:
        mock_lexical_index.search.side_effect = ExternalServiceError("search", "down")
        assert retriever.search_text("deploy", ORG_SCOPE) == []

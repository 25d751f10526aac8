"""
Tests for services.semantic_retriever.SemanticRetriever.

Covers:
    - threshold filtering, ordering, limit
    - tenant scope re-check of backend results
    - degradation to [] on embedding / index failures
"""

import pytest

from conftest import make_scored
from domain.models import RetrievalScope
from services.semantic_retriever import SemanticRetriever
from shared_utils.error_handler import (
    ExternalServiceError,
    ProviderError,
    QuotaExceededError,
    ValidationError,
)


@pytest.fixture()
def retriever(mock_embedding_client, mock_vector_index) -> SemanticRetriever:
    return SemanticRetriever(
        embedding_client=mock_embedding_client,
        vector_index=mock_vector_index,
        threshold=0.7,
    )


ORG_SCOPE = RetrievalScope(organization_id="org-1")


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------

class TestRanking:
    def test_below_threshold_dropped(self, retriever, mock_vector_index) -> None:
        mock_vector_index.query_nearest.return_value = [
            make_scored(0.92, index=0),
            make_scored(0.69, index=1),
            make_scored(0.70, index=2),
        ]
        results = retriever.search_similar("deploy", ORG_SCOPE)
        assert [r.chunk.index for r in results] == [0, 2]

    def test_sorted_desc_ties_by_index(self, retriever, mock_vector_index) -> None:
        mock_vector_index.query_nearest.return_value = [
            make_scored(0.80, index=5),
            make_scored(0.95, index=3),
            make_scored(0.80, index=1),
        ]
        results = retriever.search_similar("deploy", ORG_SCOPE)
        assert [r.chunk.index for r in results] == [3, 1, 5]

    def test_limit_applied(self, retriever, mock_vector_index) -> None:
        mock_vector_index.query_nearest.return_value = [make_scored(0.9, index=i) for i in range(5)]
        assert len(retriever.search_similar("deploy", ORG_SCOPE, limit=2)) == 2

    def test_threshold_override(self, retriever, mock_vector_index) -> None:
        mock_vector_index.query_nearest.return_value = [make_scored(0.5)]
        assert retriever.search_similar("deploy", ORG_SCOPE, threshold=0.4)
        assert retriever.search_similar("deploy", ORG_SCOPE) == []

    def test_query_vector_sent_to_index(self, retriever, mock_vector_index) -> None:
        retriever.search_similar("deploy", ORG_SCOPE, limit=4)
        mock_vector_index.query_nearest.assert_called_once_with(ORG_SCOPE, [1.0, 0.0, 0.0], 4)


# ---------------------------------------------------------------------------
# Scoping
# ---------------------------------------------------------------------------

class TestScoping:
    def test_other_organization_filtered(self, retriever, mock_vector_index) -> None:
        mock_vector_index.query_nearest.return_value = [
            make_scored(0.9, organization_id="org-2", meeting_id="m-9"),
            make_scored(0.8),
        ]
        results = retriever.search_similar("deploy", ORG_SCOPE)
        assert [r.chunk.organization_id for r in results] == ["org-1"]

    def test_context_chunks_single_meeting(self, retriever, mock_vector_index) -> None:
        mock_vector_index.query_nearest.return_value = [
            make_scored(0.9, meeting_id="m-1"),
            make_scored(0.9, meeting_id="m-2"),
        ]
        results = retriever.get_context_chunks("org-1", "m-1", "deploy")
        assert [r.meeting_id for r in results] == ["m-1"]
        scope = mock_vector_index.query_nearest.call_args[0][0]
        assert scope.meeting_id == "m-1"

    def test_cross_meeting_subset(self, retriever, mock_vector_index) -> None:
        mock_vector_index.query_nearest.return_value = [
            make_scored(0.9, meeting_id="m-1"),
            make_scored(0.9, meeting_id="m-3", index=1),
        ]
        results = retriever.cross_meeting_search("org-1", "deploy", meeting_ids=["m-3"])
        assert [r.meeting_id for r in results] == ["m-3"]

    def test_empty_subset_returns_nothing(self, retriever, mock_vector_index, mock_embedding_client) -> None:
        assert retriever.cross_meeting_search("org-1", "deploy", meeting_ids=[]) == []
        mock_embedding_client.embed.assert_not_called()
        mock_vector_index.query_nearest.assert_not_called()

    def test_missing_organization_rejected(self, retriever) -> None:
        with pytest.raises(ValidationError):
            retriever.cross_meeting_search("", "deploy")


# ---------------------------------------------------------------------------
# Validation and degradation
# ---------------------------------------------------------------------------

class TestDegradation:
    def test_empty_query_rejected(self, retriever) -> None:
        with pytest.raises(ValidationError):
            retriever.search_similar("   ", ORG_SCOPE)

    def test_limit_above_maximum_rejected(self, retriever) -> None:
        with pytest.raises(ValidationError):
            retriever.search_similar("deploy", ORG_SCOPE, limit=500)

    def test_embedding_unavailable(self, retriever, mock_embedding_client, mock_vector_index) -> None:
        mock_embedding_client.is_available.return_value = False
        assert retriever.search_similar("deploy", ORG_SCOPE) == []
        mock_vector_index.query_nearest.assert_not_called()

    def test_embedding_error(self, retriever, mock_embedding_client) -> None:
        mock_embedding_client.embed.side_effect = ProviderError(provider="fake", message="boom")
        assert retriever.search_similar("deploy", ORG_SCOPE) == []

    def test_embedding_quota(self, retriever, mock_embedding_client) -> None:
        mock_embedding_client.embed.side_effect = QuotaExceededError("rate limited")
        assert retriever.search_similar("deploy", ORG_SCOPE) == []

    def test_index_unreachable(self, retriever, mock_vector_index) -> None:
        mock_vector_index.query_nearest.side_effect = ExternalServiceError("LanceDB", "down")
        assert retriever.search_similar("deploy", ORG_SCOPE) == []

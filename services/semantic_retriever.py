"""
SemanticRetriever — embed a query and rank chunks by cosine similarity.

Degrades instead of failing: an unavailable or failing embedding provider,
or an unreachable vector index, yields an empty result so callers can carry
on with lexical results or an empty context.
"""

from __future__ import annotations

from typing import List, Optional

from domain.models import RetrievalScope, ScoredChunk
from ports.vector_store import VectorIndexPort
from services.embedding_client import EmbeddingClient
from shared_utils.constants import Defaults, LogScope
from shared_utils.error_handler import ExternalServiceError, ProviderError, QuotaExceededError
from shared_utils.logging_utils import ContextualLogger
from shared_utils.validation import InputValidator


logger = ContextualLogger(scope=LogScope.SEMANTIC_SEARCH)


class SemanticRetriever:
    """Scoped nearest-neighbour retrieval over the vector index."""

    def __init__(
        self,
        *,
        embedding_client: EmbeddingClient,
        vector_index: VectorIndexPort,
        threshold: float = Defaults.SEMANTIC_SIMILARITY_THRESHOLD,
        max_limit: int = Defaults.MAX_SEARCH_LIMIT,
    ) -> None:
        self._embedder = embedding_client
        self._index = vector_index
        self._threshold = threshold
        self._max_limit = max_limit

    def search_similar(
        self,
        query: str,
        scope: RetrievalScope,
        limit: int = Defaults.DEFAULT_SEARCH_LIMIT,
        threshold: Optional[float] = None,
    ) -> List[ScoredChunk]:
        """Top ``limit`` chunks in ``scope`` with similarity >= threshold.

        Sorted by similarity descending, ties by chunk index ascending.
        """
        query = InputValidator.validate_non_empty_string(query, "query")
        limit = InputValidator.validate_positive_int(limit, "limit", maximum=self._max_limit)
        threshold = InputValidator.validate_threshold(
            self._threshold if threshold is None else threshold
        )

        # An explicitly empty meeting subset can never match
        if scope.meeting_ids is not None and not scope.meeting_ids:
            return []

        if not self._embedder.is_available():
            logger.info("semantic_search_skipped", reason="embedding_unavailable")
            return []

        try:
            embedding = self._embedder.embed(query)
        except (ProviderError, QuotaExceededError) as e:
            logger.warning(
                "semantic_search_degraded",
                stage="embed",
                error_code=e.error_code,
                error=e.message,
            )
            return []

        try:
            candidates = self._index.query_nearest(scope, embedding.vector, limit)
        except ExternalServiceError as e:
            logger.warning("semantic_search_degraded", stage="query", error=e.message)
            return []

        results = [
            c for c in candidates
            if c.similarity >= threshold and scope.allows(c.chunk.organization_id, c.chunk.meeting_id)
        ]
        results.sort(key=lambda c: (-c.similarity, c.chunk.index))
        results = results[:limit]

        logger.info(
            "semantic_search_completed",
            organization_id=scope.organization_id,
            meeting_id=scope.meeting_id,
            candidates=len(candidates),
            results=len(results),
            threshold=threshold,
            tokens_used=embedding.tokens_used,
        )
        return results

    def get_context_chunks(
        self,
        organization_id: str,
        meeting_id: str,
        query: str,
        limit: int = Defaults.MAX_CONTEXT_CHUNKS,
    ) -> List[ScoredChunk]:
        """Context chunks for one meeting of one organization."""
        scope = InputValidator.validate_scope(organization_id, meeting_id=meeting_id)
        return self.search_similar(query, scope, limit)

    def cross_meeting_search(
        self,
        organization_id: str,
        query: str,
        meeting_ids: Optional[List[str]] = None,
        limit: int = Defaults.DEFAULT_SEARCH_LIMIT,
        threshold: Optional[float] = None,
    ) -> List[ScoredChunk]:
        """Search every meeting of the organization, or an explicit subset."""
        scope = InputValidator.validate_scope(organization_id, meeting_ids=meeting_ids)
        return self.search_similar(query, scope, limit, threshold)

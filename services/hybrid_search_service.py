"""
HybridSearchService — semantic and lexical retrieval fused into one ranking.
"""

from __future__ import annotations

from typing import List, Optional

from core_intelligence.engine.fusion import fuse
from domain.models import DateRange, HybridResult
from services.lexical_retriever import LexicalRetriever
from services.semantic_retriever import SemanticRetriever
from shared_utils.constants import Defaults, LogScope
from shared_utils.logging_utils import ContextualLogger
from shared_utils.validation import InputValidator


logger = ContextualLogger(scope=LogScope.HYBRID_SEARCH)


class HybridSearchService:
    """Runs both retrievers over the same scope and fuses the results."""

    def __init__(
        self,
        *,
        semantic_retriever: SemanticRetriever,
        lexical_retriever: LexicalRetriever,
        threshold: float = Defaults.HYBRID_SIMILARITY_THRESHOLD,
        max_limit: int = Defaults.MAX_SEARCH_LIMIT,
    ) -> None:
        self._semantic = semantic_retriever
        self._lexical = lexical_retriever
        self._threshold = threshold
        self._max_limit = max_limit

    def hybrid_search(
        self,
        organization_id: str,
        query: str,
        limit: int = Defaults.DEFAULT_SEARCH_LIMIT,
        date_range: Optional[DateRange] = None,
        meeting_ids: Optional[List[str]] = None,
    ) -> List[HybridResult]:
        query = InputValidator.validate_non_empty_string(query, "query")
        limit = InputValidator.validate_positive_int(limit, "limit", maximum=self._max_limit)
        scope = InputValidator.validate_scope(organization_id, meeting_ids=meeting_ids)
        candidates = min(limit * 2, self._max_limit)

        semantic = self._semantic.search_similar(query, scope, candidates, self._threshold)
        lexical = self._lexical.search_text(query, scope, candidates, date_range=date_range)
        results = fuse(semantic, lexical, limit)

        logger.info(
            "hybrid_search_completed",
            organization_id=organization_id,
            semantic_results=len(semantic),
            lexical_results=len(lexical),
            results=len(results),
        )
        return results

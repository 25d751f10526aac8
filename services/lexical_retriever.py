"""
LexicalRetriever — ranked keyword search over titles, transcripts,
summaries and action items.

Backend scores are unbounded (BM25); they are mapped into [0, 1) with
``s / (s + 1)`` so they can be fused with cosine similarities.
"""

from __future__ import annotations

from typing import List, Optional

from core_intelligence.engine.highlighting import build_preview, extract_highlights, query_terms
from domain.models import DateRange, LexicalDocumentType, LexicalResult, RetrievalScope
from ports.lexical_store import LexicalSearchPort
from shared_utils.constants import Defaults, LogScope
from shared_utils.error_handler import ExternalServiceError
from shared_utils.logging_utils import ContextualLogger
from shared_utils.validation import InputValidator


logger = ContextualLogger(scope=LogScope.LEXICAL_SEARCH)


def normalize_score(raw: float) -> float:
    if raw <= 0:
        return 0.0
    return raw / (raw + 1.0)


class LexicalRetriever:
    """Full-text search with previews and highlighted matches."""

    def __init__(
        self,
        *,
        lexical_index: LexicalSearchPort,
        preview_chars: int = Defaults.LEXICAL_PREVIEW_CHARS,
        max_highlights: int = Defaults.LEXICAL_MAX_HIGHLIGHTS,
        max_limit: int = Defaults.MAX_SEARCH_LIMIT,
    ) -> None:
        self._index = lexical_index
        self._preview_chars = preview_chars
        self._max_highlights = max_highlights
        self._max_limit = max_limit

    def search_text(
        self,
        query: str,
        scope: RetrievalScope,
        limit: int = Defaults.DEFAULT_SEARCH_LIMIT,
        date_range: Optional[DateRange] = None,
        types: Optional[List[LexicalDocumentType]] = None,
    ) -> List[LexicalResult]:
        """Ranked results for ``query``; empty queries never reach the backend."""
        terms = query_terms(query or "")
        if not terms:
            return []
        limit = InputValidator.validate_positive_int(limit, "limit", maximum=self._max_limit)
        if scope.meeting_ids is not None and not scope.meeting_ids:
            return []

        try:
            hits = self._index.search(terms, scope, limit, date_range=date_range, types=types)
        except ExternalServiceError as e:
            logger.warning("lexical_search_degraded", error=e.message)
            return []

        results = []
        for hit in hits:
            doc = hit.document
            if not scope.allows(doc.organization_id, doc.meeting_id):
                continue
            highlight_on = hit.matched_terms or terms
            results.append(
                LexicalResult(
                    id=doc.id,
                    type=doc.type,
                    meeting_id=doc.meeting_id,
                    meeting_title=doc.meeting_title,
                    title=doc.title,
                    preview=build_preview(doc.content, highlight_on, self._preview_chars),
                    highlights=extract_highlights(
                        doc.content, highlight_on, max_snippets=self._max_highlights
                    ),
                    score=normalize_score(hit.score),
                    meeting_date=doc.meeting_date,
                )
            )

        logger.info(
            "lexical_search_completed",
            organization_id=scope.organization_id,
            terms=len(terms),
            results=len(results),
        )
        return results

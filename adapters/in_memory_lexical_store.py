"""
In-memory BM25 lexical index adapter.

Implements LexicalSearchPort with rank_bm25 over per-meeting document sets.
Corpus statistics (IDF, average length) are computed over the documents in
the caller's scope, so one tenant's vocabulary never shifts another's ranking.
"""

from __future__ import annotations

import threading
from collections import Counter
from typing import Dict, List, Optional, Tuple

from rank_bm25 import BM25Plus

from core_intelligence.engine.highlighting import tokenize
from domain.models import (
    DateRange,
    LexicalDocument,
    LexicalDocumentType,
    LexicalHit,
    RetrievalScope,
)
from shared_utils.logging_utils import get_scoped_logger
from shared_utils.constants import LogScope


logger = get_scoped_logger(LogScope.ADAPTER)

_Indexed = Tuple[LexicalDocument, List[str], Counter]


class InMemoryLexicalIndexAdapter:
    """BM25 implementation of LexicalSearchPort.

    BM25 Parameters:
    - k1: Term frequency saturation parameter (default 1.5)
    - b: Document length normalization (default 0.75)
    - delta: Lower bound on a matching term's contribution (default 1.0)

    BM25+ keeps IDF positive on the small corpora a single tenant scope
    produces; plain Okapi IDF turns negative once a term is in most documents.
    """

    def __init__(self, k1: float = 1.5, b: float = 0.75, delta: float = 1.0) -> None:
        self.k1 = k1
        self.b = b
        self.delta = delta
        self._meetings: Dict[str, Tuple[_Indexed, ...]] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # LexicalSearchPort implementation
    # ------------------------------------------------------------------

    def replace_documents(self, meeting_id: str, documents: List[LexicalDocument]) -> int:
        indexed = []
        for doc in documents:
            tokens = tokenize(f"{doc.title} {doc.content}")
            indexed.append((doc, tokens, Counter(tokens)))

        with self._lock:
            if indexed:
                self._meetings[meeting_id] = tuple(indexed)
            else:
                self._meetings.pop(meeting_id, None)

        logger.info("lexical_documents_replaced", meeting_id=meeting_id, count=len(indexed))
        return len(indexed)

    def delete_meeting(self, meeting_id: str) -> int:
        with self._lock:
            removed = self._meetings.pop(meeting_id, ())
        logger.info("lexical_documents_deleted", meeting_id=meeting_id, deleted_count=len(removed))
        return len(removed)

    def search(
        self,
        terms: List[str],
        scope: RetrievalScope,
        limit: int,
        date_range: Optional[DateRange] = None,
        types: Optional[List[LexicalDocumentType]] = None,
    ) -> List[LexicalHit]:
        if not terms:
            return []

        with self._lock:
            generations = list(self._meetings.items())

        corpus = [
            entry
            for meeting_id, generation in generations
            for entry in generation
            if scope.allows(entry[0].organization_id, meeting_id)
        ]
        # rank_bm25 divides by the average document length
        if not any(tokens for _, tokens, _ in corpus):
            return []

        bm25 = BM25Plus([tokens for _, tokens, _ in corpus], k1=self.k1, b=self.b, delta=self.delta)
        scores = bm25.get_scores(terms)

        hits: List[LexicalHit] = []
        for (doc, _, term_freqs), score in zip(corpus, scores):
            if types and doc.type not in types:
                continue
            if date_range is not None and not self._in_range(doc, date_range):
                continue
            # BM25+ adds delta for every query term, so relevance is decided by matches
            matched = [term for term in terms if term_freqs.get(term, 0)]
            if matched:
                hits.append(LexicalHit(document=doc, score=float(score), matched_terms=matched))

        hits.sort(key=lambda h: (-h.score, h.document.id))
        logger.debug(
            "lexical_search",
            organization_id=scope.organization_id,
            terms=len(terms),
            results=len(hits),
        )
        return hits[:limit]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _in_range(doc: LexicalDocument, date_range: DateRange) -> bool:
        # Undated documents never satisfy a date filter
        if doc.meeting_date is None:
            return False
        if date_range.start is not None and doc.meeting_date < date_range.start:
            return False
        if date_range.end is not None and doc.meeting_date > date_range.end:
            return False
        return True

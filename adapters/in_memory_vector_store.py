"""
In-memory vector index adapter for local development and tests.

Implements VectorIndexPort with a dict of per-meeting chunk tuples and
brute-force cosine similarity. A re-index swaps the meeting's tuple under a
lock, so a concurrent query sees either the old generation or the new one.

NOT for production: no persistence across restarts.
"""

from __future__ import annotations

import math
import threading
from typing import Dict, List, Tuple

from domain.models import Chunk, RetrievalScope, ScoredChunk
from shared_utils.logging_utils import get_scoped_logger
from shared_utils.constants import LogScope
from shared_utils.error_handler import ValidationError


logger = get_scoped_logger(LogScope.ADAPTER)


class InMemoryVectorIndexAdapter:
    """Brute-force in-memory implementation of VectorIndexPort."""

    def __init__(self) -> None:
        self._meetings: Dict[str, Tuple[Chunk, ...]] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # VectorIndexPort implementation
    # ------------------------------------------------------------------

    def upsert_chunks(self, meeting_id: str, chunks: List[Chunk]) -> int:
        """Replace the meeting's chunk generation in one swap."""
        for chunk in chunks:
            if chunk.meeting_id != meeting_id:
                raise ValidationError(
                    "Chunk belongs to a different meeting",
                    context={"meeting_id": meeting_id, "chunk_meeting_id": chunk.meeting_id},
                )

        # Last write per id wins, so repeated ids never duplicate
        by_id: Dict[str, Chunk] = {c.id: c for c in chunks}
        generation = tuple(sorted(by_id.values(), key=lambda c: c.index))

        with self._lock:
            if generation:
                self._meetings[meeting_id] = generation
            else:
                self._meetings.pop(meeting_id, None)

        logger.info("inmemory_chunks_upserted", meeting_id=meeting_id, count=len(generation))
        return len(generation)

    def query_nearest(
        self,
        scope: RetrievalScope,
        vector: List[float],
        k: int,
    ) -> List[ScoredChunk]:
        """Cosine-rank every in-scope chunk and return the top ``k``."""
        with self._lock:
            generations = list(self._meetings.items())

        scored: List[ScoredChunk] = []
        for meeting_id, generation in generations:
            for chunk in generation:
                if not scope.allows(chunk.organization_id, meeting_id):
                    continue
                similarity = self._cosine_similarity(vector, chunk.embedding)
                scored.append(
                    ScoredChunk(
                        chunk=chunk.model_copy(update={"embedding": []}),
                        similarity=similarity,
                    )
                )

        scored.sort(key=lambda s: (-s.similarity, s.chunk.index))
        results = scored[:k]
        logger.debug(
            "inmemory_vector_search",
            organization_id=scope.organization_id,
            meeting_id=scope.meeting_id,
            k=k,
            results=len(results),
        )
        return results

    def delete_meeting(self, meeting_id: str) -> int:
        """Remove all chunks for a meeting."""
        with self._lock:
            removed = self._meetings.pop(meeting_id, ())
        logger.info("inmemory_chunks_deleted", meeting_id=meeting_id, deleted_count=len(removed))
        return len(removed)

    def count_chunks(self, organization_id: str) -> Tuple[int, int]:
        with self._lock:
            generations = list(self._meetings.values())
        owned = [g for g in generations if g and g[0].organization_id == organization_id]
        return sum(len(g) for g in owned), len(owned)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _cosine_similarity(a: List[float], b: List[float]) -> float:
        """Compute cosine similarity between two vectors."""
        if len(a) != len(b) or not a:
            return 0.0
        dot = sum(x * y for x, y in zip(a, b))
        norm_a = math.sqrt(sum(x * x for x in a))
        norm_b = math.sqrt(sum(x * x for x in b))
        if norm_a == 0.0 or norm_b == 0.0:
            return 0.0
        return dot / (norm_a * norm_b)

"""
Port interface for the chunk vector index.

Implementations: InMemoryVectorIndexAdapter, LanceDBVectorIndexAdapter (adapters/)
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from domain.models import Chunk, RetrievalScope, ScoredChunk


@runtime_checkable
class VectorIndexPort(Protocol):
    """Tenant/meeting-scoped store of chunk vectors."""

    def upsert_chunks(self, meeting_id: str, chunks: List[Chunk]) -> int:
        """Replace every chunk of ``meeting_id`` with ``chunks`` in one step.

        Readers see either the old chunk set or the new one, never a mix.
        Re-running with the same chunks leaves the same final set.

        Args:
            meeting_id: Meeting whose chunks are replaced.
            chunks: New chunk generation, each carrying its embedding.

        Returns:
            Number of chunks stored.

        Raises:
            ExternalServiceError: If the store rejects the write.
        """
        ...

    def query_nearest(
        self,
        scope: RetrievalScope,
        vector: List[float],
        k: int,
    ) -> List[ScoredChunk]:
        """Return up to ``k`` chunks in ``scope`` ranked by cosine similarity.

        Raises:
            ExternalServiceError: If the store cannot be read; callers on the
                retrieval path degrade that to an empty result.
        """
        ...

    def delete_meeting(self, meeting_id: str) -> int:
        """Remove every chunk of a meeting. Returns the number removed."""
        ...

    def count_chunks(self, organization_id: str) -> tuple[int, int]:
        """Return ``(chunk_count, meeting_count)`` for an organization."""
        ...

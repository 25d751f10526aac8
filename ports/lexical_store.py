"""
Port interface for ranked full-text search.

Implementations: InMemoryLexicalIndexAdapter (adapters/)
"""

from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable

from domain.models import (
    DateRange,
    LexicalDocument,
    LexicalDocumentType,
    LexicalHit,
    RetrievalScope,
)


@runtime_checkable
class LexicalSearchPort(Protocol):
    """Term-frequency ranked search over meeting text."""

    def replace_documents(self, meeting_id: str, documents: List[LexicalDocument]) -> int:
        """Swap the meeting's documents for ``documents``. Returns the count."""
        ...

    def delete_meeting(self, meeting_id: str) -> int:
        ...

    def search(
        self,
        terms: List[str],
        scope: RetrievalScope,
        limit: int,
        date_range: Optional[DateRange] = None,
        types: Optional[List[LexicalDocumentType]] = None,
    ) -> List[LexicalHit]:
        """Rank in-scope documents against ``terms``, best first.

        Only documents matching at least one term are returned.

        Raises:
            ExternalServiceError: If the back-end is unreachable.
        """
        ...

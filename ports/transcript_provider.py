"""
Port interface for reading meeting transcripts.

Implementations: S3TranscriptProviderAdapter, InMemoryTranscriptProviderAdapter (adapters/)
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from domain.models import MeetingTranscript


@runtime_checkable
class TranscriptProviderPort(Protocol):
    """Read-only access to transcripts and their meeting metadata."""

    def get_transcript(self, meeting_id: str) -> Optional[MeetingTranscript]:
        """Return the transcript, or None if the meeting has none.

        Raises:
            ExternalServiceError: If the source is unreachable.
        """
        ...

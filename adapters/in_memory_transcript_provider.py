"""
In-memory transcript provider for local development and tests.

NOT for production: transcripts must be registered with ``put_transcript``.
"""

from __future__ import annotations

import threading
from typing import Dict, Optional

from domain.models import MeetingTranscript


class InMemoryTranscriptProviderAdapter:
    """Dict-backed implementation of TranscriptProviderPort."""

    def __init__(self) -> None:
        self._transcripts: Dict[str, MeetingTranscript] = {}
        self._lock = threading.Lock()

    def put_transcript(self, transcript: MeetingTranscript) -> None:
        with self._lock:
            self._transcripts[transcript.meeting_id] = transcript

    def get_transcript(self, meeting_id: str) -> Optional[MeetingTranscript]:
        with self._lock:
            return self._transcripts.get(meeting_id)

"""
Root conftest.py — shared fixtures for the entire test suite.

Guidelines:
    • No __init__.py in test sub-directories (avoids shadowing root packages).
    • pytest.ini_options lives in pyproject.toml with pythonpath=["."].
    • Markers: integration.
    • Every external model API and AWS/LanceDB client is mocked.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from domain.models import (
    Chunk,
    EmbeddingResult,
    MeetingTranscript,
    ScoredChunk,
    TranscriptSegment,
)


# ---------------------------------------------------------------------------
# Marker registration
# ---------------------------------------------------------------------------

def pytest_configure(config):
    config.addinivalue_line("markers", "integration: mark test as integration test")


# ---------------------------------------------------------------------------
# Minimal settings kwargs for Settings(**BASE_SETTINGS_KWARGS)
# ---------------------------------------------------------------------------

BASE_SETTINGS_KWARGS: Dict[str, str] = {
    "embed_provider": "bedrock",
    "llm_primary_provider": "bedrock",
    "llm_fallback_provider": "none",
    "bedrock_region": "eu-west-2",
    "environment": "development",
}


@pytest.fixture()
def base_settings_kwargs() -> Dict[str, str]:
    """Provide the minimal kwargs needed to instantiate ``Settings``."""
    return {**BASE_SETTINGS_KWARGS}


# ---------------------------------------------------------------------------
# Sample transcript fixtures
# ---------------------------------------------------------------------------

SAMPLE_SEGMENTS = [
    ("Alice", "Hello everyone, welcome to the standup.", 0.0, 14.0),
    ("Bob", "Thanks Alice. I worked on the API refactoring yesterday.", 15.0, 29.0),
    ("Alice", "Great, any blockers?", 30.0, 44.0),
    ("Bob", "No blockers. I will finish the tests today.", 45.0, 59.0),
    ("Alice", "Perfect. The decision is to ship on Friday.", 60.0, 74.0),
    ("Carol", "I am working on the deployment pipeline as the next step.", 75.0, 90.0),
]


def make_transcript(
    meeting_id: str = "m-1",
    organization_id: str = "org-1",
    title: str = "Daily Standup",
    summary: Optional[str] = "Team synced on API work and agreed to ship Friday.",
    action_items: Optional[List[str]] = None,
    meeting_date: Optional[datetime] = datetime(2026, 1, 15, 9, 0, tzinfo=timezone.utc),
) -> MeetingTranscript:
    segments = [
        TranscriptSegment(speaker=s, text=t, start_time=start, end_time=end)
        for s, t, start, end in SAMPLE_SEGMENTS
    ]
    return MeetingTranscript(
        meeting_id=meeting_id,
        organization_id=organization_id,
        title=title,
        full_text=" ".join(seg.text for seg in segments),
        segments=segments,
        summary=summary,
        action_items=["Bob to finish the tests"] if action_items is None else action_items,
        meeting_date=meeting_date,
    )


@pytest.fixture()
def sample_transcript() -> MeetingTranscript:
    return make_transcript()


def make_chunk(
    index: int = 0,
    meeting_id: str = "m-1",
    organization_id: str = "org-1",
    text: str = "Alice: We need to deploy by Friday.",
    embedding: Optional[List[float]] = None,
    speakers: Optional[List[str]] = None,
    start_time: Optional[float] = 75.0,
    meeting_title: str = "Daily Standup",
) -> Chunk:
    return Chunk(
        id=f"{meeting_id}-{index}",
        meeting_id=meeting_id,
        organization_id=organization_id,
        index=index,
        text=text,
        start_time=start_time,
        end_time=None if start_time is None else start_time + 30.0,
        speakers=["Alice"] if speakers is None else speakers,
        meeting_title=meeting_title,
        embedding=embedding or [],
    )


def make_scored(similarity: float = 0.9, **chunk_kwargs) -> ScoredChunk:
    return ScoredChunk(chunk=make_chunk(**chunk_kwargs), similarity=similarity)


# ---------------------------------------------------------------------------
# Mock collaborators
# ---------------------------------------------------------------------------

@pytest.fixture()
def mock_embedding_client() -> MagicMock:
    """Available embedding client returning a fixed 3-d vector."""
    mock = MagicMock()
    mock.is_available.return_value = True
    mock.embed.return_value = EmbeddingResult(vector=[1.0, 0.0, 0.0], tokens_used=4)
    return mock


@pytest.fixture()
def mock_vector_index() -> MagicMock:
    mock = MagicMock()
    mock.query_nearest.return_value = []
    mock.upsert_chunks.side_effect = lambda meeting_id, chunks: len(chunks)
    return mock


@pytest.fixture()
def mock_lexical_index() -> MagicMock:
    mock = MagicMock()
    mock.search.return_value = []
    mock.replace_documents.side_effect = lambda meeting_id, docs: len(docs)
    return mock


@pytest.fixture()
def mock_transcript_provider(sample_transcript) -> MagicMock:
    mock = MagicMock()
    mock.get_transcript.return_value = sample_transcript
    return mock

"""
Unit tests for domain models.

Validates pure domain types with no storage or provider dependencies.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from conftest import make_chunk
from domain.models import (
    ChatMessage,
    ChatRole,
    ChatSession,
    ChatStatus,
    Citation,
    DateRange,
    IndexingReport,
    MeetingTranscript,
    RetrievalScope,
    ScoredChunk,
    as_utc,
    utc_now,
)


class TestTimeHelpers:
    def test_utc_now_is_aware(self) -> None:
        assert utc_now().tzinfo is not None

    def test_as_utc_naive(self) -> None:
        assert as_utc(datetime(2026, 1, 1)).tzinfo == timezone.utc

    def test_as_utc_passthrough(self) -> None:
        value = datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert as_utc(value) is value
        assert as_utc(None) is None


class TestMeetingTranscript:
    def test_defaults(self) -> None:
        transcript = MeetingTranscript(meeting_id="m-1", organization_id="org-1", title="Standup")
        assert transcript.segments == []
        assert transcript.action_items == []
        assert transcript.summary is None

    def test_naive_date_becomes_utc(self) -> None:
        transcript = MeetingTranscript(
            meeting_id="m-1", organization_id="org-1", title="t", meeting_date="2026-01-15T09:00:00"
        )
        assert transcript.meeting_date.tzinfo == timezone.utc


class TestChunk:
    def test_negative_index_rejected(self) -> None:
        with pytest.raises(ValidationError):
            make_chunk(index=-1)

    def test_scored_chunk_meeting_id(self) -> None:
        assert ScoredChunk(chunk=make_chunk(meeting_id="m-7"), similarity=0.8).meeting_id == "m-7"


class TestRetrievalScope:
    def test_organization_scope_allows_any_meeting(self) -> None:
        scope = RetrievalScope(organization_id="org-1")
        assert scope.allows("org-1", "m-1")
        assert not scope.allows("org-2", "m-1")

    def test_single_meeting(self) -> None:
        scope = RetrievalScope(organization_id="org-1", meeting_id="m-1")
        assert scope.allows("org-1", "m-1")
        assert not scope.allows("org-1", "m-2")

    def test_subset(self) -> None:
        scope = RetrievalScope(organization_id="org-1", meeting_ids=["m-1", "m-2"])
        assert scope.allows("org-1", "m-2")
        assert not scope.allows("org-1", "m-3")
        assert not scope.allows("org-2", "m-1")

    def test_empty_subset_allows_nothing(self) -> None:
        assert not RetrievalScope(organization_id="org-1", meeting_ids=[]).allows("org-1", "m-1")

    def test_requires_organization(self) -> None:
        with pytest.raises(ValidationError):
            RetrievalScope(organization_id="")

    def test_filters_mutually_exclusive(self) -> None:
        with pytest.raises(ValidationError):
            RetrievalScope(organization_id="org-1", meeting_id="m-1", meeting_ids=["m-1"])

    def test_blank_meeting_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RetrievalScope(organization_id="org-1", meeting_id="  ")


class TestDateRange:
    def test_open_bounds(self) -> None:
        window = DateRange()
        assert window.start is None and window.end is None

    def test_reversed_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DateRange(start=datetime(2026, 2, 1), end=datetime(2026, 1, 1))

    def test_bounds_normalised(self) -> None:
        assert DateRange(start=datetime(2026, 1, 1)).start.tzinfo == timezone.utc


class TestChatModels:
    def test_session_defaults(self) -> None:
        session = ChatSession(id="c-1", organization_id="org-1", user_id="u-1", title="t")
        assert session.status == ChatStatus.CREATED
        assert session.meeting_id is None

    def test_message_defaults(self) -> None:
        message = ChatMessage(id="x", chat_id="c-1", role=ChatRole.USER, content="hi")
        assert message.citations == []
        assert message.tokens == 0
        assert message.model is None

    def test_citation_relevance_bounded(self) -> None:
        with pytest.raises(ValidationError):
            Citation(meeting_id="m-1", meeting_title="t", text="x", relevance=1.2)

    def test_role_values(self) -> None:
        assert ChatRole("assistant") is ChatRole.ASSISTANT


class TestIndexingReport:
    def test_defaults(self) -> None:
        report = IndexingReport(meeting_id="m-1")
        assert report.chunks_stored == 0
        assert report.skipped_reason is None

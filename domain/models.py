"""
Pure domain models for the meeting RAG engine.

These models contain NO storage or provider dependencies. They represent the
core concepts that flow through ports and services: transcript input, chunks,
retrieval scope and results, chat sessions and messages.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


def utc_now() -> datetime:
    """Timezone-aware current time, used for every persisted timestamp."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC so dates from any source compare safely."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ---------------------------------------------------------------------------
# Transcript input (read from the transcript provider)
# ---------------------------------------------------------------------------


class TranscriptSegment(BaseModel):
    """One timed utterance. Times are seconds from meeting start."""
    speaker: str
    text: str
    start_time: Optional[float] = None
    end_time: Optional[float] = None


class MeetingTranscript(BaseModel):
    """Everything the engine needs to know about one meeting."""
    meeting_id: str
    organization_id: str
    title: str
    full_text: str = ""
    segments: List[TranscriptSegment] = []
    summary: Optional[str] = None
    action_items: List[str] = []
    meeting_date: Optional[datetime] = None

    @field_validator("meeting_date")
    @classmethod
    def normalize_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)


# ---------------------------------------------------------------------------
# Chunks
# ---------------------------------------------------------------------------


class SegmentChunk(BaseModel):
    """Chunker output for timed segments."""
    text: str
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    speakers: List[str] = []


class Chunk(BaseModel):
    """Unit of retrievable text, owned by its meeting.

    ``speakers`` keeps first-appearance order so ``speakers[0]`` is the
    leading speaker of the chunk.
    """
    id: str
    meeting_id: str
    organization_id: str
    index: int = Field(ge=0)
    text: str
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    speakers: List[str] = []
    meeting_title: str = ""
    embedding: List[float] = []


class ScoredChunk(BaseModel):
    """A chunk returned by nearest-neighbour search."""
    chunk: Chunk
    similarity: float

    @property
    def meeting_id(self) -> str:
        return self.chunk.meeting_id


class RetrievalScope(BaseModel):
    """Tenant scope applied to every retrieval and generation call.

    Either a single meeting, an explicit subset of meetings, or (neither)
    every meeting of the organization.
    """
    organization_id: str = Field(min_length=1)
    meeting_id: Optional[str] = None
    meeting_ids: Optional[List[str]] = None

    @model_validator(mode="after")
    def check_meeting_filters(self) -> "RetrievalScope":
        if self.meeting_id is not None and self.meeting_ids is not None:
            raise ValueError("meeting_id and meeting_ids are mutually exclusive")
        if self.meeting_id is not None and not self.meeting_id.strip():
            raise ValueError("meeting_id cannot be empty")
        return self

    def allows(self, organization_id: str, meeting_id: str) -> bool:
        """True if a record owned by (organization_id, meeting_id) is in scope."""
        if organization_id != self.organization_id:
            return False
        if self.meeting_id is not None:
            return meeting_id == self.meeting_id
        if self.meeting_ids is not None:
            return meeting_id in self.meeting_ids
        return True


# ---------------------------------------------------------------------------
# Lexical search
# ---------------------------------------------------------------------------


class LexicalDocumentType(str, Enum):
    """What a lexical document was built from."""
    MEETING = "meeting"
    TRANSCRIPT = "transcript"
    SUMMARY = "summary"
    ACTION_ITEM = "action_item"


class LexicalDocument(BaseModel):
    """A searchable text unit in the lexical index."""
    id: str
    type: LexicalDocumentType
    meeting_id: str
    organization_id: str
    meeting_title: str
    title: str
    content: str
    meeting_date: Optional[datetime] = None

    @field_validator("meeting_date")
    @classmethod
    def normalize_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)


class LexicalHit(BaseModel):
    """Raw ranked hit from the lexical back-end."""
    document: LexicalDocument
    score: float
    matched_terms: List[str] = []


class DateRange(BaseModel):
    """Inclusive meeting-date window; either bound may be open."""
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @field_validator("start", "end")
    @classmethod
    def normalize_bounds(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)

    @model_validator(mode="after")
    def check_order(self) -> "DateRange":
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValueError("date range start must not be after end")
        return self


class LexicalResult(BaseModel):
    """User-facing lexical search result."""
    id: str
    type: LexicalDocumentType
    meeting_id: str
    meeting_title: str
    title: str
    preview: str
    highlights: List[str] = []
    score: float
    meeting_date: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Hybrid search
# ---------------------------------------------------------------------------


class ResultSource(str, Enum):
    """Which retrieval method produced a fused result."""
    SEMANTIC = "semantic"
    LEXICAL = "lexical"
    BOTH = "both"


class HybridResult(BaseModel):
    """One entry of the fused result set, keyed at meeting granularity."""
    key: str
    meeting_id: str
    meeting_title: str
    text: str
    score: float
    source: ResultSource
    chunk_index: Optional[int] = None
    start_time: Optional[float] = None
    lexical_type: Optional[LexicalDocumentType] = None


# ---------------------------------------------------------------------------
# Conversation
# ---------------------------------------------------------------------------


class ChatStatus(str, Enum):
    """Chat session lifecycle. Deletion removes the record."""
    CREATED = "created"
    ACTIVE = "active"


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Citation(BaseModel):
    """Pointer from an answer back to a source chunk."""
    meeting_id: str
    meeting_title: str
    timestamp: Optional[str] = None
    text: str
    speaker: Optional[str] = None
    relevance: float = Field(ge=0.0, le=1.0)
    chunk_index: Optional[int] = None


class ChatSession(BaseModel):
    """A conversation owned by exactly one user."""
    id: str
    organization_id: str
    user_id: str
    meeting_id: Optional[str] = None
    title: str
    status: ChatStatus = ChatStatus.CREATED
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ChatMessage(BaseModel):
    """One turn of a chat session."""
    id: str
    chat_id: str
    role: ChatRole
    content: str
    citations: List[Citation] = []
    model: Optional[str] = None
    tokens: int = 0
    latency_ms: int = 0
    created_at: datetime = Field(default_factory=utc_now)


class ChatResponse(BaseModel):
    """Result of a successful send_message call."""
    message: ChatMessage
    suggested_followups: List[str] = []


class ChatSummary(BaseModel):
    """Listing row for a user's chats."""
    id: str
    title: str
    meeting_id: Optional[str] = None
    meeting_title: Optional[str] = None
    status: ChatStatus
    message_count: int
    last_message: Optional[str] = None
    updated_at: datetime


# ---------------------------------------------------------------------------
# Provider results
# ---------------------------------------------------------------------------


class EmbeddingResult(BaseModel):
    """Vector plus the tokens billed for producing it."""
    vector: List[float]
    tokens_used: int = 0


class GenerationResult(BaseModel):
    """LLM output and the model that produced it."""
    text: str
    model_id: str
    tokens_used: int = 0


# ---------------------------------------------------------------------------
# Indexing
# ---------------------------------------------------------------------------


class IndexingReport(BaseModel):
    """Outcome of a re-index run."""
    meeting_id: str
    chunks_created: int = 0
    chunks_stored: int = 0
    chunks_skipped: int = 0
    lexical_documents: int = 0
    tokens_used: int = 0
    duration_ms: float = 0.0
    skipped_reason: Optional[str] = None


class IndexStats(BaseModel):
    """Index size for one organization."""
    organization_id: str
    total_chunks: int
    meetings_indexed: int

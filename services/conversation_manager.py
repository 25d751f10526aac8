"""
ConversationManager — chat sessions over meeting transcripts.

Orchestrates one question/answer turn:
    1. Check the session belongs to the caller.
    2. Persist the user message.
    3. Retrieve context chunks (one meeting, or the whole organization).
    4. Build the grounded system prompt and call the LLM chain.
    5. Persist the assistant message with citations.
    6. Suggest follow-up questions.

Turns on the same chat are serialized with a per-chat lock; different chats
run fully concurrently.
"""

from __future__ import annotations

import threading
import time
import uuid
from contextlib import contextmanager
from datetime import timedelta
from typing import Dict, Iterator, List, Optional, Tuple

from core_intelligence.engine.citations import build_citations
from core_intelligence.engine.followups import (
    FollowupStrategy,
    KeywordFollowupStrategy,
    meeting_starter_questions,
)
from core_intelligence.engine.prompts import build_context, build_system_prompt
from domain.models import (
    ChatMessage,
    ChatResponse,
    ChatRole,
    ChatSession,
    ChatSummary,
    MeetingTranscript,
    ScoredChunk,
    utc_now,
)
from ports.chat_store import ChatStorePort
from ports.transcript_provider import TranscriptProviderPort
from services.llm_client import LLMClient
from services.semantic_retriever import SemanticRetriever
from shared_utils.constants import Defaults, LogScope
from shared_utils.error_handler import ExternalServiceError, NotFoundError
from shared_utils.logging_utils import ContextualLogger
from shared_utils.validation import InputValidator


logger = ContextualLogger(scope=LogScope.CONVERSATION)


class ConversationManager:
    """Owns chat session state and drives grounded generation."""

    def __init__(
        self,
        *,
        chat_store: ChatStorePort,
        semantic_retriever: SemanticRetriever,
        llm_client: LLMClient,
        transcript_provider: TranscriptProviderPort,
        followup_strategy: Optional[FollowupStrategy] = None,
        max_context_chunks: int = Defaults.MAX_CONTEXT_CHUNKS,
        max_history_messages: int = Defaults.MAX_HISTORY_MESSAGES,
        max_message_chars: int = Defaults.MAX_MESSAGE_CHARS,
        citation_excerpt_chars: int = Defaults.CITATION_EXCERPT_CHARS,
    ) -> None:
        self._store = chat_store
        self._retriever = semantic_retriever
        self._llm = llm_client
        self._transcripts = transcript_provider
        self._followups = followup_strategy or KeywordFollowupStrategy()
        self._max_context_chunks = max_context_chunks
        self._max_history = max_history_messages
        self._max_message_chars = max_message_chars
        self._excerpt_chars = citation_excerpt_chars

        self._locks: Dict[str, _ChatLock] = {}
        self._locks_guard = threading.Lock()

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def create_chat(
        self,
        organization_id: str,
        user_id: str,
        meeting_id: Optional[str] = None,
        title: Optional[str] = None,
    ) -> ChatSession:
        """Open a new session; its ``id`` is the chat id."""
        InputValidator.validate_identifier(organization_id, "organization_id")
        InputValidator.validate_identifier(user_id, "user_id")
        if meeting_id is not None:
            InputValidator.validate_identifier(meeting_id, "meeting_id")
        if title is not None and title.strip():
            title = InputValidator.validate_non_empty_string(title, "title", max_length=200)
        else:
            title = Defaults.MEETING_CHAT_TITLE if meeting_id else Defaults.CROSS_MEETING_CHAT_TITLE

        now = utc_now()
        session = ChatSession(
            id=str(uuid.uuid4()),
            organization_id=organization_id,
            user_id=user_id,
            meeting_id=meeting_id,
            title=title,
            created_at=now,
            updated_at=now,
        )
        self._store.create_session(session)
        logger.info("chat_created", chat_id=session.id, meeting_id=meeting_id)
        return session

    def get_chat_history(self, chat_id: str, user_id: str) -> Tuple[ChatSession, List[ChatMessage]]:
        """Session and its messages, oldest first.

        Raises:
            NotFoundError: If the chat does not exist or belongs to another user.
        """
        session = self._require_session(chat_id, user_id)
        return session, self._store.list_messages(chat_id)

    def get_user_chats(
        self,
        user_id: str,
        organization_id: str,
        meeting_id: Optional[str] = None,
        limit: int = Defaults.USER_CHATS_LIMIT,
    ) -> List[ChatSummary]:
        """The user's chats in one organization, most recently updated first."""
        limit = InputValidator.validate_positive_int(limit, "limit", maximum=Defaults.MAX_SEARCH_LIMIT)
        sessions = self._store.list_sessions(user_id, organization_id, meeting_id=meeting_id, limit=limit)

        titles: Dict[str, Optional[str]] = {}
        summaries = []
        for session in sessions:
            messages = self._store.list_messages(session.id)
            last = messages[-1].content[: Defaults.CHAT_PREVIEW_CHARS] if messages else None

            meeting_title = None
            if session.meeting_id:
                if session.meeting_id not in titles:
                    transcript = self._load_transcript(organization_id, session.meeting_id)
                    titles[session.meeting_id] = transcript.title if transcript else None
                meeting_title = titles[session.meeting_id]

            summaries.append(
                ChatSummary(
                    id=session.id,
                    title=session.title,
                    meeting_id=session.meeting_id,
                    meeting_title=meeting_title,
                    status=session.status,
                    message_count=len(messages),
                    last_message=last,
                    updated_at=session.updated_at,
                )
            )
        return summaries

    def delete_chat(self, chat_id: str, user_id: str) -> None:
        """Delete the session together with all its messages.

        Raises:
            NotFoundError: If the chat does not exist or belongs to another user.
        """
        with self._session_lock(chat_id):
            if not self._store.delete_session(chat_id, user_id):
                raise NotFoundError("Chat", chat_id)
        logger.info("chat_deleted", chat_id=chat_id)

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def send_message(
        self,
        chat_id: str,
        user_id: str,
        organization_id: str,
        message: str,
        meeting_id: Optional[str] = None,
    ) -> ChatResponse:
        """Answer ``message`` from meeting context and record both turns.

        ``meeting_id`` overrides the session's meeting for this turn only.

        Raises:
            NotFoundError: If the chat is not the caller's.
            ValidationError: If the message is empty or too long.
            NoProviderAvailableError: If no LLM provider produced an answer.
                The user message stays persisted; no assistant message is.
            QuotaExceededError: If the LLM provider rate-limits the caller.
        """
        message = InputValidator.validate_non_empty_string(
            message, "message", max_length=self._max_message_chars
        )
        InputValidator.validate_identifier(organization_id, "organization_id")
        if meeting_id is not None:
            InputValidator.validate_identifier(meeting_id, "meeting_id")

        with self._session_lock(chat_id):
            session = self._require_session(chat_id, user_id)
            if session.organization_id != organization_id:
                raise NotFoundError("Chat", chat_id)

            prior = self._store.list_messages(chat_id)
            history = prior[-self._max_history:] if self._max_history > 0 else []
            last_at = prior[-1].created_at if prior else None

            user_turn = ChatMessage(
                id=str(uuid.uuid4()),
                chat_id=chat_id,
                role=ChatRole.USER,
                content=message,
                created_at=_next_timestamp(last_at),
            )
            self._store.append_message(user_turn)

            target_meeting = meeting_id or session.meeting_id
            started = time.time()
            context_chunks = self._retrieve(organization_id, target_meeting, message)

            meeting_title = None
            meeting_summary = None
            if target_meeting:
                transcript = self._load_transcript(organization_id, target_meeting)
                meeting_title = transcript.title if transcript else Defaults.UNKNOWN_MEETING_TITLE
                meeting_summary = transcript.summary if transcript else None

            system_prompt = build_system_prompt(
                build_context(context_chunks, meeting_title, meeting_summary)
            )
            result = self._llm.generate(system_prompt, history, message)
            latency_ms = int((time.time() - started) * 1000)

            assistant_turn = ChatMessage(
                id=str(uuid.uuid4()),
                chat_id=chat_id,
                role=ChatRole.ASSISTANT,
                content=result.text,
                citations=build_citations(context_chunks, self._excerpt_chars),
                model=result.model_id,
                tokens=result.tokens_used,
                latency_ms=latency_ms,
                created_at=_next_timestamp(user_turn.created_at),
            )
            self._store.append_message(assistant_turn)

        followups = self._suggest(message, result.text, context_chunks)
        logger.info(
            "message_answered",
            chat_id=chat_id,
            meeting_id=target_meeting,
            context_chunks=len(context_chunks),
            history_messages=len(history),
            model=result.model_id,
            tokens=result.tokens_used,
            latency_ms=latency_ms,
        )
        return ChatResponse(message=assistant_turn, suggested_followups=followups)

    def generate_meeting_suggestions(self, organization_id: str, meeting_id: str) -> List[str]:
        """Starter questions for a meeting; empty when it is unknown to the organization."""
        InputValidator.validate_identifier(organization_id, "organization_id")
        InputValidator.validate_identifier(meeting_id, "meeting_id")
        transcript = self._load_transcript(organization_id, meeting_id)
        if transcript is None:
            return []
        return meeting_starter_questions(transcript)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _session_lock(self, chat_id: str) -> Iterator[None]:
        """Serialize work on one chat; the entry lives only while someone holds or waits on it."""
        with self._locks_guard:
            entry = self._locks.get(chat_id)
            if entry is None:
                entry = self._locks[chat_id] = _ChatLock()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._locks[chat_id]

    def _require_session(self, chat_id: str, user_id: str) -> ChatSession:
        session = self._store.get_session(chat_id, user_id)
        if session is None:
            raise NotFoundError("Chat", chat_id)
        return session

    def _retrieve(self, organization_id: str, meeting_id: Optional[str], query: str) -> List[ScoredChunk]:
        if meeting_id:
            return self._retriever.get_context_chunks(
                organization_id, meeting_id, query, limit=self._max_context_chunks
            )
        return self._retriever.cross_meeting_search(
            organization_id, query, limit=self._max_context_chunks
        )

    def _load_transcript(self, organization_id: str, meeting_id: str) -> Optional[MeetingTranscript]:
        """Transcript if it exists and belongs to the organization."""
        try:
            transcript = self._transcripts.get_transcript(meeting_id)
        except ExternalServiceError as e:
            logger.warning("transcript_unavailable", meeting_id=meeting_id, error=e.message)
            return None
        if transcript is None or transcript.organization_id != organization_id:
            return None
        return transcript

    def _suggest(self, message: str, answer: str, context_chunks: List[ScoredChunk]) -> List[str]:
        try:
            return self._followups.suggest(message, answer, context_chunks)
        except Exception as e:
            logger.warning("followup_generation_failed", error_type=type(e).__name__, error=str(e))
            return []


class _ChatLock:
    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.holders = 0


def _next_timestamp(previous):
    """Now, nudged past ``previous`` so messages in a chat never share a timestamp."""
    now = utc_now()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now

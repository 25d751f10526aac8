"""
In-memory chat store adapter for local development and tests.

Implements ChatStorePort with plain dicts guarded by one lock.
NOT for production: no persistence across restarts.
"""

from __future__ import annotations

import threading
from typing import Dict, List, Optional

from domain.models import ChatMessage, ChatSession, ChatStatus
from shared_utils.logging_utils import get_scoped_logger
from shared_utils.constants import LogScope
from shared_utils.error_handler import NotFoundError


logger = get_scoped_logger(LogScope.ADAPTER)


class InMemoryChatStoreAdapter:
    """Dict-backed implementation of ChatStorePort."""

    def __init__(self) -> None:
        self._sessions: Dict[str, ChatSession] = {}
        self._messages: Dict[str, List[ChatMessage]] = {}
        self._lock = threading.Lock()

    def create_session(self, session: ChatSession) -> None:
        with self._lock:
            self._sessions[session.id] = session
            self._messages[session.id] = []
        logger.info("inmemory_chat_created", chat_id=session.id)

    def get_session(self, chat_id: str, user_id: str) -> Optional[ChatSession]:
        with self._lock:
            session = self._sessions.get(chat_id)
        if session is None or session.user_id != user_id:
            return None
        return session

    def list_sessions(
        self,
        user_id: str,
        organization_id: str,
        meeting_id: Optional[str] = None,
        limit: int = 20,
    ) -> List[ChatSession]:
        with self._lock:
            sessions = list(self._sessions.values())
        owned = [
            s for s in sessions
            if s.user_id == user_id
            and s.organization_id == organization_id
            and (meeting_id is None or s.meeting_id == meeting_id)
        ]
        owned.sort(key=lambda s: s.updated_at, reverse=True)
        return owned[:limit]

    def append_message(self, message: ChatMessage) -> None:
        with self._lock:
            session = self._sessions.get(message.chat_id)
            if session is None:
                raise NotFoundError("Chat", message.chat_id)
            self._messages[message.chat_id].append(message)
            self._sessions[message.chat_id] = session.model_copy(
                update={"status": ChatStatus.ACTIVE, "updated_at": message.created_at}
            )

    def list_messages(self, chat_id: str) -> List[ChatMessage]:
        with self._lock:
            messages = list(self._messages.get(chat_id, []))
        return sorted(messages, key=lambda m: m.created_at)

    def delete_session(self, chat_id: str, user_id: str) -> bool:
        with self._lock:
            session = self._sessions.get(chat_id)
            if session is None or session.user_id != user_id:
                return False
            del self._sessions[chat_id]
            removed = self._messages.pop(chat_id, [])
        logger.info("inmemory_chat_deleted", chat_id=chat_id, messages_deleted=len(removed))
        return True

"""
Port interface for chat session and message persistence.

Implementations: InMemoryChatStoreAdapter, DynamoChatStoreAdapter (adapters/)
"""

from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable

from domain.models import ChatMessage, ChatSession


@runtime_checkable
class ChatStorePort(Protocol):
    """Sessions own their messages; deleting a session deletes both."""

    def create_session(self, session: ChatSession) -> None:
        ...

    def get_session(self, chat_id: str, user_id: str) -> Optional[ChatSession]:
        """Return the session only if it exists and belongs to ``user_id``."""
        ...

    def list_sessions(
        self,
        user_id: str,
        organization_id: str,
        meeting_id: Optional[str] = None,
        limit: int = 20,
    ) -> List[ChatSession]:
        """Sessions of a user, most recently updated first."""
        ...

    def append_message(self, message: ChatMessage) -> None:
        """Persist a message and mark its session active and updated.

        Raises:
            NotFoundError: If the session no longer exists.
        """
        ...

    def list_messages(self, chat_id: str) -> List[ChatMessage]:
        """All messages of a session in creation order."""
        ...

    def delete_session(self, chat_id: str, user_id: str) -> bool:
        """Delete the session and all its messages together.

        Returns:
            False if no session owned by ``user_id`` existed.
        """
        ...

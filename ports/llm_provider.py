"""
Port interfaces for LLM and embedding providers.

core_intelligence/providers/ implements these; the embedding and LLM
clients in services/ depend on the interface, not the impl.
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from domain.models import ChatMessage, EmbeddingResult, GenerationResult


@runtime_checkable
class EmbeddingProviderPort(Protocol):
    """Abstract interface for text embedding."""

    name: str

    def is_available(self) -> bool:
        """True once the client is initialised with credentials."""
        ...

    def embed_text(self, text: str) -> EmbeddingResult:
        """Embed a single text string.

        Raises:
            ProviderError: If the call fails or the output is malformed.
            QuotaExceededError: If the provider rate-limits the caller.
        """
        ...

    def get_embedding_dimension(self) -> int:
        """Return the dimensionality of produced embeddings."""
        ...


@runtime_checkable
class LLMProviderPort(Protocol):
    """Abstract interface for chat-style generation."""

    name: str
    model_id: str

    def is_available(self) -> bool:
        ...

    def chat(
        self,
        system_prompt: str,
        history: List[ChatMessage],
        user_message: str,
    ) -> GenerationResult:
        """Generate a reply to ``user_message`` given prior turns.

        Args:
            system_prompt: Instructions plus retrieved context.
            history: Prior turns, oldest first.
            user_message: The new question.

        Returns:
            GenerationResult carrying this provider's model id.

        Raises:
            ProviderError: If the call fails.
            QuotaExceededError: If the provider rate-limits the caller.
        """
        ...

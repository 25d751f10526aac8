"""
EmbeddingClient — text to vector with token accounting.

Wraps an optional embedding provider. ``is_available()`` is the
graceful-degradation signal every retrieval and indexing path checks
before calling ``embed``.
"""

from __future__ import annotations

from typing import Optional

from domain.models import EmbeddingResult
from ports.llm_provider import EmbeddingProviderPort
from shared_utils.constants import Defaults, LogScope
from shared_utils.error_handler import NoProviderAvailableError, ProviderError, QuotaExceededError
from shared_utils.logging_utils import ContextualLogger


logger = ContextualLogger(scope=LogScope.EMBEDDING)


class EmbeddingClient:
    """Single entry point for embeddings, whatever the configured provider."""

    def __init__(
        self,
        *,
        provider: Optional[EmbeddingProviderPort],
        max_input_chars: int = Defaults.EMBEDDING_MAX_INPUT_CHARS,
    ) -> None:
        self._provider = provider
        self._max_input_chars = max_input_chars

    @property
    def provider_name(self) -> Optional[str]:
        return self._provider.name if self._provider is not None else None

    def is_available(self) -> bool:
        """True when a provider is configured and initialised."""
        return self._provider is not None and self._provider.is_available()

    def truncate(self, text: str) -> str:
        """Cut ``text`` to the provider's accepted size. Deterministic."""
        return text[: self._max_input_chars]

    def embed(self, text: str) -> EmbeddingResult:
        """Embed ``text``.

        Raises:
            NoProviderAvailableError: If no provider is configured.
            ProviderError: If the call fails or the vector is malformed.
            QuotaExceededError: If the provider rate-limits the caller.
        """
        if not self.is_available():
            raise NoProviderAvailableError("embedding", "no embedding provider configured")

        payload = self.truncate(text)
        try:
            result = self._provider.embed_text(payload)
        except (ProviderError, QuotaExceededError):
            raise
        except Exception as e:
            raise ProviderError(
                provider=self._provider.name,
                message=str(e) or type(e).__name__,
                context={"error_type": type(e).__name__},
            ) from e

        expected = self._provider.get_embedding_dimension()
        if not result.vector or (expected and len(result.vector) != expected):
            raise ProviderError(
                provider=self._provider.name,
                message="malformed embedding",
                context={"expected_dimension": expected, "actual_dimension": len(result.vector)},
            )

        logger.debug(
            "text_embedded",
            input_chars=len(text),
            truncated=len(payload) < len(text),
            tokens_used=result.tokens_used,
        )
        return result

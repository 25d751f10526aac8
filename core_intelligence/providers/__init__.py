"""
Abstract base classes for swappable providers.
Enables dependency injection and flexible component swapping.
"""

from abc import ABC, abstractmethod
from typing import Any, List
import logging

from llama_index.core.llms import ChatMessage as LlamaChatMessage, MessageRole

from domain.models import ChatMessage, ChatRole, EmbeddingResult, GenerationResult
from shared_utils.error_handler import ProviderError, QuotaExceededError


class BaseProvider(ABC):
    """Base class for all providers."""

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    @abstractmethod
    def initialize(self) -> None:
        """Initialize provider. Called after instantiation."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if provider is available and credentials are valid."""
        pass

    def _translate_error(self, exc: Exception) -> Exception:
        """Map an SDK exception onto the application error hierarchy.

        HTTP 429 from any SDK becomes QuotaExceededError; everything else
        becomes ProviderError.
        """
        if isinstance(exc, (ProviderError, QuotaExceededError)):
            return exc
        status_code = getattr(exc, "status_code", None)
        if status_code is None:
            status_code = getattr(getattr(exc, "response", None), "status_code", None)
        if status_code == 429:
            return QuotaExceededError(
                f"{self.name} quota exceeded",
                context={"provider": self.name},
            )
        return ProviderError(
            provider=self.name,
            message=str(exc) or type(exc).__name__,
            context={"error_type": type(exc).__name__},
        )


class EmbeddingProviderBase(BaseProvider):
    """Abstract base for embedding providers."""

    @abstractmethod
    def embed_text(self, text: str) -> EmbeddingResult:
        """Generate embedding for single text."""
        pass

    @abstractmethod
    def get_embedding_dimension(self) -> int:
        """Return dimensionality of embeddings."""
        pass


class LLMProviderBase(BaseProvider):
    """Abstract base for chat LLM providers backed by llama_index."""

    def __init__(self, name: str, model_id: str):
        super().__init__(name=name)
        self.model_id = model_id
        self._llm = None

    def is_available(self) -> bool:
        return self._llm is not None

    def chat(self, system_prompt: str, history: List[ChatMessage], user_message: str) -> GenerationResult:
        """Send system prompt, prior turns and the new message in one chat call."""
        if not self.is_available():
            raise ProviderError(provider=self.name, message="provider not initialized")

        messages = [LlamaChatMessage(role=MessageRole.SYSTEM, content=system_prompt)]
        for turn in history:
            role = MessageRole.ASSISTANT if turn.role == ChatRole.ASSISTANT else MessageRole.USER
            messages.append(LlamaChatMessage(role=role, content=turn.content))
        messages.append(LlamaChatMessage(role=MessageRole.USER, content=user_message))

        try:
            response = self._llm.chat(messages)
        except Exception as e:
            self.logger.error(
                "LLM chat failed",
                extra={"scope": "provider", "provider": self.name, "error_type": type(e).__name__}
            )
            raise self._translate_error(e) from e

        text = (response.message.content or "").strip()
        if not text:
            raise ProviderError(provider=self.name, message="empty completion")

        return GenerationResult(
            text=text,
            model_id=self.model_id,
            tokens_used=token_usage(response),
        )


def token_usage(response: Any) -> int:
    """Total tokens reported by a llama_index chat response, 0 if unreported.

    OpenAI puts counts in ``additional_kwargs``; Anthropic and Bedrock expose
    the SDK payload on ``raw`` with ``usage.input_tokens``/``output_tokens``.
    """
    extra = getattr(response, "additional_kwargs", None) or {}
    if "total_tokens" in extra:
        return int(extra["total_tokens"])
    if "prompt_tokens" in extra or "completion_tokens" in extra:
        return int(extra.get("prompt_tokens", 0)) + int(extra.get("completion_tokens", 0))

    raw = getattr(response, "raw", None)
    usage = raw.get("usage") if isinstance(raw, dict) else getattr(raw, "usage", None)
    if usage is None:
        return 0
    if isinstance(usage, dict):
        input_tokens = usage.get("input_tokens", usage.get("prompt_tokens", 0))
        output_tokens = usage.get("output_tokens", usage.get("completion_tokens", 0))
    else:
        input_tokens = getattr(usage, "input_tokens", 0)
        output_tokens = getattr(usage, "output_tokens", 0)
    return int(input_tokens or 0) + int(output_tokens or 0)

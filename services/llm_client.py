"""
LLMClient — ordered primary/fallback generation.

The primary provider is tried first; on any provider error the next
configured provider is tried once. Quota errors are surfaced as-is without
falling back.
"""

from __future__ import annotations

import time
from typing import List, Optional, Sequence

from domain.models import ChatMessage, GenerationResult
from ports.llm_provider import LLMProviderPort
from shared_utils.constants import LogScope
from shared_utils.error_handler import NoProviderAvailableError, QuotaExceededError
from shared_utils.logging_utils import ContextualLogger


logger = ContextualLogger(scope=LogScope.LLM)


class LLMClient:
    """Generates answers through the first working provider of the chain."""

    def __init__(self, *, providers: Sequence[LLMProviderPort]) -> None:
        self._providers = list(providers)

    @property
    def model_ids(self) -> List[str]:
        return [p.model_id for p in self._providers]

    def is_available(self) -> bool:
        return any(p.is_available() for p in self._providers)

    def generate(
        self,
        system_prompt: str,
        history: List[ChatMessage],
        user_message: str,
    ) -> GenerationResult:
        """Return the first successful generation.

        Raises:
            NoProviderAvailableError: If no provider is configured, or the
                primary and fallback both fail.
            QuotaExceededError: If a provider rate-limits the caller.
        """
        available = [p for p in self._providers if p.is_available()]
        if not available:
            raise NoProviderAvailableError("llm", "no LLM provider configured")

        last_error: Optional[Exception] = None
        for attempt, provider in enumerate(available[:2]):
            started = time.time()
            try:
                result = provider.chat(system_prompt, history, user_message)
            except QuotaExceededError:
                logger.warning("llm_quota_exceeded", provider=provider.name)
                raise
            except Exception as e:
                last_error = e
                logger.warning(
                    "llm_provider_failed",
                    provider=provider.name,
                    attempt=attempt + 1,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                continue

            logger.info(
                "llm_generation_completed",
                provider=provider.name,
                model_id=result.model_id,
                fallback_used=attempt > 0,
                tokens_used=result.tokens_used,
                elapsed_ms=int((time.time() - started) * 1000),
            )
            return result

        raise NoProviderAvailableError(
            "llm",
            "all LLM providers failed",
            context={
                "providers": [p.name for p in available[:2]],
                "last_error": type(last_error).__name__ if last_error else None,
            },
        ) from last_error

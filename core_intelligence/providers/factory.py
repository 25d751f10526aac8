"""
Factory for creating configured provider instances.

Providers are capability-checked: a provider whose credentials are missing
is skipped (logged, not raised), so callers get ``None`` or a shorter chain
and treat that as "unavailable".
"""

from typing import List, Optional
import logging

from core_intelligence.providers import EmbeddingProviderBase, LLMProviderBase
from core_intelligence.providers.anthropic_llm import AnthropicLLMProvider
from core_intelligence.providers.bedrock_embedding import BedrockEmbeddingProvider
from core_intelligence.providers.bedrock_llm import BedrockLLMProvider
from core_intelligence.providers.openai_embedding import OpenAIEmbeddingProvider
from core_intelligence.providers.openai_llm import OpenAILLMProvider
from shared_utils.config_loader import Settings, get_settings
from shared_utils.constants import EmbeddingProvider, LLMProvider, LogScope
from shared_utils.error_handler import ConfigurationError


logger = logging.getLogger(__name__)


class EmbeddingProviderFactory:
    """Factory for creating embedding providers."""

    @staticmethod
    def create(settings: Optional[Settings] = None) -> Optional[EmbeddingProviderBase]:
        """Create the configured embedding provider.

        Returns:
            Initialized provider, or None when its credentials are not configured.

        Raises:
            ConfigurationError: If the provider type is unknown.
        """
        settings = settings or get_settings()
        embed_provider = settings.embed_provider

        logger.info(
            "Creating embedding provider",
            extra={"scope": LogScope.CONFIG, "provider": embed_provider}
        )

        if embed_provider == EmbeddingProvider.OPENAI.value:
            if not settings.openai_api_key:
                logger.warning(
                    "OpenAI embedding provider not configured",
                    extra={"scope": LogScope.CONFIG, "missing": "OPENAI_API_KEY"}
                )
                return None
            provider = OpenAIEmbeddingProvider(
                api_key=settings.openai_api_key,
                model=settings.openai_embed_model,
                dimension=settings.embedding_dimension,
                timeout=settings.provider_timeout_seconds,
                max_retries=settings.provider_max_retries,
            )

        elif embed_provider == EmbeddingProvider.BEDROCK.value:
            if not settings.bedrock_region or not settings.bedrock_embed_model_id:
                logger.warning(
                    "Bedrock embedding provider not configured",
                    extra={"scope": LogScope.CONFIG, "missing": "BEDROCK_REGION"}
                )
                return None
            provider = BedrockEmbeddingProvider(
                model_id=settings.bedrock_embed_model_id,
                region=settings.bedrock_region,
                dimension=settings.embedding_dimension,
                timeout=settings.provider_timeout_seconds,
                max_retries=settings.provider_max_retries,
            )

        else:
            raise ConfigurationError(f"Unknown embedding provider: {embed_provider}")

        provider.initialize()
        return provider


class LLMProviderFactory:
    """Factory for creating LLM providers."""

    @staticmethod
    def create(provider_type: str, settings: Optional[Settings] = None) -> Optional[LLMProviderBase]:
        """Create one LLM provider.

        Returns:
            Initialized provider, or None when not configured or disabled.

        Raises:
            ConfigurationError: If the provider type is unknown.
        """
        settings = settings or get_settings()
        common = {
            "max_tokens": settings.llm_max_tokens,
            "temperature": settings.llm_temperature,
            "timeout": settings.provider_timeout_seconds,
            "max_retries": settings.provider_max_retries,
        }

        if provider_type == LLMProvider.NONE.value:
            return None

        if provider_type == LLMProvider.ANTHROPIC.value:
            if not settings.anthropic_api_key:
                logger.warning(
                    "Anthropic LLM provider not configured",
                    extra={"scope": LogScope.CONFIG, "missing": "ANTHROPIC_API_KEY"}
                )
                return None
            provider = AnthropicLLMProvider(
                model_id=settings.anthropic_llm_model_id,
                api_key=settings.anthropic_api_key,
                **common,
            )

        elif provider_type == LLMProvider.OPENAI.value:
            if not settings.openai_api_key:
                logger.warning(
                    "OpenAI LLM provider not configured",
                    extra={"scope": LogScope.CONFIG, "missing": "OPENAI_API_KEY"}
                )
                return None
            provider = OpenAILLMProvider(
                model_id=settings.openai_llm_model_id,
                api_key=settings.openai_api_key,
                **common,
            )

        elif provider_type == LLMProvider.BEDROCK.value:
            if not settings.bedrock_region or not settings.bedrock_llm_model_id:
                logger.warning(
                    "Bedrock LLM provider not configured",
                    extra={"scope": LogScope.CONFIG, "missing": "BEDROCK_REGION"}
                )
                return None
            provider = BedrockLLMProvider(
                model_id=settings.bedrock_llm_model_id,
                region=settings.bedrock_region,
                **common,
            )

        else:
            raise ConfigurationError(f"Unknown LLM provider: {provider_type}")

        provider.initialize()
        return provider

    @staticmethod
    def create_chain(settings: Optional[Settings] = None) -> List[LLMProviderBase]:
        """Primary then fallback, skipping any that are not configured."""
        settings = settings or get_settings()
        chain: List[LLMProviderBase] = []
        ordered = [settings.llm_primary_provider]
        if settings.llm_fallback_provider != settings.llm_primary_provider:
            ordered.append(settings.llm_fallback_provider)
        for provider_type in ordered:
            provider = LLMProviderFactory.create(provider_type, settings)
            if provider is not None:
                chain.append(provider)

        logger.info(
            "LLM provider chain created",
            extra={"scope": LogScope.CONFIG, "providers": [p.name for p in chain]}
        )
        return chain

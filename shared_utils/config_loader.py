from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from functools import lru_cache
from typing import Optional
import json

import boto3

from shared_utils.constants import Defaults, LogScope, ModelIDs
from shared_utils.logging_utils import get_scoped_logger

logger = get_scoped_logger(LogScope.CONFIG)


def get_secret_from_aws(secret_name: str, key: str, region: str = Defaults.AWS_REGION) -> str:
    """Fetch one key of a JSON secret from AWS Secrets Manager.

    Args:
        secret_name: Name of the secret in Secrets Manager
        key: Field inside the JSON secret (e.g. ``openai_api_key``)
        region: AWS region

    Returns:
        Secret value or empty string if fetch fails
    """
    try:
        client = boto3.client("secretsmanager", region_name=region)
        response = client.get_secret_value(SecretId=secret_name)
        if "SecretString" in response:
            secret = json.loads(response["SecretString"])
            return secret.get(key, "")
        return ""
    except Exception as e:
        logger.warning("secret_fetch_failed", secret_name=secret_name, error=str(e))
        return ""


class Settings(BaseSettings):
    """Application configuration with environment variable precedence.

    Precedence: 1) Environment Variables > 2) .env file > 3) Class defaults

    Every field has a default: a bare process boots with in-memory storage
    and no model providers, which the services treat as "unavailable".
    """
    # Application metadata
    app_name: str = "Meeting Intelligence RAG Engine"
    app_version: str = "1.0.0"
    app_description: str = "Retrieval-augmented Q&A over meeting transcripts"
    environment: str = "development"
    log_level: str = Defaults.LOG_LEVEL

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    rate_limit: str = "60/minute"

    # Embeddings
    embed_provider: str = "openai"
    openai_embed_model: str = ModelIDs.OPENAI_EMBED_MODEL
    bedrock_embed_model_id: str = ModelIDs.BEDROCK_TITAN_EMBED_V2
    embedding_dimension: int = Defaults.EMBEDDING_DIMENSION
    embedding_max_input_chars: int = Defaults.EMBEDDING_MAX_INPUT_CHARS

    # LLM (ordered: primary then fallback)
    llm_primary_provider: str = "anthropic"
    llm_fallback_provider: str = "openai"
    anthropic_llm_model_id: str = ModelIDs.ANTHROPIC_CLAUDE_SONNET
    openai_llm_model_id: str = ModelIDs.OPENAI_GPT_4O_MINI
    bedrock_llm_model_id: str = ModelIDs.BEDROCK_CLAUDE_3_HAIKU
    llm_max_tokens: int = Defaults.LLM_MAX_TOKENS
    llm_temperature: float = Defaults.LLM_TEMPERATURE

    # Credentials (keys may instead be read from Secrets Manager)
    openai_api_key: Optional[str] = None
    openai_secret_name: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    anthropic_secret_name: Optional[str] = None
    bedrock_region: Optional[str] = None

    # Provider call bounds
    provider_timeout_seconds: float = Defaults.REQUEST_TIMEOUT
    provider_max_retries: int = Defaults.MAX_RETRIES

    # Chunking
    chunk_size_tokens: int = Defaults.CHUNK_SIZE_TOKENS
    chunk_overlap_tokens: int = Defaults.CHUNK_OVERLAP_TOKENS
    words_per_token: float = Defaults.WORDS_PER_TOKEN

    # Retrieval
    semantic_similarity_threshold: float = Defaults.SEMANTIC_SIMILARITY_THRESHOLD
    hybrid_similarity_threshold: float = Defaults.HYBRID_SIMILARITY_THRESHOLD
    default_search_limit: int = Defaults.DEFAULT_SEARCH_LIMIT
    max_search_limit: int = Defaults.MAX_SEARCH_LIMIT

    # Conversation
    max_context_chunks: int = Defaults.MAX_CONTEXT_CHUNKS
    max_history_messages: int = Defaults.MAX_HISTORY_MESSAGES
    max_message_chars: int = Defaults.MAX_MESSAGE_CHARS
    max_followups: int = Defaults.MAX_FOLLOWUPS
    citation_excerpt_chars: int = Defaults.CITATION_EXCERPT_CHARS

    # Storage
    vector_store_backend: str = "memory"
    lancedb_uri: str = "./data/lancedb"
    lancedb_table_name: str = "meeting_chunks"
    chat_store_backend: str = "memory"
    dynamodb_chat_table: str = "MeetingChats"
    transcript_s3_bucket: str = ""
    transcript_s3_prefix: str = "transcripts"
    aws_region: str = Defaults.AWS_REGION
    aws_endpoint_url: Optional[str] = None

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    @field_validator("embed_provider")
    @classmethod
    def validate_embed_provider(cls, v: str) -> str:
        """Validate embedding provider is supported."""
        valid_providers = {"openai", "bedrock"}
        if v.lower() not in valid_providers:
            raise ValueError(f"embed_provider must be one of {valid_providers}, got {v}")
        return v.lower()

    @field_validator("llm_primary_provider", "llm_fallback_provider")
    @classmethod
    def validate_llm_provider(cls, v: str) -> str:
        """Validate LLM provider is supported."""
        valid_providers = {"anthropic", "openai", "bedrock", "none"}
        if v.lower() not in valid_providers:
            raise ValueError(f"llm provider must be one of {valid_providers}, got {v}")
        return v.lower()

    @field_validator("vector_store_backend")
    @classmethod
    def validate_vector_store_backend(cls, v: str) -> str:
        valid_backends = {"memory", "lancedb"}
        if v.lower() not in valid_backends:
            raise ValueError(f"vector_store_backend must be one of {valid_backends}, got {v}")
        return v.lower()

    @field_validator("chat_store_backend")
    @classmethod
    def validate_chat_store_backend(cls, v: str) -> str:
        valid_backends = {"memory", "dynamodb"}
        if v.lower() not in valid_backends:
            raise ValueError(f"chat_store_backend must be one of {valid_backends}, got {v}")
        return v.lower()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is recognized."""
        valid_envs = {"development", "staging", "production"}
        if v.lower() not in valid_envs:
            raise ValueError(f"environment must be one of {valid_envs}, got {v}")
        return v.lower()

    @field_validator("semantic_similarity_threshold", "hybrid_similarity_threshold")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        if not -1.0 <= v <= 1.0:
            raise ValueError(f"similarity threshold must be within [-1, 1], got {v}")
        return v

    @property
    def words_per_chunk(self) -> int:
        """Whitespace words per chunk derived from the token budget."""
        return int(self.chunk_size_tokens * self.words_per_token)

    @property
    def overlap_words(self) -> int:
        """Whitespace words carried into the next chunk."""
        return int(self.chunk_overlap_tokens * self.words_per_token)


@lru_cache()
def get_settings() -> Settings:
    """Load and cache application settings.

    API keys missing from the environment are fetched from AWS Secrets
    Manager when the matching ``*_SECRET_NAME`` is configured.

    Returns:
        Validated Settings instance

    Raises:
        pydantic.ValidationError: If settings are invalid
    """
    settings = Settings()
    region = settings.bedrock_region or settings.aws_region

    if not settings.openai_api_key and settings.openai_secret_name:
        secret_key = get_secret_from_aws(settings.openai_secret_name, "openai_api_key", region)
        if secret_key:
            settings.openai_api_key = secret_key
            logger.debug("fetched_openai_key_from_secrets_manager")

    if not settings.anthropic_api_key and settings.anthropic_secret_name:
        secret_key = get_secret_from_aws(settings.anthropic_secret_name, "anthropic_api_key", region)
        if secret_key:
            settings.anthropic_api_key = secret_key
            logger.debug("fetched_anthropic_key_from_secrets_manager")

    # Log loaded configuration (secrets omitted)
    logger.info(
        "configuration_loaded",
        environment=settings.environment,
        embed_provider=settings.embed_provider,
        llm_primary_provider=settings.llm_primary_provider,
        llm_fallback_provider=settings.llm_fallback_provider,
        vector_store_backend=settings.vector_store_backend,
        chat_store_backend=settings.chat_store_backend,
    )

    return settings

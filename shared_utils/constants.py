"""
Constants management.
Centralized configuration for all magic values, model IDs, and defaults.
"""

from enum import Enum
from typing import Final


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class EmbeddingProvider(str, Enum):
    """Supported embedding providers."""
    OPENAI = "openai"
    BEDROCK = "bedrock"


class LLMProvider(str, Enum):
    """Supported LLM providers."""
    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    BEDROCK = "bedrock"
    NONE = "none"


class StorageBackend(str, Enum):
    """Storage back-ends selectable through configuration."""
    MEMORY = "memory"
    LANCEDB = "lancedb"
    DYNAMODB = "dynamodb"


# Model IDs
class ModelIDs:
    """Centralized model identifiers."""
    # Anthropic
    ANTHROPIC_CLAUDE_SONNET: Final[str] = "claude-3-5-sonnet-20241022"

    # OpenAI
    OPENAI_GPT_4O_MINI: Final[str] = "gpt-4o-mini"
    OPENAI_EMBED_MODEL: Final[str] = "text-embedding-3-small"

    # Bedrock
    BEDROCK_CLAUDE_3_HAIKU: Final[str] = "anthropic.claude-3-haiku-20240307-v1:0"
    BEDROCK_TITAN_EMBED_V2: Final[str] = "amazon.titan-embed-text-v2:0"


# Default values
class Defaults:
    """Defaults for retrieval, chunking and conversation tuning."""
    EMBEDDING_DIMENSION: Final[int] = 1536  # OpenAI small dimension
    EMBEDDING_MAX_INPUT_CHARS: Final[int] = 8000
    MAX_RETRIES: Final[int] = 2
    REQUEST_TIMEOUT: Final[float] = 30.0
    LOG_LEVEL: Final[str] = "INFO"
    AWS_REGION: Final[str] = "eu-west-2"

    # Chunking (token budgets are approximated by whitespace words)
    CHUNK_SIZE_TOKENS: Final[int] = 500
    CHUNK_OVERLAP_TOKENS: Final[int] = 50
    WORDS_PER_TOKEN: Final[float] = 0.75

    # Retrieval
    SEMANTIC_SIMILARITY_THRESHOLD: Final[float] = 0.7
    HYBRID_SIMILARITY_THRESHOLD: Final[float] = 0.6
    DEFAULT_SEARCH_LIMIT: Final[int] = 10
    MAX_SEARCH_LIMIT: Final[int] = 50

    # Conversation
    MAX_CONTEXT_CHUNKS: Final[int] = 8
    MAX_HISTORY_MESSAGES: Final[int] = 10
    MAX_MESSAGE_CHARS: Final[int] = 2000
    MAX_FOLLOWUPS: Final[int] = 3
    MAX_MEETING_SUGGESTIONS: Final[int] = 5
    CITATION_EXCERPT_CHARS: Final[int] = 200
    CHAT_PREVIEW_CHARS: Final[int] = 100
    USER_CHATS_LIMIT: Final[int] = 20
    LLM_MAX_TOKENS: Final[int] = 1024
    LLM_TEMPERATURE: Final[float] = 0.7

    # Lexical search
    LEXICAL_PREVIEW_CHARS: Final[int] = 200
    LEXICAL_MAX_HIGHLIGHTS: Final[int] = 3

    MEETING_CHAT_TITLE: Final[str] = "Chat about meeting"
    CROSS_MEETING_CHAT_TITLE: Final[str] = "Search across meetings"
    UNKNOWN_MEETING_TITLE: Final[str] = "Meeting"


# Logging scopes
class LogScope:
    """Standardized logging scope names."""
    CONFIG = "config_loader"
    API = "api"
    VALIDATION = "validation"
    ERROR_HANDLER = "error_handler"
    PROVIDER = "provider"
    CHUNKING = "chunking"
    EMBEDDING = "embedding_client"
    LLM = "llm_client"
    SEMANTIC_SEARCH = "semantic_retriever"
    LEXICAL_SEARCH = "lexical_retriever"
    HYBRID_SEARCH = "hybrid_search"
    CONVERSATION = "conversation_manager"
    INDEXING = "indexing"
    WORKER = "worker"
    ADAPTER = "adapter"


# API endpoints and paths
class APIEndpoints:
    """API route definitions."""
    HEALTH = "/health"
    CHATS = "/api/v1/chats"
    CHAT = "/api/v1/chats/{chat_id}"
    CHAT_MESSAGES = "/api/v1/chats/{chat_id}/messages"
    SEARCH_SEMANTIC = "/api/v1/search/semantic"
    SEARCH_CROSS_MEETING = "/api/v1/search/cross-meeting"
    SEARCH_LEXICAL = "/api/v1/search/lexical"
    SEARCH_HYBRID = "/api/v1/search/hybrid"
    MEETING_SUGGESTIONS = "/api/v1/meetings/{meeting_id}/suggestions"
    MEETING_REINDEX = "/api/v1/meetings/{meeting_id}/reindex"
    MEETING_INDEX = "/api/v1/meetings/{meeting_id}/index"
    INDEX_STATS = "/api/v1/index/stats"


# Error codes
class ErrorCode(str, Enum):
    """Standardized error codes for consistency."""
    INVALID_CONFIG = "INVALID_CONFIG"
    INVALID_INPUT = "INVALID_INPUT"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    NOT_FOUND = "NOT_FOUND"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    PROVIDER_UNAVAILABLE = "PROVIDER_UNAVAILABLE"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    INDEXING_FAILED = "INDEXING_FAILED"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"

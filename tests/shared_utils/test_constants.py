"""
Tests for shared_utils.constants.

Validates enum membership and the defaults other modules rely on, so that
accidental changes are caught.
"""

from shared_utils.constants import (
    APIEndpoints,
    Defaults,
    EmbeddingProvider,
    Environment,
    ErrorCode,
    LLMProvider,
    LogScope,
    ModelIDs,
    StorageBackend,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TestEnums:
    def test_environment(self) -> None:
        assert {e.value for e in Environment} == {"development", "staging", "production"}

    def test_embedding_provider(self) -> None:
        assert {e.value for e in EmbeddingProvider} == {"openai", "bedrock"}

    def test_llm_provider_includes_none(self) -> None:
        assert LLMProvider.NONE.value == "none"
        assert len(LLMProvider) == 4

    def test_storage_backend(self) -> None:
        assert StorageBackend.LANCEDB.value == "lancedb"
        assert StorageBackend.DYNAMODB.value == "dynamodb"

    def test_error_codes_unique(self) -> None:
        values = [e.value for e in ErrorCode]
        assert len(values) == len(set(values))
        assert ErrorCode.QUOTA_EXCEEDED.value == "QUOTA_EXCEEDED"


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    def test_thresholds(self) -> None:
        assert Defaults.SEMANTIC_SIMILARITY_THRESHOLD == 0.7
        assert Defaults.HYBRID_SIMILARITY_THRESHOLD == 0.6

    def test_chunk_budget(self) -> None:
        assert Defaults.CHUNK_SIZE_TOKENS == 500
        assert Defaults.CHUNK_OVERLAP_TOKENS == 50
        assert Defaults.WORDS_PER_TOKEN == 0.75

    def test_conversation_bounds(self) -> None:
        assert Defaults.MAX_CONTEXT_CHUNKS == 8
        assert Defaults.MAX_HISTORY_MESSAGES == 10
        assert Defaults.CITATION_EXCERPT_CHARS == 200
        assert Defaults.CHAT_PREVIEW_CHARS == 100

    def test_limits(self) -> None:
        assert Defaults.DEFAULT_SEARCH_LIMIT < Defaults.MAX_SEARCH_LIMIT

    def test_embed_model_matches_dimension(self) -> None:
        assert ModelIDs.OPENAI_EMBED_MODEL == "text-embedding-3-small"
        assert Defaults.EMBEDDING_DIMENSION == 1536


# ---------------------------------------------------------------------------
# Scopes and routes
# ---------------------------------------------------------------------------


class TestLogScope:
    def test_scopes_are_distinct(self) -> None:
        scopes = [v for k, v in vars(LogScope).items() if k.isupper()]
        assert len(scopes) == len(set(scopes))


class TestAPIEndpoints:
    def test_versioned_routes(self) -> None:
        routes = [v for k, v in vars(APIEndpoints).items() if k.isupper()]
        assert APIEndpoints.HEALTH == "/health"
        assert all(r.startswith("/api/v1/") for r in routes if r != APIEndpoints.HEALTH)

    def test_path_params(self) -> None:
        assert "{chat_id}" in APIEndpoints.CHAT_MESSAGES
        assert "{meeting_id}" in APIEndpoints.MEETING_REINDEX

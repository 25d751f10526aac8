"""
Dependency injection container for managing application dependencies.
Centralizes provider, adapter and service creation; every component is
built once and handed to its consumers by reference.
"""

from typing import Any, Dict, List, Optional
import logging

from core_intelligence.engine.chunking import TranscriptChunker
from core_intelligence.engine.followups import KeywordFollowupStrategy
from core_intelligence.providers import EmbeddingProviderBase, LLMProviderBase
from core_intelligence.providers.factory import EmbeddingProviderFactory, LLMProviderFactory
from shared_utils.config_loader import get_settings
from shared_utils.constants import LogScope


logger = logging.getLogger(__name__)


class DIContainer:
    """Singleton dependency injection container."""

    _instance: Optional['DIContainer'] = None
    _providers_loaded: bool = False
    _embedding_provider: Optional[EmbeddingProviderBase] = None
    _llm_providers: Optional[List[LLMProviderBase]] = None

    # adapter singletons
    _vector_index: Optional[object] = None
    _lexical_index: Optional[object] = None
    _chat_store: Optional[object] = None
    _transcript_provider: Optional[object] = None

    # service singletons
    _embedding_client: Optional[object] = None
    _llm_client: Optional[object] = None
    _semantic_retriever: Optional[object] = None
    _lexical_retriever: Optional[object] = None
    _hybrid_search_service: Optional[object] = None
    _indexing_service: Optional[object] = None
    _conversation_manager: Optional[object] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def reset(self):
        """Reset container (useful for testing)."""
        self._providers_loaded = False
        self._embedding_provider = None
        self._llm_providers = None
        self._vector_index = None
        self._lexical_index = None
        self._chat_store = None
        self._transcript_provider = None
        self._embedding_client = None
        self._llm_client = None
        self._semantic_retriever = None
        self._lexical_retriever = None
        self._hybrid_search_service = None
        self._indexing_service = None
        self._conversation_manager = None

    # ------------------------------------------------------------------
    # Providers
    # ------------------------------------------------------------------

    def get_embedding_provider(self) -> Optional[EmbeddingProviderBase]:
        """Get or create the embedding provider (lazy singleton).

        Returns:
            Initialized provider, or None when no credential is configured.
        """
        if not self._providers_loaded:
            self._load_providers()
        return self._embedding_provider

    def get_llm_providers(self) -> List[LLMProviderBase]:
        """Ordered primary/fallback LLM providers (lazy singleton)."""
        if not self._providers_loaded:
            self._load_providers()
        return self._llm_providers

    def _load_providers(self) -> None:
        logger.info(
            "Initializing model providers",
            extra={"scope": LogScope.CONFIG}
        )
        settings = get_settings()
        self._embedding_provider = EmbeddingProviderFactory.create(settings)
        self._llm_providers = LLMProviderFactory.create_chain(settings)
        self._providers_loaded = True

    def describe_providers(self) -> Dict[str, Any]:
        """Capability report used by the health endpoint and startup log."""
        embedding = self.get_embedding_client()
        llm = self.get_llm_client()
        report = {
            "embedding_available": embedding.is_available(),
            "embedding_provider": embedding.provider_name,
            "llm_available": llm.is_available(),
            "llm_models": llm.model_ids,
        }
        logger.info(
            "Provider capability",
            extra={"scope": LogScope.CONFIG, **report}
        )
        return report

    # ------------------------------------------------------------------
    # Adapters
    # ------------------------------------------------------------------

    def get_vector_index(self):
        """Get or create the vector index adapter (lazy singleton).

        Uses InMemoryVectorIndexAdapter unless VECTOR_STORE_BACKEND=lancedb.
        """
        if self._vector_index is None:
            settings = get_settings()
            if settings.vector_store_backend == "lancedb":
                from adapters.lancedb_vector_store import LanceDBVectorIndexAdapter
                self._vector_index = LanceDBVectorIndexAdapter(
                    uri=settings.lancedb_uri,
                    table_name=settings.lancedb_table_name,
                    dimension=settings.embedding_dimension,
                )
                logger.info("Initialized LanceDBVectorIndexAdapter")
            else:
                from adapters.in_memory_vector_store import InMemoryVectorIndexAdapter
                self._vector_index = InMemoryVectorIndexAdapter()
                logger.info("Initialized InMemoryVectorIndexAdapter (local dev)")
        return self._vector_index

    def get_lexical_index(self):
        """Get or create the BM25 lexical index (lazy singleton)."""
        if self._lexical_index is None:
            from adapters.in_memory_lexical_store import InMemoryLexicalIndexAdapter
            self._lexical_index = InMemoryLexicalIndexAdapter()
            logger.info("Initialized InMemoryLexicalIndexAdapter")
        return self._lexical_index

    def get_chat_store(self):
        """Get or create the chat store adapter (lazy singleton)."""
        if self._chat_store is None:
            settings = get_settings()
            if settings.chat_store_backend == "dynamodb":
                from adapters.dynamo_chat_store import DynamoChatStoreAdapter
                self._chat_store = DynamoChatStoreAdapter(
                    table_name=settings.dynamodb_chat_table,
                    region=settings.aws_region,
                    endpoint_url=settings.aws_endpoint_url,
                )
                logger.info("Initialized DynamoChatStoreAdapter")
            else:
                from adapters.in_memory_chat_store import InMemoryChatStoreAdapter
                self._chat_store = InMemoryChatStoreAdapter()
                logger.info("Initialized InMemoryChatStoreAdapter (local dev)")
        return self._chat_store

    def get_transcript_provider(self):
        """Get or create the transcript provider (lazy singleton).

        Uses InMemoryTranscriptProviderAdapter when TRANSCRIPT_S3_BUCKET is empty.
        """
        if self._transcript_provider is None:
            settings = get_settings()
            if settings.transcript_s3_bucket:
                from adapters.s3_transcript_provider import S3TranscriptProviderAdapter
                self._transcript_provider = S3TranscriptProviderAdapter(
                    bucket=settings.transcript_s3_bucket,
                    prefix=settings.transcript_s3_prefix,
                    region=settings.aws_region,
                    endpoint_url=settings.aws_endpoint_url or "",
                )
                logger.info("Initialized S3TranscriptProviderAdapter")
            else:
                from adapters.in_memory_transcript_provider import InMemoryTranscriptProviderAdapter
                self._transcript_provider = InMemoryTranscriptProviderAdapter()
                logger.info("Initialized InMemoryTranscriptProviderAdapter (local dev)")
        return self._transcript_provider

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------

    def get_embedding_client(self):
        if self._embedding_client is None:
            from services.embedding_client import EmbeddingClient

            self._embedding_client = EmbeddingClient(
                provider=self.get_embedding_provider(),
                max_input_chars=get_settings().embedding_max_input_chars,
            )
        return self._embedding_client

    def get_llm_client(self):
        if self._llm_client is None:
            from services.llm_client import LLMClient

            self._llm_client = LLMClient(providers=self.get_llm_providers())
        return self._llm_client

    def get_semantic_retriever(self):
        """Get or create SemanticRetriever (lazy singleton)."""
        if self._semantic_retriever is None:
            from services.semantic_retriever import SemanticRetriever

            settings = get_settings()
            self._semantic_retriever = SemanticRetriever(
                embedding_client=self.get_embedding_client(),
                vector_index=self.get_vector_index(),
                threshold=settings.semantic_similarity_threshold,
                max_limit=settings.max_search_limit,
            )
            logger.info("Initialized SemanticRetriever")
        return self._semantic_retriever

    def get_lexical_retriever(self):
        """Get or create LexicalRetriever (lazy singleton)."""
        if self._lexical_retriever is None:
            from services.lexical_retriever import LexicalRetriever

            self._lexical_retriever = LexicalRetriever(
                lexical_index=self.get_lexical_index(),
                max_limit=get_settings().max_search_limit,
            )
            logger.info("Initialized LexicalRetriever")
        return self._lexical_retriever

    def get_hybrid_search_service(self):
        """Get or create HybridSearchService (lazy singleton)."""
        if self._hybrid_search_service is None:
            from services.hybrid_search_service import HybridSearchService

            settings = get_settings()
            self._hybrid_search_service = HybridSearchService(
                semantic_retriever=self.get_semantic_retriever(),
                lexical_retriever=self.get_lexical_retriever(),
                threshold=settings.hybrid_similarity_threshold,
                max_limit=settings.max_search_limit,
            )
            logger.info("Initialized HybridSearchService")
        return self._hybrid_search_service

    def get_indexing_service(self):
        """Get or create IndexingService (lazy singleton)."""
        if self._indexing_service is None:
            from services.indexing_service import IndexingService

            settings = get_settings()
            self._indexing_service = IndexingService(
                transcript_provider=self.get_transcript_provider(),
                chunker=TranscriptChunker(settings.words_per_chunk, settings.overlap_words),
                embedding_client=self.get_embedding_client(),
                vector_index=self.get_vector_index(),
                lexical_index=self.get_lexical_index(),
            )
            logger.info("Initialized IndexingService")
        return self._indexing_service

    def get_conversation_manager(self):
        """Get or create ConversationManager (lazy singleton)."""
        if self._conversation_manager is None:
            from services.conversation_manager import ConversationManager

            settings = get_settings()
            self._conversation_manager = ConversationManager(
                chat_store=self.get_chat_store(),
                semantic_retriever=self.get_semantic_retriever(),
                llm_client=self.get_llm_client(),
                transcript_provider=self.get_transcript_provider(),
                followup_strategy=KeywordFollowupStrategy(settings.max_followups),
                max_context_chunks=settings.max_context_chunks,
                max_history_messages=settings.max_history_messages,
                max_message_chars=settings.max_message_chars,
                citation_excerpt_chars=settings.citation_excerpt_chars,
            )
            logger.info("Initialized ConversationManager")
        return self._conversation_manager


# Global singleton instance
_container = DIContainer()


def get_di_container() -> DIContainer:
    """Get global DI container instance."""
    return _container

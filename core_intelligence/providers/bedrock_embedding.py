"""
Bedrock embedding provider implementation.
"""

from llama_index.embeddings.bedrock import BedrockEmbedding

from core_intelligence.providers import EmbeddingProviderBase
from domain.models import EmbeddingResult
from shared_utils.constants import Defaults, LogScope
from shared_utils.error_handler import ProviderError


class BedrockEmbeddingProvider(EmbeddingProviderBase):
    """AWS Bedrock embedding provider.

    Bedrock does not report token usage through llama_index, so
    ``tokens_used`` is estimated from the word count.
    """

    def __init__(
        self,
        model_id: str,
        region: str,
        dimension: int = Defaults.EMBEDDING_DIMENSION,
        timeout: float = Defaults.REQUEST_TIMEOUT,
        max_retries: int = Defaults.MAX_RETRIES,
    ):
        super().__init__(name=f"BedrockEmbedding({model_id})")
        self.model_id = model_id
        self.region = region
        self.dimension = dimension
        self.timeout = timeout
        self.max_retries = max_retries
        self._embedding = None

    def initialize(self) -> None:
        """Initialize Bedrock embedding client."""
        try:
            self._embedding = BedrockEmbedding(
                model_name=self.model_id,
                region_name=self.region,
                timeout=self.timeout,
                max_retries=self.max_retries,
            )
            self.logger.info(
                "Initialized Bedrock embedding provider",
                extra={
                    "scope": LogScope.CONFIG,
                    "model_id": self.model_id,
                    "region": self.region,
                    "dimension": self.dimension
                }
            )
        except Exception as e:
            self.logger.error(
                "Failed to initialize Bedrock embedding provider",
                extra={"scope": LogScope.CONFIG, "error": str(e)}
            )
            raise

    def is_available(self) -> bool:
        """Check if Bedrock embedding is available."""
        return self._embedding is not None

    def embed_text(self, text: str) -> EmbeddingResult:
        """Generate embedding for single text."""
        if not self.is_available():
            raise ProviderError(provider=self.name, message="provider not initialized")

        try:
            vector = self._embedding.get_text_embedding(text)
        except Exception as e:
            self.logger.error(
                "Bedrock embedding generation failed",
                extra={"scope": LogScope.PROVIDER, "error_type": type(e).__name__}
            )
            raise self._translate_error(e) from e

        return EmbeddingResult(
            vector=list(vector or []),
            tokens_used=int(len(text.split()) / Defaults.WORDS_PER_TOKEN),
        )

    def get_embedding_dimension(self) -> int:
        """Return dimensionality of Bedrock embeddings."""
        return self.dimension

"""
OpenAI embedding provider implementation.

Calls the embeddings endpoint through the ``openai`` SDK directly so the
billed token count (``usage.total_tokens``) is available per call.
"""

from openai import OpenAI

from core_intelligence.providers import EmbeddingProviderBase
from domain.models import EmbeddingResult
from shared_utils.constants import Defaults, LogScope, ModelIDs
from shared_utils.error_handler import ProviderError


class OpenAIEmbeddingProvider(EmbeddingProviderBase):
    """OpenAI text embedding provider."""

    def __init__(
        self,
        api_key: str,
        model: str = ModelIDs.OPENAI_EMBED_MODEL,
        dimension: int = Defaults.EMBEDDING_DIMENSION,
        timeout: float = Defaults.REQUEST_TIMEOUT,
        max_retries: int = Defaults.MAX_RETRIES,
    ):
        super().__init__(name=f"OpenAIEmbedding({model})")
        self.api_key = api_key
        self.model = model
        self.dimension = dimension
        self.timeout = timeout
        self.max_retries = max_retries
        self._client = None

    def initialize(self) -> None:
        """Initialize OpenAI client."""
        try:
            self._client = OpenAI(
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=self.max_retries,
            )
            self.logger.info(
                "Initialized OpenAI embedding provider",
                extra={
                    "scope": LogScope.CONFIG,
                    "model": self.model,
                    "dimension": self.dimension
                }
            )
        except Exception as e:
            self.logger.error(
                "Failed to initialize OpenAI embedding provider",
                extra={"scope": LogScope.CONFIG, "error": str(e)}
            )
            raise

    def is_available(self) -> bool:
        """Check if OpenAI client is configured."""
        return self._client is not None

    def embed_text(self, text: str) -> EmbeddingResult:
        """Generate embedding for single text."""
        if not self.is_available():
            raise ProviderError(provider=self.name, message="provider not initialized")

        try:
            response = self._client.embeddings.create(input=text, model=self.model)
        except Exception as e:
            self.logger.error(
                "Embedding generation failed",
                extra={"scope": LogScope.PROVIDER, "error_type": type(e).__name__}
            )
            raise self._translate_error(e) from e

        if not response.data:
            raise ProviderError(provider=self.name, message="response contained no embedding")

        usage = getattr(response, "usage", None)
        return EmbeddingResult(
            vector=list(response.data[0].embedding),
            tokens_used=int(getattr(usage, "total_tokens", 0) or 0),
        )

    def get_embedding_dimension(self) -> int:
        """Return dimensionality of OpenAI embeddings."""
        return self.dimension

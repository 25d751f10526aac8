"""
Bedrock LLM provider implementation.
"""

from llama_index.llms.bedrock import Bedrock

from core_intelligence.providers import LLMProviderBase
from shared_utils.constants import Defaults, LogScope


class BedrockLLMProvider(LLMProviderBase):
    """AWS Bedrock LLM provider."""

    def __init__(
        self,
        model_id: str,
        region: str,
        max_tokens: int = Defaults.LLM_MAX_TOKENS,
        temperature: float = Defaults.LLM_TEMPERATURE,
        timeout: float = Defaults.REQUEST_TIMEOUT,
        max_retries: int = Defaults.MAX_RETRIES,
    ):
        super().__init__(name=f"BedrockLLM({model_id})", model_id=model_id)
        self.region = region
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self.max_retries = max_retries

    def initialize(self) -> None:
        """Initialize Bedrock LLM client."""
        try:
            self._llm = Bedrock(
                model=self.model_id,
                region_name=self.region,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                timeout=self.timeout,
                max_retries=self.max_retries,
            )
            self.logger.info(
                "Initialized Bedrock LLM provider",
                extra={
                    "scope": LogScope.CONFIG,
                    "model_id": self.model_id,
                    "region": self.region
                }
            )
        except Exception as e:
            self.logger.error(
                "Failed to initialize Bedrock LLM provider",
                extra={"scope": LogScope.CONFIG, "error": str(e)}
            )
            raise

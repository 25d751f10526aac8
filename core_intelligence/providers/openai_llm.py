"""
OpenAI LLM provider implementation.
"""

from llama_index.llms.openai import OpenAI

from core_intelligence.providers import LLMProviderBase
from shared_utils.constants import Defaults, LogScope


class OpenAILLMProvider(LLMProviderBase):
    """OpenAI chat completion provider."""

    def __init__(
        self,
        model_id: str,
        api_key: str,
        max_tokens: int = Defaults.LLM_MAX_TOKENS,
        temperature: float = Defaults.LLM_TEMPERATURE,
        timeout: float = Defaults.REQUEST_TIMEOUT,
        max_retries: int = Defaults.MAX_RETRIES,
    ):
        super().__init__(name=f"OpenAILLM({model_id})", model_id=model_id)
        self.api_key = api_key
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self.max_retries = max_retries

    def initialize(self) -> None:
        """Initialize OpenAI LLM client."""
        try:
            self._llm = OpenAI(
                model=self.model_id,
                api_key=self.api_key,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                timeout=self.timeout,
                max_retries=self.max_retries,
            )
            self.logger.info(
                "Initialized OpenAI LLM provider",
                extra={"scope": LogScope.CONFIG, "model_id": self.model_id}
            )
        except Exception as e:
            self.logger.error(
                "Failed to initialize OpenAI LLM provider",
                extra={"scope": LogScope.CONFIG, "error": str(e)}
            )
            raise

"""
Base LLM Provider

Interface shared by the Google and local providers behind the chat route.
"""

import logging
from abc import ABC, abstractmethod

from gemchat.llm.models import LLMRequest, LLMResponse, ModelInfo

logger = logging.getLogger(__name__)


class BaseLLMProvider(ABC):
    """
    Abstract base class for LLM providers.

    Attributes:
        provider_name: Unique identifier for this provider
        display_name: Human-readable name used in error messages
        temperature: Default sampling temperature
        max_tokens: Default maximum tokens to generate
        timeout: Request timeout in seconds
    """

    display_name = "LLM"

    def __init__(
        self,
        provider_name: str,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        timeout: int = 30,
    ):
        self.provider_name = provider_name
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

        logger.info(
            f"Initialized {provider_name} provider",
            extra={
                "provider": provider_name,
                "temperature": temperature,
                "max_tokens": max_tokens,
            },
        )

    @abstractmethod
    async def generate(self, request: LLMRequest) -> LLMResponse:
        """
        Generate a completion.

        Raises:
            Exception: Provider-specific errors (API errors, timeouts, etc.)
        """
        pass  # pragma: no cover - abstract method

    @abstractmethod
    def get_model_info(self, model_name: str | None = None) -> ModelInfo:
        """Limits of ``model_name`` (None = the provider's default model)."""
        pass  # pragma: no cover - abstract method

    def count_tokens(self, text: str) -> int:
        """Rough token estimate (four characters per token)."""
        return len(text) // 4

    async def close(self) -> None:
        """Release provider resources."""

    def _apply_defaults(self, request: LLMRequest) -> LLMRequest:
        if request.temperature is None:
            request.temperature = self.temperature
        if request.max_tokens is None:
            request.max_tokens = self.max_tokens
        return request

    def _log_request(self, request: LLMRequest) -> None:
        logger.debug(
            f"{self.provider_name} request",
            extra={
                "provider": self.provider_name,
                "message_count": len(request.messages),
                "temperature": request.temperature,
                "max_tokens": request.max_tokens,
            },
        )

    def _log_response(self, response: LLMResponse) -> None:
        logger.debug(
            f"{self.provider_name} response",
            extra={
                "provider": self.provider_name,
                "model": response.model,
                "total_tokens": response.usage.total_tokens,
                "finish_reason": response.finish_reason,
            },
        )

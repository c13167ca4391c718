"""
LLM Provider Factory

Creates the provider used by the chat route from LLMSettings.
"""

import logging
from typing import Literal

from gemchat.config import LLMSettings
from gemchat.llm.base import BaseLLMProvider
from gemchat.llm.google import GoogleProvider
from gemchat.llm.local import LocalProvider

logger = logging.getLogger(__name__)


class LLMProviderFactory:
    """Factory for configured provider instances."""

    PROVIDERS = {
        "google": GoogleProvider,
        "local": LocalProvider,
    }

    @staticmethod
    def create_provider(
        provider_type: Literal["google", "local"],
        config: LLMSettings,
    ) -> BaseLLMProvider:
        """
        Create an LLM provider instance.

        Raises:
            ValueError: If the provider type is unknown or its API key is missing
        """
        if provider_type not in LLMProviderFactory.PROVIDERS:
            raise ValueError(
                f"Unknown provider type: {provider_type}. "
                f"Available providers: {list(LLMProviderFactory.PROVIDERS.keys())}"
            )

        logger.info(f"Creating {provider_type} provider", extra={"provider": provider_type})

        if provider_type == "google":
            if not config.google_api_key:
                raise ValueError("Google API key is required but not configured")
            return GoogleProvider(
                api_key=config.google_api_key,
                model=config.google_model,
                temperature=config.temperature,
                max_tokens=config.max_tokens,
                timeout=config.timeout,
            )

        return LocalProvider(
            base_url=config.local_base_url,
            model=config.local_model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.timeout,
        )

    @staticmethod
    def create_default_provider(config: LLMSettings) -> BaseLLMProvider:
        return LLMProviderFactory.create_provider(config.default_provider, config)

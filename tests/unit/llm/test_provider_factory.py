"""Tests for LLMProviderFactory."""

import pytest

from gemchat.config import LLMSettings
from gemchat.llm import GoogleProvider, LLMProviderFactory, LocalProvider


def test_unknown_provider_is_rejected():
    with pytest.raises(ValueError, match="Unknown provider type"):
        LLMProviderFactory.create_provider("openai", LLMSettings())


def test_google_requires_api_key():
    with pytest.raises(ValueError, match="Google API key is required"):
        LLMProviderFactory.create_provider("google", LLMSettings())


def test_google_provider_uses_settings():
    settings = LLMSettings(google_api_key="test-key", google_model="gemini-1.5-pro", temperature=0.2)

    provider = LLMProviderFactory.create_default_provider(settings)

    assert isinstance(provider, GoogleProvider)
    assert provider.model == "gemini-1.5-pro"
    assert provider.temperature == 0.2


@pytest.mark.asyncio
async def test_local_provider_needs_no_key():
    settings = LLMSettings(default_provider="local", local_model="qwen2:7b")

    provider = LLMProviderFactory.create_default_provider(settings)

    assert isinstance(provider, LocalProvider)
    assert provider.model == "qwen2:7b"
    await provider.close()

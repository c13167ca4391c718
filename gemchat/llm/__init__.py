"""
LLM Provider Module

Provider abstraction used by the chat route (Google Gemini or a local model).

Usage:
    from gemchat.config import get_settings
    from gemchat.llm import LLMMessage, LLMProviderFactory, LLMRequest

    provider = LLMProviderFactory.create_default_provider(get_settings().llm)
    response = await provider.generate(
        LLMRequest(messages=[LLMMessage(role="user", content="Hello!")])
    )
    print(response.content)
"""

from gemchat.llm.base import BaseLLMProvider
from gemchat.llm.factory import LLMProviderFactory
from gemchat.llm.google import GoogleProvider
from gemchat.llm.local import LocalProvider
from gemchat.llm.models import (
    LLMMessage,
    LLMRequest,
    LLMResponse,
    LLMUsage,
    ModelInfo,
)

__all__ = [
    "BaseLLMProvider",
    "GoogleProvider",
    "LLMMessage",
    "LLMProviderFactory",
    "LLMRequest",
    "LLMResponse",
    "LLMUsage",
    "LocalProvider",
    "ModelInfo",
]

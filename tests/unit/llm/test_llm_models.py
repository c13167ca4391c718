"""Tests for provider-agnostic LLM models."""

import pytest
from pydantic import ValidationError

from gemchat.llm import BaseLLMProvider, LLMMessage, LLMRequest, LLMResponse, LLMUsage, ModelInfo


def test_system_prompt_and_turns():
    request = LLMRequest(
        messages=[
            LLMMessage(role="system", content="Persona."),
            LLMMessage(role="user", content="Hi"),
            LLMMessage(role="assistant", content="Hello"),
        ]
    )

    assert request.system_prompt == "Persona."
    assert [m.role for m in request.turns] == ["user", "assistant"]


def test_request_without_system_prompt():
    request = LLMRequest(messages=[LLMMessage(role="user", content="Hi")])

    assert request.system_prompt is None


def test_empty_message_content_is_rejected():
    with pytest.raises(ValidationError):
        LLMMessage(role="user", content="")


def test_request_requires_messages():
    with pytest.raises(ValidationError):
        LLMRequest(messages=[])


class EchoProvider(BaseLLMProvider):
    async def generate(self, request: LLMRequest) -> LLMResponse:
        return LLMResponse(
            content=request.turns[-1].content,
            model="echo-1",
            usage=LLMUsage(prompt_tokens=0, completion_tokens=0, total_tokens=0),
            finish_reason="stop",
            provider=self.provider_name,
        )

    def get_model_info(self, model_name: str | None = None) -> ModelInfo:
        return ModelInfo(
            name=model_name or "echo-1", provider="echo", context_window=1, max_output=1
        )


@pytest.mark.asyncio
async def test_provider_needs_only_generate_and_model_info():
    provider = EchoProvider(provider_name="echo")

    response = await provider.generate(LLMRequest(messages=[LLMMessage(role="user", content="Hi")]))

    assert response.content == "Hi"
    assert provider.get_model_info().name == "echo-1"
    assert not hasattr(provider, "stream")

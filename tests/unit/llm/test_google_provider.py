"""Tests for GoogleProvider request mapping and helper behavior."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from gemchat.llm import GoogleProvider, LLMMessage, LLMRequest


class _FakeCandidate:
    def __init__(self, finish_reason):
        self.finish_reason = finish_reason


class _FakeResponse:
    def __init__(self, text="", finish_reason=None):
        self.text = text
        self.candidates = [_FakeCandidate(finish_reason)]


class _BlockedResponse:
    candidates = []

    @property
    def text(self):
        raise ValueError("response has no parts")


@pytest.fixture
def provider():
    return GoogleProvider(api_key="dummy", model="gemini-1.5-flash")


def _request() -> LLMRequest:
    return LLMRequest(
        messages=[
            LLMMessage(role="system", content="Be helpful."),
            LLMMessage(role="user", content="Hello"),
            LLMMessage(role="assistant", content="Hi there!"),
            LLMMessage(role="user", content="How are you?"),
        ]
    )


def test_extract_finish_reason_maps_length_like_values(provider):
    assert provider._extract_finish_reason(_FakeResponse("{}", "MAX_TOKENS")) == "length"


def test_extract_finish_reason_maps_content_filter_values(provider):
    assert provider._extract_finish_reason(_FakeResponse("", "SAFETY")) == "content_filter"


def test_extract_finish_reason_defaults_to_stop_for_unknown(provider):
    response = _FakeResponse("ok", "FINISH_REASON_UNSPECIFIED")

    assert provider._extract_finish_reason(response) == "stop"


def test_extract_response_text_handles_non_string_payload(provider):
    assert provider._extract_response_text(SimpleNamespace(text=None, candidates=[])) == ""


def test_extract_response_text_handles_blocked_candidate(provider):
    assert provider._extract_response_text(_BlockedResponse()) == ""
    assert provider._extract_raw_finish_reason(_BlockedResponse()) == ""


def test_build_contents_maps_roles_and_skips_system():
    contents = GoogleProvider._build_contents(_request())

    assert contents == [
        {"role": "user", "parts": ["Hello"]},
        {"role": "model", "parts": ["Hi there!"]},
        {"role": "user", "parts": ["How are you?"]},
    ]


@pytest.mark.asyncio
async def test_generate_sends_system_instruction_and_history(provider):
    model = MagicMock()
    model.generate_content_async = AsyncMock(return_value=_FakeResponse("I'm well!", "STOP"))
    genai = MagicMock()
    genai.GenerativeModel.return_value = model
    provider.genai = genai

    response = await provider.generate(_request())

    genai.GenerativeModel.assert_called_once_with(
        "gemini-1.5-flash", system_instruction="Be helpful."
    )
    contents = model.generate_content_async.await_args.args[0]
    assert [c["role"] for c in contents] == ["user", "model", "user"]
    assert model.generate_content_async.await_args.kwargs["request_options"] == {"timeout": 30}
    genai.types.GenerationConfig.assert_called_once_with(temperature=0.7, max_output_tokens=2048)
    assert response.content == "I'm well!"
    assert response.finish_reason == "stop"
    assert response.provider == "google"


@pytest.mark.asyncio
async def test_generate_propagates_sdk_errors(provider):
    model = MagicMock()
    model.generate_content_async = AsyncMock(side_effect=RuntimeError("quota exceeded"))
    provider.genai = MagicMock()
    provider.genai.GenerativeModel.return_value = model

    with pytest.raises(RuntimeError, match="quota exceeded"):
        await provider.generate(_request())


def test_model_info_for_known_and_unknown_models(provider):
    assert provider.get_model_info().context_window == 1048576
    assert provider.get_model_info("gemini-1.5-pro").name == "gemini-1.5-pro"

    unknown = provider.get_model_info("gemini-experimental")
    assert unknown.name == "gemini-experimental"
    assert unknown.provider == "google"

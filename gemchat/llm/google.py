"""
Google LLM Provider

Gemini implementation of BaseLLMProvider using the google-generativeai SDK.
The system prompt becomes the model's system instruction and prior turns are
sent as Gemini ``user``/``model`` contents.
"""

import logging
import warnings
from typing import Any

from gemchat.llm.base import BaseLLMProvider
from gemchat.llm.models import LLMRequest, LLMResponse, LLMUsage, ModelInfo

logger = logging.getLogger(__name__)


class GoogleProvider(BaseLLMProvider):
    """Google (Gemini) LLM provider."""

    display_name = "Gemini"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        temperature: float = 0.7,
        max_tokens: int = 2048,
        timeout: int = 30,
    ):
        super().__init__(
            provider_name="google",
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )
        self.model = model
        self.api_key = api_key

        with warnings.catch_warnings():
            warnings.simplefilter("ignore", FutureWarning)
            import google.generativeai as genai

        genai.configure(api_key=api_key)
        self.genai = genai

        logger.info(f"Google provider initialized with model: {model}", extra={"model": model})

    async def generate(self, request: LLMRequest) -> LLMResponse:
        """Generate completion using the Gemini API."""
        request = self._apply_defaults(request)
        self._log_request(request)

        model_name = request.model or self.model
        client = self._client_for(model_name, request.system_prompt)
        contents = self._build_contents(request)

        response = await client.generate_content_async(
            contents,
            generation_config=self._generation_config(request),
            request_options={"timeout": self.timeout},
        )
        response_text = self._extract_response_text(response)

        # Gemini does not always report usage; estimate like the base provider
        prompt_tokens = sum(self.count_tokens(msg.content) for msg in request.messages)
        completion_tokens = self.count_tokens(response_text)

        llm_response = LLMResponse(
            content=response_text,
            model=model_name,
            usage=LLMUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
            finish_reason=self._extract_finish_reason(response),
            provider="google",
            metadata={"raw_finish_reason": self._extract_raw_finish_reason(response)},
        )
        self._log_response(llm_response)
        return llm_response

    def get_model_info(self, model_name: str | None = None) -> ModelInfo:
        """Get Gemini model limits."""
        model = model_name or self.model

        model_info_map = {
            "gemini-1.5-pro": ModelInfo(
                name="gemini-1.5-pro",
                provider="google",
                context_window=2097152,
                max_output=8192,
            ),
            "gemini-1.5-flash": ModelInfo(
                name="gemini-1.5-flash",
                provider="google",
                context_window=1048576,
                max_output=8192,
            ),
        }

        return model_info_map.get(
            model,
            ModelInfo(name=model, provider="google", context_window=32768, max_output=8192),
        )

    def _client_for(self, model_name: str, system_prompt: str | None) -> Any:
        if system_prompt:
            return self.genai.GenerativeModel(model_name, system_instruction=system_prompt)
        return self.genai.GenerativeModel(model_name)

    def _generation_config(self, request: LLMRequest) -> Any:
        return self.genai.types.GenerationConfig(
            temperature=request.temperature,
            max_output_tokens=request.max_tokens,
        )

    @staticmethod
    def _build_contents(request: LLMRequest) -> list[dict[str, Any]]:
        return [
            {
                "role": "model" if msg.role == "assistant" else "user",
                "parts": [msg.content],
            }
            for msg in request.turns
        ]

    def _extract_response_text(self, response: Any) -> str:
        try:
            text = getattr(response, "text", "")
        except ValueError:
            # .text raises when the candidate was blocked and has no parts
            return ""
        if isinstance(text, str):
            return text
        if text is None:
            return ""
        return str(text)

    def _extract_raw_finish_reason(self, response: Any) -> str:
        candidates = getattr(response, "candidates", None)
        if not candidates:
            return ""
        reason = getattr(candidates[0], "finish_reason", "")
        return str(reason or "")

    def _extract_finish_reason(self, response: Any) -> str:
        raw_reason = self._extract_raw_finish_reason(response).lower()
        if any(token in raw_reason for token in ("max_tokens", "length")):
            return "length"
        if any(token in raw_reason for token in ("safety", "blocked", "recitation")):
            return "content_filter"
        if "error" in raw_reason:
            return "error"
        return "stop"

"""
Local LLM Provider

BaseLLMProvider for self-hosted models: Ollama's /api/chat first, then any
OpenAI-compatible /v1/chat/completions endpoint.
"""

import logging

import httpx

from gemchat.llm.base import BaseLLMProvider
from gemchat.llm.models import LLMRequest, LLMResponse, LLMUsage, ModelInfo

logger = logging.getLogger(__name__)


class LocalProvider(BaseLLMProvider):
    """Local model server provider (Ollama, vLLM, llama.cpp)."""

    display_name = "Local model"

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "llama3.1:8b",
        temperature: float = 0.7,
        max_tokens: int = 2048,
        timeout: int = 30,
        client: httpx.AsyncClient | None = None,
    ):
        super().__init__(
            provider_name="local",
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.client = client or httpx.AsyncClient(timeout=float(timeout))

        logger.info(
            f"Local provider initialized: {base_url} with model: {model}",
            extra={"base_url": base_url, "model": model},
        )

    async def generate(self, request: LLMRequest) -> LLMResponse:
        request = self._apply_defaults(request)
        self._log_request(request)

        payload = self._payload(request)
        try:
            data = await self._post("/api/chat", payload)
        except httpx.HTTPError:
            logger.debug("Ollama endpoint failed; trying OpenAI-compatible endpoint")
            data = await self._post("/v1/chat/completions", payload)

        content = data.get("message", {}).get("content", "") or (
            data.get("choices", [{}])[0].get("message", {}).get("content", "")
        )
        prompt_tokens = data.get("prompt_eval_count", 0) or data.get("usage", {}).get(
            "prompt_tokens", 0
        )
        completion_tokens = data.get("eval_count", 0) or data.get("usage", {}).get(
            "completion_tokens", 0
        )

        llm_response = LLMResponse(
            content=content,
            model=data.get("model", payload["model"]),
            usage=LLMUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
            finish_reason="stop",
            provider="local",
            metadata={"base_url": self.base_url},
        )
        self._log_response(llm_response)
        return llm_response

    def get_model_info(self, model_name: str | None = None) -> ModelInfo:
        """Local servers do not report limits; assume a common 8k context."""
        return ModelInfo(
            name=model_name or self.model,
            provider="local",
            context_window=8192,
            max_output=self.max_tokens,
        )

    async def close(self) -> None:
        await self.client.aclose()

    def _payload(self, request: LLMRequest) -> dict:
        return {
            "model": request.model or self.model,
            "messages": [{"role": msg.role, "content": msg.content} for msg in request.messages],
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
            "stream": False,
        }

    async def _post(self, path: str, payload: dict) -> dict:
        response = await self.client.post(f"{self.base_url}{path}", json=payload)
        response.raise_for_status()
        return response.json()

"""
LLM Request and Response Models

Provider-agnostic pydantic models used between the chat route and the
Google / local providers.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class LLMMessage(BaseModel):
    """Single message in a provider conversation."""

    role: Literal["system", "user", "assistant"] = Field(..., description="Message role")
    content: str = Field(..., min_length=1, description="Message content")


class LLMRequest(BaseModel):
    """Request to an LLM provider."""

    messages: list[LLMMessage] = Field(
        ...,
        min_length=1,
        description="System prompt, prior turns and the new user message",
    )
    temperature: float | None = Field(
        None,
        ge=0.0,
        le=2.0,
        description="Sampling temperature (overrides provider default)",
    )
    max_tokens: int | None = Field(
        None,
        gt=0,
        description="Maximum tokens to generate (overrides provider default)",
    )
    model: str | None = Field(None, description="Model override")
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Request tags such as user and session ids",
    )

    @property
    def system_prompt(self) -> str | None:
        parts = [msg.content for msg in self.messages if msg.role == "system"]
        return "\n\n".join(parts) if parts else None

    @property
    def turns(self) -> list[LLMMessage]:
        return [msg for msg in self.messages if msg.role != "system"]


class LLMUsage(BaseModel):
    """Token usage information."""

    prompt_tokens: int = Field(..., ge=0)
    completion_tokens: int = Field(..., ge=0)
    total_tokens: int = Field(..., ge=0)


class LLMResponse(BaseModel):
    """Response from an LLM provider."""

    content: str = Field(..., description="Generated text")
    model: str = Field(..., description="Model that generated the response")
    usage: LLMUsage = Field(..., description="Token usage information")
    finish_reason: Literal["stop", "length", "content_filter", "error"] = Field(
        ..., description="Reason the generation stopped"
    )
    provider: str = Field(..., description="Provider that handled the request")
    metadata: dict[str, Any] = Field(default_factory=dict)


class ModelInfo(BaseModel):
    """Limits of a specific model."""

    name: str = Field(..., description="Model name/identifier")
    provider: str = Field(..., description="Provider name")
    context_window: int = Field(..., gt=0, description="Maximum context window in tokens")
    max_output: int = Field(..., gt=0, description="Maximum output tokens")

"""
API Request and Response Models

Wire format of the chat route. Field names follow the JSON contract used by
the chat client (camelCase ids).
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatTurn(BaseModel):
    """One prior conversation turn sent as context."""

    role: Literal["user", "model"] = Field(..., description="Speaker: 'user' or 'model'")
    content: str = Field(..., description="Turn text")


class ChatRequest(BaseModel):
    """Request body for POST /api/chat."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(default="", description="The user's new message")
    user_id: str | None = Field(
        default=None, alias="userId", description="Durable client identity"
    )
    session_id: str | None = Field(
        default=None, alias="sessionId", description="Per-load client session id"
    )
    history: list[ChatTurn] = Field(
        default_factory=list,
        description="Trailing conversation turns, oldest first",
    )


class ChatResponse(BaseModel):
    """Successful chat reply."""

    response: str = Field(..., description="Assistant response text")


class ErrorResponse(BaseModel):
    """Error body returned with a non-2xx status."""

    error: str = Field(..., description="Short, user-visible error")
    details: str | None = Field(default=None, description="Diagnostic detail")


class HealthResponse(BaseModel):
    """Liveness payload."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Application version")
    timestamp: str = Field(..., description="Server time (ISO 8601)")
    model: str | None = Field(default=None, description="Configured model, if a provider is up")

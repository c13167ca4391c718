"""
Conversation Data Models

Pydantic models for the client-side conversation cache: display messages,
the parallel role-tagged history, and per-identity session lifetime data.
All timestamps are epoch milliseconds.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class DisplayMessage(BaseModel):
    """One rendered chat bubble."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique, stable message id")
    text: str = Field(..., description="Full message text")
    is_user: bool = Field(..., description="True for user messages, False for the assistant")
    timestamp: int = Field(..., ge=0, description="Creation time (epoch ms)")
    owner: str | None = Field(
        default=None,
        description="Identity that created the entry (None for legacy entries)",
    )


class HistoryEntry(BaseModel):
    """Role-tagged history entry kept 1:1 with its DisplayMessage."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Id of the matching DisplayMessage")
    role: Literal["user", "model"] = Field(..., description="Speaker role")
    content: str = Field(..., description="Message content")
    timestamp: int = Field(..., ge=0, description="Creation time (epoch ms)")
    owner: str | None = Field(
        default=None,
        description="Identity that created the entry (None for legacy entries)",
    )

    def to_turn(self) -> dict[str, str]:
        """Shape used as request context."""
        return {"role": self.role, "content": self.content}


class SessionData(BaseModel):
    """Sliding expiry window for one identity."""

    last_access: int = Field(..., ge=0, description="Last activity (epoch ms)")
    expiration: int = Field(..., ge=0, description="Session end (epoch ms)")

    def is_expired(self, now_ms: int) -> bool:
        return self.expiration < now_ms

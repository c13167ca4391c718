"""Presentation-facing view of the conversation."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from gemchat.animation import TypingAnimationEngine
from gemchat.models.conversation import DisplayMessage


@dataclass(frozen=True)
class RenderedMessage:
    message_id: str
    text: str
    is_user: bool
    show_cursor: bool


def render_conversation(
    messages: Iterable[DisplayMessage],
    engine: TypingAnimationEngine,
) -> list[RenderedMessage]:
    """Full text for every message except the one currently being revealed."""
    rendered: list[RenderedMessage] = []
    for message in messages:
        revealing = not message.is_user and engine.is_revealing(message.id)
        rendered.append(
            RenderedMessage(
                message_id=message.id,
                text=engine.display_text(message),
                is_user=message.is_user,
                show_cursor=revealing,
            )
        )
    return rendered

"""Client-side conversation state and persistence."""

from gemchat.conversations.state import ConversationState

__all__ = ["ConversationState"]

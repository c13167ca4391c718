"""Chat client: transport, orchestration and rendering."""

from gemchat.client.factory import create_chat_client
from gemchat.client.orchestrator import APOLOGY_MESSAGE, ChatOrchestrator
from gemchat.client.rendering import RenderedMessage, render_conversation
from gemchat.client.transport import ChatTransport, HttpChatTransport, TransportError

__all__ = [
    "APOLOGY_MESSAGE",
    "ChatOrchestrator",
    "ChatTransport",
    "HttpChatTransport",
    "RenderedMessage",
    "TransportError",
    "create_chat_client",
    "render_conversation",
]

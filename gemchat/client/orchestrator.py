"""
Chat Orchestrator

Ties identity, conversation state, the transport and the typing animation
together for one client lifetime (the equivalent of one page load).

Usage:
    orchestrator = ChatOrchestrator(
        state=state,
        sessions=sessions,
        transport=HttpChatTransport(base_url),
        engine=engine,
    )
    await orchestrator.start()
    await orchestrator.submit("Hello")
"""

from __future__ import annotations

import logging
import uuid

from gemchat.animation import TypingAnimationEngine
from gemchat.client.transport import ChatTransport, TransportError
from gemchat.conversations import ConversationState
from gemchat.models.conversation import DisplayMessage
from gemchat.session import SessionManager

logger = logging.getLogger(__name__)

APOLOGY_MESSAGE = (
    "Sorry, I couldn't process that request. Please check the error message below."
)
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


class ChatOrchestrator:
    """
    Accepts user input and drives one request at a time.

    Attributes:
        identity: Profile identity ("" until start() resolves it)
        session_id: Volatile id for this client lifetime
        is_loading: True while a request is in flight
        error: Last user-visible error, cleared on every new submission
    """

    def __init__(
        self,
        state: ConversationState,
        sessions: SessionManager,
        transport: ChatTransport,
        engine: TypingAnimationEngine,
        history_window: int = 10,
        session_id: str | None = None,
    ) -> None:
        self.state = state
        self.sessions = sessions
        self.transport = transport
        self.engine = engine
        self.history_window = history_window
        self.session_id = session_id or uuid.uuid4().hex
        self.identity = ""
        self.is_loading = False
        self.error: str | None = None

    @property
    def messages(self) -> list[DisplayMessage]:
        return self.state.messages

    async def start(self) -> list[DisplayMessage]:
        """Purge stale sessions, resolve the identity and load its conversation."""
        self.sessions.purge_expired_sessions()
        self.identity = self.sessions.get_or_create_identity()
        if not self.identity:
            logger.warning("No identity available; chat input is disabled")
            return []
        self.sessions.touch_session(self.identity)
        self.state.load(self.identity, self.session_id)
        logger.info(
            "Chat client started",
            extra={
                "identity": self.identity,
                "session_id": self.session_id,
                "message_count": len(self.state.messages),
            },
        )
        return list(self.state.messages)

    def record_activity(self) -> None:
        """Keep the session window sliding on any user interaction."""
        if self.identity:
            self.sessions.touch_session(self.identity)

    async def submit(self, text: str) -> DisplayMessage | None:
        """
        Send one user message.

        Returns:
            The assistant DisplayMessage appended for this turn (the response
            or the apology), or None when the submission was ignored
        """
        message = (text or "").strip()
        if not message or self.is_loading or not self.identity:
            return None

        self.error = None
        user_message = self.state.append_user_message(message)
        self.record_activity()
        self.is_loading = True
        try:
            history = self.state.recent_history(self.history_window, before=user_message.id)
            response = await self.transport.send(
                message=message,
                user_id=self.identity,
                session_id=self.session_id,
                history=history,
            )
            assistant = self.state.append_assistant_message(response)
            self.engine.start(assistant.id, assistant.text)
            return assistant
        except TransportError as exc:
            logger.warning(
                f"Chat request failed: {exc.message}",
                extra={"status_code": exc.status_code, "details": exc.details},
            )
            self.error = exc.message
            return self.state.append_assistant_message(APOLOGY_MESSAGE)
        except Exception:
            logger.exception("Unexpected failure while submitting chat message")
            self.error = UNEXPECTED_ERROR_MESSAGE
            return self.state.append_assistant_message(APOLOGY_MESSAGE)
        finally:
            self.is_loading = False

    def clear(self) -> None:
        self.engine.stop()
        self.state.clear()
        self.error = None

    async def close(self) -> None:
        """Flush pending persistence and release the transport."""
        self.engine.stop()
        self.state.flush()
        await self.transport.close()

"""
Conversation Transport

Request/response client for the GemChat chat route. The orchestrator only
sees ``ChatTransport.send``: a string on success, ``TransportError`` on
failure.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

import httpx

from gemchat.models.conversation import HistoryEntry

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Failed to get response"


class TransportError(Exception):
    """
    The chat request failed.

    Attributes:
        message: User-facing error text
        details: Optional diagnostic detail from the server
        status_code: HTTP status when the server answered, else None
    """

    def __init__(
        self,
        message: str,
        details: str | None = None,
        status_code: int | None = None,
    ):
        self.message = message
        self.details = details
        self.status_code = status_code
        super().__init__(message)


class ChatTransport(ABC):
    """One request/response exchange with the language-model relay."""

    @abstractmethod
    async def send(
        self,
        message: str,
        user_id: str,
        session_id: str,
        history: Sequence[HistoryEntry],
    ) -> str:
        """
        Send a user message with its conversation context.

        Returns:
            The assistant response text

        Raises:
            TransportError: On any non-success outcome
        """
        pass  # pragma: no cover - abstract method

    async def close(self) -> None:
        """Release network resources."""


class HttpChatTransport(ChatTransport):
    """POSTs to ``{base_url}/api/chat`` with httpx."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/api/chat"

    async def send(
        self,
        message: str,
        user_id: str,
        session_id: str,
        history: Sequence[HistoryEntry],
    ) -> str:
        payload = {
            "message": message,
            "userId": user_id,
            "sessionId": session_id,
            "history": [entry.to_turn() for entry in history],
        }
        logger.debug(
            "Sending chat request",
            extra={"endpoint": self.endpoint, "history_turns": len(history)},
        )
        try:
            response = await self._client.post(self.endpoint, json=payload)
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"Request timed out after {self.timeout:g} seconds", details=str(exc)
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(str(exc) or DEFAULT_ERROR_MESSAGE) from exc

        body = self._decode_body(response)
        if not response.is_success:
            error = body.get("error") if isinstance(body.get("error"), str) else None
            details = body.get("details") if isinstance(body.get("details"), str) else None
            logger.warning(
                f"Chat request failed with status {response.status_code}",
                extra={"status_code": response.status_code, "error": error},
            )
            raise TransportError(
                error or DEFAULT_ERROR_MESSAGE,
                details=details,
                status_code=response.status_code,
            )

        text = body.get("response")
        if not isinstance(text, str):
            raise TransportError(
                "Unexpected response format",
                details="Response body has no 'response' string",
                status_code=response.status_code,
            )
        return text

    async def close(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _decode_body(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

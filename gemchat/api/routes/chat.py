"""
Chat Routes

Relay endpoint between the chat client and the configured LLM provider.
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from gemchat.config import get_settings
from gemchat.llm import LLMMessage, LLMRequest
from gemchat.models.api import ChatRequest, ChatResponse, ErrorResponse
from gemchat.prompts import PromptLoader

logger = logging.getLogger(__name__)

router = APIRouter()

SYSTEM_PROMPT_PATH = "chat/system.md"
MISSING_KEY_DETAILS = "Make sure LLM_GOOGLE_API_KEY is set in your environment or .env file"


def _error(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def build_llm_request(
    chat_request: ChatRequest,
    prompt_loader: PromptLoader,
    history_window: int,
) -> LLMRequest:
    """Render the system prompt and attach the trailing history and the new message."""
    system_prompt = prompt_loader.render(
        SYSTEM_PROMPT_PATH,
        user_id=chat_request.user_id,
        session_id=chat_request.session_id,
    )
    messages = [LLMMessage(role="system", content=system_prompt)]

    turns = chat_request.history[-history_window:] if history_window > 0 else []
    for turn in turns:
        if not turn.content.strip():
            continue
        role = "assistant" if turn.role == "model" else "user"
        messages.append(LLMMessage(role=role, content=turn.content))

    messages.append(LLMMessage(role="user", content=chat_request.message.strip()))
    return LLMRequest(
        messages=messages,
        metadata={"user_id": chat_request.user_id, "session_id": chat_request.session_id},
    )


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def chat(chat_request: ChatRequest):
    """
    Generate one assistant reply.

    Returns:
        ChatResponse on success, or an ErrorResponse body with status 400
        (blank message) or 500 (provider missing or failing)
    """
    if not chat_request.message.strip():
        return _error(status.HTTP_400_BAD_REQUEST, "Message is required")

    from gemchat.api.main import app_state

    provider = app_state.get("provider")
    if provider is None:
        logger.error("Chat request received but no LLM provider is configured")
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "API key is not configured",
            MISSING_KEY_DETAILS,
        )

    settings = get_settings()
    logger.info(
        "Chat request received",
        extra={
            "user_id": chat_request.user_id,
            "session_id": chat_request.session_id,
            "history_turns": len(chat_request.history),
        },
    )

    try:
        prompt_loader = app_state.get("prompt_loader") or PromptLoader()
        llm_request = build_llm_request(
            chat_request, prompt_loader, settings.session.history_window
        )
    except Exception as exc:
        logger.exception("Failed to build chat prompt")
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to generate response",
            str(exc),
        )

    try:
        result = await provider.generate(llm_request)
    except Exception as exc:
        logger.exception(f"{provider.display_name} API error")
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            f"{provider.display_name} API error",
            str(exc),
        )

    return ChatResponse(response=result.content)

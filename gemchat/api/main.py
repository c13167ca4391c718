"""
FastAPI Application

Chat relay server for GemChat with:
- Lifespan management for the LLM provider
- CORS middleware for browser and terminal clients
- Health and chat endpoints

Usage:
    uvicorn gemchat.api.main:app --reload --port 8000
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gemchat import __version__
from gemchat.api.routes import chat, health
from gemchat.config import get_settings
from gemchat.llm import BaseLLMProvider, LLMProviderFactory
from gemchat.prompts import PromptLoader

logger = logging.getLogger(__name__)

app_state = {
    "provider": None,
    "prompt_loader": None,
}


def _create_provider() -> BaseLLMProvider | None:
    config = get_settings()
    try:
        return LLMProviderFactory.create_default_provider(config.llm)
    except ValueError as e:
        # Missing key keeps the server up; the chat route reports it per request
        logger.warning(f"LLM provider not initialized: {e}")
        return None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the LLM provider and prompt loader, close them on shutdown."""
    logger.info("Starting GemChat API server...")

    try:
        app_state["prompt_loader"] = PromptLoader()
        app_state["provider"] = _create_provider()
        logger.info("GemChat API server started successfully")

        yield

    finally:
        logger.info("Shutting down GemChat API server...")

        if app_state["provider"]:
            try:
                await app_state["provider"].close()
                logger.info("LLM provider closed")
            except Exception as e:
                logger.error(f"Error closing LLM provider: {e}")
        app_state["provider"] = None
        app_state["prompt_loader"] = None

        logger.info("GemChat API server shut down complete")


app = FastAPI(
    title="GemChat API",
    description="Chat relay between GemChat clients and Gemini",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(chat.router, prefix="/api", tags=["chat"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with API information."""
    return {
        "name": "GemChat API",
        "version": __version__,
        "description": "Chat relay for Gemini",
        "docs": "/docs",
    }

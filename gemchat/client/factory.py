"""Wire a ChatOrchestrator from settings."""

from __future__ import annotations

import random

from gemchat.animation import FixedPacing, PacingPolicy, RandomPacing, TypingAnimationEngine
from gemchat.client.orchestrator import ChatOrchestrator
from gemchat.client.transport import ChatTransport, HttpChatTransport
from gemchat.config import Settings
from gemchat.conversations import ConversationState
from gemchat.scheduling import AsyncioScheduler, Scheduler
from gemchat.session import SessionManager, StorageKeys
from gemchat.storage import PersistentStore, create_store


def create_chat_client(
    settings: Settings,
    *,
    store: PersistentStore | None = None,
    transport: ChatTransport | None = None,
    scheduler: Scheduler | None = None,
    pacing: PacingPolicy | None = None,
    animate: bool = True,
    rng: random.Random | None = None,
) -> ChatOrchestrator:
    """
    Build the orchestrator and its collaborators.

    Args:
        settings: Application settings
        store: Storage adapter (default: the configured backend)
        transport: Chat transport (default: HTTP to settings.client.api_url)
        scheduler: Timer source (default: the running asyncio loop)
        pacing: Typing pacing (default: random pacing from settings.typing)
        animate: False reveals responses in one tick
        rng: Random source for the default pacing

    Returns:
        A ChatOrchestrator ready for ``await start()``
    """
    scheduler = scheduler or AsyncioScheduler()
    store = store or create_store(settings.storage)
    keys = StorageKeys(prefix=settings.storage.key_prefix)

    sessions = SessionManager(
        store=store,
        clock=scheduler.now_ms,
        keys=keys,
        ttl_seconds=settings.session.ttl_seconds,
    )
    state = ConversationState(
        store=store,
        sessions=sessions,
        scheduler=scheduler,
        persist_debounce_seconds=settings.session.persist_debounce_ms / 1000,
        load_suppression_seconds=settings.session.load_suppression_ms / 1000,
    )

    if pacing is None:
        pacing = RandomPacing(settings.typing, rng=rng) if animate else FixedPacing(chunk=1_000_000)
    engine = TypingAnimationEngine(
        scheduler=scheduler,
        pacing=pacing,
        initial_reveal=settings.typing.initial_reveal,
        message_exists=state.contains,
    )

    transport = transport or HttpChatTransport(
        base_url=settings.client.api_url,
        timeout=settings.client.request_timeout,
    )

    return ChatOrchestrator(
        state=state,
        sessions=sessions,
        transport=transport,
        engine=engine,
        history_window=settings.session.history_window,
    )

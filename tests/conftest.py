"""
Pytest configuration and shared fixtures.

This module provides fixtures and configuration used across all tests.
"""

import logging
from collections.abc import Callable

import pytest

from gemchat.config import clear_settings_cache
from gemchat.scheduling import Scheduler, TimerHandle
from gemchat.session import SessionManager, StorageKeys
from gemchat.storage import InMemoryStore, PersistentStore

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests (requires API keys and external services)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless explicitly enabled."""
    if config.getoption("--run-integration"):
        return
    skip_integration = pytest.mark.skip(
        reason="Integration tests disabled (use --run-integration to enable)."
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(autouse=True)
def configure_test_logging(caplog):
    """Capture DEBUG and above for every test; undo the CLI's log silencing."""
    caplog.set_level(logging.DEBUG)
    yield
    logging.disable(logging.NOTSET)
    for logger_name in ("gemchat", "httpx", "httpcore", "asyncio"):
        logging.getLogger(logger_name).setLevel(logging.NOTSET)


# ============================================================================
# Environment and Configuration
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """
    Keep settings independent of the developer's environment.

    The repo .env is not loaded, storage defaults to memory and the settings
    cache is reset around every test.
    """
    monkeypatch.setenv("GEMCHAT_ENV_SOURCE", "env")
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.setenv("STORAGE_PATH", str(tmp_path / "local_storage.json"))
    monkeypatch.delenv("LLM_GOOGLE_API_KEY", raising=False)
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    yield
    clear_settings_cache()


# ============================================================================
# Manual Scheduler
# ============================================================================


class ManualTimer(TimerHandle):
    def __init__(self, due_ms: float, seq: int, callback: Callable[[], None]) -> None:
        self.due_ms = due_ms
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """
    Scheduler whose clock only moves when a test advances it.

    Timers fire in due-time order (ties in scheduling order) and may schedule
    further timers, which fire too if they fall inside the advanced window.
    """

    def __init__(self, start_ms: int = 1_700_000_000_000) -> None:
        self.current_ms: float = start_ms
        self._timers: list[ManualTimer] = []
        self._seq = 0

    def now_ms(self) -> int:
        return int(self.current_ms)

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
        timer = ManualTimer(
            round(self.current_ms + max(0.0, delay_seconds) * 1000, 6), self._seq, callback
        )
        self._seq += 1
        self._timers.append(timer)
        return timer

    @property
    def pending(self) -> list[ManualTimer]:
        return [timer for timer in self._timers if not timer.cancelled]

    def advance(self, seconds: float) -> None:
        target = round(self.current_ms + seconds * 1000, 6)
        while True:
            due = [t for t in self._timers if not t.cancelled and t.due_ms <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.due_ms, t.seq))
            self._timers.remove(timer)
            self.current_ms = max(self.current_ms, timer.due_ms)
            timer.callback()
        self.current_ms = target
        self._timers = self.pending

    def run_all(self, max_steps: int = 100_000) -> None:
        """Fire timers until none remain."""
        for _ in range(max_steps):
            pending = self.pending
            if not pending:
                return
            timer = min(pending, key=lambda t: (t.due_ms, t.seq))
            self._timers.remove(timer)
            self.current_ms = max(self.current_ms, timer.due_ms)
            timer.callback()
        raise AssertionError("Timers still pending after max_steps")


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


# ============================================================================
# Storage and Sessions
# ============================================================================


@pytest.fixture
def backend() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def store(backend) -> PersistentStore:
    return PersistentStore(backend)


@pytest.fixture
def keys() -> StorageKeys:
    return StorageKeys()


@pytest.fixture
def sessions(store, scheduler, keys) -> SessionManager:
    return SessionManager(store=store, clock=scheduler.now_ms, keys=keys)


# ============================================================================
# Mock LLM Provider
# ============================================================================


@pytest.fixture
def mock_llm_provider():
    """
    Mock LLM provider for route tests.

    Usage:
        def test_route(mock_llm_provider):
            mock_llm_provider.set_response("Hi there!")
    """
    from unittest.mock import AsyncMock

    from gemchat.llm.models import LLMResponse, LLMUsage

    class MockLLMProvider:
        display_name = "Gemini"

        def __init__(self):
            self.generate = AsyncMock()
            self.close = AsyncMock()

        def set_response(self, response: str):
            """Set the response that generate() will return."""
            self.generate.return_value = LLMResponse(
                content=response,
                model="mock-model",
                usage=LLMUsage(prompt_tokens=1, completion_tokens=1, total_tokens=2),
                finish_reason="stop",
                provider="mock",
                metadata={},
            )

    return MockLLMProvider()

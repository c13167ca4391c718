"""Clock, timer and debounce primitives for the single-threaded client core."""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import Callable


class TimerHandle(ABC):
    """A scheduled callback that can be cancelled before it fires."""

    @abstractmethod
    def cancel(self) -> None:
        pass  # pragma: no cover - abstract method


class Scheduler(ABC):
    """
    Source of time and delayed callbacks.

    Every timer in the client core (typing reveal, persistence debounce) goes
    through a scheduler so tests can drive time by hand.
    """

    @abstractmethod
    def now_ms(self) -> int:
        """Current wall-clock time in epoch milliseconds."""
        pass  # pragma: no cover - abstract method

    @abstractmethod
    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay_seconds``."""
        pass  # pragma: no cover - abstract method


class _AsyncioTimerHandle(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()


class AsyncioScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now_ms(self) -> int:
        return int(time.time() * 1000)

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
        handle = self._get_loop().call_later(max(0.0, delay_seconds), callback)
        return _AsyncioTimerHandle(handle)


class Debouncer:
    """Trailing-edge debounce: only the last trigger in a burst runs."""

    def __init__(
        self,
        scheduler: Scheduler,
        delay_seconds: float,
        callback: Callable[[], None],
    ) -> None:
        self._scheduler = scheduler
        self._delay_seconds = delay_seconds
        self._callback = callback
        self._timer: TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def trigger(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self._scheduler.call_later(self._delay_seconds, self._fire)

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def flush(self) -> bool:
        """Run the pending call now. Returns False when nothing was pending."""
        if self._timer is None:
            return False
        self._timer.cancel()
        self._fire()
        return True

    def _fire(self) -> None:
        self._timer = None
        self._callback()

"""
Typing Animation Engine

Timer-driven revealer that turns a complete assistant response into a
sequence of growing visible prefixes.

States:
    IDLE      - nothing targeted (initial state, after stop() or a vanished target)
    REVEALING - a message is being revealed; exactly one tick timer is pending
    DONE      - the last target was revealed in full
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from gemchat.animation.pacing import PacingPolicy, RandomPacing
from gemchat.models.conversation import DisplayMessage
from gemchat.scheduling import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

DEFAULT_INITIAL_REVEAL = 10


class RevealState(str, Enum):
    IDLE = "idle"
    REVEALING = "revealing"
    DONE = "done"


class TypingAnimationEngine:
    """
    Reveal one message at a time.

    Attributes:
        state: Current RevealState
        target_id: Id of the message being revealed (None unless REVEALING)
        revealed_length: Number of visible characters of the current text
    """

    def __init__(
        self,
        scheduler: Scheduler,
        pacing: PacingPolicy | None = None,
        initial_reveal: int = DEFAULT_INITIAL_REVEAL,
        message_exists: Callable[[str], bool] | None = None,
    ) -> None:
        self.scheduler = scheduler
        self.pacing = pacing or RandomPacing()
        self.initial_reveal = initial_reveal
        self.state = RevealState.IDLE
        self.target_id: str | None = None
        self.revealed_length = 0

        self._message_exists = message_exists
        self._text = ""
        self._timer: TimerHandle | None = None
        self._listeners: list[Callable[["TypingAnimationEngine"], None]] = []

    @property
    def text(self) -> str:
        return self._text

    @property
    def revealed_text(self) -> str:
        return self._text[: self.revealed_length]

    @property
    def is_active(self) -> bool:
        return self.state is RevealState.REVEALING

    def is_revealing(self, message_id: str) -> bool:
        return self.state is RevealState.REVEALING and self.target_id == message_id

    def display_text(self, message: DisplayMessage) -> str:
        """Text a renderer should show for ``message`` right now."""
        if not message.is_user and self.is_revealing(message.id):
            return self.revealed_text
        return message.text

    def add_listener(self, callback: Callable[["TypingAnimationEngine"], None]) -> None:
        """Register a callback run after every visible change."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[["TypingAnimationEngine"], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def start(self, message_id: str, text: str) -> None:
        """Retarget the engine at a new message, cancelling any reveal in progress."""
        self._cancel_timer()
        self.pacing.reset()
        self.target_id = message_id
        self._text = text
        self.revealed_length = self.initial_reveal if len(text) > self.initial_reveal else 0

        if self.revealed_length >= len(text):
            self._finish()
            return

        self.state = RevealState.REVEALING
        logger.debug(
            "Typing animation started",
            extra={"message_id": message_id, "length": len(text)},
        )
        self._notify()
        self._schedule_next()

    def stop(self) -> None:
        """Abandon the current reveal and return to IDLE."""
        self._cancel_timer()
        self.pacing.reset()
        self.target_id = None
        self.state = RevealState.IDLE
        self._notify()

    def _schedule_next(self) -> None:
        remaining = len(self._text) - self.revealed_length
        chunk = max(1, min(self.pacing.next_chunk(self.revealed_length, remaining), remaining))
        last_char = self._text[self.revealed_length + chunk - 1]
        delay = self.pacing.delay_for(last_char)
        target = self.target_id
        self._timer = self.scheduler.call_later(delay, lambda: self._on_tick(target, chunk))

    def _on_tick(self, target: str | None, chunk: int) -> None:
        self._timer = None
        if self.state is not RevealState.REVEALING or self.target_id != target:
            return

        if self._message_exists is not None and target is not None and not self._message_exists(target):
            logger.debug("Typing target vanished; stopping", extra={"message_id": target})
            self.stop()
            return

        self.revealed_length = min(len(self._text), self.revealed_length + chunk)
        if self.revealed_length >= len(self._text):
            self._finish()
            return

        self._notify()
        self._schedule_next()

    def _finish(self) -> None:
        self._cancel_timer()
        self.pacing.reset()
        self.target_id = None
        self.state = RevealState.DONE
        self._notify()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _notify(self) -> None:
        for callback in list(self._listeners):
            try:
                callback(self)
            except Exception:
                logger.exception("Typing animation listener failed")

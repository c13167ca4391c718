"""
Typing Pacing Policies

Decide how many characters the typing animation reveals per tick and how
long to wait before revealing them.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod

from gemchat.config import TypingSettings

SENTENCE_END = frozenset(".!?")
CLAUSE_BREAK = frozenset(",;:")


class PacingPolicy(ABC):
    """Chunk-size and delay strategy used by ``TypingAnimationEngine``."""

    def reset(self) -> None:
        """Forget any per-message state (burst mode, held chunk size)."""

    @abstractmethod
    def next_chunk(self, revealed: int, remaining: int) -> int:
        """
        Number of characters to reveal on the next tick.

        Args:
            revealed: Characters already visible
            remaining: Characters still hidden (always > 0)

        Returns:
            Chunk size in ``1..remaining``
        """
        pass  # pragma: no cover - abstract method

    @abstractmethod
    def delay_for(self, char: str) -> float:
        """Seconds to wait before revealing a chunk ending in ``char``."""
        pass  # pragma: no cover - abstract method


class FixedPacing(PacingPolicy):
    """Deterministic pacing: constant chunk size and delay."""

    def __init__(self, chunk: int = 1, delay_seconds: float = 0.0) -> None:
        if chunk < 1:
            raise ValueError("chunk must be at least 1")
        self.chunk = chunk
        self.delay_seconds = delay_seconds

    def next_chunk(self, revealed: int, remaining: int) -> int:
        return min(self.chunk, remaining)

    def delay_for(self, char: str) -> float:
        return self.delay_seconds


class RandomPacing(PacingPolicy):
    """
    Human-looking pacing with bursts and punctuation pauses.

    Burst mode may switch on once more than ``burst_min_revealed`` characters
    are visible; its chunk size is drawn once and held until burst mode
    switches off again. Delays pause longest after sentence punctuation and
    less after clause punctuation; otherwise they are short, and shorter
    still during a burst.
    """

    def __init__(
        self,
        settings: TypingSettings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings or TypingSettings()
        self.rng = rng or random.Random()
        self.burst_active = False
        self.burst_size = 1

    def reset(self) -> None:
        self.burst_active = False
        self.burst_size = 1

    def next_chunk(self, revealed: int, remaining: int) -> int:
        settings = self.settings
        if self.burst_active:
            if self.rng.random() < settings.burst_deactivation_probability:
                self.burst_active = False
                self.burst_size = 1
        elif (
            revealed > settings.burst_min_revealed
            and self.rng.random() < settings.burst_activation_probability
        ):
            self.burst_active = True
            self.burst_size = self.rng.choice(settings.burst_sizes)

        chunk = self.burst_size if self.burst_active else 1
        return max(1, min(chunk, remaining))

    def delay_for(self, char: str) -> float:
        settings = self.settings
        if char in SENTENCE_END:
            low, high = settings.pause_min_ms, settings.pause_max_ms
        elif char in CLAUSE_BREAK:
            low, high = settings.medium_pause_min_ms, settings.medium_pause_max_ms
        elif self.burst_active:
            low, high = settings.burst_min_ms, settings.burst_max_ms
        else:
            low, high = settings.normal_min_ms, settings.normal_max_ms
        return self.rng.uniform(low, high) / 1000.0

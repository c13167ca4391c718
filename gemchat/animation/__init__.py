"""Typing animation for assistant responses."""

from gemchat.animation.engine import RevealState, TypingAnimationEngine
from gemchat.animation.pacing import FixedPacing, PacingPolicy, RandomPacing

__all__ = [
    "FixedPacing",
    "PacingPolicy",
    "RandomPacing",
    "RevealState",
    "TypingAnimationEngine",
]

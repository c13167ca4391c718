"""Prompt templates for the chat route."""

from gemchat.prompts.loader import PromptLoader

__all__ = ["PromptLoader"]

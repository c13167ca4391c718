"""GemChat: chat relay for Gemini with a typing-animation, history-persisting client."""

__version__ = "0.1.0"

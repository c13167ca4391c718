"""Identity and session lifetime management."""

from gemchat.session.keys import StorageKeys
from gemchat.session.manager import DEFAULT_TTL_SECONDS, SessionManager

__all__ = ["DEFAULT_TTL_SECONDS", "SessionManager", "StorageKeys"]

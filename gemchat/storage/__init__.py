"""
Client-side key/value storage.

Usage:
    from gemchat.config import get_settings
    from gemchat.storage import create_store

    store = create_store(get_settings().storage)
    store.write_json("gemchat_user_id", "abc")
"""

from gemchat.config import StorageSettings
from gemchat.storage.adapter import PersistentStore
from gemchat.storage.base import KeyValueStore, StorageError
from gemchat.storage.file import JsonFileStore
from gemchat.storage.memory import InMemoryStore


def create_store(settings: StorageSettings) -> PersistentStore:
    """Build the configured backend wrapped in the fail-soft adapter."""
    if settings.backend == "memory":
        return PersistentStore(InMemoryStore())
    return PersistentStore(JsonFileStore(settings.path))


__all__ = [
    "InMemoryStore",
    "JsonFileStore",
    "KeyValueStore",
    "PersistentStore",
    "StorageError",
    "create_store",
]

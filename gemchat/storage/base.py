"""Key/value store interface shared by every storage backend."""

from __future__ import annotations

from abc import ABC, abstractmethod


class StorageError(Exception):
    """Raised by a backend when it cannot read or write."""


class KeyValueStore(ABC):
    """
    Minimal string key/value store modelled on browser local storage.

    Backends may raise ``StorageError`` (or ``OSError``) on failure; callers
    that must never fail go through ``PersistentStore`` instead.
    """

    @property
    def available(self) -> bool:
        """Whether the backend can be used at all."""
        return True

    @abstractmethod
    def get(self, key: str) -> str | None:
        pass  # pragma: no cover - abstract method

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass  # pragma: no cover - abstract method

    @abstractmethod
    def delete(self, key: str) -> None:
        pass  # pragma: no cover - abstract method

    @abstractmethod
    def keys(self) -> list[str]:
        pass  # pragma: no cover - abstract method

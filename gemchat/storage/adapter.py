"""Fail-soft JSON access on top of a key/value backend."""

from __future__ import annotations

import json
import logging
from typing import Any

from gemchat.storage.base import KeyValueStore

logger = logging.getLogger(__name__)


class PersistentStore:
    """
    Safe read/write/delete wrapper around a ``KeyValueStore``.

    Storage faults are logged and absorbed: a failed or unparsable read is
    reported as ``None`` and a failed write or delete returns ``False``.
    Nothing here raises to the caller.
    """

    def __init__(self, backend: KeyValueStore) -> None:
        self.backend = backend

    @property
    def available(self) -> bool:
        try:
            return self.backend.available
        except Exception as exc:
            logger.warning(f"Storage availability check failed: {exc}")
            return False

    def read_json(self, key: str) -> Any | None:
        try:
            raw = self.backend.get(key)
        except Exception as exc:
            logger.warning(f"Storage read failed: {exc}", extra={"key": key})
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.warning("Discarding unparsable storage value", extra={"key": key})
            return None

    def write_json(self, key: str, value: Any) -> bool:
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as exc:
            logger.warning(f"Storage value not serializable: {exc}", extra={"key": key})
            return False
        try:
            self.backend.set(key, payload)
        except Exception as exc:
            logger.warning(f"Storage write failed: {exc}", extra={"key": key})
            return False
        return True

    def remove(self, key: str) -> bool:
        try:
            self.backend.delete(key)
        except Exception as exc:
            logger.warning(f"Storage delete failed: {exc}", extra={"key": key})
            return False
        return True

    def keys(self, prefix: str = "") -> list[str]:
        try:
            names = self.backend.keys()
        except Exception as exc:
            logger.warning(f"Storage key listing failed: {exc}")
            return []
        return [name for name in names if name.startswith(prefix)]

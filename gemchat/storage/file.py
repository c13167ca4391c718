"""
JSON file storage backend.

Persists the whole key/value namespace to a single JSON object on disk
(~/.gemchat/local_storage.json by default), the local equivalent of a
browser profile's local storage. Every operation re-reads the file so that
several clients sharing the profile see each other's writes.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from gemchat.storage.base import KeyValueStore, StorageError

logger = logging.getLogger(__name__)


class JsonFileStore(KeyValueStore):
    """Key/value store backed by one JSON file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()
        self._available = True
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
        except OSError as exc:
            logger.warning(
                f"Local storage directory unavailable: {exc}",
                extra={"path": str(self.path.parent)},
            )
            self._available = False

    @property
    def available(self) -> bool:
        return self._available

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def keys(self) -> list[str]:
        return list(self._load())

    def _load(self) -> dict[str, str]:
        if not self._available:
            raise StorageError(f"Local storage unavailable at {self.path}")
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Local storage file is corrupt; treating it as empty")
            return {}
        if not isinstance(payload, dict):
            return {}
        return payload

    def _save(self, data: dict[str, str]) -> None:
        if not self._available:
            raise StorageError(f"Local storage unavailable at {self.path}")
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2)
        os.replace(tmp_path, self.path)
        try:
            self.path.chmod(0o600)
        except OSError:
            pass

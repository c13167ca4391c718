"""Storage key layout for identities and their namespaced conversation data."""

from __future__ import annotations

from dataclasses import dataclass

MESSAGES_SUFFIX = "messages"
HISTORY_SUFFIX = "history"
SESSION_MARKER_SUFFIX = "session"
SESSION_DATA_SUFFIX = "session_data"
REVISION_SUFFIX = "revision"

NAMESPACED_SUFFIXES = (
    MESSAGES_SUFFIX,
    HISTORY_SUFFIX,
    SESSION_MARKER_SUFFIX,
    SESSION_DATA_SUFFIX,
    REVISION_SUFFIX,
)


@dataclass(frozen=True)
class StorageKeys:
    """Builds ``<prefix>_<identity>_<suffix>`` keys."""

    prefix: str = "gemchat"

    @property
    def identity(self) -> str:
        return f"{self.prefix}_user_id"

    def namespaced(self, identity: str, suffix: str) -> str:
        return f"{self.prefix}_{identity}_{suffix}"

    def messages(self, identity: str) -> str:
        return self.namespaced(identity, MESSAGES_SUFFIX)

    def history(self, identity: str) -> str:
        return self.namespaced(identity, HISTORY_SUFFIX)

    def session_marker(self, identity: str) -> str:
        return self.namespaced(identity, SESSION_MARKER_SUFFIX)

    def session_data(self, identity: str) -> str:
        return self.namespaced(identity, SESSION_DATA_SUFFIX)

    def revision(self, identity: str) -> str:
        return self.namespaced(identity, REVISION_SUFFIX)

    def all_for(self, identity: str) -> list[str]:
        return [self.namespaced(identity, suffix) for suffix in NAMESPACED_SUFFIXES]

    def identity_from_session_data_key(self, key: str) -> str | None:
        """Recover the identity from a session-data key, or None if it is not one."""
        head = f"{self.prefix}_"
        tail = f"_{SESSION_DATA_SUFFIX}"
        if not key.startswith(head) or not key.endswith(tail):
            return None
        identity = key[len(head) : -len(tail)]
        if not identity or key == self.identity:
            return None
        return identity

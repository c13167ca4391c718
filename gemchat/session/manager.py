"""
Identity & Session Manager

Assigns a durable per-profile identity, keeps a sliding expiry window per
identity, and purges the namespaced data of identities whose window lapsed.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable

from pydantic import ValidationError

from gemchat.models.conversation import SessionData
from gemchat.session.keys import StorageKeys
from gemchat.storage import PersistentStore

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 24 * 60 * 60


class SessionManager:
    """
    Owns the identity key and every identity's session-data key.

    Attributes:
        store: Fail-soft storage adapter
        keys: Key layout
        ttl_ms: Sliding session lifetime in milliseconds
    """

    def __init__(
        self,
        store: PersistentStore,
        clock: Callable[[], int],
        keys: StorageKeys | None = None,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
    ) -> None:
        self.store = store
        self.keys = keys or StorageKeys()
        self.ttl_ms = int(ttl_seconds * 1000)
        self._clock = clock

    def get_or_create_identity(self) -> str:
        """Return the profile identity, generating and persisting one if absent."""
        if not self.store.available:
            logger.warning("Storage unavailable; running without an identity")
            return ""

        existing = self.store.read_json(self.keys.identity)
        if isinstance(existing, str) and existing:
            return existing

        identity = uuid.uuid4().hex
        self.store.write_json(self.keys.identity, identity)
        logger.info("Created new identity", extra={"identity": identity})
        return identity

    def read_session(self, identity: str) -> SessionData | None:
        raw = self.store.read_json(self.keys.session_data(identity))
        if raw is None:
            return None
        try:
            return SessionData.model_validate(raw)
        except ValidationError:
            logger.warning("Discarding corrupt session data", extra={"identity": identity})
            return None

    def touch_session(self, identity: str) -> SessionData | None:
        """Extend the identity's expiry to now + TTL. Expiration never moves backwards."""
        if not identity:
            return None
        now = self._clock()
        expiration = now + self.ttl_ms
        current = self.read_session(identity)
        if current is not None and current.expiration > expiration:
            expiration = current.expiration
        session = SessionData(last_access=now, expiration=expiration)
        self.store.write_json(self.keys.session_data(identity), session.model_dump())
        return session

    def is_session_valid(self, identity: str) -> bool:
        """
        Check the identity's session window.

        A missing, corrupt or expired session purges the identity's
        conversation data and returns False. A live session is refreshed.
        """
        if not identity:
            return False
        session = self.read_session(identity)
        if session is None or session.is_expired(self._clock()):
            logger.info(
                "Session missing or expired; clearing conversation data",
                extra={"identity": identity, "had_session": session is not None},
            )
            self.purge_identity(identity)
            return False
        self.touch_session(identity)
        return True

    def purge_identity(self, identity: str) -> None:
        for key in self.keys.all_for(identity):
            self.store.remove(key)

    def list_sessions(self) -> dict[str, SessionData | None]:
        """Every identity with a session-data key; unparsable entries map to None."""
        sessions: dict[str, SessionData | None] = {}
        for key in self.store.keys(prefix=f"{self.keys.prefix}_"):
            identity = self.keys.identity_from_session_data_key(key)
            if identity is None:
                continue
            sessions[identity] = self.read_session(identity)
        return sessions

    def purge_expired_sessions(self) -> list[str]:
        """Delete the namespaced data of every expired identity. Returns the purged identities."""
        now = self._clock()
        purged: list[str] = []
        for identity, session in self.list_sessions().items():
            if session is not None and not session.is_expired(now):
                continue
            self.purge_identity(identity)
            purged.append(identity)

        if purged:
            logger.info(
                f"Purged {len(purged)} expired session(s)",
                extra={"purged_count": len(purged)},
            )
        return purged

"""
Conversation State

In-memory display messages and their parallel role-tagged history for the
current identity, written through to storage on a trailing debounce.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from gemchat.models.conversation import DisplayMessage, HistoryEntry
from gemchat.scheduling import Debouncer, Scheduler
from gemchat.session import SessionManager
from gemchat.storage import PersistentStore

logger = logging.getLogger(__name__)

_EntryT = TypeVar("_EntryT", bound=BaseModel)


class ConversationState:
    """
    Authoritative copy of one identity's conversation during a client lifetime.

    This is the only writer of the messages/history keys. Mutations are
    visible immediately; persistence is deferred through a trailing debounce,
    so a process that exits inside the window loses the last mutation unless
    ``flush()`` runs first.

    Writes carry a revision guard: ``<identity>_revision`` holds the mutation
    time of the last accepted write, and a snapshot older than it is dropped
    instead of overwriting newer data from another client.
    """

    def __init__(
        self,
        store: PersistentStore,
        sessions: SessionManager,
        scheduler: Scheduler,
        persist_debounce_seconds: float = 0.3,
        load_suppression_seconds: float = 0.1,
    ) -> None:
        self.store = store
        self.sessions = sessions
        self.keys = sessions.keys
        self.messages: list[DisplayMessage] = []
        self.history: list[HistoryEntry] = []
        self.identity: str | None = None
        self.session_id: str | None = None

        self._scheduler = scheduler
        self._load_suppression_ms = int(load_suppression_seconds * 1000)
        self._loaded_at_ms: int | None = None
        self._last_mutation_ms = 0
        self._dirty = False
        self._debouncer = Debouncer(scheduler, persist_debounce_seconds, self.persist)

    @property
    def persist_pending(self) -> bool:
        return self._debouncer.pending

    def load(
        self, identity: str, session_id: str | None = None
    ) -> tuple[list[DisplayMessage], list[HistoryEntry]]:
        """Load the identity's conversation, or start empty if its session lapsed."""
        if self._already_loaded(identity, session_id):
            logger.debug("Conversation already loaded for this session", extra={"identity": identity})
            return self.snapshot()

        self._debouncer.cancel()
        self.identity = identity
        self.session_id = session_id
        self.messages = []
        self.history = []
        self._dirty = False
        self._last_mutation_ms = 0

        if not self.sessions.is_session_valid(identity):
            self.sessions.touch_session(identity)
            self._mark_loaded()
            return self.snapshot()

        messages = self._parse_entries(
            self.store.read_json(self.keys.messages(identity)), DisplayMessage, identity
        )
        history = self._parse_entries(
            self.store.read_json(self.keys.history(identity)), HistoryEntry, identity
        )
        history_by_id = {entry.id: entry for entry in history}
        for message in messages:
            entry = history_by_id.get(message.id)
            if entry is None:
                continue
            self.messages.append(message)
            self.history.append(entry)

        dropped = len(messages) - len(self.messages)
        if dropped:
            logger.warning(
                f"Dropped {dropped} message(s) without a matching history entry",
                extra={"identity": identity},
            )

        revision = self.store.read_json(self.keys.revision(identity))
        if isinstance(revision, dict) and isinstance(revision.get("updated_at"), int):
            self._last_mutation_ms = revision["updated_at"]

        self._mark_loaded()
        logger.info(
            f"Loaded conversation with {len(self.messages)} message(s)",
            extra={"identity": identity, "message_count": len(self.messages)},
        )
        return self.snapshot()

    def snapshot(self) -> tuple[list[DisplayMessage], list[HistoryEntry]]:
        return list(self.messages), list(self.history)

    def append_user_message(self, text: str) -> DisplayMessage:
        return self._append(text, is_user=True)

    def append_assistant_message(self, text: str) -> DisplayMessage:
        return self._append(text, is_user=False)

    def contains(self, message_id: str) -> bool:
        return any(message.id == message_id for message in self.messages)

    def recent_history(self, limit: int, before: str | None = None) -> list[HistoryEntry]:
        """Last ``limit`` history entries, optionally only those preceding entry ``before``."""
        entries = self.history
        if before is not None:
            for index, entry in enumerate(entries):
                if entry.id == before:
                    entries = entries[:index]
                    break
        if limit <= 0:
            return []
        return list(entries[-limit:])

    def clear(self) -> None:
        """
        Empty the conversation and delete its stored messages and history.

        The identity and its session window are kept (and refreshed), so the
        user starts a clean slate inside the same rolling window.
        """
        self._debouncer.cancel()
        self.messages = []
        self.history = []
        self._dirty = False
        if not self.identity:
            return

        self._last_mutation_ms = max(self._last_mutation_ms, self._scheduler.now_ms())
        self.store.write_json(
            self.keys.revision(self.identity), {"updated_at": self._last_mutation_ms}
        )
        self.store.remove(self.keys.messages(self.identity))
        self.store.remove(self.keys.history(self.identity))
        self.sessions.touch_session(self.identity)
        logger.info("Conversation cleared", extra={"identity": self.identity})

    def schedule_persist(self) -> None:
        """
        Request a debounced write of the current snapshot.

        Appends mark the state dirty first, so load suppression only applies to
        callers outside this class asking for a write of unchanged data.
        """
        if self.identity is None:
            return
        if not self._dirty and self._within_load_suppression():
            logger.debug("Skipping persist requested right after load")
            return
        self._debouncer.trigger()

    def persist(self) -> bool:
        """Write the snapshot now. Returns False when the write was skipped or failed."""
        if not self.identity:
            return False

        stored = self.store.read_json(self.keys.revision(self.identity))
        if isinstance(stored, dict):
            stored_at = stored.get("updated_at")
            if isinstance(stored_at, int) and stored_at > self._last_mutation_ms:
                logger.warning(
                    "Skipping stale conversation snapshot; storage holds a newer revision",
                    extra={
                        "identity": self.identity,
                        "stored_revision": stored_at,
                        "local_revision": self._last_mutation_ms,
                    },
                )
                return False

        ok = self.store.write_json(
            self.keys.messages(self.identity),
            [message.model_dump() for message in self.messages],
        )
        ok = (
            self.store.write_json(
                self.keys.history(self.identity),
                [entry.model_dump() for entry in self.history],
            )
            and ok
        )
        ok = (
            self.store.write_json(
                self.keys.revision(self.identity), {"updated_at": self._last_mutation_ms}
            )
            and ok
        )
        self._dirty = False
        self.sessions.touch_session(self.identity)
        return ok

    def flush(self) -> bool:
        """Run a pending debounced write immediately."""
        return self._debouncer.flush()

    def _append(self, text: str, is_user: bool) -> DisplayMessage:
        if self.identity is None:
            raise RuntimeError("ConversationState not loaded")

        now = self._scheduler.now_ms()
        message_id = uuid.uuid4().hex
        owner = self.identity or None
        message = DisplayMessage(
            id=message_id, text=text, is_user=is_user, timestamp=now, owner=owner
        )
        entry = HistoryEntry(
            id=message_id,
            role="user" if is_user else "model",
            content=text,
            timestamp=now,
            owner=owner,
        )
        self.messages.append(message)
        self.history.append(entry)
        self._last_mutation_ms = max(self._last_mutation_ms, now)
        self._dirty = True
        self.schedule_persist()
        return message

    def _already_loaded(self, identity: str, session_id: str | None) -> bool:
        if session_id is None or self.identity != identity or self.session_id != session_id:
            return False
        return self.store.read_json(self.keys.session_marker(identity)) == session_id

    def _mark_loaded(self) -> None:
        self._loaded_at_ms = self._scheduler.now_ms()
        if self.identity and self.session_id:
            self.store.write_json(self.keys.session_marker(self.identity), self.session_id)

    def _within_load_suppression(self) -> bool:
        if self._loaded_at_ms is None:
            return False
        return self._scheduler.now_ms() - self._loaded_at_ms < self._load_suppression_ms

    @staticmethod
    def _parse_entries(raw: Any, model: type[_EntryT], identity: str) -> list[_EntryT]:
        if not isinstance(raw, list):
            return []
        entries: list[_EntryT] = []
        for item in raw:
            try:
                entry = model.model_validate(item)
            except ValidationError:
                logger.warning("Discarding unparsable stored entry", extra={"identity": identity})
                continue
            owner = getattr(entry, "owner", None)
            if owner is not None and owner != identity:
                logger.warning(
                    "Discarding entry owned by another identity",
                    extra={"identity": identity, "owner": owner},
                )
                continue
            entries.append(entry)
        return entries

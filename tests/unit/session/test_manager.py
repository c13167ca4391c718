"""Unit tests for identity and session lifetime management."""

from __future__ import annotations

import pytest

from gemchat.models.conversation import SessionData
from gemchat.session import DEFAULT_TTL_SECONDS, SessionManager, StorageKeys
from gemchat.storage import KeyValueStore, PersistentStore, StorageError

DAY_MS = 24 * 60 * 60 * 1000


class _UnavailableStore(KeyValueStore):
    @property
    def available(self) -> bool:
        return False

    def get(self, key):
        raise StorageError("disabled")

    def set(self, key, value):
        raise StorageError("disabled")

    def delete(self, key):
        raise StorageError("disabled")

    def keys(self):
        raise StorageError("disabled")


def _seed_conversation(store, keys, identity):
    store.write_json(keys.messages(identity), [{"id": "m1"}])
    store.write_json(keys.history(identity), [{"id": "m1"}])
    store.write_json(keys.session_marker(identity), "s1")
    store.write_json(keys.revision(identity), {"updated_at": 1})


class TestStorageKeys:
    def test_key_layout(self):
        keys = StorageKeys()

        assert keys.identity == "gemchat_user_id"
        assert keys.messages("abc") == "gemchat_abc_messages"
        assert keys.history("abc") == "gemchat_abc_history"
        assert keys.session_marker("abc") == "gemchat_abc_session"
        assert keys.session_data("abc") == "gemchat_abc_session_data"
        assert keys.revision("abc") == "gemchat_abc_revision"

    def test_identity_from_session_data_key(self):
        keys = StorageKeys()

        assert keys.identity_from_session_data_key("gemchat_abc_session_data") == "abc"
        assert keys.identity_from_session_data_key("gemchat_abc_messages") is None
        assert keys.identity_from_session_data_key("other_abc_session_data") is None
        assert keys.identity_from_session_data_key("gemchat__session_data") is None

    def test_custom_prefix(self):
        keys = StorageKeys(prefix="demo")

        assert keys.identity == "demo_user_id"
        assert keys.all_for("x") == [
            "demo_x_messages",
            "demo_x_history",
            "demo_x_session",
            "demo_x_session_data",
            "demo_x_revision",
        ]


class TestIdentity:
    def test_identity_is_created_once(self, sessions, store, keys):
        first = sessions.get_or_create_identity()
        second = sessions.get_or_create_identity()

        assert first
        assert first == second
        assert store.read_json(keys.identity) == first

    def test_existing_identity_is_reused(self, sessions, store, keys):
        store.write_json(keys.identity, "existing-id")

        assert sessions.get_or_create_identity() == "existing-id"

    def test_unavailable_storage_yields_empty_identity(self, scheduler):
        manager = SessionManager(
            store=PersistentStore(_UnavailableStore()), clock=scheduler.now_ms
        )

        assert manager.get_or_create_identity() == ""
        assert manager.touch_session("") is None
        assert manager.is_session_valid("") is False


class TestSessionWindow:
    def test_touch_sets_sliding_expiration(self, sessions, scheduler):
        session = sessions.touch_session("abc")

        assert session.last_access == scheduler.now_ms()
        assert session.expiration == scheduler.now_ms() + DEFAULT_TTL_SECONDS * 1000
        assert sessions.read_session("abc") == session

    def test_touch_extends_but_never_shortens(self, store, scheduler, keys):
        long_lived = SessionManager(store=store, clock=scheduler.now_ms, ttl_seconds=10 * 86400)
        short_lived = SessionManager(store=store, clock=scheduler.now_ms, ttl_seconds=86400)

        first = long_lived.touch_session("abc")
        scheduler.advance(60)
        second = short_lived.touch_session("abc")

        assert second.last_access > first.last_access
        assert second.expiration == first.expiration

    def test_touch_after_time_passes_moves_expiration_forward(self, sessions, scheduler):
        first = sessions.touch_session("abc")
        scheduler.advance(3600)
        second = sessions.touch_session("abc")

        assert second.expiration == first.expiration + 3600 * 1000

    def test_valid_session_is_refreshed(self, sessions, scheduler):
        sessions.touch_session("abc")
        scheduler.advance(86400)

        assert sessions.is_session_valid("abc") is True
        assert sessions.read_session("abc").last_access == scheduler.now_ms()

    def test_expired_session_purges_conversation(self, sessions, store, keys, scheduler):
        sessions.touch_session("abc")
        _seed_conversation(store, keys, "abc")
        scheduler.advance(6 * 86400)

        assert sessions.is_session_valid("abc") is False
        for key in keys.all_for("abc"):
            assert store.read_json(key) is None

    def test_missing_session_purges_conversation(self, sessions, store, keys):
        _seed_conversation(store, keys, "abc")

        assert sessions.is_session_valid("abc") is False
        assert store.read_json(keys.messages("abc")) is None

    def test_corrupt_session_is_treated_as_missing(self, sessions, store, keys):
        store.write_json(keys.session_data("abc"), {"last_access": "yesterday"})

        assert sessions.read_session("abc") is None
        assert sessions.is_session_valid("abc") is False

    def test_session_exactly_at_expiration_is_still_valid(self, store, scheduler):
        manager = SessionManager(store=store, clock=scheduler.now_ms)
        now = scheduler.now_ms()
        store.write_json(
            manager.keys.session_data("abc"),
            SessionData(last_access=now - 1000, expiration=now).model_dump(),
        )

        assert manager.is_session_valid("abc") is True


class TestPurgeExpired:
    def test_purges_only_expired_identities(self, sessions, store, keys, scheduler):
        sessions.touch_session("old")
        _seed_conversation(store, keys, "old")
        scheduler.advance(4 * 86400)
        sessions.touch_session("fresh")
        _seed_conversation(store, keys, "fresh")
        scheduler.advance(2 * 86400)

        purged = sessions.purge_expired_sessions()

        assert purged == ["old"]
        assert store.read_json(keys.messages("old")) is None
        assert store.read_json(keys.session_data("old")) is None
        assert store.read_json(keys.messages("fresh")) == [{"id": "m1"}]

    def test_corrupt_session_data_is_purged(self, sessions, store, keys):
        store.write_json(keys.session_data("broken"), "garbage")

        assert sessions.purge_expired_sessions() == ["broken"]
        assert store.read_json(keys.session_data("broken")) is None

    def test_list_sessions(self, sessions, store, keys):
        sessions.touch_session("a")
        store.write_json(keys.session_data("b"), 42)

        listed = sessions.list_sessions()

        assert set(listed) == {"a", "b"}
        assert isinstance(listed["a"], SessionData)
        assert listed["b"] is None

    def test_identity_key_is_not_mistaken_for_a_session(self, sessions, store, keys):
        store.write_json(keys.identity, "abc")

        assert sessions.list_sessions() == {}
        assert sessions.purge_expired_sessions() == []


@pytest.mark.parametrize("ttl_days", [1, 5])
def test_ttl_controls_expiry(store, scheduler, ttl_days):
    manager = SessionManager(store=store, clock=scheduler.now_ms, ttl_seconds=ttl_days * 86400)
    manager.touch_session("abc")

    scheduler.advance(ttl_days * 86400 - 1)
    assert manager.read_session("abc").is_expired(scheduler.now_ms()) is False

    scheduler.advance(2)
    assert manager.read_session("abc").is_expired(scheduler.now_ms()) is True

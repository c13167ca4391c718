"""Unit tests for the fail-soft storage adapter."""

from __future__ import annotations

import pytest

from gemchat.storage import InMemoryStore, KeyValueStore, PersistentStore, StorageError


class _BrokenStore(KeyValueStore):
    """Backend whose every operation fails like a disabled browser store."""

    @property
    def available(self) -> bool:
        raise StorageError("storage disabled")

    def get(self, key):
        raise StorageError("storage disabled")

    def set(self, key, value):
        raise StorageError("quota exceeded")

    def delete(self, key):
        raise StorageError("storage disabled")

    def keys(self):
        raise StorageError("storage disabled")


@pytest.fixture
def broken() -> PersistentStore:
    return PersistentStore(_BrokenStore())


def test_write_then_read_returns_json_value(store):
    assert store.write_json("gemchat_user_id", "abc123") is True
    assert store.write_json("gemchat_abc123_messages", [{"id": "1"}]) is True

    assert store.read_json("gemchat_user_id") == "abc123"
    assert store.read_json("gemchat_abc123_messages") == [{"id": "1"}]


def test_missing_key_reads_as_none(store):
    assert store.read_json("nothing-here") is None


def test_unparsable_value_reads_as_none():
    store = PersistentStore(InMemoryStore({"gemchat_x_messages": "{not json"}))

    assert store.read_json("gemchat_x_messages") is None


def test_unserializable_value_is_not_written(store, backend):
    assert store.write_json("key", {"bad": object()}) is False
    assert backend.get("key") is None


def test_remove_deletes_key(store):
    store.write_json("key", 1)

    assert store.remove("key") is True
    assert store.read_json("key") is None


def test_remove_missing_key_is_not_an_error(store):
    assert store.remove("never-written") is True


def test_keys_filters_by_prefix(store):
    store.write_json("gemchat_a_session_data", {})
    store.write_json("gemchat_b_messages", [])
    store.write_json("other_key", 1)

    assert sorted(store.keys(prefix="gemchat_")) == [
        "gemchat_a_session_data",
        "gemchat_b_messages",
    ]


def test_faults_are_absorbed(broken):
    assert broken.available is False
    assert broken.read_json("key") is None
    assert broken.write_json("key", "value") is False
    assert broken.remove("key") is False
    assert broken.keys() == []


def test_write_fault_is_logged(broken, caplog):
    broken.write_json("gemchat_x_history", [])

    assert "Storage write failed" in caplog.text

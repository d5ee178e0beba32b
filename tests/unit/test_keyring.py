"""Tests for the keyring layer: lock state, sealing and listings."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from sealed_keyring.errors import DecryptionError, LockedError, ValueTooLargeError
from sealed_keyring.item import Item, generate_secret_key
from sealed_keyring.keyring import Keyring
from sealed_keyring.listing import Document, ListOptions
from sealed_keyring.stores.memory import MemStore
from sealed_keyring.stores.store import Store


@pytest.fixture
def spy() -> MagicMock:
    """A store spy that records every call."""
    return MagicMock(spec=Store, name="spy-store")


@pytest.fixture
def keyring(mem_store: MemStore, secret_key: bytes) -> Keyring:
    return Keyring(mem_store, key=secret_key)


# ---------------------------------------------------------------------------
# Locked state
# ---------------------------------------------------------------------------

class TestLocked:
    """Without a key, get/set fail before reaching the store."""

    def test_starts_locked_without_key(self, spy: MagicMock) -> None:
        assert Keyring(spy).locked is True

    def test_get_raises_locked(self, spy: MagicMock) -> None:
        with pytest.raises(LockedError):
            Keyring(spy).get("a")
        spy.get.assert_not_called()

    def test_set_raises_locked(self, spy: MagicMock) -> None:
        with pytest.raises(LockedError):
            Keyring(spy).set(Item(id="a", type="pw", data=b"x"))
        spy.set.assert_not_called()

    def test_no_store_calls_at_all(self, spy: MagicMock) -> None:
        keyring = Keyring(spy)
        for call in (lambda: keyring.get("a"), lambda: keyring.set(Item("a", "pw", b"x"))):
            with pytest.raises(LockedError):
                call()
        assert spy.method_calls == []

    def test_documents_with_data_raise_locked(self, spy: MagicMock) -> None:
        with pytest.raises(LockedError):
            Keyring(spy).documents()
        spy.get.assert_not_called()

    def test_items_raise_locked(self, spy: MagicMock) -> None:
        with pytest.raises(LockedError):
            Keyring(spy).items()

    def test_key_free_operations_work_while_locked(self, mem_store: MemStore) -> None:
        mem_store.set("a", b"sealed")
        keyring = Keyring(mem_store)
        assert keyring.exists("a") is True
        assert keyring.ids() == ["a"]
        assert keyring.documents(ListOptions(no_data=True)) == [Document(path="a")]
        assert keyring.delete("a") is True
        keyring.reset()

    def test_lock_drops_key(self, keyring: Keyring) -> None:
        keyring.set(Item(id="a", type="pw", data=b"x"))
        keyring.lock()
        assert keyring.locked is True
        with pytest.raises(LockedError):
            keyring.get("a")


# ---------------------------------------------------------------------------
# Unlocking
# ---------------------------------------------------------------------------

class TestUnlock:

    def test_unlock_transitions(self, mem_store: MemStore, secret_key: bytes) -> None:
        keyring = Keyring(mem_store)
        keyring.unlock(secret_key)
        assert keyring.locked is False
        assert keyring.get("missing") is None

    def test_unlock_rejects_bad_key(self, mem_store: MemStore) -> None:
        keyring = Keyring(mem_store)
        with pytest.raises(ValueError):
            keyring.unlock(b"too short")
        assert keyring.locked is True

    def test_name_is_store_name(self, keyring: Keyring) -> None:
        assert keyring.name == "mem"


# ---------------------------------------------------------------------------
# Unlocked operations
# ---------------------------------------------------------------------------

class TestUnlocked:

    def test_set_then_get(self, keyring: Keyring) -> None:
        item = Item(id="a", type="pw", data=b"secret1")
        keyring.set(item)
        assert keyring.get("a") == item

    def test_get_missing_returns_none(self, keyring: Keyring) -> None:
        assert keyring.get("nonexistent") is None

    def test_store_never_sees_plaintext(self, keyring: Keyring, mem_store: MemStore) -> None:
        keyring.set(Item(id="a", type="pw", data=b"super-secret-value"))
        raw = mem_store.get("a")
        assert raw is not None
        assert b"super-secret-value" not in raw

    def test_oversized_set_leaves_store_unchanged(self, keyring: Keyring, mem_store: MemStore) -> None:
        keyring.set(Item(id="a", type="pw", data=b"original"))
        before = mem_store.get("a")
        with pytest.raises(ValueTooLargeError):
            keyring.set(Item(id="a", type="pw", data=b"x" * 2049))
        assert mem_store.get("a") == before
        assert mem_store.ids() == ["a"]

    def test_oversized_set_never_calls_store(self, spy: MagicMock, secret_key: bytes) -> None:
        with pytest.raises(ValueTooLargeError):
            Keyring(spy, key=secret_key).set(Item(id="a", type="pw", data=b"x" * 2049))
        spy.set.assert_not_called()

    def test_wrong_key_raises_decryption_error(self, mem_store: MemStore, secret_key: bytes) -> None:
        Keyring(mem_store, key=secret_key).set(Item(id="a", type="pw", data=b"x"))
        other = Keyring(mem_store, key=generate_secret_key())
        with pytest.raises(DecryptionError):
            other.get("a")

    def test_blob_moved_to_other_id_fails(self, keyring: Keyring, mem_store: MemStore) -> None:
        keyring.set(Item(id="a", type="pw", data=b"x"))
        mem_store.set("b", mem_store.get("a") or b"")
        with pytest.raises(DecryptionError):
            keyring.get("b")

    def test_delete_idempotent(self, keyring: Keyring) -> None:
        keyring.set(Item(id="a", type="pw", data=b"x"))
        assert keyring.delete("a") is True
        assert keyring.delete("a") is False

    def test_reset_clears(self, keyring: Keyring) -> None:
        for n in range(5):
            keyring.set(Item(id=f"item{n}", type="pw", data=b"x"))
        keyring.reset()
        assert keyring.ids() == []
        assert not any(keyring.exists(f"item{n}") for n in range(5))


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------

class TestListings:

    @pytest.fixture
    def populated(self, keyring: Keyring) -> Keyring:
        keyring.set(Item(id="ab", type="pw", data=b"secret2"))
        keyring.set(Item(id="a", type="pw", data=b"secret1"))
        keyring.set(Item(id="b", type="note", data=b"secret3"))
        return keyring

    def test_example_scenario(self, populated: Keyring) -> None:
        assert populated.ids(ListOptions(prefix="a")) == ["a", "ab"]
        item = populated.get("a")
        assert item is not None
        assert item.data == b"secret1"

    def test_documents_are_decrypted_and_sorted(self, populated: Keyring) -> None:
        assert populated.documents() == [
            Document(path="a", data=b"secret1"),
            Document(path="ab", data=b"secret2"),
            Document(path="b", data=b"secret3"),
        ]

    def test_documents_prefix_no_data(self, populated: Keyring) -> None:
        docs = populated.documents(ListOptions(prefix="a", no_data=True))
        assert docs == [Document(path="a"), Document(path="ab")]

    def test_items(self, populated: Keyring) -> None:
        assert [i.id for i in populated.items()] == ["a", "ab", "b"]
        assert [i.type for i in populated.items(prefix="b")] == ["note"]

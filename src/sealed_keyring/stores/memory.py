"""In-memory store, useful for tests and ephemeral keyrings."""

from __future__ import annotations

import threading

from sealed_keyring.stores.store import Store


def _check_id(id: str) -> None:
    if not id:
        raise ValueError("invalid id")


class MemStore(Store):
    """Stores bytes in a per-instance dict guarded by a lock.

    Nothing is shared between instances, so two ``MemStore`` objects are two
    independent namespaces.
    """

    name = "mem"

    def __init__(self) -> None:
        self._items: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, id: str) -> bytes | None:
        _check_id(id)
        with self._lock:
            return self._items.get(id)

    def set(self, id: str, data: bytes) -> None:
        _check_id(id)
        with self._lock:
            self._items[id] = bytes(data)

    def delete(self, id: str) -> bool:
        _check_id(id)
        with self._lock:
            return self._items.pop(id, None) is not None

    def exists(self, id: str) -> bool:
        _check_id(id)
        with self._lock:
            return id in self._items

    def list_ids(self) -> list[str]:
        with self._lock:
            return list(self._items)

    def reset(self) -> None:
        with self._lock:
            self._items = {}

"""Encryption-aware keyring over a ``Store``.

The keyring has two states. While locked (no secret key), ``get`` and
``set`` raise ``LockedError`` without touching the store. Once a key is
supplied with ``unlock`` it stays unlocked until the caller calls ``lock``.
Operations that need no plaintext (``delete``, ``exists``, ``ids``,
``reset``) work in either state.
"""

from __future__ import annotations

import logging

from sealed_keyring.errors import LockedError
from sealed_keyring.item import Item, check_key, decode_item, encode_item
from sealed_keyring.listing import Document, ListOptions, collect_documents
from sealed_keyring.stores.store import Store

logger = logging.getLogger(__name__)


class Keyring:
    """Reads and writes sealed items through a store.

    Parameters
    ----------
    store:
        Backend holding the sealed envelopes.
    key:
        Optional 32-byte secret key. Without one the keyring starts locked.
    """

    def __init__(self, store: Store, key: bytes | None = None) -> None:
        self._store = store
        self._key: bytes | None = None
        if key is not None:
            self.unlock(key)

    @property
    def store(self) -> Store:
        return self._store

    @property
    def name(self) -> str:
        return self._store.name

    @property
    def locked(self) -> bool:
        return self._key is None

    def unlock(self, key: bytes) -> None:
        """Supply the secret key, moving the keyring to the unlocked state."""
        check_key(key)
        self._key = bytes(key)
        logger.debug("Keyring %s unlocked", self.name)

    def lock(self) -> None:
        """Drop the secret key."""
        self._key = None
        logger.debug("Keyring %s locked", self.name)

    def _require_key(self) -> bytes:
        if self._key is None:
            raise LockedError()
        return self._key

    def get(self, id: str) -> Item | None:
        """Return the decrypted item stored under *id*, or ``None``."""
        key = self._require_key()
        blob = self._store.get(id)
        if blob is None:
            return None
        return decode_item(blob, key, id)

    def set(self, item: Item) -> None:
        """Seal *item* and store it under ``item.id``.

        Size limits are checked before the store is called, so an oversized
        item leaves the store unchanged.
        """
        key = self._require_key()
        self._store.set(item.id, encode_item(item, key))

    def delete(self, id: str) -> bool:
        return self._store.delete(id)

    def exists(self, id: str) -> bool:
        return self._store.exists(id)

    def ids(self, options: ListOptions | None = None) -> list[str]:
        return self._store.ids(options)

    def documents(self, options: ListOptions | None = None) -> list[Document]:
        """Return documents whose data is the decrypted item payload.

        With ``no_data`` only ids are listed and the keyring may be locked.
        """
        opts = options or ListOptions()
        if opts.no_data:
            return collect_documents(self._store.list_ids(), self._store.get, opts)
        key = self._require_key()

        def fetch(path: str) -> bytes | None:
            blob = self._store.get(path)
            if blob is None:
                return None
            return decode_item(blob, key, path).data

        return collect_documents(self._store.list_ids(), fetch, opts)

    def items(self, prefix: str = "") -> list[Item]:
        """Return decrypted items with ids starting with *prefix*, sorted by id."""
        key = self._require_key()
        out: list[Item] = []
        for item_id in self._store.ids(ListOptions(prefix=prefix)):
            blob = self._store.get(item_id)
            # Deleted between listing and read
            if blob is None:
                continue
            out.append(decode_item(blob, key, item_id))
        return out

    def reset(self) -> None:
        """Delete every item in the store's namespace."""
        self._store.reset()

"""Linux Secret Service backend (GNOME Keyring, KWallet) over D-Bus.

Items are stored in the default collection with the attributes
``{"service": <service>, "username": <id>}`` and the label
``Password for '<id>' on '<service>'``, the layout written by
python-keyring, so secrets it stores stay readable.

Enumeration recovers ids from item labels with ``parse_label``. This ties
listing to the label format above; entries whose labels do not parse are
skipped rather than failing the listing.
"""

from __future__ import annotations

import logging
import shutil
from contextlib import closing, contextmanager
from typing import Any, Iterator

import secretstorage
from jeepney.wrappers import DBusErrorResponse
from secretstorage.exceptions import ItemNotFoundException, SecretStorageException

from sealed_keyring.errors import BackendError
from sealed_keyring.stores.store import Store

logger = logging.getLogger(__name__)

LABEL_TEMPLATE = "Password for '{id}' on '{service}'"
_CONTENT_TYPE = "application/octet-stream"


def parse_label(label: str) -> str | None:
    """Recover an item id from a Secret Service label.

    Returns the text between the first pair of single quotes, e.g.
    ``"Password for 'alice' on 'svc'"`` gives ``"alice"``. Returns ``None``
    when the label has no complete quoted section or the quoted section is
    empty. Ids that themselves contain a single quote cannot round-trip.
    """
    parts = label.split("'")
    if len(parts) < 3 or not parts[1]:
        return None
    return parts[1]


def format_label(id: str, service: str) -> str:
    return LABEL_TEMPLATE.format(id=id, service=service)


class SecretServiceStore(Store):
    """Stores sealed items in the Secret Service default collection.

    A D-Bus connection is opened per call and closed when the call returns.

    Parameters
    ----------
    service:
        Namespace for every item this store reads or writes.
    """

    name = "secret-service"

    def __init__(self, service: str) -> None:
        self._service = service

    @property
    def service(self) -> str:
        return self._service

    @contextmanager
    def _collection(self) -> Iterator[Any]:
        """Yield the unlocked default collection, mapping D-Bus errors.

        secretstorage converts only a few D-Bus errors into its own
        exceptions; the rest (AccessDenied, IsLocked, NoSession) arrive as
        jeepney's ``DBusErrorResponse``.
        """
        try:
            with closing(secretstorage.dbus_init()) as connection:
                collection = secretstorage.get_default_collection(connection)
                if collection.is_locked():
                    dismissed = collection.unlock()
                    if dismissed or collection.is_locked():
                        raise BackendError("collection unlock was dismissed", backend=self.name)
                yield collection
        except (SecretStorageException, DBusErrorResponse) as exc:
            raise BackendError(str(exc) or type(exc).__name__, backend=self.name) from exc

    def _attributes(self, id: str) -> dict[str, str]:
        return {"service": self._service, "username": id}

    def _find(self, collection: Any, id: str) -> Any | None:
        for item in collection.search_items(self._attributes(id)):
            return item
        return None

    def get(self, id: str) -> bytes | None:
        with self._collection() as collection:
            item = self._find(collection, id)
            if item is None:
                return None
            try:
                return bytes(item.get_secret())
            except ItemNotFoundException:
                # Deleted after the search returned it
                return None

    def set(self, id: str, data: bytes) -> None:
        with self._collection() as collection:
            collection.create_item(
                format_label(id, self._service),
                self._attributes(id),
                bytes(data),
                replace=True,
                content_type=_CONTENT_TYPE,
            )

    def delete(self, id: str) -> bool:
        with self._collection() as collection:
            item = self._find(collection, id)
            if item is None:
                return False
            try:
                item.delete()
            except ItemNotFoundException:
                return False
            return True

    def exists(self, id: str) -> bool:
        return bool(self.get(id))

    def list_ids(self) -> list[str]:
        ids: list[str] = []
        with self._collection() as collection:
            for item in collection.search_items({"service": self._service}):
                label = item.get_label()
                item_id = parse_label(label)
                if item_id is None:
                    logger.debug("Skipping unparseable label %r", label)
                    continue
                ids.append(item_id)
        return ids

    def reset(self) -> None:
        with self._collection() as collection:
            items = list(collection.search_items({"service": self._service}))
            logger.info("Resetting %s store for %s (%d items)", self.name, self._service, len(items))
            for item in items:
                try:
                    item.delete()
                except ItemNotFoundException:
                    continue


def check_system() -> None:
    """Raise ``BackendError`` if dbus and a Secret Service are unavailable."""
    path = shutil.which("dbus-launch")
    if not path:
        raise BackendError("no dbus", backend=SecretServiceStore.name)
    # A missing item still proves the service answered.
    SecretServiceStore("sealed-keyring").get("test")

"""Abstract interface for raw byte storage keyed by string id."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from sealed_keyring.errors import BackendError
from sealed_keyring.listing import Document, ListOptions, collect_documents, normalize_ids

logger = logging.getLogger(__name__)


class Store(ABC):
    """Abstract store. Implementations wrap one platform credential store.

    Every implementation is scoped to a service namespace and presents the
    same semantics: a missing id is ``None`` from ``get`` and ``False`` from
    ``delete``/``exists``; any other native failure raises ``BackendError``.
    Values are opaque bytes (already-sealed item envelopes).
    """

    name: str = "store"

    @abstractmethod
    def get(self, id: str) -> bytes | None:
        """Return the bytes stored under *id*, or ``None`` if absent."""

    @abstractmethod
    def set(self, id: str, data: bytes) -> None:
        """Store *data* under *id*, overwriting any existing value."""

    @abstractmethod
    def delete(self, id: str) -> bool:
        """Delete *id*. Returns ``False`` if it did not exist."""

    @abstractmethod
    def exists(self, id: str) -> bool:
        """Return ``True`` if *id* is stored."""

    @abstractmethod
    def list_ids(self) -> list[str]:
        """Return every id in the namespace, in native order."""

    def ids(self, options: ListOptions | None = None) -> list[str]:
        """Return ids matching ``options.prefix``, sorted ascending."""
        opts = options or ListOptions()
        return normalize_ids(self.list_ids(), opts.prefix)

    def documents(self, options: ListOptions | None = None) -> list[Document]:
        """Return documents for matching ids with their raw stored bytes."""
        return collect_documents(self.list_ids(), self.get, options)

    def reset(self) -> None:
        """Delete every item in the namespace.

        Deletion is not transactional: the first failure stops the reset and
        is raised as ``BackendError``; items already deleted stay deleted.
        """
        ids = self.list_ids()
        logger.info("Resetting %s store (%d items)", self.name, len(ids))
        for item_id in ids:
            try:
                self.delete(item_id)
            except BackendError:
                raise
            except Exception as exc:
                raise BackendError(f"reset failed deleting {item_id!r}", backend=self.name) from exc

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"

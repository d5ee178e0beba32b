"""JSON file backend for secret storage.

Used where no OS credential store is available (containers, CI). Values
arrive already sealed by the keyring layer, so the file holds only
base64-encoded envelopes keyed by id. Writes go through a temporary file
and an atomic rename, and the file is created with mode 0600.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import os
import pathlib
import threading

from sealed_keyring.errors import BackendError
from sealed_keyring.stores.store import Store

logger = logging.getLogger(__name__)


class FileStore(Store):
    """Stores sealed items in a single JSON file on disk.

    Parameters
    ----------
    file_path:
        Path to the store file. Created on first write.
    """

    name = "fs"

    def __init__(self, file_path: pathlib.Path) -> None:
        self._path = pathlib.Path(file_path)
        self._lock = threading.Lock()

    @property
    def path(self) -> pathlib.Path:
        return self._path

    def _read_store(self) -> dict[str, str]:
        """Read the store file. Returns empty dict if missing."""
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise BackendError(f"failed to read {self._path}", backend=self.name) from exc
        if not isinstance(data, dict):
            raise BackendError(f"{self._path} is not a keyring file", backend=self.name)
        return data

    def _write_store(self, data: dict[str, str]) -> None:
        """Write the store atomically with owner-only permissions."""
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, sort_keys=True)
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise BackendError(f"failed to write {self._path}", backend=self.name) from exc

    def get(self, id: str) -> bytes | None:
        with self._lock:
            encoded = self._read_store().get(id)
        if encoded is None:
            return None
        try:
            return base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise BackendError(f"corrupt entry for {id!r}", backend=self.name) from exc

    def set(self, id: str, data: bytes) -> None:
        with self._lock:
            store = self._read_store()
            store[id] = base64.b64encode(data).decode("ascii")
            self._write_store(store)

    def delete(self, id: str) -> bool:
        with self._lock:
            store = self._read_store()
            if id not in store:
                return False
            del store[id]
            self._write_store(store)
            return True

    def exists(self, id: str) -> bool:
        with self._lock:
            return id in self._read_store()

    def list_ids(self) -> list[str]:
        with self._lock:
            return list(self._read_store())

    def reset(self) -> None:
        with self._lock:
            logger.info("Removing keyring file %s", self._path)
            try:
                self._path.unlink(missing_ok=True)
            except OSError as exc:
                raise BackendError(f"failed to remove {self._path}", backend=self.name) from exc

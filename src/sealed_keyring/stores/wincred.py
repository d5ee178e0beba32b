"""Windows Credential Manager backend via pywin32.

Each item is a generic credential whose target name is
``<service>/<id>``. Enumeration lists every generic credential for the
user and keeps those carrying the service prefix.
"""

from __future__ import annotations

import logging
from typing import Any

from sealed_keyring.errors import BackendError
from sealed_keyring.stores.store import Store

logger = logging.getLogger(__name__)

# winerror.ERROR_NOT_FOUND
_ERROR_NOT_FOUND = 1168


def _win32() -> tuple[Any, type[Exception]]:
    """Import ``win32cred`` and the ``pywintypes.error`` class."""
    import pywintypes
    import win32cred

    return win32cred, pywintypes.error


class WinCredStore(Store):
    """Stores sealed items as Windows generic credentials.

    Parameters
    ----------
    service:
        Namespace prefix for credential target names.
    """

    name = "wincred"

    def __init__(self, service: str) -> None:
        self._service = service
        try:
            self._api, self._error = _win32()
        except ImportError as exc:
            raise BackendError("pywin32 is required for Credential Manager access", backend=self.name) from exc

    @property
    def prefix(self) -> str:
        return self._service + "/"

    def _target(self, id: str) -> str:
        return self.prefix + id

    def _read(self, id: str) -> dict[str, Any] | None:
        """Read the credential for *id*, or ``None`` if it does not exist."""
        try:
            return self._api.CredRead(
                TargetName=self._target(id),
                Type=self._api.CRED_TYPE_GENERIC,
            )
        except self._error as exc:
            if getattr(exc, "winerror", None) == _ERROR_NOT_FOUND:
                return None
            raise BackendError(f"CredRead failed for {id!r}: {exc}", backend=self.name) from exc

    def get(self, id: str) -> bytes | None:
        cred = self._read(id)
        if cred is None:
            return None
        return bytes(cred["CredentialBlob"])

    def set(self, id: str, data: bytes) -> None:
        credential = {
            "Type": self._api.CRED_TYPE_GENERIC,
            "TargetName": self._target(id),
            "CredentialBlob": bytes(data),
            "Persist": self._api.CRED_PERSIST_LOCAL_MACHINE,
        }
        try:
            self._api.CredWrite(credential, 0)
        except self._error as exc:
            raise BackendError(f"CredWrite failed for {id!r}: {exc}", backend=self.name) from exc

    def delete(self, id: str) -> bool:
        if self._read(id) is None:
            return False
        try:
            self._api.CredDelete(
                TargetName=self._target(id),
                Type=self._api.CRED_TYPE_GENERIC,
            )
        except self._error as exc:
            if getattr(exc, "winerror", None) == _ERROR_NOT_FOUND:
                return False
            raise BackendError(f"CredDelete failed for {id!r}: {exc}", backend=self.name) from exc
        return True

    def exists(self, id: str) -> bool:
        return self._read(id) is not None

    def list_ids(self) -> list[str]:
        try:
            creds = self._api.CredEnumerate(None, 0)
        except self._error as exc:
            # CredEnumerate reports an empty vault as ERROR_NOT_FOUND
            if getattr(exc, "winerror", None) == _ERROR_NOT_FOUND:
                return []
            raise BackendError(f"CredEnumerate failed: {exc}", backend=self.name) from exc
        prefix = self.prefix
        return [
            cred["TargetName"][len(prefix):]
            for cred in creds or ()
            if cred.get("TargetName", "").startswith(prefix) and len(cred["TargetName"]) > len(prefix)
        ]


def check_system() -> None:
    """Raise ``BackendError`` if Credential Manager is unavailable."""
    try:
        _win32()
    except ImportError as exc:
        raise BackendError("pywin32 is not installed", backend=WinCredStore.name) from exc

"""Error taxonomy shared by the keyring layer and every store backend.

There is no "not found" error: stores report a missing id as ``None``
from ``get`` and ``False`` from ``delete``/``exists``.
"""

from __future__ import annotations


class KeyringError(Exception):
    """Base class for all sealed-keyring errors."""


class LockedError(KeyringError):
    """The keyring has no secret key, so items cannot be read or written."""

    def __init__(self, message: str = "keyring is locked") -> None:
        super().__init__(message)


class ValueTooLargeError(KeyringError, ValueError):
    """An item field or its sealed envelope exceeds a size ceiling."""


class DecryptionError(KeyringError):
    """Stored bytes failed to authenticate or decode under the supplied key."""


class BackendError(KeyringError):
    """A native credential store call failed.

    Parameters
    ----------
    message:
        Human-readable description of the failed operation.
    backend:
        Name of the store that raised (``Store.name``).
    """

    def __init__(self, message: str, backend: str | None = None) -> None:
        super().__init__(message)
        self.backend = backend

    def __str__(self) -> str:
        message = super().__str__()
        if self.backend:
            return f"{self.backend}: {message}"
        return message

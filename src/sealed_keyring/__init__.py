"""sealed-keyring -- encrypted secrets over platform credential stores."""

from pathlib import Path as _Path

from sealed_keyring.errors import (
    BackendError,
    DecryptionError,
    KeyringError,
    LockedError,
    ValueTooLargeError,
)
from sealed_keyring.item import Item, decode_item, encode_item, generate_secret_key
from sealed_keyring.keyring import Keyring
from sealed_keyring.listing import Document, ListOptions


def _read_version() -> str:
    """Read version from the repo-level VERSION file (single source of truth)."""
    for parent in _Path(__file__).resolve().parents:
        candidate = parent / "VERSION"
        if candidate.is_file():
            return candidate.read_text().strip()
    return "0.0.0"

__version__ = _read_version()

__all__ = [
    "BackendError",
    "DecryptionError",
    "Document",
    "Item",
    "Keyring",
    "KeyringError",
    "ListOptions",
    "LockedError",
    "ValueTooLargeError",
    "decode_item",
    "encode_item",
    "generate_secret_key",
]

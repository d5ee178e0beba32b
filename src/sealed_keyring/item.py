"""Item envelope: the plaintext secret record and its sealed representation.

An item is framed as::

    0x01 | len(id) | id | len(type) | type | data

and sealed with AES-256-GCM under the keyring's secret key. The 12-byte
nonce is prepended to the ciphertext and the item id is bound as associated
data, so a blob copied under another id will not authenticate.

Size ceilings are enforced before encryption. The sealed envelope is capped
at 2560 bytes (the Windows credential blob limit) on every backend so an item
that round-trips on one platform round-trips on all of them.
"""

from __future__ import annotations

import dataclasses
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from sealed_keyring.errors import DecryptionError, ValueTooLargeError

MAX_ID = 254
MAX_TYPE = 32
MAX_DATA = 2048
# Max for a Windows credential blob
MAX_ENVELOPE = 5 * 512

KEY_SIZE = 32
_NONCE_SIZE = 12
_FORMAT_VERSION = 1


@dataclasses.dataclass(frozen=True)
class Item:
    """A plaintext secret record.

    Attributes:
        id: Identifier, unique within a store namespace.
        type: Short caller-defined type tag (e.g. ``"password"``).
        data: Secret payload.
    """

    id: str
    type: str
    data: bytes


def generate_secret_key() -> bytes:
    """Return a fresh random 32-byte secret key."""
    return os.urandom(KEY_SIZE)


def check_key(key: bytes) -> None:
    """Raise ``ValueError`` unless *key* is a 32-byte secret key."""
    if not isinstance(key, (bytes, bytearray)) or len(key) != KEY_SIZE:
        raise ValueError(f"secret key must be {KEY_SIZE} bytes")


def check_item(item: Item) -> None:
    """Validate *item* against the field ceilings without encrypting it."""
    if not item.id:
        raise ValueError("invalid id")
    if len(item.id.encode("utf-8")) > MAX_ID:
        raise ValueTooLargeError(f"item id exceeds {MAX_ID} bytes")
    if len(item.type.encode("utf-8")) > MAX_TYPE:
        raise ValueTooLargeError(f"item type exceeds {MAX_TYPE} bytes")
    if len(item.data) > MAX_DATA:
        raise ValueTooLargeError(f"item data exceeds {MAX_DATA} bytes")


def _frame(item: Item) -> bytes:
    id_bytes = item.id.encode("utf-8")
    type_bytes = item.type.encode("utf-8")
    return b"".join([
        bytes([_FORMAT_VERSION, len(id_bytes)]),
        id_bytes,
        bytes([len(type_bytes)]),
        type_bytes,
        bytes(item.data),
    ])


def _unframe(plaintext: bytes) -> Item:
    try:
        if plaintext[0] != _FORMAT_VERSION:
            raise DecryptionError(f"unsupported item format {plaintext[0]}")
        id_end = 2 + plaintext[1]
        type_end = id_end + 1 + plaintext[id_end]
        if type_end > len(plaintext):
            raise DecryptionError("truncated item")
        item_id = plaintext[2:id_end].decode("utf-8")
        item_type = plaintext[id_end + 1:type_end].decode("utf-8")
    except (IndexError, UnicodeDecodeError) as exc:
        raise DecryptionError("malformed item") from exc
    return Item(id=item_id, type=item_type, data=plaintext[type_end:])


def encode_item(item: Item, key: bytes) -> bytes:
    """Seal *item* under *key*.

    Raises
    ------
    ValueTooLargeError
        If id, type or data exceed their ceilings, or the envelope exceeds
        ``MAX_ENVELOPE`` bytes.
    ValueError
        If the id is empty or the key is not 32 bytes.
    """
    check_key(key)
    check_item(item)
    nonce = os.urandom(_NONCE_SIZE)
    sealed = nonce + AESGCM(bytes(key)).encrypt(nonce, _frame(item), item.id.encode("utf-8"))
    if len(sealed) > MAX_ENVELOPE:
        raise ValueTooLargeError(f"encrypted item exceeds {MAX_ENVELOPE} bytes")
    return sealed


def decode_item(blob: bytes, key: bytes, expected_id: str) -> Item:
    """Open a sealed envelope stored under *expected_id*.

    Raises
    ------
    DecryptionError
        On a wrong key, a wrong id, truncation or a malformed frame.
    """
    check_key(key)
    if len(blob) <= _NONCE_SIZE:
        raise DecryptionError("encrypted item is truncated")
    nonce, ciphertext = blob[:_NONCE_SIZE], blob[_NONCE_SIZE:]
    try:
        plaintext = AESGCM(bytes(key)).decrypt(nonce, ciphertext, expected_id.encode("utf-8"))
    except InvalidTag as exc:
        raise DecryptionError(f"failed to decrypt item {expected_id!r}") from exc
    item = _unframe(plaintext)
    if item.id != expected_id:
        raise DecryptionError(f"item id mismatch: expected {expected_id!r}, got {item.id!r}")
    return item

"""Store backends.

Platform adapters (``secret_service``, ``wincred``, ``keychain``) are only
imported on demand by the factory, since their native libraries exist on
one platform each.
"""

from sealed_keyring.stores.factory import check_system, create_store, new_system
from sealed_keyring.stores.file import FileStore
from sealed_keyring.stores.memory import MemStore
from sealed_keyring.stores.store import Store

__all__ = [
    "FileStore",
    "MemStore",
    "Store",
    "check_system",
    "create_store",
    "new_system",
]

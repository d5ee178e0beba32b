"""Store selection by platform and configuration."""

from __future__ import annotations

import logging
import pathlib
import sys
from typing import TYPE_CHECKING

from sealed_keyring.errors import BackendError
from sealed_keyring.stores.file import FileStore
from sealed_keyring.stores.memory import MemStore
from sealed_keyring.stores.store import Store

if TYPE_CHECKING:
    from sealed_keyring.config import Settings

logger = logging.getLogger(__name__)


def new_system(service: str) -> Store:
    """Create the platform-appropriate system store.

    Returns ``SecretServiceStore`` on Linux, ``WinCredStore`` on Windows and
    ``KeychainStore`` on macOS. Other platforms raise ``BackendError``.
    """
    if sys.platform.startswith("linux"):
        from sealed_keyring.stores.secret_service import SecretServiceStore

        return SecretServiceStore(service)
    if sys.platform == "win32":
        from sealed_keyring.stores.wincred import WinCredStore

        return WinCredStore(service)
    if sys.platform == "darwin":
        from sealed_keyring.stores.keychain import KeychainStore

        return KeychainStore(service)
    raise BackendError(f"no system keyring for platform {sys.platform!r}")


def check_system() -> None:
    """Probe whether the system store can be used.

    Returns ``None`` when the platform store answers (whether or not it
    holds anything) and raises ``BackendError`` when it is unavailable.
    """
    if sys.platform.startswith("linux"):
        from sealed_keyring.stores import secret_service

        secret_service.check_system()
    elif sys.platform == "win32":
        from sealed_keyring.stores import wincred

        wincred.check_system()
    elif sys.platform == "darwin":
        from sealed_keyring.stores import keychain

        keychain.check_system()
    else:
        raise BackendError(f"no system keyring for platform {sys.platform!r}")


def create_store(settings: Settings) -> Store:
    """Build the store named by ``settings.keyring.backend``."""
    backend = settings.keyring.backend
    service = settings.keyring.service
    if backend == "mem":
        store: Store = MemStore()
    elif backend == "file":
        store = FileStore(pathlib.Path(settings.file.directory) / f"{service}.keyring.json")
    else:
        store = new_system(service)
    logger.debug("Using %s store for service %s", store.name, service)
    return store

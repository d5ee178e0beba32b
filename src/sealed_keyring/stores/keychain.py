"""macOS Keychain backend.

Wraps the macOS ``security`` CLI tool to store sealed items as generic
passwords in the user's login keychain. The CLI only carries text, so
envelopes are base64-encoded on the way in and decoded on the way out.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
import shutil
import subprocess

from sealed_keyring.errors import BackendError
from sealed_keyring.stores.store import Store

logger = logging.getLogger(__name__)

# Exit code when a duplicate item already exists in Keychain
_ERR_DUPLICATE_ITEM = 45
# Exit code when an item is not found in Keychain
_ERR_ITEM_NOT_FOUND = 44

_ACCOUNT_RE = re.compile(r'"acct"<blob>="(.+?)"')


def parse_dump(output: str, service: str) -> list[str]:
    """Return the accounts of generic passwords for *service* in a
    ``security dump-keychain`` listing."""
    accounts: list[str] = []
    service_attr = f'"svce"<blob>="{service}"'
    for block in re.split(r"^\s*class:", output, flags=re.MULTILINE):
        if service_attr not in block:
            continue
        match = _ACCOUNT_RE.search(block)
        if match:
            accounts.append(match.group(1))
    return accounts


class KeychainStore(Store):
    """Stores sealed items in macOS Keychain via the ``security`` CLI.

    Parameters
    ----------
    service:
        The service name used to namespace items in Keychain.
    """

    name = "keychain"

    def __init__(self, service: str) -> None:
        self._service = service

    def _run(self, *args: str) -> subprocess.CompletedProcess[bytes]:
        """Run a ``security`` subcommand and return the completed process."""
        try:
            return subprocess.run(["security", *args], capture_output=True, check=False)
        except OSError as exc:
            raise BackendError(f"failed to run security: {exc}", backend=self.name) from exc

    def _fail(self, action: str, proc: subprocess.CompletedProcess[bytes]) -> BackendError:
        stderr = proc.stderr.decode("utf-8", errors="replace").strip()
        return BackendError(f"{action} failed (exit {proc.returncode}): {stderr}", backend=self.name)

    def get(self, id: str) -> bytes | None:
        proc = self._run("find-generic-password", "-s", self._service, "-a", id, "-w")
        if proc.returncode == _ERR_ITEM_NOT_FOUND:
            return None
        if proc.returncode != 0:
            raise self._fail("find-generic-password", proc)
        try:
            return base64.b64decode(proc.stdout.strip(), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise BackendError(f"item {id!r} is not a sealed item", backend=self.name) from exc

    def set(self, id: str, data: bytes) -> None:
        value = base64.b64encode(data).decode("ascii")
        proc = self._run("add-generic-password", "-s", self._service, "-a", id, "-w", value, "-U")
        if proc.returncode == _ERR_DUPLICATE_ITEM:
            # Delete existing and re-add
            deleted = self._run("delete-generic-password", "-s", self._service, "-a", id)
            if deleted.returncode not in (0, _ERR_ITEM_NOT_FOUND):
                raise self._fail("delete-generic-password", deleted)
            proc = self._run("add-generic-password", "-s", self._service, "-a", id, "-w", value)
        if proc.returncode != 0:
            raise self._fail("add-generic-password", proc)

    def delete(self, id: str) -> bool:
        proc = self._run("delete-generic-password", "-s", self._service, "-a", id)
        if proc.returncode == _ERR_ITEM_NOT_FOUND:
            return False
        if proc.returncode != 0:
            raise self._fail("delete-generic-password", proc)
        return True

    def exists(self, id: str) -> bool:
        proc = self._run("find-generic-password", "-s", self._service, "-a", id)
        if proc.returncode == _ERR_ITEM_NOT_FOUND:
            return False
        if proc.returncode != 0:
            raise self._fail("find-generic-password", proc)
        return True

    def list_ids(self) -> list[str]:
        proc = self._run("dump-keychain")
        if proc.returncode != 0:
            raise self._fail("dump-keychain", proc)
        return parse_dump(proc.stdout.decode("utf-8", errors="replace"), self._service)


def check_system() -> None:
    """Raise ``BackendError`` if the ``security`` CLI is unavailable."""
    if not shutil.which("security"):
        raise BackendError("security CLI not found", backend=KeychainStore.name)

"""Shared test fixtures for sealed-keyring tests."""

import pathlib

import pytest

from sealed_keyring.item import generate_secret_key
from sealed_keyring.stores.memory import MemStore

REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]


@pytest.fixture
def repo_root() -> pathlib.Path:
    return REPO_ROOT


@pytest.fixture
def secret_key() -> bytes:
    return generate_secret_key()


@pytest.fixture
def mem_store() -> MemStore:
    return MemStore()

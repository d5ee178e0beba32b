"""Configuration loader for sealed-keyring.

Loads settings from a YAML file with built-in defaults. Supports environment
variable overrides using the SEALED_KEYRING_ prefix with double-underscore
nesting (e.g., SEALED_KEYRING_KEYRING__BACKEND=mem).
"""

from __future__ import annotations

import os
import pathlib
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Config sub-models
# ---------------------------------------------------------------------------

class KeyringConfig(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    service: str = "sealed-keyring"
    backend: Literal["system", "mem", "file"] = "system"


class FileStoreConfig(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    directory: str = "./data"


class LoggingConfig(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    level: str = "INFO"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseModel):
    keyring: KeyringConfig = Field(default_factory=KeyringConfig)
    file: FileStoreConfig = Field(default_factory=FileStoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# ---------------------------------------------------------------------------
# Deep merge helper
# ---------------------------------------------------------------------------

def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge *override* into *base*, returning a new dict."""
    merged = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# ---------------------------------------------------------------------------
# Environment variable overrides
# ---------------------------------------------------------------------------

_ENV_PREFIX = "SEALED_KEYRING_"


def _collect_env_overrides() -> dict[str, Any]:
    """Collect SEALED_KEYRING_* env vars and build a nested dict.

    Double-underscore separates nesting levels. Values stay strings;
    pydantic validates them against the model fields.
    Example: SEALED_KEYRING_KEYRING__SERVICE=work
    becomes  {"keyring": {"service": "work"}}
    """
    overrides: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(_ENV_PREFIX):
            continue
        parts = key[len(_ENV_PREFIX):].lower().split("__")
        current = overrides
        for part in parts[:-1]:
            current = current.setdefault(part, {})
        current[parts[-1]] = value
    return overrides


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

_BUILTIN_DEFAULTS_PATH = pathlib.Path(__file__).resolve().parents[3] / "config" / "keyring_defaults.yaml"


def load_settings(
    config_path: pathlib.Path | None = None,
) -> Settings:
    """Load settings with layered precedence: defaults < file < env vars.

    Parameters
    ----------
    config_path:
        Path to a YAML config file. If ``None`` or the file does not exist,
        built-in defaults are used.
    """
    base: dict[str, Any] = {}

    path = config_path if config_path is not None else _BUILTIN_DEFAULTS_PATH
    if path.exists():
        with open(path) as fh:
            file_data = yaml.safe_load(fh)
        if isinstance(file_data, dict):
            base = _deep_merge(base, file_data)

    env_overrides = _collect_env_overrides()
    if env_overrides:
        base = _deep_merge(base, env_overrides)

    return Settings(**base)

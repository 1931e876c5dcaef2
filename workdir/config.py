"""Configuration loading for shard processes.

Builds the identity fields of a shard (work directory, binary name, binary
hash, shard index) from a local YAML file overlaid with environment
variables. The path layer in :mod:`workdir.layout` never reads configuration
itself; it is handed an :class:`Environment` or explicit values.
"""

from __future__ import annotations

import hashlib
import os
import shlex
from dataclasses import dataclass
from pathlib import Path

import yaml

from .logging_config import log

DEFAULT_CONFIG_PATH = Path("workdir.yaml")

_ENV_OVERRIDES = {
    "FUZZ_WORKDIR": "workdir",
    "FUZZ_BINARY": "binary",
    "FUZZ_BINARY_NAME": "binary_name",
    "FUZZ_BINARY_HASH": "binary_hash",
    "FUZZ_SHARD_INDEX": "my_shard_index",
    "FUZZ_TOTAL_SHARDS": "total_shards",
}


class ConfigError(Exception):
    """Raised when the shard configuration is incomplete or inconsistent."""


@dataclass(frozen=True)
class Environment:
    """Resolved configuration of one shard process."""

    workdir: str
    binary_name: str
    binary_hash: str
    my_shard_index: int = 0
    total_shards: int | None = None
    binary: str | None = None


def set_config(path: Path = DEFAULT_CONFIG_PATH) -> dict:
    """Build configuration from a local YAML file overlaid with environment variables.

    Args:
        path: Location of the optional YAML configuration file.

    Returns:
        dict: Configuration map derived from the file and environment variables.
    """
    cfg: dict = {}

    try:
        if path.exists():
            with path.open("r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
            if not isinstance(data, dict):
                log.warning("Config file %s does not contain a mapping", path)
            else:
                cfg.update(data)
    except (OSError, yaml.YAMLError) as exc:
        log.warning("Failed to load config from %s: %s", path, exc)

    # Environment variables override values from the file
    for env_name, key in _ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            cfg[key] = value

    log.info("Configuration loaded: %s", cfg)
    return cfg


def load_environment(cfg: dict) -> Environment:
    """Resolve a configuration map into an :class:`Environment`.

    Args:
        cfg: Mapping produced by :func:`set_config` or built by the caller.

    Returns:
        Environment: Validated shard configuration.

    Raises:
        ConfigError: If required values are missing or malformed.
    """
    workdir = cfg.get("workdir")
    if not workdir:
        raise ConfigError("'workdir' must be configured")

    binary = cfg.get("binary") or None
    binary_name = cfg.get("binary_name")
    if binary_name is not None:
        binary_name = _as_text(binary_name, "binary_name")
    if not binary_name:
        if not binary:
            raise ConfigError("Either 'binary_name' or 'binary' must be configured")
        binary_name = os.path.basename(_binary_path(binary))

    binary_hash = cfg.get("binary_hash")
    if binary_hash is not None:
        binary_hash = _as_text(binary_hash, "binary_hash")
    if not binary_hash:
        if not binary:
            raise ConfigError("Either 'binary_hash' or 'binary' must be configured")
        binary_hash = compute_binary_hash(_binary_path(binary))

    my_shard_index = _as_index(cfg.get("my_shard_index", 0), "my_shard_index")
    total_shards = cfg.get("total_shards")
    if total_shards is not None:
        total_shards = _as_index(total_shards, "total_shards")
        if my_shard_index >= total_shards:
            raise ConfigError(
                f"my_shard_index {my_shard_index} must be less than total_shards {total_shards}"
            )

    return Environment(
        workdir=str(workdir),
        binary_name=binary_name,
        binary_hash=binary_hash,
        my_shard_index=my_shard_index,
        total_shards=total_shards,
        binary=binary,
    )


def compute_binary_hash(binary_path: str) -> str:
    """Return the SHA-1 hex digest of a binary's contents.

    Args:
        binary_path: Path to the fuzz target binary.

    Returns:
        str: Hex digest identifying this build.

    Raises:
        ConfigError: If the binary cannot be read.
    """
    digest = hashlib.sha1()
    try:
        with open(binary_path, "rb") as fh:
            for chunk in iter(lambda: fh.read(1 << 20), b""):
                digest.update(chunk)
    except OSError as exc:
        raise ConfigError(f"Cannot hash binary {binary_path}: {exc}") from exc
    return digest.hexdigest()


def _binary_path(binary: str) -> str:
    """Return the executable path of a binary command line (its first word)."""
    words = shlex.split(binary)
    if not words:
        raise ConfigError("'binary' is empty")
    return words[0]


def _as_index(value, name: str) -> int:
    """Return a configured non-negative integer.

    Accepts an ``int`` (not ``bool``) or a string of ASCII digits; floats and
    other values are rejected rather than truncated.
    """
    if isinstance(value, bool):
        raise ConfigError(f"'{name}' must be an integer, got {value!r}")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str) and value.isascii() and value.isdigit():
        number = int(value)
    else:
        raise ConfigError(f"'{name}' must be an integer, got {value!r}")
    if number < 0:
        raise ConfigError(f"'{name}' must be non-negative, got {number}")
    return number


def _as_text(value, name: str) -> str:
    """Return a configured string value; numbers from unquoted YAML are rejected."""
    if not isinstance(value, str):
        raise ConfigError(f"'{name}' must be a string, got {value!r}")
    return value

"""Caches for analysis answers and the remote cache configuration."""

from __future__ import annotations

import enum
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import platformdirs

from clusterlens.config import Config
from clusterlens.util import file_exists

_APP_NAME = "clusterlens"


class CacheType(str, enum.Enum):
    """Where cached answers are kept."""

    AZURE = "azure"
    S3 = "s3"
    FILE = "file"


class CacheError(Exception):
    """Raised when the cache configuration cannot be read or changed."""


@dataclass
class CacheProvider:
    """Settings of a remote cache."""

    bucket_name: str = ""
    region: str = ""
    storage_account: str = ""
    container_name: str = ""

    _KEYS = (
        ("bucket_name", "bucketname"),
        ("region", "region"),
        ("storage_account", "storageaccount"),
        ("container_name", "container"),
    )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> CacheProvider:
        """Build a provider from its stored form; unknown keys are ignored."""
        if mapping is None:
            return cls()
        if not isinstance(mapping, Mapping):
            raise ValueError("cache settings must be a mapping")
        values = {
            attribute: str(mapping.get(key) or "") for attribute, key in cls._KEYS
        }
        return cls(**values)

    def to_dict(self) -> dict[str, str]:
        """Return the stored form, leaving out empty settings."""
        return {
            key: getattr(self, attribute)
            for attribute, key in self._KEYS
            if getattr(self, attribute)
        }


class FileBasedCache:
    """Keeps cached answers as files in a local directory."""

    def __init__(self, no_cache: bool = False, directory: str | os.PathLike[str] | None = None):
        self.no_cache = no_cache
        self.directory = (
            Path(directory) if directory is not None else Path(platformdirs.user_cache_dir(_APP_NAME))
        )

    def _path(self, key: str) -> Path:
        path = self.directory / key
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def is_cache_disabled(self) -> bool:
        """Return whether caching was switched off."""
        return self.no_cache

    def list(self) -> list[str]:
        """Return the cached keys, sorted by name."""
        return sorted(os.listdir(self.directory))

    def exists(self, key: str) -> bool:
        """Return whether ``key`` is cached; errors are reported and count as absent."""
        try:
            return file_exists(self._path(key))
        except OSError as error:
            print(f"warning: error while testing if cache key exists: {error}", file=sys.stderr)
            return False

    def load(self, key: str) -> str:
        """Return the data cached under ``key``."""
        return self._path(key).read_text(encoding="utf-8")

    def store(self, key: str, data: str) -> None:
        """Cache ``data`` under ``key``, readable by the owner only."""
        path = self._path(key)
        descriptor = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(descriptor, "w", encoding="utf-8") as handle:
            handle.write(data)


def new_cache(
    no_cache: bool,
    remote_cache: CacheType | str,
    directory: str | os.PathLike[str] | None = None,
) -> FileBasedCache:
    """Return the cache of the given type; unknown types fall back to files."""
    try:
        kind = CacheType(remote_cache)
    except ValueError:
        kind = CacheType.FILE
    if kind is not CacheType.FILE:
        raise CacheError(f"remote cache backend {kind.value!r} is not available")
    return FileBasedCache(no_cache=no_cache, directory=directory)


def _configured_provider(config: Config) -> CacheProvider:
    try:
        return CacheProvider.from_mapping(config.get("cache"))
    except ValueError as error:
        raise CacheError("cache unmarshal") from error


def remote_cache_enabled(config: Config) -> CacheType:
    """Return the kind of cache the configuration asks for."""
    provider = _configured_provider(config)
    if provider.bucket_name and provider.region:
        return CacheType.S3
    if provider.storage_account and provider.container_name:
        return CacheType.AZURE
    return CacheType.FILE


def add_remote_cache(config: Config, provider: CacheProvider) -> None:
    """Store ``provider`` as the remote cache and write the configuration."""
    _configured_provider(config)
    config.set("cache", provider.to_dict())
    config.write()


def remove_remote_cache(config: Config) -> None:
    """Forget the remote cache and write the configuration."""
    provider = _configured_provider(config)
    if not (provider.bucket_name or provider.container_name or provider.storage_account):
        raise CacheError("no remote cache configured")
    config.set("cache", CacheProvider().to_dict())
    try:
        config.write()
    except (OSError, ValueError) as error:
        raise CacheError("unable to write config") from error
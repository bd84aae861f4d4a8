"""A small YAML-backed settings store."""

from __future__ import annotations

import copy
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml


class Config:
    """Settings read from and written to one YAML file.

    Keys are case-insensitive, as they are stored in lower case.
    """

    def __init__(
        self,
        path: str | os.PathLike[str] | None = None,
        data: Mapping[str, Any] | None = None,
    ):
        self.path = Path(path) if path is not None else None
        self._data: dict[str, Any] = {}
        if self.path is not None and self.path.exists():
            self._load(self.path)
        if data:
            for key, value in data.items():
                self.set(key, value)

    def _load(self, path: Path) -> None:
        with path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle)
        if loaded is None:
            return
        if not isinstance(loaded, Mapping):
            raise ValueError(f"config file {path} does not hold a mapping")
        for key, value in loaded.items():
            self._data[str(key).lower()] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under ``key``, or ``default``."""
        if key.lower() not in self._data:
            return default
        return copy.deepcopy(self._data[key.lower()])

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``."""
        self._data[key.lower()] = copy.deepcopy(value)

    def get_string_list(self, key: str) -> list[str]:
        """Return the value under ``key`` as a list of strings."""
        value = self._data.get(key.lower())
        if value is None:
            return []
        if isinstance(value, str):
            return value.split()
        if isinstance(value, (list, tuple, set, frozenset)):
            return [str(item) for item in value]
        return [str(value)]

    def write(self) -> None:
        """Write every setting back to the config file."""
        if self.path is None:
            raise ValueError("config file not set")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as handle:
            yaml.safe_dump(self._data, handle, default_flow_style=False, sort_keys=True)
"""A small labelled gauge used to count analyzer errors."""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping


class GaugeVec:
    """A family of gauges keyed by label values."""

    def __init__(self, name: str, help_text: str, label_names: Iterable[str]):
        self.name = name
        self.help_text = help_text
        self.label_names = tuple(label_names)
        self._values: dict[tuple[str, ...], float] = {}
        self._lock = threading.Lock()

    def _key(self, values: tuple[object, ...]) -> tuple[str, ...]:
        if len(values) != len(self.label_names):
            raise ValueError(
                f"{self.name}: expected {len(self.label_names)} label values, got {len(values)}"
            )
        return tuple(str(value) for value in values)

    def set(self, value: float, *args: object) -> None:
        """Set the gauge for the given label values."""
        key = self._key(args)
        with self._lock:
            self._values[key] = float(value)

    def get(self, *args: object) -> float:
        """Return the gauge for the given label values; raise KeyError if unset."""
        key = self._key(args)
        with self._lock:
            try:
                return self._values[key]
            except KeyError:
                raise KeyError(key) from None

    def delete_partial_match(self, labels: Mapping[str, str]) -> int:
        """Remove every gauge whose labels include ``labels``; return the count."""
        positions = {}
        for label, value in labels.items():
            if label not in self.label_names:
                return 0
            positions[self.label_names.index(label)] = str(value)
        with self._lock:
            doomed = [
                key
                for key in self._values
                if all(key[index] == value for index, value in positions.items())
            ]
            for key in doomed:
                del self._values[key]
        return len(doomed)

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)


ANALYZER_ERRORS = GaugeVec(
    "analyzer_errors",
    "Number of errors detected by analyzer",
    ("analyzer_name", "object_name", "namespace"),
)
"""Process-wide key/value configuration shared between reservations and the cluster."""

from __future__ import annotations

import threading
from collections.abc import Mapping


class InMemoryConfigurationStore:
    """Thread-safe mutable key/value store.

    Reservations write chosen port numbers here; the cluster process reads
    them at construction. Tests reset it between runs.
    """

    def __init__(self, initial: Mapping[str, object] | None = None) -> None:
        self._values: dict[str, object] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str, default: object | None = None) -> object | None:
        with self._lock:
            return self._values.get(key, default)

    def set(self, key: str, value: object) -> None:
        with self._lock:
            self._values[key] = value

    def unset(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)

    def snapshot(self) -> dict[str, object]:
        with self._lock:
            return dict(self._values)

    def reset(self, initial: Mapping[str, object] | None = None) -> None:
        with self._lock:
            self._values = dict(initial or {})

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._values


_GLOBAL_STORE = InMemoryConfigurationStore()


def global_configuration() -> InMemoryConfigurationStore:
    return _GLOBAL_STORE


def reset_global_configuration(initial: Mapping[str, object] | None = None) -> None:
    _GLOBAL_STORE.reset(initial)


__all__ = [
    "InMemoryConfigurationStore",
    "global_configuration",
    "reset_global_configuration",
]

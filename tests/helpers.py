"""Shared test helpers."""

from __future__ import annotations

import threading
from collections.abc import Callable


class Counter:
    """Thread-safe counter mutated by concurrent actors in timing tests."""

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def increment(self) -> None:
        with self._lock:
            self._value += 1


def after(delay_s: float, action: Callable[[], object]) -> threading.Timer:
    """Run ``action`` on a daemon thread after ``delay_s`` seconds."""
    timer = threading.Timer(delay_s, action)
    timer.daemon = True
    timer.start()
    return timer

"""Bounded condition polling.

``wait_for`` checks a predicate immediately, then once per interval, until
it returns true or the budget is spent. A predicate that raises is a hard
failure: the error propagates on the spot and no further checks are made.
The sleep between checks is an ``Event.wait`` so a cancellation request ends
the wait without finishing the current interval.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from clustersync.config import get_settings
from clustersync.errors import InterruptedWait, TimeoutExceeded
from clustersync.models.wait import WaitSpec

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _budgets(timeout_s: float | None, interval_s: float | None) -> tuple[float, float]:
    """Fill in missing budgets from the active poller settings."""
    if timeout_s is not None and interval_s is not None:
        return timeout_s, interval_s
    defaults = get_settings().poller
    return (
        defaults.timeout_s if timeout_s is None else timeout_s,
        defaults.interval_s if interval_s is None else interval_s,
    )


def poll(spec: WaitSpec, cancel_event: threading.Event | None = None) -> float:
    """Block until ``spec.predicate`` holds.

    Returns:
        Seconds elapsed until the predicate was observed true.

    Raises:
        TimeoutExceeded: The predicate never held within ``spec.timeout_s``.
        InterruptedWait: ``cancel_event`` was set while waiting.
    """
    # A private event keeps the sleep path identical when nobody can cancel.
    stop = cancel_event if cancel_event is not None else threading.Event()
    started = time.monotonic()
    deadline = started + spec.timeout_s
    attempts = 0

    while True:
        if stop.is_set():
            raise InterruptedWait(spec.description, time.monotonic() - started)

        attempts += 1
        if spec.predicate():
            elapsed = time.monotonic() - started
            logger.debug("%s held after %d checks (%.3fs)", spec.description, attempts, elapsed)
            return elapsed

        now = time.monotonic()
        if now >= deadline:
            raise TimeoutExceeded(spec.description, now - started, spec.timeout_s)

        # The last sleep is clipped so the final check lands on the deadline.
        if stop.wait(min(spec.interval_s, deadline - now)):
            raise InterruptedWait(spec.description, time.monotonic() - started)


def wait_for(
    description: str,
    predicate: Callable[[], bool],
    timeout_s: float | None = None,
    interval_s: float | None = None,
    *,
    cancel_event: threading.Event | None = None,
) -> float:
    """Wait until ``predicate()`` returns true.

    Args:
        description: What is being waited for; used in error messages.
        predicate: Zero-argument callable. It is re-evaluated on every check and
            must not assume a single observation is stable.
        timeout_s: Total budget in seconds. Defaults to the active
            poller settings.
        interval_s: Pause between checks in seconds. Same default source.
        cancel_event: Optional event; setting it aborts the wait promptly.

    Returns:
        Seconds elapsed until the predicate held.

    Raises:
        TimeoutExceeded: The budget ran out.
        InterruptedWait: ``cancel_event`` was set.
    """
    timeout_s, interval_s = _budgets(timeout_s, interval_s)
    spec = WaitSpec(
        description=description,
        predicate=predicate,
        timeout_s=timeout_s,
        interval_s=interval_s,
    )
    return poll(spec, cancel_event)


def wait_for_result(
    description: str,
    supplier: Callable[[], T],
    condition: Callable[[T], bool],
    timeout_s: float | None = None,
    interval_s: float | None = None,
    *,
    cancel_event: threading.Event | None = None,
) -> T:
    """Wait until ``condition(supplier())`` holds and return that supplied value."""
    last: list[T] = []

    def _check() -> bool:
        value = supplier()
        if condition(value):
            last.append(value)
            return True
        return False

    wait_for(description, _check, timeout_s, interval_s, cancel_event=cancel_event)
    return last[-1]


async def wait_for_async(
    description: str,
    predicate: Callable[[], bool] | Callable[[], Awaitable[bool]],
    timeout_s: float | None = None,
    interval_s: float | None = None,
) -> float:
    """Asyncio flavour of ``wait_for``. Supports both sync and async predicates.

    Cancelling the awaiting task interrupts the sleep immediately and
    surfaces as ``asyncio.CancelledError``.
    """
    timeout_s, interval_s = _budgets(timeout_s, interval_s)
    if timeout_s <= 0 or interval_s <= 0:
        raise ValueError("timeout_s and interval_s must be > 0")

    loop = asyncio.get_running_loop()
    started = loop.time()
    deadline = started + timeout_s

    while True:
        result = predicate()
        if inspect.isawaitable(result):
            result = await result
        if result:
            return loop.time() - started

        now = loop.time()
        if now >= deadline:
            raise TimeoutExceeded(description, now - started, timeout_s)
        await asyncio.sleep(min(interval_s, deadline - now))


__all__ = [
    "poll",
    "wait_for",
    "wait_for_async",
    "wait_for_result",
]

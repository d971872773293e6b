"""HeartbeatTaskScheduler: APScheduler-backed runner for named background cycles.

Provides a clean interface for:
- Periodic heartbeats (e.g. worker block sync every 1s)
- Manually scheduled heartbeats that only run when a test asks for a cycle
- Out-of-band cycle requests with start/completion tickets

Jobs run on APScheduler's thread pool. Cycles of the same task never
overlap: each cycle holds its task's lock for the duration of the body.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)

# Callback type: plain function with no args, returning anything
HeartbeatCallback = Callable[[], object]


@dataclass(slots=True)
class _Heartbeat:
    name: str
    callback: HeartbeatCallback
    interval_s: float | None
    lock: threading.Lock = field(default_factory=threading.Lock)
    cycles: int = 0


class HeartbeatTaskScheduler:
    """Manages named heartbeats and answers cycle requests for them.

    Wraps APScheduler v3's BackgroundScheduler so the rest of the codebase
    doesn't depend on APScheduler internals directly.
    """

    def __init__(self) -> None:
        self._scheduler = BackgroundScheduler()
        self._heartbeats: dict[str, _Heartbeat] = {}
        self._last_ticket = 0
        # Tickets whose cycle has not finished yet, mapped to "has started".
        self._outstanding: dict[int, bool] = {}
        self._state_lock = threading.Lock()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def task_ids(self) -> list[str]:
        """Return all registered heartbeat names."""
        return list(self._heartbeats.keys())

    def add_heartbeat(
        self,
        name: str,
        interval_s: float | None,
        callback: HeartbeatCallback,
    ) -> str:
        """Register a named heartbeat.

        Args:
            name: Task identifier (e.g. "worker_block_sync").
            interval_s: Seconds between natural ticks. ``None`` registers a
                manually scheduled heartbeat that only runs on request.
            callback: Function invoked once per cycle.

        Returns:
            The task identifier.

        Raises:
            ValueError: If name is already registered or interval is invalid.
        """
        if interval_s is not None and interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        if name in self._heartbeats:
            raise ValueError(f"heartbeat '{name}' already registered")

        heartbeat = _Heartbeat(name=name, callback=callback, interval_s=interval_s)
        self._heartbeats[name] = heartbeat

        if interval_s is not None:
            self._scheduler.add_job(
                self._run_cycle,
                trigger=IntervalTrigger(seconds=interval_s),
                args=[heartbeat, None],
                id=self._job_id(name),
                name=f"heartbeat-{name}",
                replace_existing=False,
            )
            logger.info("Registered heartbeat: %s (every %.3fs)", name, interval_s)
        else:
            logger.info("Registered manually scheduled heartbeat: %s", name)
        return name

    def remove_heartbeat(self, name: str) -> None:
        """Remove a registered heartbeat.

        Raises:
            KeyError: If the heartbeat is not registered.
        """
        heartbeat = self._heartbeats.pop(name, None)
        if heartbeat is None:
            raise KeyError(f"unknown heartbeat: {name}")

        if heartbeat.interval_s is not None:
            self._scheduler.remove_job(self._job_id(name))
        logger.info("Removed heartbeat: %s", name)

    def request_cycle(self, task_id: str) -> int:
        """Queue one extra cycle of ``task_id`` to run as soon as possible.

        Returns:
            A ticket for ``cycle_started`` / ``cycle_completed``.

        Raises:
            KeyError: If the heartbeat is not registered.
        """
        heartbeat = self._heartbeats.get(task_id)
        if heartbeat is None:
            raise KeyError(f"unknown heartbeat: {task_id}")

        with self._state_lock:
            self._last_ticket += 1
            ticket = self._last_ticket
            self._outstanding[ticket] = False
        try:
            self._scheduler.add_job(
                self._run_cycle,
                trigger=DateTrigger(),
                args=[heartbeat, ticket],
                id=f"{self._job_id(task_id)}:cycle:{ticket}",
                name=f"heartbeat-{task_id}-cycle-{ticket}",
                misfire_grace_time=None,
            )
        except Exception:
            with self._state_lock:
                self._outstanding.pop(ticket, None)
            raise
        logger.debug("Requested cycle %d of %s", ticket, task_id)
        return ticket

    def cycle_started(self, ticket: int) -> bool:
        with self._state_lock:
            return self._issued(ticket) and self._outstanding.get(ticket, True)

    def cycle_completed(self, ticket: int) -> bool:
        with self._state_lock:
            return self._issued(ticket) and ticket not in self._outstanding

    @property
    def outstanding_cycles(self) -> int:
        """Requested cycles that have not finished yet."""
        with self._state_lock:
            return len(self._outstanding)

    def cycle_count(self, task_id: str) -> int:
        """Number of finished cycles of ``task_id``, natural ticks included."""
        return self._heartbeats[task_id].cycles

    def start(self) -> None:
        """Start the scheduler. Idempotent, safe to call if already running."""
        if self._running:
            return
        self._scheduler.start()
        self._running = True
        logger.info("Scheduler started with %d heartbeats", len(self._heartbeats))

    def stop(self) -> None:
        """Stop the scheduler and forget all heartbeats. Idempotent.

        Queued cycles that never started are dropped with their jobs; their
        tickets never report completion.
        """
        if not self._running:
            return
        self._scheduler.remove_all_jobs()
        self._scheduler.shutdown(wait=False)
        # A shut-down thread pool cannot be restarted; start() gets a fresh one.
        self._scheduler = BackgroundScheduler()
        self._heartbeats.clear()
        self._running = False
        logger.info("Scheduler stopped")

    def _run_cycle(self, heartbeat: _Heartbeat, ticket: int | None) -> None:
        """Run one cycle. Exceptions are logged so the scheduler stays alive."""
        with heartbeat.lock:
            if ticket is not None:
                with self._state_lock:
                    self._outstanding[ticket] = True
            try:
                heartbeat.callback()
            except Exception:
                logger.exception("Heartbeat %s cycle failed", heartbeat.name)
            finally:
                heartbeat.cycles += 1
                if ticket is not None:
                    with self._state_lock:
                        self._outstanding.pop(ticket, None)

    def _issued(self, ticket: int) -> bool:
        return 0 < ticket <= self._last_ticket

    @staticmethod
    def _job_id(name: str) -> str:
        return f"heartbeat:{name}"


__all__ = ["HeartbeatCallback", "HeartbeatTaskScheduler"]

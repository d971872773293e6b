"""Synchronization gate: run one cycle of a timer-driven background task on demand.

A trigger asks the scheduler for one out-of-band cycle and blocks until the
scheduler reports that cycle as started, so the caller knows the task body
is running against the state that existed at request time.

Some state transitions need two cycles. The first cycle produces a visible
effect (for example, block ids queued for removal) and the second one
consumes it (reporting them to the master). ``trigger_observe_trigger``
keeps those phases apart: the second request is issued only after the
effect of the first was observed.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from clustersync.config import GateConfig, get_settings
from clustersync.core.logging import correlation_scope
from clustersync.core.poller import wait_for
from clustersync.errors import SchedulingTimeout, TimeoutExceeded, UnknownTask
from clustersync.models.gate import CycleAcknowledgement, TwoPhaseCycle
from clustersync.protocols.scheduler import HeartbeatScheduler

logger = logging.getLogger(__name__)


class SynchronizationGate:
    def __init__(self, scheduler: HeartbeatScheduler, config: GateConfig | None = None) -> None:
        self._scheduler = scheduler
        self._config = config

    @property
    def config(self) -> GateConfig:
        """The explicit config, or else the active settings' gate section."""
        return self._config if self._config is not None else get_settings().gate

    def trigger_cycle(
        self,
        task_id: str,
        *,
        wait_for_completion: bool = False,
        cancel_event: threading.Event | None = None,
    ) -> CycleAcknowledgement:
        """Request one cycle of ``task_id`` and wait until it has started.

        Args:
            task_id: Name of a task registered with the scheduler.
            wait_for_completion: Also wait for the cycle body to return.
            cancel_event: Optional event; setting it aborts the wait.

        Raises:
            UnknownTask: No task is registered under ``task_id``.
            SchedulingTimeout: The scheduler did not pick the request up
                within ``scheduling_timeout_s``. Safe to retry.
            InterruptedWait: ``cancel_event`` was set.
        """
        if task_id not in self._scheduler.task_ids:
            raise UnknownTask(task_id)

        config = self.config
        with correlation_scope(task_id=task_id):
            try:
                ticket = self._scheduler.request_cycle(task_id)
            except KeyError as exc:
                # Removed between the lookup and the request.
                raise UnknownTask(task_id) from exc

            started = time.monotonic()
            try:
                wait_for(
                    f"cycle {ticket} of {task_id} to start",
                    lambda: self._scheduler.cycle_started(ticket),
                    config.scheduling_timeout_s,
                    config.poll_interval_s,
                    cancel_event=cancel_event,
                )
                if wait_for_completion:
                    remaining = config.scheduling_timeout_s - (time.monotonic() - started)
                    wait_for(
                        f"cycle {ticket} of {task_id} to complete",
                        lambda: self._scheduler.cycle_completed(ticket),
                        max(remaining, config.poll_interval_s),
                        config.poll_interval_s,
                        cancel_event=cancel_event,
                    )
            except TimeoutExceeded as exc:
                raise SchedulingTimeout(task_id, ticket, time.monotonic() - started) from exc

            elapsed = time.monotonic() - started
            logger.debug("Cycle %d of %s acknowledged after %.3fs", ticket, task_id, elapsed)
            return CycleAcknowledgement(
                task_id=task_id,
                ticket=ticket,
                elapsed_s=elapsed,
                completed=wait_for_completion,
            )

    def trigger_observe_trigger(
        self,
        task_id: str,
        description: str,
        predicate: Callable[[], bool],
        timeout_s: float | None = None,
        interval_s: float | None = None,
        *,
        wait_for_completion: bool = False,
        cancel_event: threading.Event | None = None,
    ) -> TwoPhaseCycle:
        """Trigger a cycle, wait for its effect, then trigger the consuming cycle.

        ``predicate`` observes state produced by the first cycle. The second
        cycle is requested only once that state is visible. With
        ``wait_for_completion`` the call returns after the second cycle's body
        has returned, not merely started.
        """
        config = self.config
        first = self.trigger_cycle(task_id, cancel_event=cancel_event)
        observed_after = wait_for(
            description,
            predicate,
            timeout_s if timeout_s is not None else config.effect_timeout_s,
            interval_s if interval_s is not None else config.poll_interval_s,
            cancel_event=cancel_event,
        )
        second = self.trigger_cycle(
            task_id,
            wait_for_completion=wait_for_completion,
            cancel_event=cancel_event,
        )
        return TwoPhaseCycle(first=first, second=second, observed_after_s=observed_after)


__all__ = ["SynchronizationGate"]

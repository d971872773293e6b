"""Error taxonomy for waiting, triggering and port reservation.

Recoverable and fatal outcomes are separate classes so callers can catch
exactly the cases they intend to retry. Predicate errors are never wrapped;
they reach the caller as raised.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from clustersync.models.ports import ReservedPort, ServiceDescriptor


class ClusterSyncError(Exception):
    """Base class for every error raised by clustersync itself."""


class TimeoutExceeded(ClusterSyncError, TimeoutError):
    """A polled condition never became true within its budget."""

    def __init__(self, description: str, elapsed_s: float, timeout_s: float) -> None:
        self.description = description
        self.elapsed_s = elapsed_s
        self.timeout_s = timeout_s
        super().__init__(
            f"timed out waiting for {description} after {elapsed_s:.3f}s (timeout {timeout_s:.3f}s)"
        )


class InterruptedWait(ClusterSyncError):
    """The waiting thread was asked to stop before the condition held."""

    def __init__(self, description: str, elapsed_s: float) -> None:
        self.description = description
        self.elapsed_s = elapsed_s
        super().__init__(f"wait for {description} interrupted after {elapsed_s:.3f}s")


class UnknownTask(ClusterSyncError, LookupError):
    """No background task is registered under the requested identifier."""

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"unknown background task: {task_id}")


class SchedulingTimeout(ClusterSyncError):
    """The scheduler did not pick up a trigger request in time.

    Usually transient; the caller may retry the trigger.
    """

    def __init__(self, task_id: str, ticket: int, elapsed_s: float) -> None:
        self.task_id = task_id
        self.ticket = ticket
        self.elapsed_s = elapsed_s
        super().__init__(
            f"cycle {ticket} of task '{task_id}' was not picked up after {elapsed_s:.3f}s"
        )


class PortAllocationError(ClusterSyncError, OSError):
    """A reservation socket for one service could not be bound or recorded.

    ``reserved`` holds the reservations made earlier in the same batch. Their
    sockets are still open; releasing them is the caller's decision.
    """

    def __init__(
        self,
        descriptor: ServiceDescriptor,
        reason: str,
        reserved: Mapping[str, ReservedPort] | None = None,
    ) -> None:
        self.descriptor = descriptor
        self.reserved: dict[str, ReservedPort] = dict(reserved or {})
        super().__init__(f"could not reserve a port for service '{descriptor.service_id}': {reason}")


__all__ = [
    "ClusterSyncError",
    "InterruptedWait",
    "PortAllocationError",
    "SchedulingTimeout",
    "TimeoutExceeded",
    "UnknownTask",
]

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class HeartbeatScheduler(Protocol):
    """The two operations a gate needs from the scheduler owning background tasks."""

    @property
    def task_ids(self) -> list[str]: ...

    def request_cycle(self, task_id: str) -> int: ...

    def cycle_started(self, ticket: int) -> bool: ...

    def cycle_completed(self, ticket: int) -> bool: ...


__all__ = ["HeartbeatScheduler"]

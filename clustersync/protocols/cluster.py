from __future__ import annotations

from collections.abc import Collection
from typing import Protocol, runtime_checkable

from clustersync.models.cluster import FileStatus


@runtime_checkable
class FileStatusSource(Protocol):
    def get_status(self, path: str) -> FileStatus: ...


@runtime_checkable
class PendingRemovalSource(Protocol):
    """Read-only view of the block ids a worker will report as removed next heartbeat."""

    def pending_removals(self) -> Collection[int]: ...


__all__ = ["FileStatusSource", "PendingRemovalSource"]

"""Waits for eventually consistent cluster state: persistence, caching, block frees."""

from __future__ import annotations

from collections.abc import Iterable

from clustersync.core.gate import SynchronizationGate
from clustersync.core.poller import wait_for
from clustersync.models.gate import TwoPhaseCycle
from clustersync.protocols.cluster import FileStatusSource, PendingRemovalSource

PERSIST_TIMEOUT_S = 15.0
BLOCK_FREE_TIMEOUT_S = 100.0
WORKER_BLOCK_SYNC = "worker_block_sync"


def wait_for_persist(
    source: FileStatusSource,
    path: str,
    timeout_s: float = PERSIST_TIMEOUT_S,
    interval_s: float | None = None,
) -> float:
    """Block until ``path`` is persisted to the under storage."""
    return wait_for(
        f"{path} to be persisted",
        lambda: source.get_status(path).persisted,
        timeout_s,
        interval_s,
    )


def wait_for_file_cached(
    source: FileStatusSource,
    path: str,
    timeout_s: float,
    interval_s: float | None = None,
) -> float:
    """Block until every block of ``path`` is cached."""
    return wait_for(
        f"{path} to be cached",
        lambda: source.get_status(path).fully_cached,
        timeout_s,
        interval_s,
    )


def wait_for_blocks_to_be_freed(
    gate: SynchronizationGate,
    reporter: PendingRemovalSource,
    block_ids: Iterable[int],
    task_id: str = WORKER_BLOCK_SYNC,
    timeout_s: float = BLOCK_FREE_TIMEOUT_S,
) -> TwoPhaseCycle:
    """Drive two block-sync heartbeats so master and worker agree the blocks are gone.

    The first heartbeat queues the removed blocks on the worker's reporter;
    the second reports them to the master. Returns once that second
    heartbeat has finished, so the master no longer lists the blocks.
    """
    expected = frozenset(block_ids)
    return gate.trigger_observe_trigger(
        task_id,
        "blocks to be removed",
        lambda: expected.issubset(reporter.pending_removals()),
        timeout_s,
        wait_for_completion=True,
    )


__all__ = [
    "BLOCK_FREE_TIMEOUT_S",
    "PERSIST_TIMEOUT_S",
    "WORKER_BLOCK_SYNC",
    "wait_for_blocks_to_be_freed",
    "wait_for_file_cached",
    "wait_for_persist",
]

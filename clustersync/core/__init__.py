from clustersync.core.gate import SynchronizationGate
from clustersync.core.poller import poll, wait_for, wait_for_async, wait_for_result

__all__ = ["SynchronizationGate", "poll", "wait_for", "wait_for_async", "wait_for_result"]

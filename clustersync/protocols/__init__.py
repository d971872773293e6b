from clustersync.protocols.cluster import FileStatusSource, PendingRemovalSource
from clustersync.protocols.config import ConfigurationStore
from clustersync.protocols.scheduler import HeartbeatScheduler

__all__ = [
    "ConfigurationStore",
    "FileStatusSource",
    "HeartbeatScheduler",
    "PendingRemovalSource",
]

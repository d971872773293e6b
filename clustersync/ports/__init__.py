from clustersync.ports.reservation import release_all, reserve_ports, resolve_bind_host
from clustersync.ports.services import master_service_descriptors, worker_service_descriptors
from clustersync.ports.store import (
    InMemoryConfigurationStore,
    global_configuration,
    reset_global_configuration,
)

__all__ = [
    "InMemoryConfigurationStore",
    "global_configuration",
    "master_service_descriptors",
    "release_all",
    "reserve_ports",
    "reset_global_configuration",
    "resolve_bind_host",
    "worker_service_descriptors",
]

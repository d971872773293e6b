"""Reserve one OS-assigned port per service before a cluster process starts.

Each reservation binds a listening socket to port 0 and keeps it open, so
the OS cannot hand the same port to anything else, including later
descriptors of the same batch. The chosen port is written to the
configuration store under the descriptor's key. Ownership of every socket
passes to the caller, whose service closes it and binds its real listener
on the reported port.
"""

from __future__ import annotations

import logging
import socket
from collections.abc import Mapping, Sequence

from clustersync.config import PortsConfig, get_settings
from clustersync.core.logging import correlation_scope
from clustersync.errors import PortAllocationError
from clustersync.models.ports import MAX_PORT, ReservedPort, ServiceDescriptor
from clustersync.ports.store import global_configuration
from clustersync.protocols.config import ConfigurationStore

logger = logging.getLogger(__name__)


def resolve_bind_host(
    descriptor: ServiceDescriptor,
    store: ConfigurationStore,
    config: PortsConfig | None = None,
) -> str:
    """Pick the host a descriptor's socket binds to.

    Order: the store entry under ``bind_policy.host_key``, then
    ``bind_policy.default_host``, then the configured default bind host.
    """
    policy = descriptor.bind_policy
    if policy.host_key is not None:
        configured = store.get(policy.host_key)
        if configured is not None:
            return str(configured)
    if policy.default_host is not None:
        return policy.default_host
    return (config or get_settings().ports).default_bind_host


def _open_listener(host: str, backlog: int) -> socket.socket:
    # An empty host means every interface.
    infos = socket.getaddrinfo(
        host or None,
        0,
        type=socket.SOCK_STREAM,
        flags=socket.AI_PASSIVE,
    )
    family, socktype, proto, _, sockaddr = infos[0]
    sock = socket.socket(family, socktype, proto)
    try:
        sock.bind(sockaddr)
        sock.listen(backlog)
    except OSError:
        sock.close()
        raise
    return sock


def reserve_ports(
    descriptors: Sequence[ServiceDescriptor],
    store: ConfigurationStore | None = None,
    config: PortsConfig | None = None,
) -> dict[str, ReservedPort]:
    """Reserve a distinct ephemeral port for every descriptor, in order.

    Args:
        descriptors: Services to reserve for. ``service_id`` and ``port_key``
            must be unique within the batch.
        store: Where chosen ports are recorded. Defaults to the process-wide
            configuration.
        config: Bind host and backlog defaults. Defaults to the active
            settings' ports section.

    Returns:
        ``service_id`` to ``ReservedPort``, in descriptor order. Every socket
        is open and owned by the caller.

    Raises:
        ValueError: Duplicate ``service_id`` or ``port_key`` in the batch.
        PortAllocationError: The OS refused a bind, or the store rejected
            the chosen port. Reservations made for earlier descriptors stay
            open and are attached to the error.
    """
    target = store if store is not None else global_configuration()
    ports_config = config or get_settings().ports

    service_ids = [d.service_id for d in descriptors]
    if len(set(service_ids)) != len(service_ids):
        raise ValueError(f"duplicate service ids in reservation batch: {service_ids}")
    port_keys = [d.port_key for d in descriptors]
    if len(set(port_keys)) != len(port_keys):
        raise ValueError(f"duplicate port keys in reservation batch: {port_keys}")

    reserved: dict[str, ReservedPort] = {}
    for descriptor in descriptors:
        with correlation_scope(service_id=descriptor.service_id):
            backlog = descriptor.backlog or ports_config.backlog
            try:
                host = resolve_bind_host(descriptor, target, ports_config)
                sock = _open_listener(host, backlog)
            except OSError as exc:
                raise PortAllocationError(descriptor, str(exc), reserved) from exc

            bound_host, port = sock.getsockname()[:2]
            if not 0 < port <= MAX_PORT:
                sock.close()
                raise PortAllocationError(descriptor, f"OS assigned invalid port {port}", reserved)

            reservation = ReservedPort(
                service_id=descriptor.service_id,
                host=bound_host,
                port=port,
                _socket=sock,
            )
            try:
                target.set(descriptor.port_key, port)
            except Exception as exc:
                reservation.release()
                raise PortAllocationError(
                    descriptor,
                    f"could not record port {port} under '{descriptor.port_key}': {exc}",
                    reserved,
                ) from exc
            reserved[descriptor.service_id] = reservation
            logger.debug("Reserved %s:%d for %s", bound_host, port, descriptor.service_id)

    return reserved


def release_all(reserved: Mapping[str, ReservedPort]) -> None:
    """Close every reservation socket still owned by the mapping."""
    for reservation in reserved.values():
        reservation.release()


__all__ = ["release_all", "reserve_ports", "resolve_bind_host"]

"""Default service descriptors for the processes of a local test cluster."""

from __future__ import annotations

from clustersync.models.ports import BindAddressPolicy, ServiceDescriptor


def master_service_descriptors() -> list[ServiceDescriptor]:
    """Services a storage master process listens on, in bind order."""
    return [
        ServiceDescriptor(
            service_id="master_rpc",
            port_key="master.rpc.port",
            bind_policy=BindAddressPolicy(host_key="master.bind.host"),
        ),
        ServiceDescriptor(
            service_id="master_web",
            port_key="master.web.port",
            bind_policy=BindAddressPolicy(host_key="master.web.bind.host"),
        ),
        ServiceDescriptor(
            service_id="master_job_rpc",
            port_key="master.job.rpc.port",
            bind_policy=BindAddressPolicy(host_key="master.job.bind.host"),
        ),
        ServiceDescriptor(
            service_id="master_embedded_journal",
            port_key="master.embedded.journal.port",
            bind_policy=BindAddressPolicy(host_key="master.embedded.journal.bind.host"),
        ),
    ]


def worker_service_descriptors() -> list[ServiceDescriptor]:
    """Services a storage worker process listens on, in bind order."""
    return [
        ServiceDescriptor(
            service_id="worker_rpc",
            port_key="worker.rpc.port",
            bind_policy=BindAddressPolicy(host_key="worker.bind.host"),
        ),
        ServiceDescriptor(
            service_id="worker_web",
            port_key="worker.web.port",
            bind_policy=BindAddressPolicy(host_key="worker.web.bind.host"),
        ),
    ]


__all__ = ["master_service_descriptors", "worker_service_descriptors"]

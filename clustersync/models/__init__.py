from __future__ import annotations

from clustersync.models.cluster import FileStatus
from clustersync.models.gate import CycleAcknowledgement, TwoPhaseCycle
from clustersync.models.ports import MAX_PORT, BindAddressPolicy, ReservedPort, ServiceDescriptor
from clustersync.models.wait import WaitSpec

__all__ = [
    "MAX_PORT",
    "BindAddressPolicy",
    "CycleAcknowledgement",
    "FileStatus",
    "ReservedPort",
    "ServiceDescriptor",
    "TwoPhaseCycle",
    "WaitSpec",
]

from __future__ import annotations

import socket
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field

MAX_PORT = 65535


class BindAddressPolicy(BaseModel):
    """How to choose the address a service's reservation socket binds to.

    ``host_key`` names a configuration entry holding the host. When it is
    unset or missing from the store, ``default_host`` is used, and when that
    is unset too, the configured process-wide default bind host.
    """

    model_config = ConfigDict(frozen=True)

    host_key: str | None = None
    default_host: str | None = None


class ServiceDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    service_id: str = Field(min_length=1)
    port_key: str = Field(min_length=1)
    bind_policy: BindAddressPolicy = Field(default_factory=BindAddressPolicy)
    # None means the configured default backlog.
    backlog: int | None = Field(default=None, ge=1)


@dataclass(slots=True)
class ReservedPort:
    """A port claimed by an open listening socket until its consumer takes over.

    The consumer either calls ``detach()`` to take the socket itself, or
    ``release()`` right before binding its real listener on ``port``.
    """

    service_id: str
    host: str
    port: int
    _socket: socket.socket | None = field(default=None, repr=False)

    @property
    def socket(self) -> socket.socket | None:
        return self._socket

    @property
    def closed(self) -> bool:
        return self._socket is None or self._socket.fileno() == -1

    @property
    def address(self) -> tuple[str, int]:
        return (self.host, self.port)

    def detach(self) -> socket.socket:
        """Hand the reservation socket over to the caller.

        Raises:
            RuntimeError: If the socket was already detached or released.
        """
        if self._socket is None:
            raise RuntimeError(f"reservation for '{self.service_id}' no longer owns a socket")
        sock, self._socket = self._socket, None
        return sock

    def release(self) -> None:
        """Close the reservation socket. Idempotent."""
        if self._socket is None:
            return
        sock, self._socket = self._socket, None
        sock.close()


__all__ = ["MAX_PORT", "BindAddressPolicy", "ReservedPort", "ServiceDescriptor"]

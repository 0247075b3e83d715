"""TCP listener instance using Python sockets."""

from __future__ import annotations

import ipaddress
import socket

from devicehub.core.errors import BindFailureError
from devicehub.core.model import DeviceKind


class TcpListenerInstance:
    """Listener handle that stays unbound until :meth:`bind` is called.

    The socket is created at bind time with the address family of the
    requested endpoint. Nothing is ever accepted on it.
    """

    kind = DeviceKind.TCP_LISTENER

    def __init__(self) -> None:
        self._socket: socket.socket | None = None

    @property
    def is_bound(self) -> bool:
        return self._socket is not None

    @property
    def local_endpoint(self) -> tuple[str, int] | None:
        if self._socket is None:
            return None
        host, port = self._socket.getsockname()[:2]
        return host, port

    def bind(self, address: str | None, port: int) -> None:
        if self._socket is not None:
            raise BindFailureError(f"Listener already bound to {self.describe()}")

        try:
            ip = ipaddress.ip_address((address or "").strip())
        except ValueError as exc:
            raise BindFailureError(f"Invalid listener address {address!r}") from exc

        family = socket.AF_INET6 if ip.version == 6 else socket.AF_INET
        try:
            sock = socket.socket(family, socket.SOCK_STREAM)
        except OSError as exc:
            raise BindFailureError(f"Could not create listener socket: {exc}") from exc

        try:
            sock.bind((str(ip), port))
        except (OSError, OverflowError) as exc:
            sock.close()
            raise BindFailureError(f"Could not bind {ip}:{port}: {exc}") from exc
        self._socket = sock

    def close(self) -> None:
        if self._socket is not None:
            self._socket.close()
            self._socket = None

    def describe(self) -> str:
        endpoint = self.local_endpoint
        if endpoint is None:
            return "<unbound>"
        host, port = endpoint
        return f"{host}:{port}"

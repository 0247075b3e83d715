"""Serial port instance backed by an unopened pyserial handle."""

from __future__ import annotations

import serial

from devicehub.core.errors import MalformedFieldError
from devicehub.core.model import DeviceKind


class SerialPortInstance:
    kind = DeviceKind.SERIAL_PORT

    def __init__(self, handle: serial.Serial | None = None) -> None:
        # Serial() without a port never opens anything.
        self.handle = handle if handle is not None else serial.Serial()

    @property
    def port_name(self) -> str | None:
        return self.handle.port

    @property
    def baud_rate(self) -> int:
        return self.handle.baudrate

    def configure(self, port_name: str | None, baud_rate: int) -> None:
        try:
            self.handle.baudrate = baud_rate
        except ValueError as exc:
            raise MalformedFieldError(f"Invalid baud rate {baud_rate}: {exc}") from exc
        self.handle.port = port_name

    def describe(self) -> str:
        return f"{self.port_name or '<unset>'}@{self.baud_rate}"

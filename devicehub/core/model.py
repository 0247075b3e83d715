"""Device kinds and the kind-specific settings payloads.

Each settings variant owns the mapping between its fields and the children of
a document ``<Settings>`` element, exposed as a pair of pure functions next to
the dataclass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar
from xml.etree.ElementTree import Element

from devicehub.core.errors import MalformedFieldError


class DeviceKind(str, Enum):
    SERIAL_PORT = "SerialPort"
    TCP_LISTENER = "TcpListener"

    def __str__(self) -> str:
        return self.value


@dataclass
class DeviceSettings:
    kind: ClassVar[DeviceKind]

    device_name: str | None = None
    address: str | None = None
    port: int = 0


@dataclass
class SerialPortSettings(DeviceSettings):
    kind: ClassVar[DeviceKind] = DeviceKind.SERIAL_PORT

    # Network fields are not persisted for serial ports.
    address: str | None = field(default=None, compare=False)
    port: int = field(default=0, compare=False)
    port_name: str | None = None
    baud_rate: int = 0


@dataclass
class TcpListenerSettings(DeviceSettings):
    kind: ClassVar[DeviceKind] = DeviceKind.TCP_LISTENER


def _child_text(element: Element | None, name: str) -> str | None:
    if element is None:
        return None
    child = element.find(name)
    if child is None:
        return None
    return child.text or ""


def _child_int(element: Element | None, name: str, default: int) -> int:
    raw = _child_text(element, name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise MalformedFieldError(f"{name} must be an integer, got {raw!r}") from exc


def serial_port_settings_from_element(element: Element | None) -> SerialPortSettings:
    return SerialPortSettings(
        device_name=_child_text(element, "DeviceName"),
        port_name=_child_text(element, "PortName"),
        baud_rate=_child_int(element, "BaudRate", 0),
    )


def serial_port_settings_to_elements(settings: SerialPortSettings) -> list[tuple[str, str | None]]:
    return [
        ("DeviceName", settings.device_name),
        ("PortName", settings.port_name),
        ("BaudRate", str(settings.baud_rate)),
    ]


def tcp_listener_settings_from_element(element: Element | None) -> TcpListenerSettings:
    return TcpListenerSettings(
        device_name=_child_text(element, "DeviceName"),
        address=_child_text(element, "TcpAddress"),
        port=_child_int(element, "TcpPort", 0),
    )


def tcp_listener_settings_to_elements(settings: TcpListenerSettings) -> list[tuple[str, str | None]]:
    return [
        ("DeviceName", settings.device_name),
        ("TcpAddress", settings.address),
        ("TcpPort", str(settings.port)),
    ]

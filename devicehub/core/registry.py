"""Kind dispatch: the single table mapping a device kind to its behavior."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any
from xml.etree.ElementTree import Element

from devicehub.core.errors import UnknownKindError, UnsupportedKindError, VariantMismatchError
from devicehub.core.model import (
    DeviceKind,
    DeviceSettings,
    SerialPortSettings,
    TcpListenerSettings,
    serial_port_settings_from_element,
    serial_port_settings_to_elements,
    tcp_listener_settings_from_element,
    tcp_listener_settings_to_elements,
)
from devicehub.instances.base import DeviceInstance
from devicehub.instances.serial_port import SerialPortInstance
from devicehub.instances.tcp_listener import TcpListenerInstance


@dataclass(frozen=True)
class KindRegistration:
    kind: DeviceKind
    settings_type: type[DeviceSettings] | None = None
    read_settings: Callable[[Element | None], DeviceSettings] | None = None
    write_settings: Callable[[Any], list[tuple[str, str | None]]] | None = None
    create_instance: Callable[[], DeviceInstance] | None = None
    apply_settings: Callable[[Any, Any], None] | None = None
    fields: tuple[str, ...] = ()


def _apply_serial_port(settings: SerialPortSettings, instance: SerialPortInstance) -> None:
    instance.configure(settings.port_name, settings.baud_rate)


def _apply_tcp_listener(settings: TcpListenerSettings, instance: TcpListenerInstance) -> None:
    instance.bind(settings.address, settings.port)


_DEFAULT_REGISTRATIONS = (
    KindRegistration(
        kind=DeviceKind.SERIAL_PORT,
        settings_type=SerialPortSettings,
        read_settings=serial_port_settings_from_element,
        write_settings=serial_port_settings_to_elements,
        create_instance=SerialPortInstance,
        apply_settings=_apply_serial_port,
        fields=("DeviceName", "PortName", "BaudRate"),
    ),
    KindRegistration(
        kind=DeviceKind.TCP_LISTENER,
        settings_type=TcpListenerSettings,
        read_settings=tcp_listener_settings_from_element,
        write_settings=tcp_listener_settings_to_elements,
        create_instance=TcpListenerInstance,
        apply_settings=_apply_tcp_listener,
        fields=("DeviceName", "TcpAddress", "TcpPort"),
    ),
)


def resolve_kind(tag: str | None) -> DeviceKind:
    for kind in DeviceKind:
        if kind.value == tag:
            return kind
    known = ", ".join(k.value for k in DeviceKind)
    raise UnknownKindError(f"Unknown device kind '{tag}'. Known: {known}")


class DeviceRegistry:
    """Read-only view over the per-kind registrations."""

    def __init__(self, registrations: tuple[KindRegistration, ...] = _DEFAULT_REGISTRATIONS) -> None:
        self._table: Mapping[DeviceKind, KindRegistration] = MappingProxyType(
            {registration.kind: registration for registration in registrations}
        )

    @property
    def kinds(self) -> tuple[DeviceKind, ...]:
        return tuple(self._table)

    def registration(self, kind: DeviceKind) -> KindRegistration | None:
        return self._table.get(kind)

    def resolve_kind(self, tag: str | None) -> DeviceKind:
        return resolve_kind(tag)

    def create_settings(self, kind: DeviceKind) -> DeviceSettings | None:
        # Lenient: a kind without a settings variant yields no settings.
        registration = self._table.get(kind)
        if registration is None or registration.settings_type is None:
            return None
        return registration.settings_type()

    def create_instance(self, kind: DeviceKind) -> DeviceInstance:
        registration = self._table.get(kind)
        if registration is None or registration.create_instance is None:
            raise UnsupportedKindError(f"Device kind '{kind}' has no instance constructor.")
        return registration.create_instance()

    def read_settings(self, kind: DeviceKind, element: Element | None) -> DeviceSettings | None:
        registration = self._table.get(kind)
        if registration is None or registration.read_settings is None:
            return None
        return registration.read_settings(element)

    def write_settings(self, settings: DeviceSettings) -> list[tuple[str, str | None]]:
        registration = self._table.get(settings.kind)
        if registration is None or registration.write_settings is None:
            raise UnsupportedKindError(f"Device kind '{settings.kind}' has no settings serializer.")
        return registration.write_settings(settings)

    def apply_settings(self, settings: DeviceSettings | None, instance: DeviceInstance | None) -> None:
        if settings is None or instance is None:
            raise VariantMismatchError("Both settings and instance must exist before applying settings.")
        if settings.kind is not instance.kind:
            raise VariantMismatchError(
                f"Cannot apply {settings.kind} settings to a {instance.kind} instance."
            )
        registration = self._table.get(instance.kind)
        if registration is None or registration.apply_settings is None:
            raise UnsupportedKindError(f"Device kind '{instance.kind}' has no apply rule.")
        registration.apply_settings(settings, instance)


DEFAULT_REGISTRY = DeviceRegistry()

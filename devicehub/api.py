"""Stable public API for building tooling on top of devicehub.

This module is the supported integration surface for third-party callers
(interactive consoles, services, scripts). Avoid importing from internal
modules unless intentionally depending on non-stable internals.
"""

from __future__ import annotations

from devicehub.core.codec import DeviceManager, load_devices, save_devices
from devicehub.core.config import Config, load_config
from devicehub.core.device import Device
from devicehub.core.errors import (
    BindFailureError,
    ConfigError,
    DevicehubError,
    DeviceSelectionError,
    MalformedDocumentError,
    MalformedFieldError,
    SourceNotFoundError,
    UnknownKindError,
    UnsupportedKindError,
    VariantMismatchError,
)
from devicehub.core.model import DeviceKind, DeviceSettings, SerialPortSettings, TcpListenerSettings
from devicehub.core.registry import DEFAULT_REGISTRY, DeviceRegistry, KindRegistration, resolve_kind
from devicehub.instances.base import DeviceInstance
from devicehub.instances.serial_port import SerialPortInstance
from devicehub.instances.tcp_listener import TcpListenerInstance

__all__ = [
    "DevicehubError",
    "BindFailureError",
    "ConfigError",
    "DeviceSelectionError",
    "MalformedDocumentError",
    "MalformedFieldError",
    "SourceNotFoundError",
    "UnknownKindError",
    "UnsupportedKindError",
    "VariantMismatchError",
    "Config",
    "Device",
    "DeviceInstance",
    "DeviceKind",
    "DeviceManager",
    "DeviceRegistry",
    "DeviceSettings",
    "KindRegistration",
    "SerialPortInstance",
    "SerialPortSettings",
    "TcpListenerInstance",
    "TcpListenerSettings",
    "DEFAULT_REGISTRY",
    "load_config",
    "load_devices",
    "resolve_kind",
    "save_devices",
]

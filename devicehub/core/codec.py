"""XML document codec for device collections."""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path
from xml.etree import ElementTree as ET

from devicehub.core.device import Device
from devicehub.core.errors import (
    DeviceSelectionError,
    MalformedDocumentError,
    MalformedFieldError,
    SourceNotFoundError,
    UnknownKindError,
    VariantMismatchError,
)
from devicehub.core.registry import DEFAULT_REGISTRY, DeviceRegistry

# Characters XML 1.0 cannot carry, even escaped.
_XML_ILLEGAL_RE = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def _parse_bool(raw: str | None, *, context: str) -> bool:
    if raw is not None:
        lowered = raw.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise MalformedFieldError(f"{context} must be boolean true/false, got {raw!r}")


def _device_from_element(
    element: ET.Element,
    index: int,
    registry: DeviceRegistry,
) -> Device:
    type_element = element.find("Type")
    if type_element is None or type_element.text is None:
        raise MalformedFieldError(f"Device #{index} is missing <Type>")

    registered_element = element.find("IsRegistered")
    is_registered = _parse_bool(
        registered_element.text if registered_element is not None else None,
        context=f"Device #{index} <IsRegistered>",
    )

    device = Device(is_registered=is_registered, registry=registry)
    device.assign_kind(type_element.text.strip())
    device.configure(element.find("Settings"))
    return device


def _device_to_element(device: Device, index: int, registry: DeviceRegistry) -> ET.Element:
    if device.kind is None:
        raise UnknownKindError(f"Device #{index} has no kind assigned")
    if device.settings is not None and device.settings.kind is not device.kind:
        raise VariantMismatchError(
            f"Device #{index} is a {device.kind} but carries {device.settings.kind} settings"
        )

    element = ET.Element("Device")
    ET.SubElement(element, "Type").text = str(device.kind)
    ET.SubElement(element, "IsRegistered").text = "true" if device.is_registered else "false"
    if device.settings is not None:
        settings_element = ET.SubElement(element, "Settings")
        for name, value in registry.write_settings(device.settings):
            if value is None:
                continue
            if _XML_ILLEGAL_RE.search(value):
                raise MalformedFieldError(
                    f"Device #{index} {name} contains characters XML cannot store: {value!r}"
                )
            ET.SubElement(settings_element, name).text = value
    return element


def load_devices(source: str | Path, *, registry: DeviceRegistry = DEFAULT_REGISTRY) -> list[Device]:
    path = Path(source)
    if not path.exists():
        raise SourceNotFoundError(f"Devices file '{path}' not found.")

    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as exc:
        raise MalformedDocumentError(f"Invalid XML in {path}: {exc}") from exc
    except OSError as exc:
        raise SourceNotFoundError(f"Could not read devices file {path}: {exc}") from exc

    return [
        _device_from_element(element, index, registry)
        for index, element in enumerate(root.findall("Device"))
    ]


def save_devices(
    devices: Iterable[Device],
    destination: str | Path,
    *,
    registry: DeviceRegistry = DEFAULT_REGISTRY,
) -> None:
    root = ET.Element("Devices")
    for index, device in enumerate(devices):
        root.append(_device_to_element(device, index, registry))
    tree = ET.ElementTree(root)
    ET.indent(tree)
    tree.write(Path(destination), encoding="utf-8", xml_declaration=True)


class DeviceManager:
    """Ordered, in-memory collection of devices backed by one document."""

    def __init__(self, registry: DeviceRegistry | None = None) -> None:
        self._registry = registry or DEFAULT_REGISTRY
        self._devices: list[Device] = []

    @property
    def devices(self) -> list[Device]:
        return list(self._devices)

    def add(self, device: Device) -> None:
        self._devices.append(device)

    def get(self, index: int) -> Device:
        try:
            return self._devices[index]
        except IndexError:
            raise DeviceSelectionError(
                f"No device at index {index} ({len(self._devices)} loaded)"
            ) from None

    def load(self, source: str | Path) -> list[Device]:
        self._devices = load_devices(source, registry=self._registry)
        return self.devices

    def save(self, destination: str | Path) -> None:
        save_devices(self._devices, destination, registry=self._registry)

"""The Device entity: a kind, its settings, a registration flag and a live instance."""

from __future__ import annotations

import logging
from xml.etree.ElementTree import Element

from devicehub.core.errors import UnknownKindError, VariantMismatchError
from devicehub.core.model import DeviceKind, DeviceSettings
from devicehub.core.registry import DEFAULT_REGISTRY, DeviceRegistry
from devicehub.instances.base import DeviceInstance

LOGGER = logging.getLogger(__name__)


class Device:
    """One managed endpoint.

    Typical lifecycle: ``assign_kind`` -> ``create_settings`` -> populate the
    settings (``configure`` or direct assignment) -> ``create_instance`` ->
    ``apply_settings`` -> ``start``/``stop``. The instance is process-local and
    never persisted.
    """

    def __init__(
        self,
        kind: DeviceKind | None = None,
        settings: DeviceSettings | None = None,
        *,
        is_registered: bool = False,
        registry: DeviceRegistry | None = None,
    ) -> None:
        self.kind = kind
        self.settings = settings
        self.is_registered = is_registered
        self.instance: DeviceInstance | None = None
        self._registry = registry or DEFAULT_REGISTRY

    def __repr__(self) -> str:
        return (
            f"Device(kind={self.kind!s}, settings={self.settings!r}, "
            f"is_registered={self.is_registered})"
        )

    def __eq__(self, other: object) -> bool:
        # Instances are process-local and take no part in equality.
        if not isinstance(other, Device):
            return NotImplemented
        return (
            self.kind is other.kind
            and self.is_registered == other.is_registered
            and self.settings == other.settings
        )

    __hash__ = None  # type: ignore[assignment]

    @property
    def display_name(self) -> str:
        if self.settings is not None and self.settings.device_name:
            return self.settings.device_name
        return str(self.kind) if self.kind is not None else "<unassigned>"

    def assign_kind(self, tag: str) -> None:
        self.kind = self._registry.resolve_kind(tag)

    def _require_kind(self) -> DeviceKind:
        if self.kind is None:
            raise UnknownKindError("Device kind has not been assigned.")
        return self.kind

    def create_settings(self) -> None:
        self.settings = self._registry.create_settings(self._require_kind())

    def create_instance(self) -> None:
        self.instance = self._registry.create_instance(self._require_kind())

    def configure(self, element: Element | None) -> None:
        self.settings = self._registry.read_settings(self._require_kind(), element)

    def apply_settings(self) -> None:
        # The instance must still match the device kind, not just the settings.
        if self.instance is not None and self.instance.kind is not self.kind:
            raise VariantMismatchError(
                f"Device kind is {self.kind} but its instance is a {self.instance.kind}."
            )
        self._registry.apply_settings(self.settings, self.instance)

    def start(self) -> None:
        LOGGER.info("Starting %s ...", self.display_name)

    def stop(self) -> None:
        LOGGER.info("Stopping %s ...", self.display_name)

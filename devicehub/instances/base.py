"""Instance interfaces."""

from __future__ import annotations

from typing import Protocol

from devicehub.core.model import DeviceKind


class DeviceInstance(Protocol):
    kind: DeviceKind

    def describe(self) -> str:
        """Return a short human-readable summary of the live configuration."""

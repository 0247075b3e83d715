"""Domain-specific errors for devicehub."""


class DevicehubError(Exception):
    """Base error for devicehub."""


class ConfigError(DevicehubError):
    """Raised when the user configuration file is unreadable or invalid."""


class SourceNotFoundError(DevicehubError):
    """Raised when a devices document does not exist."""


class MalformedDocumentError(DevicehubError):
    """Raised when a devices document is not well-formed XML."""


class UnknownKindError(DevicehubError):
    """Raised when a kind tag matches no known device kind."""


class UnsupportedKindError(DevicehubError):
    """Raised when a known kind has no registered constructor."""


class MalformedFieldError(DevicehubError):
    """Raised when a required field is missing or fails type conversion."""


class VariantMismatchError(DevicehubError):
    """Raised when settings and instance kinds do not line up."""


class BindFailureError(DevicehubError):
    """Raised when a listener cannot bind its local endpoint."""


class DeviceSelectionError(DevicehubError):
    """Raised when a device index does not resolve to a loaded device."""

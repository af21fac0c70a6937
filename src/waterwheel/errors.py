from .client import (
    WaterwheelClientError,
    WaterwheelError,
    WaterwheelHTTPError,
    WaterwheelParseError,
)

NOT_HAL_MESSAGE = "This is probably not HAL+JSON"


class MissingBaseUrlError(ValueError):
    """Raised when a base URL is required but missing."""


class MissingCredentialsError(ValueError):
    """Raised when credentials are required but missing."""


class MissingResourcesError(WaterwheelError):
    """Returned (not raised) when bulk registration receives nothing."""


class CatalogEntryError(WaterwheelError, ValueError):
    """A catalog entry could not be turned into a resource."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Invalid catalog entry {key!r}: {reason}")
        self.key = key


class UnsupportedMethodError(WaterwheelError):
    def __init__(self, resource: str, method: str):
        super().__init__(f"{resource} does not support {method}")
        self.resource = resource
        self.method = method


class NotHALError(WaterwheelError):
    def __init__(self, message: str = NOT_HAL_MESSAGE):
        super().__init__(message)


__all__ = [
    "NOT_HAL_MESSAGE",
    "WaterwheelError",
    "WaterwheelClientError",
    "WaterwheelHTTPError",
    "WaterwheelParseError",
    "MissingBaseUrlError",
    "MissingCredentialsError",
    "MissingResourcesError",
    "CatalogEntryError",
    "UnsupportedMethodError",
    "NotHALError",
]

"""Custom exception hierarchy for pydust."""

from __future__ import annotations


class DustError(Exception):
    """Base exception for all pydust errors."""


class DustConfigError(DustError):
    """Invalid or missing configuration."""


class DustTransportError(DustError):
    """HTTP-level failure (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class DustApiError(DustError):
    """API answered, but the payload does not have the expected shape."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class GeolocationError(DustError):
    """Base for failures while acquiring the user's position."""


class GeolocationUnavailableError(GeolocationError):
    """No geolocation capability on this host."""


class GeolocationPermissionDeniedError(GeolocationError):
    """The user (or the platform) refused to share the position."""


class GeolocationTimeoutError(GeolocationError):
    """The position request did not complete in time."""


class GeolocationPositionUnavailableError(GeolocationError):
    """The provider answered but could not produce a usable fix."""

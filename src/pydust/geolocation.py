"""Geolocation providers.

A provider answers a single "where is the user right now" request. It
either returns a :class:`~pydust.models.location.Location` or raises a
:class:`~pydust.exceptions.GeolocationError` subclass. Callers must check
:attr:`GeolocationProvider.available` before asking.
"""

from __future__ import annotations

import json
import logging
from typing import Protocol

import aiohttp
from pydantic import ValidationError

from pydust._constants import USER_AGENT
from pydust._redact import redact_for_log
from pydust._transport import decode_body
from pydust.config import DustConfig
from pydust.exceptions import (
    GeolocationError,
    GeolocationPermissionDeniedError,
    GeolocationPositionUnavailableError,
    GeolocationTimeoutError,
    GeolocationUnavailableError,
)
from pydust.models.location import Location

_logger = logging.getLogger(__name__)


class GeolocationProvider(Protocol):
    """Capability-gated, single-shot position source."""

    @property
    def available(self) -> bool:
        ...

    async def get_current_position(self) -> Location:
        ...


class StaticGeolocationProvider:
    """Provider returning a fixed position, or a fixed failure.

    Useful when the position is known up front (command line, config) and
    as a test double.
    """

    def __init__(
        self,
        location: Location | None = None,
        *,
        error: GeolocationError | None = None,
        available: bool = True,
    ) -> None:
        self._location = location
        self._error = error
        self._available = available
        self.requests = 0

    @property
    def available(self) -> bool:
        return self._available

    async def get_current_position(self) -> Location:
        self.requests += 1
        if not self._available:
            raise GeolocationUnavailableError("Static provider disabled")
        if self._error is not None:
            raise self._error
        if self._location is None:
            raise GeolocationPositionUnavailableError("No static position configured")
        return self._location


class IpGeolocationProvider:
    """Approximate position from an IP geolocation JSON service.

    The service must answer with ``latitude``/``longitude`` (or
    ``lat``/``lon``) at the top level of a JSON object.
    """

    def __init__(self, config: DustConfig, http_session: aiohttp.ClientSession) -> None:
        self._url = config.geolocation_url
        self._timeout_s = config.geolocation_timeout
        self._http = http_session

    @property
    def available(self) -> bool:
        return bool(self._url) and not self._http.closed

    async def get_current_position(self) -> Location:
        if not self.available:
            raise GeolocationUnavailableError("IP geolocation is not configured")

        _logger.debug("GET %s", self._url)
        try:
            async with self._http.get(
                self._url,
                headers={"accept": "application/json", "user-agent": USER_AGENT},
                timeout=aiohttp.ClientTimeout(total=self._timeout_s),
            ) as resp:
                status = resp.status
                charset = resp.charset
                raw = await resp.read()
        except TimeoutError as exc:
            raise GeolocationTimeoutError(f"No position from {self._url} within {self._timeout_s}s") from exc
        except aiohttp.ClientError as exc:
            raise GeolocationPositionUnavailableError(f"Geolocation request failed: {exc}") from exc

        if status in (401, 403):
            raise GeolocationPermissionDeniedError(f"Geolocation service refused the request (HTTP {status})")
        if status != 200:
            raise GeolocationPositionUnavailableError(f"HTTP {status} from geolocation service")

        try:
            text = decode_body(raw, charset)
        except (UnicodeDecodeError, LookupError) as exc:
            raise GeolocationPositionUnavailableError(f"Undecodable geolocation response: {exc}") from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise GeolocationPositionUnavailableError(f"Invalid JSON from geolocation service: {text[:200]}") from exc

        _logger.debug("Geolocation response: %s", redact_for_log(body))

        if not isinstance(body, dict) or body.get("error"):
            reason = body.get("reason") if isinstance(body, dict) else None
            raise GeolocationPositionUnavailableError(f"Geolocation service reported an error: {reason or body!r}")

        try:
            return Location.model_validate(body)
        except ValidationError as exc:
            raise GeolocationPositionUnavailableError("Geolocation response carries no coordinates") from exc

"""Client configuration for pydust."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pydust._constants import (
    BASE_URL,
    DEFAULT_LATITUDE,
    DEFAULT_LONGITUDE,
    GEOLOCATION_URL,
    TREES_RESOURCE,
)
from pydust.exceptions import DustConfigError


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise DustConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class DustConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        DUST API base URL (no trailing slash).
    trees_resource : str
        Resource name of the tree listing endpoint.
    request_timeout : float
        Total timeout in seconds for a single API request.
    default_latitude : float
        Placeholder latitude held by the location store until the
        first successful geolocation fix.
    default_longitude : float
        Placeholder longitude, see ``default_latitude``.
    geolocation_url : str
        JSON endpoint used by :class:`~pydust.geolocation.IpGeolocationProvider`.
    geolocation_timeout : float
        Seconds to wait for a geolocation answer before giving up.
    """

    base_url: str = BASE_URL
    trees_resource: str = TREES_RESOURCE
    request_timeout: float = 10.0
    default_latitude: float = DEFAULT_LATITUDE
    default_longitude: float = DEFAULT_LONGITUDE
    geolocation_url: str = GEOLOCATION_URL
    geolocation_timeout: float = 10.0

    @classmethod
    def from_env(cls, **overrides: Any) -> DustConfig:
        """Create configuration from environment variables.

        Reads optional ``DUST_*`` variables. Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        DustConfig
            Populated configuration.

        Raises
        ------
        DustConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "DUST_BASE_URL": "base_url",
            "DUST_TREES_RESOURCE": "trees_resource",
            "DUST_GEOLOCATION_URL": "geolocation_url",
        }
        _ENV_FLOAT_MAP = {
            "DUST_REQUEST_TIMEOUT": "request_timeout",
            "DUST_DEFAULT_LATITUDE": "default_latitude",
            "DUST_DEFAULT_LONGITUDE": "default_longitude",
            "DUST_GEOLOCATION_TIMEOUT": "geolocation_timeout",
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = val.rstrip("/") if field_name == "base_url" else val

        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

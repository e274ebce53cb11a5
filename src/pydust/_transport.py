"""HTTP transport for the DUST JSON API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pydust._constants import USER_AGENT
from pydust._redact import redact_for_log
from pydust.config import DustConfig
from pydust.exceptions import DustTransportError

_logger = logging.getLogger(__name__)


def decode_body(raw: bytes, charset: str | None) -> str:
    """Decode a response body; JSON defaults to UTF-8 when no charset is sent.

    Raises ``UnicodeDecodeError`` for bytes invalid in the charset and
    ``LookupError`` for an unknown charset name.
    """
    return raw.decode(charset or "utf-8")


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, endpoint: str, params: Mapping[str, Any] | None = None) -> Any:
        ...


class HttpTransport:
    """aiohttp-backed transport issuing JSON GET requests against ``config.base_url``."""

    def __init__(self, config: DustConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def get_json(self, endpoint: str, params: Mapping[str, Any] | None = None) -> Any:
        """GET *endpoint* and return the decoded JSON body.

        Raises
        ------
        DustTransportError
            On network errors, timeouts, non-200 statuses and bodies that
            are not valid JSON.
        """
        url = f"{self._config.base_url}{endpoint}"
        headers = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        query = {k: str(v) for k, v in params.items()} if params else None

        _logger.debug("GET %s params=%s", url, query)

        try:
            async with self._http.get(url, params=query, headers=headers, timeout=self._timeout) as resp:
                text = decode_body(await resp.read(), resp.charset)
                if resp.status != 200:
                    raise DustTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except DustTransportError:
            raise
        except (UnicodeDecodeError, LookupError) as exc:
            raise DustTransportError(
                f"Undecodable body from {endpoint}: {exc}",
                status_code=resp.status,
                endpoint=endpoint,
            ) from exc
        except TimeoutError as exc:
            raise DustTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise DustTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise DustTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                status_code=resp.status,
                endpoint=endpoint,
            ) from exc

        if _logger.isEnabledFor(logging.DEBUG):
            _logger.debug("Response from %s: %s", endpoint, redact_for_log(body))
        return body

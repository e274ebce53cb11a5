"""Tree listing endpoint.

Endpoint:
  - GET /{resource}  (``resource`` defaults to ``trees``)

The server answers with a paginated envelope whose ``data`` array holds
the trees of the requested page.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from pydust._transport import Transport
from pydust.config import DustConfig
from pydust.exceptions import DustApiError
from pydust.models.tree import TreePage

_logger = logging.getLogger(__name__)


def _parse_tree_page(endpoint: str, body: Any) -> TreePage:
    if not isinstance(body, dict) or not isinstance(body.get("data"), list):
        raise DustApiError(f"Missing 'data' array in response from {endpoint}", endpoint=endpoint)
    try:
        return TreePage.model_validate(body)
    except ValidationError as exc:
        raise DustApiError(
            f"Malformed tree payload from {endpoint}: {exc.error_count()} validation error(s)",
            endpoint=endpoint,
        ) from exc


async def fetch_tree_page(
    config: DustConfig,
    transport: Transport,
    page: int | None = None,
) -> TreePage:
    """Fetch one page of trees.

    Parameters
    ----------
    config : DustConfig
        Client configuration (supplies the resource name).
    transport : Transport
        Transport used for the request.
    page : int or None
        Page number to request; ``None`` lets the server pick its first page.

    Raises
    ------
    DustTransportError
        On HTTP-level failure.
    DustApiError
        If the payload is not a tree page.
    """
    endpoint = f"/{config.trees_resource}"
    params = {"page": page} if page is not None else None
    body = await transport.get_json(endpoint, params)
    tree_page = _parse_tree_page(endpoint, body)
    _logger.debug(
        "Fetched %d trees from %s (page=%s, has_more=%s)",
        len(tree_page.data),
        endpoint,
        page,
        tree_page.has_more,
    )
    return tree_page

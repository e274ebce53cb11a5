"""High-level async client wiring the DUST API, geolocation and state stores."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from pydust._api.trees import fetch_tree_page
from pydust._transport import HttpTransport
from pydust.config import DustConfig
from pydust.geolocation import GeolocationProvider, IpGeolocationProvider
from pydust.models.location import Location
from pydust.models.tree import Tree, TreePage
from pydust.state.closest import ClosestTreeResolver
from pydust.state.location import LocationStore
from pydust.state.trees import TreeStore

_logger = logging.getLogger(__name__)


class DustClient:
    """Async client for the DUST tree API.

    Usage::

        async with DustClient(config, geolocation=provider) as client:
            client.mount()
            await client.wait_settled()
            print(client.closest_tree)

    Parameters
    ----------
    config : DustConfig or None
        Client configuration; defaults to ``DustConfig.from_env()``.
    session : aiohttp.ClientSession or None
        Externally owned HTTP session. When omitted the client creates
        and closes its own.
    geolocation : GeolocationProvider or None
        Position source. ``None`` means the host has no geolocation
        capability, unless ``ip_geolocation`` is set.
    ip_geolocation : bool
        Use :class:`IpGeolocationProvider` over the client's HTTP session
        when no explicit provider is given.
    on_closest_tree : callable or None
        Called with the nearest tree (or ``None``) after every change of
        either store.
    """

    def __init__(
        self,
        config: DustConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        geolocation: GeolocationProvider | None = None,
        ip_geolocation: bool = False,
        on_closest_tree: Callable[[Tree | None], None] | None = None,
    ) -> None:
        self._config = config if config is not None else DustConfig.from_env()
        self._external_session = session is not None
        self._http_session = session
        self._geolocation = geolocation
        self._ip_geolocation = ip_geolocation
        self._on_closest_tree = on_closest_tree
        self._transport: HttpTransport | None = None
        self._trees: TreeStore | None = None
        self._location: LocationStore | None = None
        self._resolver: ClosestTreeResolver | None = None
        self._pending: list[asyncio.Task[None]] = []

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> DustClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = HttpTransport(self._config, self._http_session)

        provider = self._geolocation
        if provider is None and self._ip_geolocation:
            provider = IpGeolocationProvider(self._config, self._http_session)

        self._trees = TreeStore(self._config, self._transport)
        self._location = LocationStore(
            provider,
            default_location=Location(
                latitude=self._config.default_latitude,
                longitude=self._config.default_longitude,
            ),
        )
        self._resolver = ClosestTreeResolver(self._trees, self._location)
        if self._on_closest_tree is not None:
            self._resolver.subscribe(self._on_closest_tree)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        for task in self._pending:
            if not task.done():
                task.cancel()
        for task in self._pending:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._pending.clear()

        if self._resolver is not None:
            self._resolver.close()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def trees(self) -> TreeStore:
        if self._trees is None:
            raise RuntimeError("Client not initialized; use within 'async with DustClient(...)'")
        return self._trees

    @property
    def location(self) -> LocationStore:
        if self._location is None:
            raise RuntimeError("Client not initialized; use within 'async with DustClient(...)'")
        return self._location

    @property
    def resolver(self) -> ClosestTreeResolver:
        if self._resolver is None:
            raise RuntimeError("Client not initialized; use within 'async with DustClient(...)'")
        return self._resolver

    @property
    def closest_tree(self) -> Tree | None:
        """Nearest tree right now, ``None`` when it cannot be decided."""
        return self.resolver.closest

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def mount(self) -> list[asyncio.Task[None]]:
        """Start the tree fetch and the location request side by side.

        Neither waits for the other. Returns the started tasks (the location
        task is absent when no geolocation capability is available).
        """
        started = [self.trees.start_fetch()]
        locate_task = self.location.locate_user()
        if locate_task is not None:
            started.append(locate_task)
        self._pending = [t for t in self._pending if not t.done()] + started
        _logger.debug("Mounted: %d background task(s) started", len(started))
        return started

    async def wait_settled(self) -> None:
        """Wait for every task started by :meth:`mount` to finish."""
        pending = list(self._pending)
        if pending:
            await asyncio.gather(*pending)
        self._pending = [t for t in self._pending if not t.done()]

    async def get_trees(self, page: int | None = None) -> TreePage:
        """Fetch one page of trees directly, bypassing the store.

        Unlike the store, errors are raised to the caller.
        """
        if self._transport is None:
            raise RuntimeError("Client not initialized; use within 'async with DustClient(...)'")
        return await fetch_tree_page(self._config, self._transport, page=page)

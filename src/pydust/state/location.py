"""User location store."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict

from pydust.exceptions import GeolocationError
from pydust.geolocation import GeolocationProvider
from pydust.models.location import Location
from pydust.state.observable import Observable

_logger = logging.getLogger(__name__)


class UserLocationState(BaseModel):
    """Snapshot of the location store.

    ``location`` holds a placeholder until the first successful fix and may
    hold a stale fix after a later failure. Only ``locatable`` says whether
    it can be trusted.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    location: Location
    locatable: bool = False
    version: int = 0


class LocationStore(Observable[UserLocationState]):
    """Holds the user's location and whether it was ever obtained.

    Each :meth:`locate_user` call issues one request; there is no continuous
    watch. Overlapping requests are not deduplicated and the last one to
    settle wins.
    """

    def __init__(self, provider: GeolocationProvider | None, *, default_location: Location) -> None:
        super().__init__()
        self._provider = provider
        self._state = UserLocationState(location=default_location)

    @property
    def state(self) -> UserLocationState:
        return self._state

    @property
    def location(self) -> Location:
        return self._state.location

    @property
    def locatable(self) -> bool:
        return self._state.locatable

    def _commit(self, **changes: Any) -> None:
        changes["version"] = self._state.version + 1
        self._state = self._state.model_copy(update=changes)
        self._notify(self._state)

    def locate_user(self) -> asyncio.Task[None] | None:
        """Request the user's position once.

        Returns ``None`` without issuing a request when no geolocation
        capability is available; ``locatable`` is cleared in that case.
        Otherwise returns the task performing the request.
        """
        provider = self._provider
        if provider is None or not provider.available:
            _logger.info("Geolocation is not available on this host")
            if self._state.locatable:
                self._commit(locatable=False)
            return None

        loop = asyncio.get_running_loop()
        return loop.create_task(self._run_locate(provider), name="pydust-locate-user")

    async def locate(self) -> None:
        """Request the user's position and wait until the store has settled."""
        task = self.locate_user()
        if task is not None:
            await task

    async def _run_locate(self, provider: GeolocationProvider) -> None:
        try:
            location = await provider.get_current_position()
        except GeolocationError as exc:
            _logger.warning("Could not locate user (%s): %s", type(exc).__name__, exc)
            if self._state.locatable:
                self._commit(locatable=False)
            return
        except Exception:
            # A stale fix must not stay trusted after any failed request.
            if self._state.locatable:
                self._commit(locatable=False)
            raise

        _logger.debug("User located at %.5f, %.5f", location.latitude, location.longitude)
        self._commit(location=location, locatable=True)

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

import pytest

from pydust.config import DustConfig
from pydust.exceptions import DustTransportError, GeolocationPermissionDeniedError
from pydust.geolocation import StaticGeolocationProvider
from pydust.models.location import Location
from pydust.models.tree import Tree
from pydust.state.closest import ClosestTreeResolver, closest_tree
from pydust.state.location import LocationStore, UserLocationState
from pydust.state.trees import TreeCollectionState, TreeStore

PLACEHOLDER = Location(latitude=51.0, longitude=3.0)


def _tree(tree_id: str, lat: float, lon: float) -> Tree:
    return Tree(id=tree_id, name=tree_id, location=Location(latitude=lat, longitude=lon))


def _payload(*trees: tuple[str, float, float]) -> dict[str, Any]:
    return {
        "data": [
            {"id": tree_id, "name": tree_id, "location": {"latitude": lat, "longitude": lon}}
            for tree_id, lat, lon in trees
        ]
    }


class GatedTransport:
    def __init__(self) -> None:
        self.release = asyncio.Event()
        self.body: Any = None
        self.error: Exception | None = None

    async def get_json(self, endpoint: str, params: Mapping[str, Any] | None = None) -> Any:
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.body


class GatedProvider:
    def __init__(self, result: Location | Exception, *, available: bool = True) -> None:
        self.release = asyncio.Event()
        self._result = result
        self._available = available

    @property
    def available(self) -> bool:
        return self._available

    async def get_current_position(self) -> Location:
        await self.release.wait()
        if isinstance(self._result, Exception):
            raise self._result
        return self._result


def _wire(
    body: Any, position: Location | Exception, *, available: bool = True
) -> tuple[GatedTransport, GatedProvider, TreeStore, LocationStore, ClosestTreeResolver]:
    transport = GatedTransport()
    transport.body = body
    provider = GatedProvider(position, available=available)
    trees = TreeStore(DustConfig(), transport)
    location = LocationStore(provider, default_location=PLACEHOLDER)
    return transport, provider, trees, location, ClosestTreeResolver(trees, location)


# ------------------------------------------------------------------
# Pure computation
# ------------------------------------------------------------------


class TestClosestTreeFunction:
    TREES = (_tree("A", 0, 0), _tree("B", 1, 1))

    def test_scenario_nearest(self) -> None:
        result = closest_tree(
            TreeCollectionState(trees=self.TREES, loading=False),
            UserLocationState(location=Location(latitude=0.1, longitude=0.1), locatable=True),
        )
        assert result is not None
        assert result.id == "A"

    def test_scenario_exact_tie(self) -> None:
        result = closest_tree(
            TreeCollectionState(trees=(_tree("A", 0, 0), _tree("B", 0, 0))),
            UserLocationState(location=Location(latitude=0, longitude=0), locatable=True),
        )
        assert result is not None
        assert result.id == "A"

    def test_none_while_loading(self) -> None:
        result = closest_tree(
            TreeCollectionState(trees=self.TREES, loading=True),
            UserLocationState(location=Location(latitude=0, longitude=0), locatable=True),
        )
        assert result is None

    def test_none_when_not_locatable(self) -> None:
        # The placeholder is a real coordinate, but must not be used.
        result = closest_tree(
            TreeCollectionState(trees=self.TREES),
            UserLocationState(location=Location(latitude=0, longitude=0), locatable=False),
        )
        assert result is None

    def test_none_without_trees(self) -> None:
        result = closest_tree(
            TreeCollectionState(trees=()),
            UserLocationState(location=Location(latitude=0, longitude=0), locatable=True),
        )
        assert result is None


# ------------------------------------------------------------------
# Resolver over live stores
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_neither_resolved_yields_none() -> None:
    transport, provider, trees, location, resolver = _wire(_payload(("A", 0, 0)), Location(latitude=0, longitude=0))
    fetch = trees.start_fetch()
    locate = location.locate_user()
    await asyncio.sleep(0)

    assert resolver.closest is None

    transport.release.set()
    provider.release.set()
    await asyncio.gather(fetch, locate)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_fetch_first_then_position() -> None:
    transport, provider, trees, location, resolver = _wire(
        _payload(("A", 0, 0), ("B", 1, 1)), Location(latitude=0.9, longitude=0.9)
    )
    fetch = trees.start_fetch()
    locate = location.locate_user()
    assert locate is not None

    transport.release.set()
    await fetch
    assert resolver.closest is None

    provider.release.set()
    await locate
    closest = resolver.closest
    assert closest is not None
    assert closest.id == "B"


@pytest.mark.asyncio
async def test_position_first_then_fetch() -> None:
    transport, provider, trees, location, resolver = _wire(
        _payload(("A", 0, 0), ("B", 1, 1)), Location(latitude=0.1, longitude=0.1)
    )
    fetch = trees.start_fetch()
    locate = location.locate_user()
    assert locate is not None

    provider.release.set()
    await locate
    assert location.locatable is True
    assert resolver.closest is None

    transport.release.set()
    await fetch
    closest = resolver.closest
    assert closest is not None
    assert closest.id == "A"


@pytest.mark.asyncio
async def test_interleaved_completion() -> None:
    transport, provider, trees, location, resolver = _wire(
        _payload(("A", 0, 0), ("B", 1, 1)), Location(latitude=0.1, longitude=0.1)
    )
    fetch = trees.start_fetch()
    locate = location.locate_user()
    transport.release.set()
    provider.release.set()
    await asyncio.gather(fetch, locate)  # type: ignore[arg-type]

    closest = resolver.closest
    assert closest is not None
    assert closest.id == "A"


@pytest.mark.asyncio
async def test_refetch_hides_result_while_loading() -> None:
    transport, provider, trees, location, resolver = _wire(_payload(("A", 0, 0)), Location(latitude=0, longitude=0))
    transport.release.set()
    provider.release.set()
    await trees.fetch_trees()
    await location.locate()
    assert resolver.closest is not None

    transport.release.clear()
    transport.body = _payload(("C", 0, 0))
    fetch = trees.start_fetch()
    assert resolver.closest is None

    transport.release.set()
    await fetch
    closest = resolver.closest
    assert closest is not None
    assert closest.id == "C"


@pytest.mark.asyncio
async def test_failed_refetch_restores_previous_result() -> None:
    transport, provider, trees, location, resolver = _wire(_payload(("A", 0, 0)), Location(latitude=0, longitude=0))
    transport.release.set()
    provider.release.set()
    await trees.fetch_trees()
    await location.locate()

    transport.error = DustTransportError("offline", endpoint="/trees")
    await trees.fetch_trees()

    closest = resolver.closest
    assert closest is not None
    assert closest.id == "A"


@pytest.mark.asyncio
async def test_malformed_entry_does_not_hide_valid_trees() -> None:
    body = _payload(("far", 5, 5), ("near", 1, 1))
    body["data"].insert(1, {"id": "broken", "name": "broken", "location": {"latitude": "north"}})
    body["data"].append("garbage")
    transport, provider, trees, location, resolver = _wire(body, Location(latitude=0, longitude=0))
    transport.release.set()
    provider.release.set()
    await trees.fetch_trees()
    await location.locate()

    assert [t.id for t in trees.trees] == ["far", "broken", "near", ""]
    closest = resolver.closest
    assert closest is not None
    assert closest.id == "near"


@pytest.mark.asyncio
async def test_denied_position_yields_none() -> None:
    transport, provider, trees, location, resolver = _wire(
        _payload(("A", 0, 0)), GeolocationPermissionDeniedError("denied")
    )
    transport.release.set()
    provider.release.set()
    await trees.fetch_trees()
    await location.locate()

    assert resolver.closest is None


@pytest.mark.asyncio
async def test_no_capability_yields_none() -> None:
    transport, _provider, trees, location, resolver = _wire(
        _payload(("A", 0, 0)), Location(latitude=0, longitude=0), available=False
    )
    transport.release.set()
    await trees.fetch_trees()
    assert location.locate_user() is None

    assert resolver.closest is None


@pytest.mark.asyncio
async def test_subscribers_receive_fresh_value_after_each_change() -> None:
    transport, provider, trees, location, resolver = _wire(
        _payload(("A", 0, 0), ("B", 1, 1)), Location(latitude=1, longitude=1)
    )
    seen: list[str | None] = []
    resolver.subscribe(lambda tree: seen.append(tree.id if tree is not None else None))

    transport.release.set()
    provider.release.set()
    await trees.fetch_trees()
    await location.locate()

    # loading on, loading off with trees, located.
    assert seen == [None, None, "B"]


@pytest.mark.asyncio
async def test_memo_is_keyed_on_store_versions() -> None:
    transport, provider, trees, location, resolver = _wire(_payload(("A", 0, 0)), Location(latitude=0, longitude=0))
    transport.release.set()
    provider.release.set()
    await trees.fetch_trees()
    await location.locate()

    first = resolver.closest
    assert resolver.closest is first

    transport.body = _payload(("Z", 0, 0))
    await trees.fetch_trees()
    second = resolver.closest
    assert second is not None
    assert second.id == "Z"


def test_close_detaches_from_stores() -> None:
    trees = TreeStore(DustConfig(), GatedTransport())
    location = LocationStore(StaticGeolocationProvider(available=False), default_location=PLACEHOLDER)
    resolver = ClosestTreeResolver(trees, location)
    seen: list[Tree | None] = []
    resolver.subscribe(seen.append)

    resolver.close()
    location._commit(locatable=True)  # noqa: SLF001

    assert seen == []

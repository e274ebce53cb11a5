"""Nearest-tree value derived from the tree and location stores."""

from __future__ import annotations

import logging
from collections.abc import Callable

from pydust.geo import nearest_tree
from pydust.models.tree import Tree
from pydust.state.location import LocationStore, UserLocationState
from pydust.state.observable import Observable
from pydust.state.trees import TreeCollectionState, TreeStore

_logger = logging.getLogger(__name__)


def closest_tree(trees: TreeCollectionState, location: UserLocationState) -> Tree | None:
    """Pure nearest-tree computation over two snapshots.

    ``None`` when the user is not locatable, trees are loading, or there are
    no trees. Otherwise the nearest tree by planar distance, first one wins
    on ties.
    """
    if not location.locatable or trees.loading or not trees.trees:
        return None
    return nearest_tree(trees.trees, location.location)


class ClosestTreeResolver(Observable[Tree | None]):
    """Keeps :func:`closest_tree` in sync with both stores.

    The result is memoized on the pair of store versions, so a read always
    reflects the latest committed state of both inputs. Subscribers are
    called with the fresh value after every upstream change.
    """

    def __init__(self, trees: TreeStore, location: LocationStore) -> None:
        super().__init__()
        self._trees = trees
        self._location = location
        self._memo_key: tuple[int, int] | None = None
        self._memo: Tree | None = None
        self._unsubscribers: list[Callable[[], None]] = [
            trees.subscribe(self._on_upstream_change),
            location.subscribe(self._on_upstream_change),
        ]

    @property
    def closest(self) -> Tree | None:
        trees_state = self._trees.state
        location_state = self._location.state
        key = (trees_state.version, location_state.version)
        if key != self._memo_key:
            self._memo = closest_tree(trees_state, location_state)
            self._memo_key = key
            _logger.debug("Closest tree recomputed: %s", self._memo.id if self._memo is not None else None)
        return self._memo

    def _on_upstream_change(self, _state: object) -> None:
        self._notify(self.closest)

    def close(self) -> None:
        """Stop following the stores."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

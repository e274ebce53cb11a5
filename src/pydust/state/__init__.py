"""State layer.

Holds the two independently updated state sources (trees, user location)
and the nearest-tree value derived from them. Stores are written only by
their own trigger operation; everything else reads snapshots or subscribes.
"""

from pydust.state.closest import ClosestTreeResolver, closest_tree
from pydust.state.location import LocationStore, UserLocationState
from pydust.state.observable import Observable
from pydust.state.trees import TreeCollectionState, TreeStore

__all__ = [
    "ClosestTreeResolver",
    "LocationStore",
    "Observable",
    "TreeCollectionState",
    "TreeStore",
    "UserLocationState",
    "closest_tree",
]

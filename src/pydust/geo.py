"""Planar distance helpers.

Degrees are treated as if they lay on a flat plane. This is only a
usable approximation over small regional extents; it is not a geodesic
distance and must not be reported to users as one.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from pydust.models.location import Location
from pydust.models.tree import Tree


def planar_distance(a: Location, b: Location) -> float:
    """Euclidean distance between two coordinates, in raw degrees."""
    return math.sqrt((a.longitude - b.longitude) ** 2 + (a.latitude - b.latitude) ** 2)


def nearest_tree(trees: Iterable[Tree], location: Location) -> Tree | None:
    """Return the tree closest to *location*, or ``None`` for no trees.

    Trees without a readable position are skipped. The rest are scanned
    in order and the current best is only replaced on a strictly smaller
    distance, so the first of several equidistant trees wins.
    """
    best: Tree | None = None
    best_distance = math.inf
    for tree in trees:
        if tree.location is None:
            continue
        distance = planar_distance(tree.location, location)
        if best is None or distance < best_distance:
            best = tree
            best_distance = distance
    return best

# tree_palette/search.py
from __future__ import annotations

"""
Exact single nearest-neighbour search over a ColorTree.

1. descend from the start node to a leaf, recording the path;
2. pop the path, keeping the closest colour seen so far;
3. at each popped node, if the splitting plane is closer than the best
   distance, search the opposite child with the current best as seed.

Ties keep the first candidate found while backtracking.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .constants import MAX_DISTANCE, NO_NODE
from .core_types import ColorPoint, PaletteColor
from .distance import squared_distance, squared_plane_distance
from .errors import InvalidDimension, InvalidQuery
from .kdtree import ColorTree


@dataclass
class _Best:
    color: Optional[PaletteColor] = None
    distance: int = MAX_DISTANCE


def nearest_neighbour(
    query: Optional[ColorPoint], tree: ColorTree
) -> Tuple[Optional[PaletteColor], int]:
    """
    Closest palette colour to query and its squared distance.

    Returns (None, MAX_DISTANCE) for an empty tree. A missing query against a
    non-empty tree raises InvalidQuery; a query whose dimensionality differs
    from the tree's raises InvalidDimension.
    """
    if tree.is_empty:
        return None, MAX_DISTANCE
    if query is None:
        raise InvalidQuery("nil query point for a non-empty tree")
    if query.dimensions != tree.dimensions:
        raise InvalidDimension(
            f"query has {query.dimensions} dimensions, tree has {tree.dimensions}"
        )

    best = _Best()
    _search_from(query, tree, tree.root, best)
    return best.color, best.distance


def _search_from(query: ColorPoint, tree: ColorTree, start: int, best: _Best) -> None:
    path: List[int] = []
    node = start

    # move down
    while node != NO_NODE:
        path.append(node)
        axis = tree.axes[node]
        if query.dimension(axis) < tree.colors[node].dimension(axis):
            node = tree.left[node]
        else:
            node = tree.right[node]

    # move up
    while path:
        node = path.pop()
        color = tree.colors[node]
        distance = squared_distance(query, color)
        if distance < best.distance:
            best.color, best.distance = color, distance

        axis = tree.axes[node]
        plane = color.dimension(axis)
        if squared_plane_distance(query, plane, axis) < best.distance:
            if query.dimension(axis) < plane:
                other = tree.right[node]
            else:
                other = tree.left[node]
            if other != NO_NODE:
                _search_from(query, tree, other, best)


__all__ = ["nearest_neighbour"]

# tree_palette/distance.py
from __future__ import annotations

"""
Squared Euclidean distance on 16-bit channels with uint32 arithmetic.

Each per-axis square is shifted right by 2 before summing, so four channels of
0xffff never overflow a uint32. The shift is applied to every comparison, so
ordering is preserved; absolute values are a quarter of the naive distance
(minus truncation) and should not be compared with externally computed ones.
"""

from typing import Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from .constants import MAX_DISTANCE, SQ_DIFF_SHIFT, UINT32_MASK
from .core_types import ColorPoint, PaletteColor
from .errors import InvalidDimension


def sq_diff(x: int, y: int) -> int:
    """
    Squared difference of x and y, shifted by 2.

    The subtraction wraps modulo 2**32, so x < y gives a huge d; squaring
    modulo 2**32 yields the same value as (y - x)**2 for 16-bit inputs.
    """
    d = (x - y) & UINT32_MASK
    return ((d * d) & UINT32_MASK) >> SQ_DIFF_SHIFT


def squared_distance(p1: ColorPoint, p2: ColorPoint) -> int:
    dims = p1.dimensions
    if p2.dimensions != dims:
        raise InvalidDimension(
            f"dimension mismatch: {dims} vs {p2.dimensions}"
        )
    total = 0
    for i in range(dims):
        total += sq_diff(p1.dimension(i), p2.dimension(i))
    return total & UINT32_MASK


def squared_plane_distance(p: ColorPoint, plane_position: int, axis: int) -> int:
    """Distance from p to the splitting plane at plane_position along axis."""
    return sq_diff(plane_position, p.dimension(axis))


# Vectorized forms


def point_array(points: Sequence[ColorPoint]) -> NDArray[np.uint32]:
    """Stack points into a uint32 array [N, d]."""
    if not points:
        return np.zeros((0, 0), dtype=np.uint32)
    dims = points[0].dimensions
    out = np.empty((len(points), dims), dtype=np.uint32)
    for row, p in enumerate(points):
        for i in range(dims):
            out[row, i] = p.dimension(i)
    return out


def squared_distances(
    query: ColorPoint, points: NDArray[np.uint32]
) -> NDArray[np.uint32]:
    """
    squared_distance(query, row) for every row of a uint32 [N, d] array.
    Same wrap-around arithmetic as sq_diff.
    """
    if points.shape[0] == 0:
        return np.zeros((0,), dtype=np.uint32)
    dims = points.shape[1]
    if query.dimensions != dims:
        raise InvalidDimension(f"dimension mismatch: {query.dimensions} vs {dims}")
    q = np.array([query.dimension(i) for i in range(dims)], dtype=np.uint32)
    d = points - q  # wraps in uint32
    sq = (d * d) >> np.uint32(SQ_DIFF_SHIFT)
    return np.sum(sq, axis=1, dtype=np.uint32)


def linear_nearest(
    query: ColorPoint, colors: Sequence[PaletteColor]
) -> Tuple[Optional[PaletteColor], int]:
    """
    Reference linear scan. Returns the first colour with the smallest distance,
    or (None, MAX_DISTANCE) for an empty sequence.
    """
    if not colors:
        return None, MAX_DISTANCE
    dist = squared_distances(query, point_array(colors))
    best = int(np.argmin(dist))
    return colors[best], int(dist[best])


__all__ = [
    "sq_diff",
    "squared_distance",
    "squared_plane_distance",
    "point_array",
    "squared_distances",
    "linear_nearest",
]

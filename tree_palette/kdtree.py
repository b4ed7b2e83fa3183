# tree_palette/kdtree.py
from __future__ import annotations

"""
Balanced k-d tree over palette colours.

Nodes live in an arena of parallel tuples addressed by position. Each node
holds its colour, split axis and the positions of its children (NO_NODE when
absent). The tree is built once and never mutated.

See: https://en.wikipedia.org/wiki/K-d_tree
"""

from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple

from .constants import NO_NODE
from .core_types import PaletteColor


@dataclass(frozen=True)
class ColorTree:
    """Immutable node arena. root == NO_NODE for an empty tree."""

    colors: Tuple[PaletteColor, ...] = ()
    axes: Tuple[int, ...] = ()
    left: Tuple[int, ...] = ()
    right: Tuple[int, ...] = ()
    root: int = NO_NODE
    dimensions: int = 0

    def __len__(self) -> int:
        return len(self.colors)

    @property
    def is_empty(self) -> bool:
        return self.root == NO_NODE

    def is_leaf(self, node: int) -> bool:
        return self.left[node] == NO_NODE and self.right[node] == NO_NODE

    def height(self) -> int:
        """Number of nodes on the longest root-to-leaf path (0 when empty)."""
        if self.is_empty:
            return 0
        best = 0
        stack: List[Tuple[int, int]] = [(self.root, 1)]
        while stack:
            node, depth = stack.pop()
            best = max(best, depth)
            for child in (self.left[node], self.right[node]):
                if child != NO_NODE:
                    stack.append((child, depth + 1))
        return best

    def walk(self) -> Iterator[Tuple[int, PaletteColor, int]]:
        """Pre-order (position, colour, axis)."""
        if self.is_empty:
            return
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node, self.colors[node], self.axes[node]
            if self.right[node] != NO_NODE:
                stack.append(self.right[node])
            if self.left[node] != NO_NODE:
                stack.append(self.left[node])


def build_tree(points: Sequence[PaletteColor], axis: int = 0) -> ColorTree:
    """
    Build a balanced tree from points, splitting first on `axis`.

    At each level the points are stable-sorted on the current axis and the
    element at len // 2 becomes the node; the halves either side recurse on
    the next axis. Duplicates are kept. The caller's sequence is not reordered.
    """
    colors: List[PaletteColor] = []
    axes: List[int] = []
    left: List[int] = []
    right: List[int] = []

    def _add(color: PaletteColor, node_axis: int) -> int:
        colors.append(color)
        axes.append(node_axis)
        left.append(NO_NODE)
        right.append(NO_NODE)
        return len(colors) - 1

    def _build(chunk: List[PaletteColor], node_axis: int) -> int:
        if not chunk:
            return NO_NODE
        if len(chunk) == 1:
            return _add(chunk[0], node_axis)

        chunk = sorted(chunk, key=lambda p: p.dimension(node_axis))
        mid = len(chunk) // 2
        node = _add(chunk[mid], node_axis)
        next_axis = (node_axis + 1) % chunk[mid].dimensions
        left[node] = _build(chunk[:mid], next_axis)
        right[node] = _build(chunk[mid + 1 :], next_axis)
        return node

    root = _build(list(points), axis)
    return ColorTree(
        colors=tuple(colors),
        axes=tuple(axes),
        left=tuple(left),
        right=tuple(right),
        root=root,
        dimensions=colors[0].dimensions if colors else 0,
    )


__all__ = ["ColorTree", "build_tree"]

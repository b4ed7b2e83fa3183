# tree_palette/palette.py
from __future__ import annotations

"""
Indexed colour palette backed by a k-d tree.

Closeness is spatial closeness in RGB (alpha=False) or RGBA (alpha=True)
space. A Palette is immutable: the tree is built once in the constructor and
only read afterwards, so concurrent lookups from several threads are safe.

Quick start:
  from tree_palette import Palette, PaletteColor
  palette = Palette([PaletteColor.from_rgb8(255, 211, 92, 1, "DANDELION"), ...])
  palette.convert_color(ColorRGBA.from_rgb8(250, 200, 90)).index
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .constants import MAX_CHANNEL, RGB_DIMENSIONS, RGBA_DIMENSIONS
from .core_types import (
    ColorPoint,
    ColorRGBA,
    PaletteColor,
    coerce_to_color,
    scale_8_to_16,
)
from .kdtree import ColorTree, build_tree
from .search import nearest_neighbour


class Palette:
    """Fixed set of PaletteColor values with nearest-colour lookup."""

    def __init__(self, colors: Iterable[PaletteColor], alpha: bool = False) -> None:
        self._alpha = bool(alpha)
        self._colors: Tuple[PaletteColor, ...] = tuple(colors)
        expected = RGBA_DIMENSIONS if self._alpha else RGB_DIMENSIONS

        lookup: Dict[int, PaletteColor] = {}
        for c in self._colors:
            if c.dimensions != expected:
                raise ValueError(
                    f"palette colour {c} has {c.dimensions} dimensions, "
                    f"expected {expected} for alpha={self._alpha}"
                )
            if c.index in lookup:
                raise ValueError(f"duplicate palette index {c.index}")
            lookup[c.index] = c
        self._lookup = lookup
        self._tree: ColorTree = build_tree(self._colors, 0)

    # Read-only views

    @property
    def alpha(self) -> bool:
        return self._alpha

    @property
    def colors(self) -> Tuple[PaletteColor, ...]:
        """Colours in construction order."""
        return self._colors

    @property
    def tree(self) -> ColorTree:
        return self._tree

    def __len__(self) -> int:
        return len(self._colors)

    def __repr__(self) -> str:
        return f"Palette(colors={len(self)}, alpha={self._alpha})"

    def lookup(self, index: int) -> Optional[PaletteColor]:
        """Palette colour with the given index, or None."""
        return self._lookup.get(index)

    def describe(self) -> List[Tuple[str, object]]:
        """(name, value) pairs for config/debug lines."""
        return [
            ("Colours", len(self)),
            ("Alpha", self._alpha),
            ("Tree height", self._tree.height()),
        ]

    # Lookups

    def nearest(
        self, query: Optional[ColorPoint]
    ) -> Tuple[Optional[PaletteColor], Optional[int]]:
        """(closest colour, squared distance), or (None, None) when there is no match."""
        if query is None or self._tree.is_empty:
            return None, None
        return nearest_neighbour(query, self._tree)

    def convert_color(self, query: Optional[ColorPoint]) -> Optional[PaletteColor]:
        """Closest palette colour to query; None for a missing query or empty palette."""
        color, _ = self.nearest(query)
        return color

    def convert(
        self, color: Union[ColorRGBA, PaletteColor, Sequence[int], None]
    ) -> Optional[ColorRGBA]:
        """
        Colour-model conversion: any 16-bit RGBA colour to the closest palette
        colour as a plain ColorRGBA. Alpha is opaque when the palette ignores it.
        """
        if color is None:
            return None
        query = coerce_to_color(color, self._alpha)
        result = self.convert_color(query)
        if result is None:
            return None
        r, g, b = result.dimension(0), result.dimension(1), result.dimension(2)
        a = result.dimension(3) if self._alpha else MAX_CHANNEL
        return ColorRGBA(r, g, b, a, self._alpha)

    # Builders

    @classmethod
    def from_rgba(
        cls, colors: Iterable[Sequence[int]], alpha: bool = False
    ) -> "Palette":
        """
        Build from plain 8-bit (r, g, b[, a]) tuples; each colour's index is its
        position in `colors`.
        """
        nodes: List[PaletteColor] = []
        for i, c in enumerate(colors):
            channels = [scale_8_to_16(int(v)) for v in c[:4]]
            if len(channels) < 3:
                raise ValueError("sequence too small for RGB")
            a = channels[3] if len(channels) > 3 else MAX_CHANNEL
            nodes.append(
                PaletteColor(ColorRGBA(channels[0], channels[1], channels[2], a, alpha), i)
            )
        return cls(nodes, alpha)


__all__ = ["Palette"]

# tree_palette/__init__.py
"""
tree_palette package.

Purpose:
  Map any colour to the closest colour of a fixed palette using a k-d tree.
  See recolour.py for the CLI.

Public API:
  Palette          : immutable palette with convert_color / nearest / convert.
  PaletteColor     : indexed palette entry (16-bit RGB[A], index, name).
  ColorRGBA        : plain 16-bit colour, 3-D or 4-D depending on alpha_channel.
  build_tree       : balanced k-d tree construction.
  nearest_neighbour: exact branch-and-bound search over a tree.
  paletted         : image adapter (apply_palette, rank, rank_by_index).
  palette_data     : built-in palette and palette file loading.

Quick start:
  from tree_palette import ColorRGBA, construct_palette
  palette = construct_palette()
  palette.convert_color(ColorRGBA.from_rgb8(250, 200, 90)).name  # 'DANDELION'
"""

__version__ = "0.1.0"

from . import core_types
from . import distance
from . import kdtree
from . import search
from . import palette_data
from . import paletted
from . import utils

from .core_types import (
    ColorPoint,
    ColorRGBA,
    PaletteColor,
    new_opaque_color,
    new_opaque_palette_color,
    new_transparent_color,
    new_transparent_palette_color,
)
from .errors import InvalidDimension, InvalidQuery
from .kdtree import ColorTree, build_tree
from .palette import Palette
from .palette_data import DEFAULT_PALETTE, construct_palette, load_palette_file
from .paletted import PalettedImage, apply_palette, rank, rank_by_index
from .search import nearest_neighbour

__all__ = [
    "__version__",
    "core_types",
    "distance",
    "kdtree",
    "search",
    "palette_data",
    "paletted",
    "utils",
    "ColorPoint",
    "ColorRGBA",
    "PaletteColor",
    "new_opaque_color",
    "new_opaque_palette_color",
    "new_transparent_color",
    "new_transparent_palette_color",
    "InvalidDimension",
    "InvalidQuery",
    "ColorTree",
    "build_tree",
    "Palette",
    "DEFAULT_PALETTE",
    "construct_palette",
    "load_palette_file",
    "PalettedImage",
    "apply_palette",
    "rank",
    "rank_by_index",
    "nearest_neighbour",
]

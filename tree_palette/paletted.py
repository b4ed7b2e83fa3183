# tree_palette/paletted.py
from __future__ import annotations

"""
Image adapter: apply a Palette to an image and rank palette colours by use.

Provides:
  PalettedImage(palette, image)       lazy per-pixel view (at, color_index_at)
  index_map(palette, image, workers)  -> int64 [H,W] palette indexes
  apply_palette(palette, image)       -> RGBA Pillow image in palette colours
  rank(palette, image)                -> (colours by pixel count desc, {index: count})
  rank_by_index(palette, image)       -> (indexes by pixel count desc, {index: count})

Notes:
  - 8-bit channels are scaled to 16-bit before matching; alpha is straight.
  - The tree is queried once per unique colour, not once per pixel.
  - Equal counts keep first appearance in row-major order.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Tuple, Union

import numpy as np
from PIL import Image

from .constants import MAX_CHANNEL, SCALE_8_TO_16
from .core_types import ColorRGBA, IndexImage, PaletteColor, U8Image
from .image_io import image_to_rgba_array
from .palette import Palette
from .utils import (
    debug_log,
    format_seconds_compact,
    key_value_pairs_to_string,
    split_into_parts,
)

ImageLike = Union[Image.Image, np.ndarray]


def _pixel_query(pixel: np.ndarray, alpha: bool) -> ColorRGBA:
    r, g, b = (int(v) * SCALE_8_TO_16 for v in pixel[:3])
    a = int(pixel[3]) * SCALE_8_TO_16 if pixel.shape[0] > 3 else MAX_CHANNEL
    return ColorRGBA(r, g, b, a, alpha)


def _require_colours(palette: Palette) -> None:
    if len(palette) == 0:
        raise ValueError("cannot map an image onto an empty palette")


def _match_uniques(palette: Palette, uniques: np.ndarray, workers: int) -> np.ndarray:
    """Palette index for every unique pixel row."""
    out = np.empty((uniques.shape[0],), dtype=np.int64)

    def _run(span: Tuple[int, int]) -> None:
        start, end = span
        for i in range(start, end):
            match = palette.convert_color(_pixel_query(uniques[i], palette.alpha))
            out[i] = match.index  # type: ignore[union-attr]

    spans = split_into_parts(uniques.shape[0], workers)
    if workers <= 1 or len(spans) <= 1:
        for span in spans:
            _run(span)
    else:
        with ThreadPoolExecutor(max_workers=workers) as ex:
            list(ex.map(_run, spans))
    return out


def index_map(
    palette: Palette, image: ImageLike, workers: int = 1, debug: bool = False
) -> IndexImage:
    """Palette index of the nearest colour for every pixel, shape (H, W)."""
    _require_colours(palette)
    t0 = time.perf_counter()
    rgba = image_to_rgba_array(image)
    height, width = rgba.shape[:2]
    channels = 4 if palette.alpha else 3
    flat = rgba[..., :channels].reshape(-1, channels)
    if flat.shape[0] == 0:
        return np.zeros((height, width), dtype=np.int64)

    uniques, inverse = np.unique(flat, axis=0, return_inverse=True)
    matched = _match_uniques(palette, uniques, workers)
    indexes = matched[inverse.reshape(-1)].reshape(height, width)

    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Pixels", height * width),
                    ("Unique colours", int(uniques.shape[0])),
                    ("Workers", workers),
                    ("Match time", format_seconds_compact(time.perf_counter() - t0)),
                ]
            )
        )
    return indexes


def _palette_rgba8(palette: Palette) -> Dict[int, Tuple[int, int, int, int]]:
    out: Dict[int, Tuple[int, int, int, int]] = {}
    for c in palette.colors:
        r, g, b, a = c.rgba()
        out[c.index] = (
            r // SCALE_8_TO_16,
            g // SCALE_8_TO_16,
            b // SCALE_8_TO_16,
            a // SCALE_8_TO_16,
        )
    return out


def apply_palette_array(
    palette: Palette, image: ImageLike, workers: int = 1, debug: bool = False
) -> U8Image:
    """
    uint8 (H,W,4) array with every pixel replaced by its nearest palette colour.
    Source alpha is kept when the palette ignores alpha.
    """
    rgba = image_to_rgba_array(image)
    indexes = index_map(palette, rgba, workers=workers, debug=debug)
    table = _palette_rgba8(palette)

    ids = np.array(sorted(table), dtype=np.int64)
    colours = np.array([table[i] for i in ids.tolist()], dtype=np.uint8)
    pos = np.searchsorted(ids, indexes)
    out = colours[pos]
    if not palette.alpha:
        out[..., 3] = rgba[..., 3]
    return np.ascontiguousarray(out)


def apply_palette(
    palette: Palette, image: ImageLike, workers: int = 1, debug: bool = False
) -> Image.Image:
    """RGBA Pillow image using only palette colours."""
    return Image.fromarray(apply_palette_array(palette, image, workers, debug))


def rank_by_index(
    palette: Palette, image: ImageLike, workers: int = 1, debug: bool = False
) -> Tuple[List[int], Dict[int, int]]:
    """
    Palette indexes ordered by pixel count (most first) and a map of
    index -> pixel count. Indexes with no pixels are left out.
    """
    flat = index_map(palette, image, workers=workers, debug=debug).reshape(-1)
    if flat.size == 0:
        return [], {}
    values, first_seen, counts = np.unique(flat, return_index=True, return_counts=True)
    count: Dict[int, int] = {
        int(v): int(n) for v, n in zip(values.tolist(), counts.tolist())
    }
    order = sorted(
        zip(values.tolist(), first_seen.tolist(), counts.tolist()),
        key=lambda t: (-t[2], t[1]),
    )
    return [int(v) for v, _first, _n in order], count


def rank(
    palette: Palette, image: ImageLike, workers: int = 1, debug: bool = False
) -> Tuple[List[PaletteColor], Dict[int, int]]:
    """Like rank_by_index but returns the PaletteColor values."""
    order, count = rank_by_index(palette, image, workers=workers, debug=debug)
    return [palette.lookup(i) for i in order], count  # type: ignore[misc]


class PalettedImage:
    """A source image viewed through a palette, converted pixel by pixel."""

    def __init__(self, palette: Palette, image: ImageLike) -> None:
        self.palette = palette
        self._rgba = image_to_rgba_array(image)

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height), like Pillow."""
        return (self._rgba.shape[1], self._rgba.shape[0])

    def _query(self, x: int, y: int) -> ColorRGBA:
        return _pixel_query(self._rgba[y, x], self.palette.alpha)

    def at(self, x: int, y: int) -> ColorRGBA | None:
        return self.palette.convert(self._query(x, y))

    def color_index_at(self, x: int, y: int) -> int | None:
        match = self.palette.convert_color(self._query(x, y))
        return None if match is None else match.index

    def to_image(self, workers: int = 1) -> Image.Image:
        return apply_palette(self.palette, self._rgba, workers=workers)


__all__ = [
    "PalettedImage",
    "index_map",
    "apply_palette",
    "apply_palette_array",
    "rank",
    "rank_by_index",
]

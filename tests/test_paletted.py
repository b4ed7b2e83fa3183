from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from tree_palette import Palette, PaletteColor
from tree_palette.paletted import (
    PalettedImage,
    apply_palette,
    apply_palette_array,
    index_map,
    rank,
    rank_by_index,
)


@pytest.fixture
def palette():
    return Palette(
        [
            PaletteColor.from_rgb8(255, 211, 92, 1, "DANDELION"),
            PaletteColor.from_rgb8(255, 130, 1, 2, "DARK ORANGE"),
            PaletteColor.from_rgb8(1, 128, 181, 11, "PACIFIC BLUE"),
        ]
    )


def _image_2x2() -> np.ndarray:
    # three yellows and one orange
    return np.array(
        [
            [[250, 200, 90, 255], [255, 211, 92, 255]],
            [[255, 128, 0, 255], [240, 210, 100, 128]],
        ],
        dtype=np.uint8,
    )


def test_rank_2x2(palette):
    colours, count = rank(palette, _image_2x2())
    assert [c.index for c in colours] == [1, 2]
    assert count == {1: 3, 2: 1}


def test_rank_by_index_pillow_image(palette):
    img = Image.fromarray(_image_2x2())
    order, count = rank_by_index(palette, img)
    assert order == [1, 2]
    assert count == {1: 3, 2: 1}


def test_rank_ties_keep_first_appearance(palette):
    arr = np.array(
        [[[0, 130, 180, 255], [255, 128, 0, 255]]],
        dtype=np.uint8,
    )
    order, count = rank_by_index(palette, arr)
    assert order == [11, 2]
    assert count == {11: 1, 2: 1}


def test_index_map_threads_agree(palette):
    rng = np.random.default_rng(7)
    arr = rng.integers(0, 256, size=(16, 16, 4), dtype=np.uint8)
    single = index_map(palette, arr, workers=1)
    pooled = index_map(palette, arr, workers=4)
    assert single.shape == (16, 16)
    assert np.array_equal(single, pooled)
    assert set(np.unique(single).tolist()) <= {1, 2, 11}


def test_apply_palette_uses_only_palette_colours(palette):
    out = apply_palette_array(palette, _image_2x2())
    assert out.shape == (2, 2, 4)
    assert out[0, 0, :3].tolist() == [255, 211, 92]
    assert out[1, 0, :3].tolist() == [255, 130, 1]
    # alpha is not part of matching here, so the source alpha is kept
    assert out[1, 1, 3] == 128


def test_apply_palette_returns_rgba_image(palette):
    img = apply_palette(palette, Image.fromarray(_image_2x2()[..., :3]))
    assert img.mode == "RGBA"
    assert img.size == (2, 2)
    assert img.getpixel((1, 0)) == (255, 211, 92, 255)


def test_apply_palette_with_alpha_matching():
    p = Palette.from_rgba([(0, 0, 0, 0), (255, 255, 255, 255)], alpha=True)
    arr = np.array([[[10, 10, 10, 250], [250, 250, 250, 5]]], dtype=np.uint8)
    out = apply_palette_array(p, arr)
    # three dark channels outweigh the alpha gap
    assert out[0, 0].tolist() == [0, 0, 0, 0]
    assert out[0, 1].tolist() == [255, 255, 255, 255]
    assert index_map(p, arr).tolist() == [[0, 1]]


def test_paletted_image_view(palette):
    view = PalettedImage(palette, _image_2x2())
    assert view.size == (2, 2)
    assert view.color_index_at(0, 1) == 2
    assert view.at(0, 0).rgb8() == (255, 211, 92)
    assert view.to_image().size == (2, 2)


def test_empty_palette_rejected():
    with pytest.raises(ValueError):
        index_map(Palette([]), _image_2x2())

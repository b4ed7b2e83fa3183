from __future__ import annotations

import random
from concurrent.futures import ThreadPoolExecutor

import pytest

from tree_palette import (
    ColorRGBA,
    InvalidDimension,
    Palette,
    PaletteColor,
    new_opaque_palette_color,
    new_transparent_palette_color,
)
from tree_palette.constants import MAX_CHANNEL


@pytest.fixture
def three_colours():
    return Palette(
        [
            PaletteColor.from_rgb8(255, 211, 92, 1, "DANDELION"),
            PaletteColor.from_rgb8(255, 130, 1, 2, "DARK ORANGE"),
            PaletteColor.from_rgb8(1, 128, 181, 11, "PACIFIC BLUE"),
        ],
        alpha=False,
    )


def test_nearest_yellow(three_colours):
    assert three_colours.convert_color(ColorRGBA.from_rgb8(250, 200, 90)).index == 1


def test_nearest_blue(three_colours):
    assert three_colours.convert_color(ColorRGBA.from_rgb8(0, 130, 180)).index == 11


def test_missing_query_with_alpha_palette():
    p = Palette([new_transparent_palette_color(1, 2, 3, 4, 1)], alpha=True)
    assert p.convert_color(None) is None
    assert p.nearest(None) == (None, None)


def test_empty_palette():
    p = Palette([], alpha=True)
    assert len(p) == 0
    assert p.convert_color(None) is None
    assert p.convert_color(ColorRGBA(1, 2, 3, 4, alpha_channel=True)) is None
    assert p.convert((1, 2, 3, 4)) is None


def test_single_colour_always_wins():
    only = new_opaque_palette_color(1000, 2000, 3000, 42, "ONLY")
    p = Palette([only])
    rng = random.Random(8)
    for _ in range(50):
        q = ColorRGBA(rng.randrange(0x10000), rng.randrange(0x10000), rng.randrange(0x10000))
        assert p.convert_color(q) == only


def test_repeated_queries(three_colours):
    q = ColorRGBA.from_rgb8(120, 120, 120)
    first = three_colours.nearest(q)
    assert all(three_colours.nearest(q) == first for _ in range(5))


def test_concurrent_queries_agree(three_colours):
    rng = random.Random(21)
    queries = [
        ColorRGBA.from_rgb8(rng.randrange(256), rng.randrange(256), rng.randrange(256))
        for _ in range(200)
    ]
    serial = [three_colours.convert_color(q) for q in queries]
    with ThreadPoolExecutor(max_workers=4) as ex:
        threaded = list(ex.map(three_colours.convert_color, queries))
    assert threaded == serial


def test_query_dimension_must_match(three_colours):
    with pytest.raises(InvalidDimension):
        three_colours.convert_color(ColorRGBA(1, 2, 3, 4, alpha_channel=True))


def test_duplicate_index_rejected():
    with pytest.raises(ValueError):
        Palette(
            [new_opaque_palette_color(1, 1, 1, 5), new_opaque_palette_color(2, 2, 2, 5)]
        )


def test_colour_dimensions_follow_alpha_policy():
    with pytest.raises(ValueError):
        Palette([new_opaque_palette_color(1, 1, 1, 5)], alpha=True)


def test_lookup_and_views(three_colours):
    assert three_colours.lookup(11).name == "PACIFIC BLUE"
    assert three_colours.lookup(99) is None
    assert [c.index for c in three_colours.colors] == [1, 2, 11]
    assert three_colours.alpha is False
    assert dict(three_colours.describe())["Tree height"] == 2


def test_convert_ignores_alpha_when_palette_does(three_colours):
    out = three_colours.convert((250 * 257, 200 * 257, 90 * 257, 0))
    assert out == ColorRGBA(255 * 257, 211 * 257, 92 * 257, MAX_CHANNEL)
    assert out.rgba()[3] == MAX_CHANNEL


def test_convert_with_alpha():
    p = Palette(
        [
            new_transparent_palette_color(0, 0, 0, 0, 1),
            new_transparent_palette_color(0, 0, 0, MAX_CHANNEL, 2),
        ],
        alpha=True,
    )
    out = p.convert(ColorRGBA(10, 10, 10, 60000))
    assert out.rgba() == (0, 0, 0, MAX_CHANNEL)
    assert p.convert_color(ColorRGBA(10, 10, 10, 100, alpha_channel=True)).index == 1


def test_from_rgba_indexes_by_position():
    p = Palette.from_rgba([(255, 0, 0), (0, 255, 0), (0, 0, 255)])
    hit = p.convert_color(ColorRGBA.from_rgb8(10, 240, 5))
    assert hit.index == 1
    assert hit.color.rgb8() == (0, 255, 0)


def test_from_rgba_with_alpha():
    p = Palette.from_rgba([(0, 0, 0, 0), (0, 0, 0, 255)], alpha=True)
    assert p.convert_color(ColorRGBA.from_rgb8(0, 0, 0, alpha=0.9)).index == 1
    assert p.convert_color(ColorRGBA.from_rgb8(0, 0, 0, alpha=0.1)).index == 0

from __future__ import annotations

import random

import pytest

from tree_palette.constants import MAX_DISTANCE
from tree_palette.core_types import (
    ColorRGBA,
    PaletteColor,
    new_opaque_color,
    new_opaque_palette_color,
)
from tree_palette.distance import linear_nearest, squared_distance
from tree_palette.errors import InvalidDimension, InvalidQuery
from tree_palette.kdtree import build_tree
from tree_palette.search import nearest_neighbour


def _random_colour(rng: random.Random, alpha: bool) -> ColorRGBA:
    return ColorRGBA(
        rng.randrange(0xFFFF),
        rng.randrange(0xFFFF),
        rng.randrange(0xFFFF),
        rng.randrange(0xFFFF),
        alpha_channel=alpha,
    )


def _random_palette(rng: random.Random, n: int, alpha: bool):
    return [PaletteColor(_random_colour(rng, alpha), i) for i in range(n)]


def _closest_index(c: ColorRGBA, palette) -> int:
    """True Euclidean distance, no scaling."""
    best, result = None, -1
    for cc in palette:
        d = sum((cc.dimension(i) - c.dimension(i)) ** 2 for i in range(cc.dimensions))
        if best is None or d < best:
            best, result = d, cc.index
    return result


def test_empty_tree_is_no_match():
    tree = build_tree([])
    assert nearest_neighbour(new_opaque_color(1, 2, 3), tree) == (None, MAX_DISTANCE)
    assert nearest_neighbour(None, tree) == (None, MAX_DISTANCE)


def test_missing_query_on_non_empty_tree():
    tree = build_tree([new_opaque_palette_color(1, 2, 3, 1)])
    with pytest.raises(InvalidQuery):
        nearest_neighbour(None, tree)


def test_dimension_mismatch():
    tree = build_tree([new_opaque_palette_color(1, 2, 3, 1)])
    with pytest.raises(InvalidDimension):
        nearest_neighbour(ColorRGBA(1, 2, 3, 4, alpha_channel=True), tree)


def test_exact_hit_has_zero_distance():
    palette = [new_opaque_palette_color(i * 1000, i * 2000, i * 3000, i) for i in range(20)]
    tree = build_tree(palette)
    hit, dist = nearest_neighbour(new_opaque_color(7000, 14000, 21000), tree)
    assert hit.index == 7
    assert dist == 0


@pytest.mark.parametrize("alpha", [False, True])
def test_matches_linear_scan(alpha):
    rng = random.Random(1234 if alpha else 4321)
    for n in (1, 2, 3, 7, 12, 33, 100):
        palette = _random_palette(rng, n, alpha)
        tree = build_tree(palette)
        for _ in range(60):
            query = _random_colour(rng, alpha)
            hit, dist = nearest_neighbour(query, tree)
            _ref, ref_dist = linear_nearest(query, palette)
            assert dist == ref_dist
            assert squared_distance(query, hit) == dist


@pytest.mark.parametrize("alpha", [False, True])
@pytest.mark.parametrize("seed", range(1, 11))
def test_random_palette_true_euclidean(alpha, seed):
    rng = random.Random(seed)
    query = _random_colour(rng, alpha)
    palette = _random_palette(rng, 12, alpha)
    hit, _ = nearest_neighbour(query, build_tree(palette))
    assert hit.index == _closest_index(query, palette)


def test_clustered_palette_matches_linear_scan():
    rng = random.Random(99)
    palette = [
        new_opaque_palette_color(
            rng.choice((0, 0x8000, 0xFFFF)),
            rng.choice((0, 0xFFFF)),
            rng.randrange(0, 0x100),
            i,
        )
        for i in range(64)
    ]
    tree = build_tree(palette)
    for _ in range(300):
        query = _random_colour(rng, False)
        _hit, dist = nearest_neighbour(query, tree)
        assert dist == linear_nearest(query, palette)[1]


def test_duplicate_coordinates_resolve_to_one_of_them():
    palette = [
        new_opaque_palette_color(100, 100, 100, 1),
        new_opaque_palette_color(100, 100, 100, 2),
        new_opaque_palette_color(9000, 9000, 9000, 3),
    ]
    hit, dist = nearest_neighbour(new_opaque_color(101, 99, 100), build_tree(palette))
    assert hit.index in (1, 2)
    assert dist == 0


def test_repeated_queries_are_identical():
    rng = random.Random(5)
    palette = _random_palette(rng, 40, False)
    tree = build_tree(palette)
    query = _random_colour(rng, False)
    first = nearest_neighbour(query, tree)
    for _ in range(5):
        assert nearest_neighbour(query, tree) == first

# tree_palette/core_types.py
from __future__ import annotations

"""
Core colour types, the ColorPoint protocol, and lightweight helpers.

A ColorPoint is anything with `dimensions` (3 for RGB, 4 for RGBA) and a
`dimension(i)` accessor returning a 16-bit channel value. Axes 0..3 are
R, G, B and A.
"""

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from .constants import (
    ALPHA_AXIS,
    MAX_CHANNEL,
    MAX_CHANNEL_8,
    RGB_DIMENSIONS,
    RGBA_DIMENSIONS,
    SCALE_8_TO_16,
)
from .errors import InvalidDimension

# Basic aliases

RGBTuple = Tuple[int, int, int]
RGBA16 = Tuple[int, int, int, int]
HexStr = str

U8Image = NDArray[np.uint8]  # (H, W, 4)
IndexImage = NDArray[np.int64]  # (H, W) palette indexes


class ColorPoint(Protocol):
    """A point in 3- or 4-dimensional 16-bit colour space."""

    @property
    def dimensions(self) -> int: ...

    def dimension(self, i: int) -> int: ...


# Value objects


@dataclass(frozen=True)
class ColorRGBA:
    """
    16-bit RGBA colour.

    R, G, B and A are dimensions 0, 1, 2 and 3. With alpha_channel False the
    colour is 3-dimensional and A is ignored.
    """

    r: int
    g: int
    b: int
    a: int = MAX_CHANNEL
    alpha_channel: bool = False

    def __post_init__(self) -> None:
        for name in ("r", "g", "b", "a"):
            value = getattr(self, name)
            if not 0 <= value <= MAX_CHANNEL:
                raise ValueError(f"channel {name}={value} outside [0, {MAX_CHANNEL}]")

    @property
    def dimensions(self) -> int:
        return RGBA_DIMENSIONS if self.alpha_channel else RGB_DIMENSIONS

    def dimension(self, i: int) -> int:
        if i == 0:
            return self.r
        if i == 1:
            return self.g
        if i == 2:
            return self.b
        if i == ALPHA_AXIS and self.alpha_channel:
            return self.a
        raise InvalidDimension(
            f"invalid dimension {i}: expected [0-{self.dimensions - 1}]"
        )

    def rgba(self) -> RGBA16:
        """(r, g, b, a) with a forced opaque when alpha does not participate."""
        if self.alpha_channel:
            return (self.r, self.g, self.b, self.a)
        return (self.r, self.g, self.b, MAX_CHANNEL)

    def rgb8(self) -> RGBTuple:
        return (
            self.r // SCALE_8_TO_16,
            self.g // SCALE_8_TO_16,
            self.b // SCALE_8_TO_16,
        )

    def with_alpha_channel(self, alpha_channel: bool) -> "ColorRGBA":
        """Same channels viewed as a 3- or 4-dimensional point."""
        if alpha_channel == self.alpha_channel:
            return self
        return ColorRGBA(self.r, self.g, self.b, self.a, alpha_channel)

    @classmethod
    def from_rgb8(
        cls, r: int, g: int, b: int, alpha: Optional[float] = None
    ) -> "ColorRGBA":
        """
        Build from 8-bit RGB and an optional [0, 1] alpha.
        Alpha participates in matching only when given.
        """
        channels = [scale_8_to_16(v) for v in (r, g, b)]
        if alpha is None:
            return cls(*channels)
        return cls(*channels, a=alpha_to_16(alpha), alpha_channel=True)

    def __str__(self) -> str:
        if self.alpha_channel:
            return f"{{R:{self.r}, G:{self.g}, B:{self.b}, A:{self.a}}}"
        return f"{{R:{self.r}, G:{self.g}, B:{self.b}}}"


@dataclass(frozen=True)
class PaletteColor:
    """
    A colour inside an indexed palette.

    index is unique within one palette but need not be contiguous or
    zero-based. name is a human-readable label only.
    """

    color: ColorRGBA
    index: int
    name: str = ""

    @property
    def dimensions(self) -> int:
        return self.color.dimensions

    def dimension(self, i: int) -> int:
        return self.color.dimension(i)

    def rgba(self) -> RGBA16:
        return self.color.rgba()

    @property
    def hex(self) -> HexStr:
        return rgb_to_hex(self.color.rgb8())

    @classmethod
    def from_rgb8(
        cls,
        r: int,
        g: int,
        b: int,
        index: int,
        name: str = "",
        alpha: Optional[float] = None,
    ) -> "PaletteColor":
        return cls(ColorRGBA.from_rgb8(r, g, b, alpha), index, name)

    @classmethod
    def from_hex(
        cls, hex_str: str, index: int, name: str = "", alpha: Optional[float] = None
    ) -> "PaletteColor":
        r, g, b = hex_to_rgb(hex_str)
        return cls.from_rgb8(r, g, b, index, name, alpha)

    def __str__(self) -> str:
        label = f" {self.name}" if self.name else ""
        return f"{{Id: {self.index}{label}, ColorRGBA: {self.color}}}"


# Constructors on raw 16-bit channels


def new_transparent_color(r: int, g: int, b: int, a: int) -> ColorRGBA:
    return ColorRGBA(r, g, b, a, alpha_channel=True)


def new_opaque_color(r: int, g: int, b: int) -> ColorRGBA:
    return ColorRGBA(r, g, b)


def new_transparent_palette_color(
    r: int, g: int, b: int, a: int, index: int, name: str = ""
) -> PaletteColor:
    return PaletteColor(new_transparent_color(r, g, b, a), index, name)


def new_opaque_palette_color(
    r: int, g: int, b: int, index: int, name: str = ""
) -> PaletteColor:
    return PaletteColor(new_opaque_color(r, g, b), index, name)


# Small helpers


def scale_8_to_16(value: int) -> int:
    """8-bit channel to 16-bit (0xff -> 0xffff)."""
    if not 0 <= value <= MAX_CHANNEL_8:
        raise ValueError(f"8-bit channel {value} outside [0, {MAX_CHANNEL_8}]")
    return int(value) * SCALE_8_TO_16


def alpha_to_16(alpha: float) -> int:
    """[0, 1] alpha to a 16-bit channel."""
    if not 0.0 <= alpha <= 1.0:
        raise ValueError(f"alpha {alpha} outside [0, 1]")
    return int(round(float(alpha) * MAX_CHANNEL))


def rgb_to_hex(rgb: RGBTuple) -> HexStr:
    """RGB tuple to lowercase hex string '#rrggbb'."""
    return f"#{rgb[0]:02x}{rgb[1]:02x}{rgb[2]:02x}"


def hex_to_rgb(hex_str: str) -> RGBTuple:
    """Parse '#rgb' or '#rrggbb' (case-insensitive, '#' optional) into an RGB tuple."""
    s = hex_str.strip().lower()
    if not s.startswith("#"):
        s = f"#{s}"
    if len(s) == 4:
        r, g, b = s[1], s[2], s[3]
        s = f"#{r}{r}{g}{g}{b}{b}"
    if len(s) != 7:
        raise ValueError(f"hex must be '#rrggbb' or '#rgb', got {hex_str!r}")
    try:
        return (int(s[1:3], 16), int(s[3:5], 16), int(s[5:7], 16))
    except ValueError:
        raise ValueError(f"invalid hex colour {hex_str!r}") from None


def coerce_to_color(
    value: Union[ColorRGBA, PaletteColor, Sequence[int]], alpha_channel: bool
) -> ColorRGBA:
    """
    Coerce a ColorRGBA, PaletteColor or 16-bit (r, g, b[, a]) sequence to a
    ColorRGBA with the requested dimensionality.
    """
    if isinstance(value, PaletteColor):
        value = value.color
    if isinstance(value, ColorRGBA):
        return value.with_alpha_channel(alpha_channel)
    if len(value) < 3:
        raise ValueError("sequence too small for RGB")
    a = int(value[3]) if len(value) > 3 else MAX_CHANNEL
    return ColorRGBA(int(value[0]), int(value[1]), int(value[2]), a, alpha_channel)


__all__ = [
    # aliases / types
    "RGBTuple",
    "RGBA16",
    "HexStr",
    "U8Image",
    "IndexImage",
    "ColorPoint",
    # value objects
    "ColorRGBA",
    "PaletteColor",
    # constructors
    "new_transparent_color",
    "new_opaque_color",
    "new_transparent_palette_color",
    "new_opaque_palette_color",
    # helpers
    "scale_8_to_16",
    "alpha_to_16",
    "rgb_to_hex",
    "hex_to_rgb",
    "coerce_to_color",
]

# tree_palette/constants.py
"""
Global constants and tunables used across the project.

- channel ranges and 8-bit -> 16-bit scaling
- distance ceiling used to seed nearest-neighbour searches
- DEFAULT_PALETTE (hex, name, index)
- CLI defaults (image extensions, output suffix)
"""
from __future__ import annotations

from typing import List, Tuple

# =========================
# Channels
# =========================
MAX_CHANNEL: int = 0xFFFF  # 16-bit channel ceiling
MAX_CHANNEL_8: int = 0xFF
SCALE_8_TO_16: int = 0x101  # 0xff * 0x101 == 0xffff

RGB_DIMENSIONS: int = 3
RGBA_DIMENSIONS: int = 4
ALPHA_AXIS: int = 3

# =========================
# Distances
# =========================
UINT32_MASK: int = 0xFFFFFFFF
MAX_DISTANCE: int = UINT32_MASK  # seed for "nothing found yet"
SQ_DIFF_SHIFT: int = 2  # four shifted 16-bit squares fit a uint32

# No node in the tree arena
NO_NODE: int = -1

# =========================
# Built-in palette (hex, name, index)
# =========================
DEFAULT_PALETTE: List[Tuple[str, str, int]] = [
    ("#ffd35c", "DANDELION", 1),
    ("#ff8201", "DARK ORANGE", 2),
    ("#f37252", "CRUSTA", 3),
    ("#c72c3a", "BRICK RED", 7),
    ("#ea3e70", "DARK PINK", 8),
    ("#954567", "CADILLAC", 9),
    ("#4bc4d5", "MEDIUM TURQUOISE", 10),
    ("#0180b5", "PACIFIC BLUE", 11),
    ("#02b5a0", "PERSIAN GREEN", 12),
    ("#8a9747", "OLD OLIVE", 13),
]

# =========================
# CLI
# =========================
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp"}
OUTPUT_SUFFIX = "_paletted"
DEFAULT_TOP_K = 10

# tree_palette/palette_data.py
from __future__ import annotations

"""
Palette definitions and builders.

Exports:
  DEFAULT_PALETTE: list[tuple[str, str, int]]  # [(hex, name, index), ...]
  palette_colors_from_entries(entries, alpha) -> list[PaletteColor]
  load_palette_file(path, alpha) -> list[PaletteColor]
  construct_palette(entries=DEFAULT_PALETTE, alpha=False) -> Palette

Palette files:
  .csv   index,hex,name[,alpha]   (header row optional)
  .json  [{"index": 1, "hex": "#ffd35c", "name": "DANDELION", "alpha": 1.0}, ...]
"""

import csv
import json
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .constants import DEFAULT_PALETTE
from .core_types import PaletteColor
from .palette import Palette


def palette_colors_from_entries(
    entries: Iterable[Sequence[Any]], alpha: bool = False
) -> List[PaletteColor]:
    """
    Convert (hex, name, index[, alpha]) rows into PaletteColor values.
    With alpha=True a missing alpha value means fully opaque.
    """
    out: List[PaletteColor] = []
    for row in entries:
        if len(row) < 3:
            raise ValueError(f"palette entry needs (hex, name, index), got {row!r}")
        hex_str, name, index = str(row[0]), str(row[1]), int(row[2])
        a: Optional[float] = None
        if alpha:
            a = float(row[3]) if len(row) > 3 and row[3] not in ("", None) else 1.0
        out.append(PaletteColor.from_hex(hex_str, index, name, alpha=a))
    return out


def _read_csv_rows(path: Path) -> List[Tuple[str, str, int, Any]]:
    rows: List[Tuple[str, str, int, Any]] = []
    first_record = True
    with path.open(newline="", encoding="utf-8") as fh:
        for lineno, rec in enumerate(csv.reader(fh), start=1):
            if not rec or rec[0].strip().startswith("#"):
                continue  # blank or comment
            is_header = first_record and rec[0].strip().lower() == "index"
            first_record = False
            if is_header:
                continue
            if len(rec) < 3:
                raise ValueError(f"{path}:{lineno}: expected index,hex,name[,alpha]")
            try:
                index = int(rec[0])
            except ValueError:
                raise ValueError(f"{path}:{lineno}: bad index {rec[0]!r}") from None
            extra = rec[3].strip() if len(rec) > 3 else ""
            rows.append((rec[1].strip(), rec[2].strip(), index, extra))
    return rows


def _read_json_rows(path: Path) -> List[Tuple[str, str, int, Any]]:
    with path.open(encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list of palette entries")
    rows: List[Tuple[str, str, int, Any]] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict) or "hex" not in item or "index" not in item:
            raise ValueError(f"{path}: entry {i} needs 'hex' and 'index'")
        rows.append(
            (item["hex"], item.get("name", ""), int(item["index"]), item.get("alpha"))
        )
    return rows


def load_palette_file(path: Path, alpha: bool = False) -> List[PaletteColor]:
    """Read palette colours from a .csv or .json file."""
    suffix = path.suffix.lower()
    if suffix == ".csv":
        rows = _read_csv_rows(path)
    elif suffix == ".json":
        rows = _read_json_rows(path)
    else:
        raise ValueError(f"unsupported palette file type: {path.name}")
    return palette_colors_from_entries(rows, alpha=alpha)


def construct_palette(
    entries: Iterable[Sequence[Any]] = DEFAULT_PALETTE, alpha: bool = False
) -> Palette:
    """Build a Palette from (hex, name, index[, alpha]) rows."""
    return Palette(palette_colors_from_entries(entries, alpha=alpha), alpha=alpha)


__all__ = [
    "DEFAULT_PALETTE",
    "palette_colors_from_entries",
    "load_palette_file",
    "construct_palette",
]

#!/usr/bin/env python3
"""
recolour.py
Map images onto a fixed palette with a k-d tree, or rank palette colours by use.

Usage:
  python recolour.py convert SRC [--outdir DIR] [--palette FILE] [--alpha]
                                 [--jobs N] [--workers N] [--verify] [--debug]
  python recolour.py rank SRC [--palette FILE] [--alpha] [--top K] [--debug]

Commands:
  convert : write <stem>_paletted.png with every pixel replaced by its nearest
            palette colour. SRC may be a file or a folder.
  rank    : list palette colours by pixel count, most used first.

Palette:
  Built-in ten-colour palette unless --palette points to a .csv
  (index,hex,name[,alpha]) or .json file. --alpha makes alpha take part in
  matching; otherwise source alpha is kept as is.
"""

from __future__ import annotations

import argparse
import os
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional

import numpy as np

from tree_palette.constants import DEFAULT_TOP_K, IMAGE_EXTENSIONS, OUTPUT_SUFFIX
from tree_palette.core_types import ColorRGBA, PaletteColor
from tree_palette.distance import linear_nearest
from tree_palette.image_io import image_to_rgba_array, load_image_rgba, save_png_rgba
from tree_palette.palette import Palette
from tree_palette.palette_data import construct_palette, load_palette_file
from tree_palette.paletted import apply_palette_array, rank
from tree_palette.utils import (
    captured_log,
    debug_log,
    enable_line_buffered_stdout,
    error,
    format_percentage,
    format_seconds_compact,
    format_total_duration_compact,
    key_value_pairs_to_string,
    log,
    print_banner,
    print_config_line,
    warn,
)

# CLI args & small helpers


def _default_workers() -> int:
    """Leave a few cores free for the system; returns a sensible worker count."""
    n = os.cpu_count() or 4
    reserve = 1 if n <= 6 else 2 if n <= 12 else 3 if n <= 18 else 4
    return max(1, n - reserve)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recolour",
        description="Map images onto a fixed palette using a k-d tree.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    def _common(p: argparse.ArgumentParser) -> None:
        p.add_argument("src", type=Path, help="Input image or folder")
        p.add_argument(
            "--palette",
            type=Path,
            default=None,
            help="Palette file (.csv or .json). Omit for the built-in palette.",
        )
        p.add_argument(
            "--alpha", action="store_true", help="Match on alpha as a 4th dimension"
        )
        p.add_argument(
            "--workers", type=int, default=_default_workers(), help="Matching threads"
        )
        p.add_argument("--debug", action="store_true", help="Verbose details")

    convert = sub.add_parser("convert", help="Recolour image(s) to the palette")
    _common(convert)
    convert.add_argument(
        "--outdir", type=Path, default=None, help="Output directory (optional)"
    )
    convert.add_argument(
        "--jobs", type=int, default=2, help="Files processed in parallel"
    )
    convert.add_argument(
        "--verify",
        action="store_true",
        help="Cross-check tree matches against a linear scan",
    )

    ranker = sub.add_parser("rank", help="Rank palette colours by pixel count")
    _common(ranker)
    ranker.add_argument(
        "--top", type=int, default=DEFAULT_TOP_K, help="Colours to list (0 = all)"
    )
    return parser


def parse_cli_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def _load_palette(path: Optional[Path], alpha: bool) -> Palette:
    if path is None:
        return construct_palette(alpha=alpha)
    return Palette(load_palette_file(path, alpha=alpha), alpha=alpha)


def _collect_images(src: Path) -> List[Path]:
    if not src.is_dir():
        return [src]
    files = [
        p
        for p in src.iterdir()
        if p.is_file()
        and p.suffix.lower() in IMAGE_EXTENSIONS
        and not p.stem.endswith(OUTPUT_SUFFIX)
    ]
    files.sort(key=lambda p: p.name.lower())
    return files


def _verify_matches(palette: Palette, rgba: np.ndarray) -> int:
    """Compare tree matches with a linear scan for every unique colour. Returns mismatches."""
    channels = 4 if palette.alpha else 3
    uniques = np.unique(rgba[..., :channels].reshape(-1, channels), axis=0)
    colours = list(palette.colors)
    mismatches = 0
    for row in uniques.tolist():
        a = row[3] if channels == 4 else 255
        query = ColorRGBA.from_rgb8(
            row[0], row[1], row[2], alpha=(a / 255.0) if palette.alpha else None
        )
        _tree_hit, tree_d = palette.nearest(query)
        _scan_hit, scan_d = linear_nearest(query, colours)
        if tree_d != scan_d:
            mismatches += 1
            warn(f"tree/scan mismatch for {tuple(row)}: {tree_d} != {scan_d}")
    debug_log(
        key_value_pairs_to_string(
            [("Verified colours", int(uniques.shape[0])), ("Mismatches", mismatches)]
        )
    )
    return mismatches


# Per-file processing


def _convert_single_image(
    src_path: Path,
    out_path: Optional[Path],
    palette: Palette,
    workers: int,
    verify: bool,
    debug: bool,
) -> None:
    """load -> map -> save -> report for one image."""
    t_start = time.perf_counter()
    if out_path is None:
        out_path = src_path.with_name(f"{src_path.stem}{OUTPUT_SUFFIX}.png")

    print_banner(src_path.name)
    image = load_image_rgba(src_path)
    rgba = image_to_rgba_array(image)
    height, width = rgba.shape[:2]
    t_loaded = time.perf_counter()
    if debug:
        debug_log(key_value_pairs_to_string([("Loaded", f"{width}x{height}")]))

    if verify:
        _verify_matches(palette, rgba)

    mapped = apply_palette_array(palette, rgba, workers=workers, debug=debug)
    t_mapped = time.perf_counter()
    written = save_png_rgba(out_path, mapped)
    t_saved = time.perf_counter()

    log(f"Wrote {written.name} | size={width}x{height} | palette_size={len(palette)}")
    if debug:
        debug_log(
            f"Total {format_total_duration_compact(t_saved - t_start)}  "
            f"(load={format_seconds_compact(t_loaded - t_start)}, "
            f"map={format_seconds_compact(t_mapped - t_loaded)}, "
            f"save={format_seconds_compact(t_saved - t_mapped)})"
        )
    else:
        log(f"Total time {format_total_duration_compact(t_saved - t_start)}")


def _convert_one_captured(
    path: Path,
    outdir: Optional[Path],
    palette: Palette,
    workers: int,
    verify: bool,
    debug: bool,
) -> str:
    """
    Convert one file with its log lines captured for this thread only.

    Used for concurrent execution where output should be printed in order.
    """
    with captured_log() as buf:
        dst = (outdir / f"{path.stem}{OUTPUT_SUFFIX}.png") if outdir else None
        _convert_single_image(path, dst, palette, workers, verify, debug)
    return buf.getvalue()


def _rank_single_image(
    src_path: Path, palette: Palette, top: int, workers: int, debug: bool
) -> None:
    print_banner(src_path.name)
    image = load_image_rgba(src_path)
    colours, count = rank(palette, image, workers=workers, debug=debug)
    total = sum(count.values())
    shown: List[PaletteColor] = colours if top <= 0 else colours[:top]
    for i, c in enumerate(shown, start=1):
        n = count[c.index]
        share = n / total if total else 0.0
        label = c.name or "?"
        log(f"{i}. {c.hex}  {label} (id {c.index}): {n:,} occurrences  {format_percentage(share)}")
    log(f"Total pixels: {total:,}")


# Entry point


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entry point.

    Handles a single file or a folder. convert supports --jobs parallelism
    while preserving readable output ordering.
    """
    enable_line_buffered_stdout()
    args = parse_cli_args(argv)

    src: Path = args.src
    if not src.exists():
        error(f"not found: {src}")
        return 2

    try:
        palette = _load_palette(args.palette, args.alpha)
    except (OSError, ValueError) as e:
        error(f"cannot load palette: {e}")
        return 2
    if len(palette) == 0:
        error("palette has no colours")
        return 2

    print_config_line("palette", palette.describe(), debug=args.debug)
    if getattr(args, "outdir", None) is not None:
        args.outdir.mkdir(parents=True, exist_ok=True)
    files = _collect_images(src)
    if args.debug:
        debug_log(
            key_value_pairs_to_string(
                [("Command", args.command), ("Images", len(files)), ("Workers", args.workers)]
            )
        )

    try:
        if args.command == "rank":
            for p in files:
                _rank_single_image(p, palette, args.top, args.workers, args.debug)
        elif args.jobs <= 1 or len(files) <= 1:
            for p in files:
                dst = (args.outdir / f"{p.stem}{OUTPUT_SUFFIX}.png") if args.outdir else None
                _convert_single_image(
                    p, dst, palette, args.workers, args.verify, args.debug
                )
        else:
            # Palette is read-only; shared across jobs.
            with ThreadPoolExecutor(max_workers=args.jobs) as ex:
                futures = [
                    ex.submit(
                        _convert_one_captured,
                        p,
                        args.outdir,
                        palette,
                        args.workers,
                        args.verify,
                        args.debug,
                    )
                    for p in files
                ]
                blocks = [f.result() for f in futures]
            print("".join(blocks), end="", flush=True)
    except (OSError, ValueError) as e:
        error(str(e))
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())

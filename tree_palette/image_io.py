# tree_palette/image_io.py
from __future__ import annotations

import io
from pathlib import Path

import numpy as np
from PIL import Image, ImageOps

from .core_types import U8Image

"""
Image I/O helpers (RGBA in sRGB) for the palette adapters.
"""

try:
    from PIL import ImageCms  # ICC conversion if profile present
except ImportError:  # pragma: no cover
    ImageCms = None  # type: ignore[assignment]


def _convert_to_srgb_rgba(im: Image.Image) -> Image.Image:
    im = ImageOps.exif_transpose(im)
    icc_bytes = im.info.get("icc_profile")

    if icc_bytes and ImageCms is not None:
        try:
            src_prof = ImageCms.ImageCmsProfile(io.BytesIO(icc_bytes))
            dst_prof = ImageCms.createProfile("sRGB")
            im2 = ImageCms.profileToProfile(
                im,
                src_prof,
                dst_prof,
                renderingIntent=ImageCms.Intent.PERCEPTUAL,
                outputMode="RGBA",
            )
            if im2 is None:
                return im.convert("RGBA")
            return im2
        except (ImageCms.PyCMSError, OSError, ValueError):
            return im.convert("RGBA")

    return im.convert("RGBA")


def load_image_rgba(path: Path) -> Image.Image:
    """Open an image, apply EXIF orientation and ICC profile, return RGBA."""
    with Image.open(path) as im0:
        im = _convert_to_srgb_rgba(im0)
        im.load()
    return im


def image_to_rgba_array(image: Image.Image | np.ndarray) -> U8Image:
    """Pillow image or uint8 (H,W,3/4) array to a uint8 (H,W,4) array."""
    if isinstance(image, Image.Image):
        return np.array(image.convert("RGBA"), dtype=np.uint8)
    arr = np.asarray(image)
    if arr.dtype != np.uint8 or arr.ndim != 3 or arr.shape[-1] not in (3, 4):
        raise TypeError("expected uint8 (H,W,3/4) image")
    if arr.shape[-1] == 4:
        return arr
    out = np.full(arr.shape[:2] + (4,), 255, dtype=np.uint8)
    out[..., :3] = arr
    return out


def save_png_rgba(path: Path, rgba: U8Image) -> Path:
    """Save a uint8 (H,W,4) array as PNG; forces a .png suffix."""
    if path.suffix.lower() != ".png":
        path = path.with_suffix(".png")
    Image.fromarray(np.ascontiguousarray(rgba)).save(path)
    return path


__all__ = [
    "load_image_rgba",
    "image_to_rgba_array",
    "save_png_rgba",
]

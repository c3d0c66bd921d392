"""Bitmap decoding for avatars and stamps, and default stamp loading."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Union

from PIL import Image, ImageOps, UnidentifiedImageError

from ringframe_renderer import build_default_stamp

from .logging_setup import get_logger

ImageSource = Union[str, Path, bytes, BinaryIO]


class ImageDecodeError(ValueError):
    """A user-supplied file could not be turned into a bitmap."""


class AssetLoadError(RuntimeError):
    """The default stamp could not be loaded; startup cannot continue."""


def decode_image(source: ImageSource, label: str = "image") -> Image.Image:
    """Decode ``source`` fully into an RGBA bitmap, honouring EXIF orientation."""
    try:
        if isinstance(source, (bytes, bytearray)):
            source = BytesIO(source)
        with Image.open(source) as img:
            img.load()
            oriented = ImageOps.exif_transpose(img)
            decoded = oriented.convert("RGBA")
    except (OSError, UnidentifiedImageError, Image.DecompressionBombError, ValueError) as exc:
        get_logger().warning(
            f"could not decode {label}: {exc}",
            extra={"event": "image_decode_failed"},
        )
        raise ImageDecodeError(f"Could not load {label}.") from exc

    if decoded.width <= 0 or decoded.height <= 0:
        raise ImageDecodeError(f"Could not load {label}.")
    return decoded


def load_default_stamp(path: str | Path | None = None, size: int = 256) -> Image.Image:
    """Load the process-wide default stamp from ``path`` or draw the built-in glyph."""
    logger = get_logger()
    try:
        if path:
            stamp = decode_image(Path(path).expanduser(), label="default stamp")
        else:
            stamp = build_default_stamp(size)
    except ValueError as exc:
        logger.critical(f"default stamp unavailable: {exc}", extra={"event": "asset_load_failed"})
        raise AssetLoadError(f"Default stamp could not be loaded: {exc}") from exc

    logger.info("default stamp loaded", extra={"event": "default_stamp_loaded"})
    return stamp

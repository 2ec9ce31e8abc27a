"""Bytes to pixels boundary for uploaded photos."""

import io

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from shotgate.errors import InvalidBuffer
from shotgate.quality.pixel_buffer import PixelBuffer


def open_image(data: bytes) -> Image.Image:
    """Open encoded image bytes lazily (header only, no pixel decode).

    Raises:
        InvalidBuffer: If Pillow does not recognise the data or the declared
            size exceeds Pillow's decompression bomb limit
    """
    try:
        return Image.open(io.BytesIO(data))
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise InvalidBuffer(f"Unreadable image data: {e}") from e


def image_size(data: bytes) -> tuple[int, int]:
    """Return ``(width, height)`` from the image header without decoding pixels."""
    with open_image(data) as img:
        return img.size


def decode_image(data: bytes) -> PixelBuffer:
    """Decode image bytes to an RGBA PixelBuffer.

    EXIF orientation is applied so the pixels match what the user saw when
    taking the photo.

    Args:
        data: Encoded image (JPEG, PNG, WebP, ...)

    Returns:
        PixelBuffer: Decoded RGBA pixels

    Raises:
        InvalidBuffer: If the data is empty, unrecognised, truncated or oversized
    """
    if not data:
        raise InvalidBuffer("Empty image data")

    try:
        with open_image(data) as img:
            img.load()
            oriented = ImageOps.exif_transpose(img)
            rgba = oriented.convert("RGBA")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise InvalidBuffer(f"Failed to decode image: {e}") from e

    return PixelBuffer(np.asarray(rgba, dtype=np.uint8))

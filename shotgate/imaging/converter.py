"""Uploaded photo to preview image converter for display."""

import io
import logging

from PIL import Image, ImageOps

from shotgate import constants
from shotgate.errors import InvalidBuffer
from shotgate.imaging.decoder import open_image

logger = logging.getLogger(__name__)


def convert_to_preview_bytes(data: bytes, max_width: int = constants.PREVIEW_MAX_WIDTH) -> bytes | None:
    """Convert an uploaded photo to PNG preview image bytes.

    Applies EXIF orientation, flattens to RGB and shrinks to ``max_width``
    when wider.

    Args:
        data: Encoded image bytes as uploaded
        max_width: Maximum width of the output image in pixels (height scaled proportionally)

    Returns:
        bytes | None: PNG image bytes if conversion succeeded, None otherwise
    """
    try:
        with open_image(data) as src:
            img = ImageOps.exif_transpose(src).convert("RGB")

        # Resize if necessary
        if img.width > max_width:
            aspect_ratio = img.height / img.width
            new_height = max(1, int(max_width * aspect_ratio))
            img = img.resize((max_width, new_height), Image.Resampling.LANCZOS)

        buffer = io.BytesIO()
        img.save(buffer, "PNG", optimize=False, compress_level=1)
        png_bytes = buffer.getvalue()

        logger.debug(f"Created preview image ({len(png_bytes)} bytes)")
        return png_bytes

    except (InvalidBuffer, Image.DecompressionBombError, OSError, ValueError) as e:
        logger.error(f"Failed to convert upload to preview: {e}")
        return None

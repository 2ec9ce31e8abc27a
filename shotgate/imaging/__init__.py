from shotgate.imaging.converter import convert_to_preview_bytes
from shotgate.imaging.decoder import decode_image, image_size, open_image

__all__ = ["convert_to_preview_bytes", "decode_image", "image_size", "open_image"]

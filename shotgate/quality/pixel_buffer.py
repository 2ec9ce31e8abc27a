"""Decoded pixel data handed to the heuristic analyzer."""

from dataclasses import dataclass

import numpy as np

from shotgate.errors import InvalidBuffer


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """RGBA samples, row-major, shape ``(height, width, 4)``, dtype uint8.

    The array is made read-only on construction so analysis can never mutate
    the caller's pixels.
    """

    pixels: np.ndarray

    def __post_init__(self):
        pixels = self.pixels
        if not isinstance(pixels, np.ndarray) or pixels.ndim != 3 or pixels.shape[2] != 4:
            raise InvalidBuffer(f"Expected an (H, W, 4) RGBA array, got {getattr(pixels, 'shape', type(pixels))}")
        if pixels.dtype != np.uint8:
            raise InvalidBuffer(f"Expected uint8 samples, got {pixels.dtype}")
        if pixels.flags.writeable:
            pixels = pixels.view()
            pixels.flags.writeable = False
            object.__setattr__(self, "pixels", pixels)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    @classmethod
    def from_rgb(cls, rgb: np.ndarray) -> "PixelBuffer":
        """Wrap an ``(H, W, 3)`` uint8 array, adding an opaque alpha channel."""
        rgb = np.asarray(rgb, dtype=np.uint8)
        if rgb.ndim != 3 or rgb.shape[2] != 3:
            raise InvalidBuffer(f"Expected an (H, W, 3) RGB array, got {rgb.shape}")
        alpha = np.full(rgb.shape[:2] + (1,), 255, dtype=np.uint8)
        return cls(np.concatenate([rgb, alpha], axis=2))

    @classmethod
    def filled(cls, width: int, height: int, rgb: tuple[int, int, int]) -> "PixelBuffer":
        """Uniform-color buffer, mostly useful for calibration and tests."""
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[..., :3] = rgb
        pixels[..., 3] = 255
        return cls(pixels)

import asyncio
import io
import struct
import zlib
from pathlib import Path

import numpy as np
from PIL import Image

from shotgate.quality.pixel_buffer import PixelBuffer
from shotgate.quality.results import UNAVAILABLE, DecisionSymbol, RemoteResult
from shotgate.session.preview import PreviewHandle, PreviewProvider
from shotgate.session.upload_session import SelectedFile


class DummyLogger:
    def __init__(self):
        self.infos = []
        self.errors = []
        self.debugs = []
        self.warnings = []

    def info(self, msg, *args, **kwargs):
        self.infos.append(msg)

    def error(self, msg, *args, **kwargs):
        self.errors.append(msg)

    def debug(self, msg, *args, **kwargs):
        self.debugs.append(msg)

    def warning(self, msg, *args, **kwargs):
        self.warnings.append(msg)


# ---------------------------------------------------------------------------
# Synthetic images
# ---------------------------------------------------------------------------


def _rgb(value):
    return (value, value, value) if isinstance(value, int) else tuple(value)


def checkerboard_rgb(width=800, height=600, square=25, dark=40, light=200) -> np.ndarray:
    ys, xs = np.indices((height, width))
    mask = ((ys // square) + (xs // square)) % 2 == 1
    rgb = np.empty((height, width, 3), dtype=np.uint8)
    rgb[...] = _rgb(dark)
    rgb[mask] = _rgb(light)
    return rgb


def checkerboard(width=800, height=600, square=25, dark=40, light=200) -> PixelBuffer:
    return PixelBuffer.from_rgb(checkerboard_rgb(width, height, square, dark, light))


def encode_png(rgb: np.ndarray) -> bytes:
    buffer = io.BytesIO()
    Image.fromarray(rgb).save(buffer, "PNG")
    return buffer.getvalue()


def checkerboard_png(**kwargs) -> bytes:
    """Sharp, well-exposed 800x600 photo stand-in (mean brightness 120)."""
    return encode_png(checkerboard_rgb(**kwargs))


def flat_png(width=64, height=64, value=128) -> bytes:
    rgb = np.empty((height, width, 3), dtype=np.uint8)
    rgb[...] = _rgb(value)
    return encode_png(rgb)


def _png_chunk(kind: bytes, body: bytes) -> bytes:
    return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", zlib.crc32(kind + body))


def oversized_png(width=20000, height=10000) -> bytes:
    """A few hundred bytes of PNG whose header declares a huge RGB image."""
    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", header)
        + _png_chunk(b"IDAT", zlib.compress(b"\x00" * 64))
        + _png_chunk(b"IEND", b"")
    )


def selected(data: bytes, filename="photo.png", content_type="image/png") -> SelectedFile:
    return SelectedFile(filename=filename, content_type=content_type, data=data)


# ---------------------------------------------------------------------------
# Injected collaborators
# ---------------------------------------------------------------------------


class FakeClassificationClient:
    """Classification client double with controllable latency and outcome."""

    def __init__(self, result=None, delay=0.0, storage_id="stored-1", persist_error=None):
        self.result = UNAVAILABLE if result is None else result
        self.delay = delay
        self.storage_id = storage_id
        self.persist_error = persist_error
        self.classify_calls = 0
        self.persist_calls = 0
        self.cancelled = 0
        self.started = asyncio.Event()

    @classmethod
    def passing(cls, **kwargs):
        return cls(result=RemoteResult(decision=DecisionSymbol.PASS, hints=(), confidence=0.9), **kwargs)

    async def classify(self, image_bytes, timeout=None, filename=None, content_type=None):
        self.classify_calls += 1
        self.started.set()
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        return self.result

    async def persist(self, image_bytes, filename=None, content_type=None):
        self.persist_calls += 1
        if self.persist_error is not None:
            raise self.persist_error
        return self.storage_id

    async def aclose(self):
        pass


class RecordingPreviewHandle(PreviewHandle):
    def __init__(self, provider, index):
        super().__init__(Path(f"/previews/{index}.png"))
        self.provider = provider
        self.release_calls = 0

    def release(self):
        self.release_calls += 1
        if not self.released:
            self.provider.live -= 1
            self.provider.released += 1
        self.released = True


class RecordingPreviewProvider(PreviewProvider):
    """Counts acquire/release pairs and the peak number of live previews."""

    def __init__(self):
        self.acquired = 0
        self.released = 0
        self.live = 0
        self.max_live = 0
        self.handles = []

    def acquire(self, upload):
        self.acquired += 1
        self.live += 1
        self.max_live = max(self.max_live, self.live)
        handle = RecordingPreviewHandle(self, self.acquired)
        self.handles.append(handle)
        return handle

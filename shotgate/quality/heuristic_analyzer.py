"""Local pixel heuristic for blur and exposure.

Scores a decoded image directly from its pixels:
- Exposure: fraction of clipped highlights and crushed shadows
- Brightness: mean Rec. 709 luminance
- Blur: mean squared response of a 4-neighbour Laplacian (low = smooth/blurry)

The scores are intentionally approximate. Every decision threshold comes from
a QualityThresholds instance so deployments can retune without touching the
algorithm.
"""

import numpy as np
from PIL import Image

from shotgate import constants
from shotgate.errors import InvalidBuffer
from shotgate.quality.pixel_buffer import PixelBuffer
from shotgate.quality.results import DecisionSymbol, HeuristicResult, Metrics
from shotgate.quality.thresholds import DEFAULT_THRESHOLDS, QualityThresholds

# Rec. 709 luma weights scaled by 10 000 so luminance stays in exact integer arithmetic
_LUMA_WEIGHTS = np.array([2126, 7152, 722], dtype=np.int64)
_LUMA_SCALE = 10000.0


def downscale(buffer: PixelBuffer, target_edge: int = constants.DEFAULT_RESIZE_TARGET_EDGE) -> PixelBuffer:
    """Shrink so the longer edge is at most ``target_edge``; never upscales.

    Area-averaging keeps hard edges between aligned blocks intact and does not
    invent clipped pixels the way ringing filters can.
    """
    longer = max(buffer.width, buffer.height)
    if longer <= target_edge:
        return buffer

    scale = target_edge / longer
    new_size = (max(1, round(buffer.width * scale)), max(1, round(buffer.height * scale)))
    img = Image.fromarray(np.ascontiguousarray(buffer.pixels[..., :3]))
    resized = img.resize(new_size, Image.Resampling.BOX)
    return PixelBuffer.from_rgb(np.asarray(resized))


def compute_metrics(buffer: PixelBuffer) -> Metrics:
    """Exposure, brightness and blur statistics for an already-downscaled buffer."""
    rgb = buffer.pixels[..., :3]
    pixel_count = buffer.width * buffer.height

    over = np.count_nonzero(np.all(rgb > constants.OVEREXPOSED_CHANNEL_MIN, axis=2))
    under = np.count_nonzero(np.all(rgb < constants.UNDEREXPOSED_CHANNEL_MAX, axis=2))

    luma = rgb.astype(np.int64) @ _LUMA_WEIGHTS
    mean_brightness = float(luma.mean()) / _LUMA_SCALE

    # Interior only: a 1-pixel border has no complete neighbourhood
    lap = (
        4 * luma[1:-1, 1:-1]
        - luma[:-2, 1:-1]  # up
        - luma[1:-1, :-2]  # left
        - luma[1:-1, 2:]  # right
        - luma[2:, 1:-1]  # down
    )
    if lap.size:
        scaled = lap.astype(np.float64) / _LUMA_SCALE
        blur_variance = float(np.mean(scaled * scaled))
    else:
        blur_variance = 0.0

    return Metrics(
        blur_variance=blur_variance,
        overexposed_fraction=over / pixel_count,
        underexposed_fraction=under / pixel_count,
        mean_brightness=mean_brightness,
    )


def decide(metrics: Metrics, thresholds: QualityThresholds = DEFAULT_THRESHOLDS) -> tuple[DecisionSymbol, tuple[str, ...]]:
    """Apply the decision rules in order; exposure failures dominate blur and brightness."""
    if (
        metrics.overexposed_fraction > thresholds.overexposed_fraction_max
        or metrics.underexposed_fraction > thresholds.underexposed_fraction_max
    ):
        return DecisionSymbol.RETRY, (constants.HINT_FIX_EXPOSURE,)
    if metrics.blur_variance < thresholds.blur_variance_min:
        return DecisionSymbol.IMPROVE, (constants.HINT_REDUCE_BLUR,)
    if metrics.mean_brightness < thresholds.brightness_min:
        return DecisionSymbol.IMPROVE, (constants.HINT_INCREASE_LIGHTING,)
    if metrics.mean_brightness > thresholds.brightness_max:
        return DecisionSymbol.IMPROVE, (constants.HINT_REDUCE_GLARE,)
    return DecisionSymbol.PASS, ()


def analyze(
    buffer: PixelBuffer,
    thresholds: QualityThresholds = DEFAULT_THRESHOLDS,
    target_edge: int = constants.DEFAULT_RESIZE_TARGET_EDGE,
) -> HeuristicResult:
    """Score a pixel buffer and return decision, hints and metrics.

    Args:
        buffer: Decoded RGBA pixels
        thresholds: Decision thresholds
        target_edge: Longest edge to analyse at

    Returns:
        HeuristicResult with the decision, zero or one hint, and metrics

    Raises:
        InvalidBuffer: If the buffer has zero area
    """
    if buffer.is_empty:
        raise InvalidBuffer(f"Cannot analyse a {buffer.width}x{buffer.height} buffer")

    metrics = compute_metrics(downscale(buffer, target_edge))
    decision, hints = decide(metrics, thresholds)
    return HeuristicResult(decision=decision, hints=hints, metrics=metrics)


class HeuristicAnalyzer:
    """Configured analyzer instance injected into the lifecycle controller."""

    name = "pixel_heuristic"
    friendly_name = "Pixel Heuristic"
    description = "Scores blur and exposure from decoded pixels"

    def __init__(
        self,
        thresholds: QualityThresholds = DEFAULT_THRESHOLDS,
        target_edge: int = constants.DEFAULT_RESIZE_TARGET_EDGE,
    ):
        self.thresholds = thresholds
        self.target_edge = target_edge

    @classmethod
    def from_settings(cls, settings) -> "HeuristicAnalyzer":
        return cls(thresholds=settings.thresholds(), target_edge=settings.resize_target_edge)

    def analyze(self, buffer: PixelBuffer) -> HeuristicResult:
        return analyze(buffer, self.thresholds, self.target_edge)

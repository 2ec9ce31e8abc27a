"""Unit tests for the pixel heuristic analyzer."""

import numpy as np
import pytest

from shotgate import constants
from shotgate.errors import InvalidBuffer
from shotgate.quality.heuristic_analyzer import HeuristicAnalyzer, analyze, compute_metrics, decide, downscale
from shotgate.quality.pixel_buffer import PixelBuffer
from shotgate.quality.results import DecisionSymbol, Metrics
from shotgate.quality.thresholds import DEFAULT_THRESHOLDS, QualityThresholds
from tests.utils import checkerboard, checkerboard_rgb

# ---------------------------------------------------------------------------
# Downscale
# ---------------------------------------------------------------------------


def test_downscale_preserves_aspect_ratio():
    out = downscale(checkerboard(1000, 500, square=10), 256)
    assert (out.width, out.height) == (256, 128)


def test_downscale_portrait():
    out = downscale(checkerboard(600, 800, square=25), 256)
    assert (out.width, out.height) == (192, 256)


def test_downscale_never_upscales():
    buffer = checkerboard(100, 50, square=5)
    assert downscale(buffer, 256) is buffer


def test_downscale_tiny_edge_keeps_at_least_one_pixel():
    out = downscale(checkerboard(1000, 2, square=1), 256)
    assert out.height == 1
    assert out.width == 256


def test_downscale_of_aligned_checkerboard_keeps_pure_values():
    # 25px squares land exactly on 8px squares at 800 -> 256
    out = downscale(checkerboard(800, 600), 256)
    assert set(np.unique(out.pixels[..., :3])) == {40, 200}


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("value", [40, 90, 128, 200, 225])
def test_flat_buffer_has_zero_blur_and_needs_improvement(value):
    result = analyze(PixelBuffer.filled(300, 200, (value, value, value)))
    assert result.metrics.blur_variance == 0.0
    assert result.decision is DecisionSymbol.IMPROVE
    assert result.hints == (constants.HINT_REDUCE_BLUR,)


def test_all_white_is_fully_overexposed():
    result = analyze(PixelBuffer.filled(256, 256, (255, 255, 255)))
    assert result.metrics.overexposed_fraction == 1.0
    assert result.metrics.underexposed_fraction == 0.0
    assert result.decision is DecisionSymbol.RETRY
    assert result.hints == (constants.HINT_FIX_EXPOSURE,)


def test_all_black_is_fully_underexposed():
    result = analyze(PixelBuffer.filled(256, 256, (0, 0, 0)))
    assert result.metrics.underexposed_fraction == 1.0
    assert result.metrics.overexposed_fraction == 0.0
    assert result.decision is DecisionSymbol.RETRY


def test_mean_brightness_uses_rec709_weights():
    metrics = compute_metrics(PixelBuffer.filled(10, 10, (255, 0, 0)))
    assert metrics.mean_brightness == pytest.approx(0.2126 * 255)


def test_channel_cutoffs_are_strict():
    at_limits = PixelBuffer.filled(
        10, 10, (constants.OVEREXPOSED_CHANNEL_MIN,) * 3
    )  # 245 is not "above 245"
    assert compute_metrics(at_limits).overexposed_fraction == 0.0
    low = PixelBuffer.filled(10, 10, (constants.UNDEREXPOSED_CHANNEL_MAX,) * 3)
    assert compute_metrics(low).underexposed_fraction == 0.0


def test_single_channel_clip_is_not_overexposed():
    metrics = compute_metrics(PixelBuffer.filled(10, 10, (255, 255, 200)))
    assert metrics.overexposed_fraction == 0.0


def test_no_interior_means_zero_blur():
    metrics = compute_metrics(checkerboard(2, 50, square=1))
    assert metrics.blur_variance == 0.0


def test_laplacian_of_single_bright_pixel():
    rgb = np.zeros((3, 3, 3), dtype=np.uint8)
    rgb[1, 1] = 100
    metrics = compute_metrics(PixelBuffer.from_rgb(rgb))
    # One interior pixel: lap = 4 * 100
    assert metrics.blur_variance == pytest.approx(400.0**2)


def test_analyze_does_not_mutate_input():
    rgb = checkerboard_rgb(400, 300)
    buffer = PixelBuffer.from_rgb(rgb)
    before = buffer.pixels.copy()
    analyze(buffer)
    assert np.array_equal(buffer.pixels, before)
    assert not buffer.pixels.flags.writeable


def test_analyze_is_deterministic():
    buffer = checkerboard(640, 480, square=20)
    assert analyze(buffer) == analyze(buffer)


# ---------------------------------------------------------------------------
# Decision rules
# ---------------------------------------------------------------------------


def test_sharp_well_exposed_checkerboard_passes():
    result = analyze(checkerboard(800, 600))
    assert result.decision is DecisionSymbol.PASS
    assert result.hints == ()
    assert result.metrics.mean_brightness == pytest.approx(120.0)
    assert result.metrics.blur_variance > DEFAULT_THRESHOLDS.blur_variance_min
    assert result.metrics.overexposed_fraction == 0.0
    assert result.metrics.underexposed_fraction == 0.0


@pytest.mark.parametrize("rows", [19, 40, 80])
def test_overexposure_dominates_regardless_of_blur(rows):
    rgb = checkerboard_rgb(100, 100, square=10)
    rgb[:rows] = 255
    result = analyze(PixelBuffer.from_rgb(rgb))
    assert result.metrics.overexposed_fraction > DEFAULT_THRESHOLDS.overexposed_fraction_max
    assert result.decision is DecisionSymbol.RETRY


def test_overexposure_dominates_on_flat_image():
    rgb = np.full((100, 100, 3), 128, dtype=np.uint8)
    rgb[:30] = 255
    result = analyze(PixelBuffer.from_rgb(rgb))
    assert result.decision is DecisionSymbol.RETRY


def test_underexposure_just_over_limit_retries():
    rgb = checkerboard_rgb(100, 100, square=10)
    rgb[:31] = 0
    result = analyze(PixelBuffer.from_rgb(rgb))
    assert result.metrics.underexposed_fraction == pytest.approx(0.31)
    assert result.decision is DecisionSymbol.RETRY


def test_dark_sharp_image_needs_more_light():
    result = analyze(checkerboard(64, 64, square=8, dark=13, light=64))
    assert result.metrics.blur_variance > DEFAULT_THRESHOLDS.blur_variance_min
    assert result.metrics.mean_brightness < DEFAULT_THRESHOLDS.brightness_min
    assert result.decision is DecisionSymbol.IMPROVE
    assert result.hints == (constants.HINT_INCREASE_LIGHTING,)


def test_bright_sharp_image_has_glare():
    result = analyze(checkerboard(64, 64, square=8, dark=(200, 200, 255), light=(255, 255, 200)))
    assert result.metrics.overexposed_fraction == 0.0
    assert result.metrics.blur_variance > DEFAULT_THRESHOLDS.blur_variance_min
    assert result.metrics.mean_brightness > DEFAULT_THRESHOLDS.brightness_max
    assert result.decision is DecisionSymbol.IMPROVE
    assert result.hints == (constants.HINT_REDUCE_GLARE,)


def test_rule_order_is_exposure_blur_then_brightness():
    metrics = Metrics(blur_variance=0.0, overexposed_fraction=0.5, underexposed_fraction=0.5, mean_brightness=10.0)
    assert decide(metrics)[0] is DecisionSymbol.RETRY
    metrics = Metrics(blur_variance=0.0, overexposed_fraction=0.0, underexposed_fraction=0.0, mean_brightness=10.0)
    assert decide(metrics)[1] == (constants.HINT_REDUCE_BLUR,)


def test_thresholds_are_configuration():
    metrics = Metrics(blur_variance=500.0, overexposed_fraction=0.0, underexposed_fraction=0.0, mean_brightness=120.0)
    assert decide(metrics)[0] is DecisionSymbol.IMPROVE
    relaxed = QualityThresholds(blur_variance_min=100.0)
    assert decide(metrics, relaxed) == (DecisionSymbol.PASS, ())


def test_target_edge_is_configurable():
    analyzer = HeuristicAnalyzer(target_edge=64)
    result = analyzer.analyze(checkerboard(800, 600))
    assert result.metrics.mean_brightness == pytest.approx(120.0, abs=1.0)


def test_zero_area_buffer_raises():
    with pytest.raises(InvalidBuffer):
        analyze(PixelBuffer(np.zeros((0, 10, 4), dtype=np.uint8)))


def test_pixel_buffer_rejects_wrong_shape():
    with pytest.raises(InvalidBuffer):
        PixelBuffer(np.zeros((10, 10, 3), dtype=np.uint8))
    with pytest.raises(InvalidBuffer):
        PixelBuffer(np.zeros((10, 10, 4), dtype=np.float32))

"""Tunable decision thresholds for the heuristic analyzer."""

from dataclasses import dataclass

from shotgate import constants


@dataclass(frozen=True)
class QualityThresholds:
    """Decision thresholds, evaluated in rule order by ``analyze``."""

    overexposed_fraction_max: float = constants.DEFAULT_OVEREXPOSED_FRACTION_MAX
    underexposed_fraction_max: float = constants.DEFAULT_UNDEREXPOSED_FRACTION_MAX
    blur_variance_min: float = constants.DEFAULT_BLUR_VARIANCE_MIN
    brightness_min: float = constants.DEFAULT_BRIGHTNESS_MIN
    brightness_max: float = constants.DEFAULT_BRIGHTNESS_MAX


DEFAULT_THRESHOLDS = QualityThresholds()

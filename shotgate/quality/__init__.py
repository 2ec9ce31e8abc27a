from shotgate.quality.heuristic_analyzer import HeuristicAnalyzer, analyze, downscale
from shotgate.quality.merge_policy import default_hint, merge
from shotgate.quality.pixel_buffer import PixelBuffer
from shotgate.quality.results import (
    UNAVAILABLE,
    DecisionSymbol,
    HeuristicResult,
    MergedDecision,
    Metrics,
    RemoteOutcome,
    RemoteResult,
    Unavailable,
)
from shotgate.quality.thresholds import DEFAULT_THRESHOLDS, QualityThresholds

__all__ = [
    "DEFAULT_THRESHOLDS",
    "UNAVAILABLE",
    "DecisionSymbol",
    "HeuristicAnalyzer",
    "HeuristicResult",
    "MergedDecision",
    "Metrics",
    "PixelBuffer",
    "QualityThresholds",
    "RemoteOutcome",
    "RemoteResult",
    "Unavailable",
    "analyze",
    "default_hint",
    "downscale",
    "merge",
]

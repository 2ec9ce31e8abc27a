"""Data classes for heuristic, remote and merged quality decisions."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class DecisionSymbol(Enum):
    """Atomic outcome of a quality evaluation.

    No severity order is implied; consumers map symbols through lookup tables.
    """

    PASS = "pass"
    RETRY = "retry"
    IMPROVE = "improve"
    FAILURE = "failure"


class Unavailable(Enum):
    """Marker for a remote classification that produced no usable opinion."""

    UNAVAILABLE = "unavailable"

    def __repr__(self):
        return "UNAVAILABLE"


UNAVAILABLE = Unavailable.UNAVAILABLE


@dataclass(frozen=True)
class Metrics:
    """Pixel statistics computed once per analysis."""

    blur_variance: float
    overexposed_fraction: float
    underexposed_fraction: float
    mean_brightness: float

    def to_dict(self) -> dict:
        return {
            "blur_variance": self.blur_variance,
            "overexposed_fraction": self.overexposed_fraction,
            "underexposed_fraction": self.underexposed_fraction,
            "mean_brightness": self.mean_brightness,
        }


@dataclass(frozen=True)
class HeuristicResult:
    """Result of the local pixel heuristic."""

    decision: DecisionSymbol
    hints: tuple[str, ...]
    metrics: Metrics


@dataclass(frozen=True)
class RemoteResult:
    """Opinion returned by the remote classification service."""

    decision: DecisionSymbol
    hints: tuple[str, ...] = field(default_factory=tuple)
    confidence: float = 0.0

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")

    @classmethod
    def from_payload(cls, payload: Any) -> "RemoteResult":
        """Parse a classification response body.

        Raises:
            ValueError: If the payload does not match the response contract.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Classification payload must be an object, got {type(payload).__name__}")
        try:
            decision = DecisionSymbol(payload["decision"])
        except KeyError:
            raise ValueError("Classification payload has no decision") from None
        hints = payload.get("hints") or []
        if not isinstance(hints, list) or not all(isinstance(h, str) for h in hints):
            raise ValueError("Classification hints must be a list of strings")
        confidence = payload.get("confidence", 0.0)
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            raise ValueError(f"Classification confidence must be a number, got {confidence!r}")
        return cls(decision=decision, hints=tuple(hints), confidence=float(confidence))


RemoteOutcome = Union[RemoteResult, Unavailable]


@dataclass(frozen=True)
class MergedDecision:
    """Final decision plus the single hint surfaced to the user."""

    decision: DecisionSymbol
    hint: str

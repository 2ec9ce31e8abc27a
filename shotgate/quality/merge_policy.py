"""Reconcile the local heuristic with an optional remote classification."""

from shotgate import constants
from shotgate.quality.results import (
    DecisionSymbol,
    HeuristicResult,
    MergedDecision,
    RemoteOutcome,
    Unavailable,
)


def default_hint(decision: DecisionSymbol, rotation: int = 0) -> str:
    """Fallback hint when neither side supplied one.

    Pass gets a fixed acknowledgement; every other decision gets one of the
    generic improvement tips, chosen by ``rotation``.
    """
    if decision is DecisionSymbol.PASS:
        return constants.HINT_LOOKS_GOOD
    return constants.IMPROVE_TIPS[rotation % len(constants.IMPROVE_TIPS)]


def merge(heuristic: HeuristicResult, remote: RemoteOutcome, rotation: int = 0) -> MergedDecision:
    """Combine heuristic and remote opinions into one decision and one hint.

    Args:
        heuristic: Local analyzer result
        remote: Remote result, or UNAVAILABLE when the remote leg produced nothing
        rotation: Index of the improvement tip used when no hint is available

    Returns:
        MergedDecision
    """
    if isinstance(remote, Unavailable):
        decision = heuristic.decision
        hint = heuristic.hints[0] if heuristic.hints else default_hint(decision, rotation)
        return MergedDecision(decision=decision, hint=hint)

    # Local exposure failure is measured on the literal pixels; a remote pass cannot clear it
    if heuristic.decision is DecisionSymbol.RETRY and remote.decision is DecisionSymbol.PASS:
        return MergedDecision(decision=DecisionSymbol.IMPROVE, hint=constants.HINT_EXPOSURE_OVERRIDE)

    decision = remote.decision
    if remote.hints:
        hint = remote.hints[0]
    elif heuristic.hints:
        hint = heuristic.hints[0]
    else:
        hint = default_hint(decision, rotation)
    return MergedDecision(decision=decision, hint=hint)

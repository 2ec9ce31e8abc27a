"""Exception types raised by ShotGate components."""


class ShotGateError(Exception):
    """Base class for all ShotGate errors."""


class ValidationError(ShotGateError):
    """Raised when a selected file fails the basic upload constraints.

    Surfaced before any network or analysis work starts.
    """


class InvalidBuffer(ShotGateError):
    """Raised for zero-area pixel buffers and undecodable image data."""


class InvalidTransitionError(ShotGateError):
    """Raised when a lifecycle operation is not allowed from the current state."""

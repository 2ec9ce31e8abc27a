"""ShotGate: photo quality gate for sequential uploads."""

__version__ = "0.1.0"

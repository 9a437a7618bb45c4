"""Exceptions raised by the simulation engine."""

from __future__ import annotations


class SimulationError(Exception):
    """Base for every engine failure."""


class DimensionMismatchError(SimulationError, ValueError):
    """A transform and a state (or two transforms) disagree on dimension."""

    def __init__(self, expected: int, actual: int, what: str = "state"):
        super().__init__(
            f"Dimension mismatch: expected {what} of dimension {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class MalformedBasisError(SimulationError, ValueError):
    """Basis labels or qubit counts that cannot address a state."""


class NotPowerOfTwoError(SimulationError, ValueError):
    """An amplitude array or matrix side that is not a power of two."""

    def __init__(self, size: int):
        super().__init__(f"Size must be a power of two, got {size}")
        self.size = size


class UnsupportedTransformError(SimulationError, NotImplementedError):
    """A transform kind that an operation cannot handle."""


class SingularTransformError(SimulationError, ValueError):
    """A transform with no inverse (zero determinant)."""

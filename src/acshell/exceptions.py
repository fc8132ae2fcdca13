"""Errors raised by the autocorrelation shell transforms.

Every error is a :class:`ValueError` so that code written against plain
NumPy-style argument checking keeps working.
"""

from __future__ import annotations

__all__ = [
    "ACShellError",
    "InvalidFilterError",
    "InvalidLengthError",
    "InvalidLevelError",
    "InvalidThresholdError",
    "ShapeMismatchError",
    "UnknownMethodError",
]


class ACShellError(ValueError):
    """Base class for all acshell errors."""


class InvalidLengthError(ACShellError):
    """Signal length is not a power of two, or lengths do not match."""


class InvalidLevelError(ACShellError):
    """Decomposition depth is negative or deeper than log2 of the length."""


class InvalidThresholdError(ACShellError):
    """Cost threshold is negative or not a number."""


class ShapeMismatchError(ACShellError):
    """Coefficients cannot have come from a forward transform."""


class InvalidFilterError(ACShellError):
    """Filter taps are empty, malformed or not from an orthogonal wavelet."""


class UnknownMethodError(ACShellError):
    """Unrecognised packet representation selector."""

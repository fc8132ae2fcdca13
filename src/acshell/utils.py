from __future__ import annotations

import logging
import operator

import numpy as np
import numpy.typing as npt

from .exceptions import (
    InvalidFilterError,
    InvalidLengthError,
    InvalidLevelError,
)
from .typing import FloatingNDArray, IntpNDArray


def dyadlength(x: npt.ArrayLike | int) -> tuple[int, int]:
    """
    Length of a dyadic signal and its number of dyadic scales.

    Parameters
    ----------
    x : array_like or int
        Signal (its last axis is measured) or a length.

    Returns
    -------
    tuple[int, int]
        ``(n, J)`` with ``n == 2**J``.

    Raises
    ------
    InvalidLengthError
        If ``n`` is not a positive power of two.

    Examples
    --------
    >>> from acshell.utils import dyadlength
    >>> dyadlength(256)
    (256, 8)
    """
    if isinstance(x, (int, np.integer)):
        n = int(x)
    else:
        shape = np.shape(x)
        if len(shape) == 0:
            msg = "Cannot take the dyadic length of a scalar"
            raise InvalidLengthError(msg)
        n = shape[-1]
    if n < 1 or n & (n - 1) != 0:
        msg = f"Signal length {n} is not a power of two"
        raise InvalidLengthError(msg)
    return n, n.bit_length() - 1


def maxtransformlevels(x: npt.ArrayLike | int) -> int:
    """
    Deepest decomposition level available for a dyadic signal.

    Examples
    --------
    >>> import numpy as np
    >>> from acshell.utils import maxtransformlevels
    >>> maxtransformlevels(np.zeros(64))
    6
    """
    return dyadlength(x)[1]


def echant(n: int, d: int, b: int) -> IntpNDArray:
    """
    Positions of the ``b``-th interleaved sub-lattice at depth ``d``.

    The sub-lattice samples every ``2**d``-th position of a length ``n``
    signal starting at offset ``b``. The ``2**d`` sub-lattices of a depth
    are disjoint and together cover ``range(n)``, which is how the shell
    transforms filter without decimating.

    Parameters
    ----------
    n : int
        Signal length.
    d : int
        Depth, ``2**d`` must divide ``n``.
    b : int
        Branch (offset), ``0 <= b < 2**d``.

    Returns
    -------
    IntpNDArray
        ``n // 2**d`` positions ``(b + i * 2**d) % n``.

    Examples
    --------
    >>> from acshell.utils import echant
    >>> echant(8, 2, 1)
    array([1, 5])
    """
    if d < 0:
        msg = f"Depth must be non-negative, got {d}"
        raise InvalidLevelError(msg)
    stride = 1 << d
    if not 0 <= b < stride:
        msg = f"Branch {b} out of range for depth {d} (expected 0 <= b < {stride})"
        raise InvalidLevelError(msg)
    if n < stride or n % stride != 0:
        msg = f"Length {n} is not divisible by 2**{d}"
        raise InvalidLengthError(msg)
    return ((b + np.arange(n // stride, dtype=np.intp) * stride) % n).astype(np.intp)


def acfilter(x: npt.ArrayLike, f: npt.ArrayLike) -> FloatingNDArray:
    """
    Centred circular convolution along the last axis.

    Computes ``y[i] = sum_k f[k] * x[(i + c - k) % n]`` with
    ``c = len(f) // 2``. Filters longer than the signal wrap around as
    many times as needed.

    Parameters
    ----------
    x : array_like
        Input of shape ``(..., n)``.
    f : array_like
        Odd-length filter taps.

    Returns
    -------
    FloatingNDArray
        Filtered array, same shape as ``x``.

    Examples
    --------
    >>> import numpy as np
    >>> from acshell.utils import acfilter
    >>> acfilter(np.array([0.0, 1.0, 0.0, 0.0]), np.array([1.0, 2.0, 3.0]))
    array([1., 2., 3., 0.])
    """
    x = np.asarray(x, dtype=float)
    f = np.asarray(f, dtype=float)
    n = x.shape[-1]
    taps = f.shape[0]
    positions = np.arange(n)[:, None] + taps // 2 - np.arange(taps)[None, :]
    return x[..., positions % n] @ f


def _validate_level(level: int, max_level: int, name: str = "L") -> int:
    try:
        level = operator.index(level)
    except TypeError:
        msg = f"{name} must be an integer, got {level!r}"
        raise InvalidLevelError(msg) from None
    if level < 0:
        msg = f"{name}={level} must be non-negative"
        raise InvalidLevelError(msg)
    if level > max_level:
        msg = f"{name}={level} exceeds the maximum transform level {max_level}"
        raise InvalidLevelError(msg)
    return level


def _validate_filters(
    lowpass: npt.ArrayLike, highpass: npt.ArrayLike
) -> tuple[FloatingNDArray, FloatingNDArray]:
    P = np.asarray(lowpass, dtype=float)
    Q = np.asarray(highpass, dtype=float)
    if P.ndim != 1 or Q.ndim != 1:
        msg = "Shell filters must be one-dimensional"
        raise InvalidFilterError(msg)
    if P.size == 0 or P.size != Q.size:
        msg = (
            "Shell filters must be non-empty and of equal length, "
            f"got {P.size} and {Q.size}"
        )
        raise InvalidFilterError(msg)
    if P.size % 2 == 0:
        msg = f"Shell filters must have odd length, got {P.size}"
        raise InvalidFilterError(msg)
    return P, Q


def _log_wraparound(n: int, level: int, taps: int) -> None:
    # deepest sub-lattices have n / 2**(level - 1) samples
    if level > 0 and (n >> (level - 1)) < taps:
        msg = (
            f"Depth {level} leaves sub-lattices of {n >> (level - 1)} samples, "
            f"shorter than the {taps}-tap shell filters; boundaries wrap around"
        )
        logging.debug(msg)

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from .exceptions import ShapeMismatchError
from .typing import CoefficientMatrix, FloatingNDArray
from .utils import (
    _log_wraparound,
    _validate_filters,
    _validate_level,
    acfilter,
    dyadlength,
    echant,
)


def _forward_last_axis(
    x: FloatingNDArray, L: int, P: FloatingNDArray, Q: FloatingNDArray
) -> CoefficientMatrix:
    """
    Shell pyramid along the last axis, without argument checks.

    Parameters
    ----------
    x : FloatingNDArray
        Signals of shape ``(..., n)``.
    L : int
        Number of decomposition levels.
    P, Q : FloatingNDArray
        Low-pass and high-pass shell filters.

    Returns
    -------
    CoefficientMatrix
        Coefficients of shape ``(..., n, L + 1)``. Column 0 holds the residual
        and column ``L - d`` the detail at depth ``d``.
    """
    n = x.shape[-1]
    wp = np.zeros((*x.shape, L + 1), dtype=float)
    wp[..., 0] = x
    for d in range(L):
        for b in range(2**d):
            idx = echant(n, d, b)
            s = wp[..., idx, 0]
            wp[..., idx, L - d] = acfilter(s, Q)
            wp[..., idx, 0] = acfilter(s, P)
    return wp


def _inverse_last_axis(y: FloatingNDArray) -> FloatingNDArray:
    # y is a working buffer of shape (..., n, m) and is overwritten
    for i in range(1, y.shape[-1]):
        y[..., 0] = (y[..., 0] + y[..., i]) / np.sqrt(2)
    return y[..., 0]


def fwt_ac(
    x: npt.ArrayLike, L: int, P: npt.ArrayLike, Q: npt.ArrayLike
) -> CoefficientMatrix:
    """
    Forward autocorrelation shell wavelet transform.

    The transform is undecimated: at depth ``d`` the signal is split into
    the ``2**d`` interleaved sub-lattices given by :func:`~acshell.utils.echant`,
    each of which is filtered with ``P`` and ``Q`` independently.

    Parameters
    ----------
    x : array_like
        Signal of dyadic length ``n``. Leading axes, if any, are treated as a
        batch of independent signals.
    L : int
        Number of decomposition levels, ``0 <= L <= log2(n)``.
    P : array_like
        Low-pass shell filter.
    Q : array_like
        High-pass shell filter.

    Returns
    -------
    CoefficientMatrix
        Array of shape ``(n, L + 1)`` (or ``(..., n, L + 1)``). Column 0 holds
        the coarsest residual, columns ``1, ..., L`` the detail bands from
        the coarsest (depth ``L - 1``) to the finest (depth 0).

    Raises
    ------
    InvalidLengthError
        If ``n`` is not a power of two.
    InvalidLevelError
        If ``L`` is negative or exceeds ``log2(n)``.
    InvalidFilterError
        If ``P`` and ``Q`` are not odd-length 1D filters of equal size.

    Examples
    --------
    >>> import numpy as np
    >>> from acshell import fwt_ac, iwt_ac, shell_filters
    >>> P, Q = shell_filters("db2")
    >>> x = np.zeros(256)
    >>> x[127] = 1.0
    >>> coeffs = fwt_ac(x, 2, P, Q)
    >>> coeffs.shape
    (256, 3)
    >>> np.allclose(iwt_ac(coeffs), x)
    True
    """
    x = np.asarray(x, dtype=float)
    n, J = dyadlength(x)
    L = _validate_level(L, J)
    P, Q = _validate_filters(P, Q)
    _log_wraparound(n, L, P.size)
    return _forward_last_axis(x, L, P, Q)


def iwt_ac(y: npt.ArrayLike, overwrite: bool = False) -> FloatingNDArray:
    """
    Inverse autocorrelation shell wavelet transform.

    The shell filters add up to ``sqrt(2)`` times the unit impulse, so the
    signal is recovered by summing the bands, one at a time, with a
    ``1 / sqrt(2)`` normalisation per merge.

    Parameters
    ----------
    y : array_like
        Coefficients of shape ``(n, m)`` (or ``(..., n, m)``) returned by
        :func:`fwt_ac`.
    overwrite : bool, optional
        If True and ``y`` is a float64 array, column 0 of ``y`` is used as the
        accumulator and the result is a view into it. Default is False, which
        never modifies ``y``.

    Returns
    -------
    FloatingNDArray
        Reconstructed signal of length ``n``.

    Raises
    ------
    ShapeMismatchError
        If ``y`` cannot be the output of :func:`fwt_ac`.
    InvalidLengthError
        If ``n`` is not a power of two.
    """
    y = np.asarray(y, dtype=float) if overwrite else np.array(y, dtype=float)
    if y.ndim < 2:
        msg = f"Coefficients must have at least 2 dimensions, got {y.ndim}"
        raise ShapeMismatchError(msg)
    n, J = dyadlength(y.shape[-2])
    m = y.shape[-1]
    if not 1 <= m <= J + 1:
        msg = f"Coefficients of a length {n} signal need 1 to {J + 1} columns, got {m}"
        raise ShapeMismatchError(msg)
    return _inverse_last_axis(y)

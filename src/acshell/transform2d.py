from __future__ import annotations

import numpy as np
import numpy.typing as npt

from .exceptions import ShapeMismatchError
from .transform1d import _forward_last_axis, _inverse_last_axis
from .typing import CoefficientTensor, FloatingNDArray
from .utils import (
    _log_wraparound,
    _validate_filters,
    _validate_level,
    dyadlength,
)


def ac2d(
    x: npt.ArrayLike,
    L_row: int,
    L_col: int,
    P: npt.ArrayLike,
    Q: npt.ArrayLike,
) -> CoefficientTensor:
    """
    Separable 2D autocorrelation shell wavelet transform.

    Every column is transformed first (``L_col`` levels), then every row of
    each resulting column-level slice (``L_row`` levels).

    Parameters
    ----------
    x : array_like
        Image of shape ``(n_row, n_col)``, both dyadic.
    L_row : int
        Decomposition levels along rows (acting on the column index).
    L_col : int
        Decomposition levels along columns (acting on the row index).
    P : array_like
        Low-pass shell filter.
    Q : array_like
        High-pass shell filter.

    Returns
    -------
    CoefficientTensor
        Array of shape ``(n_row, n_col, L_row + 1, L_col + 1)`` indexed by
        ``(row, col, row-level, col-level)``.

    Raises
    ------
    ShapeMismatchError
        If ``x`` is not two-dimensional.
    InvalidLengthError
        If a side is not a power of two.
    InvalidLevelError
        If a level is negative or exceeds log2 of its side.

    Examples
    --------
    >>> import numpy as np
    >>> from acshell import ac2d, iac2d, shell_filters
    >>> P, Q = shell_filters("db2")
    >>> image = np.random.default_rng(0).normal(size=(32, 16))
    >>> coeffs = ac2d(image, 2, 3, P, Q)
    >>> coeffs.shape
    (32, 16, 3, 4)
    >>> np.allclose(iac2d(coeffs), image)
    True
    """
    x = np.asarray(x, dtype=float)
    if x.ndim != 2:
        msg = f"Image must be two-dimensional, got {x.ndim} dimensions"
        raise ShapeMismatchError(msg)
    n_row, J_col = dyadlength(x.shape[0])
    n_col, J_row = dyadlength(x.shape[1])
    L_row = _validate_level(L_row, J_row, name="L_row")
    L_col = _validate_level(L_col, J_col, name="L_col")
    P, Q = _validate_filters(P, Q)
    _log_wraparound(n_row, L_col, P.size)
    _log_wraparound(n_col, L_row, P.size)

    # columns: (n_col, n_row) -> (n_col, n_row, D_col)
    by_column = _forward_last_axis(x.T, L_col, P, Q)
    # rows: (n_row, D_col, n_col) -> (n_row, D_col, n_col, D_row)
    by_row = _forward_last_axis(np.transpose(by_column, (1, 2, 0)), L_row, P, Q)
    return np.ascontiguousarray(np.transpose(by_row, (0, 2, 3, 1)))


def iac2d(x: npt.ArrayLike) -> FloatingNDArray:
    """
    Inverse of :func:`ac2d`.

    Parameters
    ----------
    x : array_like
        Coefficients of shape ``(n_row, n_col, L_row + 1, L_col + 1)``.

    Returns
    -------
    FloatingNDArray
        Reconstructed image of shape ``(n_row, n_col)``.

    Raises
    ------
    ShapeMismatchError
        If ``x`` is not four-dimensional or a level axis is longer than its
        spatial axis allows.
    InvalidLengthError
        If a spatial side is not a power of two.
    """
    x = np.asarray(x, dtype=float)
    if x.ndim != 4:
        msg = f"Coefficients must be four-dimensional, got {x.ndim} dimensions"
        raise ShapeMismatchError(msg)
    n_row, n_col, D_row, D_col = x.shape
    _, J_col = dyadlength(n_row)
    _, J_row = dyadlength(n_col)
    if not (1 <= D_row <= J_row + 1 and 1 <= D_col <= J_col + 1):
        msg = (
            f"Level axes {(D_row, D_col)} do not fit an image of shape "
            f"{(n_row, n_col)}"
        )
        raise ShapeMismatchError(msg)

    # (n_row, D_col, n_col, D_row) -> (n_row, D_col, n_col)
    by_row = _inverse_last_axis(np.transpose(x, (0, 3, 1, 2)).copy())
    # (n_col, n_row, D_col) -> (n_col, n_row)
    by_column = _inverse_last_axis(np.transpose(by_row, (2, 0, 1)).copy())
    return np.ascontiguousarray(by_column.T)

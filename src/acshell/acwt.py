from __future__ import annotations

from typing import Literal, Union

import numpy as np
import numpy.typing as npt

from .bestbasis import bestbasistree
from .exceptions import ShapeMismatchError
from .filters import ShellFilters, WaveletLike
from .packets import PacketTree, acwpt
from .transform1d import fwt_ac, iwt_ac
from .transform2d import ac2d, iac2d
from .typing import (
    BoolNDArray,
    CoefficientMatrix,
    CoefficientTensor,
    CostFunction,
    FloatingNDArray,
    PacketArray,
)
from .utils import _validate_level, dyadlength

Levels = Union[int, "tuple[int, int]", None]


def _as_filters(wavelet: WaveletLike | ShellFilters) -> ShellFilters:
    if isinstance(wavelet, ShellFilters):
        return wavelet
    return ShellFilters.from_wavelet(wavelet)


def _resolve_levels(shape: tuple[int, ...], levels: Levels) -> tuple[int, ...]:
    """Decomposition depth per transform, ``(L,)`` or ``(L_row, L_col)``."""
    if len(shape) not in (1, 2):
        msg = f"Only 1D signals and 2D images are supported, got shape {shape}"
        raise ShapeMismatchError(msg)
    # L_row runs along axis 1 and L_col along axis 0
    max_levels = tuple(dyadlength(s)[1] for s in reversed(shape))
    if levels is None:
        return max_levels
    if isinstance(levels, (int, np.integer)):
        levels = (int(levels),) * len(shape)
    levels = tuple(levels)
    if len(levels) != len(shape):
        msg = f"Expected {len(shape)} levels for shape {shape}, got {len(levels)}"
        raise ShapeMismatchError(msg)
    names = ("L",) if len(shape) == 1 else ("L_row", "L_col")
    return tuple(
        _validate_level(level, J, name=name)
        for level, J, name in zip(levels, max_levels, names)
    )


def acwt(
    x: npt.ArrayLike,
    wavelet: WaveletLike | ShellFilters = "db2",
    L: Levels = None,
) -> CoefficientMatrix | CoefficientTensor:
    """
    Autocorrelation shell wavelet transform of a signal or image.

    Parameters
    ----------
    x : array_like
        1D signal or 2D image with dyadic sides.
    wavelet : str | pywt.Wavelet | array_like | ShellFilters, optional
        Base orthogonal wavelet or precomputed shell filters. Default is
        ``"db2"``.
    L : int | tuple[int, int], optional
        Decomposition levels. For images, an int applies to both axes and a
        pair is ``(L_row, L_col)``. Defaults to the maximum per axis.

    Returns
    -------
    CoefficientMatrix | CoefficientTensor
        Output of :func:`~acshell.transform1d.fwt_ac` or
        :func:`~acshell.transform2d.ac2d`.

    Examples
    --------
    >>> import numpy as np
    >>> from acshell import acwt, iacwt
    >>> image = np.random.default_rng(3).normal(size=(16, 16))
    >>> coeffs = acwt(image, "db2", 2)
    >>> coeffs.shape
    (16, 16, 3, 3)
    >>> np.allclose(iacwt(coeffs), image)
    True
    """
    x = np.asarray(x, dtype=float)
    P, Q = _as_filters(wavelet)
    if x.ndim == 1:
        (level,) = _resolve_levels(x.shape, L)
        return fwt_ac(x, level, P, Q)
    L_row, L_col = _resolve_levels(x.shape, L)
    return ac2d(x, L_row, L_col, P, Q)


def iacwt(x: npt.ArrayLike) -> FloatingNDArray:
    """
    Inverse of :func:`acwt`, dispatching on the number of dimensions.

    Raises
    ------
    ShapeMismatchError
        If ``x`` is neither a 2D coefficient matrix nor a 4D tensor.
    """
    x = np.asarray(x, dtype=float)
    if x.ndim == 2:
        return iwt_ac(x)
    if x.ndim == 4:
        return iac2d(x)
    msg = f"Coefficients must be 2D (signal) or 4D (image), got {x.ndim} dimensions"
    raise ShapeMismatchError(msg)


class ACWT:
    """
    Autocorrelation shell wavelet transform for a fixed input shape.

    The shell filters are derived once at construction and shared by every
    call.

    Parameters
    ----------
    shape : tuple[int, ...]
        Shape of the input data, ``(n,)`` or ``(n_row, n_col)`` with dyadic
        sides.
    wavelet : str | pywt.Wavelet | array_like | ShellFilters, optional
        Base orthogonal wavelet or precomputed filters. Default is ``"db2"``.
    levels : int | tuple[int, int], optional
        Decomposition levels, ``(L_row, L_col)`` for images. Defaults to the
        maximum per axis.

    Attributes
    ----------
    shape : tuple[int, ...]
        Expected input shape.
    filters : ShellFilters
        Shell filters in use.
    levels : tuple[int, ...]
        Levels per axis, ``(L,)`` or ``(L_row, L_col)``.

    Examples
    --------
    >>> import numpy as np
    >>> from acshell import ACWT
    >>> transform = ACWT(shape=(256,), wavelet="db2", levels=2)
    >>> x = np.zeros(256)
    >>> x[127] = 1.0
    >>> coeffs = transform.forward(x)
    >>> coeffs.shape
    (256, 3)
    >>> np.allclose(transform.backward(coeffs), x)
    True
    """

    def __init__(
        self,
        shape: tuple[int, ...],
        wavelet: WaveletLike | ShellFilters = "db2",
        levels: Levels = None,
    ) -> None:
        self.shape = tuple(shape)
        self.filters = _as_filters(wavelet)
        self.levels = _resolve_levels(self.shape, levels)

    @property
    def coefficient_shape(self) -> tuple[int, ...]:
        """Shape of the coefficients returned by :meth:`forward`."""
        return (*self.shape, *(level + 1 for level in self.levels))

    def _check_shape(self, shape: tuple[int, ...], expected: tuple[int, ...]) -> None:
        if shape != expected:
            msg = f"Input shape {shape} does not match expected shape {expected}"
            raise ShapeMismatchError(msg)

    def forward(self, x: npt.ArrayLike) -> CoefficientMatrix | CoefficientTensor:
        """Forward transform of an array of shape :attr:`shape`."""
        x = np.asarray(x, dtype=float)
        self._check_shape(x.shape, self.shape)
        P, Q = self.filters
        if x.ndim == 1:
            return fwt_ac(x, self.levels[0], P, Q)
        L_row, L_col = self.levels
        return ac2d(x, L_row, L_col, P, Q)

    def backward(self, coefficients: npt.ArrayLike) -> FloatingNDArray:
        """Inverse transform of coefficients of shape :attr:`coefficient_shape`."""
        coefficients = np.asarray(coefficients, dtype=float)
        self._check_shape(coefficients.shape, self.coefficient_shape)
        return iacwt(coefficients)

    def packets(
        self,
        x: npt.ArrayLike,
        levels: int | None = None,
        method: Literal["tree", "array"] = "tree",
    ) -> PacketTree | PacketArray:
        """Wavelet packet decomposition of a 1D signal of shape :attr:`shape`."""
        x = np.asarray(x, dtype=float)
        self._check_shape(x.shape, self.shape)
        if x.ndim != 1:
            msg = "Wavelet packets are only defined for 1D signals"
            raise ShapeMismatchError(msg)
        P, Q = self.filters
        return acwpt(x, P, Q, self.levels[0] if levels is None else levels, method)

    def best_basis(
        self,
        x: npt.ArrayLike,
        et: CostFunction | None = None,
        method: Literal["tree", "array"] = "tree",
    ) -> PacketTree | tuple[PacketArray, BoolNDArray]:
        """
        Best basis of the packet decomposition of ``x``.

        Returns the pruned tree for ``method="tree"`` and the pair
        ``(W, mask)`` for ``method="array"``.
        """
        decomposition = self.packets(x, method=method)
        if method == "tree":
            return bestbasistree(decomposition, et)
        return decomposition, bestbasistree(decomposition, et)

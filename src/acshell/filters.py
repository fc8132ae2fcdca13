from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Iterator, Union

import numpy as np
import numpy.typing as npt
import pywt

from .exceptions import InvalidFilterError
from .typing import FloatingNDArray

if sys.version_info >= (3, 10):
    from typing import TypeAlias
else:
    from typing_extensions import TypeAlias

WaveletLike: TypeAlias = Union[str, pywt.Wavelet, npt.ArrayLike]

# Largest deviation from the orthogonality conditions that is still accepted,
# and the smallest one that is reported.
ORTHOGONALITY_TOLERANCE = 1e-4
ORTHOGONALITY_WARNING = 1e-10


def _scaling_filter(wavelet: WaveletLike) -> tuple[FloatingNDArray, str]:
    """
    Extract the scaling (low-pass) filter taps of an orthogonal wavelet.

    Parameters
    ----------
    wavelet : str | pywt.Wavelet | array_like
        PyWavelets name, wavelet object or raw filter taps.

    Returns
    -------
    tuple[FloatingNDArray, str]
        Filter taps and a display name.
    """
    if isinstance(wavelet, str):
        try:
            wavelet = pywt.Wavelet(wavelet)
        except ValueError as err:
            msg = f"Unknown wavelet {wavelet!r}"
            raise InvalidFilterError(msg) from err

    if isinstance(wavelet, pywt.Wavelet):
        if not wavelet.orthogonal:
            msg = f"Wavelet {wavelet.name!r} is not orthogonal"
            raise InvalidFilterError(msg)
        return np.asarray(wavelet.rec_lo, dtype=float), wavelet.name

    try:
        taps = np.asarray(wavelet, dtype=float)
    except (TypeError, ValueError) as err:
        msg = "Filter taps must be real numbers"
        raise InvalidFilterError(msg) from err
    return taps, "custom"


def _check_orthogonal(h: FloatingNDArray) -> None:
    if h.ndim != 1:
        msg = f"Filter taps must be one-dimensional, got shape {h.shape}"
        raise InvalidFilterError(msg)
    if h.size < 2:
        msg = f"Filter needs at least 2 taps, got {h.size}"
        raise InvalidFilterError(msg)
    if not np.all(np.isfinite(h)):
        msg = "Filter taps must be finite"
        raise InvalidFilterError(msg)

    # An orthogonal scaling filter has unit energy, sums to sqrt(2) and is
    # orthogonal to its own even shifts.
    full = np.correlate(h, h, mode="full")[h.size - 1 :]
    deviation = max(
        abs(full[0] - 1.0),
        abs(h.sum() - np.sqrt(2)),
        float(np.max(np.abs(full[2::2]), initial=0.0)),
    )
    if deviation > ORTHOGONALITY_TOLERANCE:
        msg = (
            "Filter taps are not the scaling filter of an orthogonal wavelet "
            f"(deviation {deviation:.3g})"
        )
        raise InvalidFilterError(msg)
    if deviation > ORTHOGONALITY_WARNING:
        msg = (
            "Filter taps are only approximately orthogonal "
            f"(deviation {deviation:.3g})"
        )
        logging.warning(msg)


def autocorr(h: npt.ArrayLike) -> FloatingNDArray:
    """
    One-sided autocorrelation coefficients of a filter.

    Parameters
    ----------
    h : array_like
        Filter taps of length ``m``.

    Returns
    -------
    FloatingNDArray
        ``a[k - 1] = 2 * sum_i h[i] * h[i + k]`` for ``k = 1, ..., m - 1``.

    Examples
    --------
    >>> import numpy as np
    >>> from acshell.filters import autocorr
    >>> autocorr(np.array([1.0, 1.0]) / np.sqrt(2))
    array([1.])
    """
    h = np.asarray(h, dtype=float)
    return 2 * np.correlate(h, h, mode="full")[h.size :]


def _shell_filter(a: FloatingNDArray) -> FloatingNDArray:
    # Symmetric filter [reverse(b), 1/sqrt(2), b] with b = a / (2 sqrt(2)).
    # Even lags vanish for an orthogonal filter, drop the rounding residue.
    a = a.copy()
    a[1::2] = 0.0
    c1 = 1 / np.sqrt(2)
    b = (c1 / 2) * a
    return np.concatenate([b[::-1], [c1], b])


def pfilter(wavelet: WaveletLike) -> FloatingNDArray:
    """
    Low-pass autocorrelation shell filter ``P``.

    Parameters
    ----------
    wavelet : str | pywt.Wavelet | array_like
        Orthogonal wavelet (PyWavelets name or object) or its scaling
        filter taps.

    Returns
    -------
    FloatingNDArray
        Symmetric filter of length ``2 * m - 1``.

    Examples
    --------
    >>> from acshell.filters import pfilter
    >>> pfilter("haar")
    array([0.35355339, 0.70710678, 0.35355339])
    """
    h, _ = _scaling_filter(wavelet)
    _check_orthogonal(h)
    return _shell_filter(autocorr(h))


def qfilter(wavelet: WaveletLike) -> FloatingNDArray:
    """
    High-pass autocorrelation shell filter ``Q``.

    Built from the autocorrelation of the quadrature mirror high-pass filter
    ``g[i] = (-1)**i * h[m - 1 - i]``, so ``P + Q`` is ``sqrt(2)`` times the
    unit impulse.

    Examples
    --------
    >>> from acshell.filters import qfilter
    >>> qfilter("haar")
    array([-0.35355339,  0.70710678, -0.35355339])
    """
    h, _ = _scaling_filter(wavelet)
    _check_orthogonal(h)
    g = h[::-1] * (-1.0) ** np.arange(h.size)
    return _shell_filter(autocorr(g))


def _readonly(arr: FloatingNDArray) -> FloatingNDArray:
    arr = np.array(arr, dtype=float)
    arr.setflags(write=False)
    return arr


@dataclass(
    frozen=True, eq=False, **({"kw_only": True} if sys.version_info >= (3, 10) else {})
)
class ShellFilters:
    """
    Pair of autocorrelation shell filters derived from one orthogonal wavelet.

    Instances are immutable: the filter arrays are read-only, so a single
    value can be shared by any number of transform calls.

    Parameters
    ----------
    lowpass : FloatingNDArray
        Low-pass shell filter ``P``.
    highpass : FloatingNDArray
        High-pass shell filter ``Q``.
    name : str
        Name of the base wavelet.

    Examples
    --------
    >>> from acshell.filters import ShellFilters
    >>> filters = ShellFilters.from_wavelet("db2")
    >>> filters.lowpass.shape
    (7,)
    >>> filters.name
    'db2'
    """

    lowpass: FloatingNDArray
    highpass: FloatingNDArray
    name: str = "custom"
    length: int = field(init=False)

    def __post_init__(self) -> None:
        P = _readonly(self.lowpass)
        Q = _readonly(self.highpass)
        if P.ndim != 1 or P.shape != Q.shape or P.size % 2 == 0:
            msg = (
                "Shell filters must be one-dimensional, odd-length and of equal "
                f"length, got shapes {P.shape} and {Q.shape}"
            )
            raise InvalidFilterError(msg)
        # frozen dataclass, bypass __setattr__
        object.__setattr__(self, "lowpass", P)
        object.__setattr__(self, "highpass", Q)
        object.__setattr__(self, "length", P.size)

    @classmethod
    def from_wavelet(cls, wavelet: WaveletLike) -> ShellFilters:
        """Derive ``(P, Q)`` from a base orthogonal wavelet."""
        _, name = _scaling_filter(wavelet)
        return cls(lowpass=pfilter(wavelet), highpass=qfilter(wavelet), name=name)

    def __iter__(self) -> Iterator[FloatingNDArray]:
        # allows ``P, Q = filters``
        yield self.lowpass
        yield self.highpass

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ShellFilters):
            return NotImplemented
        return bool(
            self.name == other.name
            and np.array_equal(self.lowpass, other.lowpass)
            and np.array_equal(self.highpass, other.highpass)
        )

    def __hash__(self) -> int:
        return hash((self.name, self.lowpass.tobytes(), self.highpass.tobytes()))


def shell_filters(wavelet: WaveletLike = "db2") -> ShellFilters:
    """
    Derive the autocorrelation shell filters of ``wavelet``.

    Examples
    --------
    >>> from acshell import shell_filters
    >>> P, Q = shell_filters("db2")
    >>> P.size, Q.size
    (7, 7)
    """
    return ShellFilters.from_wavelet(wavelet)

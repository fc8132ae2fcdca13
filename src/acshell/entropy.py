"""Entropy-like cost functions used by the best basis search.

Every cost maps a coefficient vector to a scalar, lower meaning a sparser
(better) representation. Apart from :class:`ThresholdEntropy`, the vector is
first divided by its Euclidean norm so that nodes of different energy can be
compared. A zero vector costs 0.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from .exceptions import InvalidThresholdError
from .typing import CostFunction, FloatingNDArray

__all__ = [
    "Entropy",
    "LogEnergyEntropy",
    "NormEntropy",
    "ShannonEntropy",
    "ThresholdEntropy",
    "coefentropy",
]


def _normalized(x: npt.ArrayLike) -> FloatingNDArray:
    x = np.asarray(x, dtype=float).ravel()
    nrm = np.linalg.norm(x)
    if nrm == 0:
        return np.zeros_like(x)
    return x / nrm


class Entropy(abc.ABC):
    """Cost function interface: ``cost(x) -> float``."""

    @abc.abstractmethod
    def __call__(self, x: npt.ArrayLike) -> float: ...


@dataclass(frozen=True)
class NormEntropy(Entropy):
    """
    L1 norm of the normalised vector, a sparsity measure.

    Examples
    --------
    >>> from acshell.entropy import NormEntropy
    >>> NormEntropy()([0.0, 5.0])
    1.0
    >>> NormEntropy()([1.0, 1.0, 1.0, 1.0])
    2.0
    """

    def __call__(self, x: npt.ArrayLike) -> float:
        return float(np.sum(np.abs(_normalized(x))))


@dataclass(frozen=True)
class ShannonEntropy(Entropy):
    """
    Shannon entropy ``-sum(s * log(s))`` of the energy distribution
    ``s = x**2 / ||x||**2``, with ``0 * log(0) = 0``.
    """

    def __call__(self, x: npt.ArrayLike) -> float:
        s = _normalized(x) ** 2
        s = s[s > 0]
        return float(-np.sum(s * np.log(s)))


@dataclass(frozen=True)
class LogEnergyEntropy(Entropy):
    """
    Log energy entropy ``-sum(log(s))`` over the non-zero ``s = x**2 / ||x||**2``.

    Each non-zero coefficient adds ``-log(s) >= 0``, so a single spike costs 0
    and spreading the energy over more coefficients costs more.

    Examples
    --------
    >>> from acshell.entropy import LogEnergyEntropy
    >>> LogEnergyEntropy()([0.0, 3.0, 0.0])
    0.0
    """

    def __call__(self, x: npt.ArrayLike) -> float:
        s = _normalized(x) ** 2
        return float(np.sum(np.log(1 / s[s > 0])))


@dataclass(frozen=True)
class ThresholdEntropy(Entropy):
    """
    Number of coefficients whose magnitude exceeds ``threshold``.

    Parameters
    ----------
    threshold : float
        Magnitude threshold, must be non-negative.
    """

    threshold: float

    def __post_init__(self) -> None:
        if not self.threshold >= 0:
            msg = f"threshold must be non-negative, got {self.threshold}"
            raise InvalidThresholdError(msg)

    def __call__(self, x: npt.ArrayLike) -> float:
        x = np.asarray(x, dtype=float)
        return float(np.count_nonzero(np.abs(x) > self.threshold))


def coefentropy(x: npt.ArrayLike, et: Entropy | CostFunction | None = None) -> float:
    """
    Cost of the vector ``x`` under ``et`` (default :class:`NormEntropy`).

    Any callable mapping a vector to a number can be used in place of an
    :class:`Entropy`.

    Examples
    --------
    >>> from acshell.entropy import ThresholdEntropy, coefentropy
    >>> coefentropy([0.1, -2.0, 3.0], ThresholdEntropy(1.0))
    2.0
    """
    et = NormEntropy() if et is None else et
    return float(et(np.asarray(x, dtype=float)))

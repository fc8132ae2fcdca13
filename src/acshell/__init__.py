"""
acshell: autocorrelation shell wavelet transforms
=================================================

Redundant, shift-invariant wavelet decompositions built from the
autocorrelation of orthogonal wavelet filters: a 1D pyramid, its separable
2D extension, a binary wavelet packet transform and entropy-driven best
basis selection.
"""

from __future__ import annotations

__all__ = [
    "ACWT",
    "Entropy",
    "LogEnergyEntropy",
    "NormEntropy",
    "PacketTree",
    "ShannonEntropy",
    "ShellFilters",
    "ThresholdEntropy",
    "ac2d",
    "acfilter",
    "acwpt",
    "acwt",
    "autocorr",
    "basis_cost",
    "basis_leaves",
    "bestbasistree",
    "bestbasistree_",
    "coefentropy",
    "dyadlength",
    "echant",
    "fwt_ac",
    "iac2d",
    "iacwpt",
    "iacwt",
    "iwt_ac",
    "maxtransformlevels",
    "pfilter",
    "qfilter",
    "shell_filters",
]

from .acwt import ACWT, acwt, iacwt
from .bestbasis import basis_cost, basis_leaves, bestbasistree, bestbasistree_
from .entropy import (
    Entropy,
    LogEnergyEntropy,
    NormEntropy,
    ShannonEntropy,
    ThresholdEntropy,
    coefentropy,
)
from .filters import ShellFilters, autocorr, pfilter, qfilter, shell_filters
from .packets import PacketTree, acwpt, iacwpt
from .transform1d import fwt_ac, iwt_ac
from .transform2d import ac2d, iac2d
from .utils import acfilter, dyadlength, echant, maxtransformlevels

__version__ = "0.1.0"

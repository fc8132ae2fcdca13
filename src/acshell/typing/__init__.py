from __future__ import annotations

__all__ = [
    "BoolNDArray",
    "CoefficientMatrix",
    "CoefficientTensor",
    "CostFunction",
    "FloatingNDArray",
    "IntpNDArray",
    "PacketArray",
]
from ._typing import (
    BoolNDArray,
    CoefficientMatrix,
    CoefficientTensor,
    CostFunction,
    FloatingNDArray,
    IntpNDArray,
    PacketArray,
)

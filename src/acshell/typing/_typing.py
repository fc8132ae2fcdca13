from __future__ import annotations

import sys
from typing import Callable

import numpy as np
from numpy.typing import NDArray

if sys.version_info >= (3, 10):
    from typing import TypeAlias
else:
    from typing_extensions import TypeAlias

FloatingNDArray: TypeAlias = NDArray[np.floating]
BoolNDArray: TypeAlias = NDArray[np.bool_]
IntpNDArray: TypeAlias = NDArray[np.intp]

# (n, L + 1): residual in column 0, detail bands coarsest to finest after it
CoefficientMatrix: TypeAlias = NDArray[np.floating]
# (n_row, n_col, L_row + 1, L_col + 1)
CoefficientTensor: TypeAlias = NDArray[np.floating]
# (n, 2**(L + 1) - 1), node i has children 2i + 1 and 2i + 2
PacketArray: TypeAlias = NDArray[np.floating]

CostFunction: TypeAlias = Callable[[NDArray[np.floating]], float]

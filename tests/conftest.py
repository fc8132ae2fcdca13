"""Shared fixtures and utilities for the acshell test files."""

from __future__ import annotations

import numpy as np
import pytest

from acshell import ShellFilters, shell_filters

# Orthogonal wavelets exercised by the parametrized tests
TEST_WAVELETS = ("haar", "db2", "db4", "sym4", "coif1")


def get_test_lengths() -> list[tuple[int, int]]:
    """
    Get signal lengths with a decomposition level for each.

    Returns
    -------
    list[tuple[int, int]]
        Pairs ``(n, L)`` with ``n`` a power of two and ``0 <= L <= log2(n)``.
        Includes the degenerate ``L = 0`` and the deepest level.

    Examples
    --------
    >>> lengths = get_test_lengths()
    >>> all(n & (n - 1) == 0 for n, _ in lengths)
    True
    """
    return [(2, 1), (8, 0), (8, 3), (32, 2), (64, 6), (256, 4)]


def get_test_image_shapes() -> list[tuple[tuple[int, int], int, int]]:
    """
    Get image shapes with ``(L_row, L_col)`` for the 2D tests.

    Returns
    -------
    list[tuple[tuple[int, int], int, int]]
        Triplets ``(shape, L_row, L_col)``; ``L_row`` is bounded by the
        number of columns and ``L_col`` by the number of rows.
    """
    return [
        ((8, 8), 0, 0),
        ((16, 16), 2, 2),
        ((32, 16), 2, 3),
        ((16, 64), 4, 1),
        ((64, 64), 6, 6),
    ]


@pytest.fixture
def rng():
    """Random number generator fixture."""
    return np.random.default_rng(42)


@pytest.fixture
def filters() -> ShellFilters:
    """Shell filters of the Daubechies 2 wavelet."""
    return shell_filters("db2")

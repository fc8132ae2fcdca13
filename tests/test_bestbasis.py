"""Tests for the best basis search over autocorrelation wavelet packets."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from acshell import (
    LogEnergyEntropy,
    NormEntropy,
    ShannonEntropy,
    ThresholdEntropy,
    acwpt,
    basis_cost,
    basis_leaves,
    bestbasistree,
    bestbasistree_,
    iacwpt,
)
from acshell.exceptions import ShapeMismatchError
from acshell.packets import ROOT

COSTS = [NormEntropy(), ShannonEntropy(), LogEnergyEntropy(), ThresholdEntropy(0.1)]


def make_signal(rng, n=128):
    """
    Piecewise smooth test signal: two chirps and a few spikes.

    Parameters
    ----------
    rng : np.random.Generator
        Random number generator for the spikes.
    n : int, optional
        Signal length. Default is 128.

    Returns
    -------
    np.ndarray
        Test signal of length ``n``.
    """
    t = np.linspace(0, 1, n, endpoint=False)
    x = np.sin(2 * np.pi * 5 * t**2) + 0.5 * np.cos(2 * np.pi * 30 * t) * (t > 0.5)
    x[rng.integers(0, n, size=3)] += 2.0
    return x


def constant_cost(v):
    """Cost of 1 for every node, so every comparison is a tie."""
    return 1.0


@pytest.mark.parametrize("et", COSTS)
def test_cost_never_increases(rng, filters, et):
    """
    The best basis is never worse than the root or the full expansion.

    Both are bases considered by the search.
    """
    P, Q = filters
    x = make_signal(rng)
    tree = acwpt(x, P, Q, 5)
    best = bestbasistree(tree, et)
    cost = basis_cost(best, et)
    assert cost <= basis_cost(tree, et) + 1e-12
    assert cost <= et(x) + 1e-12


@pytest.mark.parametrize("et", COSTS)
def test_tree_and_array_agree(rng, filters, et):
    """Both forms select the same leaves, with the same cost."""
    P, Q = filters
    x = make_signal(rng)
    best = bestbasistree(acwpt(x, P, Q, 4), et)
    W = acwpt(x, P, Q, 4, method="array")
    mask = bestbasistree(W, et)

    tree_leaves = sorted(best.heap_index(i) for i in best.leaves())
    np.testing.assert_array_equal(basis_leaves(mask), tree_leaves)
    np.testing.assert_allclose(
        basis_cost(W, et, mask), basis_cost(best, et), rtol=1e-12
    )


@pytest.mark.round_trip
@pytest.mark.parametrize("method", ["tree", "array"])
def test_reconstruction(rng, filters, method):
    """The selected basis reconstructs the signal."""
    P, Q = filters
    x = make_signal(rng)
    decomposition = acwpt(x, P, Q, 5, method=method)
    if method == "tree":
        recon = iacwpt(bestbasistree(decomposition))
    else:
        recon = iacwpt(decomposition, bestbasistree(decomposition))
    np.testing.assert_allclose(recon, x, rtol=1e-12, atol=1e-12)


def test_decomposition_kept_when_cheaper(filters):
    """
    Test a signal where splitting pays off at every depth.

    For a constant signal under the plain L1 norm, the low-pass child carries
    ``sqrt(2)`` times the parent, so the averaged child cost is lower all the
    way down the leftmost path.
    """
    P, Q = filters
    tree = acwpt(np.ones(32), P, Q, 3)
    best = bestbasistree(tree, lambda v: float(np.sum(np.abs(v))))

    node = ROOT
    while not best.is_leaf(node):
        node = best.children(node)[0]
    assert best.depth[node] == 3


def test_ties_collapse_to_parent(rng, filters, caplog):
    """With equal costs everywhere the basis is the root alone."""
    P, Q = filters
    tree = acwpt(rng.normal(size=32), P, Q, 3)
    with caplog.at_level(logging.WARNING):
        best = bestbasistree(tree, constant_cost)
    assert len(best) == 1
    assert "collapsed the packet tree to its root" in caplog.text

    W = acwpt(rng.normal(size=32), P, Q, 3, method="array")
    mask = bestbasistree(W, constant_cost)
    np.testing.assert_array_equal(mask, [True] + [False] * 14)
    np.testing.assert_array_equal(basis_leaves(mask), [ROOT])


def test_decisions_are_logged(rng, filters, caplog):
    """Every collapsed node is reported at debug level."""
    P, Q = filters
    tree = acwpt(rng.normal(size=16), P, Q, 1)
    with caplog.at_level(logging.DEBUG):
        bestbasistree(tree, constant_cost)
    assert "Collapsing node 0 at depth 0" in caplog.text


class TestInPlace:
    """Tests for the copying and in-place variants."""

    def test_input_untouched(self, rng, filters):
        """bestbasistree works on a copy of the tree."""
        P, Q = filters
        tree = acwpt(rng.normal(size=32), P, Q, 3)
        bestbasistree(tree, constant_cost)
        assert len(tree) == 15

    def test_in_place(self, rng, filters):
        """bestbasistree_ prunes and returns the tree itself."""
        P, Q = filters
        tree = acwpt(rng.normal(size=32), P, Q, 3)
        assert bestbasistree_(tree, constant_cost) is tree
        assert len(tree) == 1

    def test_same_result(self, rng, filters):
        """Both variants agree."""
        P, Q = filters
        tree = acwpt(make_signal(rng, 64), P, Q, 4)
        copied = bestbasistree(tree)
        bestbasistree_(tree)
        assert sorted(copied.heap_index(i) for i in copied.leaves()) == sorted(
            tree.heap_index(i) for i in tree.leaves()
        )

    def test_array_not_modified(self, rng, filters):
        """The array form is never written to."""
        P, Q = filters
        W = acwpt(make_signal(rng, 64), P, Q, 4, method="array")
        before = W.copy()
        bestbasistree(W)
        np.testing.assert_array_equal(W, before)


class TestBasisHelpers:
    """Tests for basis_cost and basis_leaves."""

    def test_cost_of_full_array(self, rng, filters):
        """Without a mask the full expansion is costed."""
        P, Q = filters
        x = make_signal(rng, 64)
        W = acwpt(x, P, Q, 3, method="array")
        tree = acwpt(x, P, Q, 3)
        np.testing.assert_allclose(basis_cost(W), basis_cost(tree), rtol=1e-12)

    def test_cost_of_root(self, rng, filters):
        """The root-only basis costs the signal's own entropy."""
        P, Q = filters
        x = make_signal(rng, 64)
        W = acwpt(x, P, Q, 2, method="array")
        mask = np.array([True] + [False] * 6)
        np.testing.assert_allclose(
            basis_cost(W, NormEntropy(), mask), NormEntropy()(x), rtol=1e-15
        )

    def test_cost_is_averaged(self, rng, filters):
        """An internal node costs the mean of its children."""
        P, Q = filters
        et = NormEntropy()
        W = acwpt(make_signal(rng, 64), P, Q, 1, method="array")
        expected = (et(W[:, 1]) + et(W[:, 2])) / 2
        np.testing.assert_allclose(basis_cost(W, et), expected, rtol=1e-15)

    def test_leaves_of_full_mask(self):
        """The leaves of a full expansion are the deepest level."""
        leaves = basis_leaves(np.ones(7, dtype=bool))
        np.testing.assert_array_equal(leaves, [3, 4, 5, 6])

    def test_mask_with_tree(self, rng, filters):
        """Test that a mask is refused for the tree form."""
        P, Q = filters
        tree = acwpt(rng.normal(size=16), P, Q, 1)
        with pytest.raises(ShapeMismatchError, match="array form"):
            basis_cost(tree, mask=np.ones(3, dtype=bool))

    @pytest.mark.parametrize(
        "mask", [np.ones(6, dtype=bool), np.ones((3, 3), dtype=bool)]
    )
    def test_invalid_leaves_mask(self, mask):
        """Test that masks of the wrong shape are rejected."""
        with pytest.raises(ShapeMismatchError):
            basis_leaves(mask)

    def test_not_two_dimensional(self):
        """Test that the array form must be a matrix."""
        with pytest.raises(ShapeMismatchError, match="two-dimensional"):
            bestbasistree(np.zeros(16))
        with pytest.raises(ShapeMismatchError, match="not of the form"):
            bestbasistree(np.zeros((16, 4)))

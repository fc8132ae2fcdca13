from __future__ import annotations

import logging
from typing import overload

import numpy as np
import numpy.typing as npt

from .entropy import NormEntropy
from .exceptions import ShapeMismatchError
from .packets import ROOT, PacketTree, _array_depth, _validate_mask
from .typing import BoolNDArray, CostFunction, IntpNDArray, PacketArray


def _descendants(i: int, M: int) -> IntpNDArray:
    """Heap indices strictly below ``i``; each level is a contiguous range."""
    ranges = []
    lo = hi = i
    while True:
        lo, hi = 2 * lo + 1, 2 * hi + 2
        if lo >= M:
            break
        ranges.append(np.arange(lo, min(hi, M - 1) + 1))
    if not ranges:
        return np.zeros(0, dtype=np.intp)
    return np.concatenate(ranges).astype(np.intp)


def _prune_tree(tree: PacketTree, i: int, et: CostFunction) -> float:
    own = float(et(tree.data[i]))
    if tree.is_leaf(i):
        return own
    left, right = tree.children(i)
    # children and parent span the same domain, so child costs are averaged
    child = (_prune_tree(tree, left, et) + _prune_tree(tree, right, et)) / 2
    if child < own:
        return child
    logging.debug(
        "Collapsing node %d at depth %d (cost %.6g <= %.6g)",
        i,
        tree.depth[i],
        own,
        child,
    )
    tree.prune(i)
    return own


def bestbasistree_(tree: PacketTree, et: CostFunction | None = None) -> PacketTree:
    """
    Prune ``tree`` in place to its best basis.

    Parameters
    ----------
    tree : PacketTree
        Packet decomposition, usually fully expanded.
    et : Entropy or callable, optional
        Cost function. Default is :class:`~acshell.entropy.NormEntropy`.

    Returns
    -------
    PacketTree
        ``tree`` itself, for chaining.
    """
    et = NormEntropy() if et is None else et
    was_leaf = tree.is_leaf(ROOT)
    _prune_tree(tree, ROOT, et)
    if tree.is_leaf(ROOT) and not was_leaf:
        logging.warning(
            "Best basis collapsed the packet tree to its root; "
            "no decomposition lowers the cost"
        )
    return tree


def _bestbasis_array(W: PacketArray, et: CostFunction) -> BoolNDArray:
    M = W.shape[1]
    cost = np.array([float(et(W[:, i])) for i in range(M)])
    mask = np.ones(M, dtype=bool)
    for i in range(M // 2 - 1, -1, -1):
        child = (cost[2 * i + 1] + cost[2 * i + 2]) / 2
        if cost[i] <= child:
            mask[_descendants(i, M)] = False
        else:
            cost[i] = child
    return mask


@overload
def bestbasistree(x: PacketTree, et: CostFunction | None = ...) -> PacketTree: ...


@overload
def bestbasistree(x: npt.ArrayLike, et: CostFunction | None = ...) -> BoolNDArray: ...


def bestbasistree(
    x: PacketTree | npt.ArrayLike, et: CostFunction | None = None
) -> PacketTree | BoolNDArray:
    """
    Best basis of an autocorrelation wavelet packet decomposition.

    Works bottom-up: the cost of the children of a node is the *average* of
    their effective costs, because a shell packet node and both its children
    span the full domain. When the node's own cost is not larger, its
    subtree is collapsed; otherwise the average becomes the node's effective
    cost. Ties keep the coarser node.

    Parameters
    ----------
    x : PacketTree | array_like
        Output of :func:`~acshell.packets.acwpt`, tree or array form.
    et : Entropy or callable, optional
        Cost function. Default is :class:`~acshell.entropy.NormEntropy`.

    Returns
    -------
    PacketTree | BoolNDArray
        For a tree, a pruned copy (``x`` is left untouched, see
        :func:`bestbasistree_` for the in-place version). For the array
        form, a boolean mask of length ``2**(L + 1) - 1`` selecting the
        nodes of the pruned tree; its leaves form the basis.

    Examples
    --------
    >>> import numpy as np
    >>> from acshell import acwpt, bestbasistree, iacwpt, shell_filters
    >>> P, Q = shell_filters("db2")
    >>> x = np.sin(np.linspace(0, 8 * np.pi, 64))
    >>> W = acwpt(x, P, Q, 3, method="array")
    >>> mask = bestbasistree(W)
    >>> mask.shape
    (15,)
    >>> np.allclose(iacwpt(W, mask), x)
    True
    """
    et = NormEntropy() if et is None else et
    if isinstance(x, PacketTree):
        return bestbasistree_(x.copy(), et)
    W = np.asarray(x, dtype=float)
    if W.ndim != 2:
        msg = f"Packet array must be two-dimensional, got {W.ndim} dimensions"
        raise ShapeMismatchError(msg)
    _array_depth(W.shape[1])
    return _bestbasis_array(W, et)


def _tree_cost(tree: PacketTree, i: int, et: CostFunction) -> float:
    if tree.is_leaf(i):
        return float(et(tree.data[i]))
    left, right = tree.children(i)
    return (_tree_cost(tree, left, et) + _tree_cost(tree, right, et)) / 2


def _array_cost(W: PacketArray, mask: BoolNDArray, i: int, et: CostFunction) -> float:
    left, right = 2 * i + 1, 2 * i + 2
    if right >= W.shape[1] or not mask[left]:
        return float(et(W[:, i]))
    return (_array_cost(W, mask, left, et) + _array_cost(W, mask, right, et)) / 2


def basis_cost(
    x: PacketTree | npt.ArrayLike,
    et: CostFunction | None = None,
    mask: npt.ArrayLike | None = None,
) -> float:
    """
    Averaged cost of a packet basis.

    A leaf costs ``et(data)`` and an internal node the mean of its children,
    which is the quantity :func:`bestbasistree` minimises.

    Parameters
    ----------
    x : PacketTree | array_like
        Packet tree (its current shape is the basis) or array form.
    et : Entropy or callable, optional
        Cost function. Default is :class:`~acshell.entropy.NormEntropy`.
    mask : array_like, optional
        Array form only: node selection. Defaults to the full decomposition.

    Returns
    -------
    float
        Cost of the basis.
    """
    et = NormEntropy() if et is None else et
    if isinstance(x, PacketTree):
        if mask is not None:
            msg = "A basis mask only applies to the array form"
            raise ShapeMismatchError(msg)
        return _tree_cost(x, ROOT, et)
    W = np.asarray(x, dtype=float)
    if W.ndim != 2:
        msg = f"Packet array must be two-dimensional, got {W.ndim} dimensions"
        raise ShapeMismatchError(msg)
    M = W.shape[1]
    _array_depth(M)
    mask = np.ones(M, dtype=bool) if mask is None else _validate_mask(mask, M)
    return _array_cost(W, mask, ROOT, et)


def basis_leaves(mask: npt.ArrayLike) -> IntpNDArray:
    """
    Heap indices of the leaves of a best basis mask.

    Examples
    --------
    >>> import numpy as np
    >>> from acshell.bestbasis import basis_leaves
    >>> basis_leaves(np.array([True, True, True, False, False, True, True]))
    array([1, 5, 6])
    """
    mask = np.asarray(mask, dtype=bool)
    if mask.ndim != 1:
        msg = f"Basis mask must be one-dimensional, got shape {mask.shape}"
        raise ShapeMismatchError(msg)
    M = mask.size
    _array_depth(M)
    mask = _validate_mask(mask, M)
    leaves = [
        i
        for i in range(M)
        if mask[i] and (2 * i + 2 >= M or not mask[2 * i + 1])
    ]
    return np.asarray(leaves, dtype=np.intp)

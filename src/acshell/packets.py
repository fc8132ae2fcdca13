from __future__ import annotations

from typing import Iterator, Literal, overload

import numpy as np
import numpy.typing as npt

from .exceptions import ShapeMismatchError, UnknownMethodError
from .typing import BoolNDArray, FloatingNDArray, PacketArray
from .utils import (
    _log_wraparound,
    _validate_filters,
    _validate_level,
    acfilter,
    dyadlength,
    echant,
)

ROOT = 0
NO_NODE = -1


class PacketTree:
    """
    Binary autocorrelation wavelet packet tree stored as an arena.

    Nodes are addressed by integer index into parallel lists; the root is
    node ``0`` and ``-1`` stands for "no node". Every node holds a full
    length vector: the shell packet transform is redundant, so children
    cover the same domain as their parent. Pruning frees the slots of the
    removed subtree, which are reused by later insertions.

    Parameters
    ----------
    data : array_like
        Root vector, of dyadic length.

    Attributes
    ----------
    data : list
        Node vectors, ``None`` for freed slots.
    depth, left, right, parent : list[int]
        Per-node depth, child and parent indices.

    Examples
    --------
    >>> import numpy as np
    >>> from acshell import acwpt, shell_filters
    >>> P, Q = shell_filters("db2")
    >>> tree = acwpt(np.arange(8.0), P, Q, 2)
    >>> len(tree), tree.max_depth
    (7, 2)
    >>> tree.children(0)
    (1, 2)
    """

    def __init__(self, data: npt.ArrayLike) -> None:
        root = np.array(data, dtype=float)
        if root.ndim != 1:
            msg = f"Packet tree data must be one-dimensional, got shape {root.shape}"
            raise ShapeMismatchError(msg)
        dyadlength(root)
        self.data: list[FloatingNDArray | None] = [root]
        self.depth: list[int] = [0]
        self.left: list[int] = [NO_NODE]
        self.right: list[int] = [NO_NODE]
        self.parent: list[int] = [NO_NODE]
        self._free: list[int] = []

    @property
    def n(self) -> int:
        """Signal length."""
        return self.data[ROOT].size

    @property
    def max_depth(self) -> int:
        """Depth of the deepest live node."""
        return max(self.depth[i] for i in self.nodes())

    def __len__(self) -> int:
        return len(self.data) - len(self._free)

    def __repr__(self) -> str:
        return f"PacketTree(n={self.n}, nodes={len(self)}, max_depth={self.max_depth})"

    def _allocate(self, data: FloatingNDArray, parent: int) -> int:
        depth = self.depth[parent] + 1
        if self._free:
            i = self._free.pop()
            self.data[i] = data
            self.depth[i] = depth
            self.left[i] = self.right[i] = NO_NODE
            self.parent[i] = parent
            return i
        self.data.append(data)
        self.depth.append(depth)
        self.left.append(NO_NODE)
        self.right.append(NO_NODE)
        self.parent.append(parent)
        return len(self.data) - 1

    def add_children(
        self, i: int, left: FloatingNDArray, right: FloatingNDArray
    ) -> tuple[int, int]:
        """Attach low-pass and high-pass children to leaf ``i``."""
        if not self.is_leaf(i):
            msg = f"Node {i} already has children"
            raise ShapeMismatchError(msg)
        if left.shape != (self.n,) or right.shape != (self.n,):
            msg = f"Children must have shape {(self.n,)}"
            raise ShapeMismatchError(msg)
        self.left[i] = self._allocate(left, i)
        self.right[i] = self._allocate(right, i)
        return self.left[i], self.right[i]

    def is_leaf(self, i: int) -> bool:
        return self.left[i] == NO_NODE and self.right[i] == NO_NODE

    def children(self, i: int) -> tuple[int, int]:
        return self.left[i], self.right[i]

    def nodes(self) -> Iterator[int]:
        """Live node indices in preorder (node, left subtree, right subtree)."""
        stack = [ROOT]
        while stack:
            i = stack.pop()
            yield i
            if not self.is_leaf(i):
                stack.append(self.right[i])
                stack.append(self.left[i])

    def postorder(self) -> list[int]:
        """Live node indices with every child before its parent."""
        order = []
        stack = [(ROOT, False)]
        while stack:
            i, expanded = stack.pop()
            if expanded or self.is_leaf(i):
                order.append(i)
            else:
                stack.append((i, True))
                stack.append((self.right[i], False))
                stack.append((self.left[i], False))
        return order

    def leaves(self) -> list[int]:
        """Leaf indices, left to right."""
        return [i for i in self.nodes() if self.is_leaf(i)]

    def prune(self, i: int) -> None:
        """Remove every descendant of ``i``, turning it into a leaf."""
        if self.is_leaf(i):
            return
        stack = [self.left[i], self.right[i]]
        while stack:
            j = stack.pop()
            if not self.is_leaf(j):
                stack.extend((self.left[j], self.right[j]))
            self.data[j] = None
            self.left[j] = self.right[j] = self.parent[j] = NO_NODE
            self._free.append(j)
        self.left[i] = self.right[i] = NO_NODE

    def copy(self) -> PacketTree:
        """Deep copy, node vectors included."""
        new = PacketTree.__new__(PacketTree)
        new.data = [None if d is None else d.copy() for d in self.data]
        new.depth = list(self.depth)
        new.left = list(self.left)
        new.right = list(self.right)
        new.parent = list(self.parent)
        new._free = list(self._free)
        return new

    def heap_index(self, i: int) -> int:
        """Position of node ``i`` in the implicit array form."""
        path = []
        while self.parent[i] != NO_NODE:
            p = self.parent[i]
            path.append(1 if self.left[p] == i else 2)
            i = p
        k = ROOT
        for step in reversed(path):
            k = 2 * k + step
        return k

    def to_array(self, L: int | None = None) -> tuple[PacketArray, BoolNDArray]:
        """
        Convert to the array form used by ``acwpt(..., method="array")``.

        Parameters
        ----------
        L : int, optional
            Depth of the array form. Defaults to :attr:`max_depth`.

        Returns
        -------
        tuple[PacketArray, BoolNDArray]
            Node vectors of shape ``(n, 2**(L + 1) - 1)`` (zeros where the
            tree has no node) and the mask of nodes present in the tree.
        """
        L = self.max_depth if L is None else L
        if L < self.max_depth:
            msg = f"Array depth {L} is shallower than the tree ({self.max_depth})"
            raise ShapeMismatchError(msg)
        M = 2 ** (L + 1) - 1
        W = np.zeros((self.n, M), dtype=float)
        mask = np.zeros(M, dtype=bool)
        for i in self.nodes():
            k = self.heap_index(i)
            W[:, k] = self.data[i]
            mask[k] = True
        return W, mask


def _split(
    x: FloatingNDArray, d: int, P: FloatingNDArray, Q: FloatingNDArray
) -> tuple[FloatingNDArray, FloatingNDArray]:
    """Filter each of the ``2**d`` sub-lattices of ``x`` with ``P`` and ``Q``."""
    n = x.shape[-1]
    low = np.zeros(n, dtype=float)
    high = np.zeros(n, dtype=float)
    for b in range(2**d):
        idx = echant(n, d, b)
        s = x[idx]
        low[idx] = acfilter(s, P)
        high[idx] = acfilter(s, Q)
    return low, high


def _acwpt_tree(
    tree: PacketTree, i: int, L: int, P: FloatingNDArray, Q: FloatingNDArray
) -> None:
    d = tree.depth[i]
    if d < L:
        left, right = tree.add_children(i, *_split(tree.data[i], d, P, Q))
        _acwpt_tree(tree, left, L, P, Q)
        _acwpt_tree(tree, right, L, P, Q)


def _acwpt_array(
    x: FloatingNDArray, L: int, P: FloatingNDArray, Q: FloatingNDArray
) -> PacketArray:
    M = 2 ** (L + 1) - 1
    W = np.zeros((x.size, M), dtype=float)
    W[:, ROOT] = x
    # parents come before their children in heap order
    for i in range(M // 2):
        d = (i + 1).bit_length() - 1
        W[:, 2 * i + 1], W[:, 2 * i + 2] = _split(W[:, i], d, P, Q)
    return W


@overload
def acwpt(
    x: npt.ArrayLike,
    P: npt.ArrayLike,
    Q: npt.ArrayLike,
    L: int | None = ...,
    method: Literal["tree"] = ...,
) -> PacketTree: ...


@overload
def acwpt(
    x: npt.ArrayLike,
    P: npt.ArrayLike,
    Q: npt.ArrayLike,
    L: int | None = ...,
    method: Literal["array"] = ...,
) -> PacketArray: ...


def acwpt(
    x: npt.ArrayLike,
    P: npt.ArrayLike,
    Q: npt.ArrayLike,
    L: int | None = None,
    method: Literal["tree", "array"] = "tree",
) -> PacketTree | PacketArray:
    """
    Autocorrelation wavelet packet transform.

    Every node of depth ``d < L`` is split into a low-pass (left) and a
    high-pass (right) child by filtering each of its ``2**d`` sub-lattices
    with ``P`` and ``Q``.

    Parameters
    ----------
    x : array_like
        Signal of dyadic length ``n``.
    P : array_like
        Low-pass shell filter.
    Q : array_like
        High-pass shell filter.
    L : int, optional
        Depth of the full decomposition. Defaults to ``log2(n)``.
    method : {"tree", "array"}, optional
        ``"tree"`` returns a :class:`PacketTree`. ``"array"`` returns the
        ``(n, 2**(L + 1) - 1)`` implicit binary tree where node ``i`` has
        children ``2 * i + 1`` and ``2 * i + 2``. Default is ``"tree"``.

    Returns
    -------
    PacketTree | PacketArray
        Fully expanded packet decomposition.

    Raises
    ------
    UnknownMethodError
        If ``method`` is not ``"tree"`` or ``"array"``.
    InvalidLengthError
        If ``n`` is not a power of two.
    InvalidLevelError
        If ``L`` is negative or exceeds ``log2(n)``.

    Examples
    --------
    >>> import numpy as np
    >>> from acshell import acwpt, iacwpt, shell_filters
    >>> P, Q = shell_filters("db2")
    >>> x = np.random.default_rng(1).normal(size=16)
    >>> W = acwpt(x, P, Q, 3, method="array")
    >>> W.shape
    (16, 15)
    >>> np.allclose(iacwpt(W), x)
    True
    """
    if method not in ("tree", "array"):
        msg = f"Unknown packet method {method!r}, expected 'tree' or 'array'"
        raise UnknownMethodError(msg)
    x = np.asarray(x, dtype=float)
    if x.ndim != 1:
        msg = f"Packet transform expects a 1D signal, got shape {x.shape}"
        raise ShapeMismatchError(msg)
    n, J = dyadlength(x)
    L = J if L is None else _validate_level(L, J)
    P, Q = _validate_filters(P, Q)
    _log_wraparound(n, L, P.size)

    if method == "array":
        return _acwpt_array(x, L, P, Q)
    tree = PacketTree(x)
    _acwpt_tree(tree, ROOT, L, P, Q)
    return tree


def _array_depth(M: int) -> int:
    L = (M + 1).bit_length() - 2
    if M < 1 or 2 ** (L + 1) - 1 != M:
        msg = f"Packet array width {M} is not of the form 2**(L + 1) - 1"
        raise ShapeMismatchError(msg)
    return L


def _validate_mask(mask: npt.ArrayLike, M: int) -> BoolNDArray:
    mask = np.asarray(mask, dtype=bool)
    if mask.shape != (M,):
        msg = f"Basis mask must have shape {(M,)}, got {mask.shape}"
        raise ShapeMismatchError(msg)
    if not mask[ROOT]:
        msg = "Basis mask must select the root"
        raise ShapeMismatchError(msg)
    for i in range(M // 2):
        left, right = mask[2 * i + 1], mask[2 * i + 2]
        if left != right:
            msg = f"Basis mask selects only one child of node {i}"
            raise ShapeMismatchError(msg)
        if left and not mask[i]:
            msg = f"Basis mask selects the children of unselected node {i}"
            raise ShapeMismatchError(msg)
    return mask


def _iacwpt_tree(tree: PacketTree, i: int) -> FloatingNDArray:
    if tree.is_leaf(i):
        return tree.data[i]
    left, right = tree.children(i)
    return (_iacwpt_tree(tree, left) + _iacwpt_tree(tree, right)) / np.sqrt(2)


def _iacwpt_array(W: PacketArray, mask: BoolNDArray, i: int) -> FloatingNDArray:
    left, right = 2 * i + 1, 2 * i + 2
    if right >= W.shape[1] or not mask[left]:
        return W[:, i]
    low = _iacwpt_array(W, mask, left)
    high = _iacwpt_array(W, mask, right)
    return (low + high) / np.sqrt(2)


def iacwpt(
    x: PacketTree | npt.ArrayLike, mask: npt.ArrayLike | None = None
) -> FloatingNDArray:
    """
    Inverse autocorrelation wavelet packet transform.

    Leaves return their own vector and every internal node returns the sum
    of its children's reconstructions divided by ``sqrt(2)``.

    Parameters
    ----------
    x : PacketTree | array_like
        Packet tree, possibly pruned, or array form of shape
        ``(n, 2**(L + 1) - 1)``.
    mask : array_like, optional
        Array form only: boolean selection of length ``2**(L + 1) - 1`` as
        returned by :func:`~acshell.bestbasis.bestbasistree`. A selected node
        whose children are not selected is a leaf. Defaults to the full
        decomposition.

    Returns
    -------
    FloatingNDArray
        Reconstructed signal of length ``n``.

    Raises
    ------
    ShapeMismatchError
        If the array width or the mask is inconsistent with a packet
        decomposition.
    """
    if isinstance(x, PacketTree):
        if mask is not None:
            msg = "A basis mask only applies to the array form"
            raise ShapeMismatchError(msg)
        return np.array(_iacwpt_tree(x, ROOT))

    W = np.asarray(x, dtype=float)
    if W.ndim != 2:
        msg = f"Packet array must be two-dimensional, got {W.ndim} dimensions"
        raise ShapeMismatchError(msg)
    dyadlength(W.shape[0])
    M = W.shape[1]
    _array_depth(M)
    mask = np.ones(M, dtype=bool) if mask is None else _validate_mask(mask, M)
    return np.array(_iacwpt_array(W, mask, ROOT))

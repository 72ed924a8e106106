"""
Lattice Basis with Cached Vector Norms
======================================

A basis is a square matrix whose rows are the basis vectors, together with
the length of each vector in the current norm. Lengths are cached and
recomputed lazily: each vector carries a stale flag, set whenever the vector
or the norm changes, and a stale length is never returned.

The matrix has ``max_dim`` rows and columns, but only the leading
``dim x dim`` block is active: vector ``i`` is ``row[i, :dim]``.

Integer bases are stored as Python integers (numpy ``object`` dtype), so
the entries and the L2 norm accumulator never overflow. For very large
entries of a floating basis, pass an ``accumulator`` such as
``fractions.Fraction`` to choose the type used when summing squares.
"""

import operator
import sys
from functools import reduce
from typing import Callable, Optional

import numpy as np

from .const import NormType
from .coordinates import Coordinates
from .errors import DimensionOutOfRange, StaleNormAccess
from .utils import (
    dual_basis,
    integer_row_basis,
    is_integral,
    log_abs_determinant,
    sqrt_length,
)


def vector_norm(x, norm: NormType):
    """
    Norm of the vector ``x`` (a sequence of numbers).

    For L2NORM the squared length is returned, which stays exact for
    integer vectors.
    """
    norm = NormType.parse(norm)
    if norm == NormType.L2NORM:
        return sum(v * v for v in x)
    if norm == NormType.L1NORM:
        return sum(abs(v) for v in x)
    if norm == NormType.SUPNORM:
        return max((abs(v) for v in x), default=0)
    if norm == NormType.ZAREMBANORM:
        return reduce(operator.mul, (max(1, abs(v)) for v in x), 1)
    raise ValueError(f"Unknown norm: {norm}")


class Basis:
    """
    Basis of a lattice with incrementally maintained vector norms.

    Parameters
    ----------
    dim : int
        Actual dimension of the basis.
    max_dim : int, optional
        Allocated dimension (default: ``dim``).
    norm : NormType, optional
        Norm used to compute vector lengths (default: L2NORM).
    accumulator : callable, optional
        Conversion applied to each entry before it enters a norm
        computation. By default entries are used as they are stored.

    Notes
    -----
    For the L2 norm the cached value is the SQUARED length, which is exact
    for integer bases. ``vector_length`` returns the length itself.

    Examples
    --------
    >>> b = Basis.from_rows([[1, 12], [0, 101]])
    >>> b.update_vec_norm()
    >>> b.get_vec_norm(0)
    145
    """

    def __init__(
        self,
        dim: int,
        max_dim: Optional[int] = None,
        norm: NormType = NormType.L2NORM,
        accumulator: Optional[Callable] = None
    ):
        if max_dim is None:
            max_dim = dim
        if max_dim < 0 or not 0 <= dim <= max_dim:
            raise DimensionOutOfRange(
                f"Basis dimension {dim} outside [0, max_dim={max_dim}]"
            )
        self._dim = dim
        self._max_dim = max_dim
        self._norm = NormType.parse(norm)
        self._accumulator = accumulator
        self._vectors = np.zeros((max_dim, max_dim), dtype=np.int64).astype(object)
        self._vec_norm = np.zeros(max_dim, dtype=object)
        self._stale = np.ones(max_dim, dtype=bool)

    @classmethod
    def from_rows(
        cls,
        rows,
        norm: NormType = NormType.L2NORM,
        max_dim: Optional[int] = None,
        accumulator: Optional[Callable] = None
    ) -> "Basis":
        """
        Build a basis from its vectors.

        Parameters
        ----------
        rows : array_like
            Square matrix, one basis vector per row. Integer entries are
            kept as exact Python integers, other entries become float64.
        norm : NormType, optional
            Norm used to compute vector lengths (default: L2NORM).
        max_dim : int, optional
            Allocated dimension, at least ``len(rows)`` (default: ``len(rows)``).
        accumulator : callable, optional
            See ``Basis``.

        Returns
        -------
        Basis
            Basis of dimension ``len(rows)``, all norms stale.
        """
        rows = [list(row) for row in rows]
        d = len(rows)
        if any(len(row) != d for row in rows):
            raise ValueError(f"Basis matrix must be square, got {d} rows of lengths "
                             f"{[len(row) for row in rows]}")
        basis = cls(d, d if max_dim is None else max_dim, norm, accumulator)
        if not is_integral(rows):
            basis._vectors = basis._vectors.astype(np.float64)
        for i, row in enumerate(rows):
            for j, x in enumerate(row):
                basis._vectors[i, j] = int(x) if is_integral([[x]]) else float(x)
        return basis

    # ------------------------------------------------------------------
    # Dimensions and norm kind

    @property
    def dim(self) -> int:
        return self._dim

    @property
    def max_dim(self) -> int:
        return self._max_dim

    @property
    def norm(self) -> NormType:
        return self._norm

    @property
    def is_integral(self) -> bool:
        return self._vectors.dtype == object

    def set_dim(self, d: int) -> None:
        """
        Set the actual dimension to ``d`` without resizing storage.

        Vector lengths are taken over the first ``dim`` components, so the
        norms of vectors ``0..d-1`` are marked stale; flags beyond ``d`` are
        left alone.
        """
        if not 0 <= d <= self._max_dim:
            raise DimensionOutOfRange(
                f"Dimension {d} outside [0, max_dim={self._max_dim}]"
            )
        self._dim = d
        self._stale[:d] = True

    def set_norm(self, norm: NormType) -> None:
        """Change the norm; every cached length becomes stale."""
        self._norm = NormType.parse(norm)
        self._stale[:] = True

    # ------------------------------------------------------------------
    # Norm cache

    def _check_index(self, i: int) -> int:
        if not 0 <= i < self._max_dim:
            raise DimensionOutOfRange(
                f"Vector index {i} outside [0, {self._max_dim})"
            )
        return i

    def is_negative_norm(self, i: int) -> bool:
        """Return True if the norm of vector ``i`` must be recomputed."""
        return bool(self._stale[self._check_index(i)])

    def set_negative_norm(self, flag: bool, j: Optional[int] = None) -> None:
        """
        Mark the norm of every vector, or of vector ``j``, stale or fresh.

        Marking a vector fresh makes its current cached value readable
        again; nothing is recomputed.
        """
        if j is None:
            self._stale[:] = flag
        else:
            self._stale[self._check_index(j)] = flag

    def get_vec_norm(self, i: int):
        """
        Return the cached norm of vector ``i``.

        Raises
        ------
        StaleNormAccess
            If the norm was invalidated and not recomputed since.
        DimensionOutOfRange
            If ``i`` is not in ``[0, max_dim)``.
        """
        if self._stale[self._check_index(i)]:
            raise StaleNormAccess(i)
        return self._vec_norm[i]

    def set_vec_norm(self, value, i: int) -> None:
        """
        Store ``value`` as the norm of vector ``i`` and mark it fresh.

        The value is NOT checked against the vector: the caller is trusted.
        Use ``update_vec_norm`` unless the value is known to be correct.
        """
        self._check_index(i)
        self._vec_norm[i] = value
        self._stale[i] = False

    def _entries(self, i: int):
        row = self._vectors[i, :self._dim]
        if self._accumulator is None:
            return list(row)
        return [self._accumulator(x) for x in row]

    def update_vec_norm(self, d: int = 0) -> None:
        """
        Recompute the norms of vectors ``d, ..., dim-1``.

        Norms of vectors before ``d`` are left untouched, which is what a
        reduction step that only changed a suffix of the basis needs.
        """
        for i in range(max(0, d), self._dim):
            self._vec_norm[i] = vector_norm(self._entries(i), self._norm)
            self._stale[i] = False

    def update_scal_l2_norm(self, d1: int, d2: Optional[int] = None) -> None:
        """
        Store the squared L2 norm of vector ``d1``, or of vectors ``d1..d2``
        (inclusive), whatever the current norm kind.
        """
        last = d1 if d2 is None else d2
        for i in range(d1, last + 1):
            self._check_index(i)
            x = self._entries(i)
            self._vec_norm[i] = sum(v * v for v in x)
            self._stale[i] = False

    def vector_length(self, i: int) -> float:
        """Length of vector ``i`` in the basis norm (square root taken for L2)."""
        value = self.get_vec_norm(i)
        if self._norm == NormType.L2NORM:
            return sqrt_length(value)
        return float(value)

    # ------------------------------------------------------------------
    # Vectors

    def __getitem__(self, i: int) -> np.ndarray:
        """Copy of the active part of vector ``i``."""
        return self._vectors[self._check_index(i), :self._dim].copy()

    def __len__(self) -> int:
        return self._dim

    @property
    def vectors(self) -> np.ndarray:
        """Copy of the active ``dim x dim`` block."""
        return self._vectors[:self._dim, :self._dim].copy()

    def set_vector(self, i: int, values) -> None:
        """Overwrite the active part of vector ``i``; its norm becomes stale."""
        self._check_index(i)
        values = list(values)
        if len(values) != self._dim:
            raise ValueError(f"Vector must have {self._dim} components, got {len(values)}")
        for j, x in enumerate(values):
            self._vectors[i, j] = int(x) if self.is_integral else float(x)
        self._stale[i] = True

    def add_multiple(self, i: int, j: int, q) -> None:
        """Replace vector ``i`` by ``b_i + q * b_j``; the norm of ``i`` becomes stale."""
        self._check_index(i)
        self._check_index(j)
        d = self._dim
        self._vectors[i, :d] = self._vectors[i, :d] + q * self._vectors[j, :d]
        self._stale[i] = True

    def negate(self, i: int) -> None:
        """Replace vector ``i`` by its opposite. The norm is unchanged."""
        self._check_index(i)
        self._vectors[i, :self._dim] = -self._vectors[i, :self._dim]

    def permute(self, i: int, j: int) -> None:
        """Exchange vectors ``i`` and ``j`` along with their norms and flags."""
        self._check_index(i)
        self._check_index(j)
        if i == j:
            return
        self._vectors[[i, j]] = self._vectors[[j, i]]
        self._vec_norm[[i, j]] = self._vec_norm[[j, i]]
        self._stale[[i, j]] = self._stale[[j, i]]

    # ------------------------------------------------------------------
    # Whole basis

    def copy(self) -> "Basis":
        other = Basis(self._dim, self._max_dim, self._norm, self._accumulator)
        other._vectors = self._vectors.copy()
        other._vec_norm = self._vec_norm.copy()
        other._stale = self._stale.copy()
        return other

    def swap(self, other: "Basis") -> None:
        """Exchange the whole content of this basis with ``other``."""
        self.__dict__, other.__dict__ = other.__dict__, self.__dict__

    def kill(self) -> None:
        """Release all storage; the basis becomes empty."""
        self._dim = 0
        self._max_dim = 0
        self._vectors = np.zeros((0, 0), dtype=object)
        self._vec_norm = np.zeros(0, dtype=object)
        self._stale = np.ones(0, dtype=bool)

    def log_density(self) -> float:
        """
        Natural log of the point density of the lattice, -log|det B|.

        Raises
        ------
        ValueError
            If the active basis is singular.
        """
        return -log_abs_determinant(self.vectors)

    def dual(self, scale: Optional[int] = None) -> "Basis":
        """
        Basis of the dual lattice, scaled by ``scale``.

        For an integer basis the default scale is |det B|, so the dual basis
        is integral as well. The norm kind and accumulator are kept.
        """
        return Basis.from_rows(
            dual_basis(self.vectors, scale), self._norm,
            accumulator=self._accumulator
        )

    def projection(self, coords: Coordinates) -> "Basis":
        """
        Basis of the projection of the lattice onto the coordinates ``coords``.

        Only integer bases are supported: the projected generating set is
        reduced to a basis with exact integer row operations.
        """
        coords = Coordinates(coords)
        if not self.is_integral:
            raise ValueError("Projection requires an integer basis")
        if not coords or max(coords) > self._dim:
            raise DimensionOutOfRange(
                f"Projection {coords} not within coordinates 1..{self._dim}"
            )
        columns = [j - 1 for j in coords.sorted()]
        rows = integer_row_basis(self.vectors[:, columns])
        if len(rows) != len(columns):
            raise ValueError(f"Projection {coords} of the basis is not full rank")
        return Basis.from_rows(rows, self._norm, accumulator=self._accumulator)

    # ------------------------------------------------------------------
    # Rendering

    def to_string(self, i: Optional[int] = None) -> str:
        """
        Render the basis, one vector per line, or only vector ``i``.
        """
        if i is not None:
            return "[" + " ".join(str(x) for x in self[i]) + "]"
        return "\n".join(self.to_string(k) for k in range(self._dim))

    def write(self, i: Optional[int] = None, file=None) -> None:
        """Print the basis (or vector ``i``) to ``file`` (default: stdout)."""
        print(self.to_string(i), file=sys.stdout if file is None else file)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return (f"Basis(dim={self._dim}, max_dim={self._max_dim}, "
                f"norm='{self._norm}')")

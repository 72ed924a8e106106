"""
Basis Reduction and Shortest Vector Search
==========================================

The reducer works in place on a ``Basis``: every change to a vector goes
through the basis, so its cached norms are invalidated as the vectors move.

- LLL reduction (Lenstra, Lenstra, Lovasz) with parameter delta
- BKZ reduction with block size beta, using enumeration as SVP oracle
- exact shortest vector by Fincke-Pohst enumeration, in any basis norm

Gram-Schmidt data is computed in floating point, or with exact rationals
when integer entries are too wide for float64; the basis itself is only
changed by exact integer row operations, so an integer basis stays an
exact basis of the same lattice.

A reduction that exhausts its budget, or finds the basis degenerate,
returns False and leaves the basis reduced as far as it got.

References
----------
[1] Lenstra, A.K., Lenstra, H.W. and Lovasz, L. (1982). Factoring
    polynomials with rational coefficients.
[2] Schnorr, C.P. and Euchner, M. (1994). Lattice basis reduction:
    improved practical algorithms and solving subset sum problems.
[3] Fincke, U. and Pohst, M. (1985). Improved methods for calculating
    vectors of short length in a lattice.
"""

import logging
import math
from fractions import Fraction
from typing import Callable, List, Optional

import numpy as np

from .basis import Basis, vector_norm
from .const import NormType
from .errors import DimensionOutOfRange
from .utils import gram_schmidt, multi_gcd, needs_exact, sqrt_length

logger = logging.getLogger(__name__)

# Relative slack on enumeration radii, absorbs floating point rounding
_RADIUS_SLACK = 1e-9


class _BudgetExceeded(Exception):
    pass


class Reducer:
    """
    Reduction of a lattice basis and search for its shortest vector.

    Parameters
    ----------
    basis : Basis
        Basis to reduce. It is modified in place.
    max_iterations : int, optional
        Maximum number of LLL steps per call (default: 100000).
    max_nodes : int, optional
        Maximum number of enumeration nodes per SVP call (default: 10**6).
    max_tours : int, optional
        Maximum number of BKZ tours (default: 100).
    verbose : bool, optional
        If True, print progress information (default: False).

    Attributes
    ----------
    min_length : float or None
        Length of the shortest vector found by the last successful
        ``shortest_vector`` call, in the norm it was called with.
    shortest : np.ndarray or None
        The corresponding vector.

    Examples
    --------
    >>> basis = Basis.from_rows([[1, 12], [0, 101]])
    >>> reducer = Reducer(basis)
    >>> reducer.shortest_vector()
    True
    >>> round(reducer.min_length ** 2)
    89
    """

    def __init__(
        self,
        basis: Basis,
        max_iterations: int = 100000,
        max_nodes: int = 10**6,
        max_tours: int = 100,
        verbose: bool = False
    ):
        self.basis = basis
        self.max_iterations = max_iterations
        self.max_nodes = max_nodes
        self.max_tours = max_tours
        self.verbose = verbose
        self.min_length: Optional[float] = None
        self.shortest: Optional[np.ndarray] = None

    def _gso(self):
        """
        Working copy of the basis with its Gram-Schmidt data.

        Returns ``(B, b_star_sq, mu, exact)``; with ``exact`` the copy keeps
        Python ints and the Gram-Schmidt data is made of ``Fraction``s.
        """
        vectors = self.basis.vectors
        if needs_exact(vectors):
            return (vectors,) + gram_schmidt(vectors, exact=True) + (True,)
        B = np.asarray(vectors, dtype=np.float64)
        return (B,) + gram_schmidt(B) + (False,)

    @staticmethod
    def _check_delta(delta: float) -> None:
        if not 0.25 < delta < 1.0:
            raise ValueError(f"Reduction factor must be in (0.25, 1), got {delta}")

    # ------------------------------------------------------------------
    # LLL

    def red_lll(self, delta: float = 0.99999) -> bool:
        """
        LLL-reduce the basis.

        Parameters
        ----------
        delta : float, optional
            Lovasz parameter, 0.25 < delta < 1 (default: 0.99999).

        Returns
        -------
        bool
            False if the basis is degenerate or the iteration budget ran out.
        """
        self._check_delta(delta)
        basis = self.basis
        n = basis.dim
        if n == 0:
            return True

        B, b_star_sq, mu, exact = self._gso()
        if exact:
            delta = Fraction(delta)
        if b_star_sq[0] <= 0.0:
            logger.warning("LLL aborted: zero vector in basis")
            return False

        k = 1
        steps = 0
        while k < n:
            steps += 1
            if steps > self.max_iterations:
                logger.warning("LLL aborted after %d steps (dimension %d)", steps - 1, n)
                return False

            # Size reduction of b_k
            for j in range(k - 1, -1, -1):
                if abs(mu[k, j]) > 0.5:
                    q = int(round(mu[k, j]))
                    basis.add_multiple(k, j, -q)
                    B[k] -= q * B[j]
                    mu[k, :j + 1] -= q * mu[j, :j + 1]

            if b_star_sq[k] <= 0.0:
                logger.warning("LLL aborted: basis vectors are linearly dependent")
                return False

            # Lovasz condition
            if b_star_sq[k] >= (delta - mu[k, k - 1] ** 2) * b_star_sq[k - 1]:
                k += 1
            else:
                basis.permute(k, k - 1)
                B[[k, k - 1]] = B[[k - 1, k]]
                b_star_sq, mu = gram_schmidt(B, exact)
                k = max(k - 1, 1)

        return True

    # ------------------------------------------------------------------
    # Enumeration

    def _enumerate(
        self,
        mu: np.ndarray,
        b_star_sq: np.ndarray,
        start: int,
        end: int,
        radius_sq: float,
        leaf: Callable[[List[int], float], float]
    ) -> None:
        """
        Visit every nonzero combination sum x_i b_i, start <= i < end, whose
        projection orthogonally to b_0, ..., b_{start-1} has squared length
        at most ``radius_sq``. One of x and -x is visited.

        ``leaf(x, length_sq)`` is called for each and returns the new radius.
        """
        x = [0] * (end - start)
        radius = [radius_sq]
        nodes = [0]

        def recurse(i: int, partial: float, zero_above: bool) -> None:
            center = -sum(x[j - start] * mu[j, i] for j in range(i + 1, end))
            room = radius[0] - partial
            if room < 0.0:
                return
            ratio = room / b_star_sq[i]
            if isinstance(ratio, float):
                r = math.sqrt(ratio)
            else:
                ratio = Fraction(ratio)
                r = math.isqrt(ratio.numerator // ratio.denominator) + 1
            lo = math.ceil(center - r)
            hi = math.floor(center + r)
            if zero_above:
                lo = max(lo, 0)
            for xi in range(lo, hi + 1):
                nodes[0] += 1
                if nodes[0] > self.max_nodes:
                    raise _BudgetExceeded()
                length = partial + (xi - center) ** 2 * b_star_sq[i]
                if length > radius[0]:
                    continue
                x[i - start] = xi
                if i > start:
                    recurse(i - 1, length, zero_above and xi == 0)
                elif not (zero_above and xi == 0):
                    radius[0] = leaf(list(x), length)
            x[i - start] = 0

        recurse(end - 1, 0, True)

    # ------------------------------------------------------------------
    # BKZ

    def _insert(self, k: int, coeffs: List[int]) -> bool:
        """
        Make sum coeffs[i] * b_{k+i} the k-th basis vector, using unimodular
        row operations on the block. Returns False if the coefficients are
        not coprime.
        """
        if multi_gcd(coeffs) != 1:
            return False
        basis = self.basis
        x = list(coeffs)
        while sum(1 for c in x if c != 0) > 1:
            r = min((i for i in range(len(x)) if x[i] != 0), key=lambda i: abs(x[i]))
            for i in range(len(x)):
                if i != r and x[i] != 0:
                    q = x[i] // x[r]
                    x[i] -= q * x[r]
                    # x_i b_i + x_r b_r == (x_i - q x_r) b_i + x_r (b_r + q b_i)
                    basis.add_multiple(k + r, k + i, q)
        r = next(i for i in range(len(x)) if x[i] != 0)
        if abs(x[r]) != 1:
            return False
        if x[r] == -1:
            basis.negate(k + r)
        for p in range(k + r, k, -1):
            basis.permute(p, p - 1)
        return True

    def red_bkz(self, fact: float = 0.999999, block_size: int = 20) -> bool:
        """
        BKZ-reduce the basis.

        Each tour LLL-reduces the basis, then for every position k finds the
        shortest vector of the projected block [k, k + block_size) and
        inserts it when it is shorter than ``fact`` times b*_k. Tours repeat
        until one changes nothing.

        Parameters
        ----------
        fact : float, optional
            Reduction factor in (0.25, 1), also used as LLL delta
            (default: 0.999999).
        block_size : int, optional
            Block size, at least 1 (default: 20). Block sizes 1 and 2 give
            plain LLL.

        Returns
        -------
        bool
            False if the reduction was interrupted.
        """
        self._check_delta(fact)
        if block_size < 1:
            raise ValueError(f"Block size must be positive, got {block_size}")
        if not self.red_lll(fact):
            return False

        n = self.basis.dim
        beta = min(block_size, n)
        if beta <= 2:
            return True

        for tour in range(1, self.max_tours + 1):
            changed = False
            for k in range(n - 1):
                end = min(k + beta, n)
                _, b_star_sq, mu, exact = self._gso()
                best: dict = {}

                def leaf(coeffs: List[int], length: float) -> float:
                    best["coeffs"] = coeffs
                    best["length"] = length
                    return length if exact else length * (1.0 - _RADIUS_SLACK)

                try:
                    self._enumerate(mu, b_star_sq, k, end,
                                   (Fraction(fact) if exact else fact) * b_star_sq[k],
                                   leaf)
                except _BudgetExceeded:
                    logger.warning("BKZ aborted: enumeration budget of %d nodes "
                                   "exhausted in block [%d, %d)", self.max_nodes, k, end)
                    return False

                if best and self._insert(k, best["coeffs"]):
                    changed = True
                    if not self.red_lll(fact):
                        return False

            if self.verbose:
                print(f"  BKZ tour {tour}: basis {'changed' if changed else 'stable'}")
            if not changed:
                return True

        logger.warning("BKZ aborted after %d tours (dimension %d)", self.max_tours, n)
        return False

    # ------------------------------------------------------------------
    # Shortest vector

    def shortest_vector(self, norm: Optional[NormType] = None) -> bool:
        """
        Find the shortest nonzero vector of the lattice.

        The search enumerates all lattice vectors whose L2 length is at most
        the L2 equivalent of the best length found so far, so the result is
        exact in the requested norm. Reducing the basis first makes the
        search much faster.

        Parameters
        ----------
        norm : NormType, optional
            Norm in which lengths are measured (default: the basis norm).

        Returns
        -------
        bool
            True on success, with ``min_length`` and ``shortest`` set; False
            if the enumeration budget ran out or the basis is degenerate.
        """
        basis = self.basis
        norm = basis.norm if norm is None else NormType.parse(norm)
        n = basis.dim
        if n == 0:
            raise DimensionOutOfRange("Cannot search the shortest vector of an empty basis")

        vectors = basis.vectors
        _, b_star_sq, mu, exact = self._gso()
        if np.any(b_star_sq <= 0.0):
            logger.warning("Shortest vector search aborted: degenerate basis")
            return False

        # Squared L2 radius covering every vector with norm <= value
        if norm == NormType.L1NORM or norm == NormType.L2NORM:
            l2_factor = 1
        else:
            l2_factor = n

        def l2_radius(value):
            v = value if norm == NormType.L2NORM else value * value
            if exact:
                return l2_factor * v
            return l2_factor * float(v) * (1.0 + _RADIUS_SLACK)

        if basis.norm == norm:
            basis.update_vec_norm()
            norms = [basis.get_vec_norm(i) for i in range(n)]
        else:
            norms = [vector_norm(vectors[i], norm) for i in range(n)]
        i0 = min(range(n), key=lambda i: norms[i])
        best = {"value": norms[i0], "vector": vectors[i0].copy()}

        def leaf(coeffs: List[int], length: float) -> float:
            v = sum(c * vectors[i] for i, c in enumerate(coeffs) if c != 0)
            value = vector_norm(v, norm)
            if value < best["value"]:
                best["value"] = value
                best["vector"] = v
            return l2_radius(best["value"])

        try:
            self._enumerate(mu, b_star_sq, 0, n, l2_radius(best["value"]), leaf)
        except _BudgetExceeded:
            logger.warning("Shortest vector search aborted: enumeration budget of "
                           "%d nodes exhausted (dimension %d)", self.max_nodes, n)
            return False

        value = best["value"]
        self.min_length = sqrt_length(value) if norm == NormType.L2NORM else float(value)
        self.shortest = np.asarray(best["vector"])
        logger.debug("Shortest vector %s, length %g", self.shortest, self.min_length)
        if self.verbose:
            print(f"Shortest vector length ({norm}): {self.min_length:.6f}")
        return True

    def get_min_length(self) -> Optional[float]:
        return self.min_length

    def __repr__(self) -> str:
        return f"Reducer({self.basis!r}, min_length={self.min_length})"

"""
Linear algebra helpers for lattice bases.

Integer bases are handled with exact Python integer and rational arithmetic,
so entries far beyond the range of float64 are supported. Floating bases
fall back to numpy.
"""

import math
from fractions import Fraction
from functools import reduce
from typing import List, Optional, Sequence, Tuple

import numpy as np

# Integer entries wider than this are reduced with exact rational arithmetic
FLOAT_GSO_MAX_BITS = 50


def multi_gcd(numbers: Sequence[int]) -> int:
    """
    Compute the greatest common divisor of a list of integers.

    Parameters
    ----------
    numbers : Sequence[int]
        List of integers.

    Returns
    -------
    int
        GCD of all numbers in the list (0 for an empty or all-zero list).
    """
    return reduce(math.gcd, (int(x) for x in numbers), 0)


def is_integral(matrix) -> bool:
    """Return True if every entry of ``matrix`` is an integer type."""
    return all(
        isinstance(x, (int, np.integer)) and not isinstance(x, bool)
        for row in matrix for x in row
    )


def integer_determinant(matrix) -> int:
    """
    Exact determinant of a square integer matrix (Bareiss elimination).

    Parameters
    ----------
    matrix : array_like
        Square matrix of integers (any size of integer).

    Returns
    -------
    int
        The determinant.
    """
    A = [[int(x) for x in row] for row in matrix]
    n = len(A)
    if n == 0:
        return 1
    sign = 1
    prev = 1
    for k in range(n - 1):
        if A[k][k] == 0:
            pivot = next((i for i in range(k + 1, n) if A[i][k] != 0), None)
            if pivot is None:
                return 0
            A[k], A[pivot] = A[pivot], A[k]
            sign = -sign
        for i in range(k + 1, n):
            for j in range(k + 1, n):
                # Bareiss: the division is exact
                A[i][j] = (A[i][j] * A[k][k] - A[i][k] * A[k][j]) // prev
        prev = A[k][k]
    return sign * A[n - 1][n - 1]


def log_abs_determinant(matrix) -> float:
    """
    Natural logarithm of |det(matrix)|.

    Raises
    ------
    ValueError
        If the matrix is singular.
    """
    if is_integral(matrix):
        det = integer_determinant(matrix)
        if det == 0:
            raise ValueError("Basis is singular (determinant 0)")
        return math.log(abs(det))

    sign, logdet = np.linalg.slogdet(np.asarray(matrix, dtype=np.float64))
    if sign == 0:
        raise ValueError("Basis is singular (determinant 0)")
    return float(logdet)


def _inverse_fraction(matrix) -> List[List[Fraction]]:
    n = len(matrix)
    A = [
        [Fraction(x) for x in row] + [Fraction(int(i == j)) for j in range(n)]
        for i, row in enumerate(matrix)
    ]
    for c in range(n):
        pivot = next((i for i in range(c, n) if A[i][c] != 0), None)
        if pivot is None:
            raise ValueError("Basis is singular (determinant 0)")
        A[c], A[pivot] = A[pivot], A[c]
        inv = 1 / A[c][c]
        A[c] = [x * inv for x in A[c]]
        for i in range(n):
            if i != c and A[i][c] != 0:
                f = A[i][c]
                A[i] = [a - f * b for a, b in zip(A[i], A[c])]
    return [row[n:] for row in A]


def dual_basis(matrix, scale: Optional[int] = None) -> np.ndarray:
    """
    Compute the dual lattice basis ``scale * B^{-T}``.

    For a lattice whose basis vectors are the rows of B, the dual lattice
    has basis B^{-T} (inverse transpose), as for the generating matrix of a
    rank-1 lattice.

    Parameters
    ----------
    matrix : array_like
        Square basis matrix, rows are basis vectors.
    scale : int, optional
        Scaling factor. For an integer basis the default is |det B|, which
        makes the dual basis integral. For a floating basis the default is 1.

    Returns
    -------
    np.ndarray
        Dual basis; dtype object (Python ints) when the result is integral,
        float64 otherwise.
    """
    if is_integral(matrix):
        if scale is None:
            scale = abs(integer_determinant(matrix))
        inv = _inverse_fraction(matrix)
        n = len(inv)
        entries = [[inv[j][i] * scale for j in range(n)] for i in range(n)]
        if all(x.denominator == 1 for row in entries for x in row):
            out = np.empty((n, n), dtype=object)
            for i in range(n):
                for j in range(n):
                    out[i, j] = int(entries[i][j])
            return out
        return np.array([[float(x) for x in row] for row in entries])

    B = np.asarray(matrix, dtype=np.float64)
    return np.linalg.inv(B).T * (1.0 if scale is None else scale)


def integer_row_basis(rows) -> List[List[int]]:
    """
    Reduce an integer generating set to a basis of the lattice it generates.

    Uses unimodular row operations (Euclid on each column), producing a
    row echelon form. Zero rows are dropped.

    Parameters
    ----------
    rows : array_like
        Integer generating vectors, one per row.

    Returns
    -------
    List[List[int]]
        Linearly independent rows generating the same lattice.
    """
    A = [[int(x) for x in row] for row in rows]
    if not A:
        return []
    r = 0
    for c in range(len(A[0])):
        while True:
            nonzero = [i for i in range(r, len(A)) if A[i][c] != 0]
            if not nonzero:
                break
            p = min(nonzero, key=lambda i: abs(A[i][c]))
            A[r], A[p] = A[p], A[r]
            clean = True
            for i in range(r + 1, len(A)):
                if A[i][c] != 0:
                    q = A[i][c] // A[r][c]
                    A[i] = [a - q * b for a, b in zip(A[i], A[r])]
                    if A[i][c] != 0:
                        clean = False
            if clean:
                break
        if r < len(A) and A[r][c] != 0:
            r += 1
            if r == len(A):
                break
    return A[:r]


def needs_exact(matrix) -> bool:
    """Return True if ``matrix`` has integer entries too wide for float64 Gram-Schmidt."""
    return is_integral(matrix) and any(
        abs(int(x)).bit_length() > FLOAT_GSO_MAX_BITS for row in matrix for x in row
    )


def sqrt_length(value) -> float:
    """
    Square root of a squared length as a float.

    Python ints of any size are accepted; beyond the float range the root
    is taken through the logarithm.
    """
    if isinstance(value, int) and value.bit_length() > 1000:
        return math.exp(0.5 * math.log(value))
    return math.sqrt(value)


def _gram_schmidt_exact(B) -> Tuple[np.ndarray, np.ndarray]:
    rows = [[int(x) for x in row] for row in B]
    n = len(rows)
    b_star = []
    b_star_sq = np.empty(n, dtype=object)
    mu = np.empty((n, n), dtype=object)
    for i in range(n):
        for j in range(n):
            mu[i, j] = Fraction(int(i == j))
        v = [Fraction(x) for x in rows[i]]
        for j in range(i):
            if b_star_sq[j] > 0:
                mu[i, j] = sum(a * b for a, b in zip(rows[i], b_star[j])) / b_star_sq[j]
                v = [a - mu[i, j] * b for a, b in zip(v, b_star[j])]
        b_star.append(v)
        b_star_sq[i] = sum(a * a for a in v)
    return b_star_sq, mu


def gram_schmidt(B: np.ndarray, exact: bool = False) -> Tuple[np.ndarray, np.ndarray]:
    """
    Gram-Schmidt orthogonalization of the rows of B.

    Parameters
    ----------
    B : np.ndarray
        Matrix of shape (n, d), rows are basis vectors.
    exact : bool, optional
        If True, B must be integral and the result is computed with
        ``Fraction`` entries (dtype object). Otherwise float64 is used.

    Returns
    -------
    b_star_sq : np.ndarray
        Squared norms of the Gram-Schmidt vectors, shape (n,).
    mu : np.ndarray
        Gram-Schmidt coefficients, shape (n, n), unit diagonal.
    """
    if exact:
        return _gram_schmidt_exact(B)
    n = B.shape[0]
    B_star = np.zeros_like(B, dtype=np.float64)
    b_star_sq = np.zeros(n, dtype=np.float64)
    mu = np.eye(n, dtype=np.float64)

    for i in range(n):
        B_star[i] = B[i]
        for j in range(i):
            if b_star_sq[j] > 0.0:
                mu[i, j] = np.dot(B[i], B_star[j]) / b_star_sq[j]
                B_star[i] -= mu[i, j] * B_star[j]
        b_star_sq[i] = np.dot(B_star[i], B_star[i])

    return b_star_sq, mu

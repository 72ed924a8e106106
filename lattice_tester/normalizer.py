"""
Normalization Bounds for Shortest Vector Lengths
================================================

The length of the shortest nonzero vector of a lattice with point density
n (points per unit volume) in dimension t is at most

    d_t^* = gamma_t^{1/2} * n^{-1/t}

where gamma_t is the Hermite constant. A normalizer precomputes d_t^* for
t = 1, ..., max_dim, using either the exact or best known value of gamma_t
or a theoretical upper bound on it, so that l_t / d_t^* is a figure of
merit in [0, 1] (up to the quality of gamma_t).

Variants:
- NormaBestLat: best known lattices (t <= 24)
- NormaLaminated: laminated lattices (t <= 24)
- NormaRogers: Rogers' bound on the density of sphere packings
- NormaMinkowski: Minkowski's bound, L2 norm
- NormaMinkL1: Minkowski's bound, L1 norm
- NormaPalpha: bound on the P_alpha criterion
- NormaGeneric: trivial normalization (= 1)

References
----------
[1] Conway, J.H. and Sloane, N.J.A. (1999). Sphere Packings, Lattices and
    Groups, 3rd ed., Table 1.2 and Chapter 6.
[2] L'Ecuyer, P. and Couture, R. (1997). An implementation of the lattice
    and spectral tests for multiple recursive linear random number generators.
"""

import math
from typing import Optional

import numpy as np
from scipy.special import gammaln, zeta

from .const import NormaType, NormType
from .errors import MissingNormalizerBound

_SQRT2 = math.sqrt(2.0)
_SQRT3 = math.sqrt(3.0)

# Center densities delta_t of the best known lattice packings, t = 1..24
_BEST_CENTER_DENSITY = (
    1 / 2, 1 / (2 * _SQRT3), 1 / (4 * _SQRT2), 1 / 8,
    1 / (8 * _SQRT2), 1 / (8 * _SQRT3), 1 / 16, 1 / 16,
    1 / (16 * _SQRT2), 1 / (16 * _SQRT3), 1 / (18 * _SQRT3), 1 / 27,
    1 / (18 * _SQRT3), 1 / (16 * _SQRT3), 1 / (16 * _SQRT2), 1 / 16,
    1 / (16 * _SQRT2), 1 / (8 * _SQRT3), 1 / (8 * _SQRT2), 1 / 8,
    1 / (4 * _SQRT2), 1 / (2 * _SQRT3), 1 / 2, 1.0,
)

# Laminated lattices differ from the best known ones only for t = 11..13 (K_t)
_LAMINATED_CENTER_DENSITY = (
    _BEST_CENTER_DENSITY[:10] + (1 / 32, 1 / 32, 1 / 32) + _BEST_CENTER_DENSITY[13:]
)


def _gamma_from_center_density(delta: float, t: int) -> float:
    return 4.0 * delta ** (2.0 / t)


class Normalizer:
    """
    Table of bounds d_t^* for t = 1, ..., max_dim.

    Subclasses define ``get_gamma(t)``; the base class provides the trivial
    normalization and is used directly as the generic normalizer.

    Parameters
    ----------
    log_density : float
        Natural log of the point density of the lattice, i.e. -log|det B|.
    max_dim : int
        Largest dimension for which a bound is computed.
    norm : NormType, optional
        Norm in which lengths are measured (default: L2NORM).
    beta : float, optional
        Extra scaling factor applied to every bound (default: 1.0).
    """

    name = "generic"
    norm_kind: Optional[NormType] = NormType.L2NORM
    table_max_dim: Optional[int] = None

    def __init__(
        self,
        log_density: float,
        max_dim: int,
        norm: NormType = NormType.L2NORM,
        beta: float = 1.0
    ):
        if max_dim < 1:
            raise ValueError(f"max_dim must be positive, got {max_dim}")
        if self.table_max_dim is not None and max_dim > self.table_max_dim:
            raise MissingNormalizerBound(
                f"{type(self).__name__} has no bound beyond dimension "
                f"{self.table_max_dim} (requested {max_dim})"
            )
        self.log_density = float(log_density)
        self.max_dim = max_dim
        self.norm = NormType.parse(norm)
        self.beta = beta
        self._bounds = np.zeros(max_dim + 1, dtype=np.float64)
        for t in range(1, max_dim + 1):
            self._bounds[t] = self._compute_bound(t)

    def get_gamma(self, t: int) -> float:
        return 1.0

    def _compute_bound(self, t: int) -> float:
        x = (0.5 * math.log(self.get_gamma(t)) + math.log(self.beta)
             - self.log_density / t)
        return math.exp(x)

    def get_bound(self, dim: int, norm: Optional[NormType] = None) -> float:
        """
        Return the precomputed bound d_t^* for ``t = dim``.

        Parameters
        ----------
        dim : int
            Dimension t.
        norm : NormType, optional
            Norm of the lengths being normalized. If given, it must be the
            norm this normalizer was built for.

        Raises
        ------
        MissingNormalizerBound
            If ``dim`` is outside [1, max_dim] or the norm does not match.
        """
        if not 1 <= dim <= self.max_dim:
            raise MissingNormalizerBound(
                f"{type(self).__name__}: no bound for dimension {dim} "
                f"(configured for 1..{self.max_dim})"
            )
        if norm is not None and self.norm_kind is not None:
            if NormType.parse(norm) != self.norm:
                raise MissingNormalizerBound(
                    f"{type(self).__name__} bounds are for the {self.norm} norm, "
                    f"not {NormType.parse(norm)}"
                )
        return float(self._bounds[dim])

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(log_density={self.log_density:.6g}, "
                f"max_dim={self.max_dim}, norm='{self.norm}')")


class NormaGeneric(Normalizer):
    """Trivial normalization: every configured dimension has bound 1."""

    norm_kind = None

    def _compute_bound(self, t: int) -> float:
        return 1.0


class NormaBestLat(Normalizer):
    """Hermite constants of the best known lattices, t <= 24."""

    name = "bestlat"
    table_max_dim = len(_BEST_CENTER_DENSITY)

    def get_gamma(self, t: int) -> float:
        return _gamma_from_center_density(_BEST_CENTER_DENSITY[t - 1], t)


class NormaLaminated(Normalizer):
    """Hermite constants of the laminated lattices Lambda_t, t <= 24."""

    name = "laminated"
    table_max_dim = len(_LAMINATED_CENTER_DENSITY)

    def get_gamma(self, t: int) -> float:
        return _gamma_from_center_density(_LAMINATED_CENTER_DENSITY[t - 1], t)


class NormaRogers(Normalizer):
    """
    Rogers' bound on the center density of sphere packings.

    Uses the approximation

        log2 delta_t = (t/2) log2(t / (4 e pi)) + (3/2) log2 t
                       - log2(e / sqrt(pi)) + 5.25 / (t + 2.5)

    which is accurate for large t. In low dimensions it is never allowed to
    fall below the density of the best known lattice.
    """

    name = "rogers"

    def get_gamma(self, t: int) -> float:
        log2_delta = (0.5 * t * math.log2(t / (4.0 * math.e * math.pi))
                      + 1.5 * math.log2(t)
                      - math.log2(math.e / math.sqrt(math.pi))
                      + 5.25 / (t + 2.5))
        delta = 2.0 ** log2_delta
        if t <= len(_BEST_CENTER_DENSITY):
            delta = max(delta, _BEST_CENTER_DENSITY[t - 1])
        return _gamma_from_center_density(delta, t)


class NormaMinkowski(Normalizer):
    """Minkowski's bound for the L2 norm: gamma_t <= (4/pi) Gamma(t/2 + 1)^{2/t}."""

    name = "minkowski"

    def get_gamma(self, t: int) -> float:
        return 4.0 / math.pi * math.exp(2.0 / t * gammaln(t / 2.0 + 1.0))


class NormaMinkL1(Normalizer):
    """
    Minkowski's bound for the L1 norm.

    The cross-polytope of L1 radius r has volume (2r)^t / t!, so the
    shortest L1 length is at most (t! / n)^{1/t}, i.e. gamma_t = (t!)^{2/t}.
    """

    name = "minkl1"
    norm_kind = NormType.L1NORM

    def __init__(self, log_density: float, max_dim: int, beta: float = 1.0):
        super().__init__(log_density, max_dim, NormType.L1NORM, beta)

    def get_gamma(self, t: int) -> float:
        return math.exp(2.0 / t * gammaln(t + 1.0))


class NormaPalpha(Normalizer):
    """
    Bound on the P_alpha criterion of a rank-1 lattice rule with n points.

    For n prime there is a generating vector with

        P_alpha <= ((1 + 2 zeta(alpha))^t - 1) / (n - 1)

    The number of points is n = round(exp(|log_density|)).

    Parameters
    ----------
    log_density : float
        Natural log of the point density.
    max_dim : int
        Largest dimension.
    alpha : int
        Smoothness parameter, at least 2.
    """

    name = "palpha"

    def __init__(self, log_density: float, max_dim: int, alpha: int, beta: float = 1.0):
        if alpha < 2:
            raise ValueError(f"alpha must be at least 2 for P_alpha, got {alpha}")
        self.alpha = alpha
        self.n_points = int(round(math.exp(abs(log_density))))
        if self.n_points < 2:
            raise ValueError(f"P_alpha bound needs at least 2 points, got {self.n_points}")
        super().__init__(log_density, max_dim, NormType.L2NORM, beta)

    def _compute_bound(self, t: int) -> float:
        base = 1.0 + 2.0 * float(zeta(self.alpha))
        return self.beta * (base ** t - 1.0) / (self.n_points - 1)


_NORMALIZERS = {
    NormaType.BESTLAT: NormaBestLat,
    NormaType.LAMINATED: NormaLaminated,
    NormaType.ROGERS: NormaRogers,
    NormaType.MINKOWSKI: NormaMinkowski,
    NormaType.NORMA_GENERIC: NormaGeneric,
}


def init_normalizer(
    norma: NormaType,
    log_density: float,
    max_dim: int,
    alpha: int = 0,
    norm: Optional[NormType] = None,
    beta: float = 1.0
) -> Normalizer:
    """
    Create the normalizer corresponding to ``norma``.

    Parameters
    ----------
    norma : NormaType
        Kind of normalization.
    log_density : float
        Natural log of the point density of the lattice.
    max_dim : int
        Largest dimension that will be requested.
    alpha : int, optional
        Used only for PALPHA_N.
    norm : NormType, optional
        Norm recorded by the generic normalizer (default: L2NORM). The other
        normalizers have a fixed norm.
    beta : float, optional
        Scaling factor (default: 1.0).

    Returns
    -------
    Normalizer
    """
    norma = NormaType.parse(norma)
    if norma == NormaType.PALPHA_N:
        return NormaPalpha(log_density, max_dim, alpha, beta)
    if norma == NormaType.MINKL1:
        return NormaMinkL1(log_density, max_dim, beta)
    if norma == NormaType.NORMA_GENERIC:
        return NormaGeneric(log_density, max_dim, norm or NormType.L2NORM, beta)
    return _NORMALIZERS[norma](log_density, max_dim, NormType.L2NORM, beta)

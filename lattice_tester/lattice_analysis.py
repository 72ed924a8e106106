"""
Lattice Analysis: Normalized Shortest Vector Figures of Merit
=============================================================

A ``LatticeAnalysis`` combines a ``Reducer`` (which owns the basis) with a
``Normalizer`` to compute the figure of merit

    S_t = l_t / d_t^*

where l_t is the length of the shortest nonzero vector of the lattice in
dimension t, in the norm of the basis, and d_t^* the normalization bound.
For the spectral test, the basis is the dual lattice basis with the L2 norm
and 1 / l_t is the maximal distance between successive hyperplanes covering
the points of the primal lattice.

Several projections can be tested at once; their merits are then combined
using projection weights. For the spectral test of projections, each one is
tested through its own dual (``dual=True``): the dual of the projection of
the lattice, which differs from the projection of the dual lattice.

    - "min": min_p S_p / w_p  (worst projection, weights as importances)
    - "sum": sum_p w_p * S_p

Projections of weight zero are skipped.
"""

import logging
from enum import Enum
from typing import Dict, Iterable, Optional

from .coordinates import Coordinates
from .const import NormaType
from .errors import DimensionOutOfRange
from .normalizer import Normalizer, init_normalizer
from .reducer import Reducer
from .weights import Weights

logger = logging.getLogger(__name__)

AGGREGATES = ("min", "sum")


class AnalysisState(Enum):
    CONFIGURED = "configured"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class LatticeAnalysis:
    """
    Figure of merit of a lattice from its normalized shortest vector.

    Parameters
    ----------
    reducer : Reducer
        Reducer wrapping the basis to test. The basis is reduced in place.
    norma_type : NormaType, optional
        Normalization of the shortest vector length (default: BESTLAT).
    alpha : int, optional
        Parameter of the P_alpha normalization; ignored otherwise.
    log_density : float, optional
        Natural log of the point density of the lattice. By default it is
        computed from the basis as -log|det B|.
    verbose : bool, optional
        If True, print progress information (default: False).

    Attributes
    ----------
    merit : float or None
        Result of the last successful test; None before the first one.
        A failed test leaves it unchanged, so check the returned boolean.
    projection_merits : dict
        Normalized length of each projection of the last successful
        projection test.
    state : AnalysisState
        CONFIGURED, RUNNING, COMPLETED or FAILED.

    Examples
    --------
    >>> basis = Basis.from_rows([[1, 12], [0, 101]])
    >>> analysis = LatticeAnalysis(Reducer(basis), NormaType.BESTLAT)
    >>> analysis.perform_test(fact=0.99, block_size=2)
    True
    >>> 0.0 < analysis.merit <= 1.0
    True
    """

    def __init__(
        self,
        reducer: Reducer,
        norma_type: NormaType = NormaType.BESTLAT,
        alpha: int = 0,
        log_density: Optional[float] = None,
        verbose: bool = False
    ):
        self.reducer = reducer
        self.verbose = verbose
        self._log_density = log_density
        self.norma_type = NormaType.parse(norma_type)
        self.alpha = alpha
        self.normalizer: Optional[Normalizer] = None
        self.merit: Optional[float] = None
        self.projection_merits: Dict[Coordinates, float] = {}
        self.init_normalizer(self.norma_type, alpha)
        self.state = AnalysisState.CONFIGURED

    @property
    def basis(self):
        return self.reducer.basis

    def get_merit(self) -> Optional[float]:
        return self.merit

    def init_normalizer(self, norma: NormaType, alpha: int = 0) -> Normalizer:
        """
        Create the normalizer for ``norma`` and the dimension of the basis.

        ``alpha`` is used only for the P_alpha normalization.
        """
        basis = self.basis
        log_density = (self._log_density if self._log_density is not None
                       else basis.log_density())
        self.norma_type = NormaType.parse(norma)
        self.alpha = alpha
        self.normalizer = init_normalizer(
            self.norma_type, log_density, basis.dim, alpha, norm=basis.norm
        )
        return self.normalizer

    @staticmethod
    def _check_parameters(fact: float, block_size: int) -> None:
        if not 0.0 < fact < 1.0:
            raise ValueError(f"fact must be in (0, 1), got {fact}")
        if int(block_size) != block_size or block_size < 1:
            raise ValueError(f"block_size must be a positive integer, got {block_size}")

    def perform_test(self, fact: float = 0.999999, block_size: int = 20) -> bool:
        """
        Reduce the basis and compute the merit in the basis dimension.

        Parameters
        ----------
        fact : float, optional
            Reduction factor in (0, 1); closer to 1 reduces more
            (default: 0.999999).
        block_size : int, optional
            BKZ block size (default: 20).

        Returns
        -------
        bool
            True if the test completed and ``merit`` was updated; False if
            the reduction was interrupted, in which case ``merit`` keeps its
            previous value.

        Raises
        ------
        MissingNormalizerBound
            If the normalizer has no bound for the basis dimension or norm.
        """
        self._check_parameters(fact, block_size)
        basis = self.basis
        bound = self.normalizer.get_bound(basis.dim, basis.norm)

        self.state = AnalysisState.RUNNING
        try:
            done = (self.reducer.red_bkz(fact, block_size)
                    and self.reducer.shortest_vector(basis.norm))
        except Exception:
            self.state = AnalysisState.FAILED
            raise

        if not done:
            self.state = AnalysisState.FAILED
            logger.warning("Test interrupted in dimension %d", basis.dim)
            return False

        self.merit = self.reducer.min_length / bound
        self.state = AnalysisState.COMPLETED
        if self.verbose:
            print(f"Dimension {basis.dim}: l = {self.reducer.min_length:.6f}, "
                  f"d* = {bound:.6f}, merit = {self.merit:.6f}")
        return True

    def _projection_merit(self, projection: Coordinates, fact: float, block_size: int,
                          dual: bool = False):
        sub = self.basis.projection(projection)
        if dual:
            sub = sub.dual()
        reducer = Reducer(
            sub,
            max_iterations=self.reducer.max_iterations,
            max_nodes=self.reducer.max_nodes,
            max_tours=self.reducer.max_tours,
        )
        normalizer = init_normalizer(
            self.norma_type, sub.log_density(), sub.dim, self.alpha, norm=sub.norm
        )
        bound = normalizer.get_bound(sub.dim, sub.norm)
        if not (reducer.red_bkz(fact, block_size) and reducer.shortest_vector(sub.norm)):
            return None
        return reducer.min_length / bound

    def perform_projection_test(
        self,
        projections: Iterable,
        weights: Optional[Weights] = None,
        fact: float = 0.999999,
        block_size: int = 20,
        aggregate: str = "min",
        dual: bool = False
    ) -> bool:
        """
        Compute the merit of each projection and combine them with weights.

        Each projection is tested on its own basis (the projection of the
        lattice), normalized with its own density and dimension. The basis
        of this analysis is not modified.

        Parameters
        ----------
        projections : iterable
            Coordinate sets (``Coordinates`` or iterables of indices).
        weights : Weights, optional
            Projection weights (default: weight 1 for every projection).
        fact : float, optional
            Reduction factor in (0, 1) (default: 0.999999).
        block_size : int, optional
            BKZ block size (default: 20).
        aggregate : str, optional
            "min" (default) or "sum", see the module documentation.
        dual : bool, optional
            If True, test the dual of each projection, scaled to an integer
            basis by the determinant of the projection (default: False).

        Returns
        -------
        bool
            True on success; False if any reduction was interrupted, in which
            case ``merit`` and ``projection_merits`` keep their values.
        """
        self._check_parameters(fact, block_size)
        if aggregate not in AGGREGATES:
            raise ValueError(f"Invalid aggregate '{aggregate}'. Must be one of {AGGREGATES}")
        projections = [Coordinates(p) for p in projections]
        if not projections:
            raise ValueError("No projection to test")

        self.state = AnalysisState.RUNNING
        merits: Dict[Coordinates, float] = {}
        terms = []
        try:
            for p in projections:
                w = 1.0 if weights is None else weights.get_weight(p)
                if w == 0.0:
                    logger.debug("Skipping projection %s of weight 0", p)
                    continue
                m = self._projection_merit(p, fact, block_size, dual)
                if m is None:
                    self.state = AnalysisState.FAILED
                    logger.warning("Test interrupted on projection %s", p)
                    return False
                merits[p] = m
                terms.append((w, m))
                logger.debug("Projection %s: weight %g, merit %g", p, w, m)
                if self.verbose:
                    print(f"  Projection {p}: merit = {m:.6f} (weight {w:g})")
        except Exception:
            self.state = AnalysisState.FAILED
            raise

        if not terms:
            self.state = AnalysisState.FAILED
            raise ValueError("Every projection has weight 0")

        if aggregate == "min":
            self.merit = min(m / w for w, m in terms)
        else:
            self.merit = sum(w * m for w, m in terms)
        self.projection_merits = merits
        self.state = AnalysisState.COMPLETED
        return True

    def perform_dimension_test(
        self,
        min_dim: int,
        max_dim: int,
        weights: Optional[Weights] = None,
        fact: float = 0.999999,
        block_size: int = 20,
        aggregate: str = "min",
        dual: bool = False
    ) -> bool:
        """
        Projection test over the projections {1, ..., t}, min_dim <= t <= max_dim.

        On the primal basis with ``dual=True``, the L2 norm, the default "min"
        aggregate and no weights, this is the spectral test figure of merit
        min_t S_t.
        """
        if not 1 <= min_dim <= max_dim <= self.basis.dim:
            raise DimensionOutOfRange(
                f"Dimensions [{min_dim}, {max_dim}] not within 1..{self.basis.dim}"
            )
        return self.perform_projection_test(
            [Coordinates.prefix(t) for t in range(min_dim, max_dim + 1)],
            weights, fact, block_size, aggregate, dual
        )

    def __repr__(self) -> str:
        return (f"LatticeAnalysis(norma='{self.norma_type}', state={self.state.value}, "
                f"merit={self.merit})")

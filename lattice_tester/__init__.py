"""
Lattice Tester: Structural Quality of Point Lattices
====================================================

This package computes figures of merit of lattices used for quasi-Monte
Carlo integration and random number generation, from the normalized length
of the shortest nonzero vector of the lattice (or of its dual) and of its
projections.

Main classes:
- Basis: lattice basis with cached, lazily recomputed vector norms
- Reducer: LLL/BKZ reduction and exact shortest vector enumeration
- Normalizer family: bounds d_t^* used to normalize shortest lengths
- Weights family: projection weights (order-dependent, product, POD)
- LatticeAnalysis: figure of merit of a lattice and of its projections

Reference:
    L'Ecuyer, P. and Couture, R. (1997). An implementation of the lattice
    and spectral tests for multiple recursive linear random number generators.

License: MIT
"""

from .basis import Basis, vector_norm
from .config import LatticeTesterConfig, load_config
from .const import CriterionType, NormaType, NormType
from .coordinates import Coordinates, all_projections
from .errors import (
    DimensionOutOfRange,
    LatticeTesterError,
    MalformedConfiguration,
    MissingNormalizerBound,
    MissingWeightEntry,
    StaleNormAccess,
)
from .lattice_analysis import AnalysisState, LatticeAnalysis
from .normalizer import (
    Normalizer,
    NormaBestLat,
    NormaGeneric,
    NormaLaminated,
    NormaMinkL1,
    NormaMinkowski,
    NormaPalpha,
    NormaRogers,
    init_normalizer,
)
from .reducer import Reducer
from .weights import (
    OrderDependentWeights,
    PODWeights,
    ProductWeights,
    ProjectionDependentWeights,
    Weights,
)
from .weights_config import create_weights, load_weights

__version__ = "1.0.0"
__all__ = [
    "AnalysisState",
    "Basis",
    "Coordinates",
    "CriterionType",
    "DimensionOutOfRange",
    "LatticeAnalysis",
    "LatticeTesterConfig",
    "LatticeTesterError",
    "MalformedConfiguration",
    "MissingNormalizerBound",
    "MissingWeightEntry",
    "NormaBestLat",
    "NormaGeneric",
    "NormaLaminated",
    "NormaMinkL1",
    "NormaMinkowski",
    "NormaPalpha",
    "NormaRogers",
    "NormaType",
    "NormType",
    "Normalizer",
    "OrderDependentWeights",
    "PODWeights",
    "ProductWeights",
    "ProjectionDependentWeights",
    "Reducer",
    "StaleNormAccess",
    "Weights",
    "all_projections",
    "create_weights",
    "init_normalizer",
    "load_config",
    "load_weights",
    "vector_norm",
]

"""
Configuration of a lattice test.

A configuration file describes one lattice and how to test it:

    basis:
      - [1, 12]
      - [0, 101]
    norm: l2
    normalizer: bestlat
    dual: true
    fact: 0.999999
    block_size: 20
    # optional, test projections {1..t} for min_dim <= t <= max_dim
    min_dim: 2
    max_dim: 2
    aggregate: min
    weights:
      product: {weights: {1: 1.0, 2: 0.5}}
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from .basis import Basis
from .const import CriterionType, NormaType, NormType
from .errors import MalformedConfiguration
from .lattice_analysis import AGGREGATES, LatticeAnalysis
from .reducer import Reducer
from .weights_config import create_weights

logger = logging.getLogger(__name__)


@dataclass
class LatticeTesterConfig:
    """Parameters of one lattice test."""
    basis: List[List[Any]]
    norm: NormType = NormType.L2NORM
    normalizer: NormaType = NormaType.BESTLAT
    criterion: CriterionType = CriterionType.SPECTRAL
    alpha: int = 0
    dual: bool = False
    fact: float = 0.999999
    block_size: int = 20
    min_dim: Optional[int] = None
    max_dim: Optional[int] = None
    aggregate: str = "min"
    weights: Optional[Dict[str, Any]] = None
    max_nodes: int = 10**6
    verbose: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "LatticeTesterConfig":
        """
        Build a configuration from a mapping (e.g. parsed YAML).

        Raises
        ------
        MalformedConfiguration
            If ``basis`` is missing or a value is invalid.
        """
        if not isinstance(raw, dict):
            raise MalformedConfiguration(f"Configuration must be a mapping, got {raw!r}")
        if "basis" not in raw:
            raise MalformedConfiguration("Configuration missing 'basis'")
        known = set(cls.__dataclass_fields__) - {"metadata"}
        unknown = set(raw) - known
        try:
            config = cls(
                basis=[list(row) for row in raw["basis"]],
                norm=NormType.parse(raw.get("norm", NormType.L2NORM)),
                normalizer=NormaType.parse(raw.get("normalizer", NormaType.BESTLAT)),
                criterion=CriterionType.parse(raw.get("criterion", CriterionType.SPECTRAL)),
                alpha=int(raw.get("alpha", 0)),
                dual=bool(raw.get("dual", False)),
                fact=float(raw.get("fact", 0.999999)),
                block_size=int(raw.get("block_size", 20)),
                min_dim=raw.get("min_dim"),
                max_dim=raw.get("max_dim"),
                aggregate=raw.get("aggregate", "min"),
                weights=raw.get("weights"),
                max_nodes=int(raw.get("max_nodes", 10**6)),
                verbose=bool(raw.get("verbose", False)),
                metadata={k: raw[k] for k in unknown},
            )
        except (TypeError, ValueError) as e:
            raise MalformedConfiguration(str(e)) from e
        if config.criterion != CriterionType.SPECTRAL:
            raise MalformedConfiguration(
                f"Criterion '{config.criterion}' is not supported, use 'spectral'"
            )
        if config.aggregate not in AGGREGATES:
            raise MalformedConfiguration(
                f"Invalid aggregate '{config.aggregate}'. Must be one of {AGGREGATES}"
            )
        if (config.min_dim is None) != (config.max_dim is None):
            raise MalformedConfiguration("min_dim and max_dim must be given together")
        if unknown:
            logger.debug("Ignoring unknown configuration keys %s", sorted(unknown))
        return config

    def build_basis(self) -> Basis:
        """
        Basis to analyse. With ``dual`` it is the dual basis for a single
        test; a dimension test keeps the primal basis and dualizes each
        projection instead.
        """
        try:
            basis = Basis.from_rows(self.basis, self.norm)
        except ValueError as e:
            raise MalformedConfiguration(f"Invalid basis: {e}") from e
        return basis.dual() if self.dual and self.min_dim is None else basis

    def build_analysis(self) -> LatticeAnalysis:
        reducer = Reducer(self.build_basis(), max_nodes=self.max_nodes,
                          verbose=self.verbose)
        return LatticeAnalysis(reducer, self.normalizer, self.alpha,
                               verbose=self.verbose)

    def run(self) -> Optional[float]:
        """
        Run the configured test.

        Returns
        -------
        float or None
            The merit, or None if the test was interrupted.
        """
        analysis = self.build_analysis()
        if self.min_dim is None:
            done = analysis.perform_test(self.fact, self.block_size)
        else:
            weights = None if self.weights is None else create_weights(self.weights)
            done = analysis.perform_dimension_test(
                self.min_dim, self.max_dim, weights,
                self.fact, self.block_size, self.aggregate, self.dual
            )
        return analysis.merit if done else None


def load_config(path) -> LatticeTesterConfig:
    """Load a test configuration from a YAML file."""
    with open(path) as f:
        return LatticeTesterConfig.from_dict(yaml.safe_load(f))

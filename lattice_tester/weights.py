"""
Projection Weights
==================

A weight maps a projection (a set of coordinates) to a non-negative
importance. Weights are pure: evaluating one never changes it.

Available weights:
- OrderDependentWeights: depends only on the number of coordinates
- ProductWeights: product of per-coordinate weights
- PODWeights: product of order-dependent and product weights
- ProjectionDependentWeights: explicit table of projections
"""

import math
from abc import ABC, abstractmethod
from typing import Dict, Mapping, Optional, Sequence, Union

from .coordinates import Coordinates
from .errors import MissingWeightEntry


def _check_weight(value) -> float:
    value = float(value)
    if value < 0.0 or math.isnan(value):
        raise ValueError(f"Weights must be non-negative, got {value}")
    return value


class Weights(ABC):
    """Capability of assigning a weight to each projection."""

    @abstractmethod
    def get_weight(self, projection: Coordinates) -> float:
        """Return the weight of ``projection``."""

    def __call__(self, projection) -> float:
        return self.get_weight(projection)


class OrderDependentWeights(Weights):
    """
    Weights that depend only on the order (cardinality) of the projection.

    Parameters
    ----------
    weights : mapping or sequence, optional
        Weight of each order. A sequence is indexed by order, so its first
        entry is the weight of the empty projection.
    default : float, optional
        Weight returned for an order with no entry. If None (default), such
        a lookup raises ``MissingWeightEntry``.

    Examples
    --------
    >>> w = OrderDependentWeights({1: 2.0, 2: 0.5})
    >>> w.get_weight(Coordinates([1, 4]))
    0.5
    """

    def __init__(
        self,
        weights: Union[Mapping[int, float], Sequence[float], None] = None,
        default: Optional[float] = None
    ):
        self._weights: Dict[int, float] = {}
        self._default = None if default is None else _check_weight(default)
        if weights is not None:
            items = weights.items() if isinstance(weights, Mapping) else enumerate(weights)
            for order, value in items:
                self.set_weight(order, value)

    @property
    def default(self) -> Optional[float]:
        return self._default

    def set_default_weight(self, value: Optional[float]) -> None:
        self._default = None if value is None else _check_weight(value)

    def set_weight(self, order: int, value: float) -> None:
        order = int(order)
        if order < 0:
            raise ValueError(f"Order must be non-negative, got {order}")
        self._weights[order] = _check_weight(value)

    def get_weight_for_order(self, order: int) -> float:
        try:
            return self._weights[order]
        except KeyError:
            if self._default is None:
                raise MissingWeightEntry(
                    f"No order-dependent weight for order {order}"
                ) from None
            return self._default

    def get_weight(self, projection) -> float:
        return self.get_weight_for_order(len(Coordinates(projection)))

    def __repr__(self) -> str:
        table = ", ".join(f"{k}: {v}" for k, v in sorted(self._weights.items()))
        return f"OrderDependentWeights({{{table}}}, default={self._default})"


class ProductWeights(Weights):
    """
    Weights of the form prod_{j in projection} gamma_j.

    Parameters
    ----------
    weights : mapping, optional
        Sparse table coordinate -> gamma_j.
    default : float, optional
        Weight of coordinates absent from the table (default: 1.0).

    Notes
    -----
    The weight of the empty projection is the empty product, 1.0. Callers
    that need a zero weight for the empty set must handle it themselves.
    """

    def __init__(
        self,
        weights: Optional[Mapping[int, float]] = None,
        default: float = 1.0
    ):
        self._weights: Dict[int, float] = {}
        self._default = _check_weight(default)
        for coord, value in (weights or {}).items():
            self.set_weight(coord, value)

    @property
    def default(self) -> float:
        return self._default

    def set_default_weight(self, value: float) -> None:
        self._default = _check_weight(value)

    def set_weight(self, coordinate: int, value: float) -> None:
        (coordinate,) = Coordinates([coordinate])
        self._weights[coordinate] = _check_weight(value)

    def get_weight_for_coordinate(self, coordinate: int) -> float:
        return self._weights.get(coordinate, self._default)

    def get_weight(self, projection) -> float:
        weight = 1.0
        for j in Coordinates(projection):
            weight *= self.get_weight_for_coordinate(j)
        return weight

    def __repr__(self) -> str:
        table = ", ".join(f"{k}: {v}" for k, v in sorted(self._weights.items()))
        return f"ProductWeights({{{table}}}, default={self._default})"


class PODWeights(Weights):
    """
    Product and order-dependent (POD) weights.

    The weight of a projection is the order-dependent weight times the
    product weight. The two parts do not interact otherwise.

    Parameters
    ----------
    order_dependent : OrderDependentWeights, optional
        Order-dependent part (default: weight 1 for every order).
    product : ProductWeights, optional
        Product part (default: weight 1 for every coordinate).

    Examples
    --------
    >>> w = PODWeights(OrderDependentWeights({1: 2.0, 2: 0.5}),
    ...                ProductWeights({3: 4.0}))
    >>> w.get_weight(Coordinates([3]))
    8.0
    """

    def __init__(
        self,
        order_dependent: Optional[OrderDependentWeights] = None,
        product: Optional[ProductWeights] = None
    ):
        self._order_dependent = (
            order_dependent if order_dependent is not None
            else OrderDependentWeights(default=1.0)
        )
        self._product = product if product is not None else ProductWeights()

    @property
    def order_dependent(self) -> OrderDependentWeights:
        return self._order_dependent

    @property
    def product(self) -> ProductWeights:
        return self._product

    def get_weight(self, projection) -> float:
        return (self._order_dependent.get_weight(projection)
                * self._product.get_weight(projection))

    def __repr__(self) -> str:
        return f"PODWeights({self._order_dependent!r}, {self._product!r})"


class ProjectionDependentWeights(Weights):
    """
    Weights given explicitly for each projection.

    Parameters
    ----------
    weights : mapping, optional
        Table projection -> weight; keys are converted to ``Coordinates``.
    default : float, optional
        Weight of projections absent from the table. If None (default),
        such a lookup raises ``MissingWeightEntry``.
    """

    def __init__(
        self,
        weights: Optional[Mapping] = None,
        default: Optional[float] = None
    ):
        self._weights: Dict[Coordinates, float] = {}
        self._default = None if default is None else _check_weight(default)
        for projection, value in (weights or {}).items():
            self.set_weight(projection, value)

    def set_weight(self, projection, value: float) -> None:
        self._weights[Coordinates(projection)] = _check_weight(value)

    def get_weight(self, projection) -> float:
        key = Coordinates(projection)
        if key in self._weights:
            return self._weights[key]
        if self._default is None:
            raise MissingWeightEntry(f"No weight for projection {key}")
        return self._default

    def __repr__(self) -> str:
        table = ", ".join(
            f"{p!r}: {v}" for p, v in sorted(self._weights.items(),
                                             key=lambda kv: (len(kv[0]), kv[0].sorted()))
        )
        return f"ProjectionDependentWeights({{{table}}}, default={self._default})"

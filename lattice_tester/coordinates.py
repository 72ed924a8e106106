"""
Coordinate sets identifying projections of a point set.
"""

from itertools import combinations
from typing import Iterable, Iterator

import numpy as np


class Coordinates(frozenset):
    """
    Immutable set of coordinate indices defining a projection.

    Indices are positive integers: coordinate 1 is the first coordinate of
    the point set. The empty set is allowed and denotes the empty projection.

    Examples
    --------
    >>> p = Coordinates([3, 1])
    >>> p
    Coordinates({1, 3})
    >>> len(p)
    2
    """

    def __new__(cls, indices: Iterable[int] = ()):
        checked = []
        for j in indices:
            if isinstance(j, (bool, np.bool_)) or not isinstance(j, (int, np.integer)):
                raise ValueError(f"Coordinate index must be an integer, got {j!r}")
            if j < 1:
                raise ValueError(f"Coordinate index must be positive, got {j}")
            checked.append(int(j))
        return super().__new__(cls, checked)

    @classmethod
    def prefix(cls, t: int) -> "Coordinates":
        """Return the projection {1, ..., t}."""
        return cls(range(1, t + 1))

    def sorted(self) -> list:
        return sorted(self)

    def __repr__(self) -> str:
        return "Coordinates({" + ", ".join(str(j) for j in sorted(self)) + "})"

    __str__ = __repr__


def all_projections(
    dim: int,
    max_order: int,
    min_order: int = 1
) -> Iterator[Coordinates]:
    """
    Enumerate the projections of {1, ..., dim} by increasing order.

    Parameters
    ----------
    dim : int
        Number of coordinates.
    max_order : int
        Largest projection cardinality (clipped to ``dim``).
    min_order : int, optional
        Smallest projection cardinality (default: 1).

    Yields
    ------
    Coordinates
        Projections ordered by cardinality, then lexicographically.
    """
    for order in range(max(0, min_order), min(max_order, dim) + 1):
        for combo in combinations(range(1, dim + 1), order):
            yield Coordinates(combo)

"""
Error kinds raised by the lattice tester.

A reduction that does not converge is not an error: ``Reducer`` and
``LatticeAnalysis`` report it by returning ``False``.
"""


class LatticeTesterError(Exception):
    """Base class of all lattice tester errors."""


class StaleNormAccess(LatticeTesterError, RuntimeError):
    """A cached vector norm was read after it was invalidated."""

    def __init__(self, index: int):
        super().__init__(
            f"Norm of vector {index} is stale; call update_vec_norm() first"
        )
        self.index = index


class DimensionOutOfRange(LatticeTesterError, IndexError):
    """A basis index or an analysis dimension exceeds the configured bounds."""


class MissingNormalizerBound(LatticeTesterError, LookupError):
    """No theoretical bound is available for a dimension or norm kind."""


class MissingWeightEntry(LatticeTesterError, LookupError):
    """A weight lookup missed and no default weight is configured."""


class MalformedConfiguration(LatticeTesterError, ValueError):
    """Structured configuration lacks a required element or has a bad value."""

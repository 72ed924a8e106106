"""
Enumerations shared by the lattice tester.

Every enumeration stores the lower-case name used in configuration files,
so ``str(member)`` is the canonical rendering and ``parse`` reads it back.
"""

from enum import Enum


class _ConfigEnum(Enum):

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value):
        """
        Convert a configuration value (member, name or value) to a member.

        Raises
        ------
        ValueError
            If ``value`` does not name a member of the enumeration.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if key in (member.value, member.name.lower()):
                    return member
        raise ValueError(
            f"Invalid {cls.__name__} '{value}'. "
            f"Must be one of {tuple(m.value for m in cls)}"
        )


class NormType(_ConfigEnum):
    """
    Norm used to measure the length of vectors. For X = (x_1, ..., x_t):

    - SUPNORM: max(|x_1|, ..., |x_t|)
    - L1NORM: |x_1| + ... + |x_t|
    - L2NORM: (x_1^2 + ... + x_t^2)^{1/2}
    - ZAREMBANORM: max(1, |x_1|) * ... * max(1, |x_t|)
    """
    SUPNORM = "sup"
    L1NORM = "l1"
    L2NORM = "l2"
    ZAREMBANORM = "zaremba"


class NormaType(_ConfigEnum):
    """
    Normalization used to rescale the shortest vector length in dimension t.

    - BESTLAT: d_t^* of the best known lattice
    - LAMINATED: d_t^* of the best laminated lattice
    - ROGERS: Rogers' bound on the density of sphere packings
    - MINKOWSKI: Minkowski's bound for the L2 norm
    - MINKL1: Minkowski's bound for the L1 norm
    - PALPHA_N: bound for the P_alpha criterion
    - NORMA_GENERIC: trivial normalization (= 1)
    """
    BESTLAT = "bestlat"
    LAMINATED = "laminated"
    ROGERS = "rogers"
    MINKOWSKI = "minkowski"
    MINKL1 = "minkl1"
    PALPHA_N = "palpha"
    NORMA_GENERIC = "generic"


class CriterionType(_ConfigEnum):
    """Figure of merit used to rank lattices."""
    SPECTRAL = "spectral"
    BEYER = "beyer"
    PALPHA = "palpha"
    BOUND_JS = "bound_js"

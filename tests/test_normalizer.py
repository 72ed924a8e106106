"""
Tests for the normalization bounds.
"""

import math

import pytest

from lattice_tester import (
    NormaBestLat,
    NormaGeneric,
    NormaLaminated,
    NormaMinkL1,
    NormaMinkowski,
    NormaPalpha,
    NormaRogers,
    NormaType,
    NormType,
    init_normalizer,
)
from lattice_tester.errors import MissingNormalizerBound


class TestHermiteConstants:

    @pytest.mark.parametrize("t, gamma", [
        (1, 1.0),
        (2, 2.0 / math.sqrt(3.0)),
        (3, 2.0 ** (1.0 / 3.0)),
        (4, math.sqrt(2.0)),
        (5, 8.0 ** (1.0 / 5.0)),
        (6, (64.0 / 3.0) ** (1.0 / 6.0)),
        (7, 64.0 ** (1.0 / 7.0)),
        (8, 2.0),
        (24, 4.0),
    ])
    def test_best_lattice_known_values(self, t, gamma):
        assert NormaBestLat(0.0, 24).get_gamma(t) == pytest.approx(gamma)

    def test_laminated_differs_only_in_11_to_13(self):
        best = NormaBestLat(0.0, 24)
        lam = NormaLaminated(0.0, 24)
        for t in range(1, 25):
            if 11 <= t <= 13:
                assert lam.get_gamma(t) < best.get_gamma(t)
            else:
                assert lam.get_gamma(t) == pytest.approx(best.get_gamma(t))

    def test_upper_bounds_dominate_best_lattice(self):
        best = NormaBestLat(0.0, 24)
        minkowski = NormaMinkowski(0.0, 24)
        rogers = NormaRogers(0.0, 24)
        for t in range(1, 25):
            assert minkowski.get_gamma(t) >= best.get_gamma(t) * (1 - 1e-12)
            assert rogers.get_gamma(t) >= best.get_gamma(t) * (1 - 1e-12)

    def test_minkowski_l1(self):
        n = NormaMinkL1(0.0, 6)
        assert n.get_gamma(4) == pytest.approx(math.factorial(4) ** 0.5)


class TestBounds:

    def test_bound_scales_with_density(self):
        n = NormaBestLat(-math.log(101.0), 2)
        assert n.get_bound(1) == pytest.approx(101.0)
        assert n.get_bound(2) == pytest.approx(math.sqrt(2.0 / math.sqrt(3.0) * 101.0))

    def test_unit_density(self):
        assert NormaBestLat(0.0, 8).get_bound(8) == pytest.approx(math.sqrt(2.0))

    @pytest.mark.parametrize("dim", [0, 4, -1])
    def test_unconfigured_dimension_fails(self, dim):
        with pytest.raises(MissingNormalizerBound):
            NormaBestLat(0.0, 3).get_bound(dim)

    def test_generic_fails_outside_table(self):
        n = NormaGeneric(0.0, 3)
        assert n.get_bound(3) == 1.0
        with pytest.raises(MissingNormalizerBound):
            n.get_bound(4)

    def test_table_limit(self):
        with pytest.raises(MissingNormalizerBound):
            NormaBestLat(0.0, 25)

    def test_norm_mismatch(self):
        with pytest.raises(MissingNormalizerBound):
            NormaBestLat(0.0, 3).get_bound(2, NormType.L1NORM)
        with pytest.raises(MissingNormalizerBound):
            NormaMinkL1(0.0, 3).get_bound(2, NormType.L2NORM)
        assert NormaMinkL1(0.0, 3).get_bound(2, NormType.L1NORM) == pytest.approx(math.sqrt(2.0))
        assert NormaGeneric(0.0, 3).get_bound(2, NormType.SUPNORM) == 1.0

    def test_beta(self):
        assert NormaBestLat(0.0, 8, beta=2.0).get_bound(8) == pytest.approx(2.0 * math.sqrt(2.0))


class TestPalpha:

    def test_bound(self):
        n = NormaPalpha(math.log(101.0), 3, alpha=2)
        base = 1.0 + math.pi ** 2 / 3.0
        assert n.n_points == 101
        assert n.get_bound(1) == pytest.approx((base - 1.0) / 100.0)
        assert n.get_bound(3) == pytest.approx((base ** 3 - 1.0) / 100.0)

    def test_alpha_must_be_at_least_2(self):
        with pytest.raises(ValueError):
            NormaPalpha(math.log(101.0), 3, alpha=1)


@pytest.mark.parametrize("norma, cls", [
    (NormaType.BESTLAT, NormaBestLat),
    (NormaType.LAMINATED, NormaLaminated),
    (NormaType.ROGERS, NormaRogers),
    (NormaType.MINKOWSKI, NormaMinkowski),
    (NormaType.MINKL1, NormaMinkL1),
    (NormaType.NORMA_GENERIC, NormaGeneric),
    ("palpha", NormaPalpha),
])
def test_init_normalizer(norma, cls):
    n = init_normalizer(norma, math.log(101.0), 4, alpha=2)
    assert type(n) is cls
    assert n.max_dim == 4

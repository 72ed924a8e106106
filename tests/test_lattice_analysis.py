"""
Tests for the figure of merit orchestration.
"""

import math

import pytest

from lattice_tester import (
    AnalysisState,
    Basis,
    Coordinates,
    LatticeAnalysis,
    NormaType,
    NormType,
    OrderDependentWeights,
    ProductWeights,
    Reducer,
)
from lattice_tester.errors import DimensionOutOfRange, MissingNormalizerBound

# Shortest vector of the LCG lattice (m=101, a=12) has squared length 89
LCG_MERIT = math.sqrt(89.0) / math.sqrt(2.0 / math.sqrt(3.0) * 101.0)


def lcg_analysis(norm=NormType.L2NORM, norma=NormaType.BESTLAT, **kwargs):
    basis = Basis.from_rows([[1, 12], [0, 101]], norm)
    return LatticeAnalysis(Reducer(basis, **kwargs), norma)


class TestPerformTest:

    def test_merit(self):
        analysis = lcg_analysis()
        assert analysis.merit is None
        assert analysis.state == AnalysisState.CONFIGURED
        assert analysis.perform_test(0.99, 2)
        assert analysis.merit == pytest.approx(LCG_MERIT)
        assert analysis.get_merit() == analysis.merit
        assert analysis.state == AnalysisState.COMPLETED

    def test_deterministic(self):
        analysis = lcg_analysis()
        assert analysis.perform_test()
        first = analysis.merit
        assert analysis.perform_test()
        assert analysis.merit == first
        other = lcg_analysis()
        assert other.perform_test()
        assert other.merit == first

    def test_dimension_one(self):
        analysis = LatticeAnalysis(Reducer(Basis.from_rows([[7]])))
        assert analysis.perform_test()
        assert analysis.merit == pytest.approx(1.0)
        generic = LatticeAnalysis(Reducer(Basis.from_rows([[7]])), NormaType.NORMA_GENERIC)
        assert generic.perform_test()
        assert generic.merit == pytest.approx(7.0)

    def test_interrupted_test_keeps_previous_merit(self):
        analysis = lcg_analysis()
        assert analysis.perform_test(0.99, 2)
        analysis.reducer.max_nodes = 1
        assert not analysis.perform_test(0.99, 2)
        assert analysis.merit == pytest.approx(LCG_MERIT)
        assert analysis.state == AnalysisState.FAILED

    def test_interrupted_first_test_leaves_merit_unset(self):
        analysis = lcg_analysis(max_nodes=1)
        assert not analysis.perform_test(0.99, 2)
        assert analysis.merit is None

    def test_l1_norm_with_minkowski_l1(self):
        analysis = lcg_analysis(NormType.L1NORM, NormaType.MINKL1)
        assert analysis.perform_test(0.99, 2)
        assert analysis.merit == pytest.approx(13.0 / math.sqrt(2.0 * 101.0))

    def test_norm_without_bound(self):
        analysis = lcg_analysis(NormType.L1NORM, NormaType.BESTLAT)
        with pytest.raises(MissingNormalizerBound):
            analysis.perform_test()
        assert analysis.state == AnalysisState.CONFIGURED

    def test_dimension_without_bound(self):
        identity = [[int(i == j) for j in range(25)] for i in range(25)]
        with pytest.raises(MissingNormalizerBound):
            LatticeAnalysis(Reducer(Basis.from_rows(identity)), NormaType.BESTLAT)

    @pytest.mark.parametrize("fact, block_size", [(0.0, 20), (1.0, 20), (0.99, 0), (0.99, 2.5)])
    def test_invalid_parameters(self, fact, block_size):
        with pytest.raises(ValueError):
            lcg_analysis().perform_test(fact, block_size)

    def test_init_normalizer(self):
        analysis = lcg_analysis()
        analysis.init_normalizer(NormaType.NORMA_GENERIC, 0)
        assert analysis.perform_test()
        assert analysis.merit == pytest.approx(math.sqrt(89.0))

    def test_given_log_density(self):
        basis = Basis.from_rows([[1, 12], [0, 101]])
        analysis = LatticeAnalysis(Reducer(basis), NormaType.BESTLAT, log_density=0.0)
        assert analysis.perform_test()
        assert analysis.merit == pytest.approx(math.sqrt(89.0) / math.sqrt(2.0 / math.sqrt(3.0)))


class TestProjections:

    def test_min_aggregate(self):
        analysis = lcg_analysis()
        assert analysis.perform_projection_test([[1], [2], [1, 2]])
        assert analysis.projection_merits[Coordinates([1])] == pytest.approx(1.0)
        assert analysis.projection_merits[Coordinates([2])] == pytest.approx(1.0)
        assert analysis.merit == pytest.approx(LCG_MERIT)

    def test_zero_weight_projections_are_skipped(self):
        analysis = lcg_analysis()
        weights = ProductWeights({2: 0.0})
        assert analysis.perform_projection_test([[1], [2], [1, 2]], weights)
        assert set(analysis.projection_merits) == {Coordinates([1])}
        assert analysis.merit == pytest.approx(1.0)

    def test_sum_aggregate(self):
        analysis = lcg_analysis()
        weights = OrderDependentWeights({1: 0.5, 2: 1.0})
        assert analysis.perform_projection_test([[1], [2], [1, 2]], weights, aggregate="sum")
        assert analysis.merit == pytest.approx(0.5 + 0.5 + LCG_MERIT)

    def test_weights_scale_min_aggregate(self):
        analysis = lcg_analysis()
        weights = OrderDependentWeights({1: 2.0, 2: 1.0})
        assert analysis.perform_projection_test([[1], [1, 2]], weights)
        assert analysis.merit == pytest.approx(0.5)

    def test_basis_is_not_modified(self):
        analysis = lcg_analysis()
        analysis.perform_projection_test([[1, 2]])
        assert analysis.basis.vectors.tolist() == [[1, 12], [0, 101]]

    def test_all_zero_weights(self):
        with pytest.raises(ValueError):
            lcg_analysis().perform_projection_test([[1]], ProductWeights({1: 0.0}))

    def test_invalid_aggregate(self):
        with pytest.raises(ValueError):
            lcg_analysis().perform_projection_test([[1]], aggregate="max")

    def test_interrupted(self):
        analysis = lcg_analysis(max_nodes=1)
        assert not analysis.perform_projection_test([[1, 2]])
        assert analysis.merit is None
        assert analysis.state == AnalysisState.FAILED

    def test_dimension_test(self):
        analysis = lcg_analysis()
        assert analysis.perform_dimension_test(1, 2)
        assert analysis.merit == pytest.approx(LCG_MERIT)
        with pytest.raises(DimensionOutOfRange):
            analysis.perform_dimension_test(1, 3)


# Three dimensional LCG lattice (m=101, a=12), projection {1, 2} is the plane lattice
LCG_3D = [[1, 12, 144 % 101], [0, 101, 0], [0, 0, 101]]


class TestSpectralProjections:

    def test_dual_of_projection(self):
        dual_2d = LatticeAnalysis(Reducer(Basis.from_rows([[1, 12], [0, 101]]).dual()))
        assert dual_2d.perform_test(0.99, 2)

        analysis = LatticeAnalysis(Reducer(Basis.from_rows(LCG_3D)))
        assert analysis.perform_dimension_test(2, 2, fact=0.99, block_size=2, dual=True)
        assert analysis.merit == pytest.approx(dual_2d.merit)
        assert analysis.merit == pytest.approx(LCG_MERIT)

    def test_dual_dimension_test(self):
        analysis = LatticeAnalysis(Reducer(Basis.from_rows(LCG_3D)))
        assert analysis.perform_dimension_test(1, 2, dual=True)
        assert analysis.projection_merits[Coordinates([1])] == pytest.approx(1.0)
        assert analysis.merit == pytest.approx(LCG_MERIT)
        assert analysis.basis.vectors.tolist() == LCG_3D


class TestWideEntries:

    def test_scaled_lattice_has_same_merit(self):
        s = 2 ** 60
        basis = Basis.from_rows([[s, 12 * s], [0, 101 * s]])
        analysis = LatticeAnalysis(Reducer(basis))
        assert analysis.perform_test(0.99, 2)
        assert analysis.merit == pytest.approx(LCG_MERIT)

    def test_huge_modulus(self):
        m = 2 ** 600 + 1
        basis = Basis.from_rows([[1, 3 ** 300 % m], [0, m]])
        analysis = LatticeAnalysis(Reducer(basis))
        assert analysis.perform_test(0.99, 2)
        assert analysis.state == AnalysisState.COMPLETED
        # Hermite's bound in dimension 2 is attained by bestlat
        assert 0.0 < analysis.merit <= 1.0 + 1e-9

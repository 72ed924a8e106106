"""
Tests for the linear algebra helpers.
"""

import math
from fractions import Fraction

import numpy as np
import pytest

from lattice_tester.utils import gram_schmidt, multi_gcd, needs_exact, sqrt_length


@pytest.mark.parametrize("numbers, expected", [
    ([12, 18, 30], 6),
    ([8, 5], 1),
    ([0, -4, 6], 2),
    ([], 0),
])
def test_multi_gcd(numbers, expected):
    assert multi_gcd(numbers) == expected


class TestGramSchmidt:

    def test_exact(self):
        b_star_sq, mu = gram_schmidt(np.array([[1, 12], [0, 101]], dtype=object), exact=True)
        assert list(b_star_sq) == [145, Fraction(10201, 145)]
        assert mu[1, 0] == Fraction(1212, 145)
        assert mu[0, 0] == mu[1, 1] == 1
        assert mu[0, 1] == 0

    def test_float_agrees_with_exact(self):
        rows = [[1, 12, 43], [0, 101, 0], [0, 0, 101]]
        b_exact, mu_exact = gram_schmidt(np.array(rows, dtype=object), exact=True)
        b_float, mu_float = gram_schmidt(np.array(rows, dtype=np.float64))
        assert b_float == pytest.approx([float(v) for v in b_exact])
        assert mu_float.ravel() == pytest.approx([float(v) for v in mu_exact.ravel()])

    def test_wide_entries(self):
        m = 2 ** 600 + 1
        b_star_sq, _ = gram_schmidt(np.array([[1, 3 ** 300], [0, m]], dtype=object), exact=True)
        # Product of the Gram-Schmidt lengths is the squared determinant
        assert b_star_sq[0] * b_star_sq[1] == m * m


def test_needs_exact():
    assert not needs_exact([[1, 12], [0, 101]])
    assert needs_exact([[1, 2 ** 60], [0, 1]])
    assert not needs_exact([[0.5, 1.0], [0.0, 1.0]])


def test_sqrt_length():
    assert sqrt_length(89) == pytest.approx(math.sqrt(89))
    assert sqrt_length(4 ** 600) == pytest.approx(2.0 ** 600)
    assert sqrt_length(2.25) == 1.5

"""Unit tests for bracketed root finding."""

import math

import pytest

from elasticsim.numerics.root_finding import find_root


class TestFindRoot:
    def test_linear_root(self):
        result = find_root(lambda x: x - 2, 0, 5)
        assert result.converged
        assert result.root == pytest.approx(2.0, abs=1e-9)

    def test_quadratic_root(self):
        result = find_root(lambda x: x**2 - 4, 1, 3)
        assert result.converged
        assert result.root == pytest.approx(2.0, abs=1e-9)

    def test_transcendental_root(self):
        result = find_root(lambda x: math.cos(x) - x, 0, 1)
        assert result.converged
        assert result.root == pytest.approx(0.7390851332151607, abs=1e-9)

    def test_piecewise_linear_root(self):
        # Area under a 5 -> 50 step at t=1; one unit of area is reached at 0.2.
        def area(t):
            return 5 * min(t, 1.0) + 50 * max(t - 1.0, 0.0)

        result = find_root(lambda t: area(t) - 1.0, 0, 2)
        assert result.root == pytest.approx(0.2, abs=1e-9)
        result = find_root(lambda t: area(t) - 6.0, 0, 2)
        assert result.root == pytest.approx(1.02, abs=1e-9)

    def test_root_at_endpoint(self):
        result = find_root(lambda x: x, 0, 1)
        assert result.converged
        assert result.root == 0

    def test_same_sign_raises(self):
        with pytest.raises(ValueError, match="opposite signs"):
            find_root(lambda x: x**2 + 1, -1, 1)

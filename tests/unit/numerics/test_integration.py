"""Unit tests for adaptive Simpson integration."""

import math

import pytest

from elasticsim.numerics.integration import integrate_adaptive_simpson


class TestIntegrateAdaptiveSimpson:
    def test_constant(self):
        assert integrate_adaptive_simpson(lambda x: 5.0, 0, 10) == pytest.approx(50.0)

    def test_linear(self):
        assert integrate_adaptive_simpson(lambda x: x, 0, 4) == pytest.approx(8.0)

    def test_sine_over_period(self):
        result = integrate_adaptive_simpson(math.sin, 0, 2 * math.pi)
        assert abs(result) < 1e-8

    def test_exponential(self):
        result = integrate_adaptive_simpson(math.exp, 0, 1)
        assert result == pytest.approx(math.e - 1, abs=1e-8)

    def test_reversed_bounds_negate(self):
        forward = integrate_adaptive_simpson(lambda x: x * x, 0, 3)
        backward = integrate_adaptive_simpson(lambda x: x * x, 3, 0)
        assert backward == pytest.approx(-forward)

    def test_empty_interval(self):
        assert integrate_adaptive_simpson(lambda x: 1.0, 2, 2) == 0.0

    def test_step_function_close_to_exact(self):
        result = integrate_adaptive_simpson(lambda x: 5.0 if x < 1.3 else 50.0, 0, 2)
        assert result == pytest.approx(5.0 * 1.3 + 50.0 * 0.7, abs=1e-6)

"""
Tests for flux smoothing and rate estimation.
"""

import pytest

from induction_lab.derivatives import (
    backward_difference_rate,
    flux_rate_central,
    smooth_value,
    two_point_rate,
)


class TestSmoothing:
    """Tests for exponential smoothing."""

    def test_default_alpha(self):
        assert smooth_value(1.0, 0.0) == pytest.approx(0.3)
        assert smooth_value(0.0, 1.0) == pytest.approx(0.7)

    def test_alpha_one_passes_through(self):
        assert smooth_value(4.2, -3.0, alpha=1.0) == 4.2

    def test_fixed_point(self):
        assert smooth_value(2.5, 2.5) == pytest.approx(2.5)

    def test_converges_to_constant_input(self):
        y = 0.0
        for _ in range(100):
            y = smooth_value(1.0, y)
        assert y == pytest.approx(1.0, abs=1e-12)


class TestFluxRate:
    """Tests for the backward difference."""

    def test_fewer_than_two_points_is_zero(self):
        assert backward_difference_rate([], []) == 0.0
        assert backward_difference_rate([1.0], [0.5]) == 0.0

    def test_uses_two_newest_samples(self):
        flux = [100.0, 0.0, 1.0, 3.0]
        times = [0.0, 1.0, 2.0, 2.5]
        assert backward_difference_rate(flux, times) == pytest.approx(4.0)

    def test_negative_rate(self):
        assert backward_difference_rate([2.0, 1.0], [0.0, 0.1]) == pytest.approx(-10.0)

    def test_equal_timestamps_is_zero(self):
        """Paused time gives Δt = 0 and a zero rate."""
        assert backward_difference_rate([0.0, 5.0], [1.0, 1.0]) == 0.0

    def test_tiny_dt_is_zero(self):
        assert backward_difference_rate([0.0, 5.0], [1.0, 1.0 + 1e-10]) == 0.0

    def test_time_going_backwards_is_zero(self):
        assert backward_difference_rate([0.0, 5.0], [1.0, 0.5]) == 0.0

    def test_historical_name_is_same_function(self):
        assert flux_rate_central is backward_difference_rate

    def test_accepts_tuples(self):
        assert backward_difference_rate((0.0, 1.0), (0.0, 0.5)) == pytest.approx(2.0)


class TestTwoPointRate:

    def test_rate(self):
        assert two_point_rate(3.0, 1.0, 0.5) == pytest.approx(4.0)

    def test_zero_dt(self):
        assert two_point_rate(3.0, 1.0, 0.0) == 0.0

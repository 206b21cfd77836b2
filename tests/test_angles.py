"""
Unit tests for circular angle helpers and the heading history ring.

Tests cover:
- Normalization into [0, 360)
- Shortest-arc difference and interpolation across north
- Circular mean and spread
- HeadingHistory ring behaviour
"""

import pytest

from arnav_core.heading import (
    HeadingHistory,
    circular_mean,
    circular_spread,
    clamp01,
    delta_angle,
    lerp_angle,
    normalize_heading,
)


# =============================================================================
# Normalization
# =============================================================================


class TestNormalizeHeading:
    """Tests for normalize_heading."""

    @pytest.mark.parametrize("angle,expected", [
        (0.0, 0.0),
        (359.9, 359.9),
        (360.0, 0.0),
        (720.5, 0.5),
        (-10.0, 350.0),
        (-370.0, 350.0),
    ])
    def test_wraps_into_range(self, angle, expected):
        """Test known wrap-around values."""
        assert normalize_heading(angle) == pytest.approx(expected)

    @pytest.mark.parametrize("angle", [-1e-15, -1e-9, -359.999, 1e6, -1e6, 359.999999])
    def test_result_in_range_and_idempotent(self, angle):
        """Test normalize(h) is in [0, 360) and normalize(normalize(h)) == normalize(h)."""
        once = normalize_heading(angle)
        assert 0.0 <= once < 360.0
        assert normalize_heading(once) == once


# =============================================================================
# Shortest-arc arithmetic
# =============================================================================


class TestDeltaAngle:
    """Tests for shortest signed arc."""

    def test_across_north_clockwise(self):
        """Test 350 -> 10 is +20, not -340."""
        assert delta_angle(350.0, 10.0) == pytest.approx(20.0)

    def test_across_north_counterclockwise(self):
        """Test 10 -> 350 is -20."""
        assert delta_angle(10.0, 350.0) == pytest.approx(-20.0)

    def test_range(self):
        """Test result stays in [-180, 180)."""
        for a in range(0, 360, 15):
            for b in range(0, 360, 15):
                d = delta_angle(a, b)
                assert -180.0 <= d < 180.0

    def test_opposite(self):
        """Test exactly opposite headings give -180."""
        assert delta_angle(0.0, 180.0) == pytest.approx(-180.0)


class TestLerpAngle:
    """Tests for shortest-arc interpolation."""

    def test_midpoint_across_north(self):
        """Test lerp(350, 10, 0.5) is ~0, not 180."""
        result = lerp_angle(350.0, 10.0, 0.5)
        assert abs(delta_angle(0.0, result)) < 1e-9

    def test_endpoints(self):
        """Test t=0 returns a and t=1 returns b."""
        assert lerp_angle(30.0, 60.0, 0.0) == pytest.approx(30.0)
        assert lerp_angle(30.0, 60.0, 1.0) == pytest.approx(60.0)

    def test_t_clamped(self):
        """Test t outside [0, 1] is clamped."""
        assert lerp_angle(30.0, 60.0, 2.0) == pytest.approx(60.0)
        assert lerp_angle(30.0, 60.0, -1.0) == pytest.approx(30.0)

    def test_gyro_compass_blend(self):
        """Test the 70/30 compass/gyro blend used by the estimator."""
        assert lerp_angle(12.0, 10.0, 0.7) == pytest.approx(10.6)


class TestClamp01:
    """Tests for clamp01."""

    def test_clamp(self):
        assert clamp01(-0.5) == 0.0
        assert clamp01(0.3) == 0.3
        assert clamp01(1.5) == 1.0


# =============================================================================
# Circular statistics
# =============================================================================


class TestCircularStatistics:
    """Tests for circular mean and spread."""

    def test_mean_across_north(self):
        """Test mean of 350 and 10 is 0."""
        mean = circular_mean([350.0, 10.0])
        assert abs(delta_angle(0.0, mean)) < 1e-9

    def test_mean_empty(self):
        """Test empty input has no mean."""
        assert circular_mean([]) is None

    def test_mean_cancelling(self):
        """Test exactly opposite headings have no mean."""
        assert circular_mean([0.0, 180.0]) is None

    def test_spread_identical(self):
        """Test identical headings have zero spread."""
        assert circular_spread([42.0] * 5) == pytest.approx(0.0)

    def test_spread_across_north(self):
        """Test spread is computed on shortest arcs around the mean."""
        assert circular_spread([350.0, 10.0]) == pytest.approx(10.0)

    def test_spread_single_value(self):
        """Test a single value has zero spread."""
        assert circular_spread([123.0]) == 0.0


# =============================================================================
# History Ring
# =============================================================================


class TestHeadingHistory:
    """Tests for HeadingHistory ring buffer."""

    def test_ring_overwrites_oldest(self):
        """Test capacity is fixed and oldest entries are evicted."""
        history = HeadingHistory(size=3)
        for h in [10.0, 20.0, 30.0, 40.0]:
            history.push(h)

        assert len(history) == 3
        assert history.values() == [20.0, 30.0, 40.0]

    def test_deviation_from_mean(self):
        """Test deviation is the absolute shortest arc to the mean."""
        history = HeadingHistory(size=10)
        for _ in range(3):
            history.push(90.0)

        assert history.mean() == pytest.approx(90.0)
        assert history.deviation(200.0) == pytest.approx(110.0)
        assert history.deviation(60.0) == pytest.approx(30.0)

    def test_empty_history(self):
        """Test an empty ring has no mean and no deviation."""
        history = HeadingHistory()
        assert history.mean() is None
        assert history.deviation(10.0) is None
        assert history.spread() == 0.0

    def test_clear(self):
        history = HeadingHistory()
        history.push(1.0)
        history.clear()
        assert len(history) == 0

    def test_invalid_size(self):
        """Test zero capacity is rejected."""
        with pytest.raises(ValueError):
            HeadingHistory(size=0)

"""
Unit tests for diagnostic metrics.

Tests cover:
- Counters and drop codes recorded by the heading estimator and projector
- Histogram statistics for sensor quality and re-anchor distance
- Unknown drop codes, reset and the global collector
- Logged summary report
"""

import logging
import threading

import pytest

from arnav_core.geo import GeoProjector, project
from arnav_core.heading import HeadingEstimator
from arnav_core.metrics import MetricsCollector, get_metrics, reset_metrics
from arnav_core.proto import GeoPoint, SensorSample

from conftest import compass_sample, offset_point


# =============================================================================
# Recorded by the Core
# =============================================================================


class TestHeadingMetrics:
    """Tests for what the heading estimator records per tick."""

    def test_ticks_updates_and_quality(self, compass_only_config):
        """Test every tick is counted and quality is recorded per processed tick."""
        estimator = HeadingEstimator(compass_only_config)

        for i in range(4):
            estimator.estimate_heading(compass_sample(0.1 * i, 45.0))

        metrics = get_metrics()
        assert metrics.get_counter('heading_ticks') == 4
        assert metrics.get_counter('heading_updates') == 4
        assert metrics.heading_acceptance() == pytest.approx(1.0)

        stats = metrics.get_histogram_stats('heading_quality')
        assert stats['count'] == 4
        assert stats['min'] == pytest.approx(1.0)

    def test_drop_codes(self, compass_only_config):
        """Test held ticks are counted under no_sensor_data and stale."""
        estimator = HeadingEstimator(compass_only_config)

        estimator.estimate_heading(compass_sample(1.0, 45.0))
        estimator.estimate_heading(SensorSample(timestamp=1.1))
        estimator.estimate_heading(compass_sample(1.1, 45.0))

        metrics = get_metrics()
        assert metrics.get_drop_count('no_sensor_data') == 1
        assert metrics.get_drop_count('stale') == 1
        assert metrics.get_counter('results_dropped') == 2
        assert metrics.heading_acceptance() == pytest.approx(1 / 3)

    def test_no_ticks_no_acceptance(self):
        assert MetricsCollector().heading_acceptance() is None


class TestProjectionMetrics:
    """Tests for what the projector records."""

    def test_reanchor_distance_histogram(self, origin):
        """Test each re-anchor records the distance moved."""
        projector = GeoProjector()
        projector.update_origin(origin)
        projector.update_origin(offset_point(origin, north_m=8.0))
        projector.update_origin(offset_point(origin, north_m=20.0))

        metrics = get_metrics()
        stats = metrics.get_histogram_stats('reanchor_distance_m')
        assert stats['count'] == 2
        assert stats['min'] == pytest.approx(8.0, abs=0.1)
        assert stats['max'] == pytest.approx(12.0, abs=0.1)
        assert metrics.get_counter('origin_reanchors') == 3

    def test_projection_drop_codes(self, origin):
        """Test unavailable and degenerate projections carry their own codes."""
        project(None, origin)
        project(origin, GeoPoint(float('nan'), 0.0))

        metrics = get_metrics()
        assert metrics.drop_counts() == {'origin_unavailable': 1, 'degenerate_projection': 1}


# =============================================================================
# Collector Behaviour
# =============================================================================


class TestMetricsCollector:
    """Tests for the collector itself."""

    def test_standard_counters_start_at_zero(self):
        collector = MetricsCollector()
        assert collector.get_counter('heading_ticks') == 0
        assert collector.get_counter('play_area_violations') == 0
        assert collector.drop_counts() == {}

    def test_unknown_drop_reason(self, caplog):
        """Test an unknown code is logged and still counted."""
        collector = MetricsCollector()

        with caplog.at_level(logging.WARNING, logger='arnav_core.metrics.counters'):
            collector.increment_drop('compass_jammed')

        assert 'compass_jammed' in caplog.text
        assert collector.get_drop_count('compass_jammed') == 1
        assert collector.get_counter('results_dropped') == 1

    def test_histogram_keeps_most_recent(self):
        """Test histograms are bounded to the newest values."""
        collector = MetricsCollector(histogram_size=10)

        for i in range(25):
            collector.record_histogram('heading_innovation_deg', float(i))

        stats = collector.get_histogram_stats('heading_innovation_deg')
        assert stats['count'] == 10
        assert stats['min'] == 15.0
        assert stats['p50'] == pytest.approx(19.5)

    def test_empty_histogram(self):
        assert MetricsCollector().get_histogram_stats('heading_quality') is None

    def test_invalid_histogram_size(self):
        with pytest.raises(ValueError):
            MetricsCollector(histogram_size=0)

    def test_reset(self):
        """Test reset zeroes counters, drops and histograms."""
        collector = MetricsCollector()
        collector.increment('arrivals', 3)
        collector.increment_drop('invalid_fix')
        collector.record_histogram('heading_quality', 0.5)

        collector.reset()

        assert collector.get_counter('arrivals') == 0
        assert collector.get_counter('results_dropped') == 0
        assert collector.drop_counts() == {}
        assert collector.get_histogram_stats('heading_quality') is None

    def test_concurrent_drops(self):
        """Test drops counted from several threads are not lost."""
        collector = MetricsCollector()

        def worker():
            for _ in range(500):
                collector.increment_drop('outlier')

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert collector.get_drop_count('outlier') == 4000
        assert collector.get_counter('results_dropped') == 4000


class TestGlobalCollector:
    """Tests for the process-wide collector."""

    def test_same_instance(self):
        assert get_metrics() is get_metrics()

    def test_reset_metrics_replaces_instance(self):
        before = get_metrics()
        before.increment('heading_ticks')

        reset_metrics()

        assert get_metrics() is not before
        assert get_metrics().get_counter('heading_ticks') == 0


# =============================================================================
# Summary
# =============================================================================


class TestLogSummary:
    """Tests for the logged summary report."""

    def test_summary_lines(self, caplog):
        collector = MetricsCollector()
        collector.increment('heading_ticks', 4)
        collector.increment('heading_updates', 3)
        collector.increment_drop('outlier')
        collector.record_histogram('reanchor_distance_m', 6.5)

        with caplog.at_level(logging.INFO, logger='arnav_core.metrics.counters'):
            collector.log_summary()

        assert 'Heading: 3/4 ticks updated (75.0%)' in caplog.text
        assert 'Dropped 1: outlier=1' in caplog.text
        assert 'reanchor_distance_m: n=1' in caplog.text

    def test_summary_without_activity(self, caplog):
        with caplog.at_level(logging.INFO, logger='arnav_core.metrics.counters'):
            MetricsCollector().log_summary()

        assert '0/0 ticks updated (n/a)' in caplog.text
        assert 'Dropped 0' in caplog.text

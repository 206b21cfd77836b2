"""
Diagnostic counters for the heading and projection core.

Every degraded tick or projection is counted under a reason code, so a
frozen mini-map or hidden markers can be traced back to a cause:
- Heading: ticks, accepted updates, rate limiting, capture, GPS blends
- Projection: projections, origin updates and re-anchors
- Navigation: arrivals, play-area violations
- Histograms: sensor quality, filter innovation, re-anchor distance
"""

import logging
import threading
from collections import defaultdict, deque
from typing import Deque, Dict, Optional

import numpy as np

logger = logging.getLogger(__name__)

# Reason code -> description
DROP_REASONS = {
    'no_sensor_data': 'No compass/gyro source usable this tick',
    'outlier': 'Heading candidate failed outlier rejection',
    'stale': 'Sample timestamp did not advance',
    'origin_unavailable': 'No valid GPS origin to project from',
    'degenerate_projection': 'Invalid or singular coordinate pair',
    'invalid_fix': 'GPS fix failed validity checks',
    'poi_parse_error': 'Malformed POI record, failed to parse',
    'inactive_poi': 'POI has no current or future active date',
    'sample_parse_error': 'Malformed sensor sample, failed to parse',
}

# Reported even when zero
STANDARD_COUNTERS = (
    'heading_ticks',
    'heading_updates',
    'heading_rate_limited',
    'heading_captured',
    'heading_recalibrations',
    'gps_course_blends',
    'origin_updates',
    'origin_reanchors',
    'projections',
    'arrivals',
    'play_area_violations',
    'results_dropped',
)


class MetricsCollector:
    """
    Thread-safe counters, drop reasons and bounded histograms.

    The core runs on one thread, but the collector is process-wide and may
    be read from a diagnostics thread while ticks are running.

    Usage:
        metrics = MetricsCollector()
        metrics.increment('heading_ticks')
        metrics.increment_drop('outlier')
        metrics.record_histogram('heading_quality', 0.87)
        metrics.log_summary()
    """

    DROP_REASONS = DROP_REASONS

    def __init__(self, histogram_size: int = 5000):
        if histogram_size < 1:
            raise ValueError("histogram_size must be at least 1")
        self.histogram_size = histogram_size
        self._lock = threading.Lock()
        self._clear()

    def _clear(self):
        self._counters: Dict[str, int] = dict.fromkeys(STANDARD_COUNTERS, 0)
        self._drops: Dict[str, int] = dict.fromkeys(DROP_REASONS, 0)
        self._histograms: Dict[str, Deque[float]] = defaultdict(
            lambda: deque(maxlen=self.histogram_size))

    def increment(self, counter_name: str, value: int = 1):
        with self._lock:
            self._counters[counter_name] = self._counters.get(counter_name, 0) + value

    def increment_drop(self, reason: str, value: int = 1):
        """
        Count a dropped result.

        Unknown reason codes are logged but still counted, both under the
        reason and under results_dropped.
        """
        if reason not in DROP_REASONS:
            logger.warning(f"Unknown drop reason '{reason}'")

        with self._lock:
            self._drops[reason] = self._drops.get(reason, 0) + value
            self._counters['results_dropped'] += value

    def get_counter(self, counter_name: str) -> int:
        with self._lock:
            return self._counters.get(counter_name, 0)

    def get_drop_count(self, reason: str) -> int:
        with self._lock:
            return self._drops.get(reason, 0)

    def drop_counts(self) -> Dict[str, int]:
        """Non-zero drop counts by reason."""
        with self._lock:
            return {reason: count for reason, count in self._drops.items() if count}

    def record_histogram(self, histogram_name: str, value: float):
        """Record a value; only the most recent histogram_size values are kept."""
        with self._lock:
            self._histograms[histogram_name].append(float(value))

    def get_histogram_stats(self, histogram_name: str) -> Optional[Dict[str, float]]:
        """
        Summary statistics of a histogram.

        Returns:
            Dict with count, mean, min, p50, p90, max; None if nothing
            has been recorded
        """
        with self._lock:
            samples = self._histograms.get(histogram_name)
            if not samples:
                return None
            values = np.array(samples, dtype=float)

        p50, p90 = np.percentile(values, [50, 90])
        return {
            'count': int(values.size),
            'mean': float(values.mean()),
            'min': float(values.min()),
            'p50': float(p50),
            'p90': float(p90),
            'max': float(values.max()),
        }

    def heading_acceptance(self) -> Optional[float]:
        """Fraction of heading ticks that updated the heading, None before the first tick."""
        with self._lock:
            ticks = self._counters['heading_ticks']
            updates = self._counters['heading_updates']
        if ticks == 0:
            return None
        return updates / ticks

    def reset(self):
        """Zero all counters and clear the histograms."""
        with self._lock:
            self._clear()

    def log_summary(self, level: int = logging.INFO):
        """Log a per-area report of the counters, drops and histograms."""
        with self._lock:
            c = dict(self._counters)
            histogram_names = sorted(name for name, samples in self._histograms.items() if samples)

        acceptance = self.heading_acceptance()
        accepted = f"{acceptance:.1%}" if acceptance is not None else "n/a"
        logger.log(level, f"Heading: {c['heading_updates']}/{c['heading_ticks']} ticks updated "
                          f"({accepted}), {c['heading_rate_limited']} rate-limited, "
                          f"{c['gps_course_blends']} GPS blends, {c['heading_captured']} captures, "
                          f"{c['heading_recalibrations']} recalibrations")
        logger.log(level, f"Projection: {c['projections']} points projected, "
                          f"{c['origin_updates']} origin updates, {c['origin_reanchors']} re-anchors")
        logger.log(level, f"Navigation: {c['arrivals']} arrivals, "
                          f"{c['play_area_violations']} play-area violations")

        drops = self.drop_counts()
        if drops:
            listed = ", ".join(f"{reason}={count}" for reason, count in sorted(drops.items()))
            logger.log(level, f"Dropped {c['results_dropped']}: {listed}")
        else:
            logger.log(level, "Dropped 0")

        for name in histogram_names:
            stats = self.get_histogram_stats(name)
            logger.log(level, f"{name}: n={stats['count']} mean={stats['mean']:.3f} "
                              f"p50={stats['p50']:.3f} p90={stats['p90']:.3f} max={stats['max']:.3f}")

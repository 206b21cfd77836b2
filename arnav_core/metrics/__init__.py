"""
Metrics Module: Diagnostics, counters, histograms.

Every degraded tick or projection is counted with a reason code so that
"the map stopped rotating" can be traced back to a cause:
- Counters: heading_ticks, heading_updates, origin_reanchors, ...
- Drop reasons: no_sensor_data, outlier, origin_unavailable, ...
- Histograms: heading_innovation_deg, heading_quality, reanchor_distance_m

Usage:
    from arnav_core.metrics import get_metrics

    metrics = get_metrics()
    metrics.increment('heading_ticks')
    metrics.increment_drop('outlier')
    metrics.record_histogram('heading_quality', 0.93)
"""

from .counters import MetricsCollector

# Global singleton for easy access
_global_metrics = None


def get_metrics() -> MetricsCollector:
    """
    Get the global metrics collector singleton.

    Returns:
        MetricsCollector instance
    """
    global _global_metrics
    if _global_metrics is None:
        _global_metrics = MetricsCollector()
    return _global_metrics


def reset_metrics():
    """Reset global metrics (for testing)."""
    global _global_metrics
    _global_metrics = MetricsCollector()


__all__ = ['MetricsCollector', 'get_metrics', 'reset_metrics']

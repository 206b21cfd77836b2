"""
Circular angle helpers.

All heading arithmetic goes through these functions. Headings are in
degrees, 0 = true north, increasing clockwise. Never subtract or average
headings directly: 359 and 1 are 2 degrees apart, not 358.
"""

from typing import Iterable, Optional

import numpy as np


def clamp01(value: float) -> float:
    """Clamp value into [0, 1]."""
    return min(1.0, max(0.0, value))


def normalize_heading(angle: float) -> float:
    """
    Wrap an angle into [0, 360).

    Idempotent for values already in range.
    """
    result = angle % 360.0
    # -1e-15 % 360.0 == 360.0 in floating point
    if result >= 360.0:
        result = 0.0
    return result


def delta_angle(current: float, target: float) -> float:
    """
    Shortest signed arc from current to target.

    Returns:
        Angle in degrees in [-180, 180); positive means clockwise
    """
    delta = (target - current) % 360.0
    if delta >= 180.0:
        delta -= 360.0
    return delta


def lerp_angle(a: float, b: float, t: float) -> float:
    """
    Interpolate from a to b along the shortest arc.

    lerp_angle(350, 10, 0.5) == 0, not 180.

    Args:
        a: Start angle (deg)
        b: End angle (deg)
        t: Interpolation factor, clamped to [0, 1]

    Returns:
        Interpolated angle normalised to [0, 360)
    """
    t = clamp01(t)
    return normalize_heading(a + delta_angle(a, b) * t)


def circular_mean(angles: Iterable[float]) -> Optional[float]:
    """
    Mean direction of a set of headings.

    Returns:
        Mean heading in [0, 360), or None for an empty set or when the
        resultant vector vanishes (e.g. exactly opposite headings)
    """
    radians = np.radians(np.asarray(list(angles), dtype=float))
    if radians.size == 0:
        return None

    sin_sum = np.sin(radians).sum()
    cos_sum = np.cos(radians).sum()
    if np.hypot(sin_sum, cos_sum) < 1e-9:
        return None

    return normalize_heading(float(np.degrees(np.arctan2(sin_sum, cos_sum))))


def circular_spread(angles: Iterable[float]) -> float:
    """
    Standard deviation of headings about their circular mean (deg).

    Deviations are taken as shortest arcs to the mean, so a set
    clustered around north has a small spread.
    """
    values = list(angles)
    if len(values) < 2:
        return 0.0

    mean = circular_mean(values)
    if mean is None:
        return 180.0

    deviations = np.array([delta_angle(mean, v) for v in values])
    return float(np.sqrt(np.mean(deviations ** 2)))

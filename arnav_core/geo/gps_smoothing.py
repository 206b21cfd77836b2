"""
GPS position smoothing.

Moving average over the last N valid fixes. Fed to the origin
re-anchoring policy and to the navigation checks so single noisy fixes do
not trigger re-anchoring or arrival.
"""

import logging
from collections import deque
from typing import Optional

import numpy as np

from arnav_core.proto import GeoPoint
from arnav_core.metrics import get_metrics

logger = logging.getLogger(__name__)


class GPSSmoother:
    """
    Moving-average GPS filter.

    Usage:
        smoother = GPSSmoother(window=10)
        smoothed = smoother.update(sample.gps_fix)
        if smoothed is not None:
            projector.update_origin(smoothed)
    """

    def __init__(self, window: int = 10):
        if window < 1:
            raise ValueError("window must be at least 1")
        self.window = window
        self.metrics = get_metrics()
        self._fixes = deque(maxlen=window)

    def __len__(self) -> int:
        return len(self._fixes)

    def update(self, fix: Optional[GeoPoint]) -> Optional[GeoPoint]:
        """
        Add a fix and return the smoothed position.

        Invalid fixes are skipped (counted as invalid_fix); missing fixes
        are ignored.

        Returns:
            Smoothed position, None until a valid fix has been seen
        """
        if fix is not None:
            if fix.is_valid:
                self._fixes.append((fix.lat, fix.lng))
            else:
                self.metrics.increment_drop('invalid_fix')
                logger.warning(f"Skipping invalid GPS fix ({fix.lat}, {fix.lng})")
        return self.current()

    def current(self) -> Optional[GeoPoint]:
        """Smoothed position without adding a fix."""
        if not self._fixes:
            return None
        lat, lng = np.mean(np.array(self._fixes), axis=0)
        return GeoPoint(float(lat), float(lng))

    def reset(self):
        self._fixes.clear()

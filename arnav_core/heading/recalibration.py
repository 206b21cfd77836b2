"""
Periodic sensor recalibration timer.

Long runs accumulate compass/gyro drift; the orchestrator asks this timer
each tick whether HeadingEstimator.recalibrate_sensors() is due.
"""

from typing import Optional


class RecalibrationTimer:
    """
    Fires every interval_s seconds of sample time.

    An interval of 0 disables the timer.
    """

    def __init__(self, interval_s: float = 300.0):
        if interval_s < 0:
            raise ValueError("interval_s must be non-negative")
        self.interval_s = interval_s
        self._last_time: Optional[float] = None

    @property
    def enabled(self) -> bool:
        return self.interval_s > 0

    def is_due(self, t: float) -> bool:
        """
        Check whether recalibration is due at time t.

        The first call only starts the timer. When due, the timer restarts
        from t.
        """
        if not self.enabled:
            return False

        if self._last_time is None or t < self._last_time:
            self._last_time = t
            return False

        if t - self._last_time >= self.interval_s:
            self._last_time = t
            return True

        return False

    def reset(self):
        self._last_time = None

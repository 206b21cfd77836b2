"""
Fixed-size ring of accepted heading candidates.

Feeds both sensor-quality scoring (spread) and outlier rejection (mean).
"""

from collections import deque
from typing import List, Optional

from .angles import circular_mean, circular_spread, delta_angle


class HeadingHistory:
    """
    Ring buffer of the last N accepted headings (oldest overwritten).

    Usage:
        history = HeadingHistory(size=10)
        history.push(candidate)

        if history.deviation(candidate) > 60.0:
            # reject
            ...
    """

    def __init__(self, size: int = 10):
        if size < 1:
            raise ValueError("History size must be at least 1")
        self._buffer = deque(maxlen=size)

    def __len__(self) -> int:
        return len(self._buffer)

    @property
    def size(self) -> int:
        """Capacity of the ring."""
        return self._buffer.maxlen

    def push(self, heading: float):
        """Append an accepted heading, evicting the oldest when full."""
        self._buffer.append(heading)

    def clear(self):
        self._buffer.clear()

    def values(self) -> List[float]:
        """Contents, oldest first."""
        return list(self._buffer)

    def mean(self) -> Optional[float]:
        """Circular mean of the ring, None if empty."""
        return circular_mean(self._buffer)

    def spread(self) -> float:
        """Circular standard deviation (deg); 0 with fewer than two entries."""
        return circular_spread(self._buffer)

    def deviation(self, heading: float) -> Optional[float]:
        """
        Absolute shortest-arc distance of heading from the ring mean.

        Returns:
            Deviation in degrees, None if the ring has no usable mean
        """
        mean = self.mean()
        if mean is None:
            return None
        return abs(delta_angle(mean, heading))

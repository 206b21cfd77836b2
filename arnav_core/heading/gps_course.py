"""
GPS course tracker.

Derives a course-over-ground heading from the displacement between GPS
fixes. The anchor fix only advances once enough time has passed, so
successive per-frame fixes (which barely move) do not keep resetting the
baseline.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from arnav_core.proto import GeoPoint
from arnav_core.geo.geodesy import equirectangular_offset
from .angles import normalize_heading

logger = logging.getLogger(__name__)


@dataclass
class GPSCourse:
    """
    Course derived from two fixes.

    Attributes:
        course: Course over ground (deg, [0, 360))
        speed_m_s: Ground speed (reported if available, otherwise derived)
        distance_m: Displacement between the two fixes (m)
        dt_s: Time between the two fixes (s)
    """

    course: float
    speed_m_s: float
    distance_m: float
    dt_s: float


class GPSCourseTracker:
    """
    Course-over-ground from consecutive fixes at least min_interval_s apart.

    Usage:
        tracker = GPSCourseTracker(min_interval_s=0.5)
        course = tracker.update(sample.gps_fix, sample.timestamp, sample.gps_speed)
        if course and course.speed_m_s > 0.5:
            ...
    """

    def __init__(self, min_interval_s: float = 0.5):
        self.min_interval_s = min_interval_s

        self._anchor_fix: Optional[GeoPoint] = None
        self._anchor_time: Optional[float] = None
        self._last_course: Optional[GPSCourse] = None

    @property
    def last_course(self) -> Optional[GPSCourse]:
        """Most recently derived course, None if none yet."""
        return self._last_course

    def reset(self):
        """Forget the anchor fix and the last course."""
        self._anchor_fix = None
        self._anchor_time = None
        self._last_course = None

    def update(
        self,
        fix: Optional[GeoPoint],
        timestamp: float,
        reported_speed: Optional[float] = None
    ) -> Optional[GPSCourse]:
        """
        Offer a fix and get the current course.

        Args:
            fix: GPS fix; a missing or invalid fix drops the current course
            timestamp: Fix time (s)
            reported_speed: Speed reported by the platform (m/s), if any

        Returns:
            Course for this interval, the previous course while the interval
            has not elapsed yet, or None if no course can be derived
        """
        if fix is None or not fix.is_valid or not math.isfinite(timestamp):
            # No location: the last course is out of date, keep only the anchor
            self._last_course = None
            return None

        if self._anchor_fix is None:
            self._anchor_fix = fix
            self._anchor_time = timestamp
            return None

        dt = timestamp - self._anchor_time
        if dt < 0:
            # Clock went backwards: restart from this fix
            logger.debug(f"GPS course anchor reset, dt={dt:.3f}s")
            self._anchor_fix = fix
            self._anchor_time = timestamp
            self._last_course = None
            return None

        if dt < self.min_interval_s:
            return self._last_course

        east, north = equirectangular_offset(self._anchor_fix, fix)
        distance = math.hypot(east, north)

        self._anchor_fix = fix
        self._anchor_time = timestamp

        if distance == 0.0:
            # Standing still: no direction information
            self._last_course = None
            return None

        speed = reported_speed if reported_speed is not None else distance / dt
        course = normalize_heading(math.degrees(math.atan2(east, north)))

        self._last_course = GPSCourse(
            course=course,
            speed_m_s=speed,
            distance_m=distance,
            dt_s=dt,
        )
        return self._last_course

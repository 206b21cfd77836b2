"""
Sensor Sample Input Schema.

One sample per frame tick, produced by the host's update loop and consumed
once by the HeadingEstimator (and, for the GPS fix, by the GeoProjector).

Non-finite sensor values are treated as missing rather than rejected: the
host must never be crashed by a bad reading.
"""

from dataclasses import dataclass
from typing import Optional
import math

from .geo_point import GeoPoint


def _finite_or_none(value) -> Optional[float]:
    """Return value as float if it is a finite number, else None."""
    if value is None:
        return None
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


@dataclass
class SensorSample:
    """
    Raw sensor readings for a single tick.

    Attributes:
        timestamp: Sample time in seconds (host monotonic clock)
        compass_heading: True heading from the compass (deg, 0-360), None if unavailable
        compass_accuracy: Reported compass accuracy (deg, lower is better)
        gyro_yaw: Yaw derived from gyroscope attitude (deg), None if no gyro data
        gps_fix: Latest GPS fix, None if location services are not running
        gps_speed: Ground speed (m/s), None if not reported
    """

    timestamp: float
    compass_heading: Optional[float] = None
    compass_accuracy: Optional[float] = None
    gyro_yaw: Optional[float] = None
    gps_fix: Optional[GeoPoint] = None
    gps_speed: Optional[float] = None

    def __post_init__(self):
        """Normalize non-finite readings to None."""
        self.compass_heading = _finite_or_none(self.compass_heading)
        self.compass_accuracy = _finite_or_none(self.compass_accuracy)
        self.gyro_yaw = _finite_or_none(self.gyro_yaw)
        self.gps_speed = _finite_or_none(self.gps_speed)

        timestamp = _finite_or_none(self.timestamp)
        self.timestamp = timestamp if timestamp is not None else math.nan

    @property
    def has_valid_timestamp(self) -> bool:
        """True if the timestamp is a finite number."""
        return math.isfinite(self.timestamp)

    @property
    def has_valid_compass(self) -> bool:
        """True if the compass produced a heading in [0, 360]."""
        return (self.compass_heading is not None and
                0.0 <= self.compass_heading <= 360.0)

    @property
    def has_gyro(self) -> bool:
        """True if a gyroscope yaw is available."""
        return self.gyro_yaw is not None

    @property
    def has_valid_gps_fix(self) -> bool:
        """True if a GPS fix is present and its coordinates are valid."""
        return self.gps_fix is not None and self.gps_fix.is_valid

    def compass_within_accuracy(self, limit_deg: float) -> bool:
        """
        Check compass accuracy against a bound.

        A missing accuracy value is treated as acceptable (not every
        platform reports one).
        """
        if self.compass_accuracy is None:
            return True
        return 0.0 <= self.compass_accuracy <= limit_deg

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'timestamp': self.timestamp,
            'compass_heading': self.compass_heading,
            'compass_accuracy': self.compass_accuracy,
            'gyro_yaw': self.gyro_yaw,
            'gps_fix': self.gps_fix.to_dict() if self.gps_fix else None,
            'gps_speed': self.gps_speed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'SensorSample':
        """
        Build a sample from a recorded JSON object.

        Raises:
            ValueError: if timestamp is missing or the GPS fix is malformed
        """
        if 'timestamp' not in data:
            raise ValueError("Sensor sample missing 'timestamp'")

        fix = data.get('gps_fix')
        gps_fix = GeoPoint.from_dict(fix) if fix is not None else None

        return cls(
            timestamp=data['timestamp'],
            compass_heading=data.get('compass_heading'),
            compass_accuracy=data.get('compass_accuracy'),
            gyro_yaw=data.get('gyro_yaw'),
            gps_fix=gps_fix,
            gps_speed=data.get('gps_speed'),
        )

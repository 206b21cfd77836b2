"""
Heading Estimate Output Schema.

Defines the per-tick output of the HeadingEstimator, consumed by the host
to rotate the mini-map.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum


class HeadingStatus(IntEnum):
    """Outcome of a single estimator tick."""

    OK = 0                  # Heading updated from at least one source
    NO_SENSOR_DATA = 1      # No compass/gyro source usable, last value held
    OUTLIER_REJECTED = 2    # Candidate discarded, last value held


class CalibrationState(Enum):
    """Initial-heading capture state."""

    UNINITIALIZED = 'uninitialized'   # No valid sample seen yet
    WARMING = 'warming'               # Waiting for warmup time and sensor quality
    CAPTURED = 'captured'             # Reference offset recorded


@dataclass
class HeadingEstimate:
    """
    Heading reported to the host for one tick.

    Attributes:
        heading: Reported heading (deg, [0, 360)); capture offset removed once captured
        is_stale: True if this tick did not update the heading
        quality: Sensor quality score (0-1, higher is better)
        status: Why the heading was or was not updated
        fused_heading: Fused heading before the capture offset (deg, [0, 360))
        calibration_state: Current initial-heading capture state
        timestamp: Timestamp of the sample that produced this estimate

    Notes:
        - heading is always populated (holds the last good value when stale)
        - Before the first accepted sample heading is 0.0 and is_stale is True
    """

    heading: float
    is_stale: bool
    quality: float
    status: HeadingStatus
    fused_heading: float
    calibration_state: CalibrationState
    timestamp: float

    def __post_init__(self):
        """Validate heading estimate."""
        if not 0.0 <= self.quality <= 1.0:
            raise ValueError(f"Quality must be in [0,1]: {self.quality}")

    @property
    def is_captured(self) -> bool:
        """True if the reported heading is relative to the captured reference."""
        return self.calibration_state == CalibrationState.CAPTURED

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'heading': self.heading,
            'is_stale': self.is_stale,
            'quality': self.quality,
            'status': self.status.name,
            'fused_heading': self.fused_heading,
            'calibration_state': self.calibration_state.value,
            'timestamp': self.timestamp,
        }

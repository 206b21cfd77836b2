"""
Heading Module: compass/gyro/GPS-course fusion.

Key classes:
- HeadingEstimator: per-tick fusion, outlier rejection, filtering, capture
- HeadingKalmanFilter: 1-D circular Kalman filter
- HeadingHistory: ring of recently accepted candidates
- GPSCourseTracker: course over ground from consecutive fixes
- RecalibrationTimer: periodic drift reset scheduling
"""

from .angles import (
    clamp01,
    normalize_heading,
    delta_angle,
    lerp_angle,
    circular_mean,
    circular_spread,
)
from .heading_history import HeadingHistory
from .heading_kalman import (
    HeadingKalmanFilter,
    HeadingKalmanConfig,
)
from .gps_course import (
    GPSCourse,
    GPSCourseTracker,
)
from .heading_estimator import (
    HeadingEstimator,
    HeadingEstimatorConfig,
    HeadingState,
    create_default_estimator,
)
from .recalibration import RecalibrationTimer

__all__ = [
    # Angle helpers
    'clamp01',
    'normalize_heading',
    'delta_angle',
    'lerp_angle',
    'circular_mean',
    'circular_spread',
    # Fusion building blocks
    'HeadingHistory',
    'HeadingKalmanFilter',
    'HeadingKalmanConfig',
    'GPSCourse',
    'GPSCourseTracker',
    # Estimator
    'HeadingEstimator',
    'HeadingEstimatorConfig',
    'HeadingState',
    'create_default_estimator',
    'RecalibrationTimer',
]

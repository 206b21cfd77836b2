"""
Heading Estimator (compass + gyro + GPS course fusion).

Produces one stable heading per tick for rotating the mini-map:

1. Sensor quality score in [0, 1]
2. Raw candidate: shortest-arc blend of gyro and compass (gyro fallback optional)
3. GPS course blend when moving fast enough and quality is high
4. Outlier rejection against the circular mean of recent accepted candidates
5. 1-D circular Kalman filter
6. Rate limiting (max deg/s times tick interval)
7. History update
8. Initial heading capture (UNINITIALIZED -> WARMING -> CAPTURED)
9. Reported heading = fused - capture offset once captured

Nothing here raises at runtime: a tick without a usable source, or with a
rejected candidate, holds the previous heading and flags it stale.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from arnav_core.proto import (
    CalibrationState,
    HeadingEstimate,
    HeadingStatus,
    SensorSample,
)
from arnav_core.metrics import get_metrics
from .angles import clamp01, delta_angle, lerp_angle, normalize_heading
from .gps_course import GPSCourseTracker
from .heading_history import HeadingHistory
from .heading_kalman import HeadingKalmanConfig, HeadingKalmanFilter

logger = logging.getLogger(__name__)


@dataclass
class HeadingEstimatorConfig:
    """
    Configuration for heading fusion.

    Attributes:
        use_compass: Use the compass as a heading source
        compass_accuracy_limit_deg: Compass readings less accurate than this are ignored
        use_gyro_fusion: Blend the gyro yaw into the compass heading
        gyro_fusion_weight: Weight of the gyro in the blend (0-1)
        use_gyro_fallback: Use the gyro alone when the compass is unusable
        use_gps_course: Blend in GPS course over ground when moving
        min_gps_speed_m_s: Minimum speed for GPS course blending (m/s)
        min_gps_course_interval_s: Minimum time between fixes for a course (s)
        sensor_quality_threshold: Minimum quality for GPS course blending
        max_gps_blend_weight: Upper bound of the GPS course blend weight
        history_size: Number of accepted candidates kept for quality/outlier checks
        outlier_threshold_deg: Maximum deviation from the history mean (deg)
        min_history_for_outlier: History entries needed before rejecting outliers
        max_consecutive_rejections: Rejections in a row that clear the history
        use_advanced_filtering: Apply the Kalman filter (else use candidates directly)
        process_noise: Kalman process noise Q
        measurement_noise: Kalman measurement noise R
        initial_error: Kalman initial error variance
        max_rate_deg_s: Maximum heading change rate (deg/s)
        use_initial_heading_capture: Record a reference heading after warm-up
        warmup_s: Minimum time between first sample and capture (s)
        capture_quality_threshold: Minimum quality to capture
        compass_recalibration_pause_s: Compass input pause on sensor recalibration (s)
    """

    use_compass: bool = True
    compass_accuracy_limit_deg: float = 20.0
    use_gyro_fusion: bool = True
    gyro_fusion_weight: float = 0.3
    use_gyro_fallback: bool = False

    use_gps_course: bool = True
    min_gps_speed_m_s: float = 0.5
    min_gps_course_interval_s: float = 0.5
    sensor_quality_threshold: float = 0.7
    max_gps_blend_weight: float = 0.3

    history_size: int = 10
    outlier_threshold_deg: float = 60.0
    min_history_for_outlier: int = 3
    max_consecutive_rejections: int = 5

    use_advanced_filtering: bool = True
    process_noise: float = 0.1
    measurement_noise: float = 1.0
    initial_error: float = 1.0

    max_rate_deg_s: float = 90.0

    use_initial_heading_capture: bool = True
    warmup_s: float = 2.0
    capture_quality_threshold: float = 0.8

    compass_recalibration_pause_s: float = 0.1

    def __post_init__(self):
        """Validate configuration."""
        for name in ('gyro_fusion_weight', 'max_gps_blend_weight', 'capture_quality_threshold'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1]: {value}")

        if not 0.0 <= self.sensor_quality_threshold < 1.0:
            raise ValueError("sensor_quality_threshold must be in [0, 1)")
        if self.compass_accuracy_limit_deg <= 0:
            raise ValueError("compass_accuracy_limit_deg must be positive")
        if self.history_size < 1:
            raise ValueError("history_size must be at least 1")
        if self.min_history_for_outlier < 1:
            raise ValueError("min_history_for_outlier must be at least 1")
        if self.max_consecutive_rejections < 1:
            raise ValueError("max_consecutive_rejections must be at least 1")
        if not 0.0 < self.outlier_threshold_deg <= 180.0:
            raise ValueError("outlier_threshold_deg must be in (0, 180]")
        if self.max_rate_deg_s <= 0:
            raise ValueError("max_rate_deg_s must be positive")
        if self.min_gps_speed_m_s < 0 or self.min_gps_course_interval_s < 0:
            raise ValueError("GPS course thresholds must be non-negative")
        if self.warmup_s < 0 or self.compass_recalibration_pause_s < 0:
            raise ValueError("Durations must be non-negative")

        # Raises on invalid noise values
        self.kalman_config()

    def kalman_config(self) -> HeadingKalmanConfig:
        """Filter configuration derived from this config."""
        return HeadingKalmanConfig(
            process_noise=self.process_noise,
            measurement_noise=self.measurement_noise,
            initial_error=self.initial_error,
        )


@dataclass(frozen=True)
class HeadingState:
    """
    Read-only snapshot of estimator internals (diagnostics and tests).

    Attributes:
        fused_heading: Current fused heading, None before the first accepted sample
        error: Kalman error variance
        history: Accepted candidates, oldest first
        calibration_state: Capture state
        capture_offset: Captured reference heading, None until captured
        last_timestamp: Timestamp of the last processed tick
        consecutive_rejections: Outlier rejections since the last accepted candidate
    """

    fused_heading: Optional[float]
    error: float
    history: Tuple[float, ...]
    calibration_state: CalibrationState
    capture_offset: Optional[float]
    last_timestamp: Optional[float]
    consecutive_rejections: int


class HeadingEstimator:
    """
    Multi-source heading fusion with initial heading capture.

    Usage:
        estimator = HeadingEstimator(config)

        # Once per frame tick
        estimate = estimator.estimate_heading(sample)
        if not estimate.is_stale:
            minimap.rotation = -estimate.heading

        # User asks to re-zero the display
        estimator.request_recalibration()

    State is owned by the estimator; callers only see HeadingEstimate
    values and the read-only HeadingState snapshot.
    """

    def __init__(self, config: Optional[HeadingEstimatorConfig] = None):
        """
        Initialize estimator.

        Args:
            config: Estimator configuration (uses defaults if None)
        """
        self.config = config or HeadingEstimatorConfig()
        self.metrics = get_metrics()

        self._kalman = HeadingKalmanFilter(self.config.kalman_config())
        self._history = HeadingHistory(self.config.history_size)
        self._gps_course = GPSCourseTracker(self.config.min_gps_course_interval_s)

        self._fused: Optional[float] = None
        self._last_timestamp: Optional[float] = None
        self._consecutive_rejections = 0
        self._compass_suspended_until: Optional[float] = None

        self._calibration_state = CalibrationState.UNINITIALIZED
        self._warmup_start: Optional[float] = None
        self._capture_offset: Optional[float] = None

    @property
    def calibration_state(self) -> CalibrationState:
        return self._calibration_state

    @property
    def fused_heading(self) -> Optional[float]:
        """Fused heading before the capture offset, None before the first accepted sample."""
        return self._fused

    def get_state(self) -> HeadingState:
        """Snapshot of the estimator state."""
        return HeadingState(
            fused_heading=self._fused,
            error=self._kalman.error,
            history=tuple(self._history.values()),
            calibration_state=self._calibration_state,
            capture_offset=self._capture_offset,
            last_timestamp=self._last_timestamp,
            consecutive_rejections=self._consecutive_rejections,
        )

    def estimate_heading(self, sample: SensorSample) -> HeadingEstimate:
        """
        Process one sensor sample.

        Args:
            sample: Sensor readings for this tick

        Returns:
            HeadingEstimate; is_stale is True if this tick did not update
            the heading, with status giving the reason
        """
        self.metrics.increment('heading_ticks')

        t = sample.timestamp
        if not sample.has_valid_timestamp or (
                self._last_timestamp is not None and t <= self._last_timestamp):
            self.metrics.increment_drop('stale')
            logger.warning(f"Ignoring sample with non-advancing timestamp {t} "
                           f"(last {self._last_timestamp})")
            return self._held(HeadingStatus.NO_SENSOR_DATA, 0.0, self._last_timestamp)

        dt = t - self._last_timestamp if self._last_timestamp is not None else None
        self._last_timestamp = t

        compass_usable = self._compass_usable(sample, t)
        quality = self._sensor_quality(sample, compass_usable)
        self.metrics.record_histogram('heading_quality', quality)

        # Keep the course baseline moving even on ticks without a heading source
        course = None
        if self.config.use_gps_course:
            course = self._gps_course.update(sample.gps_fix, t, sample.gps_speed)

        candidate = self._raw_candidate(sample, compass_usable)
        if candidate is None:
            self.metrics.increment_drop('no_sensor_data')
            logger.warning(f"No heading source at t={t:.3f}, holding last heading")
            return self._held(HeadingStatus.NO_SENSOR_DATA, quality, t)

        if course is not None:
            speed = sample.gps_speed if sample.gps_speed is not None else course.speed_m_s
            candidate = self._blend_gps_course(candidate, course, speed, quality)

        if self._is_outlier(candidate):
            return self._reject(candidate, quality, t)
        self._consecutive_rejections = 0

        self._apply_candidate(candidate, dt)
        self._history.push(candidate)
        self.metrics.increment('heading_updates')

        self._update_calibration(quality, t)

        return HeadingEstimate(
            heading=self._reported_heading(),
            is_stale=False,
            quality=quality,
            status=HeadingStatus.OK,
            fused_heading=self._fused,
            calibration_state=self._calibration_state,
            timestamp=t,
        )

    # Pure-function alias for the per-frame update
    tick = estimate_heading

    def request_recalibration(self):
        """
        Restart initial heading capture.

        Clears the capture offset and history and resets filter
        uncertainty. The fused heading is kept so the display does not jump;
        the warm-up timer restarts at the next tick.
        """
        self._calibration_state = (CalibrationState.WARMING
                                   if self.config.use_initial_heading_capture
                                   else CalibrationState.UNINITIALIZED)
        self._warmup_start = None
        self._capture_offset = None
        self._history.clear()
        self._consecutive_rejections = 0
        self._kalman.reset_uncertainty()

        self.metrics.increment('heading_recalibrations')
        logger.info("Heading recalibration requested, capture restarted")

    def recalibrate_sensors(self, t: float):
        """
        Periodic drift reset.

        Resets the filter uncertainty around the current fused heading,
        forgets the GPS course baseline and pauses compass input briefly.
        The capture offset is not touched.

        Args:
            t: Current sample time (s)
        """
        self._kalman.reset_uncertainty(self._fused)
        self._gps_course.reset()
        self._compass_suspended_until = t + self.config.compass_recalibration_pause_s

        self.metrics.increment('heading_recalibrations')
        logger.info(f"Sensor recalibration at t={t:.1f}s, compass paused for "
                    f"{self.config.compass_recalibration_pause_s}s")

    def _compass_usable(self, sample: SensorSample, t: float) -> bool:
        if not self.config.use_compass or not sample.has_valid_compass:
            return False
        if not sample.compass_within_accuracy(self.config.compass_accuracy_limit_deg):
            logger.debug(f"Compass accuracy {sample.compass_accuracy} exceeds "
                         f"{self.config.compass_accuracy_limit_deg} deg")
            return False
        if self._compass_suspended_until is not None:
            if t < self._compass_suspended_until:
                return False
            self._compass_suspended_until = None
        return True

    def _sensor_quality(self, sample: SensorSample, compass_usable: bool) -> float:
        """Quality score in [0, 1]; see module docstring step 1."""
        quality = 1.0

        if self.config.use_compass:
            if compass_usable:
                if len(self._history) > 1:
                    quality *= clamp01(1.0 - self._history.spread() / 45.0)
            else:
                quality *= 0.5

        if self.config.use_gyro_fusion and not sample.has_gyro:
            quality *= 0.8

        return clamp01(quality)

    def _raw_candidate(self, sample: SensorSample, compass_usable: bool) -> Optional[float]:
        if compass_usable:
            compass = normalize_heading(sample.compass_heading)
            if self.config.use_gyro_fusion and sample.has_gyro:
                # lerp(gyro, compass, 1 - w): w is the gyro share
                return lerp_angle(sample.gyro_yaw, compass, 1.0 - self.config.gyro_fusion_weight)
            return compass

        if self.config.use_gyro_fallback and sample.has_gyro:
            return normalize_heading(sample.gyro_yaw)

        return None

    def _blend_gps_course(self, candidate: float, course, speed: float, quality: float) -> float:
        threshold = self.config.sensor_quality_threshold
        if speed <= self.config.min_gps_speed_m_s or quality <= threshold:
            return candidate

        weight = clamp01((quality - threshold) / (1.0 - threshold)) * self.config.max_gps_blend_weight
        if weight <= 0.0:
            return candidate

        self.metrics.increment('gps_course_blends')
        logger.debug(f"Blending GPS course {course.course:.1f} deg "
                     f"(speed {speed:.2f} m/s) with weight {weight:.2f}")
        return lerp_angle(candidate, course.course, weight)

    def _is_outlier(self, candidate: float) -> bool:
        if len(self._history) < self.config.min_history_for_outlier:
            return False
        deviation = self._history.deviation(candidate)
        return deviation is not None and deviation > self.config.outlier_threshold_deg

    def _reject(self, candidate: float, quality: float, t: float) -> HeadingEstimate:
        self._consecutive_rejections += 1
        self.metrics.increment_drop('outlier')
        logger.warning(f"Outlier heading {candidate:.1f} deg rejected "
                       f"(history mean {self._history.mean():.1f} deg)")

        if self._consecutive_rejections >= self.config.max_consecutive_rejections:
            # Sustained disagreement is a real turn, not noise
            logger.info(f"{self._consecutive_rejections} consecutive rejections, "
                        f"clearing heading history")
            self._history.clear()
            self._consecutive_rejections = 0

        return self._held(HeadingStatus.OUTLIER_REJECTED, quality, t)

    def _apply_candidate(self, candidate: float, dt: Optional[float]):
        """Filter and rate-limit the accepted candidate into the fused heading."""
        if self._fused is None:
            self._kalman.initialize(candidate)
            self._fused = candidate
            return

        if self.config.use_advanced_filtering:
            target = self._kalman.update(candidate)
        else:
            target = candidate

        step = delta_angle(self._fused, target)
        max_step = self.config.max_rate_deg_s * (dt or 0.0)
        if abs(step) > max_step:
            logger.debug(f"Heading change {step:.1f} deg limited to {max_step:.1f} deg")
            self.metrics.increment('heading_rate_limited')
            step = math.copysign(max_step, step)

        self._fused = normalize_heading(self._fused + step)

    def _update_calibration(self, quality: float, t: float):
        if not self.config.use_initial_heading_capture:
            return

        if self._calibration_state == CalibrationState.UNINITIALIZED:
            self._calibration_state = CalibrationState.WARMING
            self._warmup_start = t
            logger.info(f"Heading warm-up started at t={t:.3f}")
            return

        if self._calibration_state != CalibrationState.WARMING:
            return

        if self._warmup_start is None:
            self._warmup_start = t
            return

        if t - self._warmup_start < self.config.warmup_s:
            return

        if quality < self.config.capture_quality_threshold:
            logger.debug(f"Warm-up elapsed, waiting for quality "
                         f"({quality:.2f} < {self.config.capture_quality_threshold})")
            return

        self._capture_offset = self._fused
        self._calibration_state = CalibrationState.CAPTURED
        self.metrics.increment('heading_captured')
        logger.info(f"Initial heading captured: {self._capture_offset:.1f} deg "
                    f"(quality {quality:.2f})")

    def _reported_heading(self) -> float:
        if self._fused is None:
            return 0.0
        if self._calibration_state == CalibrationState.CAPTURED and self._capture_offset is not None:
            return normalize_heading(self._fused - self._capture_offset)
        return self._fused

    def _held(self, status: HeadingStatus, quality: float,
              t: Optional[float]) -> HeadingEstimate:
        """Estimate carrying the previous heading forward."""
        return HeadingEstimate(
            heading=self._reported_heading(),
            is_stale=True,
            quality=quality,
            status=status,
            fused_heading=self._fused if self._fused is not None else 0.0,
            calibration_state=self._calibration_state,
            timestamp=t if t is not None else math.nan,
        )


def create_default_estimator() -> HeadingEstimator:
    """Create a heading estimator with default configuration."""
    return HeadingEstimator(HeadingEstimatorConfig())

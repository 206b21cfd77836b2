"""
Heading Kalman Filter (1-D, circular).

Scalar Kalman filter over heading. The innovation is the shortest-arc
difference between measurement and estimate, so crossing north does not
produce a 360 degree innovation.

    predict:  P' = P + Q
    gain:     K  = P' / (P' + R)
    update:   x  = x + K * delta_angle(x, z)
              P  = (1 - K) * P'
"""

from dataclasses import dataclass
from typing import Optional

from arnav_core.metrics import get_metrics
from .angles import delta_angle, normalize_heading


@dataclass
class HeadingKalmanConfig:
    """
    Configuration for the heading filter.

    Attributes:
        process_noise: Q, added to the error variance every update
        measurement_noise: R, variance of a heading measurement
        initial_error: Error variance at initialisation and after reset
    """

    process_noise: float = 0.1
    measurement_noise: float = 1.0
    initial_error: float = 1.0

    def __post_init__(self):
        """Validate configuration."""
        if self.process_noise < 0:
            raise ValueError("process_noise must be non-negative")
        if self.measurement_noise <= 0:
            raise ValueError("measurement_noise must be positive")
        if self.initial_error < 0:
            raise ValueError("initial_error must be non-negative")


class HeadingKalmanFilter:
    """
    Scalar circular Kalman filter.

    Usage:
        kf = HeadingKalmanFilter(config)
        kf.initialize(first_heading)
        smoothed = kf.update(measurement)
    """

    def __init__(self, config: Optional[HeadingKalmanConfig] = None):
        self.config = config or HeadingKalmanConfig()
        self.metrics = get_metrics()

        self._estimate: Optional[float] = None
        self._error = self.config.initial_error
        self._last_innovation = 0.0

    def is_initialized(self) -> bool:
        """Check if the filter has been seeded."""
        return self._estimate is not None

    @property
    def estimate(self) -> Optional[float]:
        return self._estimate

    @property
    def error(self) -> float:
        """Current error variance."""
        return self._error

    @property
    def last_innovation(self) -> float:
        """Shortest-arc innovation of the last update (deg)."""
        return self._last_innovation

    def initialize(self, heading: float):
        """Seed the estimate and reset the error variance."""
        self._estimate = normalize_heading(heading)
        self._error = self.config.initial_error
        self._last_innovation = 0.0

    def update(self, measurement: float) -> float:
        """
        Fold a heading measurement into the estimate.

        Seeds the filter if it has not been initialised.

        Returns:
            Filtered heading in [0, 360)
        """
        if not self.is_initialized():
            self.initialize(measurement)
            return self._estimate

        predicted_error = self._error + self.config.process_noise
        gain = predicted_error / (predicted_error + self.config.measurement_noise)

        innovation = delta_angle(self._estimate, measurement)
        self._estimate = normalize_heading(self._estimate + gain * innovation)
        self._error = (1.0 - gain) * predicted_error
        self._last_innovation = innovation

        self.metrics.record_histogram('heading_innovation_deg', abs(innovation))
        return self._estimate

    def reset_uncertainty(self, heading: Optional[float] = None):
        """
        Reset the error variance, optionally re-seeding the estimate.

        With heading None the current estimate is kept.
        """
        if heading is not None:
            self._estimate = normalize_heading(heading)
        self._error = self.config.initial_error

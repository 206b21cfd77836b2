"""
Navigation Monitor: arrival detection and play-area boundary checks.

All distances use the shared haversine implementation, so "arrived",
"nearby" and "outside the play area" agree with each other and with the
origin re-anchoring policy.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from arnav_core.proto import GeoPoint, POIRecord
from arnav_core.geo import haversine_distance, initial_bearing
from arnav_core.metrics import get_metrics

logger = logging.getLogger(__name__)


class PlayAreaStatus(Enum):
    """User position relative to the play area."""

    INSIDE = 'inside'
    NEAR_BOUNDARY = 'near_boundary'   # Inside, within the warning band
    OUTSIDE = 'outside'
    UNKNOWN = 'unknown'               # Limits disabled or no valid fix


@dataclass
class PlayAreaReport:
    """
    Result of a play-area check.

    Attributes:
        status: Position relative to the play area
        distance_from_center_m: Haversine distance to the area centre (inf if unknown)
        distance_to_boundary_m: Radius minus distance from centre (negative outside)
    """

    status: PlayAreaStatus
    distance_from_center_m: float
    distance_to_boundary_m: float

    @property
    def is_allowed(self) -> bool:
        """False only when the user is known to be outside."""
        return self.status != PlayAreaStatus.OUTSIDE


@dataclass
class ArrivalStatus:
    """
    Arrival check for one POI.

    Attributes:
        poi_id: POI identifier
        arrived: True within the arrival distance
        distance_m: Haversine distance to the POI (inf if unknown)
        bearing_deg: Initial bearing to the POI, None if unknown
        newly_arrived: True only on the first check that reports arrival
    """

    poi_id: int
    arrived: bool
    distance_m: float
    bearing_deg: Optional[float]
    newly_arrived: bool = False


@dataclass
class NavigationConfig:
    """
    Configuration for navigation checks.

    Attributes:
        arrival_distance_m: Distance at which a POI counts as reached (m)
        enable_play_area_limits: Check the play-area boundary
        play_area_center: (lat, lng) of the play-area centre
        play_area_radius_m: Play-area radius (m)
        play_area_warning_distance_m: Width of the warning band inside the boundary (m)
        max_poi_display_distance_m: Radius for the nearby-POI filter (m)
    """

    arrival_distance_m: float = 10.0
    enable_play_area_limits: bool = True
    play_area_center: Tuple[float, float] = (8.360118854454575, 124.86808673329348)
    play_area_radius_m: float = 5000.0
    play_area_warning_distance_m: float = 1000.0
    max_poi_display_distance_m: float = 1000.0

    def __post_init__(self):
        """Validate configuration."""
        if self.arrival_distance_m < 0:
            raise ValueError("arrival_distance_m must be non-negative")
        if self.play_area_radius_m <= 0:
            raise ValueError("play_area_radius_m must be positive")
        if not 0 <= self.play_area_warning_distance_m <= self.play_area_radius_m:
            raise ValueError("play_area_warning_distance_m must be in [0, play_area_radius_m]")
        if self.max_poi_display_distance_m < 0:
            raise ValueError("max_poi_display_distance_m must be non-negative")
        if not GeoPoint(*self.play_area_center).is_valid:
            raise ValueError(f"Invalid play_area_center: {self.play_area_center}")

    @property
    def center_point(self) -> GeoPoint:
        return GeoPoint(*self.play_area_center)


class NavigationMonitor:
    """
    Arrival and play-area checks against the user's (smoothed) position.

    Usage:
        monitor = NavigationMonitor(NavigationConfig())

        report = monitor.check_play_area(user_fix)
        if report.status == PlayAreaStatus.OUTSIDE:
            ui.show_warning("Return to the play area")

        status = monitor.check_arrival(user_fix, target_poi)
        if status.newly_arrived:
            ui.show_arrival(target_poi)

    Tracks which POIs have been reached so `arrivals` is counted once per
    POI (until reset_arrivals()).
    """

    def __init__(self, config: Optional[NavigationConfig] = None):
        """
        Initialize navigation monitor.

        Args:
            config: Navigation configuration (uses defaults if None)
        """
        self.config = config or NavigationConfig()
        self.metrics = get_metrics()

        self._arrived: Dict[int, bool] = {}
        self._last_play_area_status = PlayAreaStatus.UNKNOWN

    def check_arrival(self, user: Optional[GeoPoint], poi: POIRecord) -> ArrivalStatus:
        """
        Check whether the user has reached a POI.

        Args:
            user: User position, None if unknown
            poi: Target POI

        Returns:
            ArrivalStatus; never arrived without a valid fix
        """
        if user is None:
            return ArrivalStatus(poi_id=poi.id, arrived=False,
                                 distance_m=math.inf, bearing_deg=None)

        distance = haversine_distance(user.lat, user.lng, poi.lat, poi.lng)
        bearing = initial_bearing(user.lat, user.lng, poi.lat, poi.lng)
        arrived = distance <= self.config.arrival_distance_m

        newly_arrived = arrived and not self._arrived.get(poi.id, False)
        self._arrived[poi.id] = arrived

        if newly_arrived:
            self.metrics.increment('arrivals')
            logger.info(f"Arrived at POI {poi.id} '{poi.label}' ({distance:.1f}m)")

        return ArrivalStatus(
            poi_id=poi.id,
            arrived=arrived,
            distance_m=distance,
            bearing_deg=bearing,
            newly_arrived=newly_arrived,
        )

    def check_play_area(self, user: Optional[GeoPoint]) -> PlayAreaReport:
        """
        Classify the user position against the play-area circle.

        Args:
            user: User position, None if unknown

        Returns:
            PlayAreaReport (UNKNOWN if limits are disabled or the fix is invalid)
        """
        if not self.config.enable_play_area_limits or user is None or not user.is_valid:
            return PlayAreaReport(PlayAreaStatus.UNKNOWN, math.inf, math.inf)

        center = self.config.center_point
        distance = haversine_distance(user.lat, user.lng, center.lat, center.lng)
        to_boundary = self.config.play_area_radius_m - distance

        if distance > self.config.play_area_radius_m:
            status = PlayAreaStatus.OUTSIDE
        elif to_boundary <= self.config.play_area_warning_distance_m:
            status = PlayAreaStatus.NEAR_BOUNDARY
        else:
            status = PlayAreaStatus.INSIDE

        if status != self._last_play_area_status:
            if status == PlayAreaStatus.OUTSIDE:
                self.metrics.increment('play_area_violations')
                logger.warning(f"User left the play area ({distance:.0f}m from centre, "
                               f"radius {self.config.play_area_radius_m:.0f}m)")
            elif status == PlayAreaStatus.NEAR_BOUNDARY:
                logger.warning(f"User near play-area boundary ({to_boundary:.0f}m left)")
            else:
                logger.info("User inside play area")
        self._last_play_area_status = status

        return PlayAreaReport(
            status=status,
            distance_from_center_m=distance,
            distance_to_boundary_m=to_boundary,
        )

    def reset_arrivals(self):
        """Forget which POIs have been reached."""
        self._arrived.clear()


def create_default_navigation_monitor() -> NavigationMonitor:
    """Create a navigation monitor with default configuration."""
    return NavigationMonitor(NavigationConfig())

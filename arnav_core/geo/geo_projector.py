"""
Geo Projector: GPS coordinates to a stable local ENU frame.

Maintains the projection origin and converts POI coordinates into
(east, north, up) offsets in metres for AR placement.

The origin only moves when the user has moved further than a hysteresis
threshold from it (haversine distance), so normal GPS noise (±1-3 m) does
not make markers jitter every tick. Placement is absolute: offsets are
never rotated by device heading.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from arnav_core.proto import (
    GeoPoint,
    POIRecord,
    ProjectedPoint,
    ProjectionStatus,
    create_unavailable,
)
from arnav_core.metrics import get_metrics
from .geodesy import (
    METERS_PER_DEGREE,
    distance_between,
    equirectangular_offset,
    is_degenerate_pair,
)

logger = logging.getLogger(__name__)


@dataclass
class GeoProjectorConfig:
    """
    Configuration for the geo projector.

    Attributes:
        reanchor_threshold_m: Minimum movement before the origin is replaced (m)
        meters_per_degree: Metres per degree of latitude for the local projection
    """

    reanchor_threshold_m: float = 5.0
    meters_per_degree: float = METERS_PER_DEGREE

    def __post_init__(self):
        """Validate configuration."""
        if self.reanchor_threshold_m < 0:
            raise ValueError("reanchor_threshold_m must be non-negative")
        if self.meters_per_degree <= 0:
            raise ValueError("meters_per_degree must be positive")


def project(
    origin: Optional[GeoPoint],
    point: GeoPoint,
    height: float = 0.0,
    meters_per_degree: float = METERS_PER_DEGREE,
) -> ProjectedPoint:
    """
    Project a point into the local frame anchored at origin.

    Args:
        origin: Frame origin (None if no GPS fix yet)
        point: Point to project
        height: Vertical component passed through to `up`
        meters_per_degree: Scale of the local projection

    Returns:
        ProjectedPoint; status ORIGIN_UNAVAILABLE or DEGENERATE on failure
    """
    metrics = get_metrics()

    if origin is None or not origin.is_valid:
        metrics.increment_drop('origin_unavailable')
        return create_unavailable(ProjectionStatus.ORIGIN_UNAVAILABLE)

    if is_degenerate_pair(origin, point):
        metrics.increment_drop('degenerate_projection')
        logger.warning(f"Degenerate projection: origin=({origin.lat}, {origin.lng}), "
                       f"point=({point.lat}, {point.lng})")
        return create_unavailable(ProjectionStatus.DEGENERATE)

    east, north = equirectangular_offset(origin, point, meters_per_degree)
    metrics.increment('projections')

    return ProjectedPoint(east=east, north=north, up=float(height))


class GeoProjector:
    """
    Owns the projection origin and its re-anchoring policy.

    Usage:
        projector = GeoProjector()

        # Every time a (smoothed) GPS fix arrives
        if projector.update_origin(fix):
            # Origin replaced: previously projected positions are invalid
            positions = projector.project_pois(pois)

        offset = projector.project(GeoPoint(lat, lng))
        if not offset.is_available:
            # Hide the marker; never place it at a stale or zero position
            ...

    Invariants:
        - All results are relative to the *current* origin
        - origin_version increments every time the origin is replaced
    """

    def __init__(self, config: Optional[GeoProjectorConfig] = None):
        """
        Initialize projector without an origin.

        Args:
            config: Projector configuration (uses defaults if None)
        """
        self.config = config or GeoProjectorConfig()
        self.metrics = get_metrics()

        self._origin: Optional[GeoPoint] = None
        self._origin_version = 0
        self._last_candidate_distance_m: Optional[float] = None

    @property
    def origin(self) -> Optional[GeoPoint]:
        """Current origin, or None if no valid fix has been seen."""
        return self._origin

    @property
    def has_origin(self) -> bool:
        """True if an origin is available for projection."""
        return self._origin is not None

    @property
    def origin_version(self) -> int:
        """Counter incremented each time the origin is replaced."""
        return self._origin_version

    @property
    def last_candidate_distance_m(self) -> Optional[float]:
        """Distance of the last candidate fix from the origin at the time it was evaluated."""
        return self._last_candidate_distance_m

    def update_origin(self, fix: Optional[GeoPoint]) -> bool:
        """
        Offer a new GPS fix as origin candidate.

        Args:
            fix: Latest (ideally smoothed) GPS fix

        Returns:
            True if the origin was replaced (callers must re-project)
        """
        self.metrics.increment('origin_updates')

        if fix is None or not fix.is_valid:
            self.metrics.increment_drop('invalid_fix')
            logger.debug(f"Ignoring invalid origin candidate: {fix}")
            return False

        if self._origin is None:
            self._replace_origin(fix, None)
            return True

        distance = distance_between(self._origin, fix)
        self._last_candidate_distance_m = distance

        if distance > self.config.reanchor_threshold_m:
            self._replace_origin(fix, distance)
            return True

        logger.debug(f"Origin unchanged - movement {distance:.1f}m <= "
                     f"{self.config.reanchor_threshold_m}m threshold")
        return False

    def set_origin(self, origin: GeoPoint) -> bool:
        """
        Force the origin, bypassing hysteresis.

        Returns:
            True if the origin was set, False if the point is invalid
        """
        if not origin.is_valid:
            self.metrics.increment_drop('invalid_fix')
            logger.warning(f"Refusing invalid origin {origin}")
            return False

        distance = distance_between(self._origin, origin) if self._origin else None
        self._replace_origin(origin, distance)
        return True

    def clear_origin(self):
        """Drop the origin (e.g. location services stopped)."""
        if self._origin is not None:
            logger.info("Origin cleared")
        self._origin = None
        self._last_candidate_distance_m = None

    def project(self, point: GeoPoint, height: float = 0.0) -> ProjectedPoint:
        """
        Project a point relative to the current origin.

        Args:
            point: Point to project
            height: Vertical component passed through to `up`

        Returns:
            ProjectedPoint (ORIGIN_UNAVAILABLE if no origin yet)
        """
        return project(self._origin, point, height, self.config.meters_per_degree)

    def project_poi(self, poi: POIRecord) -> ProjectedPoint:
        """Project a single POI, tagging the result with its id."""
        result = self.project(poi.position, poi.height)
        result.poi_id = poi.id
        return result

    def project_pois(self, pois: Sequence[POIRecord]) -> List[ProjectedPoint]:
        """
        Project a list of POIs relative to the current origin.

        Vectorised over the whole list; degenerate entries are flagged
        individually without affecting the rest.

        Args:
            pois: POI records

        Returns:
            One ProjectedPoint per POI, in input order
        """
        if not pois:
            return []

        if self._origin is None:
            self.metrics.increment_drop('origin_unavailable', len(pois))
            return [create_unavailable(ProjectionStatus.ORIGIN_UNAVAILABLE, poi.id)
                    for poi in pois]

        origin = self._origin
        degenerate = np.array([is_degenerate_pair(origin, poi.position) for poi in pois])

        lats = np.array([poi.lat if not bad else origin.lat
                         for poi, bad in zip(pois, degenerate)], dtype=float)
        lngs = np.array([poi.lng if not bad else origin.lng
                         for poi, bad in zip(pois, degenerate)], dtype=float)

        scale = self.config.meters_per_degree
        east = (lngs - origin.lng) * scale * np.cos(np.radians(origin.lat))
        north = (lats - origin.lat) * scale

        results = []
        for i, poi in enumerate(pois):
            if degenerate[i]:
                results.append(create_unavailable(ProjectionStatus.DEGENERATE, poi.id))
                continue
            results.append(ProjectedPoint(
                east=float(east[i]),
                north=float(north[i]),
                up=float(poi.height),
                poi_id=poi.id,
            ))

        num_degenerate = int(np.count_nonzero(degenerate))
        if num_degenerate:
            self.metrics.increment_drop('degenerate_projection', num_degenerate)
            logger.warning(f"{num_degenerate} of {len(pois)} POIs could not be projected")
        self.metrics.increment('projections', len(pois) - num_degenerate)

        return results

    def _replace_origin(self, origin: GeoPoint, distance: Optional[float]):
        """Install a new origin object and bump the version."""
        self._origin = origin
        self._origin_version += 1
        self.metrics.increment('origin_reanchors')

        if distance is not None:
            self.metrics.record_histogram('reanchor_distance_m', distance)
            logger.info(f"Origin updated to ({origin.lat:.7f}, {origin.lng:.7f}) - "
                        f"moved {distance:.1f}m")
        else:
            logger.info(f"Origin set to ({origin.lat:.7f}, {origin.lng:.7f})")

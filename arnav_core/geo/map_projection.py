"""
Mini-map plane projection (Web Mercator).

Positions are converted to tile pixels at a zoom level:
    scale = 256 * 2^zoom
    x = (lng + 180) / 360 * scale
    y = (1 - ln(tan(pi/4 + lat*pi/360)) / pi) / 2 * scale

then expressed as an offset from the map centre in plane units
(pixels / pixels_per_unit). Offsets are east-positive and north-positive.

Points outside the visible half-extent are flagged not visible instead of
being clamped to the edge.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from arnav_core.proto import (
    GeoPoint,
    MapPixelOffset,
    POIRecord,
    ProjectionStatus,
    create_hidden_offset,
)
from arnav_core.metrics import get_metrics

logger = logging.getLogger(__name__)

MAX_MERCATOR_LAT = 85.05112878


@dataclass
class MapPlaneConfig:
    """
    Configuration for the mini-map plane.

    Attributes:
        tile_size_px: Tile edge length in pixels
        pixels_per_unit: Pixels per plane unit of the display plane
        half_extent: Visible half-extent of the plane (plane units)
        marker_spread: Scale applied to visible marker offsets
        zoom: Default map zoom level
    """

    tile_size_px: int = 256
    pixels_per_unit: float = 256.0
    half_extent: float = 0.5
    marker_spread: float = 1.0
    zoom: int = 17

    def __post_init__(self):
        """Validate configuration."""
        if self.tile_size_px <= 0:
            raise ValueError("tile_size_px must be positive")
        if self.pixels_per_unit <= 0:
            raise ValueError("pixels_per_unit must be positive")
        if self.half_extent <= 0:
            raise ValueError("half_extent must be positive")
        if self.marker_spread <= 0:
            raise ValueError("marker_spread must be positive")
        if self.zoom < 0:
            raise ValueError("zoom must be non-negative")


def _mercator_valid(point: GeoPoint) -> bool:
    return point.is_valid and abs(point.lat) <= MAX_MERCATOR_LAT


def latlng_to_pixel(lat: float, lng: float, zoom: float,
                    tile_size_px: int = 256) -> Tuple[float, float]:
    """
    Web Mercator world pixel coordinates.

    No range checks; latitudes beyond +/-85.05112878 give meaningless y.

    Returns:
        (x, y) in pixels; y grows southward
    """
    scale = tile_size_px * (2 ** zoom)
    x = (lng + 180.0) / 360.0 * scale
    y = (1.0 - math.log(math.tan(math.pi / 4 + lat * math.pi / 360.0)) / math.pi) / 2.0 * scale
    return (x, y)


def is_within_plane(x: float, y: float, half_extent: float = 0.5) -> bool:
    """True if a plane offset lies inside the visible square."""
    return abs(x) <= half_extent and abs(y) <= half_extent


def map_pixel_offset(
    point: GeoPoint,
    center: Optional[GeoPoint],
    zoom: float,
    config: Optional[MapPlaneConfig] = None
) -> MapPixelOffset:
    """
    Offset of point from the map centre in plane units.

    Args:
        point: Point to place on the map
        center: Map centre (user position), None if unknown
        zoom: Map zoom level
        config: Plane configuration (uses defaults if None)

    Returns:
        MapPixelOffset; not visible with a non-OK status if the centre is
        unknown or either point cannot be projected
    """
    config = config or MapPlaneConfig()
    metrics = get_metrics()

    if center is None or not center.is_valid:
        metrics.increment_drop('origin_unavailable')
        return create_hidden_offset(ProjectionStatus.ORIGIN_UNAVAILABLE)

    if not (_mercator_valid(point) and _mercator_valid(center)):
        metrics.increment_drop('degenerate_projection')
        logger.warning(f"Cannot place ({point.lat}, {point.lng}) on the map "
                       f"centred at ({center.lat}, {center.lng})")
        return create_hidden_offset(ProjectionStatus.DEGENERATE)

    px, py = latlng_to_pixel(point.lat, point.lng, zoom, config.tile_size_px)
    cx, cy = latlng_to_pixel(center.lat, center.lng, zoom, config.tile_size_px)

    x = (px - cx) / config.pixels_per_unit
    y = -(py - cy) / config.pixels_per_unit

    return MapPixelOffset(x=x, y=y, visible=is_within_plane(x, y, config.half_extent))


class MapPlaneProjector:
    """
    Places POI markers on the rotating mini-map.

    Usage:
        projector = MapPlaneProjector(MapPlaneConfig(zoom=17))

        for poi, offset in projector.visible_pois(pois, user_fix):
            marker = markers[poi.id]
            marker.local_position = (offset.x, offset.y)
    """

    def __init__(self, config: Optional[MapPlaneConfig] = None):
        """
        Initialize map plane projector.

        Args:
            config: Plane configuration (uses defaults if None)
        """
        self.config = config or MapPlaneConfig()
        self.metrics = get_metrics()
        self.zoom = self.config.zoom

    def offset(self, point: GeoPoint, center: Optional[GeoPoint]) -> MapPixelOffset:
        """Single point offset at the current zoom (no marker spread)."""
        return map_pixel_offset(point, center, self.zoom, self.config)

    def offsets(self, pois: Sequence[POIRecord],
                center: Optional[GeoPoint]) -> List[MapPixelOffset]:
        """
        Offsets for a whole POI list, in input order.

        Visibility is decided on the raw offset; marker_spread is then
        applied to visible markers.
        """
        if not pois:
            return []

        if center is None or not center.is_valid:
            self.metrics.increment_drop('origin_unavailable', len(pois))
            return [create_hidden_offset(ProjectionStatus.ORIGIN_UNAVAILABLE, poi.id)
                    for poi in pois]

        if not _mercator_valid(center):
            self.metrics.increment_drop('degenerate_projection', len(pois))
            logger.warning(f"Map centre ({center.lat}, {center.lng}) outside Mercator range")
            return [create_hidden_offset(ProjectionStatus.DEGENERATE, poi.id)
                    for poi in pois]

        valid = np.array([_mercator_valid(poi.position) for poi in pois])
        lats = np.array([poi.lat if ok else 0.0 for poi, ok in zip(pois, valid)], dtype=float)
        lngs = np.array([poi.lng if ok else 0.0 for poi, ok in zip(pois, valid)], dtype=float)

        scale = self.config.tile_size_px * (2 ** self.zoom)
        px = (lngs + 180.0) / 360.0 * scale
        py = (1.0 - np.log(np.tan(np.pi / 4 + lats * np.pi / 360.0)) / np.pi) / 2.0 * scale
        cx, cy = latlng_to_pixel(center.lat, center.lng, self.zoom, self.config.tile_size_px)

        xs = (px - cx) / self.config.pixels_per_unit
        ys = -(py - cy) / self.config.pixels_per_unit
        half = self.config.half_extent
        visible = (np.abs(xs) <= half) & (np.abs(ys) <= half)

        spread = self.config.marker_spread
        results = []
        for i, poi in enumerate(pois):
            if not valid[i]:
                results.append(create_hidden_offset(ProjectionStatus.DEGENERATE, poi.id))
                continue
            if visible[i]:
                results.append(MapPixelOffset(
                    x=float(xs[i]) * spread,
                    y=float(ys[i]) * spread,
                    visible=True,
                    poi_id=poi.id,
                ))
            else:
                results.append(MapPixelOffset(
                    x=float(xs[i]), y=float(ys[i]), visible=False, poi_id=poi.id))

        num_invalid = int(np.count_nonzero(~valid))
        if num_invalid:
            self.metrics.increment_drop('degenerate_projection', num_invalid)
            logger.warning(f"{num_invalid} of {len(pois)} POIs cannot be placed on the map")

        return results

    def visible_pois(self, pois: Sequence[POIRecord],
                     center: Optional[GeoPoint]) -> List[Tuple[POIRecord, MapPixelOffset]]:
        """POIs whose markers are on the visible part of the plane, with their offsets."""
        return [(poi, offset) for poi, offset in zip(pois, self.offsets(pois, center))
                if offset.visible]

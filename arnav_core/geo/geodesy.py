"""
Geodesy helpers: distance, bearing and the short-range local projection.

haversine_distance() is the single distance implementation for the whole
system (origin re-anchoring, arrival detection, play-area checks, nearby
POI filtering). Do not add another one.

equirectangular_offset() is the flat-earth approximation used for local
placement:
    east  = (lng - lng0) * 111000 * cos(lat0)
    north = (lat - lat0) * 111000
Valid for ranges up to a few km.
"""

import math
from typing import Optional, Tuple

from arnav_core.proto.geo_point import GeoPoint

EARTH_RADIUS_M = 6371000.0      # Mean earth radius (haversine)
METERS_PER_DEGREE = 111000.0    # Metres per degree of latitude (local projection)

# cos(lat0) below this is treated as a pole: east offsets collapse
_MIN_COS_LAT = 1e-12


def _is_valid(lat: float, lng: float) -> bool:
    return GeoPoint(lat, lng).is_valid


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Great-circle distance between two points.

    a = sin²(Δlat/2) + cos(lat1)·cos(lat2)·sin²(Δlng/2)
    d = 2 · R · atan2(√a, √(1−a))

    Args:
        lat1, lng1: First point (degrees)
        lat2, lng2: Second point (degrees)

    Returns:
        Distance in metres. math.inf if any coordinate is invalid, so that
        threshold checks fail safe instead of propagating NaN.
    """
    if not (_is_valid(lat1, lng1) and _is_valid(lat2, lng2)):
        return math.inf

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lng2 - lng1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    a = min(1.0, max(0.0, a))  # rounding can push a slightly outside [0, 1]
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def distance_between(a: GeoPoint, b: GeoPoint) -> float:
    """haversine_distance() for two GeoPoints."""
    return haversine_distance(a.lat, a.lng, b.lat, b.lng)


def initial_bearing(lat1: float, lng1: float, lat2: float, lng2: float) -> Optional[float]:
    """
    Initial great-circle bearing from point 1 to point 2.

    Returns:
        Bearing in degrees [0, 360), 0 = north, clockwise.
        None if a coordinate is invalid or the points coincide.
    """
    if not (_is_valid(lat1, lng1) and _is_valid(lat2, lng2)):
        return None
    if lat1 == lat2 and lng1 == lng2:
        return None

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dlmb = math.radians(lng2 - lng1)

    x = math.sin(dlmb) * math.cos(phi2)
    y = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlmb)

    bearing = math.degrees(math.atan2(x, y)) % 360.0
    return 0.0 if bearing >= 360.0 else bearing


def is_degenerate_pair(origin: GeoPoint, point: GeoPoint) -> bool:
    """
    Check whether a pair cannot be projected meaningfully.

    Degenerate when either point is invalid, the origin sits on a pole
    (cos(lat0) = 0), or the points are exactly antipodal.
    """
    if not (origin.is_valid and point.is_valid):
        return True

    if abs(math.cos(math.radians(origin.lat))) < _MIN_COS_LAT:
        return True

    dlng = abs(point.lng - origin.lng)
    if point.lat == -origin.lat and dlng == 180.0:
        return True

    return False


def equirectangular_offset(
    origin: GeoPoint,
    point: GeoPoint,
    meters_per_degree: float = METERS_PER_DEGREE
) -> Tuple[float, float]:
    """
    Local (east, north) offset of point from origin, in metres.

    No validity checks; use is_degenerate_pair() first or call
    GeoProjector.project() which does.
    """
    east = (point.lng - origin.lng) * meters_per_degree * math.cos(math.radians(origin.lat))
    north = (point.lat - origin.lat) * meters_per_degree
    return (east, north)

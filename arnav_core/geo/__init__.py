"""
Geo Module: distances, local projection, mini-map placement.

Key classes:
- GeoProjector: origin ownership, re-anchoring hysteresis, ENU projection
- MapPlaneProjector: Web Mercator placement on the mini-map plane
- GPSSmoother: moving-average GPS fixes

haversine_distance (exported as `distance`) is the one distance function
used throughout the system.
"""

from .geodesy import (
    EARTH_RADIUS_M,
    METERS_PER_DEGREE,
    haversine_distance,
    distance_between,
    initial_bearing,
    is_degenerate_pair,
    equirectangular_offset,
)
from .geo_projector import (
    GeoProjector,
    GeoProjectorConfig,
    project,
)
from .map_projection import (
    MAX_MERCATOR_LAT,
    MapPlaneConfig,
    MapPlaneProjector,
    latlng_to_pixel,
    map_pixel_offset,
    is_within_plane,
)
from .gps_smoothing import GPSSmoother

distance = haversine_distance

__all__ = [
    # Geodesy
    'EARTH_RADIUS_M',
    'METERS_PER_DEGREE',
    'haversine_distance',
    'distance',
    'distance_between',
    'initial_bearing',
    'is_degenerate_pair',
    'equirectangular_offset',
    # Local projection
    'GeoProjector',
    'GeoProjectorConfig',
    'project',
    # Mini-map
    'MAX_MERCATOR_LAT',
    'MapPlaneConfig',
    'MapPlaneProjector',
    'latlng_to_pixel',
    'map_pixel_offset',
    'is_within_plane',
    # Smoothing
    'GPSSmoother',
]

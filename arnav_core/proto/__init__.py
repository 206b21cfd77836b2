"""
Protocol Module: Record schemas exchanged with the host application.

- Inputs: SensorSample (per tick), POIRecord (from the backend)
- Outputs: HeadingEstimate, ProjectedPoint, MapPixelOffset
- Shared: GeoPoint
"""

from .geo_point import GeoPoint
from .sensor_sample import SensorSample
from .heading_estimate import (
    HeadingEstimate,
    HeadingStatus,
    CalibrationState,
)
from .projection import (
    ProjectedPoint,
    MapPixelOffset,
    ProjectionStatus,
    create_unavailable,
    create_hidden_offset,
)
from .poi_record import (
    POIRecord,
    POI_DATE_FORMAT,
    parse_poi_date,
)

__all__ = [
    'GeoPoint',
    'SensorSample',
    'HeadingEstimate',
    'HeadingStatus',
    'CalibrationState',
    'ProjectedPoint',
    'MapPixelOffset',
    'ProjectionStatus',
    'create_unavailable',
    'create_hidden_offset',
    'POIRecord',
    'POI_DATE_FORMAT',
    'parse_poi_date',
]

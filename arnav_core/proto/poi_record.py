"""
POI Record Schema.

Point-of-interest record as delivered by the backend. The core treats it as
an opaque coordinate-bearing record and never mutates it.

Backend date format: MM-dd-yyyy (e.g. "03-21-2025").
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Tuple
import logging
import math

from .geo_point import GeoPoint

logger = logging.getLogger(__name__)

POI_DATE_FORMAT = '%m-%d-%Y'


def parse_poi_date(value: str) -> Optional[date]:
    """
    Parse a backend POI date string.

    Args:
        value: Date in MM-dd-yyyy format

    Returns:
        date, or None if the string cannot be parsed
    """
    try:
        return datetime.strptime(value.strip(), POI_DATE_FORMAT).date()
    except (AttributeError, ValueError):
        return None


@dataclass
class POIRecord:
    """
    Point of interest.

    Attributes:
        id: Primary key
        lat: Latitude (deg)
        lng: Longitude (deg)
        label: Display label
        color: Display colour as hex string, e.g. "#ff0000"
        height: Vertical offset for AR placement (m)
        active_dates: Days on which the POI is active (empty = permanent)
        group_name: Group the POI belongs to (optional)
        group_index: Order within the group (optional)
        mark_type: Marker style hint from the backend (optional)
    """

    id: int
    lat: float
    lng: float
    label: str = ''
    color: str = '#ffffff'
    height: float = 0.0
    active_dates: List[date] = field(default_factory=list)
    group_name: Optional[str] = None
    group_index: Optional[int] = None
    mark_type: Optional[str] = None

    @property
    def position(self) -> GeoPoint:
        """POI coordinates as a GeoPoint."""
        return GeoPoint(self.lat, self.lng)

    @property
    def is_permanent(self) -> bool:
        """True if the POI has no active-date restriction."""
        return not self.active_dates

    @property
    def color_rgb(self) -> Tuple[int, int, int]:
        """
        Decode the hex colour to an (r, g, b) tuple.

        Falls back to white for malformed colours.
        """
        value = (self.color or '').lstrip('#')
        if len(value) == 3:
            value = ''.join(c * 2 for c in value)
        try:
            if len(value) != 6:
                raise ValueError(value)
            return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))
        except ValueError:
            logger.warning(f"POI {self.id}: invalid colour {self.color!r}, using white")
            return (255, 255, 255)

    def to_dict(self) -> dict:
        """Convert to the backend dictionary layout."""
        return {
            'id': self.id,
            'lat': self.lat,
            'lng': self.lng,
            'label': self.label,
            'color': self.color,
            'height': self.height,
            'dates': [d.strftime(POI_DATE_FORMAT) for d in self.active_dates],
            'group_name': self.group_name,
            'group_index': self.group_index,
            'mark_type': self.mark_type,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'POIRecord':
        """
        Build a POI from a backend record.

        Unparseable dates are dropped with a warning. A POI whose dates all
        fail to parse is treated as expired, not permanent.

        Raises:
            ValueError: if id, lat or lng is missing or not numeric, height
                is not a finite number or dates is not a list
        """
        try:
            poi_id = int(data['id'])
            lat = float(data['lat'])
            lng = float(data['lng'])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid POI record {data!r}: {e}") from e

        raw_dates = data.get('dates') or []
        if not isinstance(raw_dates, (list, tuple)):
            raise ValueError(f"Invalid POI record {poi_id}: dates must be a list, got {raw_dates!r}")
        active_dates = []
        for raw in raw_dates:
            parsed = parse_poi_date(raw)
            if parsed is None:
                logger.warning(f"POI {poi_id}: failed to parse date {raw!r}")
                continue
            active_dates.append(parsed)

        # Keep "had dates" information: all-invalid dates must not make a POI permanent
        if raw_dates and not active_dates:
            active_dates = [date.min]

        try:
            height = float(data.get('height') or 0.0)
            if not math.isfinite(height):
                raise ValueError(f"height must be finite, got {height}")
            group_index = data.get('group_index')
            group_index = int(group_index) if group_index is not None else None
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid POI record {poi_id}: {e}") from e

        return cls(
            id=poi_id,
            lat=lat,
            lng=lng,
            label=str(data.get('label') or ''),
            color=str(data.get('color') or '#ffffff'),
            height=height,
            active_dates=active_dates,
            group_name=data.get('group_name') or None,
            group_index=group_index,
            mark_type=data.get('mark_type'),
        )

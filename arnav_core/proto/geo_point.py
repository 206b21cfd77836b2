"""
Geographic point schema.

A latitude/longitude pair in decimal degrees (WGS84). Used for GPS fixes,
projection origins and POI positions.
"""

from dataclasses import dataclass
import math


@dataclass(frozen=True)
class GeoPoint:
    """
    Latitude/longitude pair.

    Frozen: an origin is replaced, never mutated in place.

    Attributes:
        lat: Latitude in degrees, [-90, 90]
        lng: Longitude in degrees, [-180, 180]
    """

    lat: float
    lng: float

    @property
    def is_valid(self) -> bool:
        """True if both coordinates are finite and within range."""
        try:
            lat = float(self.lat)
            lng = float(self.lng)
        except (TypeError, ValueError):
            return False

        if not (math.isfinite(lat) and math.isfinite(lng)):
            return False

        return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {'lat': self.lat, 'lng': self.lng}

    @classmethod
    def from_dict(cls, data: dict) -> 'GeoPoint':
        """
        Build from a {"lat": .., "lng": ..} mapping.

        Raises:
            ValueError: if a field is missing or not numeric
        """
        try:
            return cls(lat=float(data['lat']), lng=float(data['lng']))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid coordinate record {data!r}: {e}") from e

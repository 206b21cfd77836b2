"""
Projection Output Schemas.

ProjectedPoint: local ENU offset of a point from the projection origin.
MapPixelOffset: position of a point on the mini-map plane.

Both are ephemeral, recomputed on demand and never cached by the core.
"""

from dataclasses import dataclass
from typing import Optional
from enum import IntEnum


class ProjectionStatus(IntEnum):
    """Outcome of a projection."""

    OK = 0
    ORIGIN_UNAVAILABLE = 1   # No valid GPS origin; hide dependent visuals
    DEGENERATE = 2           # Invalid or singular coordinate pair


@dataclass
class ProjectedPoint:
    """
    Local offset of a point from the current origin.

    Attributes:
        east: Offset east of origin (m)
        north: Offset north of origin (m)
        up: Vertical component (m), passed through from the POI height
        status: Projection outcome
        poi_id: Identifier of the projected POI (if projected from a record)

    Notes:
        - For non-OK status, east/north/up are 0.0 and must not be used
    """

    east: float
    north: float
    up: float = 0.0
    status: ProjectionStatus = ProjectionStatus.OK
    poi_id: Optional[int] = None

    @property
    def is_available(self) -> bool:
        """True if the offset can be used for placement."""
        return self.status == ProjectionStatus.OK

    @property
    def horizontal_distance_m(self) -> float:
        """Planar distance from origin (m)."""
        return (self.east ** 2 + self.north ** 2) ** 0.5

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'east': self.east,
            'north': self.north,
            'up': self.up,
            'status': self.status.name,
            'poi_id': self.poi_id,
        }


@dataclass
class MapPixelOffset:
    """
    Offset of a point from the mini-map plane centre.

    Attributes:
        x: East-positive offset in plane units
        y: North-positive offset in plane units
        visible: False if the point lies outside the visible half-extent
        status: Projection outcome
        poi_id: Identifier of the projected POI (if projected from a record)
    """

    x: float
    y: float
    visible: bool
    status: ProjectionStatus = ProjectionStatus.OK
    poi_id: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'x': self.x,
            'y': self.y,
            'visible': self.visible,
            'status': self.status.name,
            'poi_id': self.poi_id,
        }


def create_unavailable(
    status: ProjectionStatus,
    poi_id: Optional[int] = None
) -> ProjectedPoint:
    """
    Create a ProjectedPoint that callers must not place.

    Args:
        status: ORIGIN_UNAVAILABLE or DEGENERATE
        poi_id: POI identifier, if any

    Returns:
        ProjectedPoint with zeroed offsets and the given status
    """
    return ProjectedPoint(east=0.0, north=0.0, up=0.0, status=status, poi_id=poi_id)


def create_hidden_offset(
    status: ProjectionStatus,
    poi_id: Optional[int] = None
) -> MapPixelOffset:
    """Create a not-visible MapPixelOffset for a failed map projection."""
    return MapPixelOffset(x=0.0, y=0.0, visible=False, status=status, poi_id=poi_id)

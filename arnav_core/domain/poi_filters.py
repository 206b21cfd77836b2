"""
POI list filters: active dates, proximity, groups.

Filters never mutate POI records; they return new lists.
"""

import logging
from datetime import date
from typing import List, Optional, Sequence

from arnav_core.proto import GeoPoint, POIRecord
from arnav_core.geo import haversine_distance
from arnav_core.metrics import get_metrics

logger = logging.getLogger(__name__)


def is_poi_active(poi: POIRecord, today: date) -> bool:
    """Permanent POIs are always active; dated ones need a date on or after today."""
    if poi.is_permanent:
        return True
    return any(d >= today for d in poi.active_dates)


def filter_active_pois(pois: Sequence[POIRecord], today: Optional[date] = None) -> List[POIRecord]:
    """
    Keep POIs that are permanent or have a current/future active date.

    Args:
        pois: POI records
        today: Reference day (defaults to date.today())

    Returns:
        Active POIs, in input order
    """
    today = today or date.today()
    active = [poi for poi in pois if is_poi_active(poi, today)]

    dropped = len(pois) - len(active)
    if dropped:
        get_metrics().increment_drop('inactive_poi', dropped)
        logger.debug(f"Filtered out {dropped} expired POIs")

    return active


def nearby_pois(
    user: Optional[GeoPoint],
    pois: Sequence[POIRecord],
    max_distance_m: float = 1000.0
) -> List[POIRecord]:
    """
    POIs within max_distance_m (haversine) of the user.

    Without a valid user fix nothing can be ruled out and every POI is
    returned.
    """
    if user is None or not user.is_valid:
        return list(pois)

    return [poi for poi in pois
            if haversine_distance(user.lat, user.lng, poi.lat, poi.lng) <= max_distance_m]


def group_pois(pois: Sequence[POIRecord], group_name: str) -> List[POIRecord]:
    """
    POIs of one group ordered by group_index.

    The first entry is the group's navigation target. POIs without an
    index sort after indexed ones, keeping input order.
    """
    members = [poi for poi in pois if poi.group_name == group_name]
    return sorted(members, key=lambda poi: (poi.group_index is None, poi.group_index or 0))

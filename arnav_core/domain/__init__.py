"""
Domain Module: navigation logic on top of the geo layer.

Implements:
- Arrival detection
- Play-area boundary checks
- POI filtering (active dates, proximity, groups)
"""

from .navigation_monitor import (
    NavigationMonitor,
    NavigationConfig,
    PlayAreaStatus,
    PlayAreaReport,
    ArrivalStatus,
    create_default_navigation_monitor,
)
from .poi_filters import (
    is_poi_active,
    filter_active_pois,
    nearby_pois,
    group_pois,
)

__all__ = [
    'NavigationMonitor',
    'NavigationConfig',
    'PlayAreaStatus',
    'PlayAreaReport',
    'ArrivalStatus',
    'create_default_navigation_monitor',
    'is_poi_active',
    'filter_active_pois',
    'nearby_pois',
    'group_pois',
]

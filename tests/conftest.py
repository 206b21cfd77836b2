"""
Pytest configuration and shared fixtures for AR navigator core tests.

This module provides reusable fixtures for heading fusion, geo projection,
mini-map placement and navigation tests.
"""

import math
import sys
from pathlib import Path
from typing import List, Optional

import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from arnav_core.metrics import reset_metrics
from arnav_core.proto import GeoPoint, POIRecord, SensorSample
from arnav_core.heading import HeadingEstimatorConfig


# =============================================================================
# Metrics Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_metrics():
    """
    Give every test its own global metrics collector.

    Components grab get_metrics() at construction, so they must be created
    inside the test to see the fresh collector.
    """
    reset_metrics()
    yield
    reset_metrics()


# =============================================================================
# Location Fixtures
# =============================================================================


@pytest.fixture
def origin() -> GeoPoint:
    """
    Standard test origin (play-area centre, Philippines).

    Returns:
        GeoPoint at (8.360119, 124.868087).
    """
    return GeoPoint(8.360119, 124.868087)


@pytest.fixture
def point_11m_north() -> GeoPoint:
    """Point 0.0001 deg (~11.1 m) north of the standard origin."""
    return GeoPoint(8.360219, 124.868087)


def offset_point(base: GeoPoint, north_m: float = 0.0, east_m: float = 0.0) -> GeoPoint:
    """
    Point displaced from base by a local offset.

    Uses the same 111 km/deg scale as the local projection.
    """
    lat = base.lat + north_m / 111000.0
    lng = base.lng + east_m / (111000.0 * math.cos(math.radians(base.lat)))
    return GeoPoint(lat, lng)


# =============================================================================
# POI Fixtures
# =============================================================================


@pytest.fixture
def sample_pois(origin: GeoPoint) -> List[POIRecord]:
    """
    Small POI set around the standard origin.

    - 1: ~11 m north (group "tour", index 2)
    - 2: ~100 m east (group "tour", index 1)
    - 3: ~2 km north (no group)
    """
    north = offset_point(origin, north_m=11.1)
    east = offset_point(origin, east_m=100.0)
    far = offset_point(origin, north_m=2000.0)
    return [
        POIRecord(id=1, lat=north.lat, lng=north.lng, label="Fountain",
                  color="#ff0000", group_name="tour", group_index=2),
        POIRecord(id=2, lat=east.lat, lng=east.lng, label="Gate",
                  color="#00ff00", group_name="tour", group_index=1),
        POIRecord(id=3, lat=far.lat, lng=far.lng, label="Lighthouse"),
    ]


# =============================================================================
# Heading Fixtures
# =============================================================================


@pytest.fixture
def compass_only_config() -> HeadingEstimatorConfig:
    """
    Estimator config with a single deterministic source.

    Gyro fusion, GPS course and Kalman filtering are off, so the fused
    heading only depends on the compass and the rate limiter.
    """
    return HeadingEstimatorConfig(
        use_gyro_fusion=False,
        use_gps_course=False,
        use_advanced_filtering=False,
    )


def compass_sample(t: float, heading: float, accuracy: float = 5.0,
                   gyro: Optional[float] = None, **kwargs) -> SensorSample:
    """Build a sensor sample with a compass reading."""
    return SensorSample(timestamp=t, compass_heading=heading,
                        compass_accuracy=accuracy, gyro_yaw=gyro, **kwargs)

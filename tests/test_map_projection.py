"""
Unit tests for mini-map (Web Mercator) projection.

Tests cover:
- Tile pixel formula
- Plane offsets, axis orientation and visibility flag
- Degenerate and unavailable inputs
- Batch offsets, marker spread and visible POI selection
"""

import pytest

from arnav_core.geo import (
    MapPlaneConfig,
    MapPlaneProjector,
    is_within_plane,
    latlng_to_pixel,
    map_pixel_offset,
)
from arnav_core.metrics import get_metrics
from arnav_core.proto import GeoPoint, POIRecord, ProjectionStatus

from conftest import offset_point


class TestLatLngToPixel:
    """Tests for the Web Mercator pixel formula."""

    def test_origin_at_zoom_zero(self):
        """Test (0, 0) is the centre of the single zoom-0 tile."""
        x, y = latlng_to_pixel(0.0, 0.0, 0)
        assert x == pytest.approx(128.0)
        assert y == pytest.approx(128.0)

    def test_scale_doubles_per_zoom(self):
        """Test scale = 256 * 2^zoom."""
        x0, _ = latlng_to_pixel(0.0, 90.0, 0)
        x3, _ = latlng_to_pixel(0.0, 90.0, 3)
        assert x0 == pytest.approx(192.0)
        assert x3 == pytest.approx(192.0 * 8)

    def test_north_is_up(self):
        """Test pixel y decreases northward."""
        _, y_south = latlng_to_pixel(-10.0, 0.0, 2)
        _, y_north = latlng_to_pixel(10.0, 0.0, 2)
        assert y_north < y_south


class TestVisibility:
    """Tests for the visible-extent check."""

    def test_outside_half_extent(self):
        """Test offset (0.6, 0.1) at half-extent 0.5 is not visible."""
        assert not is_within_plane(0.6, 0.1, 0.5)

    def test_inside_and_on_edge(self):
        """Test points inside and exactly on the edge are visible."""
        assert is_within_plane(0.1, -0.2)
        assert is_within_plane(0.5, -0.5)


class TestMapPixelOffset:
    """Tests for map_pixel_offset."""

    def test_centre_is_zero(self, origin):
        """Test the centre maps to (0, 0) and is visible."""
        result = map_pixel_offset(origin, origin, 17)
        assert result.x == pytest.approx(0.0)
        assert result.y == pytest.approx(0.0)
        assert result.visible

    def test_units_at_zoom_zero(self):
        """Test one degree east at zoom 0 is 256/360 px = 1/360 plane units."""
        result = map_pixel_offset(GeoPoint(0.0, 1.0), GeoPoint(0.0, 0.0), 0)
        assert result.x == pytest.approx(1.0 / 360.0)
        assert result.y == pytest.approx(0.0, abs=1e-12)

    def test_axes_east_and_north_positive(self, origin):
        """Test east and north offsets are positive."""
        north = map_pixel_offset(offset_point(origin, north_m=20.0), origin, 17)
        east = map_pixel_offset(offset_point(origin, east_m=20.0), origin, 17)

        assert north.y > 0 and north.x == pytest.approx(0.0, abs=1e-9)
        assert east.x > 0 and east.y == pytest.approx(0.0, abs=1e-9)

    def test_far_point_flagged_not_clamped(self, origin):
        """Test a far point is not visible and keeps its true offset."""
        result = map_pixel_offset(offset_point(origin, east_m=2000.0), origin, 17)
        assert not result.visible
        assert result.status == ProjectionStatus.OK
        assert result.x > 0.5

    def test_no_centre(self, origin):
        """Test missing centre is ORIGIN_UNAVAILABLE and hidden."""
        result = map_pixel_offset(origin, None, 17)
        assert result.status == ProjectionStatus.ORIGIN_UNAVAILABLE
        assert not result.visible

    def test_beyond_mercator_range(self, origin):
        """Test latitudes beyond +/-85.05112878 are degenerate."""
        result = map_pixel_offset(GeoPoint(86.0, 0.0), GeoPoint(85.0, 0.0), 17)
        assert result.status == ProjectionStatus.DEGENERATE
        assert not result.visible
        assert get_metrics().get_drop_count('degenerate_projection') == 1


class TestMapPlaneConfig:
    """Tests for MapPlaneConfig validation."""

    def test_defaults(self):
        config = MapPlaneConfig()
        assert config.tile_size_px == 256
        assert config.pixels_per_unit == 256.0
        assert config.half_extent == 0.5

    def test_invalid(self):
        with pytest.raises(ValueError):
            MapPlaneConfig(pixels_per_unit=0.0)


class TestMapPlaneProjector:
    """Tests for batch mini-map placement."""

    def test_offsets_match_single(self, origin, sample_pois):
        """Test vectorised offsets agree with map_pixel_offset."""
        projector = MapPlaneProjector()

        offsets = projector.offsets(sample_pois, origin)

        assert [o.poi_id for o in offsets] == [1, 2, 3]
        for poi, result in zip(sample_pois, offsets):
            single = map_pixel_offset(poi.position, origin, projector.zoom)
            assert result.x == pytest.approx(single.x)
            assert result.y == pytest.approx(single.y)
            assert result.visible == single.visible

    def test_visible_pois(self, origin, sample_pois):
        """Test only on-plane markers are returned."""
        projector = MapPlaneProjector()

        visible = projector.visible_pois(sample_pois, origin)

        assert [poi.id for poi, _ in visible] == [1, 2]

    def test_marker_spread(self, origin, sample_pois):
        """Test spread scales visible markers only."""
        plain = MapPlaneProjector().offsets(sample_pois, origin)
        spread = MapPlaneProjector(MapPlaneConfig(marker_spread=2.0)).offsets(sample_pois, origin)

        assert spread[0].y == pytest.approx(plain[0].y * 2.0)
        assert spread[2].y == pytest.approx(plain[2].y)

    def test_no_centre(self, sample_pois):
        """Test every marker is hidden without a centre."""
        offsets = MapPlaneProjector().offsets(sample_pois, None)
        assert all(not o.visible for o in offsets)
        assert all(o.status == ProjectionStatus.ORIGIN_UNAVAILABLE for o in offsets)

    def test_bad_record_isolated(self, origin, sample_pois):
        """Test an invalid POI is hidden without affecting the others."""
        pois = sample_pois + [POIRecord(id=7, lat=89.0, lng=0.0)]

        offsets = MapPlaneProjector().offsets(pois, origin)

        assert offsets[3].status == ProjectionStatus.DEGENERATE
        assert offsets[0].visible

    def test_zoom_changes_scale(self, origin, sample_pois):
        """Test zooming out brings far markers onto the plane."""
        projector = MapPlaneProjector()
        projector.zoom = 10

        visible = projector.visible_pois(sample_pois, origin)

        assert len(visible) == 3

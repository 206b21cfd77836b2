"""
AR navigator replay.

Replays a recorded sensor log against a POI payload through the heading
estimator, geo projector, mini-map projector and navigation checks, the
same way the host app drives the core every frame.
"""

import sys
import logging
import argparse
from datetime import date, datetime
from typing import List, Optional

import config
from arnav_core.proto import POIRecord, SensorSample
from arnav_core.heading import (
    HeadingEstimator,
    HeadingEstimatorConfig,
    RecalibrationTimer,
)
from arnav_core.geo import (
    GeoProjector,
    GeoProjectorConfig,
    GPSSmoother,
    MapPlaneConfig,
    MapPlaneProjector,
)
from arnav_core.domain import (
    NavigationConfig,
    NavigationMonitor,
    filter_active_pois,
    group_pois,
    nearby_pois,
)
from arnav_core.io import load_poi_records, load_sensor_samples
from arnav_core.metrics import get_metrics

logging.basicConfig(
    level=getattr(logging, config.LOGGING_CONFIG["level"]),
    format=config.LOGGING_CONFIG["format"]
)
logger = logging.getLogger(__name__)


class NavigatorReplay:
    """Orchestrates the core over a recorded session."""

    def __init__(self, pois: List[POIRecord], target_group: Optional[str] = None,
                 today: Optional[date] = None):
        self.estimator = HeadingEstimator(HeadingEstimatorConfig(**config.HEADING_CONFIG))
        self.recalibration = RecalibrationTimer(**config.RECALIBRATION_CONFIG)
        self.smoother = GPSSmoother(**config.GPS_SMOOTHING_CONFIG)
        self.projector = GeoProjector(GeoProjectorConfig(**config.PROJECTION_CONFIG))
        self.map_projector = MapPlaneProjector(MapPlaneConfig(**config.MAP_CONFIG))
        self.navigation = NavigationMonitor(NavigationConfig(**config.NAVIGATION_CONFIG))

        self.pois = filter_active_pois(pois, today)
        self.target: Optional[POIRecord] = None
        if target_group:
            group = group_pois(self.pois, target_group)
            if group:
                self.target = group[0]
                logger.info(f"Navigating to POI {self.target.id} '{self.target.label}' "
                            f"(group '{target_group}')")
            else:
                logger.warning(f"No active POIs in group '{target_group}'")

        self.sample_count = 0
        self.marker_positions = []
        self.play_area = None
        self.arrival = None
        self._projected_version = 0

        logger.info(f"Replay initialized with {len(self.pois)} active POIs")

    def process_sample(self, sample: SensorSample):
        """Run one frame tick."""
        self.sample_count += 1

        if sample.has_valid_timestamp and self.recalibration.is_due(sample.timestamp):
            self.estimator.recalibrate_sensors(sample.timestamp)

        estimate = self.estimator.estimate_heading(sample)

        user = self.smoother.update(sample.gps_fix)
        if sample.has_valid_gps_fix:
            self.projector.update_origin(user)
        else:
            user = None
            self._handle_gps_outage()

        # Re-project only when the origin actually moved
        if self.projector.has_origin and self.projector.origin_version != self._projected_version:
            self._projected_version = self.projector.origin_version
            self.marker_positions = self.projector.project_pois(self.pois)

        self.play_area = self.navigation.check_play_area(user)
        if self.target is not None:
            self.arrival = self.navigation.check_arrival(user, self.target)

        if self.sample_count % config.OUTPUT_CONFIG["print_interval"] == 0:
            visible = self.map_projector.visible_pois(
                nearby_pois(user, self.pois, self.navigation.config.max_poi_display_distance_m),
                user)
            placed = sum(1 for p in self.marker_positions if p.is_available)
            logger.info(f"t={sample.timestamp:.2f}s heading={estimate.heading:6.1f} "
                        f"quality={estimate.quality:.2f} {estimate.calibration_state.value} "
                        f"markers={placed}/{len(self.pois)} on_map={len(visible)}")

    def _handle_gps_outage(self):
        """Hide markers and restart smoothing until location comes back."""
        if not self.projector.has_origin:
            return

        logger.warning(f"GPS fix lost after {self.sample_count} samples, hiding markers")
        self.smoother.reset()
        self.projector.clear_origin()
        self.marker_positions = self.projector.project_pois(self.pois)

    def run(self, samples: List[SensorSample]):
        for sample in samples:
            self.process_sample(sample)

        logger.info(f"Replay finished: {self.sample_count} samples")
        get_metrics().log_summary()


def _parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD: {value}") from e


def main():
    parser = argparse.ArgumentParser(description='AR navigator sensor log replay')
    parser.add_argument('--samples', '-s', type=str, required=True,
                        help='Sensor log (JSON lines)')
    parser.add_argument('--pois', '-p', type=str, required=True,
                        help='POI payload (JSON array)')
    parser.add_argument('--group', '-g', type=str, default=None,
                        help='Navigate to the first POI of this group')
    parser.add_argument('--today', type=_parse_date, default=None,
                        help='Reference date for active-date filtering (YYYY-MM-DD)')
    parser.add_argument('--zoom', '-z', type=int, default=None,
                        help='Mini-map zoom level')
    parser.add_argument('--debug', '-d', action='store_true',
                        help='Enable debug logging')

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.zoom is not None:
        config.MAP_CONFIG["zoom"] = args.zoom

    try:
        pois = load_poi_records(args.pois)
        samples = load_sensor_samples(args.samples)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load input: {e}")
        return 1

    replay = NavigatorReplay(pois, target_group=args.group, today=args.today)
    replay.run(samples)
    return 0


if __name__ == "__main__":
    sys.exit(main())

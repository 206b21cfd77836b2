"""
AR navigator replay configuration.
"""

# Heading fusion
HEADING_CONFIG = {
    "use_compass": True,
    "compass_accuracy_limit_deg": 20.0,   # Ignore compass readings worse than this
    "use_gyro_fusion": True,
    "gyro_fusion_weight": 0.3,            # Gyro share of the compass/gyro blend
    "use_gyro_fallback": False,
    "use_gps_course": True,
    "min_gps_speed_m_s": 0.5,
    "min_gps_course_interval_s": 0.5,
    "sensor_quality_threshold": 0.7,
    "max_gps_blend_weight": 0.3,
    "history_size": 10,
    "outlier_threshold_deg": 60.0,
    "min_history_for_outlier": 3,
    "max_consecutive_rejections": 5,
    "use_advanced_filtering": True,
    "process_noise": 0.1,
    "measurement_noise": 1.0,
    "initial_error": 1.0,
    "max_rate_deg_s": 90.0,
    "use_initial_heading_capture": True,
    "warmup_s": 2.0,
    "capture_quality_threshold": 0.8,
    "compass_recalibration_pause_s": 0.1,
}

# Local ENU projection
PROJECTION_CONFIG = {
    "reanchor_threshold_m": 5.0,          # Origin hysteresis
    "meters_per_degree": 111000.0,
}

# Mini-map plane
MAP_CONFIG = {
    "tile_size_px": 256,
    "pixels_per_unit": 256.0,
    "half_extent": 0.5,                   # Visible plane is [-0.5, 0.5]^2
    "marker_spread": 1.0,
    "zoom": 17,
}

# Navigation checks
NAVIGATION_CONFIG = {
    "arrival_distance_m": 10.0,
    "enable_play_area_limits": True,
    "play_area_center": (8.360118854454575, 124.86808673329348),
    "play_area_radius_m": 5000.0,
    "play_area_warning_distance_m": 1000.0,
    "max_poi_display_distance_m": 1000.0,
}

# GPS moving average
GPS_SMOOTHING_CONFIG = {
    "window": 10,
}

# Periodic sensor recalibration (0 disables)
RECALIBRATION_CONFIG = {
    "interval_s": 300.0,
}

# Replay output
OUTPUT_CONFIG = {
    "print_interval": 10,                 # Log a status line every N samples
}

# Logging
LOGGING_CONFIG = {
    "level": "INFO",
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}

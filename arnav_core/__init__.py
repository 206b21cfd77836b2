"""
AR Navigator (arnav) Core Package.

Heading fusion and geospatial projection for an AR point-of-interest
navigator.

Package structure:
- proto: Record schemas (sensor samples, POIs, estimates, projections)
- heading: Compass/gyro/GPS-course fusion with initial heading capture
- geo: Haversine distance, local ENU projection, mini-map projection
- domain: Navigation logic (arrival, play area, POI filters)
- io: POI payload parsing, sensor log loading
- metrics: Diagnostics, counters, histograms
"""

__version__ = "0.1.0"
__author__ = "ARNav Team"

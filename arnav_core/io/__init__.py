"""
I/O Module: backend payload parsing and sensor log loading.

Parsing is per record: malformed entries are logged, counted and skipped.
"""

from .poi_loader import (
    parse_poi_records,
    load_poi_records,
)
from .sample_loader import (
    iter_sensor_samples,
    load_sensor_samples,
)

__all__ = [
    'parse_poi_records',
    'load_poi_records',
    'iter_sensor_samples',
    'load_sensor_samples',
]

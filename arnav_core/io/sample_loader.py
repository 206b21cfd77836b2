"""
Sensor log loading (JSON lines, one SensorSample per line).

Used for replaying recorded sessions through the core.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Union

from arnav_core.proto import SensorSample
from arnav_core.metrics import get_metrics

logger = logging.getLogger(__name__)


def iter_sensor_samples(lines: Iterable[str]) -> Iterator[SensorSample]:
    """
    Parse JSON-lines sensor records.

    Blank lines and lines starting with '#' are ignored; malformed lines
    are logged, counted as sample_parse_error and skipped.
    """
    metrics = get_metrics()

    for line_no, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith('#'):
            continue

        try:
            data = json.loads(line)
            if not isinstance(data, dict):
                raise ValueError(f"expected an object, got {type(data).__name__}")
            yield SensorSample.from_dict(data)
        except ValueError as e:
            # json.JSONDecodeError is a ValueError
            metrics.increment_drop('sample_parse_error')
            logger.warning(f"Skipping sensor log line {line_no}: {e}")


def load_sensor_samples(path: Union[str, Path]) -> List[SensorSample]:
    """Load a whole JSON-lines sensor log."""
    with open(path, 'r', encoding='utf-8') as f:
        samples = list(iter_sensor_samples(f))
    logger.info(f"Loaded {len(samples)} sensor samples from {path}")
    return samples

"""
POI payload parsing.

The backend returns a JSON array of POI objects (see POIRecord.from_dict
for field names). Malformed records are logged, counted as
poi_parse_error and skipped; one bad record never discards the rest of
the payload.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Union

from arnav_core.proto import POIRecord
from arnav_core.metrics import get_metrics

logger = logging.getLogger(__name__)


def parse_poi_records(payload: Union[str, bytes, List[Any]]) -> List[POIRecord]:
    """
    Parse a backend POI payload.

    Args:
        payload: JSON text, or an already-decoded list of dicts. A dict with
            a "pois" key is also accepted.

    Returns:
        Successfully parsed POIs, in payload order

    Raises:
        ValueError: if the payload is not valid JSON or not a list of records
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            raise ValueError(f"POI payload is not valid JSON: {e}") from e

    if isinstance(payload, dict) and 'pois' in payload:
        payload = payload['pois']

    if not isinstance(payload, list):
        raise ValueError(f"POI payload must be a list, got {type(payload).__name__}")

    metrics = get_metrics()
    records = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            metrics.increment_drop('poi_parse_error')
            logger.warning(f"POI entry {index} is not an object: {item!r}")
            continue
        try:
            records.append(POIRecord.from_dict(item))
        except ValueError as e:
            metrics.increment_drop('poi_parse_error')
            logger.warning(f"Skipping POI entry {index}: {e}")

    logger.info(f"Parsed {len(records)} of {len(payload)} POI records")
    return records


def load_poi_records(path: Union[str, Path]) -> List[POIRecord]:
    """Read and parse a POI payload file."""
    text = Path(path).read_text(encoding='utf-8')
    return parse_poi_records(text)

"""GEOConvergence utilities package.

All utilities are stateless pure functions with no external calls or side effects.
"""

from geoconvergence.utils.date_utils import epoch_millis, parse_timestamp, to_iso, utc_now
from geoconvergence.utils.geo_utils import (
    bbox_contains,
    cell_key,
    centroid,
    haversine_km,
    is_valid_coordinate,
    point_in_polygon,
    polygon_bbox,
)

__all__ = [
    "epoch_millis",
    "parse_timestamp",
    "to_iso",
    "utc_now",
    "bbox_contains",
    "cell_key",
    "centroid",
    "haversine_km",
    "is_valid_coordinate",
    "point_in_polygon",
    "polygon_bbox",
]

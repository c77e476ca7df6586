"""Geographic utility functions for GEOConvergence.

Pure geographic computations with no I/O.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Sequence, Tuple

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate the great-circle distance between two points using the Haversine formula.

    Args:
        lat1: Latitude of first point in decimal degrees.
        lon1: Longitude of first point in decimal degrees.
        lat2: Latitude of second point in decimal degrees.
        lon2: Longitude of second point in decimal degrees.

    Returns:
        Distance in kilometres.
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def point_in_polygon(lat: float, lng: float, polygon: Sequence[Tuple[float, float]]) -> bool:
    """Ray-casting parity test for a point against an implicitly closed vertex ring.

    A horizontal ray is cast from the point towards increasing longitude and
    edge crossings are counted; an odd count means the point is inside. The
    first vertex need not be repeated at the end of the ring. Rings with fewer
    than three vertices contain nothing. Self-intersecting rings follow the
    even-odd rule.

    Args:
        lat: Point latitude in decimal degrees.
        lng: Point longitude in decimal degrees.
        polygon: Ordered (lat, lng) vertices.

    Returns:
        True if the point lies inside the polygon.
    """
    n = len(polygon)
    if n < 3:
        return False

    inside = False
    j = n - 1
    for i in range(n):
        lat_i, lng_i = polygon[i]
        lat_j, lng_j = polygon[j]
        # Edge straddles the ray's latitude (a horizontal edge never does)
        if (lat_i > lat) != (lat_j > lat):
            crossing_lng = (lng_j - lng_i) * (lat - lat_i) / (lat_j - lat_i) + lng_i
            if lng < crossing_lng:
                inside = not inside
        j = i
    return inside


def cell_key(lat: float, lng: float, cell_degrees: float = 1.0) -> Tuple[int, int]:
    """Return the integer grid cell a point falls into.

    With the default one-degree cells this is ``(floor(lat), floor(lng))``.

    Args:
        lat: Point latitude.
        lng: Point longitude.
        cell_degrees: Cell edge length in decimal degrees.

    Returns:
        (lat_index, lng_index) tuple.
    """
    return math.floor(lat / cell_degrees), math.floor(lng / cell_degrees)


def centroid(points: Iterable[Tuple[float, float]]) -> Tuple[float, float]:
    """Arithmetic mean of (lat, lng) pairs.

    Not a spherical centroid; adequate for points confined to a single grid cell.

    Raises:
        ValueError: If no points are given.
    """
    count = 0
    sum_lat = 0.0
    sum_lng = 0.0
    for lat, lng in points:
        sum_lat += lat
        sum_lng += lng
        count += 1
    if count == 0:
        raise ValueError("centroid() requires at least one point")
    return sum_lat / count, sum_lng / count


def is_valid_coordinate(lat: Any, lng: Any) -> bool:
    """Check that a lat/lng pair is a finite, in-range decimal-degree coordinate."""
    if isinstance(lat, bool) or isinstance(lng, bool):
        return False
    if not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
        return False
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


def bbox_contains(lat: float, lon: float, bbox: Tuple[float, float, float, float]) -> bool:
    """Check whether a point falls within a bounding box.

    Args:
        lat: Point latitude.
        lon: Point longitude.
        bbox: (min_lat, min_lon, max_lat, max_lon) bounding box.

    Returns:
        True if the point is within the bounding box (inclusive).
    """
    min_lat, min_lon, max_lat, max_lon = bbox
    return min_lat <= lat <= max_lat and min_lon <= lon <= max_lon


def polygon_bbox(polygon: Sequence[Tuple[float, float]]) -> Tuple[float, float, float, float]:
    """Return the (min_lat, min_lon, max_lat, max_lon) bounding box of a vertex ring."""
    lats = [v[0] for v in polygon]
    lngs = [v[1] for v in polygon]
    return min(lats), min(lngs), max(lats), max(lngs)

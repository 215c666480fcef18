from __future__ import annotations

import math
from typing import Sequence

from src.domain.models import GeoPoint

EARTH_RADIUS_M = 6371000.0


def haversine_distance_m(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in meters."""

    lat1 = math.radians(a.lat)
    lon1 = math.radians(a.lon)
    lat2 = math.radians(b.lat)
    lon2 = math.radians(b.lon)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    s = (
        math.sin(dlat / 2.0) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2.0) ** 2
    )
    return 2.0 * EARTH_RADIUS_M * math.asin(math.sqrt(min(1.0, s)))


def find_closest_point_index(
    points: Sequence[GeoPoint], target: GeoPoint, start_index: int = 0
) -> int:
    """Index of the point nearest to target, scanning forward from start_index.

    Uses squared distance in degree space, which is only meaningful for ranking
    nearby candidates. Returns -1 when there is nothing to scan.
    """

    if start_index < 0:
        return -1

    best_i = -1
    best_d2 = float("inf")
    for i in range(start_index, len(points)):
        p = points[i]
        d_lat = p.lat - target.lat
        d_lon = p.lon - target.lon
        d2 = d_lat * d_lat + d_lon * d_lon
        if d2 < best_d2:
            best_d2 = d2
            best_i = i
    return best_i

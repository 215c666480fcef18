from __future__ import annotations

from typing import Sequence

from src.domain.algorithms.geo_utils import (
    find_closest_point_index,
    haversine_distance_m,
)
from src.domain.models import GeoPoint, Stop


def interpolate_position_on_shape(
    shape: Sequence[GeoPoint] | None,
    stop_from: Stop,
    stop_to: Stop,
    progress: float,
) -> GeoPoint:
    """Position between two consecutive stops, following the shape polyline.

    Both stops are snapped to their nearest shape vertex, searching forward so the
    sub-path runs in trip direction. Distance along the sub-path is measured with
    haversine, then the point is interpolated linearly inside the segment that
    holds `progress` of the total length.

    Known limitation: on looped or out-and-back shapes the forward search may not
    find the "to" stop after the "from" stop; the end index is then clamped to the
    start index and the vehicle is drawn at the "from" stop.
    """

    if not shape or len(shape) < 2:
        return stop_from.location

    i_from = find_closest_point_index(shape, stop_from.location, 0)
    i_to = find_closest_point_index(shape, stop_to.location, i_from)
    if i_to < i_from:
        i_to = i_from

    path = shape[i_from : i_to + 1]
    if len(path) < 2:
        return stop_from.location

    seg_m = [haversine_distance_m(a, b) for a, b in zip(path, path[1:])]
    total_m = sum(seg_m)
    target_m = total_m * progress

    walked_m = 0.0
    for i, d in enumerate(seg_m):
        if walked_m + d >= target_m:
            p0 = path[i]
            p1 = path[i + 1]
            if d <= 0.0:
                return p0
            t = (target_m - walked_m) / d
            return GeoPoint(
                lat=p0.lat + (p1.lat - p0.lat) * t,
                lon=p0.lon + (p1.lon - p0.lon) * t,
            )
        walked_m += d

    # Float rounding at progress == 1.
    return path[-1]

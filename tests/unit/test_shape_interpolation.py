from __future__ import annotations

import pytest

from src.domain.algorithms.geo_utils import haversine_distance_m
from src.domain.algorithms.shape_interpolation import interpolate_position_on_shape
from src.domain.models import GeoPoint, Stop

STOP_A = Stop(id="A", name="A", location=GeoPoint(lat=6.10, lon=102.20))
STOP_B = Stop(id="B", name="B", location=GeoPoint(lat=6.10, lon=102.24))


def _l_shape() -> tuple[GeoPoint, ...]:
    # East along the equator-ish line, then north: the path is not a straight line.
    return (
        GeoPoint(lat=0.0, lon=0.0),
        GeoPoint(lat=0.0, lon=0.01),
        GeoPoint(lat=0.0, lon=0.02),
        GeoPoint(lat=0.01, lon=0.02),
        GeoPoint(lat=0.02, lon=0.02),
    )


def test_two_point_shape_midpoint() -> None:
    shape = (STOP_A.location, STOP_B.location)
    p = interpolate_position_on_shape(shape, STOP_A, STOP_B, 0.5)
    assert p.lat == pytest.approx(6.10)
    assert p.lon == pytest.approx(102.22)


@pytest.mark.parametrize("shape", [None, (), (GeoPoint(lat=1.0, lon=1.0),)])
def test_missing_or_degenerate_shape_falls_back_to_from_stop(shape) -> None:
    assert interpolate_position_on_shape(shape, STOP_A, STOP_B, 0.7) == STOP_A.location


def test_progress_bounds_hit_the_stops() -> None:
    shape = _l_shape()
    a = Stop(id="a", name="a", location=GeoPoint(lat=0.0, lon=0.0))
    b = Stop(id="b", name="b", location=GeoPoint(lat=0.02, lon=0.02))

    start = interpolate_position_on_shape(shape, a, b, 0.0)
    end = interpolate_position_on_shape(shape, a, b, 1.0)

    assert haversine_distance_m(start, a.location) < 1.0
    assert haversine_distance_m(end, b.location) < 1.0


def test_follows_shape_rather_than_straight_line() -> None:
    shape = _l_shape()
    a = Stop(id="a", name="a", location=GeoPoint(lat=0.0, lon=0.0))
    b = Stop(id="b", name="b", location=GeoPoint(lat=0.02, lon=0.02))

    # Half way along an L of two equal legs is the corner.
    p = interpolate_position_on_shape(shape, a, b, 0.5)
    assert p.lat == pytest.approx(0.0, abs=1e-4)
    assert p.lon == pytest.approx(0.02, abs=1e-4)


def test_distance_along_path_is_monotonic_in_progress() -> None:
    shape = _l_shape()
    a = Stop(id="a", name="a", location=GeoPoint(lat=0.0, lon=0.0))
    b = Stop(id="b", name="b", location=GeoPoint(lat=0.02, lon=0.02))

    def along(p: GeoPoint) -> float:
        # Distance from start measured along the L.
        if p.lat <= 1e-12:
            return haversine_distance_m(shape[0], p)
        return haversine_distance_m(shape[0], shape[2]) + haversine_distance_m(
            shape[2], p
        )

    walked = [
        along(interpolate_position_on_shape(shape, a, b, i / 20)) for i in range(21)
    ]
    assert walked == sorted(walked)


def test_stops_are_snapped_to_nearest_vertices() -> None:
    shape = _l_shape()
    # Stops slightly off the polyline: only the sub-path between vertices 1 and 3 is used.
    a = Stop(id="a", name="a", location=GeoPoint(lat=0.0005, lon=0.0101))
    b = Stop(id="b", name="b", location=GeoPoint(lat=0.0101, lon=0.0205))

    start = interpolate_position_on_shape(shape, a, b, 0.0)
    end = interpolate_position_on_shape(shape, a, b, 1.0)

    assert start == shape[1]
    assert end.lat == pytest.approx(shape[3].lat)
    assert end.lon == pytest.approx(shape[3].lon)


def test_backwards_stop_order_collapses_to_from_stop() -> None:
    shape = _l_shape()
    # "to" lies before "from" on the shape; the forward search can only return the
    # from index, so the vehicle stays at the from stop.
    a = Stop(id="a", name="a", location=GeoPoint(lat=0.02, lon=0.02))
    b = Stop(id="b", name="b", location=GeoPoint(lat=0.0, lon=0.0))

    assert interpolate_position_on_shape(shape, a, b, 0.5) == a.location


def test_zero_length_segment_does_not_divide_by_zero() -> None:
    shape = (
        GeoPoint(lat=0.0, lon=0.0),
        GeoPoint(lat=0.0, lon=0.0),
        GeoPoint(lat=0.0, lon=0.01),
    )
    a = Stop(id="a", name="a", location=GeoPoint(lat=0.0, lon=0.0))
    b = Stop(id="b", name="b", location=GeoPoint(lat=0.0, lon=0.01))

    assert interpolate_position_on_shape(shape, a, b, 0.0) == shape[0]

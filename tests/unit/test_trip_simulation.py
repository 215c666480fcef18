from __future__ import annotations

from datetime import date

import pytest

from src.domain.algorithms.service_calendar import time_to_seconds
from src.domain.algorithms.trip_simulation import (
    TripState,
    compute_active_vehicles,
    locate_trip,
)
from src.domain.models import (
    GeoPoint,
    ServiceCalendar,
    Stop,
    StopTime,
    TransitFeed,
    TransitRoute,
    Trip,
    VehicleStatus,
)

THURSDAY = date(2026, 1, 8)
SUNDAY = date(2026, 1, 11)

STOPS = {
    "A": Stop(id="A", name="Alpha", location=GeoPoint(lat=0.0, lon=0.0)),
    "B": Stop(id="B", name="Beta", location=GeoPoint(lat=0.0, lon=0.02)),
    "C": Stop(id="C", name="Gamma", location=GeoPoint(lat=0.0, lon=0.04)),
}

CALENDAR = {
    "WK": ServiceCalendar(
        service_id="WK",
        monday=True,
        tuesday=True,
        wednesday=True,
        thursday=True,
        friday=True,
        start_date="20260101",
        end_date="20261231",
    )
}


def _st(stop_id: str, arrival: str, departure: str | None = None) -> StopTime:
    departure = departure or arrival
    return StopTime(
        stop_id=stop_id,
        arrival_time=arrival,
        departure_time=departure,
        arrival_s=time_to_seconds(arrival),
        departure_s=time_to_seconds(departure),
    )


def _feed(*trips: Trip, shapes=None, stops=None) -> TransitFeed:
    return TransitFeed(
        routes=(TransitRoute(route_id="R1", short_name="1"),),
        stops_by_id=STOPS if stops is None else stops,
        shapes_by_id=shapes or {},
        schedule_by_route={"R1": trips},
        calendar_by_service=CALENDAR,
    )


# 08:00:00 depart A, 08:05:00 arrive B, dwell until 08:06:00, 08:10:00 arrive C.
MORNING = Trip(
    trip_id="T1",
    route_id="R1",
    service_id="WK",
    shape_id="S1",
    headsign="Gamma",
    stop_times=(
        _st("A", "08:00:00", "08:00:00"),
        _st("B", "08:05:00", "08:06:00"),
        _st("C", "08:10:00", "08:10:00"),
    ),
)

LINE_SHAPE = {
    "S1": (
        GeoPoint(lat=0.0, lon=0.0),
        GeoPoint(lat=0.0, lon=0.01),
        GeoPoint(lat=0.0, lon=0.02),
        GeoPoint(lat=0.0, lon=0.03),
        GeoPoint(lat=0.0, lon=0.04),
    )
}


@pytest.mark.parametrize("t", [28500, 29700])
def test_trip_outside_its_time_window_is_excluded(t: int) -> None:
    feed = _feed(MORNING, shapes=LINE_SHAPE)
    assert compute_active_vehicles(feed, t, today=THURSDAY) == ()


def test_trip_within_window_is_included() -> None:
    feed = _feed(MORNING, shapes=LINE_SHAPE)
    out = compute_active_vehicles(feed, 29000, today=THURSDAY)

    assert len(out) == 1
    assert out[0].trip_id == "T1"
    assert out[0].route_id == "R1"
    assert out[0].route is not None and out[0].route.short_name == "1"
    assert out[0].status in (VehicleStatus.MOVING, VehicleStatus.DWELLING)


def test_moving_between_stops_follows_progress() -> None:
    feed = _feed(MORNING, shapes=LINE_SHAPE)
    # 08:02:30 is half way from A to B.
    (v,) = compute_active_vehicles(feed, 28800 + 150, today=THURSDAY)

    assert v.status is VehicleStatus.MOVING
    assert v.stop_id is None
    assert v.position.lat == pytest.approx(0.0)
    assert v.position.lon == pytest.approx(0.01)


def test_dwelling_at_intermediate_stop() -> None:
    feed = _feed(MORNING, shapes=LINE_SHAPE)
    (v,) = compute_active_vehicles(feed, 28800 + 330, today=THURSDAY)

    assert v.status is VehicleStatus.DWELLING
    assert v.stop_id == "B"
    assert v.position == STOPS["B"].location


def test_arrival_instant_counts_as_moving_at_the_stop() -> None:
    feed = _feed(MORNING, shapes=LINE_SHAPE)
    (v,) = compute_active_vehicles(feed, 28800 + 300, today=THURSDAY)

    assert v.status is VehicleStatus.MOVING
    assert v.position.lon == pytest.approx(0.02)


def test_last_arrival_is_still_running() -> None:
    feed = _feed(MORNING, shapes=LINE_SHAPE)
    (v,) = compute_active_vehicles(feed, 29400, today=THURSDAY)
    assert v.position.lon == pytest.approx(0.04)


def test_inactive_service_is_excluded() -> None:
    feed = _feed(MORNING, shapes=LINE_SHAPE)
    assert compute_active_vehicles(feed, 29000, today=SUNDAY) == ()


def test_unknown_stop_excludes_trip_silently() -> None:
    stops = {"A": STOPS["A"], "C": STOPS["C"]}
    feed = _feed(MORNING, shapes=LINE_SHAPE, stops=stops)

    assert compute_active_vehicles(feed, 28900, today=THURSDAY) == ()
    assert compute_active_vehicles(feed, 29150, today=THURSDAY) == ()


def test_missing_shape_falls_back_to_from_stop() -> None:
    feed = _feed(MORNING, shapes={})
    (v,) = compute_active_vehicles(feed, 28900, today=THURSDAY)

    assert v.status is VehicleStatus.MOVING
    assert v.position == STOPS["A"].location


def test_trip_without_stop_times_is_not_located() -> None:
    empty = Trip(trip_id="T2", route_id="R1", service_id="WK")
    feed = _feed(empty)

    assert locate_trip(feed, empty, 28800) is None
    assert compute_active_vehicles(feed, 28800, today=THURSDAY) == ()


def test_departure_instant_starts_the_next_segment() -> None:
    feed = _feed(MORNING, shapes=LINE_SHAPE)
    # Dwelling at B ends at 08:06:00 (exclusive); the vehicle is then leaving B.
    state = locate_trip(feed, MORNING, 28800 + 360)

    assert isinstance(state, TripState)
    assert state.status is VehicleStatus.MOVING
    assert state.position.lon == pytest.approx(0.02)


def test_single_stop_trip_never_runs() -> None:
    lonely = Trip(
        trip_id="T3",
        route_id="R1",
        service_id="WK",
        stop_times=(_st("A", "08:00:00", "08:00:00"),),
    )
    feed = _feed(lonely)
    assert compute_active_vehicles(feed, 28800, today=THURSDAY) == ()


def test_zero_length_segment_puts_vehicle_at_next_stop() -> None:
    instant = Trip(
        trip_id="T4",
        route_id="R1",
        service_id="WK",
        stop_times=(_st("A", "08:00:00"), _st("B", "08:00:00")),
    )
    feed = _feed(instant, shapes=LINE_SHAPE)
    (v,) = compute_active_vehicles(feed, 28800, today=THURSDAY)

    assert v.status is VehicleStatus.MOVING


def test_route_filter_and_repeatability() -> None:
    feed = _feed(MORNING, shapes=LINE_SHAPE)

    assert compute_active_vehicles(feed, 29000, today=THURSDAY, route_ids={"R9"}) == ()
    first = compute_active_vehicles(feed, 29000, today=THURSDAY, route_ids={"R1"})
    second = compute_active_vehicles(feed, 29000, today=THURSDAY, route_ids={"R1"})
    assert first == second


def test_end_to_end_midpoint_of_straight_shape() -> None:
    stops = {
        "A": Stop(id="A", name="A", location=GeoPoint(lat=6.10, lon=102.20)),
        "B": Stop(id="B", name="B", location=GeoPoint(lat=6.14, lon=102.26)),
    }
    trip = Trip(
        trip_id="T1",
        route_id="R1",
        service_id="WK",
        shape_id="S1",
        stop_times=(_st("A", "08:00:00"), _st("B", "08:10:00")),
    )
    feed = _feed(
        trip,
        stops=stops,
        shapes={"S1": (stops["A"].location, stops["B"].location)},
    )

    out = compute_active_vehicles(feed, 28800 + 300, today=THURSDAY)

    assert len(out) == 1
    assert out[0].position.lat == pytest.approx(6.12)
    assert out[0].position.lon == pytest.approx(102.23)

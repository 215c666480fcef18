from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Collection

from src.domain.algorithms.service_calendar import is_service_active
from src.domain.algorithms.shape_interpolation import interpolate_position_on_shape
from src.domain.models import (
    ActiveVehicle,
    GeoPoint,
    TransitFeed,
    TransitRoute,
    Trip,
    VehicleStatus,
)


@dataclass(frozen=True, slots=True)
class TripState:
    """Status and position of one running trip at a given instant."""

    status: VehicleStatus
    position: GeoPoint
    stop_id: str | None = None


def compute_active_vehicles(
    feed: TransitFeed,
    simulated_time_s: float,
    *,
    today: date | None = None,
    route_ids: Collection[str] | None = None,
) -> tuple[ActiveVehicle, ...]:
    """All vehicles running at simulated_time_s (seconds since midnight).

    Every trip is evaluated from scratch; nothing is carried between calls.
    Trips whose service does not run `today`, that have not started or have
    already finished, or whose stops cannot be resolved are left out.
    """

    today = today or date.today()
    out: list[ActiveVehicle] = []

    for route_id, trips in feed.schedule_by_route.items():
        if route_ids and route_id not in route_ids:
            continue
        route: TransitRoute | None = feed.routes_by_id.get(route_id)

        for trip in trips:
            if not is_service_active(trip.service_id, feed.calendar_by_service, today):
                continue
            state = locate_trip(feed, trip, simulated_time_s)
            if state is None:
                continue
            out.append(
                ActiveVehicle(
                    trip=trip,
                    route=route,
                    position=state.position,
                    status=state.status,
                    stop_id=state.stop_id,
                )
            )

    return tuple(out)


def locate_trip(
    feed: TransitFeed, trip: Trip, simulated_time_s: float
) -> TripState | None:
    """Where a single trip is at simulated_time_s, or None if it is not running.

    Consecutive stop-time pairs are scanned in order and the first match wins:
    between departure(i) and arrival(i+1) the vehicle is moving along the shape;
    between arrival(i) and departure(i) it is dwelling at stop i.
    """

    if not trip.stop_times:
        return None

    start_s = trip.first_stop_time.departure_s
    end_s = trip.last_stop_time.arrival_s
    if not (start_s <= simulated_time_s <= end_s):
        return None

    for a, b in zip(trip.stop_times, trip.stop_times[1:]):
        dep_s = a.departure_s
        arr_s = b.arrival_s

        if dep_s <= simulated_time_s <= arr_s:
            stop_from = feed.stops_by_id.get(a.stop_id)
            stop_to = feed.stops_by_id.get(b.stop_id)
            if stop_from is None or stop_to is None:
                return None

            span_s = arr_s - dep_s
            progress = (simulated_time_s - dep_s) / span_s if span_s > 0 else 1.0
            shape = feed.shapes_by_id.get(trip.shape_id) if trip.shape_id else None
            return TripState(
                status=VehicleStatus.MOVING,
                position=interpolate_position_on_shape(
                    shape, stop_from, stop_to, progress
                ),
            )

        if a.arrival_s <= simulated_time_s < dep_s:
            stop = feed.stops_by_id.get(a.stop_id)
            if stop is None:
                return None
            return TripState(
                status=VehicleStatus.DWELLING,
                position=stop.location,
                stop_id=stop.id,
            )

    # Gap in stop-time coverage.
    return None

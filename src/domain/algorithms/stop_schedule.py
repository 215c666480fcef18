from __future__ import annotations

import bisect
import logging
import math
from datetime import date
from types import MappingProxyType
from typing import Mapping

from src.domain.algorithms.service_calendar import is_service_active, truncate_hhmm
from src.domain.models import (
    NextRouteTrip,
    ServiceCalendar,
    StopScheduleEntry,
    TransitFeed,
    Trip,
)

logger = logging.getLogger(__name__)

StopScheduleIndex = Mapping[str, tuple[StopScheduleEntry, ...]]


def build_stop_schedule_index(feed: TransitFeed) -> StopScheduleIndex:
    """Departures per stop across all trips, sorted by departure time.

    Trips of routes missing from the routes table are left out. The index is
    immutable; reloading the feed means building a new one.
    """

    by_stop: dict[str, list[StopScheduleEntry]] = {}
    for route_id, trips in feed.schedule_by_route.items():
        route = feed.routes_by_id.get(route_id)
        if route is None:
            logger.debug("Skipping schedule of unknown route %s", route_id)
            continue

        for trip in trips:
            for st in trip.stop_times:
                by_stop.setdefault(st.stop_id, []).append(
                    StopScheduleEntry(
                        departure_s=st.departure_s,
                        route=route,
                        trip_id=trip.trip_id,
                        service_id=trip.service_id,
                        headsign=trip.headsign,
                    )
                )

    # list.sort is stable: equal departures keep insertion order.
    index: dict[str, tuple[StopScheduleEntry, ...]] = {}
    for stop_id, entries in by_stop.items():
        entries.sort(key=lambda e: e.departure_s)
        index[stop_id] = tuple(entries)
    return MappingProxyType(index)


def get_next_arrival(
    stop_id: str,
    current_time_s: float,
    index: StopScheduleIndex,
    calendar_by_service: Mapping[str, ServiceCalendar],
    *,
    today: date | None = None,
) -> StopScheduleEntry | None:
    """First departure strictly after current_time_s whose service runs today.

    `today` defaults to the real calendar date; the simulated clock only moves
    the time of day.
    """

    entries = index.get(stop_id)
    if not entries:
        return None

    today = today or date.today()
    start = bisect.bisect_right(entries, current_time_s, key=lambda e: e.departure_s)
    for entry in entries[start:]:
        if is_service_active(entry.service_id, calendar_by_service, today):
            return entry
    return None


def get_next_route_trip(
    route_id: str,
    schedule_by_route: Mapping[str, tuple[Trip, ...]],
    calendar_by_service: Mapping[str, ServiceCalendar],
    current_time_s: float,
    *,
    today: date | None = None,
) -> NextRouteTrip | None:
    """Next trip of a route leaving its first stop after current_time_s.

    Returns None at end of service.
    """

    trips = schedule_by_route.get(route_id)
    if not trips:
        return None

    today = today or date.today()
    active = [
        t
        for t in trips
        if t.stop_times and is_service_active(t.service_id, calendar_by_service, today)
    ]
    active.sort(key=lambda t: t.first_stop_time.departure_s)

    for trip in active:
        if trip.first_stop_time.departure_s > current_time_s:
            return NextRouteTrip(
                trip_id=trip.trip_id,
                service_id=trip.service_id,
                start_time=truncate_hhmm(trip.first_stop_time.departure_time),
                end_time=truncate_hhmm(trip.last_stop_time.arrival_time),
                headsign=trip.headsign,
            )
    return None


def minutes_away(entry: StopScheduleEntry, current_time_s: float) -> int:
    return math.floor((entry.departure_s - current_time_s) / 60)

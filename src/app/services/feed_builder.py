from __future__ import annotations

import logging
from typing import Any, Mapping

from src.app.ports.output import FeedTables
from src.domain.algorithms.route_colors import assign_route_colors
from src.domain.algorithms.service_calendar import time_to_seconds
from src.domain.exceptions import FeedFormatError
from src.domain.models import (
    GeoPoint,
    ServiceCalendar,
    Stop,
    StopTime,
    TransitFeed,
    TransitRoute,
    Trip,
)

logger = logging.getLogger(__name__)

_WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


def _text(raw: Any) -> str | None:
    if raw is None:
        return None
    value = str(raw).strip()
    return value or None


def _flag(raw: Any) -> bool:
    if isinstance(raw, str):
        return raw.strip().lower() in {"1", "true", "yes"}
    return bool(raw)


def _mapping(tables: FeedTables, name: str) -> Mapping[str, Any]:
    value = getattr(tables, name)
    if not isinstance(value, Mapping):
        raise FeedFormatError(f"{name} table must be an object keyed by id")
    return value


def _parse_routes(raw: Any) -> tuple[TransitRoute, ...]:
    if not isinstance(raw, list):
        raise FeedFormatError("routes table must be a list")

    routes: list[TransitRoute] = []
    for row in raw:
        route_id = _text(row.get("id")) if isinstance(row, Mapping) else None
        if not route_id:
            raise FeedFormatError(f"Route without id: {row!r}")
        routes.append(
            TransitRoute(
                route_id=route_id,
                short_name=_text(row.get("shortName")),
                long_name=_text(row.get("longName")),
                color=_text(row.get("color")),
                text_color=_text(row.get("textColor")),
            )
        )
    return tuple(routes)


def _parse_stops(raw: Mapping[str, Any]) -> dict[str, Stop]:
    stops: dict[str, Stop] = {}
    for stop_id, row in raw.items():
        stops[stop_id] = Stop(
            id=stop_id,
            name=_text(row.get("name")) or stop_id,
            location=GeoPoint(lat=float(row["lat"]), lon=float(row["lon"])),
        )
    return stops


def _parse_shapes(raw: Mapping[str, Any]) -> dict[str, tuple[GeoPoint, ...]]:
    return {
        shape_id: tuple(GeoPoint.from_pair(pair) for pair in points)
        for shape_id, points in raw.items()
    }


def _parse_stop_time(st: Mapping[str, Any]) -> StopTime | None:
    """A timed stop, or None for a row whose times are blank or unparseable.

    GTFS leaves arrival/departure empty on non-timepoint stops; those rows are
    skipped so the trip interpolates between its neighbouring timed stops.
    """

    arrival = str(st["arrival"]).strip()
    departure = str(st["departure"]).strip()
    try:
        arrival_s = time_to_seconds(arrival)
        departure_s = time_to_seconds(departure)
    except ValueError:
        return None
    return StopTime(
        stop_id=str(st["stopId"]),
        arrival_time=arrival,
        departure_time=departure,
        arrival_s=arrival_s,
        departure_s=departure_s,
    )


def _parse_trip(route_id: str, row: Mapping[str, Any]) -> Trip:
    trip_id = str(row["tripId"])
    raw_stop_times = row.get("stops") or ()
    stop_times = tuple(
        st for st in map(_parse_stop_time, raw_stop_times) if st is not None
    )
    if len(stop_times) < len(raw_stop_times):
        logger.debug(
            "Trip %s: skipped %d untimed stop times",
            trip_id,
            len(raw_stop_times) - len(stop_times),
        )
    return Trip(
        trip_id=trip_id,
        route_id=route_id,
        service_id=str(row.get("serviceId") or ""),
        shape_id=_text(row.get("shapeId")),
        headsign=_text(row.get("headsign")),
        stop_times=stop_times,
    )


def _parse_schedule(raw: Mapping[str, Any]) -> dict[str, tuple[Trip, ...]]:
    schedule: dict[str, tuple[Trip, ...]] = {}
    dropped = 0
    for route_id, rows in raw.items():
        trips: list[Trip] = []
        for row in rows:
            trip = _parse_trip(route_id, row)
            if not trip.stop_times:
                dropped += 1
                continue
            trips.append(trip)
        schedule[route_id] = tuple(trips)

    if dropped:
        logger.info("Dropped %d trips without stop times", dropped)
    return schedule


def _parse_calendar(raw: Mapping[str, Any]) -> dict[str, ServiceCalendar]:
    calendar: dict[str, ServiceCalendar] = {}
    for service_id, row in raw.items():
        flags = {day: _flag(row.get(day)) for day in _WEEKDAYS}
        calendar[service_id] = ServiceCalendar(
            service_id=service_id,
            start_date=str(row.get("startDate") or ""),
            end_date=str(row.get("endDate") or ""),
            **flags,
        )
    return calendar


def build_feed(tables: FeedTables) -> TransitFeed:
    """Turn the raw lookup tables into an immutable TransitFeed.

    Raises FeedFormatError when a table does not have the expected structure.
    """

    try:
        routes = assign_route_colors(_parse_routes(tables.routes))
        stops_by_id = _parse_stops(_mapping(tables, "stops"))
        shapes_by_id = _parse_shapes(_mapping(tables, "shapes"))
        schedule_by_route = _parse_schedule(_mapping(tables, "schedule"))
        calendar_by_service = _parse_calendar(_mapping(tables, "calendar"))
    except FeedFormatError:
        raise
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise FeedFormatError(f"Malformed feed table: {exc!r}") from exc

    return TransitFeed(
        routes=routes,
        stops_by_id=stops_by_id,
        shapes_by_id=shapes_by_id,
        schedule_by_route=schedule_by_route,
        calendar_by_service=calendar_by_service,
    )

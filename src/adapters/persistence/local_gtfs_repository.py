from __future__ import annotations

import asyncio
import csv
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from src.app.ports.output import FeedTables, IFeedRepository
from src.domain.exceptions import FeedFormatError, FeedLoadError

GTFS_FILES: tuple[str, ...] = (
    "stops.txt",
    "shapes.txt",
    "routes.txt",
    "trips.txt",
    "stop_times.txt",
    "calendar.txt",
)

DEFAULT_ROUTE_COLOR = "#3b82f6"
DEFAULT_TEXT_COLOR = "#ffffff"

_WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

Rows = list[dict[str, str]]


def _cell(row: dict[str, str], name: str) -> str:
    return (row.get(name) or "").strip()


def _read_rows(path: Path) -> Rows:
    with path.open("r", encoding="utf-8-sig", newline="") as fp:
        return list(csv.DictReader(fp))


def _hex_color(raw: str, default: str) -> str:
    return f"#{raw}" if raw else default


def flatten_stops(rows: Rows) -> dict[str, Any]:
    stops: dict[str, Any] = {}
    for row in rows:
        stop_id = _cell(row, "stop_id")
        if not stop_id:
            continue
        stops[stop_id] = {
            "name": _cell(row, "stop_name"),
            "lat": float(row["stop_lat"]),
            "lon": float(row["stop_lon"]),
        }
    return stops


def flatten_shapes(rows: Rows) -> dict[str, list[list[float]]]:
    tmp: dict[str, list[tuple[int, float, float]]] = {}
    for row in rows:
        shape_id = _cell(row, "shape_id")
        if not shape_id:
            continue
        try:
            seq = int(row.get("shape_pt_sequence") or 0)
            lat = float(row["shape_pt_lat"])
            lon = float(row["shape_pt_lon"])
        except (TypeError, ValueError, KeyError):
            continue
        tmp.setdefault(shape_id, []).append((seq, lat, lon))

    shapes: dict[str, list[list[float]]] = {}
    for shape_id, pts in tmp.items():
        pts.sort(key=lambda x: x[0])
        shapes[shape_id] = [[lat, lon] for _, lat, lon in pts]
    return shapes


def flatten_routes(rows: Rows) -> list[dict[str, Any]]:
    return [
        {
            "id": _cell(row, "route_id"),
            "shortName": _cell(row, "route_short_name"),
            "longName": _cell(row, "route_long_name"),
            "color": _hex_color(_cell(row, "route_color"), DEFAULT_ROUTE_COLOR),
            "textColor": _hex_color(
                _cell(row, "route_text_color"), DEFAULT_TEXT_COLOR
            ),
        }
        for row in rows
        if _cell(row, "route_id")
    ]


def flatten_calendar(rows: Rows) -> dict[str, Any]:
    calendar: dict[str, Any] = {}
    for row in rows:
        service_id = _cell(row, "service_id")
        if not service_id:
            continue
        entry: dict[str, Any] = {day: _cell(row, day) == "1" for day in _WEEKDAYS}
        entry["startDate"] = _cell(row, "start_date")
        entry["endDate"] = _cell(row, "end_date")
        calendar[service_id] = entry
    return calendar


def flatten_schedule(trip_rows: Rows, stop_time_rows: Rows) -> dict[str, Any]:
    """Group trips by route, each with its stop times in stop_sequence order.

    Trips without any stop times are dropped.
    """

    stop_times_by_trip: dict[str, list[tuple[int, dict[str, str]]]] = {}
    for row in stop_time_rows:
        trip_id = _cell(row, "trip_id")
        stop_id = _cell(row, "stop_id")
        if not trip_id or not stop_id:
            continue
        seq = int(row.get("stop_sequence") or 0)
        stop_times_by_trip.setdefault(trip_id, []).append(
            (
                seq,
                {
                    "stopId": stop_id,
                    "arrival": _cell(row, "arrival_time"),
                    "departure": _cell(row, "departure_time"),
                },
            )
        )

    schedule: dict[str, list[dict[str, Any]]] = {}
    for row in trip_rows:
        route_id = _cell(row, "route_id")
        trip_id = _cell(row, "trip_id")
        if not route_id or not trip_id:
            continue
        trips = schedule.setdefault(route_id, [])

        entries = stop_times_by_trip.get(trip_id)
        if not entries:
            continue
        entries.sort(key=lambda x: x[0])
        trips.append(
            {
                "tripId": trip_id,
                "serviceId": _cell(row, "service_id"),
                "shapeId": _cell(row, "shape_id"),
                "headsign": _cell(row, "trip_headsign"),
                "stops": [st for _, st in entries],
            }
        )
    return schedule


@dataclass(slots=True)
class LocalGtfsRepository(IFeedRepository):
    """Flattens a GTFS directory of .txt files into the feed tables.

    Env vars:
      - FEED_PATH: directory containing the GTFS files (default: data/gtfs)
    """

    base_path: str | Path | None = None

    def _base(self) -> Path:
        value = self.base_path or os.getenv("FEED_PATH") or "data/gtfs"
        return Path(value)

    def flatten(self) -> FeedTables:
        """Synchronous variant, used by the ETL command."""

        base = self._base()
        rows = {name: self._read(base / name) for name in GTFS_FILES}
        return self._assemble(rows)

    async def load_tables(self) -> FeedTables:
        base = self._base()
        results = await asyncio.gather(
            *(asyncio.to_thread(self._read, base / name) for name in GTFS_FILES)
        )
        return self._assemble(dict(zip(GTFS_FILES, results)))

    def _read(self, path: Path) -> Rows:
        try:
            return _read_rows(path)
        except OSError as exc:
            raise FeedLoadError(f"Cannot read GTFS file {path}: {exc}") from exc

    def _assemble(self, rows: dict[str, Rows]) -> FeedTables:
        try:
            return FeedTables(
                routes=flatten_routes(rows["routes.txt"]),
                stops=flatten_stops(rows["stops.txt"]),
                shapes=flatten_shapes(rows["shapes.txt"]),
                schedule=flatten_schedule(rows["trips.txt"], rows["stop_times.txt"]),
                calendar=flatten_calendar(rows["calendar.txt"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise FeedFormatError(f"Malformed GTFS data: {exc!r}") from exc

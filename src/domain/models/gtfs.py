from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from .geo import GeoPoint
from .stop import Stop


@dataclass(frozen=True, slots=True)
class TransitRoute:
    route_id: str
    short_name: str | None = None
    long_name: str | None = None
    color: str | None = None  # '#rrggbb'
    text_color: str | None = None  # '#rrggbb'


@dataclass(frozen=True, slots=True)
class StopTime:
    """One scheduled call of a trip at a stop.

    The raw GTFS strings are kept for display; the `_s` fields are seconds since
    service day midnight and may exceed 24h for trips running past midnight.
    """

    stop_id: str
    arrival_time: str
    departure_time: str
    arrival_s: int
    departure_s: int


@dataclass(frozen=True, slots=True)
class Trip:
    trip_id: str
    route_id: str
    service_id: str
    shape_id: str | None = None
    headsign: str | None = None
    stop_times: tuple[StopTime, ...] = ()

    @property
    def first_stop_time(self) -> StopTime:
        return self.stop_times[0]

    @property
    def last_stop_time(self) -> StopTime:
        return self.stop_times[-1]


@dataclass(frozen=True, slots=True)
class ServiceCalendar:
    """A row of calendar.txt. Dates are inclusive 'YYYYMMDD' strings."""

    service_id: str
    monday: bool = False
    tuesday: bool = False
    wednesday: bool = False
    thursday: bool = False
    friday: bool = False
    saturday: bool = False
    sunday: bool = False
    start_date: str = ""
    end_date: str = ""

    def runs_on(self, weekday_from_sunday: int) -> bool:
        """Day-of-week flag, with Sunday = 0 and Saturday = 6."""

        days = (
            self.sunday,
            self.monday,
            self.tuesday,
            self.wednesday,
            self.thursday,
            self.friday,
            self.saturday,
        )
        return bool(days[weekday_from_sunday % 7])


@dataclass(frozen=True, slots=True)
class TransitFeed:
    """In-memory lookup tables the simulation runs against.

    Built once per load and never mutated afterwards.
    """

    routes: tuple[TransitRoute, ...]
    stops_by_id: Mapping[str, Stop]
    shapes_by_id: Mapping[str, tuple[GeoPoint, ...]]
    schedule_by_route: Mapping[str, tuple[Trip, ...]]
    calendar_by_service: Mapping[str, ServiceCalendar]
    routes_by_id: Mapping[str, TransitRoute] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.routes_by_id:
            object.__setattr__(
                self, "routes_by_id", {r.route_id: r for r in self.routes}
            )

    @property
    def trip_count(self) -> int:
        return sum(len(trips) for trips in self.schedule_by_route.values())

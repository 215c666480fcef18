from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .geo import GeoPoint
from .gtfs import TransitRoute, Trip


class VehicleStatus(str, Enum):
    MOVING = "moving"
    DWELLING = "dwelling"


@dataclass(frozen=True, slots=True)
class ActiveVehicle:
    """Simulated position of a running trip at one clock value."""

    trip: Trip
    route: TransitRoute | None
    position: GeoPoint
    status: VehicleStatus
    stop_id: str | None = None  # stop being served while dwelling

    @property
    def trip_id(self) -> str:
        return self.trip.trip_id

    @property
    def route_id(self) -> str:
        return self.trip.route_id


@dataclass(frozen=True, slots=True)
class StopScheduleEntry:
    departure_s: int
    route: TransitRoute
    trip_id: str
    service_id: str
    headsign: str | None = None


@dataclass(frozen=True, slots=True)
class NextRouteTrip:
    trip_id: str
    service_id: str
    start_time: str  # 'HH:MM'
    end_time: str  # 'HH:MM'
    headsign: str | None = None

from .geo import GeoPoint
from .gtfs import ServiceCalendar, StopTime, TransitFeed, TransitRoute, Trip
from .simulation import ActiveVehicle, NextRouteTrip, StopScheduleEntry, VehicleStatus
from .stop import Stop

__all__ = [
    "ActiveVehicle",
    "GeoPoint",
    "NextRouteTrip",
    "ServiceCalendar",
    "Stop",
    "StopScheduleEntry",
    "StopTime",
    "TransitFeed",
    "TransitRoute",
    "Trip",
    "VehicleStatus",
]

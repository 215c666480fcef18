from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class GeoPointSchema(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)


class TransitRouteSchema(BaseModel):
    route_id: str
    short_name: str | None = None
    long_name: str | None = None
    color: str | None = None
    text_color: str | None = None


class RouteShapeSchema(BaseModel):
    shape_id: str
    points: list[GeoPointSchema]


class RouteShapesSchema(BaseModel):
    route_id: str
    shapes: list[RouteShapeSchema]


class StopSchema(BaseModel):
    stop_id: str
    name: str
    location: GeoPointSchema


class NextRouteTripSchema(BaseModel):
    trip_id: str
    service_id: str
    start_time: str
    end_time: str
    headsign: str | None = None


class NextTripResponseSchema(BaseModel):
    route_id: str
    at: float
    clock: str
    next_trip: NextRouteTripSchema | None = None
    end_of_service: bool


class ArrivalSchema(BaseModel):
    route: TransitRouteSchema
    trip_id: str
    service_id: str
    headsign: str | None = None
    departure_s: int
    minutes_away: int
    label: str  # 'Due' or 'N min'


class NextArrivalResponseSchema(BaseModel):
    stop_id: str
    stop_name: str
    at: float
    clock: str
    arrival: ArrivalSchema | None = None


class VehicleSchema(BaseModel):
    trip_id: str
    route_id: str
    route_short_name: str | None = None
    color: str | None = None
    headsign: str | None = None
    lat: float
    lon: float
    status: Literal["moving", "dwelling"]
    stop_id: str | None = None


class VehiclesResponseSchema(BaseModel):
    at: float
    clock: str
    computed_at: datetime
    vehicles: list[VehicleSchema]


class ClockSchema(BaseModel):
    time_s: float
    clock: str
    speed: float


class ClockUpdateSchema(BaseModel):
    time_s: float | None = Field(default=None, ge=0.0, lt=86400.0)
    clock: str | None = Field(default=None, pattern=r"^\d{1,2}:\d{2}:\d{2}$")
    speed: float | None = Field(default=None, gt=0.0)

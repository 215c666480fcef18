from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query

from src.adapters.api.dependencies import (
    get_clock_runner,
    get_simulation_clock,
    get_simulation_service,
)
from src.adapters.api.schemas.simulation import (
    ArrivalSchema,
    ClockSchema,
    ClockUpdateSchema,
    GeoPointSchema,
    NextArrivalResponseSchema,
    NextRouteTripSchema,
    NextTripResponseSchema,
    RouteShapeSchema,
    RouteShapesSchema,
    StopSchema,
    TransitRouteSchema,
    VehicleSchema,
    VehiclesResponseSchema,
)
from src.app.services.simulation_clock import ClockRunner, SimulationClock
from src.app.services.simulation_service import SimulationService
from src.domain.algorithms.service_calendar import (
    format_clock,
    time_to_seconds,
    wrap_clock,
)
from src.domain.algorithms.stop_schedule import minutes_away
from src.domain.models import TransitRoute

router = APIRouter(prefix="/simulation", tags=["simulation"])

AtQuery = Query(
    default=None,
    ge=0.0,
    lt=86400.0,
    description="Simulated seconds since midnight; defaults to the running clock.",
)


def _route_schema(r: TransitRoute) -> TransitRouteSchema:
    return TransitRouteSchema(
        route_id=r.route_id,
        short_name=r.short_name,
        long_name=r.long_name,
        color=r.color,
        text_color=r.text_color,
    )


def _clock_schema(clock: SimulationClock) -> ClockSchema:
    return ClockSchema(time_s=clock.time_s, clock=clock.label(), speed=clock.speed)


@router.get("/routes", response_model=list[TransitRouteSchema])
def list_routes(
    service: SimulationService = Depends(get_simulation_service),
) -> list[TransitRouteSchema]:
    return [_route_schema(r) for r in service.list_routes()]


@router.get("/routes/{route_id}/shapes", response_model=RouteShapesSchema)
def get_route_shapes(
    route_id: str,
    service: SimulationService = Depends(get_simulation_service),
) -> RouteShapesSchema:
    if service.get_route(route_id) is None:
        raise HTTPException(status_code=404, detail="Route not found")
    return RouteShapesSchema(
        route_id=route_id,
        shapes=[
            RouteShapeSchema(
                shape_id=shape_id,
                points=[GeoPointSchema(lat=p.lat, lon=p.lon) for p in pts],
            )
            for shape_id, pts in service.route_shapes(route_id=route_id)
        ],
    )


@router.get("/routes/{route_id}/next-trip", response_model=NextTripResponseSchema)
def get_next_route_trip(
    route_id: str,
    at: float | None = AtQuery,
    service: SimulationService = Depends(get_simulation_service),
    clock: SimulationClock = Depends(get_simulation_clock),
) -> NextTripResponseSchema:
    if service.get_route(route_id) is None:
        raise HTTPException(status_code=404, detail="Route not found")

    at_s = clock.time_s if at is None else at
    nxt = service.next_route_trip(route_id=route_id, at_s=at_s)
    return NextTripResponseSchema(
        route_id=route_id,
        at=at_s,
        clock=format_clock(at_s),
        next_trip=(
            NextRouteTripSchema(
                trip_id=nxt.trip_id,
                service_id=nxt.service_id,
                start_time=nxt.start_time,
                end_time=nxt.end_time,
                headsign=nxt.headsign,
            )
            if nxt
            else None
        ),
        end_of_service=nxt is None,
    )


@router.get("/stops", response_model=list[StopSchema])
def list_stops(
    service: SimulationService = Depends(get_simulation_service),
) -> list[StopSchema]:
    return [
        StopSchema(
            stop_id=s.id,
            name=s.name,
            location=GeoPointSchema(lat=s.lat, lon=s.lon),
        )
        for s in service.list_stops()
    ]


@router.get("/stops/{stop_id}/next-arrival", response_model=NextArrivalResponseSchema)
def get_next_arrival(
    stop_id: str,
    at: float | None = AtQuery,
    service: SimulationService = Depends(get_simulation_service),
    clock: SimulationClock = Depends(get_simulation_clock),
) -> NextArrivalResponseSchema:
    stop = service.get_stop(stop_id)
    if stop is None:
        raise HTTPException(status_code=404, detail="Stop not found")

    at_s = clock.time_s if at is None else at
    entry = service.next_arrival(stop_id=stop_id, at_s=at_s)

    arrival = None
    if entry is not None:
        mins = minutes_away(entry, at_s)
        arrival = ArrivalSchema(
            route=_route_schema(entry.route),
            trip_id=entry.trip_id,
            service_id=entry.service_id,
            headsign=entry.headsign,
            departure_s=entry.departure_s,
            minutes_away=mins,
            label="Due" if mins <= 0 else f"{mins} min",
        )

    return NextArrivalResponseSchema(
        stop_id=stop.id,
        stop_name=stop.name,
        at=at_s,
        clock=format_clock(at_s),
        arrival=arrival,
    )


@router.get("/vehicles", response_model=VehiclesResponseSchema)
def list_vehicles(
    at: float | None = AtQuery,
    route_id: list[str] | None = Query(default=None),
    service: SimulationService = Depends(get_simulation_service),
    clock: SimulationClock = Depends(get_simulation_clock),
    runner: ClockRunner = Depends(get_clock_runner),
) -> VehiclesResponseSchema:
    route_ids = set(route_id) if route_id else None

    # Without an explicit time, serve the last snapshot published by the runner.
    snapshot = runner.snapshot if at is None else None
    if snapshot is not None:
        at_s = snapshot.time_s
        computed_at = snapshot.computed_at
        vehicles = tuple(
            v for v in snapshot.vehicles if not route_ids or v.route_id in route_ids
        )
    else:
        at_s = clock.time_s if at is None else at
        computed_at = datetime.now()
        vehicles = service.active_vehicles(at_s=at_s, route_ids=route_ids)

    return VehiclesResponseSchema(
        at=at_s,
        clock=format_clock(at_s),
        computed_at=computed_at,
        vehicles=[
            VehicleSchema(
                trip_id=v.trip_id,
                route_id=v.route_id,
                route_short_name=v.route.short_name if v.route else None,
                color=v.route.color if v.route else None,
                headsign=v.trip.headsign,
                lat=v.position.lat,
                lon=v.position.lon,
                status=v.status.value,
                stop_id=v.stop_id,
            )
            for v in vehicles
        ],
    )


# Clock endpoints are async so every clock change runs on the event loop,
# alongside the runner's ticks.
@router.get("/clock", response_model=ClockSchema)
async def get_clock(
    clock: SimulationClock = Depends(get_simulation_clock),
) -> ClockSchema:
    return _clock_schema(clock)


@router.put("/clock", response_model=ClockSchema)
async def update_clock(
    req: ClockUpdateSchema,
    runner: ClockRunner = Depends(get_clock_runner),
) -> ClockSchema:
    clock = runner.clock
    if req.clock is not None:
        clock.set_time(wrap_clock(time_to_seconds(req.clock)))
    elif req.time_s is not None:
        clock.set_time(req.time_s)
    if req.speed is not None:
        clock.set_speed(req.speed)
    runner.refresh()
    return _clock_schema(clock)


@router.post("/clock/live", response_model=ClockSchema)
async def reset_clock_to_now(
    runner: ClockRunner = Depends(get_clock_runner),
) -> ClockSchema:
    runner.clock.reset_to_now()
    runner.refresh()
    return _clock_schema(runner.clock)

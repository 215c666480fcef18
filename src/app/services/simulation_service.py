from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date

from src.app.ports.output import IFeedRepository
from src.app.services.feed_builder import build_feed
from src.domain.algorithms.stop_schedule import (
    StopScheduleIndex,
    build_stop_schedule_index,
    get_next_arrival,
    get_next_route_trip,
)
from src.domain.algorithms.trip_simulation import compute_active_vehicles
from src.domain.exceptions import FeedLoadError, FeedUnavailableError
from src.domain.models import (
    ActiveVehicle,
    GeoPoint,
    NextRouteTrip,
    Stop,
    StopScheduleEntry,
    TransitFeed,
    TransitRoute,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SimulationDataset:
    feed: TransitFeed
    stop_schedules: StopScheduleIndex


@dataclass(slots=True)
class SimulationService:
    """Supports the simulated live map.

    - Loads the feed tables once and builds the stop schedule index.
    - Answers vehicle / next-arrival / next-trip queries for an explicit clock value.
    - Refuses every query until a load has fully succeeded.
    """

    feed_repository: IFeedRepository

    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)
    _dataset: SimulationDataset | None = field(default=None, init=False)
    _load_error: str | None = field(default=None, init=False)

    @property
    def is_loaded(self) -> bool:
        return self._dataset is not None

    @property
    def load_error(self) -> str | None:
        return self._load_error

    async def load(self, *, force: bool = False) -> TransitFeed:
        async with self._lock:
            if self._dataset is not None and not force:
                return self._dataset.feed

            try:
                tables = await self.feed_repository.load_tables()
                feed = build_feed(tables)
                dataset = SimulationDataset(
                    feed=feed, stop_schedules=build_stop_schedule_index(feed)
                )
            except FeedLoadError as exc:
                self._load_error = str(exc) or exc.__class__.__name__
                logger.exception("Failed to load transit feed")
                raise

            # Publish only a fully built dataset.
            self._dataset = dataset
            self._load_error = None
            logger.info(
                "Loaded transit feed: %d routes, %d stops, %d trips",
                len(feed.routes),
                len(feed.stops_by_id),
                feed.trip_count,
            )
            return feed

    def dataset(self) -> SimulationDataset:
        if self._dataset is None:
            detail = self._load_error or "Transit feed not loaded yet"
            raise FeedUnavailableError(detail)
        return self._dataset

    def list_routes(self) -> tuple[TransitRoute, ...]:
        return self.dataset().feed.routes

    def get_route(self, route_id: str) -> TransitRoute | None:
        return self.dataset().feed.routes_by_id.get(route_id)

    def get_stop(self, stop_id: str) -> Stop | None:
        return self.dataset().feed.stops_by_id.get(stop_id)

    def list_stops(self) -> tuple[Stop, ...]:
        return tuple(self.dataset().feed.stops_by_id.values())

    def route_shapes(
        self, *, route_id: str
    ) -> tuple[tuple[str, tuple[GeoPoint, ...]], ...]:
        """Distinct shapes used by a route's trips, in order of first use."""

        feed = self.dataset().feed
        seen: set[str] = set()
        out: list[tuple[str, tuple[GeoPoint, ...]]] = []
        for trip in feed.schedule_by_route.get(route_id, ()):
            if not trip.shape_id or trip.shape_id in seen:
                continue
            pts = feed.shapes_by_id.get(trip.shape_id)
            if not pts:
                continue
            seen.add(trip.shape_id)
            out.append((trip.shape_id, pts))
        return tuple(out)

    def active_vehicles(
        self,
        *,
        at_s: float,
        route_ids: set[str] | None = None,
        today: date | None = None,
    ) -> tuple[ActiveVehicle, ...]:
        return compute_active_vehicles(
            self.dataset().feed, at_s, today=today, route_ids=route_ids
        )

    def next_arrival(
        self, *, stop_id: str, at_s: float, today: date | None = None
    ) -> StopScheduleEntry | None:
        ds = self.dataset()
        return get_next_arrival(
            stop_id,
            at_s,
            ds.stop_schedules,
            ds.feed.calendar_by_service,
            today=today,
        )

    def next_route_trip(
        self, *, route_id: str, at_s: float, today: date | None = None
    ) -> NextRouteTrip | None:
        feed = self.dataset().feed
        return get_next_route_trip(
            route_id,
            feed.schedule_by_route,
            feed.calendar_by_service,
            at_s,
            today=today,
        )

from __future__ import annotations

import os
from functools import lru_cache

from src.adapters.feeds.http_feed_repository import HttpFeedRepository
from src.adapters.persistence import (
    LocalGtfsRepository,
    LocalJsonFeedRepository,
    S3FeedRepository,
)
from src.app.ports.output import IFeedRepository
from src.app.services.simulation_clock import ClockRunner, SimulationClock
from src.app.services.simulation_service import SimulationService
from src.domain.algorithms.service_calendar import time_to_seconds, wrap_clock


def build_feed_repository(source: str | None = None) -> IFeedRepository:
    """Pick the feed adapter from FEED_SOURCE: json (default), gtfs, http or s3."""

    source = (source or os.getenv("FEED_SOURCE") or "json").strip().lower()
    if source == "json":
        return LocalJsonFeedRepository()
    if source == "gtfs":
        return LocalGtfsRepository()
    if source == "http":
        return HttpFeedRepository()
    if source == "s3":
        return S3FeedRepository()
    raise RuntimeError(f"Unsupported FEED_SOURCE: {source}")


def build_simulation_clock() -> SimulationClock:
    speed = float(os.getenv("SIM_SPEED") or 1.0)
    start = (os.getenv("SIM_START") or "").strip()
    if start:
        return SimulationClock(time_s=wrap_clock(time_to_seconds(start)), speed=speed)
    return SimulationClock.starting_now(speed=speed)


@lru_cache(maxsize=1)
def get_simulation_service() -> SimulationService:
    return SimulationService(feed_repository=build_feed_repository())


@lru_cache(maxsize=1)
def get_simulation_clock() -> SimulationClock:
    return build_simulation_clock()


@lru_cache(maxsize=1)
def get_clock_runner() -> ClockRunner:
    return ClockRunner(
        service=get_simulation_service(),
        clock=get_simulation_clock(),
        interval_s=float(os.getenv("SIM_TICK_S") or 1.0),
    )

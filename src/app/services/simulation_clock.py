from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from src.app.services.simulation_service import SimulationService
from src.domain.algorithms.service_calendar import (
    SECONDS_PER_DAY,
    format_clock,
    seconds_since_midnight,
)
from src.domain.exceptions import FeedUnavailableError
from src.domain.models import ActiveVehicle

logger = logging.getLogger(__name__)

SPEED_PRESETS: tuple[int, ...] = (1, 10, 60, 600)


@dataclass(slots=True)
class SimulationClock:
    """Simulated time of day, advanced by `speed` seconds on every tick."""

    time_s: float = 0.0
    speed: float = 1.0

    def __post_init__(self) -> None:
        self.set_time(self.time_s)
        self.set_speed(self.speed)

    @staticmethod
    def starting_now(speed: float = 1.0) -> "SimulationClock":
        return SimulationClock(time_s=seconds_since_midnight(datetime.now()), speed=speed)

    def tick(self) -> float:
        nxt = self.time_s + self.speed
        # Loop at midnight.
        self.time_s = 0.0 if nxt >= SECONDS_PER_DAY else nxt
        return self.time_s

    def set_time(self, time_s: float) -> None:
        if not (0 <= time_s < SECONDS_PER_DAY):
            raise ValueError(f"Clock time must be in [0, {SECONDS_PER_DAY}): {time_s}")
        self.time_s = float(time_s)

    def set_speed(self, speed: float) -> None:
        if speed <= 0:
            raise ValueError(f"Clock speed must be positive: {speed}")
        self.speed = float(speed)

    def reset_to_now(self, now: datetime | None = None) -> None:
        self.time_s = float(seconds_since_midnight(now or datetime.now()))
        self.speed = 1.0

    def label(self) -> str:
        return format_clock(self.time_s)


@dataclass(frozen=True, slots=True)
class VehicleSnapshot:
    time_s: float
    vehicles: tuple[ActiveVehicle, ...]
    computed_at: datetime


@dataclass(slots=True)
class ClockRunner:
    """Drives the clock at a fixed wall-clock interval.

    Each tick advances the clock and recomputes the whole vehicle set; the new
    snapshot replaces the previous one only once it is complete, so cancelling
    the runner leaves the last finished snapshot in place.
    """

    service: SimulationService
    clock: SimulationClock
    interval_s: float = 1.0
    on_snapshot: Callable[[VehicleSnapshot], None] | None = None

    snapshot: VehicleSnapshot | None = field(default=None, init=False)
    ticks: int = field(default=0, init=False)

    def step(self) -> VehicleSnapshot | None:
        self.clock.tick()
        self.ticks += 1
        return self.refresh()

    def refresh(self) -> VehicleSnapshot | None:
        """Recompute the snapshot at the current clock time without ticking."""

        now_s = self.clock.time_s
        try:
            vehicles = self.service.active_vehicles(at_s=now_s)
        except FeedUnavailableError:
            logger.debug("Snapshot at %s skipped: feed unavailable", format_clock(now_s))
            return None

        snapshot = VehicleSnapshot(
            time_s=now_s, vehicles=vehicles, computed_at=datetime.now()
        )
        self.snapshot = snapshot
        logger.debug(
            "Snapshot %s: %d active vehicles", format_clock(now_s), len(vehicles)
        )
        if self.on_snapshot is not None:
            self.on_snapshot(snapshot)
        return snapshot

    async def run(self, *, max_ticks: int | None = None) -> None:
        while max_ticks is None or self.ticks < max_ticks:
            started = time.monotonic()
            self.step()
            elapsed = time.monotonic() - started
            await asyncio.sleep(max(0.0, self.interval_s - elapsed))

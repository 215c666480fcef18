from __future__ import annotations

import asyncio
import logging
import os
from collections import Counter

from src.adapters.api.dependencies import build_feed_repository, build_simulation_clock
from src.app.services.simulation_clock import ClockRunner, VehicleSnapshot
from src.app.services.simulation_service import SimulationService
from src.domain.algorithms.service_calendar import format_clock
from src.domain.exceptions import FeedLoadError

logger = logging.getLogger(__name__)


def _log_snapshot(snapshot: VehicleSnapshot) -> None:
    by_status = Counter(v.status.value for v in snapshot.vehicles)
    logger.info(
        "%s  active=%d moving=%d dwelling=%d",
        format_clock(snapshot.time_s),
        len(snapshot.vehicles),
        by_status.get("moving", 0),
        by_status.get("dwelling", 0),
    )


async def run() -> int:
    service = SimulationService(feed_repository=build_feed_repository())
    try:
        await service.load()
    except FeedLoadError as exc:
        logger.error("Simulation halted, feed unavailable: %s", exc)
        return 1

    max_ticks_raw = os.getenv("SIM_MAX_TICKS")
    runner = ClockRunner(
        service=service,
        clock=build_simulation_clock(),
        interval_s=float(os.getenv("SIM_TICK_S") or 1.0),
        on_snapshot=_log_snapshot,
    )
    await runner.run(max_ticks=int(max_ticks_raw) if max_ticks_raw else None)
    return 0


def main() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        raise SystemExit(asyncio.run(run()))
    except KeyboardInterrupt:
        logger.info("Simulation stopped")


if __name__ == "__main__":
    main()

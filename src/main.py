from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from src.adapters.api.controllers.simulation import router as simulation_router
from src.adapters.api.dependencies import get_clock_runner, get_simulation_service
from src.adapters.aws import env_bool
from src.app.services.simulation_service import SimulationService
from src.domain.exceptions import FeedError, FeedLoadError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Load the feed once, then keep the simulated clock ticking in the background."""

    service = get_simulation_service()
    try:
        await service.load()
    except FeedLoadError:
        # Queries answer 503 with the load error until a reload succeeds.
        pass

    task: asyncio.Task[None] | None = None
    if env_bool("SIM_AUTOPLAY", True):
        # /simulation/vehicles serves the runner's latest snapshot.
        task = asyncio.create_task(get_clock_runner().run())

    try:
        yield
    finally:
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task


app = FastAPI(title="Transit Simulator", lifespan=lifespan)
app.include_router(simulation_router)


@app.exception_handler(FeedError)
async def feed_error_handler(
    request: Request, exc: FeedError
) -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Ensure API errors are JSON so the map frontend can display them."""

    logging.getLogger("uvicorn.error").exception(
        "Unhandled exception", extra={"path": str(request.url.path)}
    )

    reveal = env_bool("TRANSIT_REVEAL_ERRORS", False)
    if reveal or isinstance(exc, (FileNotFoundError, RuntimeError, ValueError)):
        detail = str(exc) or exc.__class__.__name__
    else:
        detail = "Internal Server Error"

    return JSONResponse(status_code=500, content={"detail": detail})


@app.get("/health")
def health(
    service: SimulationService = Depends(get_simulation_service),
) -> dict[str, str]:
    return {"status": "ok", "feed": "loaded" if service.is_loaded else "unavailable"}


@app.post("/simulation/reload")
async def reload_feed(
    service: SimulationService = Depends(get_simulation_service),
) -> dict[str, str]:
    await service.load(force=True)
    return {"status": "reloaded"}

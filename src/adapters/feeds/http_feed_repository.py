from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass

import httpx

from src.adapters.persistence.local_json_feed_repository import decode_tables
from src.app.ports.output import TABLE_NAMES, FeedTables, IFeedRepository
from src.domain.exceptions import FeedLoadError


@dataclass(slots=True)
class HttpFeedRepository(IFeedRepository):
    """Fetches the flattened JSON tables over HTTP, all in parallel.

    Env vars:
      - FEED_BASE_URL: base URL serving routes.json, stops.json, ... (e.g. /data)
      - FEED_TIMEOUT_S: request timeout (default 30)
    """

    base_url: str | None = None
    timeout_s: float = 30.0

    def __post_init__(self) -> None:
        if self.base_url is None:
            self.base_url = os.getenv("FEED_BASE_URL")
        if os.getenv("FEED_TIMEOUT_S"):
            self.timeout_s = float(os.environ["FEED_TIMEOUT_S"])

    def _url(self, name: str) -> str:
        return f"{(self.base_url or '').rstrip('/')}/{name}.json"

    async def load_tables(self) -> FeedTables:
        if not self.base_url:
            raise FeedLoadError("Missing FEED_BASE_URL")

        try:
            async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                responses = await asyncio.gather(
                    *(client.get(self._url(name)) for name in TABLE_NAMES)
                )
                for resp in responses:
                    resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise FeedLoadError(f"Failed to fetch feed tables: {exc}") from exc

        return decode_tables(
            {name: resp.content for name, resp in zip(TABLE_NAMES, responses)}
        )

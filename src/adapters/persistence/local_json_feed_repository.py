from __future__ import annotations

import asyncio
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from src.app.ports.output import TABLE_NAMES, FeedTables, IFeedRepository
from src.domain.exceptions import FeedFormatError, FeedLoadError


def decode_tables(payloads: Mapping[str, bytes]) -> FeedTables:
    """Decode one JSON document per table name into FeedTables."""

    decoded = {}
    for name in TABLE_NAMES:
        raw = payloads.get(name)
        if raw is None:
            raise FeedLoadError(f"Missing feed table: {name}")
        try:
            decoded[name] = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise FeedFormatError(f"{name}.json is not valid JSON: {exc}") from exc
    return FeedTables(**decoded)


@dataclass(slots=True)
class LocalJsonFeedRepository(IFeedRepository):
    """Reads the flattened tables (routes.json, stops.json, ...) from a directory.

    Env vars:
      - FEED_PATH: directory holding the JSON tables (default: data/feed)
    """

    base_path: str | Path | None = None

    def _base(self) -> Path:
        value = self.base_path or os.getenv("FEED_PATH") or "data/feed"
        return Path(value)

    async def load_tables(self) -> FeedTables:
        base = self._base()
        contents = await asyncio.gather(
            *(asyncio.to_thread(self._read, base / f"{name}.json") for name in TABLE_NAMES)
        )
        return decode_tables(dict(zip(TABLE_NAMES, contents)))

    def _read(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as exc:
            raise FeedLoadError(f"Cannot read feed table {path}: {exc}") from exc

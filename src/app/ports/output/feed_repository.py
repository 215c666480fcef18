from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

TABLE_NAMES: tuple[str, ...] = ("routes", "stops", "shapes", "schedule", "calendar")


@dataclass(frozen=True, slots=True)
class FeedTables:
    """The flattened lookup tables produced by the feed ETL, still as plain JSON.

    - routes: [{id, shortName, longName, color, textColor}]
    - stops: {stopId: {name, lat, lon}}
    - shapes: {shapeId: [[lat, lon], ...]}
    - schedule: {routeId: [{tripId, serviceId, shapeId, headsign, stops: [...]}]}
    - calendar: {serviceId: {monday..sunday, startDate, endDate}}
    """

    routes: Any
    stops: Any
    shapes: Any
    schedule: Any
    calendar: Any


class IFeedRepository(ABC):
    """Port for fetching the feed tables.

    Implementations fetch all tables concurrently and return only once every one
    of them is available.
    """

    @abstractmethod
    async def load_tables(self) -> FeedTables:
        raise NotImplementedError

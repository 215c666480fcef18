from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True, slots=True)
class GeoPoint:
    lat: float
    lon: float

    def __post_init__(self) -> None:
        if not (-90.0 <= self.lat <= 90.0):
            raise ValueError(f"Invalid latitude: {self.lat}")
        if not (-180.0 <= self.lon <= 180.0):
            raise ValueError(f"Invalid longitude: {self.lon}")

    @staticmethod
    def from_pair(pair: Sequence[float]) -> "GeoPoint":
        """Build from a `[lat, lon]` pair as stored in the shapes table."""

        if len(pair) != 2:
            raise ValueError(f"Expected [lat, lon], got {pair!r}")
        return GeoPoint(lat=float(pair[0]), lon=float(pair[1]))

    def as_pair(self) -> tuple[float, float]:
        return (self.lat, self.lon)

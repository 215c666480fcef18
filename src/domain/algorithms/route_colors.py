from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from src.domain.models import TransitRoute

ROUTE_PALETTE: tuple[str, ...] = (
    "#FF3B30",  # red
    "#007AFF",  # blue
    "#34C759",  # green
    "#FF9500",  # orange
    "#AF52DE",  # purple
    "#5AC8FA",  # cyan
    "#FF2D55",  # pink
    "#5856D6",  # indigo
    "#FFCC00",  # yellow
    "#8E8E93",  # gray
)


def assign_route_colors(
    routes: Iterable[TransitRoute], palette: tuple[str, ...] = ROUTE_PALETTE
) -> tuple[TransitRoute, ...]:
    """Give each route a distinct display color, cycling through the palette.

    Feed colors are often missing or identical across lines, so they are replaced.
    """

    return tuple(
        replace(route, color=palette[i % len(palette)])
        for i, route in enumerate(routes)
    )

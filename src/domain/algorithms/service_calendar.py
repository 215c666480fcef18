from __future__ import annotations

from datetime import date, datetime
from typing import Mapping

from src.domain.models.gtfs import ServiceCalendar

SECONDS_PER_DAY = 86400


def time_to_seconds(text: str) -> int:
    """Parse GTFS 'HH:MM:SS' into seconds since midnight.

    Hours may exceed 23 for trips running past midnight; values are not clamped.
    """

    hh, mm, ss = text.strip().split(":")
    return int(hh) * 3600 + int(mm) * 60 + int(ss)


def truncate_hhmm(text: str) -> str:
    # '08:05:00' -> '08:05'
    return text.strip().rsplit(":", 1)[0]


def seconds_since_midnight(dt: datetime) -> int:
    return dt.hour * 3600 + dt.minute * 60 + dt.second


def wrap_clock(seconds: float) -> float:
    return seconds % SECONDS_PER_DAY


def format_clock(seconds: float) -> str:
    s = int(seconds)
    return f"{s // 3600:02d}:{(s % 3600) // 60:02d}:{s % 60:02d}"


def is_service_active(
    service_id: str | None,
    calendar_by_service: Mapping[str, ServiceCalendar],
    on: date,
) -> bool:
    """Whether a calendar service runs on the given date.

    Unknown services and dates outside [start_date, end_date] are inactive.
    Dates are compared as 'YYYYMMDD' strings, so malformed bounds simply fail
    the comparison instead of raising.
    """

    if not service_id:
        return False
    service = calendar_by_service.get(service_id)
    if service is None:
        return False

    day = on.strftime("%Y%m%d")
    if day < service.start_date or day > service.end_date:
        return False

    # date.weekday() is Monday = 0; calendar flags are indexed from Sunday.
    return service.runs_on((on.weekday() + 1) % 7)

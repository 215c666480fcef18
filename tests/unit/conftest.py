from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from src.app.ports.output import FeedTables


def _sample_tables() -> dict[str, Any]:
    """One route, one weekday trip A -> B on a straight 2-point shape."""

    return {
        "routes": [
            {
                "id": "R1",
                "shortName": "KB1",
                "longName": "Terminal - Pantai",
                "color": "#3b82f6",
                "textColor": "#ffffff",
            }
        ],
        "stops": {
            "A": {"name": "Terminal", "lat": 6.10, "lon": 102.20},
            "B": {"name": "Pantai", "lat": 6.14, "lon": 102.26},
        },
        "shapes": {"S1": [[6.10, 102.20], [6.14, 102.26]]},
        "schedule": {
            "R1": [
                {
                    "tripId": "T1",
                    "serviceId": "WK",
                    "shapeId": "S1",
                    "headsign": "Pantai",
                    "stops": [
                        {"stopId": "A", "arrival": "08:00:00", "departure": "08:00:00"},
                        {"stopId": "B", "arrival": "08:10:00", "departure": "08:10:00"},
                    ],
                },
                {
                    "tripId": "EMPTY",
                    "serviceId": "WK",
                    "shapeId": "S1",
                    "headsign": "Nowhere",
                    "stops": [],
                },
            ]
        },
        "calendar": {
            "WK": {
                "monday": True,
                "tuesday": True,
                "wednesday": True,
                "thursday": True,
                "friday": True,
                "saturday": False,
                "sunday": False,
                "startDate": "20260101",
                "endDate": "20261231",
            }
        },
    }


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def sample_tables() -> FeedTables:
    return FeedTables(**_sample_tables())


@pytest.fixture
def json_feed_dir(tmp_path: Path) -> Path:
    for name, table in _sample_tables().items():
        (tmp_path / f"{name}.json").write_text(json.dumps(table), encoding="utf-8")
    return tmp_path


GTFS_FILES = {
    "routes.txt": "route_id,route_short_name,route_long_name,route_color,route_text_color\n"
    "R1,KB1,Terminal - Pantai,FF0000,\n",
    "stops.txt": "stop_id,stop_name,stop_lat,stop_lon\n"
    "A,Terminal,6.10,102.20\n"
    "B,Pantai,6.14,102.26\n",
    "shapes.txt": "shape_id,shape_pt_lat,shape_pt_lon,shape_pt_sequence\n"
    "S1,6.14,102.26,2\n"
    "S1,6.10,102.20,1\n",
    "trips.txt": "route_id,service_id,trip_id,trip_headsign,shape_id\n"
    "R1,WK,T1,Pantai,S1\n"
    "R1,WK,T2,Ghost,S1\n",
    "stop_times.txt": "trip_id,arrival_time,departure_time,stop_id,stop_sequence\n"
    "T1,08:10:00,08:10:00,B,2\n"
    "T1,08:00:00,08:00:00,A,1\n",
    "calendar.txt": "service_id,monday,tuesday,wednesday,thursday,friday,saturday,sunday,"
    "start_date,end_date\n"
    "WK,1,1,1,1,1,0,0,20260101,20261231\n",
}


@pytest.fixture
def gtfs_dir(tmp_path: Path) -> Path:
    base = tmp_path / "gtfs"
    base.mkdir()
    for name, text in GTFS_FILES.items():
        (base / name).write_text(text, encoding="utf-8")
    return base

"""Flatten a static GTFS feed into the JSON lookup tables the simulator loads.

    python -m src.etl data/gtfs data/feed
    python -m src.etl --url https://example.org/gtfs.zip data/gtfs data/feed
"""

from __future__ import annotations

import argparse
import io
import json
import logging
import zipfile
from pathlib import Path

import httpx

from src.adapters.persistence.local_gtfs_repository import LocalGtfsRepository
from src.adapters.persistence.s3_feed_repository import S3FeedRepository
from src.app.ports.output import TABLE_NAMES, FeedTables

logger = logging.getLogger(__name__)


def download_gtfs_zip(url: str, dest_dir: Path, *, timeout_s: float = 60.0) -> None:
    """Download a GTFS zip (following redirects) and extract it into dest_dir."""

    logger.info("Downloading GTFS data from %s", url)
    with httpx.Client(timeout=timeout_s, follow_redirects=True) as client:
        resp = client.get(url)
        resp.raise_for_status()

    dest_dir.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(io.BytesIO(resp.content)) as zf:
        zf.extractall(dest_dir)


def encode_tables(tables: FeedTables) -> dict[str, bytes]:
    return {
        name: json.dumps(getattr(tables, name), separators=(",", ":")).encode("utf-8")
        for name in TABLE_NAMES
    }


def write_tables(tables: FeedTables, out_dir: Path) -> list[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for name, body in encode_tables(tables).items():
        path = out_dir / f"{name}.json"
        path.write_bytes(body)
        written.append(path)
    return written


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("gtfs_dir", type=Path)
    parser.add_argument("out_dir", type=Path)
    parser.add_argument("--url", help="download and extract a GTFS zip first")
    parser.add_argument(
        "--s3", action="store_true", help="also upload the tables to FEED_BUCKET"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.url:
        download_gtfs_zip(args.url, args.gtfs_dir)

    tables = LocalGtfsRepository(base_path=args.gtfs_dir).flatten()
    for path in write_tables(tables, args.out_dir):
        logger.info("Wrote %s", path)

    if args.s3:
        S3FeedRepository().put_tables(encode_tables(tables))
        logger.info("Uploaded feed tables to S3")


if __name__ == "__main__":
    main()

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass

from botocore.exceptions import BotoCoreError, ClientError

from src.adapters.aws import s3_client
from src.adapters.persistence.local_json_feed_repository import decode_tables
from src.app.ports.output import TABLE_NAMES, FeedTables, IFeedRepository
from src.domain.exceptions import FeedLoadError


@dataclass(slots=True)
class S3FeedRepository(IFeedRepository):
    """Feed tables stored as JSON objects in S3, one object per table.

    Env vars:
      - FEED_BUCKET: bucket name
      - FEED_PREFIX: key prefix (default: feed), objects are <prefix>/<table>.json
      - ENDPOINT_URL / USE_LOCALSTACK / AWS_REGION: see src.adapters.aws
    """

    bucket: str | None = None
    prefix: str | None = None

    def _bucket(self) -> str:
        value = self.bucket or os.getenv("FEED_BUCKET")
        if not value:
            raise FeedLoadError("Missing FEED_BUCKET")
        return value

    def _key(self, name: str) -> str:
        prefix = (self.prefix or os.getenv("FEED_PREFIX") or "feed").strip("/")
        return f"{prefix}/{name}.json"

    async def load_tables(self) -> FeedTables:
        bucket = self._bucket()
        s3 = s3_client()

        def _get(name: str) -> bytes:
            key = self._key(name)
            try:
                obj = s3.get_object(Bucket=bucket, Key=key)
                return obj["Body"].read()
            except (BotoCoreError, ClientError) as exc:
                raise FeedLoadError(f"Cannot fetch s3://{bucket}/{key}: {exc}") from exc

        contents = await asyncio.gather(
            *(asyncio.to_thread(_get, name) for name in TABLE_NAMES)
        )
        return decode_tables(dict(zip(TABLE_NAMES, contents)))

    def put_tables(self, payloads: dict[str, bytes]) -> None:
        """Upload encoded tables, as produced by the ETL command."""

        bucket = self._bucket()
        s3 = s3_client()
        for name in TABLE_NAMES:
            s3.put_object(
                Bucket=bucket,
                Key=self._key(name),
                Body=payloads[name],
                ContentType="application/json",
            )

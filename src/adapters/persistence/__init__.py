from .local_gtfs_repository import LocalGtfsRepository
from .local_json_feed_repository import LocalJsonFeedRepository
from .s3_feed_repository import S3FeedRepository

__all__ = [
    "LocalGtfsRepository",
    "LocalJsonFeedRepository",
    "S3FeedRepository",
]

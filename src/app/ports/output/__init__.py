from .feed_repository import TABLE_NAMES, FeedTables, IFeedRepository

__all__ = [
    "FeedTables",
    "IFeedRepository",
    "TABLE_NAMES",
]

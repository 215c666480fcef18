from .feed import FeedError, FeedFormatError, FeedLoadError, FeedUnavailableError

__all__ = [
    "FeedError",
    "FeedFormatError",
    "FeedLoadError",
    "FeedUnavailableError",
]

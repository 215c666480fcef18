class FeedError(Exception):
    """Base exception for transit feed failures."""


class FeedLoadError(FeedError):
    """Raised when the feed tables cannot be fetched or read."""


class FeedFormatError(FeedLoadError):
    """Raised when a feed table is present but structurally malformed."""


class FeedUnavailableError(FeedError):
    """Raised when a query runs before a feed has been loaded successfully."""

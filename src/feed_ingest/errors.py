"""Exceptions raised by the feed ingestion pipeline."""

from typing import Optional


class FeedIngestError(Exception):
    """Base class for pipeline errors."""


class ConfigError(FeedIngestError):
    """Invalid or missing configuration. Fatal to the run."""


class FetchError(FeedIngestError):
    """Feed could not be retrieved."""

    def __init__(self, url: str, cause: Optional[BaseException] = None, attempts: int = 0):
        self.url = url
        self.cause = cause
        self.attempts = attempts
        super().__init__(f"Failed to fetch {url} after {attempts} attempt(s): {cause}")


class TransientFetchError(FetchError):
    """Network, timeout or HTTP failure that outlasted every retry."""


class SslTrustError(FetchError):
    """Certificate validation failed. Not retried; triggers the proxy fallback."""


class ProxyFallbackError(FeedIngestError):
    """The feed-to-JSON proxy failed or returned unusable data."""


class ParseError(FeedIngestError):
    """Payload is not well-formed XML."""


class ArticlePersistError(FeedIngestError):
    """A single article could not be stored."""

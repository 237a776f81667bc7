"""Network retrieval of feeds."""

from feed_ingest.fetch_feeds.fetcher import FeedFetcher, is_ssl_error
from feed_ingest.fetch_feeds.proxy import ProxyClient

__all__ = ["FeedFetcher", "ProxyClient", "is_ssl_error"]

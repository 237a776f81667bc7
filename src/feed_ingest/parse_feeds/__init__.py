"""Feed parsing and field extraction."""

from feed_ingest.parse_feeds.extract import extract_article, extract_proxy_item
from feed_ingest.parse_feeds.parser import parse_feed

__all__ = ["extract_article", "extract_proxy_item", "parse_feed"]

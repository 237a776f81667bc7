"""Content sanitization, excerpts and topic tagging."""

from feed_ingest.clean_articles.classify import classify
from feed_ingest.clean_articles.clean import excerpt, normalize

__all__ = ["classify", "excerpt", "normalize"]

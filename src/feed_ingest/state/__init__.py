"""Persistence collaborators for articles and source cursors."""

from feed_ingest.state.db import ArticleStore, MemoryStore, PostgresStore, get_store

__all__ = ["ArticleStore", "MemoryStore", "PostgresStore", "get_store"]

"""Article and source-cursor persistence."""

import logging
import os
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

import psycopg2
from dotenv import load_dotenv
from psycopg2.extras import RealDictCursor

from feed_ingest.config import Config
from feed_ingest.errors import ArticlePersistError, ConfigError
from feed_ingest.models import Article, SourceCursor

load_dotenv()

logger = logging.getLogger(__name__)


def _aware(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp


class ArticleStore(ABC):
    """What the pipeline needs from persistence."""

    @abstractmethod
    def find_source_cursor(self, name: str) -> Optional[SourceCursor]:
        """Return the cursor for source `name`, or None if never seen."""

    @abstractmethod
    def create_source_cursor(self, name: str, url: str) -> SourceCursor:
        """Create a cursor with no fetch timestamp."""

    @abstractmethod
    def update_source_cursor(self, cursor_id: int, last_fetched_at: datetime) -> None:
        """Record a successful pass over a source."""

    @abstractmethod
    def upsert_article(self, article: Article, summary: Optional[str] = None) -> None:
        """Insert or update an article keyed by its link.

        Raises:
            ArticlePersistError: If the article could not be stored.
        """

    def find_or_create_source_cursor(self, name: str, url: str) -> SourceCursor:
        cursor = self.find_source_cursor(name)
        if cursor is None:
            logger.info("First encounter of source %s, creating cursor", name)
            cursor = self.create_source_cursor(name, url)
        return cursor


class MemoryStore(ArticleStore):
    """Dict-backed store for local runs and tests."""

    def __init__(self):
        self.cursors: dict[str, SourceCursor] = {}
        self.articles: dict[str, dict] = {}
        self._next_id = 1

    def find_source_cursor(self, name: str) -> Optional[SourceCursor]:
        cursor = self.cursors.get(name)
        return replace(cursor) if cursor else None

    def create_source_cursor(self, name: str, url: str) -> SourceCursor:
        cursor = SourceCursor(id=self._next_id, source_name=name, url=url)
        self._next_id += 1
        self.cursors[name] = cursor
        return replace(cursor)

    def update_source_cursor(self, cursor_id: int, last_fetched_at: datetime) -> None:
        for cursor in self.cursors.values():
            if cursor.id == cursor_id:
                cursor.last_fetched_at = _aware(last_fetched_at)
                return
        raise KeyError(f"No source cursor with id {cursor_id}")

    def upsert_article(self, article: Article, summary: Optional[str] = None) -> None:
        if not article.link:
            raise ArticlePersistError(f"Refusing to store article without link: {article.title}")
        existing = self.articles.get(article.link)
        record = {
            "article": article,
            "summary": summary if summary is not None else (existing or {}).get("summary"),
        }
        self.articles[article.link] = record


def get_connection():
    """Create a new database connection from DATABASE_URL."""
    return psycopg2.connect(os.environ["DATABASE_URL"])


@contextmanager
def get_cursor():
    """Context manager for database cursor with automatic commit/rollback."""
    conn = get_connection()
    try:
        with conn.cursor(cursor_factory=RealDictCursor) as cur:
            yield cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


class PostgresStore(ArticleStore):
    """Postgres-backed store. One transaction per operation."""

    def __init__(self, cursor_factory=get_cursor):
        self._cursor = cursor_factory

    def ensure_tables(self) -> None:
        """Create the news_source and news tables if they don't exist."""
        with self._cursor() as cur:
            cur.execute("""
                CREATE TABLE IF NOT EXISTS news_source (
                    id SERIAL PRIMARY KEY,
                    name TEXT UNIQUE NOT NULL,
                    url TEXT NOT NULL,
                    last_fetched TIMESTAMP WITH TIME ZONE
                )
            """)
            cur.execute("""
                CREATE TABLE IF NOT EXISTS news (
                    id SERIAL PRIMARY KEY,
                    title TEXT NOT NULL,
                    content TEXT NOT NULL DEFAULT '',
                    excerpt TEXT NOT NULL DEFAULT '',
                    link TEXT UNIQUE NOT NULL,
                    source TEXT NOT NULL,
                    author TEXT NOT NULL,
                    category TEXT NOT NULL,
                    summary TEXT,
                    guid TEXT,
                    published_at TIMESTAMP WITH TIME ZONE NOT NULL,
                    created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now(),
                    updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now(),
                    source_ref_id INTEGER REFERENCES news_source (id)
                )
            """)

    @staticmethod
    def _to_cursor(row) -> SourceCursor:
        return SourceCursor(
            id=row["id"],
            source_name=row["name"],
            url=row["url"],
            last_fetched_at=row["last_fetched"],
        )

    def find_source_cursor(self, name: str) -> Optional[SourceCursor]:
        with self._cursor() as cur:
            cur.execute(
                "SELECT id, name, url, last_fetched FROM news_source WHERE name = %s",
                (name,),
            )
            row = cur.fetchone()
        return self._to_cursor(row) if row else None

    def create_source_cursor(self, name: str, url: str) -> SourceCursor:
        # Returns the existing row if the name is already taken
        with self._cursor() as cur:
            cur.execute("""
                INSERT INTO news_source (name, url, last_fetched)
                VALUES (%s, %s, NULL)
                ON CONFLICT (name) DO UPDATE SET url = news_source.url
                RETURNING id, name, url, last_fetched
            """, (name, url))
            row = cur.fetchone()
        return self._to_cursor(row)

    def update_source_cursor(self, cursor_id: int, last_fetched_at: datetime) -> None:
        with self._cursor() as cur:
            cur.execute(
                "UPDATE news_source SET last_fetched = %s WHERE id = %s",
                (_aware(last_fetched_at), cursor_id),
            )

    def upsert_article(self, article: Article, summary: Optional[str] = None) -> None:
        try:
            with self._cursor() as cur:
                cur.execute("""
                    INSERT INTO news (
                        title, content, excerpt, link, source, author, category,
                        summary, guid, published_at, source_ref_id
                    )
                    VALUES (
                        %(title)s, %(content)s, %(excerpt)s, %(link)s, %(source)s, %(author)s,
                        %(category)s, %(summary)s, %(guid)s, %(published_at)s,
                        (SELECT id FROM news_source WHERE name = %(source)s)
                    )
                    ON CONFLICT (link) DO UPDATE SET
                        title = EXCLUDED.title,
                        content = EXCLUDED.content,
                        excerpt = EXCLUDED.excerpt,
                        author = EXCLUDED.author,
                        category = EXCLUDED.category,
                        summary = COALESCE(EXCLUDED.summary, news.summary),
                        published_at = EXCLUDED.published_at,
                        source_ref_id = EXCLUDED.source_ref_id,
                        updated_at = now()
                """, {
                    "title": article.title,
                    "content": article.content,
                    "excerpt": article.excerpt,
                    "link": article.link,
                    "source": article.source,
                    "author": article.author,
                    "category": article.category,
                    "summary": summary,
                    "guid": article.guid,
                    "published_at": _aware(article.published_at),
                })
        except psycopg2.Error as e:
            raise ArticlePersistError(f"Failed to upsert {article.link}: {e}") from e


def get_store(config: Config) -> ArticleStore:
    """Build the store selected by `state.backend`."""
    backend = config.state.backend
    if backend == "memory":
        return MemoryStore()
    if backend == "postgres":
        store = PostgresStore()
        store.ensure_tables()
        return store
    raise ConfigError(f"Unknown state backend: {backend}")

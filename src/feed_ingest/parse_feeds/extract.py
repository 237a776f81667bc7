"""Map generic feed records to Articles.

Every field is resolved by an ordered tuple of named strategies. Each
strategy looks at one place in the record and returns text or None; the
first non-empty result wins, otherwise the field default applies.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from feed_ingest.clean_articles.classify import classify
from feed_ingest.clean_articles.clean import DEFAULT_EXCERPT_LENGTH, excerpt, normalize
from feed_ingest.common.datetime import parse_feed_date, utcnow
from feed_ingest.common.utils import attr_of, first_value, get_value, text_of
from feed_ingest.models import Article, GenericItem

logger = logging.getLogger(__name__)

NO_TITLE = "No Title"
UNKNOWN_AUTHOR = "Unknown"

Strategy = tuple[str, Callable[[Any], Optional[str]]]


def _text(key: str) -> Callable[[Any], Optional[str]]:
    """First value under `key`, unwrapped to text."""
    def strategy(item: Any) -> Optional[str]:
        return text_of(first_value(item, key))
    return strategy


def _author_name(item: Any) -> Optional[str]:
    author = first_value(item, "author")
    if not isinstance(author, dict):
        return None
    return text_of(first_value(author, "name"))


def _author_scalar(item: Any) -> Optional[str]:
    author = first_value(item, "author")
    return author if isinstance(author, str) else None


def _link_string(item: Any) -> Optional[str]:
    link = first_value(item, "link")
    return link if isinstance(link, str) else None


def _link_href(item: Any) -> Optional[str]:
    links = get_value(item, "link")
    if not isinstance(links, list):
        links = [links] if links is not None else []
    records = [link for link in links if isinstance(link, dict)]
    # Prefer the alternate (or rel-less) link, which points at the article
    for record in records:
        rel = attr_of(record, "rel")
        href = attr_of(record, "href")
        if href and rel in (None, "alternate"):
            return href
    for record in records:
        href = attr_of(record, "href")
        if href:
            return href
    return None


def _scalar(key: str) -> Callable[[Any], Optional[str]]:
    """First value under `key`, only when it is a plain string."""
    def strategy(item: Any) -> Optional[str]:
        value = first_value(item, key)
        return value if isinstance(value, str) else None
    return strategy


def _category(item: Any) -> Optional[str]:
    value = first_value(item, "category")
    return text_of(value) or attr_of(value, "term")


CONTENT_STRATEGIES: tuple[Strategy, ...] = (
    ("content:encoded", _text("content:encoded")),
    ("content", _text("content")),
    ("summary", _text("summary")),
    ("description", _text("description")),
)

AUTHOR_STRATEGIES: tuple[Strategy, ...] = (
    ("dc:creator", _text("dc:creator")),
    ("author.name", _author_name),
    ("author", _author_scalar),
)

TITLE_STRATEGIES: tuple[Strategy, ...] = (
    ("title", _text("title")),
    ("name", _text("name")),
)

LINK_STRATEGIES: tuple[Strategy, ...] = (
    ("link", _link_string),
    ("link.href", _link_href),
    ("id", _scalar("id")),
    ("guid", _text("guid")),
)

CATEGORY_STRATEGIES: tuple[Strategy, ...] = (
    ("category", _category),
    ("dc:subject", _text("dc:subject")),
)

DATE_STRATEGIES: tuple[Strategy, ...] = (
    ("pubDate", _text("pubDate")),
    ("updated", _text("updated")),
    ("published", _text("published")),
    ("dc:date", _text("dc:date")),
)

GUID_STRATEGIES: tuple[Strategy, ...] = (
    ("guid", _text("guid")),
    ("id", _text("id")),
)


def _field(key: str) -> Callable[[Any], Optional[str]]:
    """Flat JSON field, as returned by the proxy."""
    def strategy(item: Any) -> Optional[str]:
        return text_of(get_value(item, key))
    return strategy


PROXY_CONTENT_STRATEGIES: tuple[Strategy, ...] = (
    ("content", _field("content")),
    ("content_snippet", _field("content_snippet")),
    ("description", _field("description")),
)
PROXY_TITLE_STRATEGIES: tuple[Strategy, ...] = (("title", _field("title")),)
PROXY_LINK_STRATEGIES: tuple[Strategy, ...] = (("link", _field("link")),)
PROXY_AUTHOR_STRATEGIES: tuple[Strategy, ...] = (("author", _field("author")),)
PROXY_DATE_STRATEGIES: tuple[Strategy, ...] = (("pubDate", _field("pubDate")),)
PROXY_GUID_STRATEGIES: tuple[Strategy, ...] = (("guid", _field("guid")),)


def resolve(item: Any, strategies: Sequence[Strategy], default: Optional[str] = None) -> Optional[str]:
    """Run `strategies` in order and return the first non-blank result."""
    for name, strategy in strategies:
        value = strategy(item)
        if value and value.strip():
            logger.debug("Resolved field via %s", name)
            return value.strip()
    return default


def resolve_date(item: Any, strategies: Sequence[Strategy], fallback: datetime) -> datetime:
    """First candidate that parses as a date, else `fallback`."""
    for _, strategy in strategies:
        parsed = parse_feed_date(strategy(item))
        if parsed is not None:
            return parsed
    return fallback


def extract_article(
    item: GenericItem,
    source_label: str,
    fetched_at: Optional[datetime] = None,
    excerpt_length: int = DEFAULT_EXCERPT_LENGTH,
) -> Article:
    """Build an Article from a parsed RSS/Atom item."""
    fetched_at = fetched_at or utcnow()
    content = normalize(resolve(item, CONTENT_STRATEGIES, ""))
    title = resolve(item, TITLE_STRATEGIES, NO_TITLE)
    category = resolve(item, CATEGORY_STRATEGIES) or classify(content, title)

    return Article(
        title=title,
        content=content,
        excerpt=excerpt(content, excerpt_length),
        link=resolve(item, LINK_STRATEGIES, ""),
        source=source_label,
        author=resolve(item, AUTHOR_STRATEGIES, UNKNOWN_AUTHOR),
        category=category,
        published_at=resolve_date(item, DATE_STRATEGIES, fetched_at),
        guid=resolve(item, GUID_STRATEGIES),
    )


def extract_proxy_item(
    item: dict,
    source_label: str,
    fetched_at: Optional[datetime] = None,
    excerpt_length: int = DEFAULT_EXCERPT_LENGTH,
) -> Article:
    """Build an Article from a proxy (rss2json) JSON item."""
    fetched_at = fetched_at or utcnow()
    content = normalize(resolve(item, PROXY_CONTENT_STRATEGIES, ""))
    title = resolve(item, PROXY_TITLE_STRATEGIES, NO_TITLE)

    return Article(
        title=title,
        content=content,
        excerpt=excerpt(content, excerpt_length),
        link=resolve(item, PROXY_LINK_STRATEGIES, ""),
        source=source_label,
        author=resolve(item, PROXY_AUTHOR_STRATEGIES, UNKNOWN_AUTHOR),
        category=classify(content, title),
        published_at=resolve_date(item, PROXY_DATE_STRATEGIES, fetched_at),
        guid=resolve(item, PROXY_GUID_STRATEGIES),
    )

"""Data models for the feed ingestion pipeline."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

# Parsed feed entry before field mapping: tag -> list of values.
GenericItem = dict[str, Any]


@dataclass(frozen=True)
class Source:
    """A configured feed: where to fetch it and what to call it."""
    url: str
    name: str


@dataclass
class Article:
    """Normalized article extracted from a single feed entry."""
    title: str
    content: str
    excerpt: str
    link: str
    source: str
    author: str
    category: str
    published_at: datetime
    guid: Optional[str] = None

    def is_valid(self) -> bool:
        return bool(self.link and self.link.strip()) and bool(self.title and self.title.strip())


@dataclass
class SourceCursor:
    """Last successful fetch time for a source."""
    id: int
    source_name: str
    url: str
    last_fetched_at: Optional[datetime] = None


@dataclass
class SourceResult:
    """Outcome of one pass over one source."""
    source: str
    ok: bool
    fetched: int = 0
    new: int = 0
    saved: int = 0
    via_proxy: bool = False
    error: Optional[str] = None


@dataclass
class RunResult:
    """Aggregate outcome of a pipeline run."""
    processed: int = 0
    failed: int = 0
    skipped: int = 0
    sources: list[SourceResult] = field(default_factory=list)

    def add(self, result: SourceResult) -> "RunResult":
        return RunResult(
            processed=self.processed + result.saved,
            failed=self.failed + (0 if result.ok else 1),
            skipped=self.skipped,
            sources=[*self.sources, result],
        )

"""Feed pipeline orchestration.

Sources are processed one at a time, in order:

    cursor -> fetch (-> proxy on SSL failure) -> parse -> extract -> drop invalid
    -> drop not-new -> [summarize] -> upsert each -> advance cursor

A failing source is logged and counted; the run moves on to the next one.
"""

import logging
import time
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence

from feed_ingest.clean_articles.clean import DEFAULT_EXCERPT_LENGTH
from feed_ingest.common.datetime import ensure_aware, utcnow
from feed_ingest.config import Config
from feed_ingest.errors import FeedIngestError, SslTrustError
from feed_ingest.fetch_feeds.fetcher import FeedFetcher
from feed_ingest.fetch_feeds.proxy import ProxyClient
from feed_ingest.models import Article, RunResult, Source, SourceResult
from feed_ingest.parse_feeds.extract import extract_article, extract_proxy_item
from feed_ingest.parse_feeds.parser import parse_feed
from feed_ingest.state.db import ArticleStore, get_store
from feed_ingest.summarize import HuggingFaceSummarizer, Summarizer

logger = logging.getLogger(__name__)


def valid_articles(articles: Iterable[Article]) -> list[Article]:
    """Keep only articles with a non-empty link and title."""
    return [article for article in articles if article.is_valid()]


def filter_new(articles: Sequence[Article], since: Optional[datetime]) -> list[Article]:
    """Articles published strictly after `since`; all of them when there is no cursor yet."""
    if since is None:
        return list(articles)
    since = ensure_aware(since)
    return [article for article in articles if ensure_aware(article.published_at) > since]


class FeedPipeline:
    """Runs fetch, parse, extract and persist over a list of sources."""

    def __init__(
        self,
        store: ArticleStore,
        fetcher: Optional[FeedFetcher] = None,
        proxy: Optional[ProxyClient] = None,
        summarizer: Optional[Summarizer] = None,
        source_delay: float = 1.2,
        excerpt_length: int = DEFAULT_EXCERPT_LENGTH,
        summarize_min_length: int = 100,
        summarize_delay: float = 1.5,
        run_deadline_seconds: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = utcnow,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        if store is None:
            raise ValueError("FeedPipeline requires a store")
        self.store = store
        self.fetcher = fetcher or FeedFetcher(sleep=sleep)
        self.proxy = proxy
        self.summarizer = summarizer
        self.source_delay = source_delay
        self.excerpt_length = excerpt_length
        self.summarize_min_length = summarize_min_length
        self.summarize_delay = summarize_delay
        self.run_deadline_seconds = run_deadline_seconds
        self._sleep = sleep
        self._clock = clock
        self._monotonic = monotonic

    @classmethod
    def from_config(
        cls,
        config: Config,
        store: Optional[ArticleStore] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "FeedPipeline":
        fetch = config.fetch
        summarizer = None
        if config.summarize.enabled:
            summarizer = HuggingFaceSummarizer(
                model_url=config.summarize.model_url,
                max_input_chars=config.summarize.max_input_chars,
                timeout=config.summarize.timeout,
            )
        return cls(
            store=store if store is not None else get_store(config),
            fetcher=FeedFetcher(
                timeout=fetch.timeout,
                max_attempts=fetch.max_attempts,
                backoff_base=fetch.backoff_base,
                app_url=fetch.app_url,
                sleep=sleep,
            ),
            proxy=ProxyClient(proxy_url=fetch.proxy_url, timeout=fetch.timeout),
            summarizer=summarizer,
            source_delay=config.pipeline.source_delay,
            excerpt_length=config.pipeline.excerpt_length,
            summarize_min_length=config.summarize.min_length,
            summarize_delay=config.summarize.delay,
            run_deadline_seconds=config.pipeline.run_deadline_seconds,
            sleep=sleep,
        )

    def run(self, sources: Sequence[Source]) -> RunResult:
        """Process every source in order and return the aggregate counts."""
        started = self._monotonic()
        result = RunResult()

        for index, source in enumerate(sources):
            if index > 0 and self.source_delay > 0:
                self._sleep(self.source_delay)
            if self._deadline_passed(started):
                remaining = len(sources) - index
                logger.warning("Run deadline reached, skipping %d remaining sources", remaining)
                result = replace(result, skipped=remaining)
                break
            result = result.add(self.process_source(source))

        logger.info(
            "News fetch completed: %d articles processed, %d sources failed, %d skipped",
            result.processed,
            result.failed,
            result.skipped,
        )
        return result

    def _deadline_passed(self, started: float) -> bool:
        if self.run_deadline_seconds is None:
            return False
        return self._monotonic() - started >= self.run_deadline_seconds

    def process_source(self, source: Source) -> SourceResult:
        """One pass over one source. Never raises for fetch, parse or store failures."""
        logger.info("Fetching %s - %s", source.name, source.url)
        try:
            cursor = self.store.find_or_create_source_cursor(source.name, source.url)
            articles, via_proxy = self.collect_articles(source)
        except FeedIngestError as e:
            logger.error("%s failed: %s", source.name, e)
            return SourceResult(source=source.name, ok=False, error=str(e))
        except Exception as e:
            logger.exception("%s failed unexpectedly", source.name)
            return SourceResult(source=source.name, ok=False, error=str(e))

        if not articles:
            logger.warning("No articles returned for %s", source.name)

        new_articles = filter_new(articles, cursor.last_fetched_at)
        if articles and not new_articles:
            logger.info("No new articles since last fetch for %s", source.name)

        saved = sum(1 for article in new_articles if self._persist(article, source))

        try:
            self.store.update_source_cursor(cursor.id, self._clock())
        except Exception as e:
            logger.error("Failed to advance cursor for %s: %s", source.name, e)
            return SourceResult(
                source=source.name,
                ok=False,
                fetched=len(articles),
                new=len(new_articles),
                saved=saved,
                via_proxy=via_proxy,
                error=str(e),
            )

        logger.info("%s: %d/%d new articles saved", source.name, saved, len(new_articles))
        return SourceResult(
            source=source.name,
            ok=True,
            fetched=len(articles),
            new=len(new_articles),
            saved=saved,
            via_proxy=via_proxy,
        )

    def collect_articles(self, source: Source) -> tuple[list[Article], bool]:
        """Fetch, parse and extract a source's valid articles.

        Returns:
            Tuple of (articles, fetched_via_proxy)

        Raises:
            FetchError, ProxyFallbackError, ParseError
        """
        fetched_at = self._clock()
        try:
            raw = self.fetcher.fetch(source.url)
        except SslTrustError:
            if self.proxy is None:
                raise
            logger.warning("SSL error for %s (%s), attempting proxy fallback", source.name, source.url)
            items = self.proxy.fetch_items(source.url)
            articles = [
                extract_proxy_item(item, source.name, fetched_at, self.excerpt_length)
                for item in items
            ]
            return valid_articles(articles), True

        items = parse_feed(raw, source.name)
        articles = [
            extract_article(item, source.name, fetched_at, self.excerpt_length)
            for item in items
        ]
        kept = valid_articles(articles)
        if len(kept) < len(articles):
            logger.debug("Dropped %d invalid articles from %s", len(articles) - len(kept), source.name)
        return kept, False

    def _summarize(self, article: Article) -> Optional[str]:
        if self.summarizer is None or len(article.content) <= self.summarize_min_length:
            return None
        try:
            summary = self.summarizer.summarize(article.content)
        except Exception as e:
            logger.error("Summarization failed for %s: %s", article.link, e)
            summary = None
        if self.summarize_delay > 0:
            self._sleep(self.summarize_delay)
        return summary

    def _persist(self, article: Article, source: Source) -> bool:
        summary = self._summarize(article)
        try:
            self.store.upsert_article(article, summary=summary)
            return True
        except Exception as e:
            logger.error("Failed to save article from %s: %s", source.name, e)
            return False

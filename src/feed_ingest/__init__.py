"""Feed acquisition and normalization pipeline."""

from feed_ingest.models import Article, RunResult, Source, SourceCursor, SourceResult
from feed_ingest.pipeline import FeedPipeline

__all__ = ["Article", "FeedPipeline", "RunResult", "Source", "SourceCursor", "SourceResult"]

"""CLI for running one feed ingestion pass."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from dotenv import load_dotenv

from feed_ingest.config import load_config, set_config
from feed_ingest.models import Source
from feed_ingest.pipeline import FeedPipeline
from feed_ingest.sources import configured_sources

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """Configure standard logging format for CLI tools."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def select_sources(available: list[Source], value: str | None) -> list[Source]:
    '''Filter sources by the comma-separated names in --sources.'''

    # If no value is provided or if "all" is specified, use every source
    if not value or value.strip().lower() == "all":
        return list(available)

    by_name = {source.name: source for source in available}
    requested = [s.strip() for s in value.split(",") if s.strip() and s.strip().lower() != "all"]

    for name in requested:
        if name not in by_name:
            logger.warning("Invalid source: %s", name)

    selected = [by_name[name] for name in requested if name in by_name]

    if not selected:
        raise ValueError(f"No valid sources provided. Valid sources: {', '.join(sorted(by_name))}")

    return selected


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch, normalize and store articles from configured feeds")
    parser.add_argument(
        "--config",
        default=None,
        help="Config name (test/prod) or path to a YAML file. Defaults to $FEED_INGEST_CONFIG or 'prod'.",
    )
    parser.add_argument(
        "--sources",
        default=None,
        help="Comma-separated list of source names (default: all).",
    )
    parser.add_argument("--no-summarize", action="store_true", help="Skip article summarization.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    setup_logging()
    args = parse_args(argv)

    config = load_config(args.config)
    if args.no_summarize:
        config.summarize.enabled = False
    set_config(config)

    sources = select_sources(configured_sources(config.sources), args.sources)
    logger.info("Running feed ingestion over %d sources (state backend: %s)", len(sources), config.state.backend)

    pipeline = FeedPipeline.from_config(config)
    result = pipeline.run(sources)

    print(json.dumps({
        "processed": result.processed,
        "failed": result.failed,
        "skipped": result.skipped,
    }))
    return 1 if result.failed else 0


if __name__ == "__main__":
    sys.exit(main())

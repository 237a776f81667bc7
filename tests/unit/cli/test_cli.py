"""Tests for feed_ingest.cli module."""

import json
from unittest.mock import patch

import pytest

from feed_ingest.cli import main, parse_args, select_sources
from feed_ingest.models import RunResult, Source
from feed_ingest.sources import DEFAULT_SOURCES, configured_sources

AVAILABLE = [
    Source(url="https://webkit.org/feed/", name="WebKit"),
    Source(url="https://developer.mozilla.org/en-US/blog/rss.xml", name="MDN Blog"),
]


class TestSelectSources:
    @pytest.mark.parametrize("value", [None, "", "all", "ALL"])
    def test_all(self, value) -> None:
        assert select_sources(AVAILABLE, value) == AVAILABLE

    def test_by_name(self) -> None:
        assert select_sources(AVAILABLE, "MDN Blog") == [AVAILABLE[1]]

    def test_unknown_names_are_skipped(self) -> None:
        assert select_sources(AVAILABLE, "Nope, WebKit") == [AVAILABLE[0]]

    def test_no_valid_names(self) -> None:
        with pytest.raises(ValueError, match="Valid sources"):
            select_sources(AVAILABLE, "Nope")


class TestConfiguredSources:
    def test_config_sources_win(self) -> None:
        assert configured_sources(AVAILABLE) == AVAILABLE

    def test_defaults_when_empty(self) -> None:
        assert configured_sources([]) == DEFAULT_SOURCES


class TestParseArgs:
    def test_defaults(self) -> None:
        args = parse_args([])
        assert args.config is None
        assert args.sources is None
        assert args.no_summarize is False

    def test_flags(self) -> None:
        args = parse_args(["--config", "test", "--sources", "WebKit", "--no-summarize"])
        assert (args.config, args.sources, args.no_summarize) == ("test", "WebKit", True)


class TestMain:
    @patch("feed_ingest.cli.FeedPipeline")
    def test_prints_counts_and_succeeds(self, mock_pipeline, capsys) -> None:
        mock_pipeline.from_config.return_value.run.return_value = RunResult(processed=4)

        assert main(["--config", "test", "--sources", "WebKit"]) == 0

        sources = mock_pipeline.from_config.return_value.run.call_args[0][0]
        assert [s.name for s in sources] == ["WebKit"]
        output = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert output == {"processed": 4, "failed": 0, "skipped": 0}

    @patch("feed_ingest.cli.FeedPipeline")
    def test_failed_sources_exit_nonzero(self, mock_pipeline) -> None:
        mock_pipeline.from_config.return_value.run.return_value = RunResult(processed=1, failed=1)
        assert main(["--config", "test"]) == 1

    @patch("feed_ingest.cli.FeedPipeline")
    def test_no_summarize_disables_summaries(self, mock_pipeline) -> None:
        mock_pipeline.from_config.return_value.run.return_value = RunResult()

        main(["--config", "prod", "--no-summarize"])

        config = mock_pipeline.from_config.call_args[0][0]
        assert config.summarize.enabled is False

"""Tests for feed_ingest.clean_articles.classify module."""

import pytest

from feed_ingest.clean_articles.classify import DEFAULT_CATEGORY, classify


class TestClassify:
    @pytest.mark.parametrize(
        "content, expected",
        [
            ("new machine learning models", "Artificial Intelligence"),
            ("deploying to azure regions", "Cloud Computing"),
            ("cyber incident report", "Security"),
            ("modern frontend tooling", "Web Development"),
            ("postgres database tuning", "Databases"),
            ("kubernetes operators", "DevOps"),
        ],
    )
    def test_each_rule(self, content, expected) -> None:
        assert classify(content, "") == expected

    def test_no_keyword_falls_back_to_technology(self) -> None:
        assert classify("quarterly report", "Update") == DEFAULT_CATEGORY == "Technology"

    def test_first_rule_wins_over_later_rule(self) -> None:
        assert classify("neural networks in docker containers", "") == "Artificial Intelligence"

    def test_ai_beats_cloud(self) -> None:
        assert classify("AI breakthroughs in cloud", "") == "Artificial Intelligence"

    def test_title_is_considered(self) -> None:
        assert classify("nothing relevant", "Docker tips") == "DevOps"

    def test_case_insensitive(self) -> None:
        assert classify("", "GCP Pricing") == "Cloud Computing"

    def test_keywords_match_as_substrings(self) -> None:
        # "webinar" contains "web"
        assert classify("join our webinar", "") == "Web Development"

    def test_none_inputs(self) -> None:
        assert classify(None, None) == "Technology"

    def test_deterministic(self) -> None:
        results = {classify("sql and nosql", "Storage") for _ in range(5)}
        assert results == {"Databases"}

"""Tests for feed_ingest.fetch_feeds.proxy module."""

from unittest.mock import Mock

import pytest
import requests

from feed_ingest.errors import ProxyFallbackError
from feed_ingest.fetch_feeds.proxy import ProxyClient
from fixtures.feeds import PROXY_PAYLOAD


def _client(payload=None, error=None) -> tuple[ProxyClient, Mock]:
    session = Mock()
    if error is not None:
        session.get.side_effect = error
    else:
        response = Mock()
        response.raise_for_status.return_value = None
        response.json.return_value = payload
        session.get.return_value = response
    return ProxyClient(proxy_url="https://proxy.example.com/api", session=session, timeout=7), session


class TestProxyClient:
    def test_returns_items(self) -> None:
        client, session = _client(PROXY_PAYLOAD)
        items = client.fetch_items("https://feed.example.com/rss")

        assert len(items) == 3
        session.get.assert_called_once_with(
            "https://proxy.example.com/api",
            params={"rss_url": "https://feed.example.com/rss"},
            timeout=7,
        )

    def test_non_dict_items_are_dropped(self) -> None:
        client, _ = _client({"status": "ok", "items": [{"title": "a"}, "junk", None]})
        assert client.fetch_items("https://feed.example.com") == [{"title": "a"}]

    def test_request_failure(self) -> None:
        client, _ = _client(error=requests.ConnectionError("down"))
        with pytest.raises(ProxyFallbackError):
            client.fetch_items("https://feed.example.com")

    def test_invalid_json(self) -> None:
        session = Mock()
        response = Mock()
        response.raise_for_status.return_value = None
        response.json.side_effect = ValueError("Expecting value")
        session.get.return_value = response

        with pytest.raises(ProxyFallbackError):
            ProxyClient(session=session).fetch_items("https://feed.example.com")

    def test_error_status(self) -> None:
        client, _ = _client({"status": "error", "message": "Cannot download feed"})
        with pytest.raises(ProxyFallbackError, match="Cannot download feed"):
            client.fetch_items("https://feed.example.com")

    @pytest.mark.parametrize("payload", [[], "text", {"status": "ok"}, {"status": "ok", "items": "x"}])
    def test_unusable_payload(self, payload) -> None:
        client, _ = _client(payload)
        with pytest.raises(ProxyFallbackError):
            client.fetch_items("https://feed.example.com")

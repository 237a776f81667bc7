"""Feed-to-JSON proxy used when a feed host fails certificate validation."""

import logging
from typing import Optional

import requests

from feed_ingest.errors import ProxyFallbackError

logger = logging.getLogger(__name__)

DEFAULT_PROXY_URL = "https://api.rss2json.com/v1/api.json"


class ProxyClient:
    """Fetches a feed through rss2json, which returns `{status, items: [...]}`."""

    def __init__(
        self,
        proxy_url: str = DEFAULT_PROXY_URL,
        session: Optional[requests.Session] = None,
        timeout: float = 20.0,
    ):
        self.proxy_url = proxy_url
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch_items(self, feed_url: str) -> list[dict]:
        """Return the proxy's item list for `feed_url`.

        Raises:
            ProxyFallbackError: If the request fails or the payload is unusable.
        """
        try:
            response = self.session.get(
                self.proxy_url,
                params={"rss_url": feed_url},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            raise ProxyFallbackError(f"Proxy request failed for {feed_url}: {e}") from e

        if not isinstance(payload, dict):
            raise ProxyFallbackError(f"Proxy returned a non-object payload for {feed_url}")
        if payload.get("status") == "error":
            raise ProxyFallbackError(
                f"Proxy rejected {feed_url}: {payload.get('message', 'unknown error')}"
            )

        items = payload.get("items")
        if not isinstance(items, list):
            raise ProxyFallbackError(f"Proxy payload for {feed_url} has no item list")

        logger.info("Proxy returned %d items for %s", len(items), feed_url)
        return [item for item in items if isinstance(item, dict)]

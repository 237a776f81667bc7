"""Feed retrieval with retries, backoff and SSL failure detection."""

import logging
import re
import ssl
import time
from typing import Callable, Iterator, Optional

import requests
import urllib3.exceptions

from feed_ingest.errors import SslTrustError, TransientFetchError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 20.0
DEFAULT_ATTEMPTS = 3
DEFAULT_BACKOFF_BASE = 0.8

ACCEPT_HEADER = "application/rss+xml, application/xml, text/xml, */*"

SSL_ERROR_CODES = {
    "SELF_SIGNED_CERT_IN_CHAIN",
    "UNABLE_TO_VERIFY_LEAF_SIGNATURE",
    "DEPTH_ZERO_SELF_SIGNED_CERT",
    "CERT_HAS_EXPIRED",
}
SSL_ERROR_MARKERS = ("self signed certificate", "ssl", "certificate verify failed")

_MARKER_RE = re.compile(
    r"\b(?:" + "|".join(re.escape(marker) for marker in SSL_ERROR_MARKERS) + r")\b"
)

# Their messages embed the request URL or host
_URL_BEARING_ERRORS = (requests.RequestException, urllib3.exceptions.HTTPError)


def user_agent(app_url: str) -> str:
    return f"TechNewsFeedBot/1.0 (+{app_url}) rss-fetcher"


def _error_chain(err: BaseException) -> Iterator[BaseException]:
    seen = set()
    current: Optional[BaseException] = err
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        # urllib3 keeps the underlying error on `reason`
        reason = getattr(current, "reason", None)
        if isinstance(reason, BaseException) and id(reason) not in seen:
            yield reason
            seen.add(id(reason))
        current = current.__cause__ or current.__context__


def is_ssl_error(err: BaseException) -> bool:
    """True if `err` is a certificate trust failure rather than a generic network error."""
    for exc in _error_chain(err):
        if isinstance(exc, (requests.exceptions.SSLError, ssl.SSLError)):
            return True
        code = getattr(exc, "code", None)
        if isinstance(code, str) and code.upper() in SSL_ERROR_CODES:
            return True
        if isinstance(exc, _URL_BEARING_ERRORS):
            continue
        if _MARKER_RE.search(str(exc).lower()):
            return True
    return False


def backoff_delay(attempt: int, base: float = DEFAULT_BACKOFF_BASE) -> float:
    """Delay after failed attempt number `attempt` (1-based)."""
    return base * 2 ** (attempt - 1)


class FeedFetcher:
    """Fetches raw feed bodies over HTTP."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: int = DEFAULT_ATTEMPTS,
        backoff_base: float = DEFAULT_BACKOFF_BASE,
        app_url: str = "http://localhost:3000",
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": user_agent(app_url),
            "Accept": ACCEPT_HEADER,
        })
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff_base = backoff_base
        self._sleep = sleep

    def fetch(self, url: str, timeout: Optional[float] = None) -> bytes:
        """Return the raw body at `url`.

        Raises:
            SslTrustError: On a certificate failure (no further attempts).
            TransientFetchError: When every attempt failed for another reason.
        """
        timeout = timeout or self.timeout
        last_error: Optional[BaseException] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                response = self.session.get(url, timeout=timeout)
                response.raise_for_status()
                return response.content
            except (requests.RequestException, OSError) as e:
                last_error = e
                logger.warning(
                    "Fetch attempt %d/%d failed for %s: %s", attempt, self.max_attempts, url, e
                )
                if is_ssl_error(e):
                    raise SslTrustError(url, cause=e, attempts=attempt) from e
                if attempt < self.max_attempts:
                    self._sleep(backoff_delay(attempt, self.backoff_base))

        raise TransientFetchError(url, cause=last_error, attempts=self.max_attempts) from last_error

"""Core clean logic."""

import re
from typing import Any

from feed_ingest.common.utils import text_of

DEFAULT_EXCERPT_LENGTH = 150
ELLIPSIS = "..."

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")
# Everything except printable ASCII, newline, carriage return and tab
_NON_PRINTABLE_RE = re.compile(r"[^\x20-\x7E\n\r\t]")


def _strip_markup(text: str) -> str:
    text = _TAG_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text)


def normalize(raw: Any) -> str:
    """Reduce a raw feed value (string or wrapped element) to plain text.

    Strips tags, collapses whitespace and drops non-printable characters.
    Anything that is not text yields "".
    """
    text = text_of(raw)
    if not text:
        return ""
    text = _strip_markup(text)
    text = _NON_PRINTABLE_RE.sub("", text)
    return text.strip()


def excerpt(text: Any, max_len: int = DEFAULT_EXCERPT_LENGTH) -> str:
    """Bounded preview of `text`; ellipsis only when something was cut."""
    if not isinstance(text, str) or not text:
        return ""
    clean_text = _strip_markup(text).strip()
    if len(clean_text) > max_len:
        return clean_text[:max_len] + ELLIPSIS
    return clean_text

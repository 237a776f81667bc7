"""Datetime utilities."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from dateutil.parser import parse as parse_date

# Timezone abbreviations seen in RSS pubDate values
TZINFOS = {
    "EST": timezone(timedelta(hours=-5)),
    "EDT": timezone(timedelta(hours=-4)),
    "CST": timezone(timedelta(hours=-6)),
    "CDT": timezone(timedelta(hours=-5)),
    "MST": timezone(timedelta(hours=-7)),
    "MDT": timezone(timedelta(hours=-6)),
    "PST": timezone(timedelta(hours=-8)),
    "PDT": timezone(timedelta(hours=-7)),
    "GMT": timezone.utc,
    "UTC": timezone.utc,
    "Z": timezone.utc,
    "BST": timezone(timedelta(hours=1)),
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def parse_feed_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an RSS/Atom date string. Returns None when absent or unparsable."""
    if not value or not value.strip():
        return None
    try:
        return ensure_aware(parse_date(value.strip(), tzinfos=TZINFOS))
    except (ValueError, OverflowError):
        return None

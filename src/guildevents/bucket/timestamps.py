"""Timestamp formats used on the bucket wire."""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

AMZ_DATE_FORMAT = "%Y%m%dT%H%M%SZ"


def amz_date(now: datetime | None = None) -> str:
    """Format a moment as an x-amz-date value (always UTC)."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).strftime(AMZ_DATE_FORMAT)


def parse_http_date(value: str | None) -> datetime | None:
    """Parse a Last-Modified header into an aware UTC datetime, or None."""
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)

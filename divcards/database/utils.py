"""
Timestamp helpers for stored filter dates.

Filter dates arrive in several shapes (file mtimes as ISO strings, online
filter headers ending in "Z", SQLite's datetime('now')) and are compared
in UTC.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

SQLITE_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_db_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 (optionally "Z"-suffixed) or SQLite datetime string.

    Returns:
        The datetime, or None for empty or unrecognised input
    """
    if not value:
        return None

    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"

    for parse in (datetime.fromisoformat, _parse_sqlite_datetime):
        try:
            return parse(text)
        except ValueError:
            continue
    return None


def _parse_sqlite_datetime(text: str) -> datetime:
    return datetime.strptime(text, SQLITE_DATETIME_FORMAT)


def ensure_utc(dt: datetime) -> datetime:
    """Convert to UTC; naive values are taken as local time."""
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt.astimezone(timezone.utc)


def utc_now_str() -> str:
    """Current UTC time in SQLite's datetime('now') format."""
    return datetime.now(timezone.utc).strftime(SQLITE_DATETIME_FORMAT)

"""UTC datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def iso_or_empty(value: datetime | None) -> str:
    """ISO8601 string for response schemas; empty string when unset."""
    return value.isoformat() if value else ""

"""
UTC helpers.

All timestamps are stored and compared in UTC. SQLite returns naive
datetimes, so anything read back from the store goes through
``ensure_utc`` before comparison.
"""

from datetime import datetime, timedelta, timezone

UTC = timezone.utc


def utc_now() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def expires_in(minutes: int) -> datetime:
    """Deadline ``minutes`` from now."""
    return utc_now() + timedelta(minutes=minutes)


def is_expired(deadline: datetime | None) -> bool:
    """A missing deadline counts as expired."""
    return deadline is None or ensure_utc(deadline) <= utc_now()

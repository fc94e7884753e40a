"""
Shared utilities.
"""

from .timezone import UTC, ensure_utc, expires_in, is_expired, utc_now

__all__ = ["UTC", "ensure_utc", "expires_in", "is_expired", "utc_now"]

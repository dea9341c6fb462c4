"""Cache freshness policy."""

from __future__ import annotations

from datetime import datetime, timedelta


def is_fresh(now: datetime, computed_at: datetime, ttl: timedelta) -> bool:
    """An entry is fresh while its age is strictly below the TTL."""
    return now - computed_at < ttl

"""In-memory, TTL-bounded store of computed month count tables.

Only the aggregator's commit step writes here. Entries are never evicted:
the store holds one entry per month visited during a session, which is a
handful at most. Do not reuse it unbounded in a long-running server.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, ConfigDict

from reportcal._constants import DEFAULT_CACHE_TTL
from reportcal.models.calendar import CountTable, MonthKey
from reportcal.state.policy import is_fresh


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CacheEntry(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    table: CountTable
    computed_at: datetime


class CacheStore:
    """Month -> :class:`CacheEntry` mapping with time-to-live freshness.

    Staleness is computed at read time from ``now - computed_at``; stale
    entries stay in place until overwritten by the next successful commit.
    """

    def __init__(
        self,
        *,
        ttl: timedelta = DEFAULT_CACHE_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[MonthKey, CacheEntry] = {}

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def get(self, key: MonthKey) -> CacheEntry | None:
        return self._entries.get(key)

    def is_fresh(self, entry: CacheEntry, ttl: timedelta | None = None) -> bool:
        return is_fresh(self._clock(), entry.computed_at, self._ttl if ttl is None else ttl)

    def get_fresh(self, key: MonthKey) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None or not self.is_fresh(entry):
            return None
        return entry

    def put(self, key: MonthKey, table: CountTable) -> CacheEntry:
        """Store ``table`` stamped with the current time, replacing any previous entry."""
        if table.month != key:
            raise ValueError(f"cannot store a table for {table.month} under {key}")
        entry = CacheEntry(table=table, computed_at=self._clock())
        self._entries[key] = entry
        return entry

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

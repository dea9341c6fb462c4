"""Month count aggregation.

An aggregation attempt turns a :class:`~reportcal.state.epoch.EpochTicket`
into a complete :class:`~reportcal.models.calendar.CountTable`:

1. publish a zero-filled table for the month straight away,
2. resolve the counts from the remote source (fan-out or batch),
3. replace failed days with 0, never failing the attempt as a whole,
4. write the table to the cache and publish it, but only if the ticket
   is still the current epoch.

Lifecycle per attempt: ``IDLE -> FETCHING -> COMMITTED | SUPERSEDED``.
Total remote failure still commits an all-zero table.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from reportcal._constants import DEFAULT_MAX_CONCURRENCY
from reportcal.config import CountStrategy
from reportcal.models.calendar import CountTable, DayKey, MonthKey
from reportcal.models.report import ListingKind, ReportListing
from reportcal.source import CountSource
from reportcal.state.epoch import EpochTicket, RequestEpoch
from reportcal.state.store import CacheStore

_logger = logging.getLogger(__name__)


class AttemptState(StrEnum):
    IDLE = "idle"
    FETCHING = "fetching"
    COMMITTED = "committed"
    SUPERSEDED = "superseded"


@dataclass(frozen=True, slots=True)
class AggregationResult:
    """Outcome of one attempt. ``table`` is ``None`` when superseded."""

    state: AttemptState
    month: MonthKey
    table: CountTable | None = None

    @property
    def committed(self) -> bool:
        return self.state == AttemptState.COMMITTED


def _valid_count(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _day_from_key(key: str) -> DayKey | None:
    try:
        return DayKey.parse(key)
    except ValueError:
        return DayKey.from_path(key)


class CountAggregator:
    """Produce complete per-day count tables for months, tolerating partial failure."""

    def __init__(
        self,
        source: CountSource,
        store: CacheStore,
        epoch: RequestEpoch,
        *,
        publish: Callable[[CountTable], None] | None = None,
        strategy: CountStrategy = CountStrategy.FAN_OUT,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._source = source
        self._store = store
        self._epoch = epoch
        self._publish = publish
        self._strategy = CountStrategy(strategy)
        self._max_concurrency = max_concurrency
        # Entries go away with their tickets.
        self._states: weakref.WeakKeyDictionary[EpochTicket, AttemptState] = weakref.WeakKeyDictionary()

    @property
    def strategy(self) -> CountStrategy:
        return self._strategy

    def state_of(self, ticket: EpochTicket) -> AttemptState:
        return self._states.get(ticket, AttemptState.IDLE)

    async def run(self, ticket: EpochTicket) -> AggregationResult:
        """Aggregate counts for ``ticket.month`` and commit them if still current.

        Never raises for remote failures. ``asyncio.CancelledError`` from an
        outer task cancellation propagates unchanged.
        """
        month = ticket.month
        self._states[ticket] = AttemptState.FETCHING
        working: dict[DayKey, int] = dict.fromkeys(month.days(), 0)

        # Provisional result so the caller never shows another month's counts.
        if self._epoch.is_current(ticket):
            self._emit(CountTable.zero_filled(month))

        try:
            if self._strategy == CountStrategy.BATCH:
                await self._resolve_batch(ticket, working)
            else:
                await self._resolve_fan_out(ticket, working)
        except asyncio.CancelledError:
            self._states[ticket] = AttemptState.SUPERSEDED
            _logger.debug("Aggregation #%d for %s cancelled", ticket.number, month)
            raise

        return self._commit(ticket, working)

    async def _resolve_fan_out(self, ticket: EpochTicket, working: dict[DayKey, int]) -> None:
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _count_day(day: DayKey) -> None:
            async with semaphore:
                if ticket.token.cancelled:
                    return
                try:
                    count = await self._source.count_for_day(day)
                except Exception as exc:
                    _logger.warning("Failed to fetch report count for %s: %s", day, exc)
                    return
            if not _valid_count(count):
                _logger.warning("Ignoring malformed report count %r for %s", count, day)
                return
            working[day] = count

        await asyncio.gather(*(_count_day(day) for day in working))

    async def _resolve_batch(self, ticket: EpochTicket, working: dict[DayKey, int]) -> None:
        month = ticket.month
        try:
            listing = await self._source.list_month(month)
        except Exception as exc:
            _logger.warning("Failed to fetch report counts for %s: %s", month, exc)
            return
        if ticket.token.cancelled:
            return
        _apply_listing(month, listing, working)

    def _commit(self, ticket: EpochTicket, working: dict[DayKey, int]) -> AggregationResult:
        month = ticket.month
        if not self._epoch.is_current(ticket):
            self._states[ticket] = AttemptState.SUPERSEDED
            _logger.debug("Discarding superseded aggregation #%d for %s", ticket.number, month)
            return AggregationResult(AttemptState.SUPERSEDED, month)

        table = CountTable(month, working)
        self._store.put(month, table)
        self._states[ticket] = AttemptState.COMMITTED
        _logger.debug("Committed counts for %s (%d reports)", month, table.total)
        self._emit(table)
        return AggregationResult(AttemptState.COMMITTED, month, table)

    def _emit(self, table: CountTable) -> None:
        if self._publish is not None:
            self._publish(table)


def _apply_listing(month: MonthKey, listing: ReportListing, working: dict[DayKey, int]) -> None:
    """Fold a month-scoped listing into the working table."""
    if listing.kind == ListingKind.COUNTS:
        for key, count in listing.counts.items():
            day = _day_from_key(key)
            if day is None or not month.contains(day) or not _valid_count(count):
                _logger.debug("Ignoring count %r for %r outside %s", count, key, month)
                continue
            working[day] = count
        return

    for item in listing.items:
        day = item.day
        if day is None or not month.contains(day):
            _logger.debug("Ignoring report %r outside %s", item.path or item.name, month)
            continue
        working[day] += 1

"""Selection controller for the calendar's report-count badges."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import date
from typing import Any

from reportcal._constants import DEFAULT_MAX_CONCURRENCY
from reportcal.aggregator import AggregationResult, CountAggregator
from reportcal.config import CountStrategy
from reportcal.exceptions import ReportCalError
from reportcal.models.calendar import CountTable, MonthKey
from reportcal.source import CountSource
from reportcal.state.epoch import RequestEpoch
from reportcal.state.store import CacheStore

_logger = logging.getLogger(__name__)


class SelectionController:
    """Track the month of interest and keep its count table published.

    Usage::

        async with client.create_controller(on_counts=render) as controller:
            controller.select_date(date(2025, 6, 29))
            await controller.wait()
            badges = controller.counts

    Every change of the selected date or displayed month is resolved from
    the cache when the entry is fresh, and otherwise by a new aggregation
    attempt that supersedes whatever attempt was in flight.
    """

    def __init__(
        self,
        source: CountSource,
        store: CacheStore,
        *,
        strategy: CountStrategy = CountStrategy.FAN_OUT,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        today: Callable[[], date] = date.today,
        on_counts: Callable[[CountTable], None] | None = None,
    ) -> None:
        self._store = store
        self._today = today
        self._on_counts = on_counts
        self._epoch = RequestEpoch()
        self._aggregator = CountAggregator(
            source,
            store,
            self._epoch,
            publish=self._publish,
            strategy=strategy,
            max_concurrency=max_concurrency,
        )
        self._selected_date: date | None = None
        self._displayed_month = MonthKey.from_date(today())
        self._counts: CountTable | None = None
        self._task: asyncio.Task[AggregationResult] | None = None
        self._closed = False

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> SelectionController:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    def start(self) -> asyncio.Task[AggregationResult] | None:
        """Show the current month: publish it from cache or start fetching it."""
        self._require_open()
        self._displayed_month = MonthKey.from_date(self._today())
        return self._request(self._displayed_month)

    async def aclose(self) -> None:
        """Cancel any in-flight attempt; no commit can happen afterwards."""
        if self._closed:
            return
        self._closed = True
        self._epoch.cancel("controller closed")
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                current = asyncio.current_task()
                if current is not None and current.cancelling():
                    raise

    # ------------------------------------------------------------------
    # State exposed to the presentation layer
    # ------------------------------------------------------------------

    @property
    def counts(self) -> CountTable | None:
        """Latest published table (provisional zeros while fetching)."""
        return self._counts

    @property
    def loading(self) -> bool:
        task = self._task
        return task is not None and not task.done()

    @property
    def active_month(self) -> MonthKey | None:
        return self._epoch.active_month

    @property
    def selected_date(self) -> date | None:
        return self._selected_date

    @property
    def displayed_month(self) -> MonthKey:
        return self._displayed_month

    @property
    def store(self) -> CacheStore:
        return self._store

    # ------------------------------------------------------------------
    # Cursor changes
    # ------------------------------------------------------------------

    def select_date(self, value: date | None) -> asyncio.Task[AggregationResult] | None:
        """Select a date; ``None`` clears the selection without fetching."""
        self._require_open()
        self._selected_date = value
        if value is None:
            return None
        return self._request(MonthKey.from_date(value))

    def show_month(self, month: MonthKey) -> asyncio.Task[AggregationResult] | None:
        self._require_open()
        self._displayed_month = month
        return self._request(month)

    def next_month(self) -> asyncio.Task[AggregationResult] | None:
        return self.show_month(self._displayed_month.shift(1))

    def previous_month(self) -> asyncio.Task[AggregationResult] | None:
        return self.show_month(self._displayed_month.shift(-1))

    async def wait(self) -> AggregationResult | None:
        """Wait for the in-flight attempt, if any, and return its outcome.

        If the attempt is superseded while waiting, the newer one is
        followed instead.
        """
        while True:
            task = self._task
            if task is None:
                return None
            try:
                return await asyncio.shield(task)
            except asyncio.CancelledError:
                current = asyncio.current_task()
                if (current is not None and current.cancelling()) or task is self._task:
                    raise

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_open(self) -> None:
        if self._closed:
            raise ReportCalError("SelectionController is closed")

    def _request(self, month: MonthKey) -> asyncio.Task[AggregationResult] | None:
        """Resolve ``month`` from cache or schedule an aggregation for it.

        Returns the task computing the month, or ``None`` when the cache
        answered.
        """
        if month == self._epoch.active_month and self.loading:
            # Same month is already being fetched; join that attempt.
            return self._task

        if month != self._epoch.active_month:
            self._cancel_in_flight()
            ticket = self._epoch.advance(month)
        else:
            ticket = None

        entry = self._store.get(month)
        if entry is not None and self._store.is_fresh(entry):
            _logger.debug("Cache hit for %s", month)
            self._publish(entry.table)
            return None

        if ticket is None:
            ticket = self._epoch.advance(month)
        _logger.debug("Fetching report counts for %s (attempt #%d)", month, ticket.number)
        self._task = asyncio.get_running_loop().create_task(
            self._aggregator.run(ticket),
            name=f"reportcal-counts-{month}",
        )
        return self._task

    def _cancel_in_flight(self) -> None:
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()

    def _publish(self, table: CountTable) -> None:
        self._counts = table
        if self._on_counts is None:
            return
        try:
            self._on_counts(table)
        except Exception:
            _logger.debug("on_counts callback failed", exc_info=True)

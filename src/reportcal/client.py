"""High-level async client for the report API."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import Any

import aiohttp

from reportcal._api.reports import fetch_presigned_url, list_reports
from reportcal._transport import HttpTransport, Transport
from reportcal.config import ReportCalConfig
from reportcal.controller import SelectionController
from reportcal.exceptions import ReportCalError
from reportcal.models.calendar import CountTable, DayKey, MonthKey
from reportcal.models.report import ListingKind, ReportItem, ReportListing
from reportcal.source import HttpCountSource
from reportcal.state.store import CacheStore

_logger = logging.getLogger(__name__)


def _day_key(value: date | DayKey) -> DayKey:
    return value if isinstance(value, DayKey) else DayKey.from_date(value)


class ReportCalClient:
    """Async client for the report API and owner of the session's count cache.

    Usage::

        async with ReportCalClient(config) as client:
            reports = await client.list_reports(date(2025, 6, 29))
            async with client.create_controller() as controller:
                await controller.wait()
    """

    def __init__(
        self,
        config: ReportCalConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        store: CacheStore | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._external_transport = transport is not None
        self._store = store if store is not None else CacheStore(ttl=config.cache_ttl)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ReportCalClient:
        if self._external_transport:
            return self
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise ReportCalError("Client not initialized. Use 'async with ReportCalClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    @property
    def config(self) -> ReportCalConfig:
        return self._config

    async def list_reports(self, day: date | DayKey) -> list[ReportItem]:
        """List the reports stored for one day."""
        listing = await list_reports(self._require_transport(), _day_key(day).prefix)
        if listing.kind == ListingKind.COUNTS:
            return []
        return listing.items

    async def list_month(self, month: MonthKey) -> ReportListing:
        """Raw month-scoped listing (explicit counts or items, as the server answers)."""
        return await list_reports(self._require_transport(), month.prefix)

    async def get_presigned_url(self, day: date | DayKey, report_name: str) -> str:
        """Time-limited download URL for ``report_name`` stored on ``day``."""
        return await fetch_presigned_url(self._require_transport(), str(_day_key(day)), report_name)

    # ------------------------------------------------------------------
    # Report counts
    # ------------------------------------------------------------------

    @property
    def store(self) -> CacheStore:
        return self._store

    def reset_cache(self) -> None:
        self._store.clear()

    def count_source(self) -> HttpCountSource:
        return HttpCountSource(self._require_transport())

    def create_controller(
        self,
        *,
        store: CacheStore | None = None,
        on_counts: Callable[[CountTable], None] | None = None,
        today: Callable[[], date] | None = None,
    ) -> SelectionController:
        """Build a :class:`SelectionController` over this client's source and cache."""
        kwargs: dict[str, Any] = {}
        if today is not None:
            kwargs["today"] = today
        return SelectionController(
            self.count_source(),
            store if store is not None else self._store,
            strategy=self._config.count_strategy,
            max_concurrency=self._config.max_concurrency,
            on_counts=on_counts,
            **kwargs,
        )

    async def fetch_month_counts(self, month: MonthKey) -> CountTable:
        """Compute (or reuse from cache) the count table of one month.

        Convenience wrapper for scripts: runs a throwaway controller
        pointed at ``month`` and returns what it published.
        """
        controller = self.create_controller()
        try:
            controller.show_month(month)
            await controller.wait()
            table = controller.counts
        finally:
            await controller.aclose()
        assert table is not None  # noqa: S101
        _logger.debug("Fetched counts for %s: %d reports", month, table.total)
        return table

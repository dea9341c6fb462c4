"""Remote count sources used by the aggregator."""

from __future__ import annotations

from typing import Protocol

from reportcal._api.reports import list_reports
from reportcal._transport import Transport
from reportcal.models.calendar import DayKey, MonthKey
from reportcal.models.report import ListingKind, ReportListing


class CountSource(Protocol):
    """Answers "how many reports exist" questions; any call may fail."""

    async def count_for_day(self, day: DayKey) -> int:
        ...

    async def list_month(self, month: MonthKey) -> ReportListing:
        ...


class HttpCountSource:
    """:class:`CountSource` backed by the ``/list-reports`` endpoint."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def count_for_day(self, day: DayKey) -> int:
        listing = await list_reports(self._transport, day.prefix)
        if listing.kind == ListingKind.COUNTS:
            return listing.counts.get(str(day), 0)
        return len(listing.items)

    async def list_month(self, month: MonthKey) -> ReportListing:
        return await list_reports(self._transport, month.prefix)

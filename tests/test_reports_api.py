from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest

from reportcal._api.reports import fetch_presigned_url, list_reports, parse_listing
from reportcal.aggregator import CountAggregator
from reportcal.config import CountStrategy
from reportcal.exceptions import ReportCalApiError, ReportCalValidationError
from reportcal.models.calendar import DayKey, MonthKey
from reportcal.models.report import ListingKind, ReportItem
from reportcal.source import HttpCountSource
from reportcal.state.epoch import RequestEpoch
from reportcal.state.store import CacheStore


@dataclass
class FakeTransport:
    responses: dict[tuple[str, str], Any] = field(default_factory=dict)
    calls: list[tuple[str, dict[str, str]]] = field(default_factory=list)

    async def get_json(self, endpoint: str, params: Mapping[str, str]) -> Any:
        self.calls.append((endpoint, dict(params)))
        key = params.get("prefix") or params.get("report", "")
        return self.responses[(endpoint, key)]


_ITEM = {"name": "daily.pdf", "path": "2025/06/29/daily.pdf", "lastModified": "2025-06-29T06:00:00Z", "size": 2048}


def test_parse_listing_accepts_raw_list() -> None:
    listing = parse_listing("2025/06/29", [_ITEM])

    assert listing.kind == ListingKind.ITEMS
    assert listing.items[0].name == "daily.pdf"
    assert listing.items[0].last_modified == "2025-06-29T06:00:00Z"
    assert listing.items[0].raw == _ITEM


def test_parse_listing_accepts_details_object() -> None:
    listing = parse_listing("2025/06/29", {"details": [_ITEM, {"name": "b.xlsx", "path": "2025/06/29/b.xlsx"}]})

    assert listing.kind == ListingKind.ITEMS
    assert [item.kind for item in listing.items] == ["PDF", "XLSX"]


def test_parse_listing_prefers_explicit_counts() -> None:
    listing = parse_listing(
        "2025/06/",
        {"details": [_ITEM], "counts": {"2025-06-29": 1, "2025-06-30": -2, "2025-06-01": "x"}},
    )

    assert listing.kind == ListingKind.COUNTS
    assert listing.counts == {"2025-06-29": 1}
    assert listing.items == []


@pytest.mark.parametrize("payload", [None, "oops", {"reports": []}, {"details": "nope"}, [1, 2]])
def test_parse_listing_rejects_malformed_payloads(payload: Any) -> None:
    with pytest.raises(ReportCalApiError):
        parse_listing("2025/06/29", payload)


def test_report_item_helpers() -> None:
    item = ReportItem.model_validate({"name": "Summary.DOCX", "path": "x/2025/06/02/Summary.DOCX", "size": "512"})

    assert item.kind == "DOCX"
    assert item.day == DayKey(2025, 6, 2)
    assert item.size == 512
    assert ReportItem.model_validate({"name": "notes.txt"}).kind == "OTHER"


@pytest.mark.asyncio
async def test_list_reports_sanitizes_prefix() -> None:
    transport = FakeTransport(responses={("/list-reports", "2025/06/29"): {"details": [_ITEM]}})

    listing = await list_reports(transport, "  <2025/06/29> ")

    assert transport.calls == [("/list-reports", {"prefix": "2025/06/29"})]
    assert len(listing.items) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("prefix", ["2025-06-29", "2025/6/29", "", "2025/06/29/extra"])
async def test_list_reports_rejects_bad_prefix_before_request(prefix: str) -> None:
    transport = FakeTransport()

    with pytest.raises(ReportCalValidationError):
        await list_reports(transport, prefix)
    assert transport.calls == []


@pytest.mark.asyncio
async def test_presigned_url_validated() -> None:
    transport = FakeTransport(
        responses={
            ("/presigned-url", "daily.pdf"): {"url": "https://bucket.example.com/2025/06/29/daily.pdf?sig=abc"},
            ("/presigned-url", "broken.pdf"): {"url": "not a url"},
            ("/presigned-url", "missing.pdf"): {},
        }
    )

    url = await fetch_presigned_url(transport, "2025-06-29", "daily.pdf")

    assert url.startswith("https://bucket.example.com/")
    assert transport.calls[0] == ("/presigned-url", {"date": "2025-06-29", "report": "daily.pdf"})
    with pytest.raises(ReportCalApiError):
        await fetch_presigned_url(transport, "2025-06-29", "broken.pdf")
    with pytest.raises(ReportCalApiError):
        await fetch_presigned_url(transport, "2025-06-29", "missing.pdf")


@pytest.mark.asyncio
async def test_presigned_url_rejects_bad_inputs() -> None:
    transport = FakeTransport()

    with pytest.raises(ReportCalValidationError):
        await fetch_presigned_url(transport, "2025/06/29", "daily.pdf")
    with pytest.raises(ReportCalValidationError):
        await fetch_presigned_url(transport, "2025-06-29", "../etc/passwd")
    assert transport.calls == []


@pytest.mark.asyncio
async def test_http_count_source_counts_items_or_uses_counts() -> None:
    transport = FakeTransport(
        responses={
            ("/list-reports", "2025/06/29"): [_ITEM, _ITEM],
            ("/list-reports", "2025/06/30"): {"details": [], "counts": {"2025-06-30": 4}},
            ("/list-reports", "2025/06/"): {"details": [_ITEM]},
        }
    )
    source = HttpCountSource(transport)

    assert await source.count_for_day(DayKey(2025, 6, 29)) == 2
    assert await source.count_for_day(DayKey(2025, 6, 30)) == 4
    month_listing = await source.list_month(MonthKey(2025, 6))
    assert month_listing.prefix == "2025/06/"
    assert month_listing.items[0].day == DayKey(2025, 6, 29)


def test_parse_listing_normalises_path_style_count_keys() -> None:
    listing = parse_listing("2025/06/", {"details": [], "counts": {"2025/06/29": 1, "2025-06-02": 3, "junk": 5}})

    assert listing.counts == {"2025-06-29": 1, "2025-06-02": 3}


@dataclass
class _SameBodyTransport:
    body: Any

    async def get_json(self, endpoint: str, params: Mapping[str, str]) -> Any:
        return self.body


@pytest.mark.asyncio
@pytest.mark.parametrize("strategy", [CountStrategy.FAN_OUT, CountStrategy.BATCH])
async def test_path_keyed_counts_give_same_table_for_both_strategies(strategy: CountStrategy) -> None:
    source = HttpCountSource(_SameBodyTransport({"details": [], "counts": {"2025/06/29": 1}}))
    epoch = RequestEpoch()
    aggregator = CountAggregator(source, CacheStore(), epoch, strategy=strategy)

    result = await aggregator.run(epoch.advance(MonthKey(2025, 6)))

    assert result.table is not None
    assert result.table[DayKey(2025, 6, 29)] == 1
    assert result.table.total == 1

"""Report listing and download endpoints.

Endpoints:
  - /list-reports   (files under a YYYY/MM/DD or YYYY/MM/ prefix)
  - /presigned-url  (time-limited download URL for one report)
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlparse

from pydantic import ValidationError

from reportcal._api._common import validate_date, validate_prefix, validate_report_name
from reportcal._constants import LIST_REPORTS_ENDPOINT, PRESIGNED_URL_ENDPOINT
from reportcal._transport import Transport
from reportcal.exceptions import ReportCalApiError
from reportcal.models.calendar import DayKey
from reportcal.models.report import ListingKind, ReportItem, ReportListing

_logger = logging.getLogger(__name__)


def _count_day(key: Any) -> DayKey | None:
    text = str(key)
    try:
        return DayKey.parse(text)
    except ValueError:
        return DayKey.from_path(text)


def _parse_counts(prefix: str, raw_counts: dict[Any, Any]) -> dict[str, int]:
    """Keep the well-formed ``{day: count}`` pairs of a counts mapping.

    Keys may be ``YYYY-MM-DD`` or ``YYYY/MM/DD``; they come out as ``YYYY-MM-DD``.
    """
    counts: dict[str, int] = {}
    for key, value in raw_counts.items():
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            _logger.debug("Ignoring count %r for %r under %s", value, key, prefix)
            continue
        day = _count_day(key)
        if day is None:
            _logger.debug("Ignoring count for unparsable day %r under %s", key, prefix)
            continue
        counts[str(day)] = value
    return counts


def _parse_items(prefix: str, raw_items: list[Any]) -> list[ReportItem]:
    items: list[ReportItem] = []
    for entry in raw_items:
        if not isinstance(entry, dict):
            raise ReportCalApiError(
                f"{LIST_REPORTS_ENDPOINT} returned a non-object item for {prefix}: {entry!r:.64}",
                code="invalid_item",
                endpoint=LIST_REPORTS_ENDPOINT,
            )
        try:
            items.append(ReportItem.model_validate(entry))
        except ValidationError as exc:
            raise ReportCalApiError(
                f"{LIST_REPORTS_ENDPOINT} returned an invalid item for {prefix}: {exc}",
                code="invalid_item",
                endpoint=LIST_REPORTS_ENDPOINT,
            ) from exc
    return items


def parse_listing(prefix: str, payload: Any) -> ReportListing:
    """Normalize a ``/list-reports`` body into a :class:`ReportListing`.

    Accepted shapes:
      - ``[item, ...]``
      - ``{"details": [item, ...]}``
      - ``{"details": [...], "counts": {"YYYY-MM-DD": n}}`` (counts win; ``YYYY/MM/DD`` keys are normalised)
    """
    if isinstance(payload, list):
        return ReportListing(kind=ListingKind.ITEMS, prefix=prefix, items=_parse_items(prefix, payload))

    if isinstance(payload, dict):
        raw_counts = payload.get("counts")
        if isinstance(raw_counts, dict):
            return ReportListing(
                kind=ListingKind.COUNTS,
                prefix=prefix,
                counts=_parse_counts(prefix, raw_counts),
            )
        details = payload.get("details")
        if isinstance(details, list):
            return ReportListing(kind=ListingKind.ITEMS, prefix=prefix, items=_parse_items(prefix, details))

    raise ReportCalApiError(
        f"Invalid response format from {LIST_REPORTS_ENDPOINT} for {prefix}",
        code="invalid_format",
        endpoint=LIST_REPORTS_ENDPOINT,
    )


async def list_reports(transport: Transport, prefix: str) -> ReportListing:
    """List the reports stored under a day (``YYYY/MM/DD``) or month (``YYYY/MM/``) prefix."""
    cleaned = validate_prefix(prefix)
    payload = await transport.get_json(LIST_REPORTS_ENDPOINT, {"prefix": cleaned})
    return parse_listing(cleaned, payload)


async def fetch_presigned_url(transport: Transport, date: str, report: str) -> str:
    """Mint a time-limited download URL for ``report`` stored on ``date`` (``YYYY-MM-DD``)."""
    params = {"date": validate_date(date), "report": validate_report_name(report)}
    payload = await transport.get_json(PRESIGNED_URL_ENDPOINT, params)

    url = payload.get("url") if isinstance(payload, dict) else None
    if not isinstance(url, str):
        raise ReportCalApiError(
            f"Invalid response format from {PRESIGNED_URL_ENDPOINT}",
            code="invalid_format",
            endpoint=PRESIGNED_URL_ENDPOINT,
        )

    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ReportCalApiError(
            f"Invalid URL received from {PRESIGNED_URL_ENDPOINT}: {url[:64]}",
            code="invalid_url",
            endpoint=PRESIGNED_URL_ENDPOINT,
        )
    return url

"""reportcal - Async Python client for dated report listings and calendar count badges."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("reportcal")
except PackageNotFoundError:
    __version__ = "0+local"
from reportcal.aggregator import AggregationResult, AttemptState, CountAggregator
from reportcal.client import ReportCalClient
from reportcal.config import CountStrategy, ReportCalConfig
from reportcal.controller import SelectionController
from reportcal.exceptions import (
    ReportCalApiError,
    ReportCalConfigError,
    ReportCalError,
    ReportCalNotFoundError,
    ReportCalTransportError,
    ReportCalValidationError,
)
from reportcal.models import CountTable, DayKey, ListingKind, MonthKey, ReportItem, ReportListing
from reportcal.source import CountSource, HttpCountSource
from reportcal.state.epoch import CancellationToken, EpochTicket, RequestEpoch
from reportcal.state.store import CacheEntry, CacheStore

__all__ = [
    "__version__",
    "AggregationResult",
    "AttemptState",
    "CacheEntry",
    "CacheStore",
    "CancellationToken",
    "CountAggregator",
    "CountSource",
    "CountStrategy",
    "CountTable",
    "DayKey",
    "EpochTicket",
    "HttpCountSource",
    "ListingKind",
    "MonthKey",
    "ReportCalApiError",
    "ReportCalClient",
    "ReportCalConfig",
    "ReportCalConfigError",
    "ReportCalError",
    "ReportCalNotFoundError",
    "ReportCalTransportError",
    "ReportCalValidationError",
    "ReportItem",
    "ReportListing",
    "RequestEpoch",
    "SelectionController",
]

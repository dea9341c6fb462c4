"""Data models for reportcal."""

from reportcal.models._base import ReportCalBaseModel
from reportcal.models.calendar import CountTable, DayKey, MonthKey
from reportcal.models.report import ListingKind, ReportItem, ReportListing

__all__ = [
    "CountTable",
    "DayKey",
    "ListingKind",
    "MonthKey",
    "ReportCalBaseModel",
    "ReportItem",
    "ReportListing",
]

"""Shared helpers for report API endpoint modules.

This module centralizes input sanitation and validation so every request
leaving the library is well-formed. It is internal to reportcal and may
change at any time.
"""

from __future__ import annotations

import re

from reportcal._constants import DATE_RE, DAY_PREFIX_RE, MONTH_PREFIX_RE, REPORT_NAME_RE
from reportcal.exceptions import ReportCalValidationError

_STRIP_CHARS_RE = re.compile(r"[<>]")


def sanitize(value: str) -> str:
    """Trim surrounding whitespace and drop angle brackets."""
    return _STRIP_CHARS_RE.sub("", value.strip())


def validate_prefix(prefix: str) -> str:
    """Return the sanitized prefix; accepts ``YYYY/MM/DD`` and ``YYYY/MM/``."""
    cleaned = sanitize(prefix)
    if not (DAY_PREFIX_RE.match(cleaned) or MONTH_PREFIX_RE.match(cleaned)):
        raise ReportCalValidationError(f"Invalid prefix {prefix!r}. Expected YYYY/MM/DD or YYYY/MM/")
    return cleaned


def validate_date(value: str) -> str:
    cleaned = sanitize(value)
    if not DATE_RE.match(cleaned):
        raise ReportCalValidationError(f"Invalid date {value!r}. Expected YYYY-MM-DD")
    return cleaned


def validate_report_name(value: str) -> str:
    cleaned = sanitize(value)
    if not REPORT_NAME_RE.match(cleaned):
        raise ReportCalValidationError(f"Invalid report name {value!r}")
    return cleaned

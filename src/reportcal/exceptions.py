"""Custom exception hierarchy for reportcal."""

from __future__ import annotations


class ReportCalError(Exception):
    """Base exception for all reportcal errors."""


class ReportCalConfigError(ReportCalError):
    """Invalid or missing configuration."""


class ReportCalValidationError(ReportCalError, ValueError):
    """Input rejected before any request was sent (bad prefix, date or report name)."""


class ReportCalTransportError(ReportCalError):
    """HTTP-level failure (network, timeout, non-200)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class ReportCalApiError(ReportCalError):
    """The endpoint answered, but with a payload we cannot use."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        endpoint: str = "",
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        super().__init__(message)


class ReportCalNotFoundError(ReportCalApiError):
    """Nothing exists at the requested prefix, date or report (HTTP 404).

    For count aggregation this is indistinguishable from "zero reports"
    and is recovered as such.
    """

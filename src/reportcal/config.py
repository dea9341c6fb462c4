"""Client configuration for reportcal."""

from __future__ import annotations

import dataclasses
import os
from datetime import timedelta
from enum import StrEnum
from typing import Any

from reportcal._constants import DEFAULT_API_TIMEOUT, DEFAULT_CACHE_TTL, DEFAULT_MAX_CONCURRENCY
from reportcal.exceptions import ReportCalConfigError


def _default_user_agent() -> str:
    from reportcal import __version__

    return f"reportcal/{__version__}"


class CountStrategy(StrEnum):
    """How a month's per-day counts are sourced.

    ``fan_out`` lists every day of the month with its own request;
    ``batch`` issues a single month-scoped request and either copies the
    server's per-day counts or groups the returned items by day.
    """

    FAN_OUT = "fan_out"
    BATCH = "batch"


@dataclasses.dataclass(frozen=True)
class ReportCalConfig:
    """Client configuration.

    Parameters
    ----------
    api_base_url : str
        Base URL of the report API (``/list-reports`` and
        ``/presigned-url`` are appended to it).
    api_timeout : float
        Total timeout in seconds applied to every HTTP call.
    cache_ttl : timedelta
        How long a computed month of counts stays fresh.  Observed
        deployments used 10 or 30 minutes; defaults to 30.
    count_strategy : CountStrategy
        Sourcing strategy for count aggregation.
    max_concurrency : int
        Upper bound on concurrent per-day requests during a fan-out.
    user_agent : str
        ``User-Agent`` header sent with every request.
    """

    api_base_url: str
    api_timeout: float = DEFAULT_API_TIMEOUT
    cache_ttl: timedelta = DEFAULT_CACHE_TTL
    count_strategy: CountStrategy = CountStrategy.FAN_OUT
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    user_agent: str = dataclasses.field(default_factory=_default_user_agent)

    def __post_init__(self) -> None:
        base_url = self.api_base_url.strip().rstrip("/")
        if not base_url.startswith(("http://", "https://")):
            raise ReportCalConfigError(f"api_base_url must be an http(s) URL, got {self.api_base_url!r}")
        object.__setattr__(self, "api_base_url", base_url)

        if self.api_timeout <= 0:
            raise ReportCalConfigError(f"api_timeout must be positive, got {self.api_timeout}")
        if self.cache_ttl <= timedelta(0):
            raise ReportCalConfigError(f"cache_ttl must be positive, got {self.cache_ttl}")
        if self.max_concurrency < 1:
            raise ReportCalConfigError(f"max_concurrency must be at least 1, got {self.max_concurrency}")
        try:
            object.__setattr__(self, "count_strategy", CountStrategy(self.count_strategy))
        except ValueError as exc:
            raise ReportCalConfigError(f"Unknown count_strategy {self.count_strategy!r}") from exc

    @classmethod
    def from_env(cls, **overrides: Any) -> ReportCalConfig:
        """Create configuration from environment variables.

        Reads ``REPORTCAL_API_BASE_URL`` and the optional ``REPORTCAL_*``
        variables. Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        ReportCalConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "REPORTCAL_API_BASE_URL": "api_base_url",
            "REPORTCAL_COUNT_STRATEGY": "count_strategy",
            "REPORTCAL_USER_AGENT": "user_agent",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val.strip()

        # Numeric values, handled separately
        try:
            timeout_env = env.get("REPORTCAL_API_TIMEOUT")
            if timeout_env is not None and "api_timeout" not in overrides:
                config_kwargs["api_timeout"] = float(timeout_env)

            ttl_env = env.get("REPORTCAL_CACHE_TTL")
            if ttl_env is not None and "cache_ttl" not in overrides:
                config_kwargs["cache_ttl"] = timedelta(seconds=float(ttl_env))

            concurrency_env = env.get("REPORTCAL_MAX_CONCURRENCY")
            if concurrency_env is not None and "max_concurrency" not in overrides:
                config_kwargs["max_concurrency"] = int(concurrency_env)
        except ValueError as exc:
            raise ReportCalConfigError(f"Invalid numeric REPORTCAL_* value: {exc}") from exc

        config_kwargs.update(overrides)

        if "api_base_url" not in config_kwargs:
            raise ReportCalConfigError("REPORTCAL_API_BASE_URL is not set")

        return cls(**config_kwargs)

"""HTTP transport for the report API."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from reportcal.config import ReportCalConfig
from reportcal.exceptions import ReportCalApiError, ReportCalNotFoundError, ReportCalTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, endpoint: str, params: Mapping[str, str]) -> Any:
        ...


class HttpTransport:
    """JSON-over-HTTP GET transport with a per-call timeout."""

    def __init__(self, config: ReportCalConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.api_timeout)

    async def get_json(self, endpoint: str, params: Mapping[str, str]) -> Any:
        """GET ``endpoint`` with query ``params`` and return the decoded JSON body."""
        url = f"{self._config.api_base_url}{endpoint}"
        headers = {
            "accept": "application/json",
            "user-agent": self._config.user_agent,
        }

        _logger.debug("GET %s params=%s", url, dict(params))

        try:
            async with self._http.get(url, params=dict(params), headers=headers, timeout=self._timeout) as resp:
                text = await resp.text()
                if resp.status == 404:
                    raise ReportCalNotFoundError(
                        f"Nothing found at {endpoint} for {dict(params)}",
                        code="404",
                        endpoint=endpoint,
                    )
                if resp.status != 200:
                    raise ReportCalTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except (ReportCalTransportError, ReportCalApiError):
            raise
        except asyncio.TimeoutError as exc:
            raise ReportCalTransportError(
                f"Request to {endpoint} timed out after {self._config.api_timeout}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise ReportCalTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ReportCalApiError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                code="invalid_json",
                endpoint=endpoint,
            ) from exc

"""Internal constants shared across the library."""

import re
from datetime import timedelta

LIST_REPORTS_ENDPOINT = "/list-reports"
PRESIGNED_URL_ENDPOINT = "/presigned-url"

DEFAULT_API_TIMEOUT: float = 10.0
DEFAULT_CACHE_TTL = timedelta(minutes=30)
DEFAULT_MAX_CONCURRENCY = 8

# ------------------------------------------------------------------
# Input formats accepted by the report endpoints
# ------------------------------------------------------------------

DAY_PREFIX_RE = re.compile(r"^\d{4}/\d{2}/\d{2}$")
MONTH_PREFIX_RE = re.compile(r"^\d{4}/\d{2}/$")
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
REPORT_NAME_RE = re.compile(r"^[a-zA-Z0-9._-]+$")

# Date embedded in a storage path, e.g. ``reports/2025/06/29/daily.pdf``.
PATH_DATE_RE = re.compile(r"(\d{4})/(\d{2})/(\d{2})")

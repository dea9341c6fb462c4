#!/usr/bin/env python3
"""Dump report counts (or the reports of a single day) from a live API.

Usage
-----
Set environment variables and run::

    export REPORTCAL_API_BASE_URL="https://reports.example.com"
    python scripts/dump_counts.py --month 2025-06

Options::

    --month YYYY-MM      Month to count (default: current month)
    --day YYYY-MM-DD     List the reports of this day instead of counting
    --strategy NAME      fan_out or batch (default: REPORTCAL_COUNT_STRATEGY or fan_out)
    --json               Output as machine-readable JSON
    --verbose            Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from reportcal import (  # noqa: E402
    CountTable,
    DayKey,
    MonthKey,
    ReportCalClient,
    ReportCalConfig,
    ReportCalError,
)

# ── helpers ──────────────────────────────────────────────────


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _format_table(table: CountTable) -> list[str]:
    out = [_section(f"Report counts for {table.month}")]
    for day, count in table.items():
        marker = "*" if count else " "
        out.append(f"  {marker} {day}  {count}")
    out.append(f"\n  total: {table.total} reports on {len(table.days_with_reports())} days")
    return out


def _format_size(size: int | None) -> str:
    if size is None:
        return "?"
    if size > 1024 * 1024:
        return f"{size / (1024 * 1024):.1f} MB"
    if size > 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size} B"


# ── main ─────────────────────────────────────────────────────


async def dump(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if args.strategy:
        overrides["count_strategy"] = args.strategy
    config = ReportCalConfig.from_env(**overrides)

    out: list[str] = []
    result: dict[str, Any] = {}
    async with ReportCalClient(config) as client:
        if args.day:
            day = DayKey.parse(args.day)
            reports = await client.list_reports(day)
            result = {
                "day": str(day),
                "reports": [report.model_dump(exclude={"raw"}) for report in reports],
            }
            out.append(_section(f"Reports for {day}"))
            for report in reports:
                out.append(f"  {report.kind:<5} {report.name}  ({_format_size(report.size)})")
            if not reports:
                out.append("  (none)")
        else:
            month = MonthKey.parse(args.month) if args.month else MonthKey.from_date(date.today())
            table = await client.fetch_month_counts(month)
            result = {"month": str(month), "counts": table.as_dict(), "total": table.total}
            out.extend(_format_table(table))

    if not args.json:
        print("\n".join(out))
    return result


def main() -> int:
    parser = argparse.ArgumentParser(description="Dump report counts from the report API")
    parser.add_argument("--month", help="Month to count (YYYY-MM)")
    parser.add_argument("--day", help="List the reports of this day (YYYY-MM-DD)")
    parser.add_argument("--strategy", choices=["fan_out", "batch"], help="Count sourcing strategy")
    parser.add_argument("--json", action="store_true", help="Output JSON")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        result = asyncio.run(dump(args))
    except (ReportCalError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result, indent=2, default=str, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())

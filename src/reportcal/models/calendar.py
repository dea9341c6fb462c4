"""Calendar keys and the per-month count table."""

from __future__ import annotations

import calendar
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from datetime import date
from types import MappingProxyType

from reportcal._constants import PATH_DATE_RE


@dataclass(frozen=True, order=True, slots=True)
class MonthKey:
    """A calendar month, e.g. ``MonthKey(2025, 6)`` for June 2025."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be between 1 and 12, got {self.month}")
        if not 1 <= self.year <= 9999:
            raise ValueError(f"year must be between 1 and 9999, got {self.year}")

    @classmethod
    def from_date(cls, value: date) -> MonthKey:
        return cls(value.year, value.month)

    @classmethod
    def parse(cls, text: str) -> MonthKey:
        """Parse ``YYYY-MM``."""
        year, sep, month = text.strip().partition("-")
        if not sep or len(year) != 4 or len(month) != 2 or not (year.isdigit() and month.isdigit()):
            raise ValueError(f"expected YYYY-MM, got {text!r}")
        return cls(int(year), int(month))

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    @property
    def prefix(self) -> str:
        """Month-level listing prefix, ``YYYY/MM/``."""
        return f"{self.year:04d}/{self.month:02d}/"

    def days(self) -> list[DayKey]:
        """Every day of the month, in order."""
        return [DayKey(self.year, self.month, day) for day in range(1, self.days_in_month + 1)]

    def contains(self, day: DayKey) -> bool:
        return day.year == self.year and day.month == self.month

    def shift(self, months: int) -> MonthKey:
        """Move forward (or backward for negative values) by whole months."""
        index = self.year * 12 + (self.month - 1) + months
        return MonthKey(index // 12, index % 12 + 1)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True, order=True, slots=True)
class DayKey:
    """A calendar day. Always a real date."""

    year: int
    month: int
    day: int

    def __post_init__(self) -> None:
        # Raises ValueError for impossible dates such as 2025-02-30.
        date(self.year, self.month, self.day)

    @classmethod
    def from_date(cls, value: date) -> DayKey:
        return cls(value.year, value.month, value.day)

    @classmethod
    def parse(cls, text: str) -> DayKey:
        """Parse ``YYYY-MM-DD``."""
        return cls.from_date(date.fromisoformat(text.strip()))

    @classmethod
    def from_path(cls, path: str) -> DayKey | None:
        """Find the ``YYYY/MM/DD`` date embedded in a storage path.

        Returns ``None`` when the path carries no such segment or the
        segment is not a real date.
        """
        match = PATH_DATE_RE.search(path)
        if match is None:
            return None
        try:
            return cls(int(match.group(1)), int(match.group(2)), int(match.group(3)))
        except ValueError:
            return None

    @property
    def month_key(self) -> MonthKey:
        return MonthKey(self.year, self.month)

    @property
    def prefix(self) -> str:
        """Day-level listing prefix, ``YYYY/MM/DD``."""
        return f"{self.year:04d}/{self.month:02d}/{self.day:02d}"

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


class CountTable(Mapping[DayKey, int]):
    """Immutable day -> report count mapping covering one whole month.

    Every day of :attr:`month` has an entry; days without data are 0.
    Build instances with :meth:`zero_filled` or :meth:`from_counts`.
    """

    __slots__ = ("_month", "_counts")

    def __init__(self, month: MonthKey, counts: Mapping[DayKey, int]) -> None:
        expected = month.days()
        if len(counts) != len(expected) or any(day not in counts for day in expected):
            raise ValueError(f"count table for {month} must contain exactly one entry per day")
        for day, count in counts.items():
            if isinstance(count, bool) or not isinstance(count, int) or count < 0:
                raise ValueError(f"count for {day} must be a non-negative int, got {count!r}")
        self._month = month
        self._counts = MappingProxyType({day: counts[day] for day in expected})

    @classmethod
    def zero_filled(cls, month: MonthKey) -> CountTable:
        return cls(month, dict.fromkeys(month.days(), 0))

    @classmethod
    def from_counts(cls, month: MonthKey, counts: Mapping[DayKey, int]) -> CountTable:
        """Build a table from a partial mapping; missing days become 0.

        Days outside *month* are rejected.
        """
        foreign = [day for day in counts if not month.contains(day)]
        if foreign:
            raise ValueError(f"days {', '.join(map(str, sorted(foreign)))} do not belong to {month}")
        working = dict.fromkeys(month.days(), 0)
        working.update(counts)
        return cls(month, working)

    @property
    def month(self) -> MonthKey:
        return self._month

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    def days_with_reports(self) -> list[DayKey]:
        return [day for day, count in self._counts.items() if count > 0]

    def as_dict(self) -> dict[str, int]:
        """Render as ``{"YYYY-MM-DD": count}`` for the presentation layer."""
        return {str(day): count for day, count in self._counts.items()}

    def __getitem__(self, day: DayKey) -> int:
        return self._counts[day]

    def __iter__(self) -> Iterator[DayKey]:
        return iter(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CountTable):
            return self._month == other._month and dict(self._counts) == dict(other._counts)
        return super().__eq__(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"CountTable({self._month}, total={self.total})"

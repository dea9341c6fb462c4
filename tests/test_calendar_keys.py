from __future__ import annotations

from datetime import date

import pytest

from reportcal.models.calendar import CountTable, DayKey, MonthKey


def test_month_days_cover_whole_month() -> None:
    june = MonthKey(2025, 6)

    days = june.days()

    assert len(days) == 30
    assert days[0] == DayKey(2025, 6, 1)
    assert days[-1] == DayKey(2025, 6, 30)


def test_february_respects_leap_years() -> None:
    assert MonthKey(2024, 2).days_in_month == 29
    assert MonthKey(2025, 2).days_in_month == 28
    assert MonthKey(1900, 2).days_in_month == 28


def test_month_shift_wraps_years() -> None:
    assert MonthKey(2025, 12).shift(1) == MonthKey(2026, 1)
    assert MonthKey(2025, 1).shift(-1) == MonthKey(2024, 12)
    assert MonthKey(2025, 6).shift(-18) == MonthKey(2023, 12)


def test_keys_render_prefixes_and_iso_strings() -> None:
    day = DayKey.from_date(date(2025, 6, 9))

    assert day.prefix == "2025/06/09"
    assert str(day) == "2025-06-09"
    assert day.month_key.prefix == "2025/06/"
    assert str(day.month_key) == "2025-06"


def test_keys_are_ordered() -> None:
    assert MonthKey(2024, 12) < MonthKey(2025, 1)
    assert DayKey(2025, 6, 30) < DayKey(2025, 7, 1)


def test_invalid_keys_rejected() -> None:
    with pytest.raises(ValueError):
        MonthKey(2025, 13)
    with pytest.raises(ValueError):
        DayKey(2025, 2, 30)
    with pytest.raises(ValueError):
        MonthKey.parse("2025/06")


def test_day_from_storage_path() -> None:
    assert DayKey.from_path("reports/2025/06/29/daily.pdf") == DayKey(2025, 6, 29)
    assert DayKey.from_path("2025/02/31/bad.pdf") is None
    assert DayKey.from_path("misc/readme.txt") is None


def test_zero_filled_table_has_every_day() -> None:
    table = CountTable.zero_filled(MonthKey(2025, 2))

    assert len(table) == 28
    assert table.total == 0
    assert set(table.as_dict().values()) == {0}


def test_from_counts_fills_missing_days_and_rejects_foreign_ones() -> None:
    june = MonthKey(2025, 6)

    table = CountTable.from_counts(june, {DayKey(2025, 6, 29): 1})

    assert table[DayKey(2025, 6, 29)] == 1
    assert table[DayKey(2025, 6, 1)] == 0
    assert table.days_with_reports() == [DayKey(2025, 6, 29)]

    with pytest.raises(ValueError):
        CountTable.from_counts(june, {DayKey(2025, 7, 1): 3})


def test_table_rejects_negative_counts_and_missing_days() -> None:
    june = MonthKey(2025, 6)
    counts = dict.fromkeys(june.days(), 0)
    counts[DayKey(2025, 6, 2)] = -1

    with pytest.raises(ValueError):
        CountTable(june, counts)
    with pytest.raises(ValueError):
        CountTable(june, {DayKey(2025, 6, 1): 0})

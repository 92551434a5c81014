"""Mini README: Tests for calendar month keys."""

from __future__ import annotations

from datetime import date

import pytest

from envelopes.months import MonthKey


def test_navigation_crosses_year_boundaries() -> None:
    """next/previous/shift wrap around December and January."""

    assert MonthKey(2024, 12).next() == MonthKey(2025, 1)
    assert MonthKey(2024, 1).previous() == MonthKey(2023, 12)
    assert MonthKey(2024, 3).shift(-14) == MonthKey(2023, 1)
    assert MonthKey(2024, 1).months_until(MonthKey(2024, 3)) == 2
    assert MonthKey(2024, 3).months_until(MonthKey(2023, 12)) == -3


def test_month_bounds_and_membership() -> None:
    month = MonthKey(2024, 2)
    assert month.first_day == date(2024, 2, 1)
    assert month.last_day == date(2024, 2, 29)
    assert month.contains(date(2024, 2, 15))
    assert not month.contains(date(2024, 3, 1))
    assert MonthKey.from_date(date(2024, 7, 9)) == MonthKey(2024, 7)


def test_parse_round_trips_isoformat() -> None:
    assert MonthKey.parse("2024-05") == MonthKey(2024, 5)
    assert MonthKey(2024, 5).isoformat() == "2024-05"
    with pytest.raises(ValueError):
        MonthKey.parse("May 2024")
    with pytest.raises(ValueError):
        MonthKey(2024, 13)

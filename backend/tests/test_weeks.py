from __future__ import annotations

from datetime import date

import pytest

from workforce.services.weeks import (
    current_week_start,
    date_for_day,
    normalize_week_start,
    sunday_based_weekday,
    working_dates,
)

WEDNESDAY = date(2025, 1, 8)


def test_sunday_based_weekday() -> None:
    assert sunday_based_weekday(date(2025, 1, 5)) == 0  # Sunday
    assert sunday_based_weekday(date(2025, 1, 6)) == 1  # Monday
    assert sunday_based_weekday(date(2025, 1, 11)) == 6  # Saturday


@pytest.mark.parametrize(
    ("week_start_day", "expected"),
    [
        (0, date(2025, 1, 5)),
        (1, date(2025, 1, 6)),
        (3, date(2025, 1, 8)),
        (4, date(2025, 1, 2)),
        (6, date(2025, 1, 4)),
    ],
)
def test_normalize_week_start(week_start_day: int, expected: date) -> None:
    assert normalize_week_start(WEDNESDAY, week_start_day) == expected


def test_normalize_sunday_with_monday_start_goes_back_six_days() -> None:
    assert normalize_week_start(date(2025, 1, 12), 1) == date(2025, 1, 6)


def test_normalize_is_idempotent() -> None:
    start = normalize_week_start(WEDNESDAY, 1)
    assert normalize_week_start(start, 1) == start


def test_normalize_crosses_year_boundary() -> None:
    assert normalize_week_start(date(2025, 1, 1), 1) == date(2024, 12, 30)


@pytest.mark.parametrize("bad_day", [-1, 7])
def test_normalize_rejects_out_of_range_day(bad_day: int) -> None:
    with pytest.raises(ValueError, match="week_start_day"):
        normalize_week_start(WEDNESDAY, bad_day)


def test_current_week_start_uses_today() -> None:
    assert current_week_start(date(2025, 3, 14), 1) == date(2025, 3, 10)


def test_date_for_day_offsets_from_week_start() -> None:
    assert date_for_day(date(2025, 1, 6), 0) == date(2025, 1, 6)
    assert date_for_day(date(2025, 1, 6), 4) == date(2025, 1, 10)


def test_working_dates_monday_week() -> None:
    assert working_dates(date(2025, 1, 6)) == [date(2025, 1, d) for d in range(6, 11)]


def test_working_dates_sunday_week() -> None:
    assert working_dates(date(2025, 1, 5)) == [date(2025, 1, d) for d in range(6, 11)]

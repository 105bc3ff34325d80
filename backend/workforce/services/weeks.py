"""Week-start arithmetic.

Week-start days use the 0=Sunday .. 6=Saturday convention stored on the
tenant policy, which differs from :meth:`datetime.date.weekday`
(0=Monday .. 6=Sunday).
"""

from __future__ import annotations

from datetime import date, timedelta

DEFAULT_WEEK_START_DAY = 1  # Monday
WORKING_DAYS_PER_WEEK = 5


def sunday_based_weekday(day: date) -> int:
    """Return the 0=Sunday .. 6=Saturday weekday of ``day``."""
    return (day.weekday() + 1) % 7


def normalize_week_start(day: date, week_start_day: int) -> date:
    """Return the first day of the week containing ``day``."""
    if not 0 <= week_start_day <= 6:
        msg = f"week_start_day must be between 0 and 6, got {week_start_day}"
        raise ValueError(msg)
    offset = (sunday_based_weekday(day) - week_start_day) % 7
    return day - timedelta(days=offset)


def current_week_start(today: date, week_start_day: int) -> date:
    """Return the start of the current period for the given convention."""
    return normalize_week_start(today, week_start_day)


def date_for_day(week_start: date, day_of_week: int) -> date:
    """Map a time entry's ``day_of_week`` to a calendar date.

    ``day_of_week`` is the 0..6 offset from ``week_start``.
    """
    return week_start + timedelta(days=day_of_week)


def working_dates(week_start: date) -> list[date]:
    """Return the Monday-to-Friday dates of the week starting at ``week_start``."""
    days = [week_start + timedelta(days=offset) for offset in range(7)]
    return [d for d in days if d.weekday() < WORKING_DAYS_PER_WEEK]

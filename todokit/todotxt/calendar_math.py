"""Calendar arithmetic shared by recurrences and date expressions.

Months and years keep "end of month" dates at the end of the month: adding a month to
2020-02-29 gives 2020-03-31, and a day that does not exist in the target month is clamped
to its last day (2020-01-31 plus one month is 2020-02-29).
"""

import calendar
from datetime import date, timedelta

# date.weekday(): Monday=0 ... Sunday=6
SATURDAY = 5


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def is_last_day_of_month(d: date) -> bool:
    return d.day == days_in_month(d.year, d.month)


def _clamp_day(base: date, year: int, month: int) -> date:
    last = days_in_month(year, month)
    day = base.day
    if is_last_day_of_month(base) or day > last:
        day = last
    return date(year, month, day)


def add_months(base: date, months: int) -> date:
    """Shift a date by a number of months (negative values go back)."""
    total = base.year * 12 + (base.month - 1) + months
    year, month_index = divmod(total, 12)
    return _clamp_day(base, year, month_index + 1)


def add_years(base: date, years: int) -> date:
    """Shift a date by a number of years (negative values go back)."""
    return _clamp_day(base, base.year + years, base.month)


def add_business_days(base: date, days: int) -> date:
    """Move `days` weekdays forward (or backward for negative values), skipping weekends."""
    step = 1 if days >= 0 else -1
    remaining = abs(days)
    current = base
    while remaining > 0:
        current = current + timedelta(days=step)
        if current.weekday() < SATURDAY:
            remaining -= 1
    return current


def business_days_between(start: date, end: date) -> int:
    """Count the non-business days to skip over between `start` and `end`.

    The convention: two days for every whole week in the span, plus two more when the
    tail that is left after the whole weeks, counted from the weekday of `start`, reaches
    a Saturday. Examples: 2024-02-14 -> 2024-02-21 gives 2, 2024-02-14 -> 2024-02-24
    gives 4, and a Saturday to the same Saturday gives 2.
    """
    days = (end - start).days
    weeks, tail = divmod(days, 7)
    skipped = weeks * 2
    if start.weekday() + tail >= SATURDAY:
        skipped += 2
    return skipped

"""Keyword dates such as `tomorrow`, `soon` or `friday`."""

from datetime import date, timedelta
from typing import Optional

from todokit.todotxt.calendar_math import days_in_month

_WEEKDAYS = {
    "mon": 0, "monday": 0,
    "tue": 1, "tuesday": 1,
    "wed": 2, "wednesday": 2,
    "thu": 3, "thursday": 3,
    "fri": 4, "friday": 4,
    "sat": 5, "saturday": 5,
    "sun": 6, "sunday": 6,
}


def resolve_keyword(word: str, today: date, soon_days: int) -> Optional[date]:
    """Return the date a keyword stands for, or None for an unknown word.

    Weekday names mean the next such day strictly after today. `first` is the first day
    of next month and `last` the last day of the current month.
    """
    key = word.strip().lower()
    if key == "today":
        return today
    if key == "tomorrow":
        return today + timedelta(days=1)
    if key == "yesterday":
        return today - timedelta(days=1)
    if key == "soon":
        return today + timedelta(days=soon_days)
    if key == "first":
        if today.month == 12:
            return date(today.year + 1, 1, 1)
        return date(today.year, today.month + 1, 1)
    if key == "last":
        return date(today.year, today.month, days_in_month(today.year, today.month))
    if key in _WEEKDAYS:
        delta = (_WEEKDAYS[key] - today.weekday()) % 7
        return today + timedelta(days=delta or 7)
    return None

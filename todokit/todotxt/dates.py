"""Date parsing and formatting for todo.txt values."""

from datetime import date
from typing import Optional

from todokit.models.recurrence import Recurrence, RecurrenceParseError
from todokit.todotxt.calendar_math import days_in_month


class DateParseError(ValueError):
    """Raised when a string is neither a date nor a relative date."""


def parse_date(text: str, base: date) -> date:
    """Parse `YYYY-MM-DD` or a relative value such as `2d` or `1m`.

    A day past the end of the month is clamped to its last day, so `2021-02-30` reads
    as 2021-02-28. Relative values are recurrences applied to `base`.

    Raises:
        DateParseError: If the text cannot be read as a date
    """
    value = text.strip()
    if "-" not in value:
        try:
            return Recurrence.parse(value).next_date(base)
        except RecurrenceParseError:
            raise DateParseError(f"invalid date: '{text}'") from None
        except (OverflowError, ValueError):
            raise DateParseError(f"date out of range: '{text}'") from None

    parts = value.split("-")
    if len(parts) != 3 or not all(p and p.isascii() and p.isdigit() for p in parts):
        raise DateParseError(f"invalid date: '{text}'")
    year, month, day = (int(p) for p in parts)
    if year < 1 or year > 9999:
        raise DateParseError(f"invalid year: '{text}'")
    if month < 1 or month > 12:
        raise DateParseError(f"invalid month: '{text}'")
    if day < 1 or day > 31:
        raise DateParseError(f"invalid day: '{text}'")
    return date(year, month, min(day, days_in_month(year, month)))


def parse_iso_date(text: str) -> Optional[date]:
    """Return the date for an exact `YYYY-MM-DD` word, or None."""
    if len(text) != 10 or text[4] != "-" or text[7] != "-":
        return None
    try:
        return parse_date(text, date.min)
    except DateParseError:
        return None


def format_date(value: date) -> str:
    return value.isoformat()

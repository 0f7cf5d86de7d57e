"""Recurrence model for todokit.

A recurrence is written as `[+]N<unit>`, for example `1w`, `+2m` or `5b`. The `+` marks a
strict recurrence: the next date is computed from the previous one instead of from today.
"""

from __future__ import annotations

import re
from datetime import date, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from todokit.todotxt.calendar_math import add_business_days, add_months, add_years

_RECURRENCE_RE = re.compile(r"^(\+)?([0-9]+)([dwmyb])$")


class RecurrenceParseError(ValueError):
    """Raised when a string is not a valid recurrence."""


class Period(str, Enum):
    DAY = "d"
    WEEK = "w"
    MONTH = "m"
    YEAR = "y"
    BUSINESS_DAY = "b"


def shift_date(base: date, period: Period, count: int) -> date:
    """Move `base` by `count` units of `period` (negative counts go back)."""
    if period == Period.DAY:
        return base + timedelta(days=count)
    if period == Period.WEEK:
        return base + timedelta(weeks=count)
    if period == Period.MONTH:
        return add_months(base, count)
    if period == Period.YEAR:
        return add_years(base, count)
    return add_business_days(base, count)


class Recurrence(BaseModel):
    """Repeat interval of a task."""

    model_config = ConfigDict(frozen=True)

    period: Period = Field(Period.DAY, description="Unit of the interval")
    count: int = Field(1, ge=1, le=255, description="Number of units between occurrences")
    strict: bool = Field(False, description="Advance from the previous date instead of today")

    @classmethod
    def parse(cls, text: str) -> "Recurrence":
        """Parse a recurrence literal, with or without the `rec:` prefix.

        Raises:
            RecurrenceParseError: If the text is not a valid recurrence
        """
        literal = text.strip()
        if literal.startswith("rec:"):
            literal = literal[len("rec:"):]
        match = _RECURRENCE_RE.match(literal)
        if not match:
            raise RecurrenceParseError(f"invalid recurrence: '{text}'")
        count = int(match.group(2))
        if count < 1 or count > 255:
            raise RecurrenceParseError(f"recurrence count out of range: '{text}'")
        return cls(period=Period(match.group(3)), count=count, strict=match.group(1) is not None)

    def next_date(self, base: date) -> date:
        """Return the date one interval after `base`."""
        return shift_date(base, self.period, self.count)

    def __str__(self) -> str:
        prefix = "+" if self.strict else ""
        return f"{prefix}{self.count}{self.period.value}"

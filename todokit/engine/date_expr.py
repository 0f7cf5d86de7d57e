"""Date expressions used by edits.

An expression starts from an anchor and adds or subtracts durations:

    due+1w-1d      one week after the due date, minus a day
    thr+1m         a month after the threshold date
    soon           today plus the configured number of "soon" days
    2w             two weeks from today

Anchors are `due`, `thr` (or `t`), `created`, `finished`, an ISO date, a keyword date
(`today`, `tomorrow`, `yesterday`, `soon`, weekday names, `first`, `last`) or the name of
a tag whose value is a date.
"""

import re
from datetime import date
from typing import List, Optional, Tuple

from todokit.errors import TodoError
from todokit.models.constants import DUE_TAG, THR_TAG
from todokit.models.recurrence import Period, shift_date
from todokit.models.task import Task
from todokit.todotxt.dates import DateParseError, parse_date, parse_iso_date
from todokit.todotxt.human_date import resolve_keyword

_TOKEN_RE = re.compile(
    r"\s*(?:(?P<date>\d{4}-\d{2}-\d{2})|(?P<duration>\d+[dwmyb])|(?P<word>[a-z][a-z0-9]*)|(?P<op>[+-]))"
)

_EXPRESSION_NAME = "date expression"


def _tokenize(expr: str) -> List[Tuple[str, str]]:
    tokens: List[Tuple[str, str]] = []
    text = expr.strip().lower()
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if not match or match.end() == pos:
            raise TodoError.invalid_value(expr, _EXPRESSION_NAME, f"unexpected '{text[pos:].strip()}'")
        kind = match.lastgroup
        tokens.append((kind, match.group(kind)))
        pos = match.end()
        while pos < len(text) and text[pos].isspace():
            pos += 1
    return tokens


def _duration(expr: str, text: str) -> Tuple[Period, int]:
    count = int(text[:-1])
    if count < 1:
        raise TodoError.invalid_value(expr, _EXPRESSION_NAME, f"zero duration '{text}'")
    return Period(text[-1]), count


def _task_date(task: Task, word: str, today: date) -> Optional[date]:
    if word == DUE_TAG:
        if task.due_date is not None:
            return task.due_date
    elif word in ("thr", THR_TAG, "threshold"):
        if task.threshold_date is not None:
            return task.threshold_date
    elif word in ("created", "create"):
        return task.create_date
    elif word in ("finished", "completed"):
        return task.finish_date

    # Fall back to a tag with the same name that holds a date
    for key, value in task.tags.items():
        if key.lower() == word:
            try:
                return parse_date(value, today)
            except DateParseError:
                return None
    return None


def _anchor(expr: str, kind: str, text: str, task: Task, today: date, soon_days: int) -> date:
    if kind == "date":
        value = parse_iso_date(text)
        if value is None:
            raise TodoError.invalid_value(expr, _EXPRESSION_NAME, f"invalid date '{text}'")
        return value
    if kind == "word":
        keyword = resolve_keyword(text, today, soon_days)
        if keyword is not None:
            return keyword
        value = _task_date(task, text, today)
        if value is None:
            raise TodoError.invalid_value(expr, _EXPRESSION_NAME, f"task has no '{text}' date")
        return value
    raise TodoError.invalid_value(expr, _EXPRESSION_NAME, f"expression cannot start with '{text}'")


def evaluate(expr: str, task: Task, today: date, soon_days: int) -> date:
    """Evaluate a date expression for a task.

    Args:
        expr: Expression text, case-insensitive
        task: Task whose dates and tags anchors refer to
        today: Current date
        soon_days: Number of days meant by `soon`

    Returns:
        The resulting date

    Raises:
        TodoError: If the expression is malformed or refers to a date the task lacks
    """
    tokens = _tokenize(expr)
    if not tokens:
        raise TodoError.invalid_value(expr, _EXPRESSION_NAME, "empty expression")

    kind, text = tokens[0]
    if kind in ("duration", "op"):
        current = today
        if kind == "duration":
            tokens.insert(0, ("op", "+"))
    else:
        current = _anchor(expr, kind, text, task, today, soon_days)
        tokens = tokens[1:]

    for idx in range(0, len(tokens), 2):
        op_kind, op = tokens[idx]
        if op_kind != "op":
            raise TodoError.invalid_value(expr, _EXPRESSION_NAME, f"expected '+' or '-' before '{op}'")
        if idx + 1 >= len(tokens):
            raise TodoError.invalid_value(expr, _EXPRESSION_NAME, f"missing duration after '{op}'")
        dur_kind, dur = tokens[idx + 1]
        if dur_kind != "duration":
            raise TodoError.invalid_value(expr, _EXPRESSION_NAME, f"'{dur}' is not a duration")
        period, count = _duration(expr, dur)
        try:
            current = shift_date(current, period, count if op == "+" else -count)
        except (OverflowError, ValueError):
            raise TodoError.invalid_value(expr, _EXPRESSION_NAME, "date out of range") from None
    return current

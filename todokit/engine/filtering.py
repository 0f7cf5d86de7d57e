"""Selecting tasks by a declarative query.

`filter_tasks` returns the IDs of matching tasks in list order. Every criterion narrows
the result of the previous one; a criterion left unset does not filter.

Project, context, hashtag and tag patterns are case-insensitive and support a little
globbing: `foo*` (starts with), `*foo` (ends with), `*foo*` (contains). The words `none`
and `any` match tasks with no items and with at least one item respectively. Tag patterns
may also carry a value pattern: `due:2020*`.
"""

import logging
import re
from datetime import date
from enum import Enum
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, Field

from todokit.engine.timer import is_on
from todokit.models.constants import INCLUDE_NONE, NO_PRIORITY
from todokit.models.task import Task

logger = logging.getLogger(__name__)

NONE_PATTERN = "none"
ANY_PATTERN = "any"


class RangeKind(str, Enum):
    NONE = "none"
    ONE = "one"
    RANGE = "range"
    LIST = "list"


class ItemRange(BaseModel):
    """Which task IDs to look at."""

    kind: RangeKind = RangeKind.NONE
    start: int = 0
    end: int = 0
    ids: List[int] = Field(default_factory=list)

    @classmethod
    def one(cls, idx: int) -> "ItemRange":
        return cls(kind=RangeKind.ONE, start=idx, end=idx)

    @classmethod
    def between(cls, start: int, end: int) -> "ItemRange":
        """Inclusive range of IDs; IDs past the end of the list are ignored."""
        return cls(kind=RangeKind.RANGE, start=start, end=end)

    @classmethod
    def of(cls, ids: List[int]) -> "ItemRange":
        return cls(kind=RangeKind.LIST, ids=list(ids))

    def select(self, size: int) -> List[int]:
        if self.kind == RangeKind.ONE:
            return [self.start] if 0 <= self.start < size else []
        if self.kind == RangeKind.RANGE:
            return list(range(max(self.start, 0), min(self.end, size - 1) + 1))
        if self.kind == RangeKind.LIST:
            return [idx for idx in self.ids if 0 <= idx < size]
        return list(range(size))


class TodoStatus(str, Enum):
    ACTIVE = "active"
    DONE = "done"
    ALL = "all"
    EMPTY = "empty"


class ValueSpan(str, Enum):
    """How a property is compared.

    `none` selects tasks without the property and `any` those that have it. For
    priorities `higher` means at least as important as the given value and `lower`
    at most as important (tasks without priority included). For dates the values are
    day offsets from today.
    """
    NONE = "none"
    EQUAL = "equal"
    LOWER = "lower"
    HIGHER = "higher"
    ANY = "any"
    RANGE = "range"
    ACTIVE = "active"


class DateRange(BaseModel):
    """Date criterion expressed in days relative to today.

    A bound equal to INCLUDE_NONE makes tasks without the date match as well (for a
    range, that bound is open).
    """

    span: ValueSpan = ValueSpan.NONE
    low: int = 0
    high: int = 0

    @classmethod
    def before(cls, days: int, include_none: bool = False) -> "DateRange":
        """Dates less than `days` days from today."""
        return cls(span=ValueSpan.LOWER, low=days, high=INCLUDE_NONE if include_none else 0)

    @classmethod
    def after(cls, days: int, include_none: bool = False) -> "DateRange":
        """Dates more than `days` days from today."""
        return cls(span=ValueSpan.HIGHER, low=INCLUDE_NONE if include_none else 0, high=days)

    @classmethod
    def within(cls, low: int, high: int) -> "DateRange":
        return cls(span=ValueSpan.RANGE, low=low, high=high)

    def matches(self, value: Optional[date], today: date) -> bool:
        if self.span == ValueSpan.NONE:
            return value is None
        if self.span == ValueSpan.ANY:
            return value is not None

        if value is None:
            if self.span == ValueSpan.LOWER:
                return self.high == INCLUDE_NONE
            if self.span == ValueSpan.HIGHER:
                return self.low == INCLUDE_NONE
            if self.span == ValueSpan.RANGE:
                return self.low == INCLUDE_NONE and self.high == INCLUDE_NONE
            return False

        diff = (value - today).days
        if self.span == ValueSpan.EQUAL:
            return diff == self.low
        if self.span == ValueSpan.LOWER:
            return diff < self.low
        if self.span == ValueSpan.HIGHER:
            return diff > self.high
        if self.span == ValueSpan.RANGE:
            above = self.low == INCLUDE_NONE or diff >= self.low
            below = self.high == INCLUDE_NONE or diff <= self.high
            return above and below
        return False


class PriorityFilter(BaseModel):
    span: ValueSpan = ValueSpan.ANY
    value: int = Field(NO_PRIORITY, ge=0, le=NO_PRIORITY)

    def matches(self, priority: int) -> bool:
        if self.span == ValueSpan.NONE:
            return priority == NO_PRIORITY
        if self.span == ValueSpan.ANY:
            return priority < NO_PRIORITY
        if self.span == ValueSpan.EQUAL:
            return priority == self.value
        if self.span == ValueSpan.HIGHER:
            return priority <= self.value
        if self.span == ValueSpan.LOWER:
            return priority >= self.value
        return False


class TagFilter(BaseModel):
    """Patterns for projects, contexts, tags and hashtags."""

    projects: List[str] = Field(default_factory=list)
    contexts: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    hashtags: List[str] = Field(default_factory=list)


class Conf(BaseModel):
    """Filter query. Unset criteria do not filter."""

    range: ItemRange = Field(default_factory=ItemRange)
    status: TodoStatus = Field(TodoStatus.ACTIVE, description="Which completion states to keep")
    regex: Optional[str] = Field(None, description="Text the subject must contain")
    use_regex: bool = Field(False, description="Treat `regex` as a regular expression")
    include: TagFilter = Field(default_factory=TagFilter, description="Every listed kind must match")
    exclude: TagFilter = Field(default_factory=TagFilter, description="Any match rejects the task")
    due: Optional[DateRange] = None
    thr: Optional[DateRange] = None
    created: Optional[DateRange] = None
    finished: Optional[DateRange] = None
    pri: Optional[PriorityFilter] = None
    rec: Optional[ValueSpan] = Field(None, description="none or any")
    tmr: Optional[ValueSpan] = Field(None, description="none (stopped) or active (running)")


def str_matches(value: str, pattern: str) -> bool:
    """Case-insensitive glob-ish match of a single value."""
    value = value.lower()
    pattern = pattern.lower()
    if len(pattern) > 1 and pattern.startswith("*") and pattern.endswith("*"):
        return pattern.strip("*") in value
    if pattern.startswith("*"):
        return value.endswith(pattern.lstrip("*"))
    if pattern.endswith("*"):
        return value.startswith(pattern.rstrip("*"))
    return value == pattern


def _list_matches(items: List[str], patterns: List[str]) -> bool:
    for pattern in patterns:
        low = pattern.lower()
        if low == NONE_PATTERN:
            if not items:
                return True
        elif low == ANY_PATTERN:
            if items:
                return True
        elif any(str_matches(item, pattern) for item in items):
            return True
    return False


def _tags_match(tags: Dict[str, str], patterns: List[str]) -> bool:
    for pattern in patterns:
        low = pattern.lower()
        if low == NONE_PATTERN:
            if not tags:
                return True
            continue
        if low == ANY_PATTERN:
            if tags:
                return True
            continue
        name_pattern, sep, value_pattern = pattern.partition(":")
        for name, value in tags.items():
            if not str_matches(name, name_pattern):
                continue
            if not sep or str_matches(value, value_pattern):
                return True
    return False


def _keep(tasks: List[Task], ids: List[int], check: Callable[[Task], bool]) -> List[int]:
    return [idx for idx in ids if check(tasks[idx])]


def _status_ok(task: Task, status: TodoStatus) -> bool:
    if status == TodoStatus.ACTIVE:
        return not task.finished
    if status == TodoStatus.DONE:
        return task.finished
    return True


def _filter_regex(tasks: List[Task], ids: List[int], conf: Conf) -> List[int]:
    if not conf.regex:
        return ids
    if conf.use_regex:
        try:
            rx = re.compile(conf.regex, re.IGNORECASE)
        except re.error as e:
            logger.error(f"Invalid regular expression '{conf.regex}': {type(e).__name__}: {str(e)}")
            return ids
        return _keep(tasks, ids, lambda t: rx.search(t.subject) is not None)
    needle = conf.regex.lower()
    return _keep(tasks, ids, lambda t: needle in t.subject.lower())


def _filter_kind(tasks: List[Task], ids: List[int], conf: Conf, kind: str) -> List[int]:
    """Apply exclude, then include patterns of one token kind."""
    if kind == "tags":
        matcher = _tags_match
    else:
        matcher = _list_matches
    excluded = getattr(conf.exclude, kind)
    included = getattr(conf.include, kind)
    if excluded:
        ids = _keep(tasks, ids, lambda t: not matcher(getattr(t, kind), excluded))
    if included:
        ids = _keep(tasks, ids, lambda t: matcher(getattr(t, kind), included))
    return ids


def filter_tasks(tasks: List[Task], conf: Conf, today: Optional[date] = None) -> List[int]:
    """Return IDs of the tasks matching `conf`.

    Args:
        tasks: Task list
        conf: Query
        today: Reference date for date criteria (defaults to the local date)

    Returns:
        Matching IDs in list order
    """
    today = today or date.today()
    ids = conf.range.select(len(tasks))

    if conf.status == TodoStatus.EMPTY:
        ids = _keep(tasks, ids, lambda t: t.is_empty())
    else:
        ids = _keep(tasks, ids, lambda t: _status_ok(t, conf.status))
        ids = _keep(tasks, ids, lambda t: not t.is_empty())

    ids = _filter_regex(tasks, ids, conf)
    for kind in ("tags", "hashtags", "projects", "contexts"):
        ids = _filter_kind(tasks, ids, conf, kind)

    if conf.pri is not None:
        ids = _keep(tasks, ids, lambda t: conf.pri.matches(t.priority))
    if conf.rec == ValueSpan.NONE:
        ids = _keep(tasks, ids, lambda t: t.recurrence is None)
    elif conf.rec == ValueSpan.ANY:
        ids = _keep(tasks, ids, lambda t: t.recurrence is not None)

    if conf.due is not None:
        ids = _keep(tasks, ids, lambda t: conf.due.matches(t.due_date, today))
    if conf.created is not None:
        ids = _keep(tasks, ids, lambda t: conf.created.matches(t.create_date, today))
    if conf.finished is not None:
        ids = _keep(tasks, ids, lambda t: conf.finished.matches(t.finish_date, today))
    if conf.thr is not None:
        ids = _keep(tasks, ids, lambda t: conf.thr.matches(t.threshold_date, today))
    elif conf.status != TodoStatus.ALL:
        ids = _keep(tasks, ids, lambda t: t.threshold_date is None or t.threshold_date <= today)

    if conf.tmr == ValueSpan.NONE:
        ids = _keep(tasks, ids, lambda t: not is_on(t))
    elif conf.tmr == ValueSpan.ACTIVE:
        ids = _keep(tasks, ids, is_on)
    return ids

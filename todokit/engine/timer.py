"""Tag based time tracking.

A running task carries `tmr:<unix seconds>` with the moment the timer started. Stopping
the timer adds the elapsed seconds to `spent:<seconds>` and writes `tmr:off`.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from todokit.models.constants import SPENT_TAG, TIMER_OFF, TIMER_TAG
from todokit.models.task import Task


def _now_seconds(now: Optional[datetime]) -> int:
    return int((now or datetime.now(timezone.utc)).timestamp())


def _int_tag(task: Task, key: str) -> Optional[int]:
    value = task.tags.get(key)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def is_on(task: Task) -> bool:
    """Return True while the task's timer is running."""
    state = task.tags.get(TIMER_TAG)
    return state is not None and state != TIMER_OFF


def _accrued(task: Task, now: Optional[datetime]) -> Optional[int]:
    started = _int_tag(task, TIMER_TAG)
    if started is None:
        return None
    spent = _int_tag(task, SPENT_TAG) or 0
    return spent + max(0, _now_seconds(now) - started)


def spent_time(task: Task, now: Optional[datetime] = None) -> timedelta:
    """Return the time spent on a task, including a running session."""
    if is_on(task):
        return timedelta(seconds=_accrued(task, now) or 0)
    return timedelta(seconds=_int_tag(task, SPENT_TAG) or 0)


def start_timer(task: Task, now: Optional[datetime] = None) -> bool:
    """Start the timer of an unfinished task that is not running yet."""
    if task.finished or is_on(task):
        return False
    return task.update_tag_with_value(TIMER_TAG, str(_now_seconds(now)))


def stop_timer(task: Task, now: Optional[datetime] = None) -> bool:
    """Stop a running timer and add the elapsed time to `spent`.

    Returns False if the timer is not running or its start time cannot be read.
    """
    if not is_on(task):
        return False
    spent = _accrued(task, now)
    if spent is None:
        return False
    task.update_tag_with_value(SPENT_TAG, str(spent))
    task.update_tag_with_value(TIMER_TAG, TIMER_OFF)
    return True

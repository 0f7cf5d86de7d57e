"""Bulk editing of a task list.

Every operation takes the list and an optional list of IDs (indices into the list).
`None` selects every task. IDs outside the list are skipped. Operations return one
boolean per requested ID telling whether that task changed.
"""

import logging
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field, field_validator

from todokit.config import get_settings
from todokit.engine.date_expr import evaluate
from todokit.engine.timer import start_timer, stop_timer
from todokit.errors import TodoError
from todokit.models.completion import CompletionConfig, CompletionMode
from todokit.models.constants import (
    DUE_TAG,
    INVALID_ID,
    NO_PRIORITY,
    REC_TAG,
    SPENT_TAG,
    THR_TAG,
    TIMER_TAG,
)
from todokit.models.recurrence import Recurrence
from todokit.models.task import Task
from todokit.todotxt.dates import format_date

logger = logging.getLogger(__name__)

# Tags that have their own fields in Conf and are skipped by generic tag edits
_OWN_FIELD_TAGS = (DUE_TAG, THR_TAG, REC_TAG)


class Action(str, Enum):
    """Operation applied to a task property."""
    NONE = "none"
    SET = "set"
    DELETE = "delete"
    REPLACE = "replace"
    INCREASE = "increase"
    DECREASE = "decrease"


class DateTagChange(BaseModel):
    """Change of a date tag: a literal date or a date expression such as `due+1w`."""

    action: Action = Field(Action.NONE, description="set or delete")
    value: Optional[Union[date, str]] = Field(None, description="New date or expression")


class ListTagChange(BaseModel):
    """Change of projects, contexts or hashtags.

    For `replace` every value is a pair: `old+new` for projects, `old@new` for contexts
    and `old:new` for hashtags.
    """

    action: Action = Field(Action.NONE, description="set, delete or replace")
    value: List[str] = Field(default_factory=list, description="Names or replacement pairs")


class Conf(BaseModel):
    """Changes to apply to every selected task.

    When `subject` is set the first selected task is replaced by the parsed subject and
    every other change in this configuration is ignored.
    """

    subject: Optional[str] = Field(None, description="New full text for add or for replacing a task")
    priority: int = Field(NO_PRIORITY, ge=0, le=NO_PRIORITY, description="Priority for the set action")
    priority_act: Action = Field(Action.NONE, description="set, delete, increase or decrease")
    due: DateTagChange = Field(default_factory=DateTagChange)
    thr: DateTagChange = Field(default_factory=DateTagChange)
    recurrence: Optional[Recurrence] = Field(None, description="Recurrence for the set action")
    recurrence_act: Action = Field(Action.NONE, description="set or delete")
    projects: ListTagChange = Field(default_factory=ListTagChange)
    contexts: ListTagChange = Field(default_factory=ListTagChange)
    hashtags: ListTagChange = Field(default_factory=ListTagChange)
    tags: Optional[Dict[str, str]] = Field(None, description="Tag names and values")
    tags_act: Action = Field(Action.NONE, description="set or delete")
    auto_create_date: bool = Field(
        default_factory=lambda: get_settings().auto_create_date,
        description="Stamp today's date on added tasks without a creation date",
    )
    soon_days: int = Field(
        default_factory=lambda: get_settings().soon_days,
        ge=0,
        description="Days ahead meant by 'soon' in date expressions",
    )

    @field_validator("recurrence", mode="before")
    @classmethod
    def parse_recurrence(cls, v):
        if isinstance(v, str):
            return Recurrence.parse(v)
        return v


def _target_ids(tasks: List[Task], ids: Optional[List[int]]) -> List[int]:
    if ids is None:
        return list(range(len(tasks)))
    return list(ids)


def _is_valid(idx: int, size: int) -> bool:
    return 0 <= idx < size


def add(tasks: List[Task], conf: Conf, today: Optional[date] = None) -> int:
    """Parse `conf.subject` and append it to the list.

    Returns:
        ID of the new task, or INVALID_ID when the subject is empty
    """
    today = today or date.today()
    if conf.subject is None or not conf.subject.strip():
        return INVALID_ID
    task = Task.parse(conf.subject.strip(), today)
    if conf.auto_create_date and task.create_date is None:
        task.create_date = today
        if task.finished and task.finish_date is None:
            task.finish_date = today
    tasks.append(task)
    logger.debug(f"Added task {len(tasks) - 1}: {task}")
    return len(tasks) - 1


def clone_tasks(tasks: List[Task], ids: List[int]) -> List[Task]:
    """Return deep copies of the selected tasks, skipping invalid IDs."""
    return [tasks[idx].model_copy(deep=True) for idx in ids if _is_valid(idx, len(tasks))]


def remove(tasks: List[Task], ids: Optional[List[int]] = None) -> List[bool]:
    """Delete the selected tasks in place."""
    targets = _target_ids(tasks, ids)
    changed = [_is_valid(idx, len(tasks)) for idx in targets]
    doomed = {idx for idx in targets if _is_valid(idx, len(tasks))}
    tasks[:] = [task for idx, task in enumerate(tasks) if idx not in doomed]
    logger.debug(f"Removed {len(doomed)} tasks")
    return changed


def _next_occurrence(task: Task, today: date) -> Optional[Task]:
    """Turn a copy of a recurring task into its next occurrence, or return None."""
    if task.recurrence is None:
        return None
    if task.due_date is None and task.threshold_date is None:
        return None
    if task.create_date is not None:
        task.create_date = today
    task.next_dates(today)
    task.update_tag_with_value(TIMER_TAG, "", today)
    task.update_tag_with_value(SPENT_TAG, "", today)

    until = task.rec_until(today)
    if until is not None:
        next_date = task.due_date or task.threshold_date
        if next_date > until:
            logger.debug(f"Recurrence ended on {until}: {task}")
            return None
    return task


def done(
    tasks: List[Task],
    ids: Optional[List[int]] = None,
    config: Optional[CompletionConfig] = None,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> List[bool]:
    """Complete the selected tasks.

    The timer of a completed task is stopped. When the task recurs and has a due or
    threshold date, its next occurrence is appended to the list as a new task with the
    dates moved forward and the timer tags removed. No occurrence is added once the new
    date passes the task's `until` date.

    Args:
        tasks: Task list, extended in place with new occurrences
        ids: IDs to complete, None for all
        config: Completion policy (defaults to the configured settings)
        today: Completion date
        now: Time used to stop running timers

    Returns:
        One flag per ID, True if the task was completed
    """
    today = today or date.today()
    config = config or get_settings().completion_config()
    targets = _target_ids(tasks, ids)
    changed = [False] * len(targets)
    size = len(tasks)

    for i, idx in enumerate(targets):
        if not _is_valid(idx, size):
            continue
        task = tasks[idx]
        if task.finished:
            continue
        upcoming = task.model_copy(deep=True)
        stop_timer(task, now)
        if not task.complete(today, config):
            continue
        changed[i] = True
        spawned = _next_occurrence(upcoming, today)
        if spawned is not None:
            tasks.append(spawned)
            logger.debug(f"Added next occurrence of task {idx}: {spawned}")
    return changed


def undone(
    tasks: List[Task],
    ids: Optional[List[int]] = None,
    mode: Optional[CompletionMode] = None,
) -> List[bool]:
    """Remove the completion mark from the selected tasks."""
    mode = mode or get_settings().completion_mode
    targets = _target_ids(tasks, ids)
    changed = [False] * len(targets)
    for i, idx in enumerate(targets):
        if _is_valid(idx, len(tasks)):
            changed[i] = tasks[idx].uncomplete(mode)
    return changed


def _update_priority(task: Task, conf: Conf) -> bool:
    act = conf.priority_act
    if act == Action.SET:
        if task.priority != conf.priority:
            task.priority = conf.priority
            return True
    elif act == Action.DELETE:
        if task.priority != NO_PRIORITY:
            task.priority = NO_PRIORITY
            return True
    elif act == Action.INCREASE:
        if task.priority == NO_PRIORITY:
            task.priority = NO_PRIORITY - 1
            return True
        if task.priority > 0:
            task.priority -= 1
            return True
    elif act == Action.DECREASE:
        if task.priority != NO_PRIORITY:
            task.priority += 1
            return True
    return False


def _resolve_date(change: DateTagChange, task: Task, today: date, soon_days: int) -> Optional[date]:
    if change.action != Action.SET or change.value is None:
        return None
    if isinstance(change.value, date):
        return change.value
    return evaluate(change.value, task, today, soon_days)


def _update_date(task: Task, key: str, action: Action, value: Optional[date], today: date) -> bool:
    if action == Action.SET and value is not None:
        return task.update_tag_with_value(key, format_date(value), today)
    if action == Action.DELETE:
        return task.update_tag_with_value(key, "", today)
    return False


def _update_recurrence(task: Task, conf: Conf, today: date) -> bool:
    if conf.recurrence_act == Action.SET and conf.recurrence is not None:
        changed = task.update_tag_with_value(REC_TAG, str(conf.recurrence), today)
        if task.finished:
            task.uncomplete(get_settings().completion_mode)
            changed = True
        return changed
    if conf.recurrence_act == Action.DELETE:
        return task.update_tag_with_value(REC_TAG, "", today)
    return False


def _split_pair(pair: str, sep: str) -> Optional[Tuple[str, str]]:
    body = pair[1:] if pair.startswith(sep) else pair
    old, found, new = body.partition(sep)
    if not found or not old or not new:
        return None
    return old, new


def _update_list(task: Task, change: ListTagChange, sep: str, replace) -> bool:
    changed = False
    for value in change.value:
        if change.action == Action.SET:
            result = replace("", value)
        elif change.action == Action.DELETE:
            result = replace(value, "")
        elif change.action == Action.REPLACE:
            pair = _split_pair(value, sep)
            if pair is None:
                logger.warning(f"Skipping invalid replacement '{value}': expected old{sep}new")
                continue
            result = replace(pair[0], pair[1])
        else:
            return False
        changed = result or changed
    return changed


def _update_tags(task: Task, conf: Conf, today: date) -> bool:
    if conf.tags is None or conf.tags_act not in (Action.SET, Action.DELETE):
        return False
    changed = False
    for key, value in conf.tags.items():
        if key in _OWN_FIELD_TAGS:
            continue
        new_value = value if conf.tags_act == Action.SET else ""
        changed = task.update_tag_with_value(key, new_value, today) or changed
    return changed


def _replace_subject(tasks: List[Task], idx: int, subject: str, today: date) -> bool:
    if not subject.strip():
        logger.warning(f"Refusing to replace task {idx} with an empty subject")
        return False
    old = tasks[idx]
    new = Task.parse(subject.strip(), today)
    if new.create_date is None and old.create_date is not None:
        new.create_date = old.create_date
        # A finished line only carries a creation date after its finish date
        if new.finished and new.finish_date is None:
            new.finish_date = old.finish_date or today
    tasks[idx] = new
    return new != old


def edit(
    tasks: List[Task],
    ids: Optional[List[int]],
    conf: Conf,
    today: Optional[date] = None,
) -> List[bool]:
    """Apply the changes in `conf` to the selected tasks.

    A date expression that cannot be evaluated for a task is logged and the task is
    left unchanged.
    """
    today = today or date.today()
    targets = _target_ids(tasks, ids)
    changed = [False] * len(targets)

    for i, idx in enumerate(targets):
        if not _is_valid(idx, len(tasks)):
            continue
        if conf.subject is not None:
            changed[i] = _replace_subject(tasks, idx, conf.subject, today)
            break

        task = tasks[idx]
        try:
            due = _resolve_date(conf.due, task, today, conf.soon_days)
            thr = _resolve_date(conf.thr, task, today, conf.soon_days)
        except TodoError as e:
            logger.error(f"Failed to update task {idx}: {e}")
            continue

        results = [
            _update_priority(task, conf),
            _update_date(task, DUE_TAG, conf.due.action, due, today),
            _update_date(task, THR_TAG, conf.thr.action, thr, today),
            _update_recurrence(task, conf, today),
            _update_list(task, conf.projects, "+", task.replace_project),
            _update_list(task, conf.contexts, "@", task.replace_context),
            _update_list(task, conf.hashtags, ":", task.replace_hashtag),
            _update_tags(task, conf, today),
        ]
        changed[i] = any(results)
    return changed


def start(tasks: List[Task], ids: Optional[List[int]] = None, now: Optional[datetime] = None) -> List[bool]:
    """Start timers of the selected tasks."""
    targets = _target_ids(tasks, ids)
    return [_is_valid(idx, len(tasks)) and start_timer(tasks[idx], now) for idx in targets]


def stop(tasks: List[Task], ids: Optional[List[int]] = None, now: Optional[datetime] = None) -> List[bool]:
    """Stop timers of the selected tasks and record the time spent."""
    targets = _target_ids(tasks, ids)
    return [_is_valid(idx, len(tasks)) and stop_timer(tasks[idx], now) for idx in targets]

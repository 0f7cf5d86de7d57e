"""Sorting of task ID lists.

The sort is stable and keys are compared field by field. Tasks missing a date sort after
tasks that have one; IDs outside the task list always go to the end before `rev` is
applied.
"""

import re
from typing import List, Optional

from pydantic import BaseModel, Field

from todokit.models.task import Task

_FIELD_SEPARATORS = re.compile(r"[,:]")


class SortConf(BaseModel):
    """Sorting rules.

    `fields` is a comma or colon separated list of: `pri`/`priority`, `due`, `thr`,
    `completed`/`finished`, `created`/`create`, `subject`/`subj`/`text`, `done`
    (active, then recurring, then finished), `project`/`proj`, `context`/`ctx`.
    Unknown names are ignored.
    """

    fields: Optional[str] = Field(None, description="Fields to sort by, in order")
    rev: bool = Field(False, description="Reverse the sorted list")


def _date_key(value) -> tuple:
    # Missing dates go to the bottom
    return (0, value) if value is not None else (1,)


def _list_key(items: List[str]) -> tuple:
    if not items:
        return (1,)
    return (0, tuple(item.lower() for item in items))


def _done_key(task: Task) -> int:
    if task.recurrence is not None:
        return 1
    if task.finished:
        return 2
    return 0


def _field_key(task: Task, field: str):
    if field in ("pri", "priority"):
        return task.priority
    if field == "due":
        return _date_key(task.due_date)
    if field == "thr":
        return _date_key(task.threshold_date)
    if field in ("completed", "finished"):
        return _date_key(task.finish_date)
    if field in ("created", "create"):
        return _date_key(task.create_date)
    if field in ("subject", "subj", "text"):
        return task.subject
    if field == "done":
        return _done_key(task)
    if field in ("project", "proj"):
        return _list_key(task.projects)
    if field in ("context", "ctx"):
        return _list_key(task.contexts)
    return 0


def parse_fields(fields: Optional[str]) -> List[str]:
    if not fields:
        return []
    return [name.strip() for name in _FIELD_SEPARATORS.split(fields.lower()) if name.strip()]


def sort_ids(ids: List[int], tasks: List[Task], conf: SortConf) -> List[int]:
    """Return `ids` ordered by the rules in `conf`.

    Args:
        ids: Task IDs, usually the result of filtering
        tasks: The whole task list the IDs point into
        conf: Sorting rules

    Returns:
        A new sorted list of IDs
    """
    fields = parse_fields(conf.fields)
    result = list(ids)
    if fields:
        def key(idx: int) -> tuple:
            if not 0 <= idx < len(tasks):
                return (1,)
            task = tasks[idx]
            return (0, tuple(_field_key(task, field) for field in fields))

        result.sort(key=key)
    if conf.rev:
        result.reverse()
    return result

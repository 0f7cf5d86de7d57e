"""Editing, filtering and sorting engine for todokit."""

from todokit.engine.date_expr import evaluate
from todokit.engine.edit import (
    Action,
    Conf,
    DateTagChange,
    ListTagChange,
    add,
    clone_tasks,
    done,
    edit,
    remove,
    start,
    stop,
    undone,
)
from todokit.engine.filtering import filter_tasks
from todokit.engine.ranking import SortConf, sort_ids
from todokit.engine.timer import is_on, spent_time, start_timer, stop_timer

__all__ = [
    "evaluate",
    "Action",
    "Conf",
    "DateTagChange",
    "ListTagChange",
    "add",
    "clone_tasks",
    "done",
    "edit",
    "remove",
    "start",
    "stop",
    "undone",
    "filter_tasks",
    "SortConf",
    "sort_ids",
    "is_on",
    "spent_time",
    "start_timer",
    "stop_timer",
]

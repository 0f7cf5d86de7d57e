"""Data models for todokit."""

from todokit.models.constants import INCLUDE_NONE, INVALID_ID, NO_PRIORITY
from todokit.models.recurrence import Period, Recurrence, RecurrenceParseError
from todokit.models.completion import CompletionConfig, CompletionDateMode, CompletionMode
from todokit.models.task import Task

__all__ = [
    "INCLUDE_NONE",
    "INVALID_ID",
    "NO_PRIORITY",
    "Period",
    "Recurrence",
    "RecurrenceParseError",
    "CompletionConfig",
    "CompletionDateMode",
    "CompletionMode",
    "Task",
]

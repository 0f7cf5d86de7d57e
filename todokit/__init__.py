"""todokit: a library for todo.txt task lists."""

from todokit.models import (
    INCLUDE_NONE,
    INVALID_ID,
    NO_PRIORITY,
    CompletionConfig,
    CompletionDateMode,
    CompletionMode,
    Period,
    Recurrence,
    Task,
)
from todokit.errors import TodoError, TodoErrorKind
from todokit.config import Settings, get_settings

__version__ = "0.1.0"

__all__ = [
    "INCLUDE_NONE",
    "INVALID_ID",
    "NO_PRIORITY",
    "CompletionConfig",
    "CompletionDateMode",
    "CompletionMode",
    "Period",
    "Recurrence",
    "Task",
    "TodoError",
    "TodoErrorKind",
    "Settings",
    "get_settings",
]

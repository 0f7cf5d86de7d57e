"""Error types surfaced to todokit callers."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class TodoErrorKind(str, Enum):
    """Enumerated failure kinds."""
    INVALID_VALUE = "invalid_value"
    SAVE_FAILED = "save_failed"
    LOAD_FAILED = "load_failed"
    APPEND_FAILED = "append_failed"
    FILE_WRITE_FAILED = "file_write_failed"
    NOT_COMMAND = "not_command"
    IO_ERROR = "io_error"


_MESSAGES = {
    TodoErrorKind.SAVE_FAILED: "failed to save todo list",
    TodoErrorKind.LOAD_FAILED: "failed to load todo list",
    TodoErrorKind.APPEND_FAILED: "failed to append to todo list",
    TodoErrorKind.FILE_WRITE_FAILED: "failed to write to file",
    TodoErrorKind.NOT_COMMAND: "not a command",
}


class TodoError(Exception):
    """Exception carrying a failure kind and a message ready for display.

    Errors never wrap other exceptions: OS level details are kept as text in `detail`.
    """

    def __init__(
        self,
        kind: TodoErrorKind,
        *,
        value: Optional[str] = None,
        name: Optional[str] = None,
        detail: Optional[str] = None,
    ) -> None:
        self.kind = kind
        self.value = value
        self.name = name
        self.detail = detail
        super().__init__(self.message)

    @classmethod
    def invalid_value(cls, value: str, name: str, detail: Optional[str] = None) -> "TodoError":
        return cls(TodoErrorKind.INVALID_VALUE, value=value, name=name, detail=detail)

    @classmethod
    def io_error(cls, detail: str) -> "TodoError":
        return cls(TodoErrorKind.IO_ERROR, detail=detail)

    @property
    def message(self) -> str:
        if self.kind == TodoErrorKind.INVALID_VALUE:
            text = f"invalid {self.name}: '{self.value}'"
        elif self.kind == TodoErrorKind.IO_ERROR:
            return f"I/O error: {self.detail}"
        else:
            text = _MESSAGES[self.kind]
        if self.detail:
            text = f"{text} ({self.detail})"
        return text

    def __str__(self) -> str:
        return self.message

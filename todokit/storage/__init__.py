"""File persistence for todokit."""

from todokit.storage.todo_file import TodoFile, archive, load, save

__all__ = ["TodoFile", "archive", "load", "save"]

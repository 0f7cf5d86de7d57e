"""Reading and writing todo.txt files.

The list is saved through a temporary file that is renamed over the target, so a
successful save leaves either the old or the new contents on disk, never a mix.
"""

import logging
import os
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional, Union

from todokit.errors import TodoError, TodoErrorKind
from todokit.models.constants import TEMP_FILE_SUFFIX
from todokit.models.task import Task

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def temp_path_for(path: PathLike) -> Path:
    """Return the temporary file used while saving `path` (todo.txt -> todo.todo.tmp)."""
    return Path(path).with_suffix(TEMP_FILE_SUFFIX)


def _split_lines(text: str) -> List[str]:
    """Split on line feeds only, dropping a trailing CR and the empty tail after a final newline."""
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def load(path: PathLike, today: Optional[date] = None) -> List[Task]:
    """Load tasks from a todo.txt file.

    A missing file is an empty list. Blank lines are kept as empty tasks so IDs match
    line numbers.

    Raises:
        TodoError: LOAD_FAILED if the file cannot be read
    """
    today = today or date.today()
    path = Path(path)
    if not path.exists():
        logger.debug(f"No todo file at {path}, starting with an empty list")
        return []
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            lines = _split_lines(f.read())
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Failed to load {path}: {type(e).__name__}: {str(e)}")
        raise TodoError(TodoErrorKind.LOAD_FAILED, detail=str(e)) from None

    tasks = [Task.parse(line, today) for line in lines]
    logger.debug(f"Loaded {len(tasks)} tasks from {path}")
    return tasks


def _write_lines(f, tasks: Iterable[Task]) -> None:
    for task in tasks:
        f.write(f"{task.to_line()}\n")


def save(path: PathLike, tasks: List[Task]) -> None:
    """Write tasks to a todo.txt file atomically.

    Raises:
        TodoError: SAVE_FAILED if the temporary file cannot be created,
            FILE_WRITE_FAILED if writing fails, IO_ERROR if the rename fails
    """
    path = Path(path)
    tmp_path = temp_path_for(path)
    try:
        f = open(tmp_path, "w", encoding="utf-8", newline="\n")
    except OSError as e:
        logger.error(f"Failed to save {path}: {type(e).__name__}: {str(e)}")
        raise TodoError(TodoErrorKind.SAVE_FAILED, detail=str(e)) from None

    try:
        try:
            with f:
                _write_lines(f, tasks)
        except OSError as e:
            logger.error(f"Failed to write {tmp_path}: {type(e).__name__}: {str(e)}")
            raise TodoError(TodoErrorKind.FILE_WRITE_FAILED, detail=str(e)) from None

        try:
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Failed to replace {path}: {type(e).__name__}: {str(e)}")
            raise TodoError.io_error(str(e)) from None
    finally:
        if tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                logger.warning(f"Could not remove temporary file {tmp_path}")

    logger.debug(f"Saved {len(tasks)} tasks to {path}")


def archive(path: PathLike, tasks: List[Task]) -> None:
    """Append tasks to a file (usually done.txt), creating it if needed.

    Raises:
        TodoError: APPEND_FAILED if the file cannot be opened, FILE_WRITE_FAILED if
            writing fails
    """
    path = Path(path)
    try:
        f = open(path, "a", encoding="utf-8", newline="\n")
    except OSError as e:
        logger.error(f"Failed to open {path} for appending: {type(e).__name__}: {str(e)}")
        raise TodoError(TodoErrorKind.APPEND_FAILED, detail=str(e)) from None

    try:
        with f:
            _write_lines(f, tasks)
    except OSError as e:
        logger.error(f"Failed to append to {path}: {type(e).__name__}: {str(e)}")
        raise TodoError(TodoErrorKind.FILE_WRITE_FAILED, detail=str(e)) from None

    logger.debug(f"Archived {len(tasks)} tasks to {path}")


class TodoFile:
    """A todo list file together with its archive file."""

    def __init__(self, path: PathLike, done_path: Optional[PathLike] = None):
        """Initialize with the list path.

        Args:
            path: The todo.txt file
            done_path: Archive file; defaults to done.txt next to the list
        """
        self.path = Path(path)
        self.done_path = Path(done_path) if done_path is not None else self.path.with_name("done.txt")

    def load(self, today: Optional[date] = None) -> List[Task]:
        return load(self.path, today)

    def save(self, tasks: List[Task]) -> None:
        save(self.path, tasks)

    def archive(self, tasks: List[Task]) -> None:
        archive(self.done_path, tasks)

    def archive_finished(self, tasks: List[Task]) -> List[Task]:
        """Move finished tasks to the archive and save the rest.

        Returns:
            The tasks that remain in the list
        """
        finished = [task for task in tasks if task.finished]
        remaining = [task for task in tasks if not task.finished]
        if not finished:
            return remaining
        self.archive(finished)
        self.save(remaining)
        return remaining

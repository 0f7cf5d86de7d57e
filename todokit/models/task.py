"""Task data model for todokit.

A task is one line of a todo.txt file:

    [x] [(A)] [finish_date] [create_date] subject

The subject keeps every inline token (`+project`, `@context`, `#hashtag`, `key:value`).
The structured fields are always derived from the subject, so every mutation edits the
subject text first and then refreshes the fields from it.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from todokit.models.completion import CompletionConfig, CompletionDateMode, CompletionMode
from todokit.models.constants import (
    DATE_TAGS,
    DUE_TAG,
    NO_PRIORITY,
    PRI_TAG,
    REC_TAG,
    THR_TAG,
    UNTIL_TAG,
)
from todokit.models.recurrence import Recurrence, RecurrenceParseError
from todokit.todotxt.dates import DateParseError, format_date, parse_date, parse_iso_date
from todokit.todotxt.priority import (
    PriorityParseError,
    char_to_priority,
    format_priority,
    parse_priority,
    priority_to_char,
)
from todokit.todotxt.tokens import (
    extract_contexts,
    extract_hashtags,
    extract_projects,
    extract_tags,
    replace_word,
)


def _first_word(text: str) -> str:
    return text.split(" ", 1)[0]


def _rest_after_first_word(text: str) -> str:
    parts = text.split(" ", 1)
    return parts[1].strip() if len(parts) > 1 else ""


def _strip_sigil(name: str, sigil: str) -> str:
    return name[len(sigil):] if name.startswith(sigil) else name


class Task(BaseModel):
    """One todo.txt record."""

    subject: str = Field("", description="Task text including inline tokens")
    finished: bool = Field(False, description="Whether the line starts with 'x '")
    priority: int = Field(NO_PRIORITY, ge=0, le=NO_PRIORITY, description="0..25 for A..Z, 26 for none")
    create_date: Optional[date] = Field(None, description="Creation date")
    finish_date: Optional[date] = Field(None, description="Completion date")
    due_date: Optional[date] = Field(None, description="Mirror of the 'due' tag")
    threshold_date: Optional[date] = Field(None, description="Mirror of the 't' tag")
    recurrence: Optional[Recurrence] = Field(None, description="Mirror of the 'rec' tag")
    projects: List[str] = Field(default_factory=list, description="Projects without the '+' sigil")
    contexts: List[str] = Field(default_factory=list, description="Contexts without the '@' sigil")
    hashtags: List[str] = Field(default_factory=list, description="Hashtags without the '#' sigil")
    tags: Dict[str, str] = Field(default_factory=dict, description="key:value tokens of the subject")

    @classmethod
    def parse(cls, line: str, today: Optional[date] = None) -> "Task":
        """Parse a todo.txt line.

        Malformed prefixes never raise: an unreadable priority or date simply stays in
        the subject. Relative values of the `due`, `t` and `until` tags are resolved
        against `today` and rewritten in the subject as `YYYY-MM-DD`.

        Args:
            line: One line of a todo.txt file, without the line terminator
            today: Base date for relative tag values (defaults to the local date)

        Returns:
            The parsed task
        """
        today = today or date.today()
        task = cls()
        rest = line

        if rest.startswith("x "):
            task.finished = True
            rest = rest[len("x "):].strip()

        if rest.startswith("("):
            try:
                task.priority = parse_priority(_first_word(rest))
                rest = _rest_after_first_word(rest)
            except PriorityParseError:
                pass

        first = parse_iso_date(_first_word(rest))
        if first is not None:
            rest = _rest_after_first_word(rest)
            if not task.finished:
                task.create_date = first
            else:
                task.finish_date = first
                second = parse_iso_date(_first_word(rest))
                if second is not None:
                    task.create_date = second
                    rest = _rest_after_first_word(rest)

        task.subject = rest
        task._canonicalize_date_tags(today)
        task._refresh(today)
        return task

    def to_line(self) -> str:
        """Format the task as a todo.txt line."""
        parts: List[str] = []
        if self.finished:
            parts.append("x")
        if self.priority != NO_PRIORITY:
            parts.append(format_priority(self.priority))
        if self.finished and self.finish_date is not None:
            parts.append(format_date(self.finish_date))
        if self.create_date is not None:
            parts.append(format_date(self.create_date))
        parts.append(self.subject)
        return " ".join(parts)

    def __str__(self) -> str:
        return self.to_line()

    def _canonicalize_date_tags(self, today: date) -> None:
        for key, value in extract_tags(self.subject).items():
            if key not in DATE_TAGS:
                continue
            try:
                canonical = format_date(parse_date(value, today))
            except DateParseError:
                continue
            if canonical != value:
                self.subject = replace_word(self.subject, f"{key}:{value}", f"{key}:{canonical}")

    def _refresh(self, today: Optional[date] = None) -> None:
        """Re-derive every structured field from the subject."""
        today = today or date.today()
        self.projects = extract_projects(self.subject)
        self.contexts = extract_contexts(self.subject)
        self.hashtags = extract_hashtags(self.subject)
        self.tags = extract_tags(self.subject)
        self.due_date = self._tag_date(DUE_TAG, today)
        self.threshold_date = self._tag_date(THR_TAG, today)
        self.recurrence = None
        if REC_TAG in self.tags:
            try:
                self.recurrence = Recurrence.parse(self.tags[REC_TAG])
            except RecurrenceParseError:
                self.recurrence = None

    def _tag_date(self, key: str, today: date) -> Optional[date]:
        value = self.tags.get(key)
        if value is None:
            return None
        try:
            return parse_date(value, today)
        except DateParseError:
            return None

    def update_tag_with_value(self, key: str, value: str, today: Optional[date] = None) -> bool:
        """Set, replace or remove a `key:value` tag in the subject.

        An empty value removes the tag, a missing tag is appended to the subject, and an
        existing one is rewritten in place. Values of date tags are stored as `YYYY-MM-DD`.
        A value containing whitespace cannot be stored in a single word and is rejected.

        Args:
            key: Tag name
            value: New value, empty to remove the tag
            today: Base date for relative date values

        Returns:
            True if the subject changed
        """
        today = today or date.today()
        if any(ch.isspace() for ch in value):
            return False
        if value and key in DATE_TAGS:
            try:
                value = format_date(parse_date(value, today))
            except DateParseError:
                pass

        old = self.tags.get(key)
        if not value:
            if old is None:
                return False
            self.subject = replace_word(self.subject, f"{key}:{old}", "")
        elif old is None:
            token = f"{key}:{value}"
            self.subject = f"{self.subject} {token}" if self.subject else token
        elif old == value:
            return False
        else:
            self.subject = replace_word(self.subject, f"{key}:{old}", f"{key}:{value}")
        self._refresh(today)
        return True

    def update_tag(self, tag: str, today: Optional[date] = None) -> bool:
        """Apply a `name:value` string; `name:` removes the tag."""
        name, sep, value = tag.partition(":")
        if not sep or not name:
            return False
        return self.update_tag_with_value(name, value, today)

    def _replace_token(self, sigil: str, current: List[str], old: str, new: str) -> bool:
        old = _strip_sigil(old, sigil)
        new = _strip_sigil(new, sigil)
        if not old:
            if not new or any(item.lower() == new.lower() for item in current):
                return False
            token = f"{sigil}{new}"
            self.subject = f"{self.subject} {token}" if self.subject else token
            self._refresh()
            return True

        if not any(item.lower() == old.lower() for item in current):
            return False
        replacement = f"{sigil}{new}" if new else ""
        before = self.subject
        self.subject = replace_word(self.subject, f"{sigil}{old}", replacement, ignore_case=True)
        self._refresh()
        return self.subject != before

    def replace_project(self, old: str, new: str) -> bool:
        """Rename, add (empty `old`) or remove (empty `new`) a project."""
        return self._replace_token("+", self.projects, old, new)

    def replace_context(self, old: str, new: str) -> bool:
        """Rename, add (empty `old`) or remove (empty `new`) a context."""
        return self._replace_token("@", self.contexts, old, new)

    def replace_hashtag(self, old: str, new: str) -> bool:
        """Rename, add (empty `old`) or remove (empty `new`) a hashtag."""
        return self._replace_token("#", self.hashtags, old, new)

    def complete(self, today: date, config: Optional[CompletionConfig] = None) -> bool:
        """Mark the task done.

        The finish date is written only when the task has a creation date, unless the
        date mode is `always_set`. The priority is then handled according to the mode.

        Returns:
            False if the task was already finished
        """
        if self.finished:
            return False
        config = config or CompletionConfig()
        self.finished = True
        if self.create_date is not None or config.date_mode == CompletionDateMode.ALWAYS_SET:
            self.finish_date = today

        if self.priority == NO_PRIORITY:
            return True
        if config.mode == CompletionMode.MOVE_PRIORITY:
            if self.finish_date is not None:
                self.subject = f"{format_priority(self.priority)} {self.subject}".rstrip()
                self.priority = NO_PRIORITY
        elif config.mode == CompletionMode.PRIORITY_TO_TAG:
            letter = priority_to_char(self.priority)
            self.priority = NO_PRIORITY
            self.update_tag_with_value(PRI_TAG, letter, today)
        elif config.mode == CompletionMode.REMOVE_PRIORITY:
            self.priority = NO_PRIORITY
        return True

    def uncomplete(self, mode: CompletionMode = CompletionMode.JUST_MARK) -> bool:
        """Remove the completion mark, restoring a priority that `mode` moved away.

        Returns:
            False if the task was not finished
        """
        if not self.finished:
            return False
        self.finished = False
        self.finish_date = None

        if mode == CompletionMode.PRIORITY_TO_TAG:
            letter = self.tags.get(PRI_TAG)
            if letter is not None:
                priority = char_to_priority(letter)
                if priority != NO_PRIORITY:
                    self.priority = priority
                    self.update_tag_with_value(PRI_TAG, "")
        elif mode == CompletionMode.MOVE_PRIORITY:
            try:
                priority = parse_priority(_first_word(self.subject))
            except PriorityParseError:
                return True
            self.priority = priority
            self.subject = _rest_after_first_word(self.subject)
            self._refresh()
        return True

    def next_dates(self, today: date) -> bool:
        """Move due and threshold dates to their next occurrence.

        A strict recurrence advances from the current date, any other from `today`. The
        result is pushed forward by whole intervals until it is not before `today`.

        Returns:
            True if a date changed
        """
        if self.finished or self.recurrence is None:
            return False
        if self.due_date is None and self.threshold_date is None:
            return False

        rec = self.recurrence
        changed = False
        for key, current in ((DUE_TAG, self.due_date), (THR_TAG, self.threshold_date)):
            if current is None:
                continue
            new_date = rec.next_date(current if rec.strict else today)
            while new_date < today:
                new_date = rec.next_date(new_date)
            if self.update_tag_with_value(key, format_date(new_date), today):
                changed = True
        return changed

    def rec_until(self, today: Optional[date] = None) -> Optional[date]:
        """Return the date in the `until` tag, if it holds one."""
        return self._tag_date(UNTIL_TAG, today or date.today())

    def is_empty(self) -> bool:
        return not self.subject.strip()


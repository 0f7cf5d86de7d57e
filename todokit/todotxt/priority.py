"""Priority helpers: `(A)`..`(Z)` map to 0..25."""

import re

from todokit.models.constants import NO_PRIORITY

_PRIORITY_RE = re.compile(r"^\(([A-Z])\)$")


class PriorityParseError(ValueError):
    """Raised when a word is not a `(A)`..`(Z)` priority."""


def parse_priority(text: str) -> int:
    match = _PRIORITY_RE.match(text)
    if not match:
        raise PriorityParseError(f"invalid priority: '{text}'")
    return ord(match.group(1)) - ord("A")


def format_priority(priority: int) -> str:
    if priority >= NO_PRIORITY or priority < 0:
        return ""
    return f"({priority_to_char(priority)})"


def priority_to_char(priority: int) -> str:
    """Return the letter for a priority, or an empty string when there is none."""
    if priority >= NO_PRIORITY or priority < 0:
        return ""
    return chr(ord("A") + priority)


def char_to_priority(char: str) -> int:
    """Convert a letter (either case) to a priority; anything else is NO_PRIORITY."""
    if len(char) != 1 or not char.isascii() or not char.isalpha():
        return NO_PRIORITY
    return ord(char.upper()) - ord("A")


def str_to_priority(text: str) -> int:
    """Convert `a`, `B`, `(C)` or `none` to a priority value."""
    value = text.strip()
    if value.startswith("(") and value.endswith(")"):
        value = value[1:-1]
    if value.lower() in ("", "none", "-"):
        return NO_PRIORITY
    return char_to_priority(value)

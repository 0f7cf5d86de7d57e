"""Token extraction from a task subject.

A subject is split on single spaces. Words starting with `+`, `@` and `#` are projects,
contexts and hashtags; words of the form `key:value` are tags. A sigil glued to other
characters (`some+project`) does not start a token.
"""

from typing import Dict, List, Optional, Tuple


def split_tag(word: str) -> Optional[Tuple[str, str]]:
    """Split a `key:value` word, or return None if the word is not a tag.

    The key must be alphanumeric and the value non-empty. Only the first colon separates,
    so `at:12:30` is the tag `at` with value `12:30`.
    """
    key, sep, value = word.partition(":")
    if not sep or not key or not value:
        return None
    if not key.isalnum():
        return None
    return key, value


def _extract_with_sigil(subject: str, sigil: str) -> List[str]:
    found: List[str] = []
    for word in subject.split(" "):
        if len(word) > 1 and word.startswith(sigil):
            name = word[1:]
            if name not in found:
                found.append(name)
    return found


def extract_projects(subject: str) -> List[str]:
    return _extract_with_sigil(subject, "+")


def extract_contexts(subject: str) -> List[str]:
    return _extract_with_sigil(subject, "@")


def extract_hashtags(subject: str) -> List[str]:
    return _extract_with_sigil(subject, "#")


def extract_tags(subject: str) -> Dict[str, str]:
    """Return all tags of a subject; a repeated key keeps its last value."""
    tags: Dict[str, str] = {}
    for word in subject.split(" "):
        pair = split_tag(word)
        if pair is not None:
            tags[pair[0]] = pair[1]
    return tags


def replace_word(text: str, old: str, new: str, ignore_case: bool = False) -> str:
    """Replace every space-delimited word equal to `old` with `new`.

    An empty `new` removes the word together with one adjoining space. Words that only
    contain `old` as a part (`+tag1` for `+tag`) are left alone.
    """
    if not old:
        return text
    target = old.lower() if ignore_case else old
    result: List[str] = []
    for word in text.split(" "):
        current = word.lower() if ignore_case else word
        if current == target:
            if new:
                result.append(new)
        else:
            result.append(word)
    return " ".join(result)

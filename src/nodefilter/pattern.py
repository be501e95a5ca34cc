"""Matching strings against patterns of different types.

The first character of a pattern selects how it matches:

- ``^`` the string must begin with the rest of the pattern
- ``$`` the string must end with it
- ``~`` case-insensitive equality
- ``=`` case-sensitive equality
- ``>`` regular expression (searched anywhere in the string)
- ``"`` glob-like pattern, ``*`` and ``?`` being the only wildcards
- ``'`` case-sensitive search

Without a prefix, a search is done unless the pattern contains ``*`` or
``?``, in which case it is a glob. A leading ``|`` turns every other ``|``
into a separator between alternatives, e.g. ``|$.jpg|$.png|>^IMG_\\d+``.
"""

import re
from enum import Enum
from typing import List, Tuple

from .errors import PatternError

# '(' would be confused with groups in filters
FORBIDDEN_FIRST_CHARS = "!@()[]{}-+:%<"


class PatternType(Enum):
    GLOB = "glob"
    SEARCH = "search"
    BEGIN = "begin"
    END = "end"
    INSENSITIVE_MATCH = "insensitive"
    SENSITIVE_MATCH = "sensitive"
    REGEX = "regex"


_PREFIXES = {
    "^": PatternType.BEGIN,
    "$": PatternType.END,
    "~": PatternType.INSENSITIVE_MATCH,
    "=": PatternType.SENSITIVE_MATCH,
    ">": PatternType.REGEX,
    '"': PatternType.GLOB,
    "'": PatternType.SEARCH,
}


def glob_to_regex(glob: str) -> "re.Pattern[str]":
    """Compile a glob using only ``*`` and ``?`` into an anchored regex."""
    pattern = glob.replace("*", "\x00").replace("?", "\x01")
    pattern = re.escape(pattern)
    pattern = pattern.replace("\x00", ".*").replace("\x01", ".")
    return re.compile(pattern + r"\Z", re.DOTALL)


def _compile_one(string: str) -> Tuple[PatternType, object]:
    ptype = _PREFIXES.get(string[:1])
    if ptype is not None:
        string = string[1:]
    elif "*" in string or "?" in string:
        ptype = PatternType.GLOB
    else:
        ptype = PatternType.SEARCH

    if ptype is PatternType.GLOB:
        return ptype, glob_to_regex(string)
    if ptype is PatternType.REGEX:
        try:
            return ptype, re.compile(string)
        except re.error as e:
            raise PatternError(f"Invalid regular expression '{string}': {e}") from e
    if ptype is PatternType.INSENSITIVE_MATCH:
        return ptype, string.casefold()
    return ptype, string


class Pattern:
    """A compiled pattern, made of one or more alternatives."""

    def __init__(self, string: str):
        if not string:
            raise PatternError("Cannot create pattern for empty string")
        if string[0] in FORBIDDEN_FIRST_CHARS:
            raise PatternError(
                f"Patterns cannot start with one of the following: {FORBIDDEN_FIRST_CHARS}"
            )
        self.string = string
        if string[0] == "|":
            parts = string[1:].split("|")
        else:
            parts = [string]
        self._alternatives: List[Tuple[PatternType, object]] = [
            _compile_one(part) for part in parts
        ]

    @property
    def types(self) -> List[PatternType]:
        return [ptype for ptype, _ in self._alternatives]

    def is_match(self, text: str) -> bool:
        for ptype, compiled in self._alternatives:
            if ptype is PatternType.GLOB:
                matched = compiled.match(text) is not None
            elif ptype is PatternType.REGEX:
                matched = compiled.search(text) is not None
            elif ptype is PatternType.SEARCH:
                matched = compiled in text
            elif ptype is PatternType.BEGIN:
                matched = text.startswith(compiled)
            elif ptype is PatternType.END:
                matched = text.endswith(compiled)
            elif ptype is PatternType.INSENSITIVE_MATCH:
                matched = text.casefold() == compiled
            else:
                matched = text == compiled
            if matched:
                return True
        return False

    def __repr__(self):
        return f"Pattern({self.string!r})"

"""Parser for the line based ``key = value`` format used by ALPM metadata files.

Every line holds either a comment (starting with ``#``) or a key and a value
separated by exactly `` = ``. Keys that appear once map to a single string,
keys that appear several times map to the list of their values in order of
appearance. Empty lines and lines holding only blanks are ignored.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from typing import Union

Item = Union[str, list[str]]

_KEY = re.compile(r"[^= \n]+")
_NEWLINES = re.compile(r"(?:\n[ \t]*)*")
_REST_OF_LINE = re.compile(r"[^\r\n]*")
_DELIMITER = " = "

_KEY_EXPECTED = "a key followed by a ` = ` delimiter."
_DELIMITER_EXPECTED = "a '=' that delimits the key value pair, surrounded by a single space."


class IniError(Exception):
    """Base error for the key/value file format."""


class IniParseError(IniError):
    """Raised when the input does not follow the key/value syntax."""

    def __init__(
        self,
        text: str,
        offset: int,
        label: str | None = None,
        expected: str | None = None,
    ) -> None:
        self.offset = offset
        self.label = label
        self.expected = expected
        self.line = text.count("\n", 0, offset) + 1
        line_start = text.rfind("\n", 0, offset) + 1
        line_end = text.find("\n", offset)
        if line_end == -1:
            line_end = len(text)
        self.column = offset - line_start + 1

        parts = [text[line_start:line_end], " " * (self.column - 1) + "^"]
        if label is None:
            parts.append("unexpected input")
        else:
            parts.append(f"invalid {label}")
        if expected is not None:
            parts.append(f"expected {expected}")
        super().__init__("\n".join(parts))


def _till_line_ending(text: str, pos: int) -> tuple[str, int]:
    """Return the text up to the line ending and the position after it."""
    end = _REST_OF_LINE.match(text, pos).end()
    if text.startswith("\r", end) and not text.startswith("\r\n", end):
        raise IniParseError(text, end)
    return text[pos:end], end


def _skip_newlines(text: str, pos: int) -> int:
    return _NEWLINES.match(text, pos).end()


def _key_value_pairs(text: str) -> Iterator[tuple[str, str]]:
    """Yield every key and value in the order they appear in ``text``."""
    pos = _skip_newlines(text, 0)
    while pos < len(text):
        if text.startswith("#", pos):
            _, pos = _till_line_ending(text, pos + 1)
        else:
            key_match = _KEY.match(text, pos)
            if key_match is None:
                raise IniParseError(text, pos, "key", _KEY_EXPECTED)
            pos = key_match.end()
            if not text.startswith(_DELIMITER, pos):
                raise IniParseError(text, pos, "delimiter", _DELIMITER_EXPECTED)
            value, pos = _till_line_ending(text, pos + len(_DELIMITER))
            yield key_match.group(), value
        pos = _skip_newlines(text, pos)


def parse_ini(text: str) -> dict[str, Item]:
    """Parse ``text`` into a mapping sorted by key.

    Raises :class:`IniParseError` if the text is malformed.
    """
    grouped: dict[str, list[str]] = {}
    for key, value in _key_value_pairs(text):
        grouped.setdefault(key, []).append(value)
    return {
        key: values[0] if len(values) == 1 else values
        for key, values in sorted(grouped.items())
    }


def value_or_error(item: Item) -> str:
    """Return the single value of ``item`` or raise if it holds several."""
    if isinstance(item, str):
        return item
    raise IniError("internal consistency error")
"""Syntax level parser for MTREE files.

Turns MTREE text into a list of statements, one per line, without applying
the state that ``/set`` and ``/unset`` carry from line to line.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar, Union

from alpmfiles.mtree_errors import MtreeParseError
from alpmfiles.path_decoder import decode_utf8_chars

_T = TypeVar("_T")


class PathType(Enum):
    """Kinds of paths an MTREE file can describe."""

    DIR = "dir"
    FILE = "file"
    LINK = "link"


@dataclass(frozen=True)
class Property:
    """A ``name=value`` property of a path or ``/set`` line.

    ``uid``, ``gid``, ``size`` and ``time`` hold integers, ``type`` a
    :class:`PathType`, digests lower case hex strings, ``mode`` and ``link``
    strings.
    """

    name: str
    value: int | str | PathType


@dataclass(frozen=True)
class IgnoredStatement:
    """An empty line or a comment."""


@dataclass(frozen=True)
class SetStatement:
    """A ``/set`` line and the defaults it sets."""

    properties: tuple[Property, ...]


@dataclass(frozen=True)
class UnsetStatement:
    """An ``/unset`` line and the names of the defaults it removes."""

    properties: tuple[str, ...]


@dataclass(frozen=True)
class PathStatement:
    """A path line with its decoded path and its properties."""

    path: str
    properties: tuple[Property, ...]


Statement = Union[IgnoredStatement, SetStatement, UnsetStatement, PathStatement]

_IGNORED = IgnoredStatement()

_SPACE0 = re.compile(r"[ \t]*")
_DIGITS = re.compile(r"[0-9]+")
_MODE = re.compile(r"[0-7]{3,4}")
_UNTIL_SPACE = re.compile(r"[^ \n]*")
_HEX = re.compile(r"[0-9a-fA-F]*")
_TIMESTAMP = re.compile(r"([0-9]+)\.[0-9]+")
_SIZE = re.compile(r"\+?[0-9]+")
_USIZE_LIMIT = 2**64

_PATH_KEYS = (
    "type",
    "uid",
    "gid",
    "mode",
    "size",
    "link",
    "md5digest",
    "sha256digest",
    "time",
)
_SET_KEYS = ("uid", "gid", "type", "mode")

_PATH_KEYS_EXPECTED = (
    "'type', 'uid', 'gid', 'mode', 'size', 'link', 'md5digest', 'sha256digest' or 'time'"
)
_SET_KEYS_EXPECTED = "'uid', 'gid' or 'type', 'mode'"
_STATEMENT_EXPECTED = (
    "'/set', '/unset', or a relative local path (./some/path) "
    "followed by their respective properties."
)


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def error(
        self,
        label: str | None = None,
        expected: str | None = None,
        offset: int | None = None,
    ) -> MtreeParseError:
        return MtreeParseError(
            self.text, self.pos if offset is None else offset, label, expected
        )

    def parse(self) -> list[Statement]:
        statements: list[Statement] = []
        while self.pos < len(self.text):
            statements.append(self.statement())
        return statements

    def line_ending_at(self, pos: int) -> int | None:
        if self.text.startswith("\n", pos):
            return pos + 1
        if self.text.startswith("\r\n", pos):
            return pos + 2
        return None

    def decode(self, raw: str, base: int) -> str:
        try:
            return decode_utf8_chars(raw)
        except MtreeParseError as err:
            raise MtreeParseError(
                self.text, base + err.offset, err.label, err.expected
            ) from err

    def statement(self) -> Statement:
        text, start = self.text, self.pos
        indent_end = _SPACE0.match(text, start).end()

        if text.startswith(".", indent_end):
            space = text.find(" ", indent_end + 1)
            if space != -1:
                path = self.decode(text[indent_end:space], indent_end)
                self.pos = space + 1
                return PathStatement(path, tuple(self.properties(self.path_property)))

        if text.startswith("/set ", start):
            self.pos = start + len("/set ")
            return SetStatement(tuple(self.properties(self.set_property)))

        if text.startswith("/unset ", start):
            self.pos = start + len("/unset ")
            return UnsetStatement(tuple(self.properties(self.unset_property)))

        if text.startswith("#", start):
            newline = text.find("\n", start + 1)
            if newline != -1:
                self.pos = newline + 1
                return _IGNORED

        line_end = self.line_ending_at(indent_end)
        if line_end is not None:
            self.pos = line_end
            return _IGNORED

        raise self.error("statement", _STATEMENT_EXPECTED, offset=start)

    def properties(self, parse_one: Callable[[], _T]) -> list[_T]:
        items = [parse_one()]
        while self.text.startswith(" ", self.pos):
            self.pos += 1
            items.append(parse_one())
        end = self.line_ending_at(self.pos)
        if end is None:
            raise self.error(expected="a line ending")
        self.pos = end
        return items

    def keyword(self, keys: tuple[str, ...], label: str, expected: str) -> str:
        for key in keys:
            if self.text.startswith(key, self.pos):
                self.pos += len(key)
                return key
        raise self.error(label, expected)

    def expect(self, literal: str) -> None:
        if not self.text.startswith(literal, self.pos):
            raise self.error(expected=f"'{literal}'")
        self.pos += len(literal)

    def path_property(self) -> Property:
        name = self.keyword(_PATH_KEYS, "file property type", _PATH_KEYS_EXPECTED)
        self.expect("=")
        return Property(name, self.value(name))

    def set_property(self) -> Property:
        name = self.keyword(_SET_KEYS, "property", _SET_KEYS_EXPECTED)
        self.expect("=")
        return Property(name, self.value(name))

    def unset_property(self) -> str:
        return self.keyword(_SET_KEYS, "property", _SET_KEYS_EXPECTED)

    def value(self, name: str) -> int | str | PathType:
        match name:
            case "type":
                return self.path_type()
            case "uid":
                return self.system_id("user id")
            case "gid":
                return self.system_id("group id")
            case "mode":
                return self.mode()
            case "size":
                return self.size()
            case "link":
                return self.link()
            case "md5digest":
                return self.digest(32, "md5 hash", "32 char long hexadecimal string")
            case "sha256digest":
                return self.digest(64, "sha256 hash", "64 char long hexadecimal string")
            case "time":
                return self.timestamp()
        raise self.error("property")

    def path_type(self) -> PathType:
        for path_type in PathType:
            if self.text.startswith(path_type.value, self.pos):
                self.pos += len(path_type.value)
                return path_type
        raise self.error("property file type", "'dir', 'file' or 'link'")

    def system_id(self, label: str) -> int:
        match = _DIGITS.match(self.text, self.pos)
        if match is None or int(match.group()) >= _USIZE_LIMIT:
            raise self.error(label, "a system id.")
        self.pos = match.end()
        return int(match.group())

    def timestamp(self) -> int:
        match = _TIMESTAMP.match(self.text, self.pos)
        if match is None or int(match.group(1)) >= _USIZE_LIMIT:
            raise self.error("unix epoch", "A unix epoch in float notation.")
        self.pos = match.end()
        return int(match.group(1))

    def mode(self) -> str:
        match = _MODE.match(self.text, self.pos)
        if match is None:
            raise self.error("file mode", "octal string of length 3-5.")
        self.pos = match.end()
        return match.group()

    def size(self) -> int:
        match = _UNTIL_SPACE.match(self.text, self.pos)
        raw = match.group()
        if not _SIZE.fullmatch(raw) or int(raw) >= _USIZE_LIMIT:
            raise self.error(
                "file size", "a positive integer representing the file's size."
            )
        self.pos = match.end()
        return int(raw)

    def link(self) -> str:
        match = _UNTIL_SPACE.match(self.text, self.pos)
        link = self.decode(match.group(), self.pos)
        self.pos = match.end()
        return link

    def digest(self, length: int, label: str, expected: str) -> str:
        match = _HEX.match(self.text, self.pos)
        raw = match.group()
        if len(raw) != length:
            raise self.error(label, expected)
        self.pos = match.end()
        return raw.lower()


def parse_statements(text: str) -> list[Statement]:
    """Parse MTREE ``text`` into one statement per line.

    Empty lines and comments become :class:`IgnoredStatement`, so that list
    positions match line numbers. Raises :class:`MtreeParseError` on bad syntax.
    """
    return _Parser(text).parse()
"""Errors raised while reading and interpreting MTREE files."""

from __future__ import annotations

import os


class MtreeError(Exception):
    """Base error for everything that can go wrong with MTREE data."""


class NoInputFileError(MtreeError):
    """Raised when neither a file nor piped input was given."""

    def __init__(self) -> None:
        super().__init__("No input file given.")


class MtreeIoError(MtreeError):
    """Raised when reading input fails, optionally at a known path."""

    def __init__(
        self,
        context: str,
        source: BaseException | str,
        path: str | os.PathLike[str] | None = None,
    ) -> None:
        self.context = context
        self.source = source
        self.path = path
        if path is None:
            message = f"I/O error while {context}:\n{source}"
        else:
            message = f'I/O error at path "{os.fspath(path)}" while {context}:\n{source}'
        super().__init__(message)


class InvalidGzipError(MtreeError):
    """Raised when gzip compressed input cannot be unpacked."""

    def __init__(self, source: BaseException | str) -> None:
        self.source = source
        super().__init__(f"Error while unpacking gzip file:\n{source}")


def _describe_decode_error(source: BaseException | str) -> str:
    if isinstance(source, UnicodeDecodeError):
        if source.reason.startswith("unexpected end of data"):
            return f"incomplete utf-8 byte sequence from index {source.start}"
        length = source.end - source.start
        return f"invalid utf-8 sequence of {length} bytes from index {source.start}"
    return str(source)


class InvalidUtf8Error(MtreeError):
    """Raised when uncompressed input is not valid UTF-8."""

    def __init__(self, source: BaseException | str) -> None:
        self.source = source
        super().__init__(_describe_decode_error(source))


class MtreeParseError(MtreeError):
    """Raised when the syntax of MTREE data is malformed.

    ``offset`` is the index into ``text`` where parsing failed; ``line`` and
    ``column`` are one based.
    """

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
        parts.append("unexpected input" if label is None else f"invalid {label}")
        if expected is not None:
            parts.append(f"expected {expected}")
        self.detail = "\n".join(parts)
        super().__init__(f"File parsing error:\n{self.detail}")


class InterpreterError(MtreeError):
    """Raised when parsed statements lack properties a path requires."""

    def __init__(self, line_nr: int, line: str, reason: str) -> None:
        self.line_nr = line_nr
        self.line = line
        self.reason = reason
        super().__init__(
            f"Error while interpreting file in line {line_nr}:\n"
            f"Affected line:\n{line}\n\nReason:\n{reason}"
        )
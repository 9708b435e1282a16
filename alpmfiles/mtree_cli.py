"""Command line interface for validating and converting MTREE files."""

from __future__ import annotations

import argparse
import json
import os
import sys
from enum import Enum
from typing import BinaryIO, Optional, TextIO, Union

from alpmfiles.mtree import MtreePath, parse_raw_mtree_v2
from alpmfiles.mtree_errors import MtreeError, MtreeIoError, NoInputFileError

PathArg = Union[str, "os.PathLike[str]"]


class OutputFormat(Enum):
    """Formats the ``format`` command can produce."""

    JSON = "json"

    def __str__(self) -> str:
        return self.value


def _read_input(file: Optional[PathArg], stdin: Union[BinaryIO, TextIO, None]) -> bytes:
    if file is not None:
        try:
            handle = open(file, "rb")
        except OSError as err:
            raise MtreeIoError("opening file", err, file) from err
        with handle:
            try:
                return handle.read()
            except OSError as err:
                raise MtreeIoError("reading file", err, file) from err

    stream = sys.stdin if stdin is None else stdin
    if stream is None or stream.isatty():
        raise NoInputFileError()
    try:
        data = getattr(stream, "buffer", stream).read()
    except OSError as err:
        raise MtreeIoError("reading from stdin", err) from err
    return data.encode("utf-8") if isinstance(data, str) else data


def parse(
    file: Optional[PathArg] = None,
    stdin: Union[BinaryIO, TextIO, None] = None,
) -> list[MtreePath]:
    """Read MTREE data from ``file`` or, if piped, from ``stdin`` and interpret it.

    Gzip compressed input is unpacked first. Raises :class:`NoInputFileError`
    when no file is given and standard input is a terminal.
    """
    return parse_raw_mtree_v2(_read_input(file, stdin))


def validate(
    file: Optional[PathArg] = None,
    stdin: Union[BinaryIO, TextIO, None] = None,
) -> None:
    """Check that the input is a valid MTREE file, raising otherwise."""
    parse(file, stdin)


def format_paths(
    file: Optional[PathArg] = None,
    output_format: OutputFormat = OutputFormat.JSON,
    pretty: bool = False,
    stdin: Union[BinaryIO, TextIO, None] = None,
) -> str:
    """Parse the input and return it rendered in ``output_format``."""
    paths = [entry.to_dict() for entry in parse(file, stdin)]
    match OutputFormat(output_format):
        case OutputFormat.JSON:
            if pretty:
                return json.dumps(paths, indent=2, ensure_ascii=False)
            return json.dumps(paths, separators=(",", ":"), ensure_ascii=False)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mtree", description="Validate MTREE files and convert them to other formats."
    )
    commands = parser.add_subparsers(dest="command", required=True)

    format_cmd = commands.add_parser(
        "format", help="Read an MTREE file and print it in another file format."
    )
    format_cmd.add_argument("file", nargs="?", metavar="FILE")
    format_cmd.add_argument(
        "-o",
        "--output-format",
        metavar="OUTPUT_FORMAT",
        choices=[fmt.value for fmt in OutputFormat],
        default=OutputFormat.JSON.value,
        help="the output format",
    )
    format_cmd.add_argument(
        "-p", "--pretty", action="store_true", help="pretty-print the output"
    )

    validate_cmd = commands.add_parser("validate", help="Validate an MTREE file.")
    validate_cmd.add_argument("file", nargs="?", metavar="FILE")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Run the command line interface and return the exit code."""
    args = _build_parser().parse_args(argv)
    try:
        if args.command == "validate":
            validate(args.file)
        else:
            print(format_paths(args.file, OutputFormat(args.output_format), args.pretty))
    except MtreeError as err:
        print(err, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
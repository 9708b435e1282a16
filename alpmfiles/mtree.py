"""Interpretation of MTREE v2 data into directories, files and links.

MTREE files are stateful: ``/set`` and ``/unset`` lines change the default
properties of every path line that follows. This module applies that state
and checks that every path has the properties its type requires.
"""

from __future__ import annotations

import gzip
import zlib
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Optional, Union

from alpmfiles.mtree_errors import InterpreterError, InvalidGzipError, InvalidUtf8Error
from alpmfiles.mtree_parser import (
    IgnoredStatement,
    PathStatement,
    PathType,
    Property,
    SetStatement,
    UnsetStatement,
    parse_statements,
)

_GZIP_MAGIC = b"\x1f\x8b"


@dataclass
class PathDefaults:
    """Default properties set by ``/set`` and removed by ``/unset`` lines."""

    uid: Optional[int] = None
    gid: Optional[int] = None
    mode: Optional[str] = None
    path_type: Optional[PathType] = None

    def apply_set(self, properties: Iterable[Property]) -> None:
        """Take over the values of a ``/set`` line."""
        for prop in properties:
            match prop.name:
                case "uid":
                    self.uid = prop.value
                case "gid":
                    self.gid = prop.value
                case "mode":
                    self.mode = str(prop.value)
                case "type":
                    self.path_type = prop.value
                case other:
                    raise ValueError(f"property {other!r} cannot be set as a default")

    def apply_unset(self, properties: Iterable[str]) -> None:
        """Remove the defaults named by an ``/unset`` line."""
        for name in properties:
            match name:
                case "uid":
                    self.uid = None
                case "gid":
                    self.gid = None
                case "mode":
                    self.mode = None
                case "type":
                    self.path_type = None
                case other:
                    raise ValueError(f"property {other!r} cannot be unset")


@dataclass(frozen=True, kw_only=True)
class Directory:
    """A directory described by an MTREE path line."""

    path: str
    uid: int
    gid: int
    mode: str
    time: int

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON ready mapping tagged with ``type``."""
        return {
            "type": "dir",
            "path": self.path,
            "uid": self.uid,
            "gid": self.gid,
            "mode": self.mode,
            "time": self.time,
        }


@dataclass(frozen=True, kw_only=True)
class File:
    """A regular file; the MD5 digest is optional for compatibility."""

    path: str
    uid: int
    gid: int
    mode: str
    size: int
    time: int
    md5_digest: Optional[str] = None
    sha256_digest: str

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON ready mapping tagged with ``type``.

        The MD5 digest is left out when it is not known.
        """
        data: dict[str, Any] = {
            "type": "file",
            "path": self.path,
            "uid": self.uid,
            "gid": self.gid,
            "mode": self.mode,
            "size": self.size,
            "time": self.time,
        }
        if self.md5_digest is not None:
            data["md5_digest"] = self.md5_digest
        data["sha256_digest"] = self.sha256_digest
        return data


@dataclass(frozen=True, kw_only=True)
class Link:
    """A symbolic link pointing at ``link_path``."""

    path: str
    uid: int
    gid: int
    mode: str
    time: int
    link_path: str

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON ready mapping tagged with ``type``."""
        return {
            "type": "link",
            "path": self.path,
            "uid": self.uid,
            "gid": self.gid,
            "mode": self.mode,
            "time": self.time,
            "link_path": self.link_path,
        }


MtreePath = Union[Directory, File, Link]

_PROPERTY_SLOTS = {
    "uid": "uid",
    "gid": "gid",
    "mode": "mode",
    "type": "path_type",
    "size": "size",
    "link": "link",
    "md5digest": "md5_digest",
    "sha256digest": "sha256_digest",
    "time": "time",
}


def parse_raw_mtree_v2(data: bytes) -> list[MtreePath]:
    """Parse raw MTREE bytes, unpacking them first if they are gzip compressed."""
    data = bytes(data)
    if data[:2] == _GZIP_MAGIC:
        try:
            raw = gzip.decompress(data)
            content = raw.decode("utf-8")
        except (OSError, EOFError, zlib.error, UnicodeDecodeError) as err:
            raise InvalidGzipError(err) from err
    else:
        try:
            content = data.decode("utf-8")
        except UnicodeDecodeError as err:
            raise InvalidUtf8Error(err) from err
    return parse_mtree_v2(content)


def parse_mtree_v2(content: str) -> list[MtreePath]:
    """Parse and interpret MTREE v2 text.

    MD5 digests are accepted but not required. Raises
    :class:`~alpmfiles.mtree_errors.MtreeParseError` for bad syntax and
    :class:`~alpmfiles.mtree_errors.InterpreterError` for missing properties.
    """
    paths: list[MtreePath] = []
    defaults = PathDefaults()
    for line_nr, statement in enumerate(parse_statements(content)):
        match statement:
            case IgnoredStatement():
                continue
            case SetStatement(properties=properties):
                defaults.apply_set(properties)
            case UnsetStatement(properties=properties):
                defaults.apply_unset(properties)
            case PathStatement(path=path, properties=properties):
                paths.append(_path_from_parsed(content, line_nr, defaults, path, properties))
    return paths


def _content_line(content: str, line_nr: int) -> str:
    line = content.split("\n")[line_nr]
    return line[:-1] if line.endswith("\r") else line


def _path_from_parsed(
    content: str,
    line_nr: int,
    defaults: PathDefaults,
    path: str,
    properties: Iterable[Property],
) -> MtreePath:
    values: dict[str, Any] = {
        "uid": defaults.uid,
        "gid": defaults.gid,
        "mode": defaults.mode,
        "path_type": defaults.path_type,
    }
    for prop in properties:
        value = prop.value
        values[_PROPERTY_SLOTS[prop.name]] = str(value) if prop.name == "mode" else value

    def fail(reason: str) -> InterpreterError:
        return InterpreterError(line_nr, _content_line(content, line_nr), reason)

    def require(slot: str, name: str) -> Any:
        value = values.get(slot)
        if value is None:
            raise fail(f"Couldn't find property {name} for path.")
        return value

    path_type = values["path_type"]
    if path_type is None:
        raise fail("Found no type for path.")

    match path_type:
        case PathType.DIR:
            return Directory(
                path=path,
                uid=require("uid", "uid"),
                gid=require("gid", "gid"),
                mode=require("mode", "mode"),
                time=require("time", "time"),
            )
        case PathType.FILE:
            return File(
                path=path,
                uid=require("uid", "uid"),
                gid=require("gid", "gid"),
                mode=require("mode", "mode"),
                size=require("size", "size"),
                time=require("time", "time"),
                md5_digest=values.get("md5_digest"),
                sha256_digest=require("sha256_digest", "sha256_digest"),
            )
        case PathType.LINK:
            return Link(
                path=path,
                uid=require("uid", "uid"),
                gid=require("gid", "gid"),
                mode=require("mode", "mode"),
                link_path=require("link", "link"),
                time=require("time", "time"),
            )
    raise fail("Found no type for path.")
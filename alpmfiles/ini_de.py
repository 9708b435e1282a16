"""Conversion of key/value file contents into dataclass instances."""

from __future__ import annotations

import dataclasses
import re
import types
import typing
from typing import Any, TypeVar

from alpmfiles.ini import IniError, IniParseError, Item, parse_ini, value_or_error

T = TypeVar("T")

_INTEGER = re.compile(r"[+-]?[0-9]+")

_NAMED_TYPES: dict[str, Any] = {
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "Any": Any,
    "typing.Any": Any,
    "None": type(None),
    "NoneType": type(None),
}

_LIST_NAMES = ("list", "List", "typing.List")
_OPTIONAL_NAMES = ("Optional", "typing.Optional")
_UNION_NAMES = ("Union", "typing.Union")


class IniDeserializeError(IniError):
    """Raised when parsed data cannot be turned into the requested model."""


def _split_top_level(text: str, separator: str) -> list[str]:
    """Split ``text`` on ``separator`` where it is outside of brackets."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for char in text:
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        if char == separator and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    parts.append("".join(current).strip())
    return parts


def _make_union(members: list[Any]) -> Any:
    if len(members) == 1:
        return members[0]
    return typing.Union[tuple(members)]


def _resolve_annotation(text: str) -> Any:
    """Turn a textual field annotation into the type it names."""
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"":
        return _resolve_annotation(text[1:-1])

    alternatives = _split_top_level(text, "|")
    if len(alternatives) > 1:
        return _make_union([_resolve_annotation(part) for part in alternatives])

    if text in _NAMED_TYPES:
        return _NAMED_TYPES[text]
    if text in _LIST_NAMES:
        return list[str]

    if text.endswith("]") and "[" in text:
        head, _, rest = text.partition("[")
        head = head.strip()
        arguments = [
            _resolve_annotation(part) for part in _split_top_level(rest[:-1], ",")
        ]
        if head in _LIST_NAMES and len(arguments) == 1:
            return list[arguments[0]]
        if head in _OPTIONAL_NAMES and len(arguments) == 1:
            return typing.Optional[arguments[0]]
        if head in _UNION_NAMES:
            return _make_union(arguments)

    raise IniDeserializeError(f"unsupported field type {text!r}")


def _field_hint(field: dataclasses.Field) -> Any:
    """Return the type of a dataclass field, resolving textual annotations."""
    hint = field.type
    if isinstance(hint, str):
        return _resolve_annotation(hint)
    return hint


def _optional_inner(hint: Any) -> Any | None:
    """Return ``X`` for ``X | None`` annotations, otherwise ``None``."""
    if typing.get_origin(hint) in (typing.Union, types.UnionType):
        args = [arg for arg in typing.get_args(hint) if arg is not type(None)]
        if len(args) == 1 and len(typing.get_args(hint)) == 2:
            return args[0]
    return None


def _parse_int(value: str) -> int:
    if not value:
        raise IniDeserializeError("cannot parse integer from empty string")
    if not _INTEGER.fullmatch(value):
        raise IniDeserializeError("invalid digit found in string")
    return int(value)


def _parse_float(value: str) -> float:
    if not value or "_" in value or value != value.strip():
        raise IniDeserializeError("invalid float literal")
    try:
        return float(value)
    except ValueError as err:
        raise IniDeserializeError("invalid float literal") from err


def _parse_bool(value: str) -> bool:
    if value == "true":
        return True
    if value == "false":
        return False
    raise IniDeserializeError("provided string was not `true` or `false`")


def _scalar(value: str, hint: Any) -> Any:
    """Convert a single string value to the type given by ``hint``."""
    if hint is Any or hint is str:
        return value
    if hint is bool:
        return _parse_bool(value)
    if hint is int:
        return _parse_int(value)
    if hint is float:
        return _parse_float(value)
    if typing.get_origin(hint) is not None or not isinstance(hint, type):
        raise IniDeserializeError(f"unsupported field type {hint!r}")
    if dataclasses.is_dataclass(hint):
        raise IniDeserializeError(
            f"invalid type: string {value!r}, expected struct {hint.__name__}"
        )
    try:
        return hint(value)
    except (ValueError, TypeError) as err:
        raise IniDeserializeError(str(err)) from err


def _convert(item: Item, hint: Any) -> Any:
    """Convert a parsed item according to a field annotation."""
    if hint is Any:
        return item
    inner = _optional_inner(hint)
    if inner is not None:
        return _convert(item, inner)
    if typing.get_origin(hint) in (list, typing.List):
        args = typing.get_args(hint)
        element = args[0] if args else str
        values = [item] if isinstance(item, str) else item
        return [_scalar(value, element) for value in values]
    if hint is str and not isinstance(item, str):
        raise IniDeserializeError("invalid type: sequence, expected a string")
    return _scalar(value_or_error(item), hint)


def from_str(text: str, model: type[T]) -> T:
    """Parse ``text`` and build an instance of the dataclass ``model`` from it.

    Fields missing from ``text`` take their dataclass default; optional fields
    without a default become ``None``. Keys without a matching field are ignored.
    A field with a list annotation accepts a key given once or several times.
    """
    if not (isinstance(model, type) and dataclasses.is_dataclass(model)):
        raise TypeError(f"{model!r} is not a dataclass type")
    try:
        items = parse_ini(text)
    except IniParseError as err:
        raise IniDeserializeError(str(err)) from err

    values: dict[str, Any] = {}
    for field in dataclasses.fields(model):
        if not field.init:
            continue
        hint = _field_hint(field)
        if field.name in items:
            values[field.name] = _convert(items[field.name], hint)
        elif (
            field.default is dataclasses.MISSING
            and field.default_factory is dataclasses.MISSING
        ):
            if _optional_inner(hint) is None:
                raise IniDeserializeError(f"missing field `{field.name}`")
            values[field.name] = None
    return model(**values)
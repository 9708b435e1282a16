"""Decoding of the escape sequences MTREE uses for paths.

Paths may contain the VIS_CSTYLE escapes ``\\s``, ``\\t``, ``\\r`` and ``\\n``,
``\\#`` for a literal ``#``, and octal triplets such as ``\\360\\237\\214\\240``
that together encode the UTF-8 bytes of a single character.
"""

from __future__ import annotations

import re

from alpmfiles.mtree_errors import MtreeParseError

_SIMPLE_ESCAPES = {"s": " ", "t": "\t", "r": "\r", "n": "\n", "#": "#"}
_OCTAL_TRIPLET = re.compile(r"\\([0-7]{3})")

_ESCAPE_EXPECTED = "VIS_CSTYLE encoding or encoded octal triplets for unicode chars."


def _octal_triplet(text: str, pos: int) -> int | None:
    """Return the byte encoded by the triplet at ``pos`` or ``None``."""
    match = _OCTAL_TRIPLET.match(text, pos)
    if match is None:
        return None
    value = int(match.group(1), 8)
    return value if value <= 0xFF else None


def _leading_ones(byte: int) -> int:
    return 8 - (~byte & 0xFF).bit_length()


def _unicode_char(text: str, start: int) -> tuple[str, int]:
    """Decode the character encoded as octal triplets at ``start``."""
    first = _octal_triplet(text, start)
    if first is None:
        raise MtreeParseError(text, start, "escape sequence", _ESCAPE_EXPECTED)
    pos = start + 4

    leading = _leading_ones(first)
    if leading == 1 or leading > 4:
        raise MtreeParseError(
            text, start, "amount of leading zeroes in first UTF-8 byte"
        )

    encoded = bytearray([first])
    for _ in range(1, leading):
        byte = _octal_triplet(text, pos)
        if byte is None:
            raise MtreeParseError(
                text, pos, "utf8 encoded byte", "octal triplet encoded unicode byte."
            )
        encoded.append(byte)
        pos += 4

    try:
        return encoded.decode("utf-8"), pos
    except UnicodeDecodeError as err:
        raise MtreeParseError(text, start, "UTF-8 byte sequence") from err


def decode_utf8_chars(text: str) -> str:
    """Return ``text`` with all MTREE escape sequences decoded.

    Raises :class:`MtreeParseError` for unknown escapes or malformed UTF-8.
    """
    parts: list[str] = []
    pos = 0
    while True:
        backslash = text.find("\\", pos)
        if backslash == -1:
            parts.append(text[pos:])
            return "".join(parts)
        parts.append(text[pos:backslash])
        marker = text[backslash + 1 : backslash + 2]
        if marker in _SIMPLE_ESCAPES:
            parts.append(_SIMPLE_ESCAPES[marker])
            pos = backslash + 2
        else:
            char, pos = _unicode_char(text, backslash)
            parts.append(char)
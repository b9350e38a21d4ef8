"""Reader and writer for Java-style ``.properties`` files.

Files written here load unchanged with ``java.util.Properties.load`` and
vice versa: text is ISO-8859-1 on disk, anything outside printable ASCII is
written as ``\\uXXXX``.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from datetime import datetime
from pathlib import Path
from string import hexdigits

from ._io import atomic_write_bytes

__all__ = ["dump", "dumps", "load", "loads"]

_WHITESPACE = " \t\f"
_SEPARATORS = "=:"
_COMMENT_MARKERS = "#!"
_NEWLINE_RE = re.compile(r"\r\n|\r|\n")
_DECODE_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_ENCODE_ESCAPES = {
    "\\": "\\\\",
    "\t": "\\t",
    "\n": "\\n",
    "\r": "\\r",
    "\f": "\\f",
    "=": "\\=",
    ":": "\\:",
    "#": "\\#",
    "!": "\\!",
}


def loads(text: str) -> dict[str, str]:
    properties: dict[str, str] = {}
    for line in _logical_lines(text):
        key, value = _split_pair(line)
        properties[_unescape(key)] = _unescape(value)
    return properties


def load(path: str | Path) -> dict[str, str]:
    return loads(Path(path).read_bytes().decode("iso-8859-1"))


def dumps(
    properties: Mapping[str, str],
    comment: str | None = None,
    *,
    timestamp: datetime | None = None,
) -> str:
    lines: list[str] = []
    if comment is not None:
        lines.extend(f"#{_to_ascii(part)}" for part in _NEWLINE_RE.split(comment))
    stamp = timestamp or datetime.now().astimezone()
    lines.append("#" + stamp.strftime("%a %b %d %H:%M:%S %Z %Y"))
    for key, value in properties.items():
        lines.append(f"{_escape(key, escape_space=True)}={_escape(value, escape_space=False)}")
    return "\n".join(lines) + "\n"


def dump(properties: Mapping[str, str], path: str | Path, comment: str | None = None) -> None:
    atomic_write_bytes(Path(path), dumps(properties, comment).encode("ascii"))


def _logical_lines(text: str) -> Iterator[str]:
    pending: str | None = None
    for natural in _NEWLINE_RE.split(text):
        line = natural.lstrip(_WHITESPACE)
        if pending is None and (not line or line[0] in _COMMENT_MARKERS):
            continue

        if _has_continuation(line):
            pending = (pending or "") + line[:-1]
            continue

        yield (pending or "") + line
        pending = None

    if pending is not None:
        yield pending


def _has_continuation(line: str) -> bool:
    trailing = len(line) - len(line.rstrip("\\"))
    return trailing % 2 == 1


def _split_pair(line: str) -> tuple[str, str]:
    index = 0
    while index < len(line):
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in _SEPARATORS or char in _WHITESPACE:
            break
        index += 1

    key = line[:index]
    rest = line[index:].lstrip(_WHITESPACE)
    if rest and rest[0] in _SEPARATORS:
        rest = rest[1:].lstrip(_WHITESPACE)
    return key, rest


def _unescape(text: str) -> str:
    if "\\" not in text:
        return text

    chars: list[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        index += 1
        if char != "\\":
            chars.append(char)
            continue
        if index >= len(text):
            break

        char = text[index]
        index += 1
        if char == "u":
            digits = text[index : index + 4]
            if len(digits) != 4 or any(digit not in hexdigits for digit in digits):
                raise ValueError(f"Malformed \\uxxxx encoding: \\u{digits}")
            chars.append(chr(int(digits, 16)))
            index += 4
        else:
            chars.append(_DECODE_ESCAPES.get(char, char))

    decoded = "".join(chars)
    # \u escapes are UTF-16 code units; join any surrogate pairs
    if any("\ud800" <= char <= "\udfff" for char in decoded):
        decoded = decoded.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "replace")
    return decoded


def _escape(text: str, *, escape_space: bool) -> str:
    parts: list[str] = []
    for index, char in enumerate(text):
        if char == " ":
            parts.append("\\ " if index == 0 or escape_space else " ")
        elif char in _ENCODE_ESCAPES:
            parts.append(_ENCODE_ESCAPES[char])
        else:
            parts.append(_to_ascii(char))
    return "".join(parts)


def _to_ascii(text: str) -> str:
    if all(0x20 <= ord(char) <= 0x7E for char in text):
        return text

    parts: list[str] = []
    for char in text:
        if 0x20 <= ord(char) <= 0x7E:
            parts.append(char)
            continue
        units = char.encode("utf-16-be", "surrogatepass")
        for offset in range(0, len(units), 2):
            parts.append(f"\\u{int.from_bytes(units[offset:offset + 2], 'big'):04X}")
    return "".join(parts)

"""Readers for the symbol file formats of various Z80 assemblers and linkers."""

from __future__ import annotations

import re
from collections.abc import Iterable
from enum import IntEnum
from pathlib import Path


class FileType(IntEnum):
    """Kinds of symbol files that can be loaded."""

    DETECT = 0
    OMDS = 1
    TNIASM0 = 2
    TNIASM1 = 3
    SJASM = 4
    ASMSX = 5
    LINKMAP = 6
    HTC = 7
    NOICE = 8
    PASMO = 9
    VASM = 10


_INT_MIN, _INT_MAX = -(2**31), 2**31 - 1
_ANY_BASE = re.compile(r"([+-]?)(?:0[xX]([0-9a-fA-F]+)|(0[0-7]*)|([1-9][0-9]*))")
_HEX = re.compile(r"([+-]?)(?:0[xX])?([0-9a-fA-F]+)")
_WHITESPACE_SPLIT = re.compile(r"\t+| +")
_LINKMAP_COLUMN = re.compile(r" [0-9A-Fa-f]{4}  (?![ 0-9])")
_LINKMAP_ENTRY = re.compile(r"([^ ]+) +[^ ]* +([0-9A-Fa-f]{4})  ")

Symbols = list[tuple[str, int]]


def _in_range(value: int) -> int | None:
    return value if _INT_MIN <= value <= _INT_MAX else None


def _parse_hex(text: str) -> int | None:
    m = _HEX.fullmatch(text.strip())
    if m is None:
        return None
    value = int(m.group(2), 16)
    return _in_range(-value if m.group(1) == "-" else value)


def _hex_or_zero(text: str) -> int:
    value = _parse_hex(text)
    return 0 if value is None else value


def _parse_any_base(text: str) -> int | None:
    m = _ANY_BASE.fullmatch(text.strip())
    if m is None:
        return None
    sign, hex_digits, octal, decimal = m.groups()
    if hex_digits is not None:
        value = int(hex_digits, 16)
    elif octal is not None:
        value = int(octal, 8)
    else:
        value = int(decimal, 10)
    return _in_range(-value if sign == "-" else value)


def parse_value(text: str) -> int | None:
    """Parse ``0123h``, ``0x1234``, decimal or octal, ignoring a ``; comment``."""
    s = text.split(";")[0].strip()
    if s[-1:] in ("h", "H"):
        return _parse_hex(s[:-1])
    return _parse_any_base(s)


def _clean(lines: Iterable[str]) -> Iterable[str]:
    for line in lines:
        yield line.rstrip("\r\n")


def _char(line: str, index: int) -> str:
    return line[index] if index < len(line) else ""


def detect_file_type(path: str | Path) -> FileType:
    """Guess a symbol file's type from its name and, for ``.sym``, its first line."""
    name = str(path).lower()
    if name.endswith(".omds"):
        return FileType.OMDS
    if name.endswith(".noi"):
        return FileType.NOICE
    if name.endswith(".map"):
        return FileType.LINKMAP
    if name.endswith(".sym"):
        try:
            with open(path, encoding="utf-8", errors="replace") as fh:
                line = fh.readline().rstrip("\r\n")
        except OSError:
            return FileType.DETECT
        lowered = line.lower()
        if line.startswith(";"):
            return FileType.ASMSX
        if "; last def. pass" in line:
            return FileType.TNIASM0
        if ": %equ " in line:
            return FileType.TNIASM1
        if ": equ " in lowered:
            return FileType.SJASM
        if "sections:" in lowered:
            return FileType.VASM
        return FileType.HTC
    if name.endswith((".symbol", ".publics", ".sys")):
        return FileType.PASMO
    return FileType.DETECT


def parse_equ_lines(lines: Iterable[str], equ: str) -> Symbols:
    """Lines of the form ``name<equ>value`` (the separator matched case-insensitively)."""
    separator = re.compile(re.escape(equ), re.IGNORECASE)
    result = []
    for line in _clean(lines):
        parts = separator.split(line)
        if len(parts) != 2:
            continue
        value = parse_value(parts[1])
        if value is not None:
            result.append((parts[0], value))
    return result


def parse_asmsx_lines(lines: Iterable[str]) -> Symbols:
    """asMSX symbol files: only the global and local label section is used."""
    result = []
    part = 0
    for line in _clean(lines):
        if _char(line, 0) == ";":
            if line.startswith("; global and local"):
                part = 1
            elif line.startswith("; other"):
                part = 2
            continue
        has_dollar = _char(line, 0) == "$"
        short_h = _char(line, 4) == "h" or _char(line, 5) == "h"
        if not (has_dollar or short_h or _char(line, 8) == "h") or part != 1:
            continue
        fields = line.split(" ")
        if len(fields) < 2:
            continue
        name, address = fields[1].strip(), fields[0]
        if has_dollar:
            value = _hex_or_zero(address[-4:])
        elif short_h:
            end = address.find("h")
            start = end - 4
            length = 4
            if start < 0:
                length += start
                start = 0
            value = _hex_or_zero(address[start : start + max(length, 0)])
        else:
            pieces = address.split(":")
            if len(pieces) < 2:
                continue
            value = _hex_or_zero(pieces[1][:4])
        result.append((name, value))
    return result


def parse_pasmo_lines(lines: Iterable[str]) -> Symbols:
    """pasmo symbol files: ``NAME EQU 0C000H``."""
    result = []
    for line in _clean(lines):
        fields = _WHITESPACE_SPLIT.split(line)
        if len(fields) == 3:
            result.append((fields[0], _hex_or_zero(fields[2][:5])))
    return result


def parse_vasm_lines(lines: Iterable[str]) -> Symbols:
    """vasm symbol listings: ``value name`` pairs after ``Symbols by value:``."""
    result = []
    active = False
    for line in _clean(lines):
        if line.startswith("Symbols by value:"):
            active = True
        if not active:
            continue
        fields = _WHITESPACE_SPLIT.split(line)
        if len(fields) == 2:
            result.append((fields[1], _hex_or_zero(fields[0])))
    return result


def parse_htc_lines(lines: Iterable[str]) -> Symbols:
    """HiTech C symbol files: ``name hexvalue psect``."""
    result = []
    for line in _clean(lines):
        fields = line.split(" ")
        if len(fields) != 3:
            continue
        value = parse_value("0x" + fields[1])
        if value is not None:
            result.append((fields[0], value))
    return result


def parse_noice_lines(lines: Iterable[str]) -> Symbols:
    """NoICE command files: ``def name value``."""
    result = []
    for line in _clean(lines):
        fields = line.split(" ")
        if len(fields) != 3 or fields[0].lower() != "def":
            continue
        value = parse_value(fields[2])
        if value is not None:
            result.append((fields[1], value))
    return result


def _column_width(line: str) -> int | None:
    """Width of the fixed columns of a link map symbol line, if it has any."""
    length = len(line)
    pos = 0
    for _ in range(2):
        match = _LINKMAP_COLUMN.search(line, pos)
        if match is None:
            return None
        width = match.end()
        if width > 0 and length % width == 0:
            ok = True
            for column in range(match.start() + width, length, width):
                nxt = _LINKMAP_COLUMN.search(line, column)
                if nxt is None or nxt.start() != column:
                    ok = False
                    break
            if ok:
                return width
        pos = width - 1
    return None


def parse_linkmap_lines(lines: Iterable[str]) -> Symbols:
    """HiTech link maps: the symbol table that follows the machine type header."""
    it = iter(_clean(lines))
    if not any(line.startswith("Machine type") for line in it):
        raise ValueError("link map has no 'Machine type' header")
    if not any("Symbol Table" in line for line in it):
        raise ValueError("link map has no symbol table")

    result = []
    for line in it:
        if not line:
            continue
        line += "  "
        width = _column_width(line)
        if width is None:
            continue
        for pos in range(0, len(line), width):
            match = _LINKMAP_ENTRY.fullmatch(line[pos : pos + width])
            if match is not None:
                result.append((match.group(1), int(match.group(2), 16)))
    return result
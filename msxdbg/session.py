"""Saving and loading the symbol table as part of an XML debugger session."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from msxdbg.symbolparsers import FileType
from msxdbg.symbols import Symbol, SymbolStatus, SymbolTable, SymbolType

log = logging.getLogger(__name__)

_FILE_TYPE_NAMES = {
    FileType.TNIASM0: "tniasm0",
    FileType.TNIASM1: "tniasm1",
    FileType.ASMSX: "asmsx",
    FileType.LINKMAP: "linkmap",
}
_FILE_TYPES_BY_NAME = {
    "tniasm1": FileType.TNIASM1,
    "asmsx": FileType.ASMSX,
    "linkmap": FileType.LINKMAP,
}
_TYPE_NAMES = {
    SymbolType.JUMPLABEL: "jump",
    SymbolType.VARIABLELABEL: "variable",
    SymbolType.VALUE: "value",
}
_TYPES_BY_NAME = {name: t for t, name in _TYPE_NAMES.items()}
_STATUS_NAMES = {SymbolStatus.HIDDEN: "hidden", SymbolStatus.LOST: "lost"}
_STATUSES_BY_NAME = {name: s for s, name in _STATUS_NAMES.items()}


def _to_int(text: str | None) -> int:
    try:
        return int((text or "").strip())
    except ValueError:
        return 0


def _text_element(parent: ET.Element, tag: str, text: str) -> None:
    ET.SubElement(parent, tag).text = text


def save_symbols(table: SymbolTable, parent: ET.Element) -> ET.Element:
    """Append SymbolFile and Symbol elements describing ``table`` to ``parent``."""
    file_ids = {id(record): index for index, record in enumerate(table.symbol_files)}
    for record in table.symbol_files:
        element = ET.SubElement(parent, "SymbolFile")
        type_name = _FILE_TYPE_NAMES.get(record.file_type)
        if type_name is not None:
            element.set("type", type_name)
        element.set("refreshTime", str(int(record.refresh_time.timestamp())))
        element.text = record.filename

    for symbol in table.symbols:
        element = ET.SubElement(parent, "Symbol")
        status_name = _STATUS_NAMES.get(symbol.status)
        if status_name is not None:
            element.set("status", status_name)
        _text_element(element, "type", _TYPE_NAMES[symbol.type])
        _text_element(element, "name", symbol.text)
        _text_element(element, "value", str(symbol.value))
        _text_element(element, "validSlots", str(symbol.valid_slots))
        _text_element(element, "validRegisters", str(symbol.valid_registers))
        if symbol.source is not None:
            _text_element(element, "source", str(file_ids.get(id(symbol.source), 0)))
    return parent


@dataclass
class _LoadState:
    symbol: Symbol | None = None


def _start_element(table: SymbolTable, element: ET.Element, state: _LoadState) -> bool:
    """Handle an element; True when its content was consumed."""
    tag = element.tag
    if tag == "SymbolFile":
        type_name = element.get("type", "").lower()
        refresh = max(_to_int(element.get("refreshTime")), 0)
        record = table.append_file(
            element.text or "", _FILE_TYPES_BY_NAME.get(type_name, FileType.TNIASM0)
        )
        record.refresh_time = datetime.fromtimestamp(refresh)
        return True
    if tag == "Symbol":
        state.symbol = table.add(Symbol("", 0))
        status = _STATUSES_BY_NAME.get(element.get("status", "").lower())
        if status is not None:
            state.symbol.status = status
        return False

    symbol = state.symbol
    if symbol is None:
        return False
    text = element.text or ""
    if tag == "type":
        symbol_type = _TYPES_BY_NAME.get(text.strip().lower())
        if symbol_type is not None:
            symbol.type = symbol_type
    elif tag == "name":
        symbol.text = text
    elif tag == "value":
        symbol.value = _to_int(text)
    elif tag == "validSlots":
        symbol.valid_slots = _to_int(text)
    elif tag == "validRegisters":
        symbol.valid_registers = _to_int(text)
    elif tag == "source":
        file_id = _to_int(text)
        if 0 <= file_id < len(table.symbol_files):
            symbol.source = table.symbol_files[file_id]
    else:
        return False
    return True


def _load(table: SymbolTable, element: ET.Element, state: _LoadState) -> bool:
    """Walk ``element`` in document order; True once a Symbols element has ended."""
    if not _start_element(table, element, state):
        for child in element:
            if _load(table, child, state):
                return True
    return element.tag == "Symbols"


def load_symbols(table: SymbolTable, element: ET.Element) -> None:
    """Add the files and symbols described under ``element`` to ``table``."""
    _load(table, element, _LoadState())


def read_session_file(table: SymbolTable, path: str | Path) -> bool:
    """Load the symbols of a session file; False when it cannot be opened."""
    try:
        tree = ET.parse(path)
    except OSError:
        return False
    except ET.ParseError as exc:
        log.warning("Error in session file %s: %s", path, exc)
        return True
    load_symbols(table, tree.getroot())
    return True
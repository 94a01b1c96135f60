"""Symbol manager actions: loading by filter, file destinations and manual labels."""

from __future__ import annotations

from collections.abc import Iterable

from msxdbg.symbolparsers import FileType, parse_value
from msxdbg.symbols import Symbol, SymbolTable

UNNAMED = "[unnamed]"
NEW_SYMBOL_NAME = "New symbol"

_FILTER_PREFIXES = (
    ("OpenMSX Debugger session", FileType.OMDS),
    ("tniASM 0", FileType.TNIASM0),
    ("tniASM 1", FileType.TNIASM1),
    ("asMSX", FileType.ASMSX),
    ("HiTech C symbol", FileType.HTC),
    ("HiTech C link", FileType.LINKMAP),
    ("NoICE", FileType.NOICE),
    ("pasmo", FileType.PASMO),
    ("vasm", FileType.VASM),
)


def file_type_for_filter(filter_name: str) -> FileType:
    """File type chosen by an open-file name filter; DETECT for any other filter."""
    for prefix, file_type in _FILTER_PREFIXES:
        if filter_name.startswith(prefix):
            return file_type
    return FileType.DETECT


def apply_file_destination(table: SymbolTable, file_index: int, slot_index: int) -> None:
    """Restrict the address symbols of a file to one slot, or all slots for -1."""
    if not -1 <= slot_index < 16:
        raise ValueError(f"slot index must be -1..15, got {slot_index}")
    record = table.symbol_files[file_index]
    mask = 0xFFFF if slot_index == -1 else 1 << slot_index
    for symbol in list(table.address_symbols(0)):
        if symbol.source is record:
            symbol.valid_slots = mask


def edit_symbol(symbol: Symbol, name: str, value_text: str) -> Symbol:
    """Set name and value from edited text; an unreadable value is left as it was."""
    text = name.strip()
    symbol.text = text or UNNAMED
    value = parse_value(value_text)
    if value is not None and 0 <= value <= 0xFFFF:
        symbol.value = value
    return symbol


def add_label(table: SymbolTable, name: str = NEW_SYMBOL_NAME) -> Symbol:
    """Add a manual symbol with value 0."""
    return table.add(Symbol(name, 0))


def remove_labels(table: SymbolTable, symbols: Iterable[Symbol]) -> list[Symbol]:
    """Remove the manually added symbols among ``symbols``; returns those removed."""
    removed = []
    for symbol in list(symbols):
        if symbol.source is None and table.remove(symbol) is not None:
            removed.append(symbol)
    return removed
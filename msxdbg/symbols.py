"""Symbol table: labels and values loaded from symbol files or added by hand."""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntFlag
from pathlib import Path

from msxdbg import symbolparsers as parsers
from msxdbg.memlayout import MemoryLayout
from msxdbg.symbolparsers import FileType


class SymbolStatus(Enum):
    """ACTIVE symbols are shown, HIDDEN ones are not, LOST ones vanished on reload."""

    ACTIVE = 0
    HIDDEN = 1
    LOST = 2


class SymbolType(Enum):
    """What a symbol's value stands for."""

    JUMPLABEL = 0
    VARIABLELABEL = 1
    VALUE = 2


class Register(IntFlag):
    """Registers whose value may be shown as a symbol."""

    REG_A = 1 << 0
    REG_B = 1 << 1
    REG_C = 1 << 2
    REG_D = 1 << 3
    REG_E = 1 << 4
    REG_H = 1 << 5
    REG_L = 1 << 6
    REG_BC = 1 << 7
    REG_DE = 1 << 8
    REG_HL = 1 << 9
    REG_IX = 1 << 10
    REG_IY = 1 << 11
    REG_IXL = 1 << 12
    REG_IXH = 1 << 13
    # IYL and IYH share one bit.
    REG_IYL = 1 << 15
    REG_IYH = 1 << 15
    REG_OFFSET = 1 << 16
    REG_I = 1 << 17
    REG_ALL8 = (
        REG_A | REG_B | REG_C | REG_D | REG_E | REG_H | REG_L
        | REG_IXL | REG_IXH | REG_IYL | REG_IYH | REG_OFFSET | REG_I
    )
    REG_ALL16 = REG_BC | REG_DE | REG_HL | REG_IX | REG_IY
    REG_ALL = REG_ALL8 | REG_ALL16


@dataclass(eq=False)
class SymbolFile:
    """A symbol file that symbols were loaded from."""

    filename: str
    file_type: FileType
    refresh_time: datetime = field(default_factory=datetime.now)


class Symbol:
    """A named value, optionally restricted to slots and registers."""

    def __init__(self, text: str, value: int, source: SymbolFile | None = None) -> None:
        self.text = text
        self._value = value
        self.source = source
        self._slots = 0xFFFF
        self._registers = int(Register.REG_ALL16 if value & 0xFF00 else Register.REG_ALL)
        self.status = SymbolStatus.ACTIVE
        self._type = SymbolType.JUMPLABEL
        self._table: SymbolTable | None = None

    def __repr__(self) -> str:
        return f"Symbol({self.text!r}, 0x{self._value:04X}, {self._type.name})"

    @property
    def value(self) -> int:
        return self._value

    @value.setter
    def value(self, value: int) -> None:
        if value == self._value:
            return
        self._value = value
        if self._table is not None:
            self._table._remap(self)

    @property
    def type(self) -> SymbolType:
        return self._type

    @type.setter
    def type(self, symbol_type: SymbolType) -> None:
        symbol_type = SymbolType(symbol_type)
        if symbol_type is self._type:
            return
        self._type = symbol_type
        if self._table is not None:
            self._table._remap(self)

    @property
    def valid_slots(self) -> int:
        """16-bit mask: bit 4*primary+secondary for each allowed slot."""
        return self._slots

    @valid_slots.setter
    def valid_slots(self, mask: int) -> None:
        self._slots = int(mask) & 0xFFFF

    @property
    def valid_registers(self) -> int:
        return self._registers

    @valid_registers.setter
    def valid_registers(self, mask: int) -> None:
        mask = int(mask)
        if self._value & 0xFF00:
            mask &= Register.REG_ALL16
        self._registers = mask

    def copy(self) -> Symbol:
        """A detached copy that belongs to no table."""
        other = Symbol(self.text, self._value, self.source)
        other._slots = self._slots
        other._registers = self._registers
        other.status = self.status
        other._type = self._type
        return other

    def is_slot_valid(self, layout: MemoryLayout | None = None) -> bool:
        """Whether the symbol applies to the slot currently visible at its address."""
        if layout is None:
            return True
        page = (self._value >> 14) & 3
        ps = layout.primary_slot[page] & 3
        ss = layout.secondary_slot[page] & 3 if layout.is_subslotted[page] else 0
        return bool(self._slots & (1 << (4 * ps + ss)))


_Parser = Callable[[Iterable[str]], list[tuple[str, int]]]

_PARSERS: dict[FileType, _Parser] = {
    FileType.TNIASM0: functools.partial(parsers.parse_equ_lines, equ=": equ "),
    FileType.TNIASM1: functools.partial(parsers.parse_equ_lines, equ=": %equ "),
    FileType.SJASM: functools.partial(parsers.parse_equ_lines, equ=": equ "),
    FileType.ASMSX: parsers.parse_asmsx_lines,
    FileType.HTC: parsers.parse_htc_lines,
    FileType.LINKMAP: parsers.parse_linkmap_lines,
    FileType.NOICE: parsers.parse_noice_lines,
    FileType.PASMO: parsers.parse_pasmo_lines,
    FileType.VASM: parsers.parse_vasm_lines,
}


def _discard(mapping: dict[int, list[Symbol]], keep: Callable[[Symbol], bool]) -> None:
    for key in list(mapping):
        remaining = [s for s in mapping[key] if keep(s)]
        if remaining:
            mapping[key] = remaining
        else:
            del mapping[key]


class SymbolTable:
    """All known symbols, indexed by address and by value."""

    def __init__(self, preserve_lost_symbols: bool = True) -> None:
        self.preserve_lost_symbols = preserve_lost_symbols
        self.symbol_files: list[SymbolFile] = []
        self._symbols: list[Symbol] = []
        # Lists hold the most recently mapped symbol first.
        self._address_map: dict[int, list[Symbol]] = {}
        self._value_map: dict[int, list[Symbol]] = {}
        self._cursor: list[Symbol] = []
        self._cursor_pos = 0

    @property
    def symbols(self) -> tuple[Symbol, ...]:
        """Symbols in the order they were added."""
        return tuple(self._symbols)

    def __iter__(self) -> Iterator[Symbol]:
        return iter(list(self._symbols))

    def __len__(self) -> int:
        return len(self._symbols)

    def add(self, symbol: Symbol) -> Symbol:
        """Take ownership of ``symbol`` and index it."""
        self._symbols.append(symbol)
        symbol._table = self
        self._map(symbol)
        return symbol

    def remove_at(self, index: int) -> Symbol:
        """Remove and return the symbol at ``index``."""
        symbol = self._symbols.pop(index)
        self._unmap(symbol)
        symbol._table = None
        return symbol

    def remove(self, symbol: Symbol) -> Symbol | None:
        """Remove ``symbol``; returns None when it is not in the table."""
        for index, candidate in enumerate(self._symbols):
            if candidate is symbol:
                return self.remove_at(index)
        return None

    def clear(self) -> None:
        self._address_map.clear()
        self._value_map.clear()
        for symbol in self._symbols:
            symbol._table = None
        self._symbols.clear()

    def _map(self, symbol: Symbol) -> None:
        if symbol.type is not SymbolType.VALUE:
            self._address_map.setdefault(symbol.value, []).insert(0, symbol)
        if symbol.type is not SymbolType.JUMPLABEL:
            self._value_map.setdefault(symbol.value, []).insert(0, symbol)

    def _unmap(self, symbol: Symbol) -> None:
        _discard(self._address_map, lambda s: s is not symbol)
        _discard(self._value_map, lambda s: s is not symbol)

    def _remap(self, symbol: Symbol) -> None:
        self._unmap(symbol)
        self._map(symbol)

    def _ordered_address_symbols(self) -> Iterator[Symbol]:
        for key in sorted(self._address_map):
            yield from self._address_map[key]

    def address_symbols(
        self, addr: int = 0, layout: MemoryLayout | None = None
    ) -> Iterator[Symbol]:
        """Address symbols from ``addr`` upwards that are valid in ``layout``."""
        for symbol in self._ordered_address_symbols():
            if symbol.value >= addr and symbol.is_slot_valid(layout):
                yield symbol

    def find_first_address_symbol(
        self, addr: int = 0, layout: MemoryLayout | None = None
    ) -> Symbol | None:
        """First valid address symbol at or above ``addr``; starts a scan."""
        self._cursor = list(self._ordered_address_symbols())
        for pos, symbol in enumerate(self._cursor):
            if symbol.value >= addr and symbol.is_slot_valid(layout):
                self._cursor_pos = pos
                return symbol
        self._cursor_pos = len(self._cursor)
        return None

    def find_next_address_symbol(self, layout: MemoryLayout | None = None) -> Symbol | None:
        """Next valid address symbol of the scan started by find_first_address_symbol."""
        start = self._cursor_pos + 1
        for pos, symbol in enumerate(self._cursor[start:], start=start):
            if symbol.is_slot_valid(layout):
                self._cursor_pos = pos
                return symbol
        self._cursor_pos = len(self._cursor)
        return None

    def get_value_symbol(
        self, value: int, register: int, layout: MemoryLayout | None = None
    ) -> Symbol | None:
        """Symbol standing for ``value`` when held in ``register``."""
        for symbol in self._value_map.get(value, ()):
            if symbol.valid_registers & int(register) and symbol.is_slot_valid(layout):
                return symbol
        return None

    def get_address_symbol(
        self, addr: int, layout: MemoryLayout | None = None
    ) -> Symbol | None:
        """Label at exactly ``addr``."""
        for symbol in self._address_map.get(addr, ()):
            if symbol.is_slot_valid(layout):
                return symbol
        return None

    def find_label(self, label: str, case_sensitive: bool = False) -> Symbol | None:
        """Address symbol named ``label``, in address order."""
        lowered = label.lower()
        for symbol in self._ordered_address_symbols():
            if symbol.text == label:
                return symbol
            if not case_sensitive and symbol.text.lower() == lowered:
                return symbol
        return None

    def label_list(
        self, include_vars: bool = False, layout: MemoryLayout | None = None
    ) -> list[str]:
        """Names of jump labels (and variables if asked), in address order."""
        wanted = {SymbolType.JUMPLABEL}
        if include_vars:
            wanted.add(SymbolType.VARIABLELABEL)
        return [
            s.text
            for s in self._ordered_address_symbols()
            if s.type in wanted and s.is_slot_valid(layout)
        ]

    def append_file(self, filename: str | Path, file_type: FileType) -> SymbolFile:
        """Register a loaded symbol file."""
        record = SymbolFile(str(filename), FileType(file_type))
        self.symbol_files.append(record)
        return record

    def read_file(self, filename: str | Path, file_type: FileType = FileType.DETECT) -> bool:
        """Load symbols from a file; False when it cannot be read."""
        filename = str(filename)
        file_type = FileType(file_type)
        if file_type is FileType.DETECT:
            file_type = parsers.detect_file_type(filename)
        if file_type is FileType.OMDS:
            from msxdbg.session import read_session_file

            return read_session_file(self, filename)
        parser = _PARSERS.get(file_type)
        if parser is None:
            return False
        try:
            with open(filename, encoding="utf-8", errors="replace") as fh:
                lines = fh.readlines()
        except OSError:
            return False
        record = self.append_file(filename, file_type)
        try:
            entries = parser(lines)
        except ValueError:
            return False
        for name, value in entries:
            self.add(Symbol(name, value, record))
        return True

    def reload_files(self) -> None:
        """Reload symbol files changed on disk, keeping per-symbol settings."""
        for record in list(self.symbol_files):
            try:
                modified = datetime.fromtimestamp(Path(record.filename).stat().st_mtime)
            except OSError:
                continue
            if modified <= record.refresh_time:
                continue

            saved = {s.text: s.copy() for s in self._symbols if s.source is record}
            self.unload_file(record.filename)
            self.read_file(record.filename, record.file_type)
            if not self.symbol_files or self.symbol_files[-1].filename != record.filename:
                continue
            new_file = self.symbol_files[-1]

            for symbol in list(self._symbols):
                if symbol.source is not new_file:
                    continue
                old = saved.pop(symbol.text, None)
                if old is None:
                    continue
                symbol.valid_slots = old.valid_slots
                symbol.valid_registers = old.valid_registers
                symbol.type = old.type
                symbol.status = (
                    SymbolStatus.ACTIVE if old.status is SymbolStatus.LOST else old.status
                )

            if self.preserve_lost_symbols:
                for _, old in sorted(saved.items()):
                    lost = self.add(old)
                    lost.status = SymbolStatus.LOST
                    lost.source = new_file

    def unload_file(self, filename: str | Path, keep_symbols: bool = False) -> None:
        """Forget a symbol file, deleting its symbols or keeping them as manual ones."""
        filename = str(filename)
        record = next((r for r in self.symbol_files if r.filename == filename), None)
        if record is None:
            return
        if keep_symbols:
            for symbol in self._symbols:
                if symbol.source is record:
                    symbol.source = None
        else:
            _discard(self._address_map, lambda s: s.source is not record)
            _discard(self._value_map, lambda s: s.source is not record)
            removed = [s for s in self._symbols if s.source is record]
            self._symbols = [s for s in self._symbols if s.source is not record]
            for symbol in removed:
                symbol._table = None
        self.symbol_files.remove(record)
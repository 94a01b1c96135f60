"""Combined slot, register and type state of a selection of symbols."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from msxdbg.symbols import Symbol, SymbolType

SLOT_COUNT = 16
REGISTER_COUNT = 18


class CheckState(Enum):
    """State of a check box that stands for several symbols at once."""

    UNCHECKED = 0
    PARTIALLY_CHECKED = 1
    CHECKED = 2


@dataclass(frozen=True)
class SelectionSummary:
    """What a selection of symbols has in common."""

    removable: bool
    any_eight_bit: bool
    slot_states: tuple[CheckState, ...]
    register_states: tuple[CheckState, ...]
    symbol_type: SymbolType | None


def _states(reference: int, differing: int, count: int) -> tuple[CheckState, ...]:
    states = []
    for bit in range(count):
        if differing >> bit & 1:
            states.append(CheckState.PARTIALLY_CHECKED)
        elif reference >> bit & 1:
            states.append(CheckState.CHECKED)
        else:
            states.append(CheckState.UNCHECKED)
    return tuple(states)


def summarize_selection(symbols: Sequence[Symbol]) -> SelectionSummary | None:
    """Summarize the selected symbols; None when nothing is selected."""
    if not symbols:
        return None
    first = symbols[0]
    slot_mask = first.valid_slots
    reg_mask = first.valid_registers
    symbol_type: SymbolType | None = first.type
    slot_diff = 0
    reg_diff = 0
    for symbol in symbols[1:]:
        slot_diff |= slot_mask ^ symbol.valid_slots
        reg_diff |= reg_mask ^ symbol.valid_registers
        if symbol.type is not first.type:
            symbol_type = None
    return SelectionSummary(
        removable=all(s.source is None for s in symbols),
        any_eight_bit=any(s.value & 0xFF00 == 0 for s in symbols),
        slot_states=_states(slot_mask, slot_diff, SLOT_COUNT),
        register_states=_states(reg_mask, reg_diff, REGISTER_COUNT),
        symbol_type=symbol_type,
    )


def set_slot(symbols: Iterable[Symbol], slot: int, checked: bool) -> None:
    """Allow or forbid slot number ``slot`` (4*primary+secondary) for each symbol."""
    if not 0 <= slot < SLOT_COUNT:
        raise ValueError(f"slot must be 0..{SLOT_COUNT - 1}, got {slot}")
    bit = 1 << slot
    for symbol in symbols:
        if checked:
            symbol.valid_slots = symbol.valid_slots | bit
        else:
            symbol.valid_slots = symbol.valid_slots & ~bit


def set_register(symbols: Iterable[Symbol], index: int, checked: bool) -> None:
    """Allow or forbid register bit ``index`` for each symbol."""
    if not 0 <= index < REGISTER_COUNT:
        raise ValueError(f"register index must be 0..{REGISTER_COUNT - 1}, got {index}")
    bit = 1 << index
    for symbol in symbols:
        if checked:
            symbol.valid_registers = symbol.valid_registers | bit
        else:
            symbol.valid_registers = symbol.valid_registers & ~bit


def set_type(symbols: Iterable[Symbol], symbol_type: SymbolType) -> None:
    """Give every symbol the same type."""
    symbol_type = SymbolType(symbol_type)
    for symbol in symbols:
        symbol.type = symbol_type
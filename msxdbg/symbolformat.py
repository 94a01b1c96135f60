"""Text shown for a symbol's slots, registers and type in the symbol manager."""

from __future__ import annotations

from msxdbg.symbols import Register, SymbolType

_ALL_REGISTERS_MASK = 0x3FFFF
_ALL_SLOTS_MASK = 0xFFFF

_REGISTER_NAMES = (
    "A", "B", "C", "D", "E", "H", "L", "BC", "DE", "HL",
    "IX", "IY", "IXL", "IXH", "IYL", "IYH", "Offset", "I",
)

_TYPE_LABELS = {
    SymbolType.JUMPLABEL: "Jump label",
    SymbolType.VARIABLELABEL: "Variable label",
    SymbolType.VALUE: "Value",
}

_DESTINATION_LABELS = ("All",) + tuple(f"{ps}-{ss}" for ps in range(4) for ss in range(4))


def slot_text(mask: int) -> str:
    """Describe a 16-bit valid-slot mask, e.g. ``0-*, 2-1/3``."""
    if mask == _ALL_SLOTS_MASK:
        return "All"
    if mask == 0:
        return "None"
    parts = []
    for ps in range(4):
        subslots = (mask >> (4 * ps)) & 15
        if subslots == 15:
            parts.append(f"{ps}-*")
        elif subslots:
            listed = "/".join(str(ss) for ss in range(4) if subslots & (1 << ss))
            parts.append(f"{ps}-{listed}")
    return ", ".join(parts)


def register_text(mask: int) -> str:
    """Describe a valid-register mask, e.g. ``All 8 bit, BC``."""
    if mask == _ALL_REGISTERS_MASK:
        return "All"
    if mask == 0:
        return "None"
    all8 = int(Register.REG_ALL8)
    all16 = int(Register.REG_ALL16)
    parts = []
    if mask & all8 == all8:
        parts.append("All 8 bit")
        mask ^= all8
    elif mask & all16 == all16:
        parts.append("All 16 bit")
        mask ^= all16
    parts.extend(name for bit, name in enumerate(_REGISTER_NAMES) if mask & (1 << bit))
    return ", ".join(parts)


def type_label(symbol_type: SymbolType) -> str:
    """Label of a symbol type."""
    return _TYPE_LABELS[SymbolType(symbol_type)]


def destination_labels() -> list[str]:
    """Choices for the slot a symbol file applies to: ``All`` then each subslot."""
    return list(_DESTINATION_LABELS)
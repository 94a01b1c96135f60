import pytest

from msxdbg.symbols import Register, Symbol, SymbolFile, SymbolType
from msxdbg.symbolparsers import FileType
from msxdbg.symbolselect import (
    CheckState,
    set_register,
    set_slot,
    set_type,
    summarize_selection,
)


def test_empty_selection_gives_none():
    assert summarize_selection([]) is None


def test_single_default_symbol():
    s = Symbol("a", 0x10)
    summary = summarize_selection([s])
    assert summary.removable is True
    assert summary.any_eight_bit is True
    assert all(state is CheckState.CHECKED for state in summary.slot_states)
    assert len(summary.slot_states) == 16
    assert len(summary.register_states) == 18
    for bit, state in enumerate(summary.register_states):
        expected = CheckState.CHECKED if int(Register.REG_ALL) >> bit & 1 else CheckState.UNCHECKED
        assert state is expected
    assert summary.symbol_type is SymbolType.JUMPLABEL


def test_differing_slots_are_partial():
    a = Symbol("a", 0x4000)
    b = Symbol("b", 0x4000)
    b.valid_slots = 0xFFFF & ~(1 << 3)
    summary = summarize_selection([a, b])
    assert summary.slot_states[3] is CheckState.PARTIALLY_CHECKED
    assert summary.slot_states[2] is CheckState.CHECKED
    assert summary.any_eight_bit is False


def test_mixed_types_and_sources():
    a = Symbol("a", 1)
    b = Symbol("b", 2, SymbolFile("x.sym", FileType.TNIASM0))
    b.type = SymbolType.VALUE
    summary = summarize_selection([a, b])
    assert summary.symbol_type is None
    assert summary.removable is False


def test_set_slot_set_and_clear():
    syms = [Symbol("a", 1), Symbol("b", 2)]
    set_slot(syms, 5, False)
    assert all(s.valid_slots == 0xFFFF & ~(1 << 5) for s in syms)
    set_slot(syms, 5, True)
    assert all(s.valid_slots == 0xFFFF for s in syms)


def test_set_slot_out_of_range():
    with pytest.raises(ValueError):
        set_slot([Symbol("a", 1)], 16, True)


def test_set_register_clear_and_set():
    s = Symbol("a", 1)
    set_register([s], 0, False)
    assert s.valid_registers & 1 == 0
    set_register([s], 0, True)
    assert s.valid_registers & 1 == 1


def test_set_register_masked_for_sixteen_bit_value():
    s = Symbol("a", 0x1234)
    set_register([s], 0, True)
    assert s.valid_registers & 1 == 0
    assert s.valid_registers == int(Register.REG_ALL16)


def test_set_register_out_of_range():
    with pytest.raises(ValueError):
        set_register([Symbol("a", 1)], 18, True)


def test_set_type_applies_to_all():
    syms = [Symbol("a", 1), Symbol("b", 2)]
    set_type(syms, SymbolType.VARIABLELABEL)
    assert [s.type for s in syms] == [SymbolType.VARIABLELABEL] * 2
    assert summarize_selection(syms).symbol_type is SymbolType.VARIABLELABEL
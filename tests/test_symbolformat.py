import pytest

from msxdbg.symbolformat import destination_labels, register_text, slot_text, type_label
from msxdbg.symbols import Register, Symbol, SymbolType


def test_slot_text_all_and_none():
    assert slot_text(0xFFFF) == "All"
    assert slot_text(0) == "None"


def test_single_slot_matches_destination_labels():
    labels = destination_labels()
    for index in range(16):
        assert slot_text(1 << index) == labels[index + 1]


def test_whole_primary_slot_uses_star():
    assert slot_text(0x000F) == "0-*"
    assert slot_text(0x00F0).endswith("-*")


def test_several_slots_are_comma_separated():
    text = slot_text((1 << 0) | (1 << 4) | (1 << 8))
    labels = destination_labels()
    assert text == ", ".join([labels[1], labels[5], labels[9]])


def test_subslots_joined_with_slash():
    assert slot_text(0x0005) == "0-0/2"


def test_register_text_all_and_none():
    assert register_text(0x3FFFF) == "All"
    assert register_text(0) == "None"


def test_register_text_all16():
    assert register_text(int(Register.REG_ALL16)) == "All 16 bit"


def test_register_text_all8():
    assert register_text(int(Register.REG_ALL8)) == "All 8 bit"


def test_register_text_of_default_8bit_symbol():
    symbol = Symbol("x", 0x12)
    assert register_text(symbol.valid_registers) == "All 8 bit, BC, DE, HL, IX, IY"


def test_register_text_single_registers():
    assert register_text(int(Register.REG_A)) == "A"
    assert register_text(int(Register.REG_I)) == "I"
    assert register_text(int(Register.REG_A | Register.REG_HL)) == "A, HL"


@pytest.mark.parametrize(
    "symbol_type, label",
    [
        (SymbolType.JUMPLABEL, "Jump label"),
        (SymbolType.VARIABLELABEL, "Variable label"),
        (SymbolType.VALUE, "Value"),
    ],
)
def test_type_label(symbol_type, label):
    assert type_label(symbol_type) == label


def test_destination_labels():
    labels = destination_labels()
    assert len(labels) == 17
    assert labels[0] == "All"
    assert labels[1] == "0-0"
    assert labels[-1] == "3-3"
    labels.append("extra")
    assert len(destination_labels()) == 17
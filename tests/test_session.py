import xml.etree.ElementTree as ET
from datetime import datetime

from msxdbg.session import load_symbols, read_session_file, save_symbols
from msxdbg.symbolparsers import FileType
from msxdbg.symbols import Symbol, SymbolStatus, SymbolTable, SymbolType


def _populated():
    table = SymbolTable()
    record = table.append_file("prog.sym", FileType.TNIASM1)
    record.refresh_time = datetime.fromtimestamp(1_000_000_000)
    table.add(Symbol("START", 0x4000, record))
    var = table.add(Symbol("COUNTER", 0xC000))
    var.type = SymbolType.VARIABLELABEL
    var.status = SymbolStatus.HIDDEN
    var.valid_slots = 0x00F0
    return table


def _describe(table):
    return [
        (
            s.text,
            s.value,
            s.type,
            s.status,
            s.valid_slots,
            s.valid_registers,
            s.source.filename if s.source else None,
        )
        for s in table.symbols
    ]


def test_save_layout():
    root = ET.Element("Symbols")
    save_symbols(_populated(), root)
    files = root.findall("SymbolFile")
    assert files[0].get("type") == "tniasm1"
    assert files[0].get("refreshTime") == "1000000000"
    assert files[0].text == "prog.sym"
    syms = root.findall("Symbol")
    assert syms[0].findtext("name") == "START"
    assert syms[0].findtext("type") == "jump"
    assert syms[0].findtext("source") == "0"
    assert syms[1].get("status") == "hidden"
    assert syms[1].findtext("type") == "variable"
    assert syms[1].find("source") is None


def test_round_trip():
    original = _populated()
    root = save_symbols(original, ET.Element("Symbols"))
    restored = SymbolTable()
    load_symbols(restored, ET.fromstring(ET.tostring(root)))
    assert _describe(restored) == _describe(original)
    assert restored.symbol_files[0].refresh_time == original.symbol_files[0].refresh_time
    assert restored.symbol_files[0].file_type == FileType.TNIASM1
    assert restored.find_label("START").source is restored.symbol_files[0]


def test_loading_stops_after_symbols_element():
    xml = (
        "<Session><Symbols><Symbol><name>A</name><value>16</value></Symbol>"
        "</Symbols><Other><name>B</name></Other></Session>"
    )
    table = SymbolTable()
    load_symbols(table, ET.fromstring(xml))
    assert len(table) == 1
    assert table.find_label("A").value == 16
    assert table.find_label("B") is None


def test_default_file_type_and_bad_source():
    xml = (
        "<Symbols><SymbolFile refreshTime='0'>x.sym</SymbolFile>"
        "<Symbol><name>A</name><source>5</source></Symbol></Symbols>"
    )
    table = SymbolTable()
    load_symbols(table, ET.fromstring(xml))
    assert table.symbol_files[0].file_type == FileType.TNIASM0
    assert table.symbol_files[0].filename == "x.sym"
    assert table.find_label("A").source is None


def test_read_file_detects_session(tmp_path):
    root = save_symbols(_populated(), ET.Element("Symbols"))
    path = tmp_path / "debug.omds"
    path.write_bytes(ET.tostring(root))
    table = SymbolTable()
    assert table.read_file(path)
    assert table.find_label("START").value == 0x4000
    assert [f.filename for f in table.symbol_files] == ["prog.sym"]


def test_read_missing_session(tmp_path):
    table = SymbolTable()
    assert not read_session_file(table, tmp_path / "missing.omds")
    assert len(table) == 0
# msxdbg

Building blocks for a debugger that drives an MSX emulator through its XML
control protocol. It is a library with no dependencies outside the standard
library.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

- `msxdbg.connection` holds `Connection`. You give it a transport: any
  object with a `write(bytes)` method, and optionally `close()`. The
  connection writes the opening control tag to the transport. It queues and
  sends commands with `send_command`. You pass the bytes you receive to
  `feed`. Each `<reply>` goes to the oldest pending command, as `reply_ok`
  or `reply_nok`. Log and update messages go to the `on_log` and
  `on_update` callbacks. `close()` cancels every pending command and calls
  `on_disconnected`. The command classes are `SimpleCommand`,
  `CallbackCommand`, `ReadDebugBlockCommand`, `WriteDebugBlockCommand` and
  `HexRequest`. `debug_read_command` and `debug_write_command` build the
  command strings for reading and writing debuggables.
- `msxdbg.symbols` provides `Symbol`, `SymbolFile` and `SymbolTable`. A
  table loads symbol files (`read_file`) and reloads the ones that changed
  on disk (`reload_files`). When it reloads, it keeps each symbol's slot,
  register and type settings. If `preserve_lost_symbols` is set, symbols
  that have disappeared from the file stay in the table as `LOST`.
  `unload_file` forgets a file. Lookups go by address
  (`get_address_symbol`, `address_symbols`, `find_first_address_symbol` /
  `find_next_address_symbol`), by value and register (`get_value_symbol`)
  or by name (`find_label`, `label_list`). These lookups can be limited to
  the slots that a `MemoryLayout` shows.
- `msxdbg.symbolparsers` holds `parse_value`, `detect_file_type` and the
  line parsers for each format. The formats are tniASM 0.x and 1.x, sjasm,
  asMSX, HiTech C symbol files and link maps, NoICE, pasmo and vasm.
- `msxdbg.session` writes a symbol table as `SymbolFile` and `Symbol` XML
  elements (`save_symbols`) and reads them back (`load_symbols`,
  `read_session_file`).
- `msxdbg.memlayout` provides `MemoryLayout`, the slot, mapper and ROM
  block layout decoded from a `debug_memmapper` reply. It also provides
  `page_rows`, which gives the display text for each of the four pages.
- `msxdbg.stack` provides `StackView`. It follows the stack pointer,
  handles scrolling and sends `StackRequest` memory reads through a
  function you supply.
- `msxdbg.settings` provides `Settings`. It keeps debugger preferences in a
  JSON file: behaviour switches, fonts with where each font comes from,
  and font colours.
- `msxdbg.symbolformat`, `msxdbg.symbolselect` and `msxdbg.symboledit`
  hold the logic behind a symbol manager:
  - formatting slot and register masks;
  - summarising and changing the slots, registers and type of a selection
    of symbols;
  - choosing a file type from a name filter;
  - adding, editing and removing manual labels.

## Example

```python
from msxdbg.symbols import SymbolTable

table = SymbolTable(preserve_lost_symbols=True)
table.read_file("game.sym")
for label in table.label_list(include_vars=True):
    print(label)
```

```python
from msxdbg.connection import CallbackCommand, Connection

conn = Connection(transport)          # e.g. a socket wrapper with write()
conn.send_command(CallbackCommand("machine_info type", print))
conn.feed(received_bytes)             # replies are dispatched as they arrive
```

## What it does not do

There is no user interface and no command to run. The package does not open
a connection to the emulator itself. You supply the transport and feed it
the received data. It also does not decode VDP sprite or palette data.
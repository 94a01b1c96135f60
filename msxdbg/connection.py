"""Command queue and XML control-protocol handling for an openMSX connection."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections import deque
from collections.abc import Callable
from typing import Protocol

log = logging.getLogger(__name__)

OPEN_TAG = "<openmsx-control>\n"
CLOSE_TAG = "</openmsx-control>\n"


class Transport(Protocol):
    """Anything the connection can write encoded bytes to."""

    def write(self, data: bytes) -> object: ...


class CommandBase:
    """A command sent to openMSX, notified once its reply arrives."""

    def __init__(self, command: str) -> None:
        self.command = command

    def reply_ok(self, message: str) -> None:
        """Handle a successful reply."""

    def reply_nok(self, message: str) -> None:
        """Handle an error reply."""
        self.cancel()

    def cancel(self) -> None:
        """Handle the command being dropped without a reply."""


class SimpleCommand(CommandBase):
    """A command whose reply is ignored."""


class CallbackCommand(CommandBase):
    """A command that hands its reply to callbacks."""

    def __init__(
        self,
        command: str,
        on_ok: Callable[[str], object],
        on_error: Callable[[str], object] | None = None,
    ) -> None:
        super().__init__(command)
        self.on_ok = on_ok
        self.on_error = on_error

    def reply_ok(self, message: str) -> None:
        self.on_ok(message)

    def reply_nok(self, message: str) -> None:
        if self.on_error is not None:
            self.on_error(message)
        self.cancel()


def debug_read_command(debuggable: str, offset: int, size: int) -> str:
    """Command that reads a block of a debuggable as a hex string."""
    return f"debug_bin2hex [ debug read_block {debuggable} {offset} {size} ]"


def debug_write_command(debuggable: str, offset: int, data: bytes) -> str:
    """Command that writes ``data`` into a debuggable starting at ``offset``."""
    return (
        f'debug write_block {debuggable} {offset} [ debug_hex2bin "'
        f'{bytes(data).hex().upper()}" ]'
    )


class ReadDebugBlockCommand(SimpleCommand):
    """Reads ``size`` bytes of a debuggable, optionally into a target buffer."""

    def __init__(
        self,
        debuggable: str,
        offset: int,
        size: int,
        target: bytearray | None = None,
        target_offset: int = 0,
    ) -> None:
        super().__init__(debug_read_command(debuggable, offset, size))
        self.size = size
        self.target = target
        self.target_offset = target_offset
        self.data = b""

    def copy_data(self, message: str) -> bytes:
        """Decode the hex reply and store it in the target buffer."""
        if len(message) != 2 * self.size:
            raise ValueError(
                f"expected {2 * self.size} hex digits, got {len(message)}"
            )
        self.data = bytes.fromhex(message)
        if self.target is not None:
            start = self.target_offset
            self.target[start : start + self.size] = self.data
        return self.data


class WriteDebugBlockCommand(SimpleCommand):
    """Writes ``size`` bytes of ``source`` (from ``offset``) into a debuggable."""

    def __init__(self, debuggable: str, offset: int, size: int, source: bytes) -> None:
        super().__init__(
            debug_write_command(debuggable, offset, source[offset : offset + size])
        )


class HexRequest(ReadDebugBlockCommand):
    """Block read that notifies callbacks on arrival or cancellation."""

    def __init__(
        self,
        debuggable: str,
        offset: int,
        size: int,
        target: bytearray | None = None,
        *,
        on_received: Callable[[], object] | None = None,
        on_canceled: Callable[[], object] | None = None,
        target_offset: int = 0,
    ) -> None:
        super().__init__(debuggable, offset, size, target, target_offset)
        self.offset = offset
        self.on_received = on_received
        self.on_canceled = on_canceled

    def reply_ok(self, message: str) -> None:
        self.copy_data(message)
        if self.on_received is not None:
            self.on_received()

    def cancel(self) -> None:
        if self.on_canceled is not None:
            self.on_canceled()


class Connection:
    """Sends commands over a transport and dispatches the XML replies."""

    def __init__(self, transport: Transport) -> None:
        self.transport = transport
        self.connected = True
        self.on_disconnected: Callable[[], object] | None = None
        self.on_log: Callable[[str, str], object] | None = None
        self.on_update: Callable[[str, str, str], object] | None = None
        self._commands: deque[CommandBase] = deque()
        self._parser = ET.XMLPullParser(events=("start", "end"))
        self._depth = 0
        self._root: ET.Element | None = None
        transport.write(OPEN_TAG.encode())

    @property
    def pending(self) -> int:
        """Number of commands still waiting for a reply."""
        return len(self._commands)

    def send_command(self, command: CommandBase) -> None:
        """Queue and transmit a command, or cancel it when disconnected."""
        if not self.connected:
            command.cancel()
            return
        self._commands.append(command)
        self.transport.write(f"<command>{command.command}</command>".encode("utf-8"))

    def feed(self, data: bytes | str) -> None:
        """Process data received from openMSX."""
        if not self.connected:
            return
        try:
            self._parser.feed(data)
            for event, elem in self._parser.read_events():
                if event == "start":
                    if self._depth == 0:
                        self._root = elem
                    self._depth += 1
                    continue
                self._depth -= 1
                self._end_element(elem)
                if self._depth == 1 and self._root is not None:
                    self._root.remove(elem)
        except ET.ParseError as exc:
            log.warning("Fatal error in openMSX output: %s", exc)
            self.close()

    def _end_element(self, elem: ET.Element) -> None:
        tag = elem.tag
        text = elem.text or ""
        if tag == "openmsx-output":
            return
        if tag == "reply":
            if not self.connected:
                return
            if not self._commands:
                log.warning("Reply received without a pending command")
                return
            command = self._commands.popleft()
            if elem.get("result") == "ok":
                command.reply_ok(text)
            else:
                command.reply_nok(text)
        elif tag == "log":
            if self.on_log is not None:
                self.on_log(elem.get("level", ""), text)
        elif tag == "update":
            if self.on_update is not None:
                self.on_update(elem.get("type", ""), elem.get("name", ""), text)
        else:
            log.warning("Unknown XML tag: %s", tag)

    def close(self) -> None:
        """Close the session, cancelling every pending command."""
        if not self.connected:
            return
        self.connected = False
        self.transport.write(CLOSE_TAG.encode())
        closer = getattr(self.transport, "close", None)
        if callable(closer):
            closer()
        while self._commands:
            self._commands.popleft().cancel()
        if self.on_disconnected is not None:
            self.on_disconnected()
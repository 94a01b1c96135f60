"""Model of the stack view: scrolling and fetching 16-bit words near SP."""

from __future__ import annotations

import math
from collections.abc import Callable
from typing import NamedTuple

from msxdbg.connection import CommandBase, ReadDebugBlockCommand

WHEEL_STEP = 40


class StackRequest(ReadDebugBlockCommand):
    """Memory read that reports back to the stack view that issued it."""

    def __init__(self, offset: int, size: int, memory: bytearray, view: StackView) -> None:
        super().__init__("memory", offset, size, memory, target_offset=offset)
        self.offset = offset
        self.view = view

    def reply_ok(self, message: str) -> None:
        self.copy_data(message)
        self.view._data_transferred(self)

    def cancel(self) -> None:
        self.view._transfer_cancelled(self)


class ScrollRange(NamedTuple):
    minimum: int
    maximum: int
    single_step: int
    page_step: int


class StackView:
    """Scrollable view of the stack, fetching memory through ``send``."""

    def __init__(self, send: Callable[[CommandBase], object], visible_lines: float) -> None:
        self.send = send
        self.visible_lines = visible_lines
        self.memory: bytearray | None = None
        self.stack_pointer = 0
        self.top_address = 0
        self.waiting_for_data = False
        self._wheel_remainder = 0
        self._minimum = 0
        self._maximum = 0
        self._single_step = 1
        self._page_step = 1
        self._value = 0

    @property
    def memory_length(self) -> int:
        return len(self.memory) if self.memory is not None else 0

    @property
    def scroll_value(self) -> int:
        return self._value

    def set_data(self, memory: bytearray) -> None:
        """Attach the memory buffer the view reads from and fills."""
        self.memory = memory
        self._update_scroll_range()

    def scroll_range(self) -> ScrollRange:
        """Current scroll bar range and step sizes."""
        return ScrollRange(self._minimum, self._maximum, self._single_step, self._page_step)

    def _update_scroll_range(self) -> None:
        visible = int(self.visible_lines)
        # Setting the minimum may raise the maximum; setting the maximum may lower the minimum.
        self._set_range(self.stack_pointer, max(self._maximum, self.stack_pointer))
        lines = int((self.memory_length - self.stack_pointer) / 2)
        maximum = self.stack_pointer + 2 * (lines - visible)
        self._set_range(min(self._minimum, maximum), maximum)
        self._single_step = 2
        self._page_step = 2 * visible

    def _set_range(self, minimum: int, maximum: int) -> None:
        self._minimum = minimum
        self._maximum = maximum
        self._set_value(self._value)

    def _set_value(self, value: int) -> None:
        value = min(max(value, self._minimum), self._maximum)
        if value != self._value:
            self._value = value
            self.set_location(value)

    def set_location(self, addr: int) -> None:
        """Request the memory shown when the top of the view is at ``addr``."""
        if self.waiting_for_data:
            return
        if self.memory is None:
            raise RuntimeError("no memory buffer attached")
        start = (addr & ~1) | (self.stack_pointer & 1)
        size = 2 * math.ceil(self.visible_lines)
        if start + size >= self.memory_length:
            size = self.memory_length - start
        self.send(StackRequest(start, size, self.memory, self))
        self.waiting_for_data = True

    def set_stack_pointer(self, addr: int) -> None:
        """Move the view to a new stack pointer."""
        self.stack_pointer = addr
        self._update_scroll_range()
        self._set_value(addr)
        self.set_location(addr)

    def scroll(self, wheel_delta: int) -> None:
        """Scroll by a mouse wheel angle delta."""
        self._wheel_remainder += wheel_delta
        delta = int(self._wheel_remainder / WHEEL_STEP)
        self._wheel_remainder -= delta * WHEEL_STEP
        if delta:
            self._set_value(self._value - delta)

    def lines(self) -> list[tuple[int, int]]:
        """(address, 16-bit little-endian word) pairs currently displayed."""
        if self.memory is None:
            return []
        result = []
        address = self.top_address
        for _ in range(math.ceil(self.visible_lines)):
            if address + 1 >= self.memory_length:
                break
            result.append((address, self.memory[address + 1] << 8 | self.memory[address]))
            address += 2
            if address >= self.memory_length - 1:
                break
        return result

    def _data_transferred(self, request: StackRequest) -> None:
        self.top_address = request.offset
        self.waiting_for_data = False
        if (self.top_address & ~1) != (self._value & ~1):
            self.set_location(self._value)

    def _transfer_cancelled(self, request: StackRequest) -> None:
        self.waiting_for_data = False
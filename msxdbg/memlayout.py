"""Slot, subslot, mapper and ROM block layout of the four memory pages."""

from __future__ import annotations

from dataclasses import dataclass, field

PAGES = 4
ROM_BLOCKS = 8


def _to_int(text: str, low: int = -(2**31), high: int = 2**31 - 1) -> int:
    """Decimal integer in ``text``, or 0 when it does not parse or is out of range."""
    text = text.strip()
    try:
        value = int(text, 10)
    except ValueError:
        return 0
    if "_" in text or not low <= value <= high:
        return 0
    return value


@dataclass(frozen=True)
class SlotChanges:
    """Which pages changed slot or segment during the last update."""

    slots_changed: tuple[bool, ...] = (False,) * PAGES
    segments_changed: tuple[bool, ...] = (False,) * PAGES

    @property
    def changed(self) -> bool:
        """True when any page was switched to another slot."""
        return any(self.slots_changed)


@dataclass
class MemoryLayout:
    """The memory layout reported by openMSX's ``debug_memmapper``."""

    primary_slot: list[int] = field(default_factory=lambda: [0] * PAGES)
    secondary_slot: list[int] = field(default_factory=lambda: [-1] * PAGES)
    is_subslotted: list[bool] = field(default_factory=lambda: [False] * PAGES)
    mapper_size: list[list[int]] = field(
        default_factory=lambda: [[0] * 4 for _ in range(4)]
    )
    mapper_segment: list[int] = field(default_factory=lambda: [0] * PAGES)
    rom_block: list[int] = field(default_factory=lambda: [-1] * ROM_BLOCKS)

    def update_from_memmapper(self, message: str) -> SlotChanges:
        """Update the layout from a ``debug_memmapper`` reply."""
        lines = message.split("\n")
        try:
            primary, secondary, segments = [], [], []
            for page in range(PAGES):
                slot_line = lines[page * 2]
                sub = slot_line[1] != "X"
                primary.append(ord(slot_line[0]) - ord("0"))
                secondary.append(ord(slot_line[1]) - ord("0") if sub else -1)
                segments.append(_to_int(lines[page * 2 + 1]))

            index = 2 * PAGES
            subslotted = []
            sizes = [row[:] for row in self.mapper_size]
            for ps in range(4):
                is_sub = lines[index][0] == "1"
                index += 1
                subslotted.append(is_sub)
                for ss in range(4 if is_sub else 1):
                    sizes[ps][ss] = _to_int(lines[index], 0, 0xFFFF)
                    index += 1

            roms = []
            for _ in range(ROM_BLOCKS):
                line = lines[index]
                roms.append(-1 if line[0] == "X" else _to_int(line))
                index += 1
        except IndexError as exc:
            raise ValueError("truncated debug_memmapper reply") from exc

        changes = SlotChanges(
            slots_changed=tuple(
                self.primary_slot[p] != primary[p] or self.secondary_slot[p] != secondary[p]
                for p in range(PAGES)
            ),
            segments_changed=tuple(
                self.mapper_segment[p] != segments[p] for p in range(PAGES)
            ),
        )
        self.primary_slot = primary
        self.secondary_slot = secondary
        self.mapper_segment = segments
        self.is_subslotted = subslotted
        self.mapper_size = sizes
        self.rom_block = roms
        return changes

    def slot_text(self, page: int) -> str:
        """Slot of a page, as ``p`` or ``p-s`` when the slot is expanded."""
        ps = self.primary_slot[page]
        if self.is_subslotted[ps & 3]:
            return f"{ps}-{self.secondary_slot[page]}"
        return str(ps)

    def segment_text(self, page: int) -> str:
        """Mapper segment or ROM block(s) visible in a page, or ``-``."""
        ps = self.primary_slot[page] & 3
        if self.is_subslotted[ps]:
            size = self.mapper_size[ps][self.secondary_slot[page] & 3]
        else:
            size = self.mapper_size[ps][0]
        if size > 0:
            return str(self.mapper_segment[page])
        first, second = self.rom_block[2 * page], self.rom_block[2 * page + 1]
        if first >= 0:
            return f"R{first}" if first == second else f"R{first}/{second}"
        return "-"


def page_rows(
    layout: MemoryLayout | None, changes: SlotChanges | None = None
) -> list[tuple[str, str, str, str, bool, bool]]:
    """Display rows (page, address, slot, segment, slot changed, segment changed)."""
    rows = []
    for page in range(PAGES):
        if layout is None:
            slot = segment = "-"
            slot_changed = segment_changed = False
        else:
            slot = layout.slot_text(page)
            segment = layout.segment_text(page)
            slot_changed = changes is not None and changes.slots_changed[page]
            segment_changed = changes is not None and changes.segments_changed[page]
        rows.append(
            (f"${page}", f"${page * 0x4000:04X}", slot, segment, slot_changed, segment_changed)
        )
    return rows
"""Palette values and the palette-loading instruction."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

DMG_BLACK = 0x03
DMG_DARK_GRAY = 0x02
DMG_LITE_GRAY = 0x01
DMG_WHITE = 0x00

PALETTE_COMMIT = 1
PALETTE_BKG = 2
PALETTE_SPRITE = 4

SGB_PALETTES_NONE = 0
SGB_PALETTES_01 = 1
SGB_PALETTES_23 = 2

ENTRY_SIZE = 8
PALETTE_COUNT = 8

_ENTRY = struct.Struct("<4H")


def dmg_palette(c0: int, c1: int, c2: int, c3: int) -> int:
    """Pack four 2-bit shades into a monochrome palette byte."""
    return ((c3 & 3) << 6) | ((c2 & 3) << 4) | ((c1 & 3) << 2) | (c0 & 3)


def cgb_color(r: int, g: int, b: int) -> int:
    """Pack 5-bit red, green and blue into a 15-bit colour."""
    return (r & 0x1F) | ((g & 0x1F) << 5) | ((b & 0x1F) << 10)


@dataclass
class PaletteEntry:
    """Four 15-bit colours of one colour palette."""

    c0: int = 0
    c1: int = 0
    c2: int = 0
    c3: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "PaletteEntry":
        return cls(*_ENTRY.unpack(bytes(data[:ENTRY_SIZE])))

    def to_bytes(self) -> bytes:
        return _ENTRY.pack(self.c0, self.c1, self.c2, self.c3)


def _entries() -> list[PaletteEntry]:
    return [PaletteEntry() for _ in range(PALETTE_COUNT)]


@dataclass
class PaletteState:
    """Palette memory plus the registers that palettes are committed to."""

    is_cgb: bool = False
    is_sgb: bool = False
    dmg: list[int] = field(default_factory=lambda: [0, 0, 0])
    bkg: list[PaletteEntry] = field(default_factory=_entries)
    spr: list[PaletteEntry] = field(default_factory=_entries)
    bgp: int = 0
    obp0: int = 0
    obp1: int = 0
    hw_bkg: list[PaletteEntry] = field(default_factory=_entries)
    hw_spr: list[PaletteEntry] = field(default_factory=_entries)
    sgb_transfers: list[int] = field(default_factory=list)

    def load(self, data: bytes, mask: int, options: int) -> int:
        """Load the palettes selected by mask from data; return bytes consumed."""
        commit = bool(options & PALETTE_COMMIT)
        is_bkg = bool(options & PALETTE_BKG)
        is_spr = bool(options & PALETTE_SPRITE)
        target = self.bkg if is_bkg else self.spr
        mask &= 0xFF
        needed = ENTRY_SIZE * bin(mask).count("1")
        if len(data) < needed:
            raise ValueError(f"palette data holds {len(data)} bytes, need {needed}")

        offset = 0
        sgb_changes = SGB_PALETTES_NONE
        for nb in range(PALETTE_COUNT):
            if not (mask >> nb) & 1:
                continue
            chunk = bytes(data[offset:offset + ENTRY_SIZE])
            offset += ENTRY_SIZE
            if self.is_cgb or nb > 1:
                target[nb] = PaletteEntry.from_bytes(chunk)
            elif nb == 0:
                value = chunk[0]
                if is_bkg:
                    self.dmg[0] = value
                    if commit:
                        self.bgp = value
                if is_spr:
                    self.dmg[1] = value
                    if commit:
                        self.obp0 = value
            elif is_spr:
                self.dmg[2] = chunk[0]
                if commit:
                    self.obp1 = chunk[0]
            if not commit:
                continue
            if self.is_cgb:
                if is_bkg:
                    self.hw_bkg[nb] = PaletteEntry(**vars(target[nb]))
                if is_spr:
                    self.hw_spr[nb] = PaletteEntry(**vars(target[nb]))
                continue
            if is_bkg:
                if nb in (4, 5):
                    sgb_changes |= SGB_PALETTES_01
                if nb in (6, 7):
                    sgb_changes |= SGB_PALETTES_23
        if sgb_changes and self.is_sgb:
            self.sgb_transfers.append(sgb_changes)
        return offset
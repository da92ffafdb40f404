import pytest

from gbvm.palette import (
    DMG_BLACK,
    DMG_DARK_GRAY,
    DMG_LITE_GRAY,
    DMG_WHITE,
    ENTRY_SIZE,
    PALETTE_BKG,
    PALETTE_COMMIT,
    PALETTE_SPRITE,
    SGB_PALETTES_01,
    PaletteEntry,
    PaletteState,
    cgb_color,
    dmg_palette,
)


def entry_bytes(*colours):
    return PaletteEntry(*colours).to_bytes()


def test_dmg_palette_standard():
    assert dmg_palette(DMG_WHITE, DMG_LITE_GRAY, DMG_DARK_GRAY, DMG_BLACK) == 0xE4


def test_cgb_color_white_and_mask():
    assert cgb_color(31, 31, 31) == 0x7FFF
    assert cgb_color(32, 0, 0) == 0


def test_cgb_color_channels_disjoint():
    r, g, b = cgb_color(31, 0, 0), cgb_color(0, 31, 0), cgb_color(0, 0, 31)
    assert r & g == 0 and g & b == 0 and r | g | b == cgb_color(31, 31, 31)


def test_entry_round_trip():
    entry = PaletteEntry(1, 2, 0x7FFF, 0x1234)
    raw = entry.to_bytes()
    assert len(raw) == ENTRY_SIZE
    assert PaletteEntry.from_bytes(raw) == entry


def test_cgb_load_skips_unselected():
    state = PaletteState(is_cgb=True)
    a, b = PaletteEntry(1, 2, 3, 4), PaletteEntry(5, 6, 7, 8)
    used = state.load(a.to_bytes() + b.to_bytes(), 0b101, PALETTE_BKG | PALETTE_COMMIT)
    assert used == 2 * ENTRY_SIZE
    assert state.bkg[0] == a
    assert state.bkg[2] == b
    assert state.bkg[1] == PaletteEntry()
    assert state.hw_bkg[2] == b
    assert state.spr[0] == PaletteEntry()


def test_cgb_load_without_commit_leaves_hardware():
    state = PaletteState(is_cgb=True)
    state.load(entry_bytes(9, 9, 9, 9), 1, PALETTE_SPRITE)
    assert state.spr[0] == PaletteEntry(9, 9, 9, 9)
    assert state.hw_spr[0] == PaletteEntry()


def test_dmg_load_first_palette_sets_registers():
    state = PaletteState()
    raw = bytes([0xE4]) + bytes(ENTRY_SIZE - 1)
    used = state.load(raw, 1, PALETTE_BKG | PALETTE_SPRITE | PALETTE_COMMIT)
    assert used == ENTRY_SIZE
    assert state.dmg[0] == state.dmg[1] == 0xE4
    assert state.bgp == state.obp0 == 0xE4
    assert state.bkg[0] == PaletteEntry()


def test_dmg_second_sprite_palette():
    state = PaletteState()
    raw = bytes([0x1B]) + bytes(ENTRY_SIZE - 1)
    state.load(raw, 0b10, PALETTE_SPRITE | PALETTE_COMMIT)
    assert state.dmg[2] == 0x1B
    assert state.obp1 == 0x1B
    assert state.dmg[:2] == [0, 0]


def test_sgb_transfer_recorded():
    state = PaletteState(is_sgb=True)
    raw = entry_bytes(1, 1, 1, 1) + entry_bytes(2, 2, 2, 2)
    state.load(raw, 0x30, PALETTE_BKG | PALETTE_COMMIT)
    assert state.sgb_transfers == [SGB_PALETTES_01]
    assert state.bkg[4] == PaletteEntry(1, 1, 1, 1)


def test_short_data_rejected():
    state = PaletteState(is_cgb=True)
    with pytest.raises(ValueError):
        state.load(bytes(ENTRY_SIZE), 0b11, PALETTE_BKG)
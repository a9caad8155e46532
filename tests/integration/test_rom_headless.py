"""Headless runs of small hand-assembled ROMs."""

from __future__ import annotations

import importlib.util
from pathlib import Path
import sys

_HELPER_PATH = Path(__file__).resolve().parents[1] / "helpers" / "headless.py"
_SPEC = importlib.util.spec_from_file_location("headless_helper", _HELPER_PATH)
_MODULE = importlib.util.module_from_spec(_SPEC)
assert _SPEC is not None and _SPEC.loader is not None
sys.modules[_SPEC.name] = _MODULE
_SPEC.loader.exec_module(_MODULE)  # type: ignore[arg-type]

KeyEvent = _MODULE.KeyEvent
assemble = _MODULE.assemble
run_program = _MODULE.run_program


GLYPH_6 = (0xF0, 0x80, 0xF0, 0x90, 0xF0)
GLYPH_7 = (0xF0, 0x10, 0x20, 0x40, 0x40)
GLYPH_A = (0xF0, 0x90, 0xF0, 0x90, 0x90)

BCD_PROGRAM = assemble(
    [
        0x6000,  # V0 = 0
        0x6100,  # V1 = 0
        0x6207,  # V2 = 7
        0xF229,  # I = glyph 7
        0xD015,  # draw at (0, 0)
        0x6341,  # V3 = 65
        0xA300,  # I = 0x300
        0xF333,  # BCD(V3)
        0xF265,  # V0..V2 = 0, 6, 5
        0xF129,  # I = glyph 6
        0x6408,
        0x6500,
        0xD455,  # draw at (8, 0)
        0x121A,  # spin
    ]
)

KEY_PROGRAM = assemble(
    [
        0xF30A,  # V3 = next key
        0xF329,
        0x6000,
        0x6100,
        0xD015,
        0x120A,
    ]
)


def glyph_rows(framebuffer, x: int) -> tuple:
    rows = []
    for y in range(5):
        value = 0
        for col in range(8):
            value = (value << 1) | framebuffer[y][x + col]
        rows.append(value)
    return tuple(rows)


def test_bcd_program_draws_digits() -> None:
    computer, pc_history = run_program(BCD_PROGRAM, total_cycles=20)
    try:
        assert pc_history[-1] == 0x21A
        assert computer.memory.read_range(0x300, 3) == bytes([0, 6, 5])
        assert computer.cpu_core.registers.read_v_range(0, 3) == [0, 6, 5]
        assert computer.cpu_core.registers.read_v(0xF) == 0

        framebuffer = computer.framebuffer()
        assert glyph_rows(framebuffer, 0) == GLYPH_7
        assert glyph_rows(framebuffer, 8) == GLYPH_6
        assert not any(framebuffer[y][x] for y in range(5, 32) for x in range(64))
    finally:
        computer.shutdown()


def test_key_program_draws_pressed_key() -> None:
    events = [KeyEvent(0, 0xA, True), KeyEvent(3, 0xA, False)]
    computer, pc_history = run_program(KEY_PROGRAM, total_cycles=8, events=events)
    try:
        assert pc_history[0] == 0x202
        assert computer.cpu_core.registers.read_v(0x3) == 0xA
        assert glyph_rows(computer.framebuffer(), 0) == GLYPH_A
        assert computer.keyboard.pressed_key is None
    finally:
        computer.shutdown()

"""Window front end helper tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from chip8emu import app
from chip8emu.chip8.computer import Chip8Computer
from chip8emu.chip8.keyboard import Chip8Keyboard
from chip8emu.emulator.file import load_rom_bytes
from chip8emu.memory import Memory


def test_key_events_track_most_recent_held_key() -> None:
    keyboard = Chip8Keyboard()
    held: list = []
    app._handle_key_event(keyboard, held, ord("q"), True)
    app._handle_key_event(keyboard, held, ord("x"), True)
    assert keyboard.pressed_key == 0x0
    app._handle_key_event(keyboard, held, ord("x"), False)
    assert keyboard.pressed_key == 0x4
    app._handle_key_event(keyboard, held, ord("q"), False)
    assert keyboard.pressed_key is None


def test_unmapped_keys_are_ignored() -> None:
    keyboard = Chip8Keyboard()
    held: list = []
    app._handle_key_event(keyboard, held, ord("p"), True)
    assert held == []
    assert keyboard.pressed_key is None


def test_caption() -> None:
    info = load_rom_bytes(Memory(), b"\x12\x00", name="PONG")
    assert app._build_caption(info, Chip8Computer.STATUS_RUNNING, False) == "CHIP-8 Emulator | Program: PONG | Running"
    assert app._build_caption(None, Chip8Computer.STATUS_PAUSED, False) == "CHIP-8 Emulator | Paused"
    assert app._build_caption(info, Chip8Computer.STATUS_RUNNING, True).endswith("Waiting for key")


def test_argument_parser() -> None:
    args = app._build_argument_parser().parse_args(["game.ch8", "--scale", "5", "--no-audio", "--log-level", "info"])
    assert args.rom == "game.ch8"
    assert args.scale == 5
    assert args.audio is False
    assert args.clock is None
    assert args.log_level == "INFO"


def test_main_reports_missing_rom(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv("CHIP8EMU_CLOCK_HZ", raising=False)
    with pytest.raises(SystemExit) as excinfo:
        app.main([str(tmp_path / "missing.ch8")])
    assert "Failed to load ROM" in str(excinfo.value.code)


def test_main_rejects_bad_environment(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("CHIP8EMU_SCALE", "zero")
    with pytest.raises(SystemExit):
        app.main([str(tmp_path / "missing.ch8")])

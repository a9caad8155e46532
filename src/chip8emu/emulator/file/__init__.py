"""File loading helpers for the CHIP-8 emulator."""

from chip8emu.emulator.file.program import (
    MAX_ROM_SIZE,
    AddressRegion,
    ProgramInfo,
    ProgramLoadError,
    load_rom,
    load_rom_bytes,
)

__all__ = [
    "MAX_ROM_SIZE",
    "AddressRegion",
    "ProgramInfo",
    "ProgramLoadError",
    "load_rom",
    "load_rom_bytes",
]

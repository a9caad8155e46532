"""ROM loaders for CHIP-8 programs."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import List, Optional

from chip8emu.errors import Chip8Error
from chip8emu.memory import Memory, PROGRAM_START

logger = logging.getLogger(__name__)

MAX_ROM_SIZE = 0x1000 - PROGRAM_START


class ProgramLoadError(RuntimeError):
    """Raised when a ROM image cannot be loaded."""


@dataclass
class AddressRegion:
    start: int
    end: int
    comment: str = ""


@dataclass
class ProgramInfo:
    memory: Memory
    name: str = ""
    size: int = 0
    address_regions: List[AddressRegion] = field(default_factory=list)
    path: Optional[Path] = None

    def add_region(self, start: int, end: int, comment: str = "") -> None:
        self.address_regions.append(AddressRegion(start, end, comment))


def load_rom_bytes(memory: Memory, data: bytes, *, name: str = "") -> ProgramInfo:
    """Copy a raw ROM image into memory at the program start address."""

    if not data:
        raise ProgramLoadError("ROM image is empty")
    if len(data) > MAX_ROM_SIZE:
        raise ProgramLoadError(
            f"ROM image is {len(data)} bytes; at most {MAX_ROM_SIZE} bytes fit in memory"
        )
    try:
        memory.write_buf(PROGRAM_START, data)
    except Chip8Error as exc:
        raise ProgramLoadError(f"ROM image does not fit in memory: {exc}") from exc
    info = ProgramInfo(memory=memory, name=name, size=len(data))
    info.add_region(PROGRAM_START, PROGRAM_START + len(data) - 1, "program")
    logger.info("loaded %d byte ROM %s", len(data), name or "<buffer>")
    return info


def load_rom(memory: Memory, path: str | Path) -> ProgramInfo:
    """Load a CHIP-8 ROM file into memory."""

    file_path = Path(path)
    data = file_path.read_bytes()
    info = load_rom_bytes(memory, data, name=file_path.stem.upper())
    info.path = file_path
    return info

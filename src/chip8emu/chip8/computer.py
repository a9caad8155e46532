"""CHIP-8 system wiring."""

from __future__ import annotations

import logging
import os
from pathlib import Path
import random
from typing import Optional

from chip8emu.chip8.display import Chip8Display, Snapshot
from chip8emu.chip8.hardware import Chip8Hardware
from chip8emu.chip8.keyboard import Chip8Keyboard
from chip8emu.chip8.sound import Chip8Beeper
from chip8emu.cpu.cpu import Chip8CPU
from chip8emu.emulator.file import ProgramInfo, load_rom, load_rom_bytes
from chip8emu.memory import Memory
from chip8emu.system.computer import DEFAULT_CLOCK_SPEED, Computer

logger = logging.getLogger(__name__)


class Chip8Computer(Computer):
    """Concrete CHIP-8 machine: memory, display, keypad, timers and CPU."""

    def __init__(
        self,
        *,
        clock_speed: float = DEFAULT_CLOCK_SPEED,
        enable_audio: bool = False,
        rng: Optional[random.Random] = None,
        hardware: Optional[Chip8Hardware] = None,
        **kwargs,
    ) -> None:
        if hardware is None:
            hardware = Chip8Hardware(beeper=Chip8Beeper(enable_audio=enable_audio))
        super().__init__(hardware, clock_speed=clock_speed, **kwargs)
        self.hardware: Chip8Hardware = hardware
        self.program_info: Optional[ProgramInfo] = None
        self.cpu_core = Chip8CPU(hardware, rng=rng)
        self.set_cpu(self.cpu_core)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def memory(self) -> Memory:
        return self.hardware.memory

    @property
    def display(self) -> Chip8Display:
        return self.hardware.display

    @property
    def keyboard(self) -> Chip8Keyboard:
        return self.hardware.keyboard

    def framebuffer(self) -> Snapshot:
        return self.hardware.display.snapshot()

    def delay_timer_value(self) -> int:
        return self.hardware.delay_timer.read()

    def sound_timer_value(self) -> int:
        return self.hardware.sound_timer.read()

    # ------------------------------------------------------------------
    # User program loading
    # ------------------------------------------------------------------
    def load_user_program(self, path: str | os.PathLike[str]) -> ProgramInfo:
        self._prepare_load()
        info = load_rom(self.memory, Path(path))
        return self._finish_load(info)

    def load_program_bytes(self, data: bytes, *, name: str = "") -> ProgramInfo:
        self._prepare_load()
        info = load_rom_bytes(self.memory, data, name=name)
        return self._finish_load(info)

    def _prepare_load(self) -> None:
        if self.is_running():
            raise RuntimeError("stop the engine before loading a program")
        self.memory.clear()
        self.hardware.display.clear()
        self.hardware.delay_timer.reset()
        self.hardware.sound_timer.reset()

    def _finish_load(self, info: ProgramInfo) -> ProgramInfo:
        self.program_info = info
        self.reset()
        return info

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------
    def shutdown(self, timeout: float = 1.0) -> None:
        self.stop()
        self.join(timeout)
        self.hardware.close()
        logger.info("CHIP-8 machine shut down")

"""CHIP-8 hardware bundle shared by the CPU and the presentation layer."""

from __future__ import annotations

from dataclasses import dataclass, field

from chip8emu.chip8.display import Chip8Display
from chip8emu.chip8.keyboard import Chip8Keyboard
from chip8emu.chip8.sound import Chip8Beeper
from chip8emu.chip8.timer import DelayTimer, SoundTimer
from chip8emu.memory import Memory


@dataclass
class Chip8Hardware:
    memory: Memory = field(default_factory=Memory)
    display: Chip8Display = field(default_factory=Chip8Display)
    keyboard: Chip8Keyboard = field(default_factory=Chip8Keyboard)
    delay_timer: DelayTimer = field(default_factory=DelayTimer)
    sound_timer: SoundTimer = field(default_factory=SoundTimer)
    beeper: Chip8Beeper = field(default_factory=Chip8Beeper)

    def close(self) -> None:
        self.delay_timer.close()
        self.sound_timer.close()
        self.beeper.close()

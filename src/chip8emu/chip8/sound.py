"""CHIP-8 buzzer driven by the sound timer."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from array import array
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class Chip8Beeper:
    """Square wave buzzer that sounds while the sound timer is non-zero."""

    history: List[Tuple[str, Tuple[float, ...]]] = field(default_factory=list)
    sample_rate: int = 44100
    frequency: float = 440.0
    volume: float = 0.3
    enable_audio: bool = False

    def __post_init__(self) -> None:
        self._audio_initialized: bool = False
        self._channel = None
        self._sound = None
        self._active: bool = False

    @property
    def active(self) -> bool:
        return self._active

    # ------------------------------------------------------------------
    # Timer callbacks
    # ------------------------------------------------------------------

    def update(self, sound_timer_value: int) -> None:
        """Follow the sound timer; called once per presentation frame."""

        if sound_timer_value > 0:
            self.set_line_on()
        else:
            self.set_line_off()

    def set_line_on(self) -> None:
        if self._active:
            return
        self._active = True
        self.history.append(("set_line_on", tuple()))
        if not self._ensure_mixer():
            return
        if self._channel is not None and self._sound is not None:
            self._channel.set_volume(self.volume)
            self._channel.play(self._sound, loops=-1)

    def set_line_off(self) -> None:
        if not self._active:
            return
        self._active = False
        self.history.append(("set_line_off", tuple()))
        if self._audio_initialized and self._channel is not None:
            self._channel.stop()

    # ------------------------------------------------------------------
    # Audio control helpers
    # ------------------------------------------------------------------

    def _ensure_mixer(self) -> bool:
        if not self.enable_audio:
            return False
        if self._audio_initialized:
            return True
        try:
            import pygame  # type: ignore

            if not pygame.mixer.get_init():
                pygame.mixer.init(frequency=self.sample_rate, size=-16, channels=1)
            self._channel = pygame.mixer.Channel(0)
            self._sound = pygame.mixer.Sound(buffer=self._render_period())
            self._audio_initialized = True
        except Exception as exc:
            logger.warning("audio disabled: %s", exc)
            self.enable_audio = False
            self._channel = None
            self._sound = None
            self._audio_initialized = False
        return self._audio_initialized

    def _render_period(self) -> array:
        """Render one second of square wave, looped by the mixer."""

        amplitude = int(self.volume * 32767)
        half_period = max(1, int(self.sample_rate / (2.0 * self.frequency)))
        buffer = array("h")
        for index in range(self.sample_rate):
            high = (index // half_period) % 2 == 0
            buffer.append(amplitude if high else -amplitude)
        return buffer

    def close(self) -> None:
        self.set_line_off()
        self._channel = None
        self._sound = None
        self._audio_initialized = False

    def last_event(self) -> Optional[str]:
        if not self.history:
            return None
        return self.history[-1][0]

"""60 Hz countdown timers."""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional

logger = logging.getLogger(__name__)

TIMER_FREQUENCY = 60.0


class CountdownTimer:
    """Byte counter that decays towards zero in real time.

    A single daemon thread per timer performs the decay. It is started on the
    first non-zero write, sleeps on the condition while the value is zero and
    is woken again by the next non-zero write.
    """

    def __init__(self, name: str = "timer", *, frequency: float = TIMER_FREQUENCY) -> None:
        if frequency <= 0:
            raise ValueError("frequency must be positive")
        self.name = name
        self.interval = 1.0 / frequency
        self._condition = threading.Condition()
        self._value = 0
        self._next_tick = 0.0
        self._closed = False
        self._thread: Optional[threading.Thread] = None

    def read(self) -> int:
        with self._condition:
            return self._value

    def write(self, value: int) -> None:
        with self._condition:
            if self._closed:
                raise RuntimeError(f"{self.name} timer is closed")
            self._value = value & 0xFF
            if self._value:
                self._next_tick = time.monotonic() + self.interval
                self._ensure_thread()
                self._condition.notify_all()

    @property
    def running(self) -> bool:
        with self._condition:
            return self._thread is not None and self._thread.is_alive()

    def close(self, timeout: float | None = 1.0) -> None:
        with self._condition:
            self._closed = True
            self._condition.notify_all()
            thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def reset(self) -> None:
        with self._condition:
            self._value = 0

    def _ensure_thread(self) -> None:
        # Caller holds the condition.
        if self._thread is not None and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self._decay_loop, name=f"Chip8{self.name.title()}Timer", daemon=True)
        self._thread.start()
        logger.debug("%s timer decay thread started", self.name)

    def _decay_loop(self) -> None:
        with self._condition:
            while not self._closed:
                if self._value == 0:
                    self._condition.wait()
                    continue
                remaining = self._next_tick - time.monotonic()
                if remaining > 0:
                    self._condition.wait(remaining)
                    continue
                self._value -= 1
                self._next_tick += self.interval
        logger.debug("%s timer decay thread stopped", self.name)


class DelayTimer(CountdownTimer):
    def __init__(self, *, frequency: float = TIMER_FREQUENCY) -> None:
        super().__init__("delay", frequency=frequency)


class SoundTimer(CountdownTimer):
    """Sound timer; the buzzer is on while the value is non-zero."""

    def __init__(self, *, frequency: float = TIMER_FREQUENCY) -> None:
        super().__init__("sound", frequency=frequency)

    @property
    def active(self) -> bool:
        return self.read() > 0

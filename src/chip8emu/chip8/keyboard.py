"""CHIP-8 hexadecimal keypad shared between the input loop and the CPU."""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

logger = logging.getLogger(__name__)

KEY_COUNT = 16

# Host keys laid out like the original COSMAC VIP keypad.
#   1 2 3 C        1 2 3 4
#   4 5 6 D   <-   Q W E R
#   7 8 9 E        A S D F
#   A 0 B F        Z X C V
DEFAULT_KEYMAP: Dict[str, int] = {
    "1": 0x1, "2": 0x2, "3": 0x3, "4": 0xC,
    "q": 0x4, "w": 0x5, "e": 0x6, "r": 0xD,
    "a": 0x7, "s": 0x8, "d": 0x9, "f": 0xE,
    "z": 0xA, "x": 0x0, "c": 0xB, "v": 0xF,
}


class Chip8Keyboard:
    """Current key state with a blocking wait for the next press.

    The input collaborator publishes the held key (or ``None``) on every
    polling tick through :meth:`set_key`. Each transition to a pressed key is
    latched with a sequence number under the same lock, so a waiter that
    starts before the press still sees it even if the key is released again
    before the waiter gets scheduled.
    """

    def __init__(self) -> None:
        self._condition = threading.Condition()
        self._pressed: Optional[int] = None
        self._press_count = 0
        self._last_press: Optional[int] = None

    @staticmethod
    def _validate(key: int) -> int:
        if not (0 <= key < KEY_COUNT):
            raise ValueError(f"key {key!r} out of range")
        return key

    def set_key(self, key: Optional[int]) -> None:
        if key is not None:
            self._validate(key)
        with self._condition:
            if key is not None and key != self._pressed:
                self._press_count += 1
                self._last_press = key
                logger.debug("key %X pressed", key)
            self._pressed = key
            self._condition.notify_all()

    def press(self, key: int) -> None:
        self.set_key(key)

    def release(self) -> None:
        self.set_key(None)

    def is_pressed(self, key: int) -> bool:
        with self._condition:
            return self._pressed is not None and self._pressed == key

    @property
    def pressed_key(self) -> Optional[int]:
        with self._condition:
            return self._pressed

    def wait_for_key(self) -> int:
        """Block until a key is held and return it."""

        with self._condition:
            if self._pressed is not None:
                return self._pressed
            seen = self._press_count
            while self._press_count == seen:
                self._condition.wait()
            assert self._last_press is not None
            return self._last_press

    def clear(self) -> None:
        self.set_key(None)

"""Keypad state and blocking wait tests."""

from __future__ import annotations

import threading
import time

import pytest

from chip8emu.chip8.keyboard import DEFAULT_KEYMAP, Chip8Keyboard


def wait_in_thread(keyboard: Chip8Keyboard):
    result = {}

    def target() -> None:
        result["key"] = keyboard.wait_for_key()

    thread = threading.Thread(target=target, daemon=True)
    thread.start()
    return thread, result


def test_key_state() -> None:
    keyboard = Chip8Keyboard()
    assert keyboard.pressed_key is None
    keyboard.press(0x0)
    assert keyboard.is_pressed(0x0)
    assert not keyboard.is_pressed(0x1)
    keyboard.release()
    assert not keyboard.is_pressed(0x0)


def test_set_key_rejects_out_of_range() -> None:
    keyboard = Chip8Keyboard()
    with pytest.raises(ValueError):
        keyboard.set_key(16)


def test_wait_returns_immediately_when_key_held() -> None:
    keyboard = Chip8Keyboard()
    keyboard.press(0xB)
    assert keyboard.wait_for_key() == 0xB


def test_wait_blocks_until_press() -> None:
    keyboard = Chip8Keyboard()
    thread, result = wait_in_thread(keyboard)
    time.sleep(0.05)
    assert thread.is_alive()
    keyboard.press(0x7)
    thread.join(1.0)
    assert not thread.is_alive()
    assert result["key"] == 0x7


def test_wait_sees_press_released_before_wakeup() -> None:
    keyboard = Chip8Keyboard()
    thread, result = wait_in_thread(keyboard)
    time.sleep(0.05)
    keyboard.press(0x3)
    keyboard.release()
    thread.join(1.0)
    assert result["key"] == 0x3


def test_default_keymap_covers_keypad() -> None:
    assert sorted(DEFAULT_KEYMAP.values()) == list(range(16))

"""Countdown timer tests."""

from __future__ import annotations

import time

import pytest

from chip8emu.chip8.timer import CountdownTimer, DelayTimer, SoundTimer


def test_zero_write_starts_no_thread() -> None:
    timer = DelayTimer()
    timer.write(0)
    assert timer.read() == 0
    assert not timer.running
    timer.close()


def test_timer_decays_at_sixty_hertz() -> None:
    timer = DelayTimer()
    try:
        timer.write(60)
        time.sleep(0.25)
        value = timer.read()
        assert 35 <= value <= 52
        time.sleep(1.0)
        assert timer.read() == 0
    finally:
        timer.close()


def test_values_never_increase_between_writes() -> None:
    timer = CountdownTimer("probe", frequency=600.0)
    try:
        timer.write(100)
        samples = []
        for _ in range(30):
            samples.append(timer.read())
            time.sleep(0.005)
        assert samples == sorted(samples, reverse=True)
    finally:
        timer.close()


def test_rewrite_reuses_single_thread() -> None:
    timer = CountdownTimer("probe", frequency=600.0)
    try:
        timer.write(2)
        time.sleep(0.05)
        assert timer.read() == 0
        thread = timer._thread
        timer.write(5)
        assert timer._thread is thread
        assert timer.running
    finally:
        timer.close()
    assert not timer.running


def test_write_masks_to_byte_and_reset() -> None:
    timer = SoundTimer()
    try:
        timer.write(0x1FF)
        assert timer.read() <= 0xFF
        assert timer.active
        timer.reset()
        assert timer.read() == 0
        assert not timer.active
    finally:
        timer.close()


def test_closed_timer_rejects_writes() -> None:
    timer = DelayTimer()
    timer.close()
    with pytest.raises(RuntimeError):
        timer.write(1)


def test_invalid_frequency() -> None:
    with pytest.raises(ValueError):
        CountdownTimer(frequency=0)

"""Memory and call stack tests."""

from __future__ import annotations

import pytest

from chip8emu.errors import (
    InvalidRangeError,
    OutOfBoundsError,
    StackOverflowError,
    StackUnderflowError,
)
from chip8emu.memory import FONT_SPRITES, MEMORY_SIZE, CallStack, Memory


def test_new_memory_has_font_and_zeroed_program_area() -> None:
    memory = Memory()
    assert len(memory) == MEMORY_SIZE
    assert memory.read_range(0, 5) == bytes([0xF0, 0x90, 0x90, 0x90, 0xF0])
    assert memory.read_range(0, len(FONT_SPRITES)) == FONT_SPRITES
    assert memory.read_range(0x50, MEMORY_SIZE - 0x50) == bytes(MEMORY_SIZE - 0x50)


def test_write_masks_and_reads_back() -> None:
    memory = Memory()
    memory.write(0x300, 0x1AB)
    assert memory.read(0x300) == 0xAB


def test_single_byte_bounds() -> None:
    memory = Memory()
    assert memory.read(0xFFF) == 0
    with pytest.raises(OutOfBoundsError):
        memory.read(0x1000)
    with pytest.raises(OutOfBoundsError):
        memory.write(0x1000, 1)
    with pytest.raises(OutOfBoundsError):
        memory.read(-1)


def test_read_range_edges() -> None:
    memory = Memory()
    assert memory.read_range(0xFFE, 2) == b"\x00\x00"
    assert memory.read_range(0x200, 0) == b""
    with pytest.raises(OutOfBoundsError):
        memory.read_range(0xFFF, 2)
    with pytest.raises(InvalidRangeError):
        memory.read_range(0x200, -1)
    with pytest.raises(InvalidRangeError):
        memory.read_range(0, 0x10000)


def test_write_buf_is_all_or_nothing() -> None:
    memory = Memory()
    with pytest.raises(OutOfBoundsError):
        memory.write_buf(0xFFE, [1, 2, 3])
    assert memory.read_range(0xFFE, 2) == b"\x00\x00"

    memory.write_buf(0xFFD, [1, 2, 3])
    assert memory.read_range(0xFFD, 3) == b"\x01\x02\x03"


def test_load16_is_big_endian() -> None:
    memory = Memory()
    memory.write_buf(0x200, [0x12, 0x34])
    assert memory.load16(0x200) == 0x1234
    with pytest.raises(OutOfBoundsError):
        memory.load16(0xFFF)


def test_clear_restores_font() -> None:
    memory = Memory()
    memory.write_buf(0, bytes(0x300))
    memory.clear()
    assert memory.read_range(0, len(FONT_SPRITES)) == FONT_SPRITES
    assert memory.read(0x200) == 0


def test_memory_without_font() -> None:
    memory = Memory(load_font=False)
    assert memory.read_range(0, 80) == bytes(80)


def test_call_stack_lifo_and_depth() -> None:
    stack = CallStack()
    for address in range(0x200, 0x220, 2):
        stack.push(address)
    assert len(stack) == 16
    with pytest.raises(StackOverflowError):
        stack.push(0x300)
    assert stack.pointer == 16
    assert stack.pop() == 0x21E
    assert stack.entries()[0] == 0x200


def test_call_stack_underflow() -> None:
    stack = CallStack()
    with pytest.raises(StackUnderflowError):
        stack.pop()
    stack.push(0x202)
    stack.reset()
    assert len(stack) == 0
    with pytest.raises(StackUnderflowError):
        stack.pop()

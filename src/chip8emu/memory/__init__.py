"""Memory and call stack primitives for the CHIP-8 core."""

from __future__ import annotations

from typing import Iterable, List, Protocol

from chip8emu.errors import (
    InvalidRangeError,
    OutOfBoundsError,
    StackOverflowError,
    StackUnderflowError,
)

MEMORY_SIZE = 0x1000
ADDRESS_LIMIT = 0x10000
PROGRAM_START = 0x200
FONT_START = 0x000
FONT_GLYPH_SIZE = 5
STACK_DEPTH = 16

FONT_SPRITES = bytes(
    [
        0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
        0x20, 0x60, 0x20, 0x20, 0x70,  # 1
        0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
        0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
        0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
        0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
        0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
        0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
        0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
        0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
        0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
        0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
        0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
        0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
        0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
        0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
    ]
)


class Addressable(Protocol):
    """Protocol describing the byte store the CPU operates on."""

    def read(self, address: int) -> int:
        ...

    def read_range(self, start: int, length: int) -> bytes:
        ...

    def write(self, address: int, value: int) -> None:
        ...

    def write_buf(self, start: int, data: Iterable[int]) -> None:
        ...


class Memory(Addressable):
    """Flat 4 KiB store with the hexadecimal font preloaded at address 0."""

    size: int
    data: bytearray

    def __init__(self, size: int = MEMORY_SIZE, *, load_font: bool = True) -> None:
        if size <= 0 or size > ADDRESS_LIMIT:
            raise ValueError("invalid memory size")
        self.size = size
        self.data = bytearray(size)
        if load_font:
            self.write_buf(FONT_START, FONT_SPRITES)

    def __len__(self) -> int:
        return self.size

    def _check_address(self, address: int) -> None:
        if not (0 <= address < self.size):
            raise OutOfBoundsError(f"address {address:#05x} outside memory")

    def _check_span(self, start: int, length: int) -> None:
        if not (0 <= length < ADDRESS_LIMIT):
            raise InvalidRangeError(f"length {length} not representable")
        if start < 0 or start + length > self.size:
            raise OutOfBoundsError(f"range {start:#05x}+{length} outside memory")

    def read(self, address: int) -> int:
        self._check_address(address)
        return self.data[address]

    def read_range(self, start: int, length: int) -> bytes:
        self._check_span(start, length)
        return bytes(self.data[start:start + length])

    def write(self, address: int, value: int) -> None:
        self._check_address(address)
        self.data[address] = value & 0xFF

    def write_buf(self, start: int, data: Iterable[int]) -> None:
        values = bytes(value & 0xFF for value in data)
        self._check_span(start, len(values))
        self.data[start:start + len(values)] = values

    def load16(self, address: int) -> int:
        """Read a big-endian instruction word."""

        hi = self.read(address)
        lo = self.read(address + 1)
        return (hi << 8) | lo

    def clear(self, *, load_font: bool = True) -> None:
        self.data[:] = bytes(self.size)
        if load_font:
            self.write_buf(FONT_START, FONT_SPRITES)


class CallStack:
    """Fixed-depth return address stack."""

    def __init__(self, depth: int = STACK_DEPTH) -> None:
        if depth <= 0:
            raise ValueError("stack depth must be positive")
        self.depth = depth
        self._slots: List[int] = [0] * depth
        self._pointer = 0

    def __len__(self) -> int:
        return self._pointer

    @property
    def pointer(self) -> int:
        return self._pointer

    def push(self, address: int) -> None:
        if self._pointer >= self.depth:
            raise StackOverflowError(f"call stack exceeded {self.depth} entries")
        self._slots[self._pointer] = address & 0xFFFF
        self._pointer += 1

    def pop(self) -> int:
        if self._pointer == 0:
            raise StackUnderflowError("return with empty call stack")
        self._pointer -= 1
        return self._slots[self._pointer]

    def entries(self) -> List[int]:
        return self._slots[:self._pointer]

    def reset(self) -> None:
        self._slots = [0] * self.depth
        self._pointer = 0


__all__ = [
    "Addressable",
    "CallStack",
    "FONT_GLYPH_SIZE",
    "FONT_SPRITES",
    "FONT_START",
    "MEMORY_SIZE",
    "Memory",
    "PROGRAM_START",
    "STACK_DEPTH",
]

"""CHIP-8 register file."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

from chip8emu.errors import InvalidRangeError, OutOfBoundsError
from chip8emu.memory import PROGRAM_START

REGISTER_COUNT = 16
FLAG_REGISTER = 0xF


@dataclass
class RegisterFile:
    """General purpose registers V0-VF plus the index register and PC."""

    v: List[int] = field(default_factory=lambda: [0x00] * REGISTER_COUNT)
    index: int = 0
    program_counter: int = PROGRAM_START

    def _check_index(self, idx: int) -> None:
        if not (0 <= idx < REGISTER_COUNT):
            raise OutOfBoundsError(f"register V{idx} does not exist")

    def _check_span(self, start: int, count: int) -> None:
        if count < 0:
            raise InvalidRangeError(f"negative register count {count}")
        if start < 0 or start + count > REGISTER_COUNT:
            raise OutOfBoundsError(f"registers V{start}+{count} out of range")

    def read_v(self, idx: int) -> int:
        self._check_index(idx)
        return self.v[idx]

    def write_v(self, idx: int, value: int) -> None:
        self._check_index(idx)
        self.v[idx] = value & 0xFF

    def read_v_range(self, start: int, count: int) -> List[int]:
        self._check_span(start, count)
        return self.v[start:start + count]

    def write_v_range(self, start: int, data: Iterable[int]) -> None:
        values = [value & 0xFF for value in data]
        self._check_span(start, len(values))
        self.v[start:start + len(values)] = values

    def read_i(self) -> int:
        return self.index

    def write_i(self, value: int) -> None:
        self.index = value & 0xFFFF

    def reset(self) -> None:
        self.v = [0x00] * REGISTER_COUNT
        self.index = 0
        self.program_counter = PROGRAM_START

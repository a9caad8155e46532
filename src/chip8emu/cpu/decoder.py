"""Instruction decoding for the CHIP-8 instruction set.

Decoding is kept separate from execution: :func:`decode` turns a 16-bit
instruction word into an :class:`Instruction` value tagged with an
:class:`Op`, and the CPU dispatches over the tag.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict

from chip8emu.errors import InvalidOpcodeError


class Op(Enum):
    CLS = auto()
    RET = auto()
    SYS = auto()
    JP = auto()
    CALL = auto()
    SE_BYTE = auto()
    SNE_BYTE = auto()
    SE_REG = auto()
    LD_BYTE = auto()
    ADD_BYTE = auto()
    LD_REG = auto()
    OR = auto()
    AND = auto()
    XOR = auto()
    ADD_REG = auto()
    SUB = auto()
    SHR = auto()
    SUBN = auto()
    SHL = auto()
    SNE_REG = auto()
    LD_I = auto()
    JP_V0 = auto()
    RND = auto()
    DRW = auto()
    SKP = auto()
    SKNP = auto()
    LD_VX_DT = auto()
    LD_VX_K = auto()
    LD_DT_VX = auto()
    LD_ST_VX = auto()
    ADD_I_VX = auto()
    LD_F_VX = auto()
    LD_B_VX = auto()
    LD_MEM_VX = auto()
    LD_VX_MEM = auto()


@dataclass(frozen=True)
class Instruction:
    """A decoded instruction word with its operand fields pre-extracted."""

    opcode: int
    op: Op

    @property
    def x(self) -> int:
        return (self.opcode >> 8) & 0x0F

    @property
    def y(self) -> int:
        return (self.opcode >> 4) & 0x0F

    @property
    def n(self) -> int:
        return self.opcode & 0x000F

    @property
    def kk(self) -> int:
        return self.opcode & 0x00FF

    @property
    def nnn(self) -> int:
        return self.opcode & 0x0FFF

    def __str__(self) -> str:
        return f"{self.opcode:04X} {self.op.name}"


_ALU_OPS: Dict[int, Op] = {
    0x0: Op.LD_REG,
    0x1: Op.OR,
    0x2: Op.AND,
    0x3: Op.XOR,
    0x4: Op.ADD_REG,
    0x5: Op.SUB,
    0x6: Op.SHR,
    0x7: Op.SUBN,
    0xE: Op.SHL,
}

_KEY_OPS: Dict[int, Op] = {
    0x9E: Op.SKP,
    0xA1: Op.SKNP,
}

_MISC_OPS: Dict[int, Op] = {
    0x07: Op.LD_VX_DT,
    0x0A: Op.LD_VX_K,
    0x15: Op.LD_DT_VX,
    0x18: Op.LD_ST_VX,
    0x1E: Op.ADD_I_VX,
    0x29: Op.LD_F_VX,
    0x33: Op.LD_B_VX,
    0x55: Op.LD_MEM_VX,
    0x65: Op.LD_VX_MEM,
}

_SIMPLE_OPS: Dict[int, Op] = {
    0x1: Op.JP,
    0x2: Op.CALL,
    0x3: Op.SE_BYTE,
    0x4: Op.SNE_BYTE,
    0x5: Op.SE_REG,
    0x6: Op.LD_BYTE,
    0x7: Op.ADD_BYTE,
    0x9: Op.SNE_REG,
    0xA: Op.LD_I,
    0xB: Op.JP_V0,
    0xC: Op.RND,
    0xD: Op.DRW,
}


def _decode_op(opcode: int) -> Op | None:
    family = opcode >> 12
    if family == 0x0:
        if opcode == 0x00E0:
            return Op.CLS
        if opcode == 0x00EE:
            return Op.RET
        # 00NN is the interpreter's own instruction page.
        if opcode & 0x0F00 == 0:
            return None
        return Op.SYS
    if family == 0x8:
        return _ALU_OPS.get(opcode & 0x000F)
    if family == 0xE:
        return _KEY_OPS.get(opcode & 0x00FF)
    if family == 0xF:
        return _MISC_OPS.get(opcode & 0x00FF)
    return _SIMPLE_OPS.get(family)


def decode(opcode: int, address: int | None = None) -> Instruction:
    """Decode ``opcode``; ``address`` is only used for error reporting."""

    word = opcode & 0xFFFF
    op = _decode_op(word)
    if op is None:
        raise InvalidOpcodeError(word, address)
    return Instruction(word, op)


__all__ = ["Instruction", "Op", "decode"]

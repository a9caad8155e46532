"""CHIP-8 CPU core: fetch, decode and dispatch."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import random
from typing import Callable, Dict, Optional, TYPE_CHECKING

from chip8emu.cpu.decoder import Instruction, Op, decode
from chip8emu.cpu.registers import FLAG_REGISTER, RegisterFile
from chip8emu.errors import Chip8Error
from chip8emu.memory import FONT_GLYPH_SIZE, FONT_START, PROGRAM_START, CallStack

if TYPE_CHECKING:
    from chip8emu.chip8.hardware import Chip8Hardware

logger = logging.getLogger(__name__)

INSTRUCTION_SIZE = 2


@dataclass
class CPUStatus:
    waiting_for_key: bool = False
    halted: bool = False
    error: Optional[Chip8Error] = None
    instruction_count: int = 0


class Chip8CPU:
    """Interpreter for the original CHIP-8 instruction set."""

    def __init__(self, hardware: "Chip8Hardware", *, rng: Optional[random.Random] = None) -> None:
        self.hardware = hardware
        self.registers = RegisterFile()
        self.stack = CallStack()
        self.status = CPUStatus()
        self.rng = rng if rng is not None else random.Random()
        self._opcode_table: Dict[Op, Callable[[Instruction], None]] = {}
        self._init_opcode_table()

    @property
    def memory(self):
        return self.hardware.memory

    @property
    def paused(self) -> bool:
        return self.status.waiting_for_key

    def reset(self, start_address: int = PROGRAM_START) -> None:
        self.registers.reset()
        self.registers.program_counter = start_address & 0xFFFF
        self.stack.reset()
        self.status = CPUStatus()

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------
    def fetch(self) -> int:
        return self.memory.load16(self.registers.program_counter)

    def step(self) -> Instruction:
        """Execute one instruction.

        Any :class:`Chip8Error` halts the CPU: the program counter is left on
        the faulting instruction and the error is re-raised.
        """

        if self.status.halted:
            raise RuntimeError("CPU is halted") from self.status.error

        address = self.registers.program_counter
        try:
            instruction = decode(self.fetch(), address)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("%03X: %s", address, instruction)
            self.registers.program_counter = (address + INSTRUCTION_SIZE) & 0xFFFF
            self._opcode_table[instruction.op](instruction)
        except Chip8Error as exc:
            self.registers.program_counter = address
            self.status.halted = True
            self.status.error = exc
            logger.error("CPU halted at %03X: %s", address, exc)
            raise
        self.status.instruction_count += 1
        return instruction

    def execute(self, count: int) -> int:
        """Execute up to ``count`` instructions and return how many ran."""

        executed = 0
        while executed < count:
            self.step()
            executed += 1
        return executed

    def _skip(self) -> None:
        self.registers.program_counter = (self.registers.program_counter + INSTRUCTION_SIZE) & 0xFFFF

    def _v(self, idx: int) -> int:
        return self.registers.read_v(idx)

    def _set_v(self, idx: int, value: int) -> None:
        self.registers.write_v(idx, value)

    def _set_flag(self, value: int) -> None:
        self.registers.write_v(FLAG_REGISTER, value)

    # ------------------------------------------------------------------
    # Dispatch table
    # ------------------------------------------------------------------
    def _register_opcode(self, op: Op, handler: Callable[[Instruction], None]) -> None:
        self._opcode_table[op] = handler

    def _init_opcode_table(self) -> None:
        self._opcode_table.clear()
        self._register_opcode(Op.CLS, self._opcode_cls)
        self._register_opcode(Op.RET, self._opcode_ret)
        self._register_opcode(Op.SYS, self._opcode_jp)
        self._register_opcode(Op.JP, self._opcode_jp)
        self._register_opcode(Op.CALL, self._opcode_call)
        self._register_opcode(Op.SE_BYTE, self._opcode_se_byte)
        self._register_opcode(Op.SNE_BYTE, self._opcode_sne_byte)
        self._register_opcode(Op.SE_REG, self._opcode_se_reg)
        self._register_opcode(Op.LD_BYTE, self._opcode_ld_byte)
        self._register_opcode(Op.ADD_BYTE, self._opcode_add_byte)
        self._register_opcode(Op.LD_REG, self._opcode_ld_reg)
        self._register_opcode(Op.OR, self._opcode_or)
        self._register_opcode(Op.AND, self._opcode_and)
        self._register_opcode(Op.XOR, self._opcode_xor)
        self._register_opcode(Op.ADD_REG, self._opcode_add_reg)
        self._register_opcode(Op.SUB, self._opcode_sub)
        self._register_opcode(Op.SHR, self._opcode_shr)
        self._register_opcode(Op.SUBN, self._opcode_subn)
        self._register_opcode(Op.SHL, self._opcode_shl)
        self._register_opcode(Op.SNE_REG, self._opcode_sne_reg)
        self._register_opcode(Op.LD_I, self._opcode_ld_i)
        self._register_opcode(Op.JP_V0, self._opcode_jp_v0)
        self._register_opcode(Op.RND, self._opcode_rnd)
        self._register_opcode(Op.DRW, self._opcode_drw)
        self._register_opcode(Op.SKP, self._opcode_skp)
        self._register_opcode(Op.SKNP, self._opcode_sknp)
        self._register_opcode(Op.LD_VX_DT, self._opcode_ld_vx_dt)
        self._register_opcode(Op.LD_VX_K, self._opcode_ld_vx_k)
        self._register_opcode(Op.LD_DT_VX, self._opcode_ld_dt_vx)
        self._register_opcode(Op.LD_ST_VX, self._opcode_ld_st_vx)
        self._register_opcode(Op.ADD_I_VX, self._opcode_add_i_vx)
        self._register_opcode(Op.LD_F_VX, self._opcode_ld_f_vx)
        self._register_opcode(Op.LD_B_VX, self._opcode_ld_b_vx)
        self._register_opcode(Op.LD_MEM_VX, self._opcode_ld_mem_vx)
        self._register_opcode(Op.LD_VX_MEM, self._opcode_ld_vx_mem)

    # ------------------------------------------------------------------
    # Flow control
    # ------------------------------------------------------------------
    def _opcode_cls(self, ins: Instruction) -> None:
        self.hardware.display.clear()

    def _opcode_ret(self, ins: Instruction) -> None:
        self.registers.program_counter = self.stack.pop()

    def _opcode_jp(self, ins: Instruction) -> None:
        self.registers.program_counter = ins.nnn

    def _opcode_call(self, ins: Instruction) -> None:
        self.stack.push(self.registers.program_counter)
        self.registers.program_counter = ins.nnn

    def _opcode_jp_v0(self, ins: Instruction) -> None:
        self.registers.program_counter = ins.nnn + self._v(0x0)

    def _opcode_se_byte(self, ins: Instruction) -> None:
        if self._v(ins.x) == ins.kk:
            self._skip()

    def _opcode_sne_byte(self, ins: Instruction) -> None:
        if self._v(ins.x) != ins.kk:
            self._skip()

    def _opcode_se_reg(self, ins: Instruction) -> None:
        if self._v(ins.x) == self._v(ins.y):
            self._skip()

    def _opcode_sne_reg(self, ins: Instruction) -> None:
        if self._v(ins.x) != self._v(ins.y):
            self._skip()

    # ------------------------------------------------------------------
    # Register arithmetic
    # ------------------------------------------------------------------
    def _opcode_ld_byte(self, ins: Instruction) -> None:
        self._set_v(ins.x, ins.kk)

    def _opcode_add_byte(self, ins: Instruction) -> None:
        self._set_v(ins.x, self._v(ins.x) + ins.kk)

    def _opcode_ld_reg(self, ins: Instruction) -> None:
        self._set_v(ins.x, self._v(ins.y))

    def _opcode_or(self, ins: Instruction) -> None:
        self._set_v(ins.x, self._v(ins.x) | self._v(ins.y))

    def _opcode_and(self, ins: Instruction) -> None:
        self._set_v(ins.x, self._v(ins.x) & self._v(ins.y))

    def _opcode_xor(self, ins: Instruction) -> None:
        self._set_v(ins.x, self._v(ins.x) ^ self._v(ins.y))

    def _opcode_add_reg(self, ins: Instruction) -> None:
        total = self._v(ins.x) + self._v(ins.y)
        self._set_v(ins.x, total)
        self._set_flag(1 if total > 0xFF else 0)

    def _opcode_sub(self, ins: Instruction) -> None:
        vx = self._v(ins.x)
        vy = self._v(ins.y)
        self._set_v(ins.x, vx - vy)
        self._set_flag(1 if vx >= vy else 0)

    def _opcode_shr(self, ins: Instruction) -> None:
        vx = self._v(ins.x)
        self._set_v(ins.x, vx >> 1)
        self._set_flag(vx & 0x01)

    def _opcode_subn(self, ins: Instruction) -> None:
        vx = self._v(ins.x)
        vy = self._v(ins.y)
        self._set_v(ins.x, vy - vx)
        self._set_flag(1 if vy >= vx else 0)

    def _opcode_shl(self, ins: Instruction) -> None:
        vx = self._v(ins.x)
        self._set_v(ins.x, vx << 1)
        self._set_flag((vx >> 7) & 0x01)

    def _opcode_rnd(self, ins: Instruction) -> None:
        self._set_v(ins.x, self.rng.randrange(0x100) & ins.kk)

    # ------------------------------------------------------------------
    # Index register and memory
    # ------------------------------------------------------------------
    def _opcode_ld_i(self, ins: Instruction) -> None:
        self.registers.write_i(ins.nnn)

    def _opcode_add_i_vx(self, ins: Instruction) -> None:
        self.registers.write_i(self.registers.read_i() + self._v(ins.x))

    def _opcode_ld_f_vx(self, ins: Instruction) -> None:
        self.registers.write_i(FONT_START + self._v(ins.x) * FONT_GLYPH_SIZE)

    def _opcode_ld_b_vx(self, ins: Instruction) -> None:
        value = self._v(ins.x)
        self.memory.write_buf(self.registers.read_i(), (value // 100, (value // 10) % 10, value % 10))

    def _opcode_ld_mem_vx(self, ins: Instruction) -> None:
        self.memory.write_buf(self.registers.read_i(), self.registers.read_v_range(0, ins.x + 1))

    def _opcode_ld_vx_mem(self, ins: Instruction) -> None:
        self.registers.write_v_range(0, self.memory.read_range(self.registers.read_i(), ins.x + 1))

    # ------------------------------------------------------------------
    # Display and keypad
    # ------------------------------------------------------------------
    def _opcode_drw(self, ins: Instruction) -> None:
        sprite = self.memory.read_range(self.registers.read_i(), ins.n)
        collided = self.hardware.display.draw_sprite(self._v(ins.x), self._v(ins.y), sprite)
        self._set_flag(1 if collided else 0)

    def _opcode_skp(self, ins: Instruction) -> None:
        if self.hardware.keyboard.is_pressed(self._v(ins.x)):
            self._skip()

    def _opcode_sknp(self, ins: Instruction) -> None:
        if not self.hardware.keyboard.is_pressed(self._v(ins.x)):
            self._skip()

    def _opcode_ld_vx_k(self, ins: Instruction) -> None:
        self.status.waiting_for_key = True
        logger.debug("waiting for key press into V%X", ins.x)
        try:
            key = self.hardware.keyboard.wait_for_key()
        finally:
            self.status.waiting_for_key = False
        self._set_v(ins.x, key)

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------
    def _opcode_ld_vx_dt(self, ins: Instruction) -> None:
        self._set_v(ins.x, self.hardware.delay_timer.read())

    def _opcode_ld_dt_vx(self, ins: Instruction) -> None:
        self.hardware.delay_timer.write(self._v(ins.x))

    def _opcode_ld_st_vx(self, ins: Instruction) -> None:
        self.hardware.sound_timer.write(self._v(ins.x))

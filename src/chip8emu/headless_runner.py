"""Headless runner: execute a CHIP-8 ROM without a window and print the screen."""

from __future__ import annotations

import argparse
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from chip8emu.chip8.computer import Chip8Computer
from chip8emu.config import LOG_LEVELS, configure_logging
from chip8emu.emulator.file import ProgramLoadError
from chip8emu.errors import Chip8Error
from chip8emu.memory import MEMORY_SIZE

DEFAULT_MAX_CYCLES = 10_000
ADDRESS_MASK = MEMORY_SIZE - 1

EXIT_OK = 0
EXIT_LOAD_FAILED = 1
EXIT_ENGINE_ERROR = 2


@dataclass(frozen=True)
class DumpRange:
    """Inclusive memory range used for dumping."""

    start: int
    end: int


@dataclass(frozen=True)
class KeyPress:
    """Key held from ``cycle`` for ``duration`` instructions."""

    cycle: int
    key: int
    duration: int = 16


def _parse_hex(value: str, *, limit: int = ADDRESS_MASK) -> int:
    text = value.strip().lower().removeprefix("0x")
    if not text:
        raise ValueError("empty hexadecimal value")
    result = int(text, 16)
    if not 0 <= result <= limit:
        raise ValueError(f"{value} outside 0..{limit:X}")
    return result


def _parse_range(spec: str) -> DumpRange:
    start_str, sep, end_str = spec.partition(":")
    if not sep:
        raise ValueError("range must look like START:END")
    start, end = _parse_hex(start_str), _parse_hex(end_str)
    if end < start:
        raise ValueError("range end must be >= start")
    return DumpRange(start, end)


def _parse_key(spec: str) -> KeyPress:
    """Parse ``KEY@CYCLE`` or ``KEY@CYCLE+DURATION``."""

    key_str, sep, timing = spec.partition("@")
    if not sep:
        raise ValueError("key specification must look like KEY@CYCLE")
    key = _parse_hex(key_str, limit=0xF)
    cycle_str, plus, duration_str = timing.partition("+")
    cycle = int(cycle_str)
    duration = int(duration_str) if plus else KeyPress.duration
    if cycle < 0 or duration <= 0:
        raise ValueError("cycle must be >= 0 and duration > 0")
    return KeyPress(cycle, key, duration)


def _merge_ranges(ranges: Sequence[DumpRange]) -> List[DumpRange]:
    """Coalesce overlapping or adjacent ranges into sorted disjoint ones."""

    merged: List[DumpRange] = []
    for current in sorted(ranges, key=lambda r: (r.start, r.end)):
        if merged and current.start <= merged[-1].end + 1:
            last = merged.pop()
            current = DumpRange(last.start, max(last.end, current.end))
        merged.append(current)
    return merged


def _format_hex_dump(memory, dump_ranges: Sequence[DumpRange]) -> str:
    """Format 16-byte rows covering each range, one block per range."""

    header = "ADDR " + " ".join(f"+{offset:X}" for offset in range(16))
    blocks: List[str] = []
    for dump_range in dump_ranges:
        rows = [header]
        for base in range(dump_range.start & ~0x0F, dump_range.end + 1, 16):
            data = memory.read_range(base, 16)
            rows.append(f"{base:03X}  " + " ".join(f"{value:02X}" for value in data))
        blocks.append("\n".join(rows))
    return "\n\n".join(blocks)


def _format_registers(computer: Chip8Computer) -> str:
    regs = computer.cpu_core.registers
    v_values = " ".join(f"V{idx:X}={value:02X}" for idx, value in enumerate(regs.v))
    return (
        f"PC={regs.program_counter:03X} I={regs.index:03X} "
        f"DT={computer.delay_timer_value():02X} ST={computer.sound_timer_value():02X}\n{v_values}"
    )


def _waits_for_key(computer: Chip8Computer) -> bool:
    """True when the next instruction is FX0A and no key is held."""

    if computer.keyboard.pressed_key is not None:
        return False
    try:
        opcode = computer.cpu_core.fetch()
    except Chip8Error:
        return False
    return opcode & 0xF0FF == 0xF00A


def _replay_presses(computer: Chip8Computer, key_presses: Sequence[KeyPress], stop: threading.Event) -> None:
    period = 1.0 / computer.get_clock_frequency()
    elapsed = 0
    for press in sorted(key_presses, key=lambda p: p.cycle):
        if stop.wait(max(0, press.cycle - elapsed) * period):
            return
        computer.keyboard.set_key(press.key)
        if stop.wait(press.duration * period):
            return
        computer.keyboard.set_key(None)
        elapsed = press.cycle + press.duration


def _execute_program(
    computer: Chip8Computer,
    *,
    max_cycles: int,
    key_presses: Sequence[KeyPress],
    max_seconds: float | None,
) -> int:
    """Run paced for ``max_seconds`` or unpaced for ``max_cycles``.

    Paced mode ignores ``max_cycles`` and replays presses on wall-clock time.

    In unpaced mode key presses are scheduled by instruction count; when the
    program blocks on FX0A the next scheduled press is delivered early. With
    nothing left to deliver the run ends instead of blocking forever.
    """

    if max_seconds is not None:
        stop = threading.Event()
        replay = threading.Thread(
            target=_replay_presses, args=(computer, key_presses, stop), name="Chip8KeyReplay", daemon=True
        )
        replay.start()
        computer.start()
        try:
            computer.join(max_seconds)
        finally:
            stop.set()
            computer.stop()
            if not computer.join(1.0):
                print("Execution stopped: waiting for a key press", file=sys.stderr)
        if computer.error is not None:
            raise computer.error
        return computer.instruction_count

    pending = sorted(key_presses, key=lambda p: p.cycle)
    active: List[KeyPress] = []
    keyboard = computer.keyboard
    executed = 0
    while executed < max_cycles:
        while pending and pending[0].cycle <= executed:
            active.append(pending.pop(0))
        active = [press for press in active if executed < press.cycle + press.duration]
        keyboard.set_key(active[-1].key if active else None)
        if _waits_for_key(computer):
            if not pending:
                print("Execution stopped: waiting for a key press", file=sys.stderr)
                break
            early = pending.pop(0)
            active.append(KeyPress(executed, early.key, early.duration))
            continue
        executed += computer.tick(1)
    return executed


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chip8emu-headless",
        description="Run a CHIP-8 ROM without a window and print the final screen.",
    )
    parser.add_argument("rom", help="Path to the CHIP-8 ROM image")
    parser.add_argument(
        "--cycles",
        type=int,
        default=DEFAULT_MAX_CYCLES,
        help="Number of instructions to execute (default: %(default)s)",
    )
    parser.add_argument(
        "--seconds",
        type=float,
        default=None,
        help="Run the paced loop for this many wall-clock seconds instead of unpaced",
    )
    parser.add_argument("--clock", type=float, default=500.0, help="Instructions per second in paced mode")
    parser.add_argument(
        "--key",
        action="append",
        default=[],
        help="Hold keypad KEY (hex) at CYCLE for DURATION instructions: KEY@CYCLE[+DURATION]. Repeatable.",
    )
    parser.add_argument(
        "--dump-range",
        action="append",
        default=[],
        help="Memory range to dump in START:END hex form (inclusive). Repeatable.",
    )
    parser.add_argument("--dump", type=str, default=None, help="File path for the memory dump (defaults to stdout)")
    parser.add_argument("--registers", action="store_true", help="Print registers and timers after the run")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default="WARNING")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_argument_parser()
    args = parser.parse_args(argv)

    key_presses: List[KeyPress] = []
    for spec in args.key:
        try:
            key_presses.append(_parse_key(spec))
        except ValueError as exc:
            parser.error(f"invalid key press '{spec}': {exc}")

    dump_ranges: List[DumpRange] = []
    for spec in args.dump_range:
        try:
            dump_ranges.append(_parse_range(spec))
        except ValueError as exc:
            parser.error(f"invalid dump range '{spec}': {exc}")

    if args.cycles <= 0:
        parser.error("cycles must be positive")
    if args.clock <= 0:
        parser.error("clock must be positive")

    configure_logging(args.log_level)

    computer = Chip8Computer(clock_speed=args.clock)
    try:
        try:
            computer.load_user_program(args.rom)
        except (OSError, ProgramLoadError) as exc:
            print(f"Failed to load ROM: {exc}", file=sys.stderr)
            return EXIT_LOAD_FAILED

        status = EXIT_OK
        try:
            _execute_program(
                computer,
                max_cycles=args.cycles,
                key_presses=key_presses,
                max_seconds=args.seconds,
            )
        except Chip8Error as exc:
            print(f"Emulation halted: {exc}", file=sys.stderr)
            status = EXIT_ENGINE_ERROR

        print(computer.display.render_text())
        if args.registers:
            print(_format_registers(computer))
        merged = _merge_ranges(dump_ranges)
        if merged:
            text = _format_hex_dump(computer.memory, merged)
            if args.dump is None:
                print(text)
            else:
                Path(args.dump).write_text(text + "\n")
        return status
    finally:
        computer.shutdown()


if __name__ == "__main__":
    raise SystemExit(main())

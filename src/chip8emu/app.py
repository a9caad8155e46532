"""CHIP-8 emulator pygame application."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Dict, Iterable, List, Optional

from chip8emu.chip8.computer import Chip8Computer
from chip8emu.chip8.keyboard import DEFAULT_KEYMAP, Chip8Keyboard
from chip8emu.config import LOG_LEVELS, EmulatorConfig, configure_logging
from chip8emu.emulator.file import ProgramInfo, ProgramLoadError
from chip8emu.errors import Chip8Error

logger = logging.getLogger(__name__)

BASE_CAPTION = "CHIP-8 Emulator"

# pygame key constants for printable keys equal their ASCII code.
KEYPAD_MAP: Dict[int, int] = {ord(char): key for char, key in DEFAULT_KEYMAP.items()}

STATUS_LABELS = {
    Chip8Computer.STATUS_RUNNING: "Running",
    Chip8Computer.STATUS_PAUSED: "Paused",
    Chip8Computer.STATUS_STOPPED: "Stopped",
}


def _handle_key_event(keyboard: Chip8Keyboard, held: List[int], key: int, pressed: bool) -> None:
    """Track held keypad keys and publish the most recent one."""

    mapping = KEYPAD_MAP.get(key)
    if mapping is None:
        return
    if pressed:
        if mapping in held:
            held.remove(mapping)
        held.append(mapping)
    elif mapping in held:
        held.remove(mapping)
    keyboard.set_key(held[-1] if held else None)


def _build_caption(info: Optional[ProgramInfo], status: int, waiting: bool) -> str:
    caption = BASE_CAPTION
    if info is not None and info.name:
        caption = f"{caption} | Program: {info.name}"
    label = STATUS_LABELS.get(status, "?")
    if waiting and status == Chip8Computer.STATUS_RUNNING:
        label = "Waiting for key"
    return f"{caption} | {label}"


def _pygame_loop(computer: Chip8Computer, config: EmulatorConfig) -> None:
    import pygame  # type: ignore

    display = computer.display
    display.foreground = config.foreground
    display.background = config.background
    keyboard = computer.keyboard
    beeper = computer.hardware.beeper
    held: List[int] = []

    pygame.init()
    screen = pygame.display.set_mode((display.WIDTH * config.scale, display.HEIGHT * config.scale))
    pygame.display.set_caption(_build_caption(computer.program_info, computer.get_running_status(), False))
    clock = pygame.time.Clock()

    computer.start()
    last_generation = -1
    last_caption = ""
    running = True
    try:
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                    continue
                if event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                        continue
                    if event.key == pygame.K_p:
                        if computer.get_running_status() == computer.STATUS_PAUSED:
                            computer.resume()
                        else:
                            computer.pause()
                        continue
                    _handle_key_event(keyboard, held, event.key, True)
                elif event.type == pygame.KEYUP:
                    _handle_key_event(keyboard, held, event.key, False)

            if computer.error is not None:
                break
            if not computer.is_running():
                running = False

            beeper.update(computer.sound_timer_value())

            if display.generation != last_generation:
                last_generation = display.generation
                screen.blit(display.render_pygame_surface(config.scale), (0, 0))
                pygame.display.flip()

            caption = _build_caption(
                computer.program_info,
                computer.get_running_status(),
                computer.cpu_core.paused,
            )
            if caption != last_caption:
                pygame.display.set_caption(caption)
                last_caption = caption

            clock.tick(config.fps)
    finally:
        computer.shutdown()
        pygame.quit()

    if computer.error is not None:
        raise computer.error


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chip8emu", description="CHIP-8 emulator")
    parser.add_argument("rom", help="Path to the CHIP-8 ROM image")
    parser.add_argument(
        "--clock",
        type=float,
        default=None,
        help="Instructions executed per second (default: 500)",
    )
    parser.add_argument("--scale", type=int, default=None, help="Integer scaling factor for the display (default: 10)")
    parser.add_argument("--fps", type=int, default=None, help="Target frames per second for the window (default: 60)")
    parser.add_argument(
        "--audio",
        dest="audio",
        action="store_true",
        help="Enable the square-wave buzzer (requires pygame mixer)",
    )
    parser.add_argument(
        "--no-audio",
        dest="audio",
        action="store_false",
        help="Force the buzzer off even if CHIP8EMU_AUDIO enables it",
    )
    parser.set_defaults(audio=None)
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default: WARNING or CHIP8EMU_LOG_LEVEL)",
    )
    return parser


def main(argv: Iterable[str] | None = None) -> None:
    parser = _build_argument_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        config = EmulatorConfig.from_env().with_overrides(
            clock_speed=args.clock,
            scale=args.scale,
            fps=args.fps,
            audio=args.audio,
            log_level=args.log_level,
        )
    except ValueError as exc:
        raise SystemExit(str(exc))

    configure_logging(config.log_level)

    computer = Chip8Computer(clock_speed=config.clock_speed, enable_audio=config.audio)
    try:
        computer.load_user_program(args.rom)
    except (OSError, ProgramLoadError) as exc:
        computer.shutdown()
        raise SystemExit(f"Failed to load ROM: {exc}")

    try:
        _pygame_loop(computer, config)
    except Chip8Error as exc:
        print(f"Emulation halted: {exc}", file=sys.stderr)
        raise SystemExit(1)
    except RuntimeError as exc:
        raise SystemExit(str(exc))


if __name__ == "__main__":
    main()

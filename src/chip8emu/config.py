"""Runtime configuration for the emulator front ends."""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
import os
from typing import Mapping, Optional

from chip8emu.system.computer import DEFAULT_CLOCK_SPEED

ENV_CLOCK_HZ = "CHIP8EMU_CLOCK_HZ"
ENV_SCALE = "CHIP8EMU_SCALE"
ENV_FPS = "CHIP8EMU_FPS"
ENV_AUDIO = "CHIP8EMU_AUDIO"
ENV_LOG_LEVEL = "CHIP8EMU_LOG_LEVEL"

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class EmulatorConfig:
    clock_speed: float = DEFAULT_CLOCK_SPEED
    scale: int = 10
    fps: int = 60
    audio: bool = False
    log_level: str = "WARNING"
    foreground: int = 0xFFFFFF
    background: int = 0x000000

    def __post_init__(self) -> None:
        if self.clock_speed <= 0:
            raise ValueError("clock speed must be positive")
        if self.scale <= 0:
            raise ValueError("scale must be positive")
        if self.fps <= 0:
            raise ValueError("fps must be positive")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"unknown log level: {self.log_level}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EmulatorConfig":
        env = os.environ if environ is None else environ
        config = cls()
        if ENV_CLOCK_HZ in env:
            config = replace(config, clock_speed=_parse_float(ENV_CLOCK_HZ, env[ENV_CLOCK_HZ]))
        if ENV_SCALE in env:
            config = replace(config, scale=_parse_int(ENV_SCALE, env[ENV_SCALE]))
        if ENV_FPS in env:
            config = replace(config, fps=_parse_int(ENV_FPS, env[ENV_FPS]))
        if ENV_AUDIO in env:
            config = replace(config, audio=_parse_bool(ENV_AUDIO, env[ENV_AUDIO]))
        if ENV_LOG_LEVEL in env:
            config = replace(config, log_level=env[ENV_LOG_LEVEL].upper())
        return config

    def with_overrides(self, **overrides: object) -> "EmulatorConfig":
        """Return a copy with every non-None override applied."""

        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **values)  # type: ignore[arg-type]


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level.upper()), format=LOG_FORMAT)


def _parse_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number: {value!r}") from exc


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer: {value!r}") from exc


def _parse_bool(name: str, value: str) -> bool:
    text = value.strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean: {value!r}")

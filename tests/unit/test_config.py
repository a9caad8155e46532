from __future__ import annotations

import pytest

from chip8emu.config import EmulatorConfig


def test_defaults() -> None:
    config = EmulatorConfig.from_env({})
    assert config.clock_speed == 500.0
    assert config.scale == 10
    assert config.fps == 60
    assert config.audio is False
    assert config.log_level == "WARNING"


def test_environment_overrides() -> None:
    config = EmulatorConfig.from_env(
        {
            "CHIP8EMU_CLOCK_HZ": "700",
            "CHIP8EMU_SCALE": "4",
            "CHIP8EMU_AUDIO": "yes",
            "CHIP8EMU_LOG_LEVEL": "debug",
        }
    )
    assert config.clock_speed == 700.0
    assert config.scale == 4
    assert config.audio is True
    assert config.log_level == "DEBUG"


def test_cli_overrides_win_over_environment() -> None:
    config = EmulatorConfig.from_env({"CHIP8EMU_SCALE": "4", "CHIP8EMU_AUDIO": "1"})
    config = config.with_overrides(scale=8, audio=False, fps=None)
    assert config.scale == 8
    assert config.audio is False
    assert config.fps == 60


@pytest.mark.parametrize(
    "environ",
    [
        {"CHIP8EMU_CLOCK_HZ": "fast"},
        {"CHIP8EMU_CLOCK_HZ": "0"},
        {"CHIP8EMU_SCALE": "-2"},
        {"CHIP8EMU_AUDIO": "maybe"},
        {"CHIP8EMU_LOG_LEVEL": "loud"},
    ],
)
def test_invalid_environment(environ) -> None:
    with pytest.raises(ValueError):
        EmulatorConfig.from_env(environ)

"""Error taxonomy shared by the CHIP-8 core components."""

from __future__ import annotations


class Chip8Error(RuntimeError):
    """Base class for conditions that halt the running program."""


class OutOfBoundsError(Chip8Error):
    """Raised when an address or register index is outside its valid range."""


class InvalidRangeError(Chip8Error):
    """Raised when a ranged access has a malformed length or overflows."""


class StackOverflowError(Chip8Error):
    """Raised when pushing onto a full call stack."""


class StackUnderflowError(Chip8Error):
    """Raised when popping from an empty call stack."""


class InvalidOpcodeError(Chip8Error):
    """Raised when a fetched instruction word matches no known pattern."""

    def __init__(self, opcode: int, address: int | None = None) -> None:
        self.opcode = opcode & 0xFFFF
        self.address = address
        if address is None:
            message = f"invalid opcode {self.opcode:04X}"
        else:
            message = f"invalid opcode {self.opcode:04X} at {address:03X}"
        super().__init__(message)


__all__ = [
    "Chip8Error",
    "OutOfBoundsError",
    "InvalidRangeError",
    "StackOverflowError",
    "StackUnderflowError",
    "InvalidOpcodeError",
]

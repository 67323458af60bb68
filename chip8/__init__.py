"""CHIP-8 Interpreter Core Package."""

from .machine import Machine
from .runner import run_program, RunOptions, RunResult
from .errors import (
    Chip8Error,
    BoundsError,
    DecodeError,
    StackOverflowError,
    StackUnderflowError,
    ImageFormatError,
)

__all__ = [
    "Machine",
    "run_program",
    "RunOptions",
    "RunResult",
    "Chip8Error",
    "BoundsError",
    "DecodeError",
    "StackOverflowError",
    "StackUnderflowError",
    "ImageFormatError",
]

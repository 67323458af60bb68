"""Custom exceptions for the CHIP-8 interpreter."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class MachineSnapshot:
    """Copy of the machine state taken when a fault is raised."""
    pc: int
    registers: list[int]
    stack: list[int]
    sp: int
    index: int
    delay_timer: int
    sound_timer: int
    memory: bytes = field(default=b"", repr=False)

    def to_dict(self) -> dict:
        return {
            "pc": self.pc,
            "registers": list(self.registers),
            "stack": list(self.stack),
            "sp": self.sp,
            "index": self.index,
            "delay_timer": self.delay_timer,
            "sound_timer": self.sound_timer,
        }


@dataclass
class ErrorInfo:
    """Structured error information for API responses."""
    type: str
    message: str
    step: int
    addr: int
    opcode: Optional[int] = None
    snapshot: Optional[MachineSnapshot] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "message": self.message,
            "step": self.step,
            "addr": self.addr,
            "opcode": self.opcode,
            "snapshot": self.snapshot.to_dict() if self.snapshot else None,
        }


class Chip8Error(Exception):
    """Base exception for all interpreter faults."""

    def __init__(
        self,
        message: str,
        step: int = 0,
        addr: int = 0,
        opcode: Optional[int] = None,
        snapshot: Optional[MachineSnapshot] = None,
    ):
        super().__init__(message)
        self.message = message
        self.step = step
        self.addr = addr
        self.opcode = opcode
        self.snapshot = snapshot

    def to_error_info(self) -> ErrorInfo:
        return ErrorInfo(
            type=self.__class__.__name__,
            message=self.message,
            step=self.step,
            addr=self.addr,
            opcode=self.opcode,
            snapshot=self.snapshot,
        )


class BoundsError(Chip8Error):
    """Program counter or memory address out of range."""
    pass


class DecodeError(Chip8Error):
    """Opcode matches no known instruction."""
    pass


class StackOverflowError(Chip8Error):
    """CALL with every stack slot in use."""
    pass


class StackUnderflowError(Chip8Error):
    """RET with an empty call stack."""
    pass


class ImageFormatError(Chip8Error):
    """Malformed program image text."""
    pass

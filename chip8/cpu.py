"""CPU register state for the CHIP-8 interpreter."""

from .errors import StackOverflowError, StackUnderflowError

PROGRAM_START = 0x200
REGISTER_COUNT = 16
STACK_DEPTH = 16
FLAG = 0xF


class CPU:
    """Register file, index register, program counter, call stack and timers."""

    def __init__(self, start_address: int = PROGRAM_START):
        self.start_address = start_address
        self.reset()

    def reset(self) -> None:
        """Reset CPU to initial state."""
        self.v: list[int] = [0] * REGISTER_COUNT
        self.index: int = 0
        self.pc: int = self.start_address
        self.stack: list[int] = [0] * STACK_DEPTH
        self.sp: int = -1  # empty
        self.delay_timer: int = 0
        self.sound_timer: int = 0

    def set_v(self, x: int, value: int) -> None:
        """Set Vx, wrapping modulo 256."""
        self.v[x] = value & 0xFF

    def set_flag(self, value: bool) -> None:
        self.v[FLAG] = 1 if value else 0

    def set_index(self, value: int) -> None:
        self.index = value & 0xFFFF

    def push(self, addr: int) -> None:
        """Push a return address (pre-increment SP)."""
        if self.sp >= STACK_DEPTH - 1:
            raise StackOverflowError(
                f"Call stack overflow: more than {STACK_DEPTH} nested calls",
                addr=self.pc,
            )
        self.sp += 1
        self.stack[self.sp] = addr & 0xFFFF

    def pop(self) -> int:
        """Pop a return address (post-decrement SP)."""
        if self.sp < 0:
            raise StackUnderflowError("Return with empty call stack", addr=self.pc)
        addr = self.stack[self.sp]
        self.sp -= 1
        return addr

    def get_state(self) -> dict:
        """Get current register state as dictionary."""
        return {
            "v": list(self.v),
            "i": self.index,
            "pc": self.pc,
            "sp": self.sp,
            "stack": list(self.stack),
            "dt": self.delay_timer,
            "st": self.sound_timer,
        }

"""Fetch/decode/execute engine for the CHIP-8 interpreter."""

import logging
import random
from typing import Optional
from .cpu import CPU
from .memory import Memory
from .display import Framebuffer, COLLISION_ANY, COLLISION_MODES
from .decoder import InstructionDefinition, decode, arguments_of, disassemble
from .instructions import ExecutionContext, execute_instruction
from .loader import ProgramImage, load_program
from .errors import Chip8Error, BoundsError, MachineSnapshot

logger = logging.getLogger(__name__)

LAST_INSTRUCTION_ADDR = 4094


class Machine:
    """One interpreter instance owning its CPU, memory and framebuffer.

    The host calls :meth:`load` once and then :meth:`step` as often as it
    likes. A step either completes or raises a :class:`Chip8Error` carrying a
    snapshot of the machine; in that case PC is left at the faulting
    instruction and no other state has changed.
    """

    def __init__(self, collision_mode: str = COLLISION_ANY, rng: Optional[random.Random] = None):
        if collision_mode not in COLLISION_MODES:
            raise ValueError(f"Unknown collision mode: {collision_mode}")
        self.cpu = CPU()
        self.memory = Memory()
        self.display = Framebuffer()
        self.context = ExecutionContext(
            collision_mode=collision_mode,
            rng=rng if rng is not None else random.Random(),
        )
        self.steps = 0
        self.last_opcode: Optional[int] = None
        self.last_instruction: Optional[InstructionDefinition] = None

    def reset(self) -> None:
        """Reset registers, memory and screen to power-on state."""
        self.cpu.reset()
        self.memory.clear()
        self.display.clear()
        self.steps = 0
        self.last_opcode = None
        self.last_instruction = None

    def load(self, image: ProgramImage) -> int:
        """Load the glyph table and a program image."""
        return load_program(self.memory, image, start_address=self.cpu.start_address)

    def fetch(self) -> int:
        """Read the opcode at PC and advance PC by 2."""
        pc = self.cpu.pc
        if pc < 0 or pc > LAST_INSTRUCTION_ADDR:
            raise BoundsError(f"Memory out-of-bounds fetch at {pc:#05x}", addr=pc)
        opcode = self.memory.read_word(pc)
        self.cpu.pc = pc + 2
        return opcode

    def decode(self, opcode: int) -> InstructionDefinition:
        return decode(opcode)

    def execute(self, opcode: int, instr: InstructionDefinition) -> None:
        new_pc = execute_instruction(
            instr.id,
            arguments_of(opcode, instr),
            self.cpu,
            self.memory,
            self.display,
            self.context,
        )
        if new_pc is not None:
            self.cpu.pc = new_pc

    def step(self) -> None:
        """Run exactly one instruction."""
        addr = self.cpu.pc
        opcode: Optional[int] = None
        try:
            opcode = self.fetch()
            instr = self.decode(opcode)
            self.execute(opcode, instr)
        except Chip8Error as e:
            self.cpu.pc = addr
            e.step = self.steps + 1
            e.addr = addr
            if e.opcode is None:
                e.opcode = opcode
            e.snapshot = self.snapshot()
            raise

        self.steps += 1
        self.last_opcode = opcode
        self.last_instruction = instr
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%03x: %04x // %s", addr, opcode, disassemble(opcode, instr))

    def snapshot(self) -> MachineSnapshot:
        """Copy of the registers, stack, timers and memory."""
        cpu = self.cpu
        return MachineSnapshot(
            pc=cpu.pc,
            registers=list(cpu.v),
            stack=list(cpu.stack),
            sp=cpu.sp,
            index=cpu.index,
            delay_timer=cpu.delay_timer,
            sound_timer=cpu.sound_timer,
            memory=self.memory.snapshot(),
        )

    def current_instruction_text(self) -> str:
        """Disassemble the instruction at PC without executing it."""
        opcode = self.memory.read_word(self.cpu.pc)
        return f"{opcode:04x} // {disassemble(opcode)}"

    def dump(self) -> str:
        """Memory dump as paired hex bytes."""
        return self.memory.dump()

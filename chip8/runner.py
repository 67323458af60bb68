"""Program runner with tracing for the CHIP-8 interpreter."""

import logging
import random
from dataclasses import dataclass, field
from typing import Optional, Union
from .display import COLLISION_ANY
from .decoder import InstructionDefinition, arguments_of, disassemble
from .loader import ProgramImage, parse_hex_image
from .machine import Machine
from .errors import Chip8Error, ErrorInfo

logger = logging.getLogger(__name__)


@dataclass
class RunOptions:
    """Options for program execution."""
    max_steps: int = 10000
    trace: bool = True
    trace_include_registers: bool = False
    collision_mode: str = COLLISION_ANY
    stop_on_self_jump: bool = True
    seed: Optional[int] = None


@dataclass
class TraceRow:
    """Single row of execution trace."""
    step: int
    addr: int
    opcode: int
    pc: int
    i: int
    instr_text: str = ""
    v: Optional[list[int]] = None

    def to_dict(self, include_registers: bool) -> dict:
        result = {
            "step": self.step,
            "addr": self.addr,
            "opcode": self.opcode,
            "pc": self.pc,
            "i": self.i,
        }
        if include_registers:
            result["v"] = self.v
        result["instr_text"] = self.instr_text
        return result


@dataclass
class RunResult:
    """Result of program execution."""
    status: str  # "ok" | "error"
    halted: bool
    steps_executed: int
    final_state: dict
    display: list[str]
    trace: list[dict] = field(default_factory=list)
    error: Optional[ErrorInfo] = None

    def to_dict(self) -> dict:
        result = {
            "status": self.status,
            "halted": self.halted,
            "steps_executed": self.steps_executed,
            "final_state": self.final_state,
            "display": self.display,
            "trace": self.trace,
        }
        if self.error:
            result["error"] = self.error.to_dict()
        return result


def _is_self_jump(instr: InstructionDefinition, opcode: int, addr: int) -> bool:
    """True for ``JP nnn`` targeting its own address, the usual idle loop."""
    return instr.id == "JP_NNN" and arguments_of(opcode, instr)["nnn"] == addr


def run_program(
    program: Union[str, ProgramImage],
    options: Optional[RunOptions] = None,
) -> RunResult:
    """Load and run a program until it faults, idles or hits the step limit.

    Args:
        program: Hex image text, raw ROM bytes, or a sequence of opcodes
        options: Execution options

    Returns:
        RunResult with execution status, screen contents and trace
    """
    if options is None:
        options = RunOptions()

    machine = Machine(
        collision_mode=options.collision_mode,
        rng=random.Random(options.seed),
    )
    trace_rows: list[dict] = []
    error_info: Optional[ErrorInfo] = None
    halted = False

    try:
        image = parse_hex_image(program) if isinstance(program, str) else program
        machine.load(image)
    except Chip8Error as e:
        return RunResult(
            status="error",
            halted=False,
            steps_executed=0,
            final_state=machine.cpu.get_state(),
            display=machine.display.render_text(),
            error=e.to_error_info(),
        )

    try:
        while machine.steps < options.max_steps:
            addr = machine.cpu.pc
            machine.step()
            opcode = machine.last_opcode

            if options.trace:
                row = TraceRow(
                    step=machine.steps,
                    addr=addr,
                    opcode=opcode,
                    pc=machine.cpu.pc,
                    i=machine.cpu.index,
                    instr_text=disassemble(opcode, machine.last_instruction),
                    v=list(machine.cpu.v) if options.trace_include_registers else None,
                )
                trace_rows.append(row.to_dict(include_registers=options.trace_include_registers))

            if options.stop_on_self_jump and _is_self_jump(machine.last_instruction, opcode, addr):
                halted = True
                break
    except Chip8Error as e:
        logger.warning("Run stopped at %03x after %d steps: %s", e.addr, machine.steps, e.message)
        error_info = e.to_error_info()

    return RunResult(
        status="ok" if error_info is None else "error",
        halted=halted,
        steps_executed=machine.steps,
        final_state=machine.cpu.get_state(),
        display=machine.display.render_text(),
        trace=trace_rows,
        error=error_info,
    )

"""Instruction table and opcode decoder for the CHIP-8 interpreter.

Each entry describes how to recognise one opcode family: an opcode belongs to
a definition when ``opcode & mask == pattern``. Arguments are pulled out of the
opcode with their own mask and right shift:

    x    register index   (0x0F00 >> 8)
    y    register index   (0x00F0 >> 4)
    n    nibble count     (0x000F)
    nnn  12-bit address   (0x0FFF)
    kk   8-bit literal    (0x00FF)
"""

from dataclasses import dataclass
from typing import Optional
from .errors import DecodeError


@dataclass(frozen=True)
class ArgumentRule:
    """How to extract one named argument from an opcode."""
    name: str
    mask: int
    shift: int

    def extract(self, opcode: int) -> int:
        return (opcode & self.mask) >> self.shift

    def insert(self, value: int) -> int:
        return (value << self.shift) & self.mask

    @property
    def max_value(self) -> int:
        return self.mask >> self.shift


@dataclass(frozen=True)
class InstructionDefinition:
    """Static description of one instruction."""
    id: str
    description: str
    template: str  # str.format template for disassembly
    mask: int
    pattern: int
    arguments: tuple[ArgumentRule, ...] = ()

    def matches(self, opcode: int) -> bool:
        return (opcode & self.mask) == self.pattern


X = ArgumentRule("x", 0x0F00, 8)
Y = ArgumentRule("y", 0x00F0, 4)
N = ArgumentRule("n", 0x000F, 0)
NNN = ArgumentRule("nnn", 0x0FFF, 0)
KK = ArgumentRule("kk", 0x00FF, 0)


def _op(instr_id, description, template, mask, pattern, *arguments) -> InstructionDefinition:
    return InstructionDefinition(instr_id, description, template, mask, pattern, tuple(arguments))


# Ordered instruction table
INSTRUCTIONS: tuple[InstructionDefinition, ...] = (
    _op("CLS", "Clear the screen.", "CLS", 0xFFFF, 0x00E0),
    _op("RET", "Return from a subroutine.", "RET", 0xFFFF, 0x00EE),
    _op("JP_NNN", "Jump to address nnn.", "JP 0x{nnn:03X}", 0xF000, 0x1000, NNN),
    _op("CALL_NNN", "Call subroutine at nnn.", "CALL 0x{nnn:03X}", 0xF000, 0x2000, NNN),
    _op("SE_VX_KK", "Skip next instruction if Vx == kk.", "SE V{x:X}, 0x{kk:02X}", 0xF000, 0x3000, X, KK),
    _op("SNE_VX_KK", "Skip next instruction if Vx != kk.", "SNE V{x:X}, 0x{kk:02X}", 0xF000, 0x4000, X, KK),
    _op("SE_VX_VY", "Skip next instruction if Vx == Vy.", "SE V{x:X}, V{y:X}", 0xF00F, 0x5000, X, Y),
    _op("LD_VX_KK", "Load value kk into register Vx.", "LD V{x:X}, 0x{kk:02X}", 0xF000, 0x6000, X, KK),
    _op("ADD_VX_KK", "Add kk to Vx, no carry flag.", "ADD V{x:X}, 0x{kk:02X}", 0xF000, 0x7000, X, KK),
    _op("LD_VX_VY", "Copy Vy into Vx.", "LD V{x:X}, V{y:X}", 0xF00F, 0x8000, X, Y),
    _op("OR_VX_VY", "Vx := Vx OR Vy.", "OR V{x:X}, V{y:X}", 0xF00F, 0x8001, X, Y),
    _op("AND_VX_VY", "Vx := Vx AND Vy.", "AND V{x:X}, V{y:X}", 0xF00F, 0x8002, X, Y),
    _op("XOR_VX_VY", "Vx := Vx XOR Vy.", "XOR V{x:X}, V{y:X}", 0xF00F, 0x8003, X, Y),
    _op("ADD_VX_VY", "Vx := Vx + Vy, VF := carry.", "ADD V{x:X}, V{y:X}", 0xF00F, 0x8004, X, Y),
    _op("SUB_VX_VY", "Vx := Vx - Vy, VF := Vx > Vy.", "SUB V{x:X}, V{y:X}", 0xF00F, 0x8005, X, Y),
    _op("SHR_VX_VY", "Vx := Vx >> 1, VF := shifted-out bit.", "SHR V{x:X}, V{y:X}", 0xF00F, 0x8006, X, Y),
    _op("SUBN_VX_VY", "Vx := Vy - Vx, VF := Vy > Vx.", "SUBN V{x:X}, V{y:X}", 0xF00F, 0x8007, X, Y),
    _op("SHL_VX_VY", "Vx := Vx << 1, VF := shifted-out bit.", "SHL V{x:X}, V{y:X}", 0xF00F, 0x800E, X, Y),
    _op("SNE_VX_VY", "Skip next instruction if Vx != Vy.", "SNE V{x:X}, V{y:X}", 0xF00F, 0x9000, X, Y),
    _op("LD_I_NNN", "Load address nnn into register I.", "LD I, 0x{nnn:03X}", 0xF000, 0xA000, NNN),
    _op("JP_V0_NNN", "Jump to address nnn + V0.", "JP V0, 0x{nnn:03X}", 0xF000, 0xB000, NNN),
    _op("RND_VX_KK", "Vx := random byte AND kk.", "RND V{x:X}, 0x{kk:02X}", 0xF000, 0xC000, X, KK),
    _op(
        "DRW_VX_VY_N",
        "Draw n-byte sprite from memory at I at (Vx, Vy), VF := collision.",
        "DRW V{x:X}, V{y:X}, 0x{n:X}",
        0xF000, 0xD000, X, Y, N,
    ),
    _op("LD_VX_DT", "Vx := delay timer.", "LD V{x:X}, DT", 0xF0FF, 0xF007, X),
    _op("LD_DT_VX", "Delay timer := Vx.", "LD DT, V{x:X}", 0xF0FF, 0xF015, X),
    _op("LD_ST_VX", "Sound timer := Vx.", "LD ST, V{x:X}", 0xF0FF, 0xF018, X),
    _op("ADD_I_VX", "I := I + Vx.", "ADD I, V{x:X}", 0xF0FF, 0xF01E, X),
    _op("LD_F_VX", "I := address of glyph for digit Vx.", "LD F, V{x:X}", 0xF0FF, 0xF029, X),
    _op("LD_B_VX", "Store BCD of Vx at I, I+1, I+2.", "LD B, V{x:X}", 0xF0FF, 0xF033, X),
    _op("LD_I_VX", "Store V0..Vx in memory starting at I.", "LD [I], V{x:X}", 0xF0FF, 0xF055, X),
    _op("LD_VX_I", "Load V0..Vx from memory starting at I.", "LD V{x:X}, [I]", 0xF0FF, 0xF065, X),
)

INSTRUCTIONS_BY_ID: dict[str, InstructionDefinition] = {instr.id: instr for instr in INSTRUCTIONS}

VALID_IDS = frozenset(INSTRUCTIONS_BY_ID)


def decode(opcode: int) -> InstructionDefinition:
    """Return the first definition matching ``opcode``."""
    for instr in INSTRUCTIONS:
        if instr.matches(opcode):
            return instr
    raise DecodeError(f"Invalid instruction {opcode:04x}", opcode=opcode)


def arguments_of(opcode: int, instr: InstructionDefinition) -> dict[str, int]:
    """Extract the named argument values of ``opcode``."""
    return {rule.name: rule.extract(opcode) for rule in instr.arguments}


def encode(instr: InstructionDefinition, **args: int) -> int:
    """Build the opcode for ``instr`` with the given argument values."""
    opcode = instr.pattern
    for rule in instr.arguments:
        if rule.name not in args:
            raise ValueError(f"{instr.id}: missing argument {rule.name!r}")
        value = args[rule.name]
        if not 0 <= value <= rule.max_value:
            raise ValueError(f"{instr.id}: argument {rule.name}={value} out of range")
        opcode |= rule.insert(value)
    unknown = set(args) - {rule.name for rule in instr.arguments}
    if unknown:
        raise ValueError(f"{instr.id}: unexpected arguments {sorted(unknown)}")
    return opcode


def disassemble(opcode: int, instr: Optional[InstructionDefinition] = None) -> str:
    """Human-readable mnemonic for ``opcode``."""
    if instr is None:
        instr = decode(opcode)
    return instr.template.format(**arguments_of(opcode, instr))

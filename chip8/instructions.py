"""Instruction execution for the CHIP-8 interpreter.

Executors run after fetch has already advanced PC past the instruction, so
``cpu.pc`` is the address of the next instruction. An executor returns the new
PC for jumps, calls, returns and taken skips, or None to fall through.

Executors validate memory and stack access before mutating anything, so a
fault leaves the machine as it was before the step.
"""

import random
from dataclasses import dataclass, field
from typing import Callable, Optional
from .cpu import CPU
from .memory import Memory
from .display import Framebuffer, COLLISION_ANY

GLYPH_HEIGHT = 5


@dataclass
class ExecutionContext:
    """Per-machine settings that instructions consult."""
    collision_mode: str = COLLISION_ANY
    rng: random.Random = field(default_factory=random.Random)


Args = dict[str, int]

# Instruction executor type
InstructionExecutor = Callable[[Args, CPU, Memory, Framebuffer, ExecutionContext], Optional[int]]


def execute_cls(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """CLS: clear the screen"""
    fb.clear()
    return None


def execute_ret(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """RET: PC := pop()"""
    return cpu.pop()


def execute_jp(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """JP nnn: PC := nnn"""
    return args["nnn"]


def execute_call(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """CALL nnn: push(PC), PC := nnn"""
    cpu.push(cpu.pc)
    return args["nnn"]


def _skip_if(cpu: CPU, condition: bool) -> Optional[int]:
    if condition:
        return cpu.pc + 2
    return None


def execute_se_kk(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """SE Vx, kk: skip if Vx == kk"""
    return _skip_if(cpu, cpu.v[args["x"]] == args["kk"])


def execute_sne_kk(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """SNE Vx, kk: skip if Vx != kk"""
    return _skip_if(cpu, cpu.v[args["x"]] != args["kk"])


def execute_se_vy(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """SE Vx, Vy: skip if Vx == Vy"""
    return _skip_if(cpu, cpu.v[args["x"]] == cpu.v[args["y"]])


def execute_sne_vy(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """SNE Vx, Vy: skip if Vx != Vy"""
    return _skip_if(cpu, cpu.v[args["x"]] != cpu.v[args["y"]])


def execute_ld_kk(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """LD Vx, kk: Vx := kk"""
    cpu.set_v(args["x"], args["kk"])
    return None


def execute_add_kk(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """ADD Vx, kk: Vx := Vx + kk (VF untouched)"""
    x = args["x"]
    cpu.set_v(x, cpu.v[x] + args["kk"])
    return None


def execute_ld_vy(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """LD Vx, Vy: Vx := Vy"""
    cpu.set_v(args["x"], cpu.v[args["y"]])
    return None


def execute_or(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """OR Vx, Vy"""
    x = args["x"]
    cpu.set_v(x, cpu.v[x] | cpu.v[args["y"]])
    return None


def execute_and(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """AND Vx, Vy"""
    x = args["x"]
    cpu.set_v(x, cpu.v[x] & cpu.v[args["y"]])
    return None


def execute_xor(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """XOR Vx, Vy"""
    x = args["x"]
    cpu.set_v(x, cpu.v[x] ^ cpu.v[args["y"]])
    return None


def execute_add_vy(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """ADD Vx, Vy: Vx := Vx + Vy, VF := carry"""
    x = args["x"]
    total = cpu.v[x] + cpu.v[args["y"]]
    cpu.set_v(x, total)
    cpu.set_flag(total > 0xFF)
    return None


def execute_sub(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """SUB Vx, Vy: Vx := Vx - Vy, VF := Vx > Vy"""
    x = args["x"]
    vx, vy = cpu.v[x], cpu.v[args["y"]]
    cpu.set_v(x, vx - vy)
    cpu.set_flag(vx > vy)
    return None


def execute_subn(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """SUBN Vx, Vy: Vx := Vy - Vx, VF := Vy > Vx"""
    x = args["x"]
    vx, vy = cpu.v[x], cpu.v[args["y"]]
    cpu.set_v(x, vy - vx)
    cpu.set_flag(vy > vx)
    return None


def execute_shr(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """SHR Vx: Vx := Vx >> 1, VF := old LSB (Vy is ignored)"""
    x = args["x"]
    vx = cpu.v[x]
    cpu.set_v(x, vx >> 1)
    cpu.set_flag(vx & 0x01)
    return None


def execute_shl(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """SHL Vx: Vx := Vx << 1, VF := old MSB (Vy is ignored)"""
    x = args["x"]
    vx = cpu.v[x]
    cpu.set_v(x, vx << 1)
    cpu.set_flag(vx & 0x80)
    return None


def execute_ld_i(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """LD I, nnn: I := nnn"""
    cpu.set_index(args["nnn"])
    return None


def execute_jp_v0(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """JP V0, nnn: PC := nnn + V0"""
    return args["nnn"] + cpu.v[0]


def execute_rnd(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """RND Vx, kk: Vx := random byte AND kk"""
    cpu.set_v(args["x"], ctx.rng.randint(0, 0xFF) & args["kk"])
    return None


def execute_drw(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """DRW Vx, Vy, n: XOR sprite at I onto the screen, VF := collision"""
    sprite = mem.read_block(cpu.index, args["n"])
    collided = fb.draw_sprite(
        cpu.v[args["x"]],
        cpu.v[args["y"]],
        sprite,
        collision_mode=ctx.collision_mode,
    )
    cpu.set_flag(collided)
    return None


def execute_ld_vx_dt(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """LD Vx, DT"""
    cpu.set_v(args["x"], cpu.delay_timer)
    return None


def execute_ld_dt(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """LD DT, Vx"""
    cpu.delay_timer = cpu.v[args["x"]]
    return None


def execute_ld_st(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """LD ST, Vx"""
    cpu.sound_timer = cpu.v[args["x"]]
    return None


def execute_add_i(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """ADD I, Vx: I := I + Vx (no flag)"""
    cpu.set_index(cpu.index + cpu.v[args["x"]])
    return None


def execute_ld_f(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """LD F, Vx: I := glyph address for digit Vx"""
    cpu.set_index(cpu.v[args["x"]] * GLYPH_HEIGHT)
    return None


def execute_ld_b(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """LD B, Vx: BCD of Vx at I, I+1, I+2"""
    value = cpu.v[args["x"]]
    mem.write_block(cpu.index, (value // 100, (value // 10) % 10, value % 10))
    return None


def execute_store_regs(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """LD [I], Vx: MEM[I..I+x] := V0..Vx (I unchanged)"""
    mem.write_block(cpu.index, cpu.v[:args["x"] + 1])
    return None


def execute_load_regs(args: Args, cpu: CPU, mem: Memory, fb: Framebuffer, ctx: ExecutionContext) -> Optional[int]:
    """LD Vx, [I]: V0..Vx := MEM[I..I+x] (I unchanged)"""
    for i, value in enumerate(mem.read_block(cpu.index, args["x"] + 1)):
        cpu.set_v(i, value)
    return None


# Instruction dispatch table
INSTRUCTION_EXECUTORS: dict[str, InstructionExecutor] = {
    "CLS": execute_cls,
    "RET": execute_ret,
    "JP_NNN": execute_jp,
    "CALL_NNN": execute_call,
    "SE_VX_KK": execute_se_kk,
    "SNE_VX_KK": execute_sne_kk,
    "SE_VX_VY": execute_se_vy,
    "LD_VX_KK": execute_ld_kk,
    "ADD_VX_KK": execute_add_kk,
    "LD_VX_VY": execute_ld_vy,
    "OR_VX_VY": execute_or,
    "AND_VX_VY": execute_and,
    "XOR_VX_VY": execute_xor,
    "ADD_VX_VY": execute_add_vy,
    "SUB_VX_VY": execute_sub,
    "SHR_VX_VY": execute_shr,
    "SUBN_VX_VY": execute_subn,
    "SHL_VX_VY": execute_shl,
    "SNE_VX_VY": execute_sne_vy,
    "LD_I_NNN": execute_ld_i,
    "JP_V0_NNN": execute_jp_v0,
    "RND_VX_KK": execute_rnd,
    "DRW_VX_VY_N": execute_drw,
    "LD_VX_DT": execute_ld_vx_dt,
    "LD_DT_VX": execute_ld_dt,
    "LD_ST_VX": execute_ld_st,
    "ADD_I_VX": execute_add_i,
    "LD_F_VX": execute_ld_f,
    "LD_B_VX": execute_ld_b,
    "LD_I_VX": execute_store_regs,
    "LD_VX_I": execute_load_regs,
}


def execute_instruction(
    instr_id: str,
    args: Args,
    cpu: CPU,
    mem: Memory,
    fb: Framebuffer,
    ctx: ExecutionContext,
) -> Optional[int]:
    """Execute a single decoded instruction.

    Returns:
        New PC value if the instruction transfers control, None otherwise
    """
    executor = INSTRUCTION_EXECUTORS.get(instr_id)
    if executor is None:
        raise ValueError(f"No executor for instruction: {instr_id}")
    return executor(args, cpu, mem, fb, ctx)

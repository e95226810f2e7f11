# src/retro_chip8/arch/chip8/instructions/alu.py
"""
CHIP-8 算術論理演算命令 (7XNN, 8XY_, CXNN)。

8bitの演算は全て256で折り返します。キャリー/ボローは折り返し前の値から求め、
結果レジスタへの書き込みの後にVFへ書き込みます（VFが結果レジスタの場合はフラグが残る）。
"""
from retro_chip8.arch.chip8.state import Chip8CpuState
from retro_chip8.core.instruction import Instruction
from .base import ExecutionContext

# @intent:responsibility 7XNN (ADD Vx, byte)。VFは変化しません。
def execute_add_vx_nn(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    state.v[instruction.x] = (state.v[instruction.x] + instruction.nn) & 0xFF

def execute_ld_vx_vy(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    state.v[instruction.x] = state.v[instruction.y]

# --- Logical Operations (OR, AND, XOR) ---

def _finish_logic(state: Chip8CpuState, ctx: ExecutionContext) -> None:
    if ctx.quirks.logic_resets_vf:
        state.vf = 0

def execute_or(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    state.v[instruction.x] |= state.v[instruction.y]
    _finish_logic(state, ctx)

def execute_and(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    state.v[instruction.x] &= state.v[instruction.y]
    _finish_logic(state, ctx)

def execute_xor(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    state.v[instruction.x] ^= state.v[instruction.y]
    _finish_logic(state, ctx)

# --- Arithmetic Operations ---

# @intent:responsibility 8XY4 (ADD Vx, Vy)。VF = キャリー。
def execute_add_vx_vy(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    total = state.v[instruction.x] + state.v[instruction.y]
    state.v[instruction.x] = total & 0xFF
    state.vf = 1 if total > 0xFF else 0

# @intent:responsibility 8XY5 (SUB Vx, Vy)。VF = NOT ボロー (Vx >= Vy のとき1)。
def execute_sub_vx_vy(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    vx, vy = state.v[instruction.x], state.v[instruction.y]
    state.v[instruction.x] = (vx - vy) & 0xFF
    state.vf = 1 if vx >= vy else 0

# @intent:responsibility 8XY7 (SUBN Vx, Vy)。Vx = Vy - Vx, VF = NOT ボロー (Vy >= Vx のとき1)。
def execute_subn(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    vx, vy = state.v[instruction.x], state.v[instruction.y]
    state.v[instruction.x] = (vy - vx) & 0xFF
    state.vf = 1 if vy >= vx else 0

# --- Shift Operations ---

def _shift_source(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> int:
    register = instruction.y if ctx.quirks.shift_uses_vy else instruction.x
    return state.v[register]

# @intent:responsibility 8XY6 (SHR Vx {, Vy})。VF = 押し出された最下位ビット。
def execute_shr(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    source = _shift_source(state, ctx, instruction)
    state.v[instruction.x] = source >> 1
    state.vf = source & 0x01

# @intent:responsibility 8XYE (SHL Vx {, Vy})。VF = 押し出された最上位ビット。
def execute_shl(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    source = _shift_source(state, ctx, instruction)
    state.v[instruction.x] = (source << 1) & 0xFF
    state.vf = (source >> 7) & 0x01

# @intent:responsibility CXNN (RND Vx, byte)。乱数源はコンテキストから注入されます。
def execute_rnd(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    state.v[instruction.x] = ctx.rng.randrange(256) & instruction.nn

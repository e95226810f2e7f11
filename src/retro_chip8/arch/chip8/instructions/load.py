# src/retro_chip8/arch/chip8/instructions/load.py
"""
CHIP-8 ロード/ストア命令（レジスタ、インデックス、タイマ、BCD、メモリブロック転送）の実装。
"""
from retro_chip8.arch.chip8.fonts import glyph_address
from retro_chip8.arch.chip8.state import Chip8CpuState
from retro_chip8.core.instruction import Instruction
from .base import ADDRESS_MASK, ExecutionContext, index_address

# @intent:responsibility 6XNN (LD Vx, byte)。
def execute_ld_vx_nn(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    state.v[instruction.x] = instruction.nn

# @intent:responsibility ANNN (LD I, addr)。
def execute_ld_i(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    state.i = instruction.nnn

# --- Timers ---

def execute_ld_vx_dt(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    state.v[instruction.x] = state.delay_timer

def execute_ld_dt_vx(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    state.delay_timer = state.v[instruction.x]

def execute_ld_st_vx(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    state.sound_timer = state.v[instruction.x]

# --- Index register ---

# @intent:responsibility FX1E (ADD I, Vx)。Iは12bitのアドレス空間で折り返します。VFは変化しません。
def execute_add_i_vx(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    state.i = (state.i + state.v[instruction.x]) & ADDRESS_MASK

# @intent:responsibility FX29 (LD F, Vx)。Vxの下位ニブルに対応するフォントグリフを指します。
def execute_ld_f_vx(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    state.i = glyph_address(state.v[instruction.x])

# @intent:responsibility FX33 (LD B, Vx)。百の位、十の位、一の位を I, I+1, I+2 に格納します。
def execute_ld_b_vx(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    value = state.v[instruction.x]
    digits = (value // 100, (value // 10) % 10, value % 10)
    for offset, digit in enumerate(digits):
        ctx.bus.write(index_address(state, offset), digit)

# --- Memory block transfer ---

# @intent:responsibility FX55 (LD [I], Vx)。V0..Vx を I から順に格納します。
def execute_ld_mem_vx(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    for register in range(instruction.x + 1):
        ctx.bus.write(index_address(state, register), state.v[register])
    if ctx.quirks.load_store_increments_i:
        state.i = index_address(state, instruction.x + 1)

# @intent:responsibility FX65 (LD Vx, [I])。I から順に V0..Vx へ読み込みます。
def execute_ld_vx_mem(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    for register in range(instruction.x + 1):
        state.v[register] = ctx.bus.read(index_address(state, register))
    if ctx.quirks.load_store_increments_i:
        state.i = index_address(state, instruction.x + 1)

# src/retro_chip8/arch/chip8/instructions/control.py
"""
CHIP-8 制御命令（分岐、サブルーチン、条件スキップ）の実装。
"""
from retro_chip8.arch.chip8.state import Chip8CpuState
from retro_chip8.common.errors import StackOverflowError, StackUnderflowError, UnknownInstructionError
from retro_chip8.core.instruction import Instruction
from .base import ExecutionContext, skip_next

# @intent:responsibility 0NNN (SYS addr)。機械語ルーチンは実行できないため、無視するか致命的エラーとします。
def execute_sys(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    if ctx.quirks.sys_is_fatal:
        raise UnknownInstructionError(instruction.word, (state.pc - 2) & 0xFFFF)

# @intent:responsibility 00EE (RET)。
def execute_ret(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    if not state.stack:
        raise StackUnderflowError(f"RET with empty call stack at PC={(state.pc - 2) & 0xFFFF:#06x}.")
    state.pc = state.stack.pop()

# @intent:responsibility 1NNN (JP addr)。
def execute_jp(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    state.pc = instruction.nnn

# @intent:responsibility 2NNN (CALL addr)。現在のPC（CALLの次の命令）を積んでからジャンプします。
# @intent:rationale スタック深さの上限超過は最古のエントリを捨てるのではなく、致命的エラーとします。
def execute_call(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    if len(state.stack) >= ctx.quirks.stack_depth:
        raise StackOverflowError(
            f"CALL {instruction.nnn:#05x} exceeds call stack depth {ctx.quirks.stack_depth}."
        )
    state.stack.append(state.pc)
    state.pc = instruction.nnn

# @intent:responsibility BNNN (JP V0, addr)。jump_uses_vx が有効な場合は BXNN (NNN + VX) として動作します。
def execute_jp_v0(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    register = instruction.x if ctx.quirks.jump_uses_vx else 0
    state.pc = (instruction.nnn + state.v[register]) & 0xFFFF

# --- Skip family ---

def execute_se_vx_nn(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    if state.v[instruction.x] == instruction.nn:
        skip_next(state)

def execute_sne_vx_nn(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    if state.v[instruction.x] != instruction.nn:
        skip_next(state)

def execute_se_vx_vy(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    if state.v[instruction.x] == state.v[instruction.y]:
        skip_next(state)

def execute_sne_vx_vy(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    if state.v[instruction.x] != state.v[instruction.y]:
        skip_next(state)

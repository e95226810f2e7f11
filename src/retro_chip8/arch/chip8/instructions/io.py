# src/retro_chip8/arch/chip8/instructions/io.py
"""
CHIP-8 入出力命令（画面消去、スプライト描画、キー入力）の実装。
"""
from retro_chip8.arch.chip8.state import Chip8CpuState
from retro_chip8.core.instruction import Instruction
from .base import ExecutionContext, index_address, skip_next

# @intent:responsibility 00E0 (CLS)。
def execute_cls(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    ctx.framebuffer.clear()

# @intent:responsibility DXYN (DRW Vx, Vy, nibble)。
# @intent:note VFは描画前に0にリセットされ、スプライト全体で1回でも衝突があれば1になります。
def execute_drw(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    # 座標はVFを消す前に取る。DFYN/DXFNではVF自身が座標になる
    x, y = state.v[instruction.x], state.v[instruction.y]
    rows = [ctx.bus.read(index_address(state, row)) for row in range(instruction.n)]
    state.vf = 0
    if ctx.framebuffer.draw_sprite(x, y, rows, wrap=ctx.quirks.sprite_wrap):
        state.vf = 1

# @intent:responsibility EX9E (SKP Vx)。
def execute_skp(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    if ctx.keypad.is_pressed(state.v[instruction.x] & 0xF):
        skip_next(state)

# @intent:responsibility EXA1 (SKNP Vx)。
def execute_sknp(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    if not ctx.keypad.is_pressed(state.v[instruction.x] & 0xF):
        skip_next(state)

# @intent:responsibility FX0A (LD Vx, K)。キーが押されるまでPCを戻して同じ命令を繰り返します。
# @intent:rationale コアはブロックしないため、待機はtickごとの再実行で表現します。タイマはホスト側で進みます。
def execute_ld_vx_k(state: Chip8CpuState, ctx: ExecutionContext, instruction: Instruction) -> None:
    key = ctx.keypad.first_pressed()
    if key is None:
        state.waiting_for_key = True
        state.pc = (state.pc - 2) & 0xFFFF
        return
    state.waiting_for_key = False
    state.v[instruction.x] = key

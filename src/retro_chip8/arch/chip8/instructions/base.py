# src/retro_chip8/arch/chip8/instructions/base.py
"""
CHIP-8 命令ハンドラの共通基盤。

全てのハンドラは (state, ctx, instruction) を受け取り、1回の状態遷移を行って戻ります。
ハンドラが追加のフェッチやデコードを行うことはありません。
"""
import random
from dataclasses import dataclass

from retro_chip8.arch.chip8.display import Framebuffer
from retro_chip8.arch.chip8.keypad import Keypad
from retro_chip8.arch.chip8.state import Chip8CpuState
from retro_chip8.config.models import Quirks
from retro_chip8.transport.bus import Bus

ADDRESS_MASK = 0xFFF

# @intent:responsibility ハンドラが参照するCPU外部の協調オブジェクトをまとめます。
@dataclass
class ExecutionContext:
    bus: Bus
    framebuffer: Framebuffer
    keypad: Keypad
    quirks: Quirks
    rng: random.Random

# @intent:responsibility 次の命令を1つ読み飛ばします（PCは既に現在の命令の次を指している）。
def skip_next(state: Chip8CpuState) -> None:
    state.pc = (state.pc + 2) & 0xFFFF

# @intent:responsibility I + offset を4KBのアドレス空間内に折り返します。
def index_address(state: Chip8CpuState, offset: int = 0) -> int:
    return (state.i + offset) & ADDRESS_MASK

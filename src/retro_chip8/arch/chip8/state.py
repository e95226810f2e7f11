# src/retro_chip8/arch/chip8/state.py
"""
CHIP-8 CPU固有の状態定義。
"""
from dataclasses import dataclass, field
from typing import List

from retro_chip8.core.state import CpuState

PROGRAM_START_ADDRESS = 0x200
REGISTER_COUNT = 16

# @intent:responsibility CHIP-8のレジスタ、コールスタック、タイマの状態を保持します。
@dataclass
class Chip8CpuState(CpuState):
    """
    CHIP-8 CPUのレジスタ状態を保持するデータクラス。

    VF は汎用レジスタであると同時に、キャリー/ボロー/衝突フラグとして
    算術命令や描画命令の副作用で上書きされます。
    """
    pc: int = PROGRAM_START_ADDRESS
    i: int = 0x000  # Index register
    v: List[int] = field(default_factory=lambda: [0] * REGISTER_COUNT)
    stack: List[int] = field(default_factory=list)  # Return addresses
    delay_timer: int = 0
    sound_timer: int = 0

    halted: bool = False # 致命的エラーで停止中
    waiting_for_key: bool = False # FX0A でキー入力待ち

    # @intent:accessor スタックの深さをスタックポインタとして公開します。
    @property
    def sp(self) -> int:
        return len(self.stack)

    @property
    def vf(self) -> int:
        return self.v[0xF]

    @vf.setter
    def vf(self, value: int) -> None:
        self.v[0xF] = value & 0xFF

# src/retro_chip8/core/state.py
"""
Core Layer (CPU状態)

このモジュールは、CPUの基本的な状態（レジスタ群）を保持するデータ構造を定義します。
"""
import copy
from dataclasses import dataclass

# @intent:responsibility CPUのレジスタ状態を保持します。アーキテクチャ固有のレジスタはこれを拡張します。
@dataclass
class CpuState:
    """
    CPUのレジスタ状態を保持するデータクラス。
    具体的なレジスタ（V0-VF, Iなど）はサブクラスで追加されます。
    """
    pc: int = 0x0000  # Program Counter

    # @intent:responsibility Snapshot用に、ミュータブルなフィールドを含めて完全に独立したコピーを返します。
    # @intent:rationale Snapshotに実行中のStateそのものを渡すと、後続の命令で内容が変わってしまうため。
    def copy(self) -> "CpuState":
        return copy.deepcopy(self)

# src/retro_chip8/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、1回のtickの結果としてのCPUとバスの状態を記録した不変のデータ構造を定義します。
UIへの情報提供と、デバッグ時の状態記録に用いる責務を負います。
"""
from dataclasses import dataclass, field
from typing import List, Optional

from retro_chip8.core.instruction import Instruction
from retro_chip8.core.state import CpuState
from retro_chip8.transport.bus import BusAccess

# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True)
class Metadata:
    """
    実行に関するメタデータ（累計tick数、トレース文字列など）を記録するデータクラス。
    """
    cycle_count: int
    trace: Optional[str] = None # 例: "0x0200: CLS"
    drew: bool = False # このtickでフレームバッファが変更されたか

# @intent:responsibility ある一時点におけるCPUとバスの状態を不変に記録します。
@dataclass(frozen=True)
class Snapshot:
    """
    ある一時点における、CPUとバスの状態を記録した不変のデータ構造。
    stateは生成時にコピーされたものであり、後続の実行の影響を受けません。
    """
    state: CpuState
    instruction: Instruction
    metadata: Metadata
    bus_activity: List[BusAccess] = field(default_factory=list)

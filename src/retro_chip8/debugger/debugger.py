# src/retro_chip8/debugger/debugger.py
"""
デバッガ

CHIP-8 CPUを1命令ずつ、またはブレークポイントに当たるまで進めます。
実行した命令のSnapshotを一定数まで保持しており、step_back で直前の命令を取り消せます。
"""
import logging
import re
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, List, Optional

from retro_chip8.common.errors import Chip8Error
from retro_chip8.core.cpu import AbstractCpu
from retro_chip8.core.snapshot import Snapshot
from retro_chip8.core.state import CpuState
from retro_chip8.transport.bus import BusAccessType

logger = logging.getLogger(__name__)

_V_REGISTER = re.compile(r"^V([0-9A-F])$", re.IGNORECASE)
_TIMER_ALIASES = {"DT": "delay_timer", "ST": "sound_timer"}

def read_register(state: CpuState, name: str) -> Optional[int]:
    """
    "V0".."VF"、"I"、"PC"、"SP"、"DT"、"ST" などの名前で状態の値を引きます。
    数値でない属性や存在しない名前は None です。
    """
    match = _V_REGISTER.match(name)
    if match and hasattr(state, "v"):
        return state.v[int(match.group(1), 16)]
    value = getattr(state, _TIMER_ALIASES.get(name.upper(), name.lower()), None)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value

class BreakpointConditionType(Enum):
    PC_MATCH = "PC_MATCH"               # 次に実行する命令のアドレス
    MEMORY_READ = "MEMORY_READ"
    MEMORY_WRITE = "MEMORY_WRITE"
    REGISTER_VALUE = "REGISTER_VALUE"   # 実行後に指定値になった
    REGISTER_CHANGE = "REGISTER_CHANGE" # 実行の前後で値が変わった
    DRAW = "DRAW"                       # CLS/DRW で画面が変わった

# @intent:responsibility 停止条件1件。不変なので add/remove で同値比較できます。
@dataclass(frozen=True)
class BreakpointCondition:
    condition_type: BreakpointConditionType
    value: Optional[int] = None
    address: Optional[int] = None
    register_name: Optional[str] = None
    enabled: bool = True

    def matches_pc(self, pc: int) -> bool:
        return self.enabled and self.condition_type == BreakpointConditionType.PC_MATCH and self.value == pc

    # @intent:responsibility 実行済み1命令の結果がこの条件に当たるかを判定します。PC_MATCHは対象外。
    def matches_step(self, snapshot: Snapshot, before: CpuState) -> bool:
        if not self.enabled:
            return False
        kind = self.condition_type
        if kind in (BreakpointConditionType.MEMORY_READ, BreakpointConditionType.MEMORY_WRITE):
            wanted = BusAccessType.READ if kind == BreakpointConditionType.MEMORY_READ else BusAccessType.WRITE
            return any(a.access_type == wanted and a.address == self.address for a in snapshot.bus_activity)
        if kind == BreakpointConditionType.REGISTER_VALUE:
            return bool(self.register_name) and read_register(snapshot.state, self.register_name) == self.value
        if kind == BreakpointConditionType.REGISTER_CHANGE:
            return bool(self.register_name) and (
                read_register(before, self.register_name) != read_register(snapshot.state, self.register_name))
        if kind == BreakpointConditionType.DRAW:
            return snapshot.metadata.drew
        return False

class Debugger:
    def __init__(self, cpu: AbstractCpu, history_limit: int = 1000):
        self._cpu = cpu
        self._breakpoints: List[BreakpointCondition] = []
        self._running = False
        self._state_before_step: CpuState = cpu.get_state().copy()
        self._last_snapshot: Optional[Snapshot] = None
        self._history: Deque[Snapshot] = deque()
        self._history_limit = history_limit
        # 履歴をすべて巻き戻した時の戻り先。古い履歴が捨てられるたびに前へ進む
        self._base_state: CpuState = cpu.get_state().copy()

    def add_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition not in self._breakpoints:
            self._breakpoints.append(condition)

    def update_breakpoint(self, old_condition: BreakpointCondition, new_condition: BreakpointCondition) -> None:
        for index, existing in enumerate(self._breakpoints):
            if existing == old_condition:
                self._breakpoints[index] = new_condition
                return

    def remove_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition in self._breakpoints:
            self._breakpoints.remove(condition)

    def get_breakpoints(self) -> List[BreakpointCondition]:
        return list(self._breakpoints)

    def get_history(self) -> List[Snapshot]:
        return list(self._history)

    def get_last_snapshot(self) -> Optional[Snapshot]:
        return self._last_snapshot

    def is_running(self) -> bool:
        return self._running

    def _stops_at(self, pc: int) -> bool:
        return any(bp.matches_pc(pc) for bp in self._breakpoints)

    def _stops_after(self, snapshot: Snapshot) -> bool:
        return any(bp.matches_step(snapshot, self._state_before_step) for bp in self._breakpoints)

    # @intent:responsibility 1命令実行し、そのSnapshotを履歴に積んで返します。
    def step_instruction(self) -> Snapshot:
        self._state_before_step = self._cpu.get_state().copy()
        snapshot = self._cpu.step()
        self._last_snapshot = snapshot
        self._history.append(snapshot)
        while len(self._history) > self._history_limit:
            self._base_state = self._history.popleft().state
        return snapshot

    def step_back(self) -> Optional[Snapshot]:
        """
        直前の1命令を取り消します。

        その命令が書き込んだバイトを元の値へ戻し、CPU状態を1つ前のSnapshotへ復元します。
        フレームバッファは戻しません。履歴の先頭まで戻った場合は None を返します。
        """
        if not self._history:
            return None

        undone = self._history.pop()
        bus = self._cpu.get_bus()
        writes = [a for a in undone.bus_activity
                  if a.access_type == BusAccessType.WRITE and a.previous_data is not None]
        for access in reversed(writes):
            bus.load(access.address, access.previous_data)

        previous = self._history[-1] if self._history else None
        self._cpu.restore_state(previous.state if previous else self._base_state)
        self._last_snapshot = previous
        return previous

    # @intent:responsibility ブレークポイント、stop()、max_steps のいずれかまで実行を続けます。
    # @intent:post-condition 致命的エラーで止まった場合は is_running() を False にしてから再送出します。
    def run(self, max_steps: Optional[int] = None) -> Optional[Snapshot]:
        self._running = True
        executed = 0
        try:
            # 停止中のPCにブレークポイントがあっても、再開時は1命令進める
            if self._stops_at(self._cpu.get_state().pc):
                self.step_instruction()
                executed += 1

            while self._running and (max_steps is None or executed < max_steps):
                pc = self._cpu.get_state().pc
                if self._stops_at(pc):
                    logger.info("Breakpoint hit at PC: %#06x", pc)
                    break
                snapshot = self.step_instruction()
                executed += 1
                if self._stops_after(snapshot):
                    logger.info("Breakpoint hit after instruction, PC: %#06x", snapshot.state.pc)
                    break
        except Chip8Error:
            logger.info("Execution stopped by fatal error after %d steps.", executed)
            raise
        finally:
            self._running = False
        return self._last_snapshot

    def stop(self) -> None:
        self._running = False

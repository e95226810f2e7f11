# src/retro_chip8/core/cpu.py
"""
命令サイクルの骨組み。

step() が取り込み、解読、PC前進、実行、記録の順序を固定し、
各段の中身はアーキテクチャ側のサブクラスが埋めます。
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, List

from retro_chip8.common.errors import Chip8Error
from retro_chip8.common.types import DisassemblyLine, RegisterLayoutInfo
from retro_chip8.core.instruction import Instruction
from retro_chip8.core.snapshot import Metadata, Snapshot
from retro_chip8.core.state import CpuState
from retro_chip8.transport.bus import Bus

logger = logging.getLogger(__name__)

class AbstractCpu(ABC):
    def __init__(self, bus: Bus):
        self._bus = bus
        self._state: CpuState = self._create_initial_state()
        self._cycle_count = 0

    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        ...

    def reset(self) -> None:
        self._state = self._create_initial_state()
        self._cycle_count = 0

    # @intent:note 返すのは実体です。書き換えると次の命令に効きます。
    def get_state(self) -> CpuState:
        return self._state

    # @intent:responsibility 保存済みの状態へ戻します。呼び出し側の履歴を汚さないようコピーを採用します。
    def restore_state(self, state: CpuState) -> None:
        self._state = state.copy()

    def get_bus(self) -> Bus:
        return self._bus

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    # @intent:pre-condition PCはまだ進めない。前進は _update_pc の仕事です。
    @abstractmethod
    def _fetch(self) -> int:
        ...

    @abstractmethod
    def _decode(self, word: int) -> Instruction:
        ...

    @abstractmethod
    def _execute(self, instruction: Instruction) -> None:
        ...

    def step(self) -> Snapshot:
        """
        1命令を実行し、実行後の状態とその命令のメモリアクセスをSnapshotにまとめて返します。

        実行できない状態 (ROM未ロード、停止中) や、命令が致命的エラーを起こした場合は
        Chip8Error を送出します。後者では送出前に _handle_fatal が呼ばれます。
        """
        # 前の命令の外で発生したアクセス (ローダーなど) は記録に含めない
        self._bus.get_and_clear_activity_log()
        start_pc = self._state.pc
        self._check_ready()

        try:
            instruction = self._decode(self._fetch())
            self._update_pc(instruction)
            self._execute(instruction)
        except Chip8Error as error:
            self._handle_fatal(start_pc, error)
            raise

        return self._create_snapshot(start_pc, instruction)

    def tick(self) -> Snapshot:
        return self.step()

    def _check_ready(self) -> None:
        pass

    def _handle_fatal(self, initial_pc: int, error: Chip8Error) -> None:
        logger.error("Fatal error at PC=%#06x: %s", initial_pc, error)

    def _update_pc(self, instruction: Instruction) -> None:
        self._state.pc = (self._state.pc + instruction.length) & 0xFFFF

    def _create_snapshot(self, initial_pc: int, instruction: Instruction) -> Snapshot:
        self._cycle_count += 1
        trace = f"{initial_pc:#06x}: {instruction.text()}"
        logger.debug(trace)
        metadata = Metadata(cycle_count=self._cycle_count, trace=trace, drew=self._did_draw(instruction))
        return Snapshot(
            state=self._state.copy(),
            instruction=instruction,
            metadata=metadata,
            bus_activity=self._bus.get_and_clear_activity_log(),
        )

    # @intent:responsibility この命令で画面が変わったか。描画を持たないCPUでは常にFalse。
    def _did_draw(self, instruction: Instruction) -> bool:
        return False

    # @intent:responsibility UI向けに "名前 -> 値" の表を返します。UIはCPUの内部構造を知りません。
    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        ...

    @abstractmethod
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        ...

    @abstractmethod
    def disassemble(self, start_addr: int, length: int) -> List[DisassemblyLine]:
        ...

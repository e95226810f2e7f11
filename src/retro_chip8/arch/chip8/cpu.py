# src/retro_chip8/arch/chip8/cpu.py
"""
CHIP-8 CPUエミュレーションの中心モジュール。
"""
import logging
import random
from pathlib import Path
from typing import Dict, List, Optional, Union

from retro_chip8.arch.chip8.display import Framebuffer
from retro_chip8.arch.chip8.fonts import FONT_DATA, FONT_END_ADDRESS, FONT_START_ADDRESS, load_font
from retro_chip8.arch.chip8.instructions import ExecutionContext, decode_opcode, execute_instruction
from retro_chip8.arch.chip8.keypad import Keypad
from retro_chip8.arch.chip8.state import REGISTER_COUNT, Chip8CpuState
from retro_chip8.common.errors import (
    Chip8Error, CpuHaltedError, FetchOutOfBoundsError, RomNotLoadedError, UnknownInstructionError
)
from retro_chip8.common.types import DisassemblyLine, RegisterInfo, RegisterLayoutInfo
from retro_chip8.config.models import Quirks
from retro_chip8.core.cpu import AbstractCpu
from retro_chip8.core.instruction import Instruction, Opcode
from retro_chip8.loader.loader import RomLoader
from retro_chip8.transport.bus import RAM, ROM, Bus

logger = logging.getLogger(__name__)

MEMORY_SIZE = 0x1000

# @intent:responsibility CHIP-8の標準メモリマップ（フォントROM + プログラムRAM）を持つバスを生成します。
def create_bus() -> Bus:
    bus = Bus()
    font_size = len(FONT_DATA)
    bus.register_device(FONT_START_ADDRESS, FONT_END_ADDRESS, ROM(font_size))
    bus.register_device(FONT_END_ADDRESS + 1, MEMORY_SIZE - 1, RAM(MEMORY_SIZE - font_size))
    return bus

# @intent:responsibility CHIP-8 CPUの具体的なエミュレーションロジックを提供する。
class Chip8Cpu(AbstractCpu):
    """
    CHIP-8 インタプリタ本体。

    ホストは命令レート(例: 700Hz)で step()/tick() を、それとは独立に60Hzで tick_timers() を呼び出します。
    コアはスレッドセーフではありません。共有する場合は SharedMachine を介してください。
    """
    def __init__(
        self,
        bus: Optional[Bus] = None,
        framebuffer: Optional[Framebuffer] = None,
        keypad: Optional[Keypad] = None,
        quirks: Optional[Quirks] = None,
        rng: Optional[random.Random] = None,
    ):
        self.framebuffer = framebuffer or Framebuffer()
        self.keypad = keypad or Keypad()
        self.quirks = quirks or Quirks()
        self._rom_loaded = False
        super().__init__(bus if bus is not None else create_bus())
        self._context = ExecutionContext(
            bus=self._bus,
            framebuffer=self.framebuffer,
            keypad=self.keypad,
            quirks=self.quirks,
            rng=rng or random.Random(),
        )
        load_font(self._bus)

    def _create_initial_state(self) -> Chip8CpuState:
        return Chip8CpuState()

    # @intent:responsibility レジスタ、スタック、タイマ、画面を初期状態へ戻します。メモリ（ロード済みROM）は保持します。
    def reset(self) -> None:
        super().reset()
        self.framebuffer.clear()

    # @intent:responsibility 電源再投入相当。RAMを消去し、ROM未ロード状態に戻します。
    def power_cycle(self) -> None:
        for _, _, device in self._bus.get_devices():
            if isinstance(device, RAM):
                device.clear()
        load_font(self._bus)
        self._rom_loaded = False
        self.reset()

    # @intent:responsibility ROMイメージをプログラム領域へロードし、実行可能な状態にします。
    def load_rom(self, data: bytes) -> int:
        size = RomLoader().load_bytes(data, self._bus)
        self._rom_loaded = True
        return size

    def load_rom_file(self, file_path: Union[str, Path]) -> int:
        size = RomLoader().load_file(file_path, self._bus)
        self._rom_loaded = True
        return size

    @property
    def rom_loaded(self) -> bool:
        return self._rom_loaded

    # @intent:responsibility フェッチより前に、ROM未ロードと致命的エラー後の停止状態を検出します。
    def _check_ready(self) -> None:
        if not self._rom_loaded:
            raise RomNotLoadedError("No ROM has been loaded; load a program before executing.")
        if self._state.halted:
            raise CpuHaltedError("CPU is halted after a fatal error; reset before executing again.")

    # @intent:responsibility PCとPC+1から2バイトを読み、ビッグエンディアンの命令ワードを組み立てます。
    # @intent:pre-condition PC+1 がアドレス空間内である必要があります。そうでなければ致命的エラーです。
    def _fetch(self) -> int:
        pc = self._state.pc
        if pc < 0 or pc + 1 >= self._bus.get_size():
            raise FetchOutOfBoundsError(pc)
        high = self._bus.read(pc)
        low = self._bus.read(pc + 1)
        return (high << 8) | low

    def _decode(self, word: int) -> Instruction:
        try:
            return decode_opcode(word)
        except UnknownInstructionError:
            raise UnknownInstructionError(word, self._state.pc) from None

    def _execute(self, instruction: Instruction) -> None:
        execute_instruction(instruction, self._state, self._context)

    # @intent:responsibility 致命的エラー後は停止状態とし、reset されるまで実行を受け付けません。
    def _handle_fatal(self, initial_pc: int, error: Chip8Error) -> None:
        self._state.halted = True
        super()._handle_fatal(initial_pc, error)

    def _did_draw(self, instruction: Instruction) -> bool:
        return instruction.opcode in (Opcode.CLS, Opcode.DRW)

    # @intent:responsibility 60Hzのタイマクロック。非ゼロのタイマをそれぞれ1減らします（0未満にはならない）。
    def tick_timers(self) -> None:
        if self._state.delay_timer > 0:
            self._state.delay_timer -= 1
        if self._state.sound_timer > 0:
            self._state.sound_timer -= 1

    # @intent:responsibility サウンドタイマが非ゼロの間、ホストへ発音を要求します。
    @property
    def sound_active(self) -> bool:
        return self._state.sound_timer > 0

    # @intent:responsibility レジスタマップ（UI表示用）を返す。
    def get_register_map(self) -> Dict[str, int]:
        state = self._state
        registers = {f"V{index:X}": value for index, value in enumerate(state.v)}
        registers.update({
            "I": state.i,
            "PC": state.pc,
            "SP": state.sp,
            "DT": state.delay_timer,
            "ST": state.sound_timer,
        })
        return registers

    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        return [
            RegisterLayoutInfo("General", [RegisterInfo(f"V{index:X}", 8) for index in range(REGISTER_COUNT)]),
            RegisterLayoutInfo("Pointers", [
                RegisterInfo("I", 16),
                RegisterInfo("PC", 16),
                RegisterInfo("SP", 8),
            ]),
            RegisterLayoutInfo("Timers", [
                RegisterInfo("DT", 8),
                RegisterInfo("ST", 8),
            ]),
        ]

    def disassemble(self, start_addr: int, length: int) -> List[DisassemblyLine]:
        from retro_chip8.arch.chip8 import disassembler
        return disassembler.disassemble(self._bus, start_addr, length)

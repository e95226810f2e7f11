# src/retro_chip8/common/errors.py
"""
インタプリタ全体で共有される例外階層。

CHIP-8のプログラムは信頼された小さなバイナリであり、実行時の異常はすべて致命的として
ホストへ通知します。自動回復は行いません。
"""
from typing import Optional


# @intent:responsibility 全ての致命的なインタプリタ例外の基底クラス。
class Chip8Error(Exception):
    """
    ホストはこの型を捕捉すれば、コア由来の全ての致命的エラーを扱えます。
    """


# @intent:responsibility PC または PC+1 がアドレス空間外を指した状態でのフェッチ。
class FetchOutOfBoundsError(Chip8Error, IndexError):
    def __init__(self, pc: int):
        super().__init__(f"Instruction fetch out of bounds at PC={pc:#06x}.")
        self.pc = pc


# @intent:responsibility どのハンドラにも一致しない命令ワード。
class UnknownInstructionError(Chip8Error, ValueError):
    def __init__(self, word: int, pc: Optional[int] = None):
        location = f" at PC={pc:#06x}" if pc is not None else ""
        super().__init__(f"Unknown instruction word {word:#06x}{location}.")
        self.word = word
        self.pc = pc


class StackUnderflowError(Chip8Error):
    pass


class StackOverflowError(Chip8Error):
    pass


# @intent:responsibility ROMのロード前に実行が要求された（フェッチより前に検出）。
class RomNotLoadedError(Chip8Error):
    pass


class RomLoadError(Chip8Error, ValueError):
    pass


# @intent:responsibility ROMが 0x200-0xFFF の領域に収まらない。
class RomTooLargeError(RomLoadError):
    def __init__(self, size: int, capacity: int):
        super().__init__(f"ROM of {size} bytes does not fit in {capacity} bytes of program memory.")
        self.size = size
        self.capacity = capacity


# @intent:responsibility 致命的エラー後、resetされる前に再度実行が要求された。
class CpuHaltedError(Chip8Error):
    pass

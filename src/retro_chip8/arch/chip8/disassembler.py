"""
CHIP-8逆アセンブラモジュール。

メモリ上のバイナリデータを2バイト単位で解析し、ニーモニック形式に変換します。
"""
from typing import List

from retro_chip8.arch.chip8.instructions import decode_opcode
from retro_chip8.common.errors import UnknownInstructionError
from retro_chip8.common.types import DisassemblyLine
from retro_chip8.transport.bus import Bus

# @intent:responsibility 指定されたメモリ範囲のバイナリデータを解析し、アドレスとニーモニックのリストを返します。
def disassemble(bus: Bus, start_addr: int, length: int) -> List[DisassemblyLine]:
    """
    メモリ上のデータを読み取り、(アドレス, 16進ワード, ニーモニック) のタプルのリストを返します。
    命令として解釈できないワード（データ領域のスプライトなど）は "DW $XXXX" として表示します。
    """
    result = []
    end_addr = min(start_addr + length, bus.get_size())
    current_addr = start_addr

    # ログを汚さないためにpeekを使用
    while current_addr + 1 < end_addr:
        word = (bus.peek(current_addr) << 8) | bus.peek(current_addr + 1)
        try:
            text = decode_opcode(word).text()
        except UnknownInstructionError:
            text = f"DW ${word:04X}"
        result.append((current_addr, f"{word:04X}", text))
        current_addr += 2

    return result

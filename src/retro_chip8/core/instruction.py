# src/retro_chip8/core/instruction.py
"""
デコード済み命令の型定義。

16bitの命令ワードを「どの命令か」を表すタグ(Opcode)と、固定ニブル位置から切り出した
オペランドフィールドを持つ不変の値(Instruction)に変換した結果を表します。
デコード（何の命令か）と実行（何をするか）を分離するための境界となる型です。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple

# @intent:responsibility 全ての標準CHIP-8命令の種別を列挙します。
class Opcode(Enum):
    SYS = "0NNN"
    CLS = "00E0"
    RET = "00EE"
    JP = "1NNN"
    CALL = "2NNN"
    SE_VX_NN = "3XNN"
    SNE_VX_NN = "4XNN"
    SE_VX_VY = "5XY0"
    LD_VX_NN = "6XNN"
    ADD_VX_NN = "7XNN"
    LD_VX_VY = "8XY0"
    OR = "8XY1"
    AND = "8XY2"
    XOR = "8XY3"
    ADD_VX_VY = "8XY4"
    SUB_VX_VY = "8XY5"
    SHR = "8XY6"
    SUBN = "8XY7"
    SHL = "8XYE"
    SNE_VX_VY = "9XY0"
    LD_I = "ANNN"
    JP_V0 = "BNNN"
    RND = "CXNN"
    DRW = "DXYN"
    SKP = "EX9E"
    SKNP = "EXA1"
    LD_VX_DT = "FX07"
    LD_VX_K = "FX0A"
    LD_DT_VX = "FX15"
    LD_ST_VX = "FX18"
    ADD_I_VX = "FX1E"
    LD_F_VX = "FX29"
    LD_B_VX = "FX33"
    LD_MEM_VX = "FX55"
    LD_VX_MEM = "FX65"

# @intent:data_structure 逆アセンブル表示用の (ニーモニック, オペランド書式) 定義。
# 書式中のフィールド名は Instruction の属性名に対応します。
_FORMATS: Dict[Opcode, Tuple[str, List[str]]] = {
    Opcode.SYS: ("SYS", ["${nnn:03X}"]),
    Opcode.CLS: ("CLS", []),
    Opcode.RET: ("RET", []),
    Opcode.JP: ("JP", ["${nnn:03X}"]),
    Opcode.CALL: ("CALL", ["${nnn:03X}"]),
    Opcode.SE_VX_NN: ("SE", ["V{x:X}", "#${nn:02X}"]),
    Opcode.SNE_VX_NN: ("SNE", ["V{x:X}", "#${nn:02X}"]),
    Opcode.SE_VX_VY: ("SE", ["V{x:X}", "V{y:X}"]),
    Opcode.LD_VX_NN: ("LD", ["V{x:X}", "#${nn:02X}"]),
    Opcode.ADD_VX_NN: ("ADD", ["V{x:X}", "#${nn:02X}"]),
    Opcode.LD_VX_VY: ("LD", ["V{x:X}", "V{y:X}"]),
    Opcode.OR: ("OR", ["V{x:X}", "V{y:X}"]),
    Opcode.AND: ("AND", ["V{x:X}", "V{y:X}"]),
    Opcode.XOR: ("XOR", ["V{x:X}", "V{y:X}"]),
    Opcode.ADD_VX_VY: ("ADD", ["V{x:X}", "V{y:X}"]),
    Opcode.SUB_VX_VY: ("SUB", ["V{x:X}", "V{y:X}"]),
    Opcode.SHR: ("SHR", ["V{x:X}", "V{y:X}"]),
    Opcode.SUBN: ("SUBN", ["V{x:X}", "V{y:X}"]),
    Opcode.SHL: ("SHL", ["V{x:X}", "V{y:X}"]),
    Opcode.SNE_VX_VY: ("SNE", ["V{x:X}", "V{y:X}"]),
    Opcode.LD_I: ("LD", ["I", "${nnn:03X}"]),
    Opcode.JP_V0: ("JP", ["V0", "${nnn:03X}"]),
    Opcode.RND: ("RND", ["V{x:X}", "#${nn:02X}"]),
    Opcode.DRW: ("DRW", ["V{x:X}", "V{y:X}", "#{n:X}"]),
    Opcode.SKP: ("SKP", ["V{x:X}"]),
    Opcode.SKNP: ("SKNP", ["V{x:X}"]),
    Opcode.LD_VX_DT: ("LD", ["V{x:X}", "DT"]),
    Opcode.LD_VX_K: ("LD", ["V{x:X}", "K"]),
    Opcode.LD_DT_VX: ("LD", ["DT", "V{x:X}"]),
    Opcode.LD_ST_VX: ("LD", ["ST", "V{x:X}"]),
    Opcode.ADD_I_VX: ("ADD", ["I", "V{x:X}"]),
    Opcode.LD_F_VX: ("LD", ["F", "V{x:X}"]),
    Opcode.LD_B_VX: ("LD", ["B", "V{x:X}"]),
    Opcode.LD_MEM_VX: ("LD", ["[I]", "V{x:X}"]),
    Opcode.LD_VX_MEM: ("LD", ["V{x:X}", "[I]"]),
}

# @intent:responsibility デコード済みの1命令を表す不変の値です。
@dataclass(frozen=True)
class Instruction:
    """
    命令種別と、命令ワードの固定位置から取り出したオペランドフィールド。

    - x   : bits 11-8 (レジスタ番号)
    - y   : bits 7-4  (レジスタ番号)
    - n   : bits 3-0  (4bit即値)
    - nn  : bits 7-0  (8bit即値)
    - nnn : bits 11-0 (12bitアドレス)
    """
    opcode: Opcode
    word: int
    x: int
    y: int
    n: int
    nn: int
    nnn: int
    length: int = 2

    # @intent:responsibility 命令ワードから全オペランドフィールドを切り出して生成します。
    @classmethod
    def from_word(cls, opcode: Opcode, word: int) -> "Instruction":
        return cls(
            opcode=opcode,
            word=word,
            x=(word >> 8) & 0xF,
            y=(word >> 4) & 0xF,
            n=word & 0xF,
            nn=word & 0xFF,
            nnn=word & 0xFFF,
        )

    @property
    def opcode_hex(self) -> str:
        return f"{self.word:04X}"

    @property
    def mnemonic(self) -> str:
        return _FORMATS[self.opcode][0]

    @property
    def operands(self) -> List[str]:
        fields = {"x": self.x, "y": self.y, "n": self.n, "nn": self.nn, "nnn": self.nnn}
        return [template.format(**fields) for template in _FORMATS[self.opcode][1]]

    # @intent:responsibility "LD V9, #$71" 形式のテキスト表現を返します。
    def text(self) -> str:
        if self.operands:
            return f"{self.mnemonic} {', '.join(self.operands)}"
        return self.mnemonic

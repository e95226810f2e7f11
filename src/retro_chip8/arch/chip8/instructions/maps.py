# src/retro_chip8/arch/chip8/instructions/maps.py
"""
CHIP-8 命令マッピング定義。

命令ワードの最上位ニブルで16の命令ファミリーに分類し、0x0/0x8/0xE/0xF ファミリーは
下位バイトまたは下位ニブルで二次ディスパッチします。
デコード結果(Opcode)と実行関数の対応表もここで構築します。
"""
from typing import Callable, Dict, Optional

from retro_chip8.arch.chip8.state import Chip8CpuState
from retro_chip8.common.errors import UnknownInstructionError
from retro_chip8.core.instruction import Instruction, Opcode
from .alu import (
    execute_add_vx_nn, execute_ld_vx_vy, execute_or, execute_and, execute_xor,
    execute_add_vx_vy, execute_sub_vx_vy, execute_subn, execute_shr, execute_shl, execute_rnd
)
from .base import ExecutionContext
from .control import (
    execute_sys, execute_ret, execute_jp, execute_call, execute_jp_v0,
    execute_se_vx_nn, execute_sne_vx_nn, execute_se_vx_vy, execute_sne_vx_vy
)
from .io import execute_cls, execute_drw, execute_skp, execute_sknp, execute_ld_vx_k
from .load import (
    execute_ld_vx_nn, execute_ld_i, execute_ld_vx_dt, execute_ld_dt_vx, execute_ld_st_vx,
    execute_add_i_vx, execute_ld_f_vx, execute_ld_b_vx, execute_ld_mem_vx, execute_ld_vx_mem
)

ExecFunc = Callable[[Chip8CpuState, ExecutionContext, Instruction], None]

# 最上位ニブルだけで命令が確定するファミリー
PRIMARY_MAP: Dict[int, Opcode] = {
    0x1: Opcode.JP,
    0x2: Opcode.CALL,
    0x3: Opcode.SE_VX_NN,
    0x4: Opcode.SNE_VX_NN,
    0x6: Opcode.LD_VX_NN,
    0x7: Opcode.ADD_VX_NN,
    0xA: Opcode.LD_I,
    0xB: Opcode.JP_V0,
    0xC: Opcode.RND,
    0xD: Opcode.DRW,
}

# 0x0 ファミリー: 下位12bit
SYSTEM_MAP: Dict[int, Opcode] = {
    0x0E0: Opcode.CLS,
    0x0EE: Opcode.RET,
}

# 0x8 ファミリー: 下位ニブル
ALU_MAP: Dict[int, Opcode] = {
    0x0: Opcode.LD_VX_VY,
    0x1: Opcode.OR,
    0x2: Opcode.AND,
    0x3: Opcode.XOR,
    0x4: Opcode.ADD_VX_VY,
    0x5: Opcode.SUB_VX_VY,
    0x6: Opcode.SHR,
    0x7: Opcode.SUBN,
    0xE: Opcode.SHL,
}

# 0xE ファミリー: 下位バイト
KEY_MAP: Dict[int, Opcode] = {
    0x9E: Opcode.SKP,
    0xA1: Opcode.SKNP,
}

# 0xF ファミリー: 下位バイト
MISC_MAP: Dict[int, Opcode] = {
    0x07: Opcode.LD_VX_DT,
    0x0A: Opcode.LD_VX_K,
    0x15: Opcode.LD_DT_VX,
    0x18: Opcode.LD_ST_VX,
    0x1E: Opcode.ADD_I_VX,
    0x29: Opcode.LD_F_VX,
    0x33: Opcode.LD_B_VX,
    0x55: Opcode.LD_MEM_VX,
    0x65: Opcode.LD_VX_MEM,
}

EXECUTE_MAP: Dict[Opcode, ExecFunc] = {
    Opcode.SYS: execute_sys,
    Opcode.CLS: execute_cls,
    Opcode.RET: execute_ret,
    Opcode.JP: execute_jp,
    Opcode.CALL: execute_call,
    Opcode.SE_VX_NN: execute_se_vx_nn,
    Opcode.SNE_VX_NN: execute_sne_vx_nn,
    Opcode.SE_VX_VY: execute_se_vx_vy,
    Opcode.LD_VX_NN: execute_ld_vx_nn,
    Opcode.ADD_VX_NN: execute_add_vx_nn,
    Opcode.LD_VX_VY: execute_ld_vx_vy,
    Opcode.OR: execute_or,
    Opcode.AND: execute_and,
    Opcode.XOR: execute_xor,
    Opcode.ADD_VX_VY: execute_add_vx_vy,
    Opcode.SUB_VX_VY: execute_sub_vx_vy,
    Opcode.SHR: execute_shr,
    Opcode.SUBN: execute_subn,
    Opcode.SHL: execute_shl,
    Opcode.SNE_VX_VY: execute_sne_vx_vy,
    Opcode.LD_I: execute_ld_i,
    Opcode.JP_V0: execute_jp_v0,
    Opcode.RND: execute_rnd,
    Opcode.DRW: execute_drw,
    Opcode.SKP: execute_skp,
    Opcode.SKNP: execute_sknp,
    Opcode.LD_VX_DT: execute_ld_vx_dt,
    Opcode.LD_VX_K: execute_ld_vx_k,
    Opcode.LD_DT_VX: execute_ld_dt_vx,
    Opcode.LD_ST_VX: execute_ld_st_vx,
    Opcode.ADD_I_VX: execute_add_i_vx,
    Opcode.LD_F_VX: execute_ld_f_vx,
    Opcode.LD_B_VX: execute_ld_b_vx,
    Opcode.LD_MEM_VX: execute_ld_mem_vx,
    Opcode.LD_VX_MEM: execute_ld_vx_mem,
}

# @intent:responsibility 命令ワードを命令種別に分類します。一致しない場合はNone。
def _classify(word: int) -> Optional[Opcode]:
    family = (word >> 12) & 0xF

    if family in PRIMARY_MAP:
        return PRIMARY_MAP[family]
    if family == 0x0:
        return SYSTEM_MAP.get(word & 0xFFF, Opcode.SYS)
    if family == 0x5:
        return Opcode.SE_VX_VY if word & 0xF == 0 else None
    if family == 0x9:
        return Opcode.SNE_VX_VY if word & 0xF == 0 else None
    if family == 0x8:
        return ALU_MAP.get(word & 0xF)
    if family == 0xE:
        return KEY_MAP.get(word & 0xFF)
    # family == 0xF
    return MISC_MAP.get(word & 0xFF)

# @intent:responsibility 16bitの命令ワードをInstructionにデコードします。副作用はありません。
# @intent:post-condition 一致する命令がない場合、UnknownInstructionErrorを発生させます。
def decode_opcode(word: int) -> Instruction:
    if not 0 <= word <= 0xFFFF:
        raise ValueError(f"Instruction word {word} is not a 16-bit value.")
    opcode = _classify(word)
    if opcode is None:
        raise UnknownInstructionError(word)
    return Instruction.from_word(opcode, word)

from dataclasses import dataclass, field
from typing import Dict, Optional

# @intent:data_structure 物理キー名 -> CHIP-8の論理キー(0x0-0xF)。COSMAC VIPの配置をQWERTYキーボード左側に割り当てる。
DEFAULT_KEY_MAP: Dict[str, int] = {
    "1": 0x1, "2": 0x2, "3": 0x3, "4": 0xC,
    "Q": 0x4, "W": 0x5, "E": 0x6, "R": 0xD,
    "A": 0x7, "S": 0x8, "D": 0x9, "F": 0xE,
    "Z": 0xA, "X": 0x0, "C": 0xB, "V": 0xF,
}

# @intent:responsibility 歴史的な実装間で挙動が異なる命令の動作を切り替えるフラグ群。
@dataclass
class Quirks:
    sprite_wrap: bool = False  # False: 画面端でクリップ / True: 反対側へ折り返す
    stack_depth: int = 16
    shift_uses_vy: bool = False  # 8XY6/8XYE で VY をシフト元にする (COSMAC VIP)
    load_store_increments_i: bool = False  # FX55/FX65 後に I を X+1 進める (COSMAC VIP)
    jump_uses_vx: bool = False  # BNNN を BXNN (NNN + VX) として扱う (CHIP-48)
    logic_resets_vf: bool = False  # 8XY1/2/3 の後に VF を 0 にする (COSMAC VIP)
    sys_is_fatal: bool = True  # 0NNN (機械語サブルーチン呼び出し) を致命的エラーとする

@dataclass
class DisplayConfig:
    on_color: str = "#E0E0E0"
    off_color: str = "#101010"
    scale: int = 10

@dataclass
class SystemConfig:
    cpu_hz: int = 700
    timer_hz: int = 60
    quirks: Quirks = field(default_factory=Quirks)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    key_map: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_KEY_MAP))
    rom_path: Optional[str] = None

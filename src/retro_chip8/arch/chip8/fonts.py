# src/retro_chip8/arch/chip8/fonts.py
"""
内蔵16進フォント（0-F）の定義とロード処理。
"""
from retro_chip8.transport.bus import Bus

FONT_START_ADDRESS = 0x000
GLYPH_HEIGHT = 5

# 各グリフは4x5ドット。1バイトの上位4bitが1行分に相当する。
FONT_DATA = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])

FONT_END_ADDRESS = FONT_START_ADDRESS + len(FONT_DATA) - 1

# @intent:responsibility フォントデータを予約領域へ書き込みます。ROMデバイスにも書き込めるようBus.loadを使用します。
def load_font(bus: Bus) -> None:
    for offset, value in enumerate(FONT_DATA):
        bus.load(FONT_START_ADDRESS + offset, value)

# @intent:responsibility 指定した16進数字のグリフ先頭アドレスを返します（FX29用）。
def glyph_address(digit: int) -> int:
    return FONT_START_ADDRESS + GLYPH_HEIGHT * (digit & 0xF)

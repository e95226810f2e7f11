# src/retro_chip8/arch/chip8/display.py
"""
Display Subsystem

64x32、1ピクセル1bitのフレームバッファと、スプライト描画（XOR合成・衝突検出）を提供します。
フレームバッファはホストのレンダラに対して読み取り専用で公開されます。
"""
from typing import List, Sequence

from retro_chip8.common.types import Color

SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32
BYTES_PER_PIXEL = 4

# @intent:responsibility フレームバッファの内容と再描画要求フラグを保持します。
class Framebuffer:
    """
    行優先(row-major)の 64x32 ピクセル配列。各要素は 0(消灯) または 1(点灯)。

    内容を変更できるのは clear と draw_sprite のみです。
    needs_redraw はバッファ変更時にセットされ、リセットはホスト側(mark_presented)の責務です。
    """
    def __init__(self, width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT):
        self.width = width
        self.height = height
        self._pixels = bytearray(width * height)
        self.needs_redraw = False

    # @intent:responsibility 全ピクセルを消灯し、再描画を要求します。
    def clear(self) -> None:
        self._pixels = bytearray(self.width * self.height)
        self.needs_redraw = True

    # @intent:responsibility スプライトをXOR合成で描画し、衝突（点灯->消灯）の有無を返します。
    # @intent:pre-condition rowsの各要素は8bit値であり、最上位ビットが左端のピクセルに対応します。
    def draw_sprite(self, x: int, y: int, rows: Sequence[int], wrap: bool = False) -> bool:
        """
        描画開始座標は画面サイズで折り返しますが、描画中に右端・下端を越えるピクセルは
        wrap=False の場合クリップされます（描画も折り返しもしない）。
        wrap=True の場合は反対側の端へ折り返します。
        内容の変化に関わらず needs_redraw は常にセットされます。
        """
        origin_x = x % self.width
        origin_y = y % self.height
        collision = False

        for row_index, row_bits in enumerate(rows):
            py = origin_y + row_index
            if py >= self.height:
                if not wrap:
                    break
                py %= self.height

            for bit in range(8):
                if not (row_bits >> (7 - bit)) & 1:
                    continue
                px = origin_x + bit
                if px >= self.width:
                    if not wrap:
                        break
                    px %= self.width

                index = py * self.width + px
                if self._pixels[index]:
                    collision = True
                self._pixels[index] ^= 1

        self.needs_redraw = True
        return collision

    def get_pixel(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) out of bounds for {self.width}x{self.height} framebuffer.")
        return self._pixels[y * self.width + x]

    # @intent:responsibility 読み取り専用のコピーを返します。
    @property
    def pixels(self) -> bytes:
        return bytes(self._pixels)

    def rows(self) -> List[List[int]]:
        return [list(self._pixels[y * self.width:(y + 1) * self.width]) for y in range(self.height)]

    def is_blank(self) -> bool:
        return not any(self._pixels)

    # @intent:responsibility ホストがフレームを表示し終えたことを通知し、再描画要求を下ろします。
    def mark_presented(self) -> None:
        self.needs_redraw = False

# @intent:responsibility "#RRGGBB" または "#RRGGBBAA" 形式の文字列をRGBAタプルに変換します。
def parse_color(text: str) -> Color:
    value = text.lstrip("#")
    if len(value) == 6:
        value += "FF"
    if len(value) != 8:
        raise ValueError(f"Invalid color format: {text}")
    try:
        return tuple(int(value[i:i + 2], 16) for i in range(0, 8, 2))
    except ValueError:
        raise ValueError(f"Invalid color format: {text}")

# @intent:responsibility フレームバッファの各ビットを、ホスト所有のRGBAバッファ(1ピクセル4バイト)へ書き込みます。
# @intent:rationale ピクセルの色付けは表示側の関心事であり、コアはビット列を公開するのみです。
def render_rgba(framebuffer: Framebuffer, frame: bytearray, on_color: Color, off_color: Color) -> None:
    expected = framebuffer.width * framebuffer.height * BYTES_PER_PIXEL
    if len(frame) != expected:
        raise ValueError(f"Frame buffer must be {expected} bytes, got {len(frame)}.")

    on = bytes(on_color)
    off = bytes(off_color)
    for index, value in enumerate(framebuffer.pixels):
        offset = index * BYTES_PER_PIXEL
        frame[offset:offset + BYTES_PER_PIXEL] = on if value else off

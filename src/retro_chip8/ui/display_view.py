# src/retro_chip8/ui/display_view.py
"""
フレームバッファ表示ウィジェット。

コアが公開する1bitフレームバッファを render_rgba でRGBAバッファへ変換し、
QImageとして拡大描画します。
"""
from PySide6.QtCore import QRect, QSize, Qt
from PySide6.QtGui import QImage, QPainter
from PySide6.QtWidgets import QWidget

from retro_chip8.arch.chip8.display import (
    BYTES_PER_PIXEL, SCREEN_HEIGHT, SCREEN_WIDTH, Framebuffer, parse_color, render_rgba
)
from retro_chip8.config.models import DisplayConfig

class DisplayView(QWidget):
    def __init__(self, display_config: DisplayConfig = None, parent=None):
        super().__init__(parent)
        self._frame = bytearray(SCREEN_WIDTH * SCREEN_HEIGHT * BYTES_PER_PIXEL)
        self._image = QImage()
        self.apply_config(display_config or DisplayConfig())
        self.setFocusPolicy(Qt.StrongFocus)

    def apply_config(self, display_config: DisplayConfig) -> None:
        self._on_color = parse_color(display_config.on_color)
        self._off_color = parse_color(display_config.off_color)
        self._scale = display_config.scale
        self.setMinimumSize(SCREEN_WIDTH * self._scale, SCREEN_HEIGHT * self._scale)
        self.updateGeometry()

    def sizeHint(self) -> QSize:
        return QSize(SCREEN_WIDTH * self._scale, SCREEN_HEIGHT * self._scale)

    # @intent:responsibility フレームバッファの内容を描画用イメージに変換し、再描画を予約します。
    # @intent:pre-condition 呼び出し側が排他アクセス中であること（フレームバッファを読むため）。
    def update_frame(self, framebuffer: Framebuffer) -> None:
        render_rgba(framebuffer, self._frame, self._on_color, self._off_color)
        # QImageはバッファを参照するだけなので、copy()で独立させる
        self._image = QImage(
            bytes(self._frame), SCREEN_WIDTH, SCREEN_HEIGHT,
            SCREEN_WIDTH * BYTES_PER_PIXEL, QImage.Format_RGBA8888
        ).copy()
        self.update()

    def get_image(self) -> QImage:
        return self._image

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), Qt.black)
        if not self._image.isNull():
            # 整数倍で拡大し、ドットがぼやけないようにする
            scale = max(1, min(self.width() // SCREEN_WIDTH, self.height() // SCREEN_HEIGHT))
            width, height = SCREEN_WIDTH * scale, SCREEN_HEIGHT * scale
            target = QRect((self.width() - width) // 2, (self.height() - height) // 2, width, height)
            painter.drawImage(target, self._image)
        painter.end()

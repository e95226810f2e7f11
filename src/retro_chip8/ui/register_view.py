# src/retro_chip8/ui/register_view.py
"""
レジスタパネル。V0-VF、I、PC、SP、タイマを16進で並べます。
"""
from typing import Dict, List

from PySide6.QtCore import Qt
from PySide6.QtGui import QFontDatabase
from PySide6.QtWidgets import QGridLayout, QGroupBox, QLabel, QVBoxLayout, QWidget

from retro_chip8.common.types import RegisterLayoutInfo

_PANEL_STYLE = """
QWidget { background-color: #121212; color: #BBBBBB; }
QGroupBox { border: 1px solid #2A2A2A; margin-top: 18px; font-weight: bold; }
QGroupBox::title { subcontrol-origin: margin; left: 8px; color: #00AAAA; }
"""

# 汎用レジスタは2列に折り返す
_COLUMNS = 2

# @intent:responsibility CPUのレイアウト定義からラベルを組み立て、渡された値で更新します。
# @intent:rationale CPUを参照せず値だけを受け取ります。取得は呼び出し側が排他アクセス中に行います。
class RegisterView(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setStyleSheet(_PANEL_STYLE)
        self._root = QVBoxLayout(self)
        self._root.setContentsMargins(4, 4, 4, 4)
        mono = QFontDatabase.systemFont(QFontDatabase.FixedFont).family()
        self._value_style = f"font-family: '{mono}', monospace; color: #FFD700;"
        self._values: Dict[str, QLabel] = {}
        self._formats: Dict[str, str] = {}

    def _clear(self) -> None:
        while self._root.count():
            widget = self._root.takeAt(0).widget()
            if widget is not None:
                widget.deleteLater()
        self._values = {}
        self._formats = {}

    def set_layout_info(self, layout_info: List[RegisterLayoutInfo]) -> None:
        self._clear()
        for group in layout_info:
            box = QGroupBox(group.group_name)
            grid = QGridLayout(box)
            grid.setHorizontalSpacing(10)
            grid.setVerticalSpacing(2)
            for index, register in enumerate(group.registers):
                digits = -(-register.width // 4)
                self._formats[register.name] = f"0x{{:0{digits}X}}"
                value = QLabel(self._formats[register.name].format(0))
                value.setStyleSheet(self._value_style)
                value.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
                row, column = divmod(index, _COLUMNS)
                grid.addWidget(QLabel(register.name), row, column * 2)
                grid.addWidget(value, row, column * 2 + 1)
                self._values[register.name] = value
            self._root.addWidget(box)
        self._root.addStretch()

    def update_registers(self, register_map: Dict[str, int]) -> None:
        for name, label in self._values.items():
            if name in register_map:
                label.setText(self._formats[name].format(register_map[name]))

    def get_register_text(self, name: str) -> str:
        return self._values[name].text()

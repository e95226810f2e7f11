# src/retro_chip8/arch/chip8/keypad.py
"""
16キー(0x0-0xF)の入力状態。物理キーとの対応付けはホスト側の責務です。
"""
from typing import List, Optional

KEY_COUNT = 16

# @intent:responsibility 論理キーの押下状態を記録・問い合わせる手段を提供します。
class Keypad:
    def __init__(self):
        self._pressed: List[bool] = [False] * KEY_COUNT

    def _validate(self, key: int) -> None:
        if not 0 <= key < KEY_COUNT:
            raise ValueError(f"Key {key} is not a valid CHIP-8 key (0x0-0xF).")

    def press(self, key: int) -> None:
        self._validate(key)
        self._pressed[key] = True

    def release(self, key: int) -> None:
        self._validate(key)
        self._pressed[key] = False

    def is_pressed(self, key: int) -> bool:
        self._validate(key)
        return self._pressed[key]

    # @intent:responsibility 押下中の最小番号のキーを返します。押下中のキーがなければNone。
    def first_pressed(self) -> Optional[int]:
        for key, pressed in enumerate(self._pressed):
            if pressed:
                return key
        return None

    def clear(self) -> None:
        self._pressed = [False] * KEY_COUNT

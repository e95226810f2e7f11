import pytest

from retro_chip8.arch.chip8.cpu import create_bus
from retro_chip8.arch.chip8.fonts import FONT_DATA, FONT_END_ADDRESS, GLYPH_HEIGHT, glyph_address, load_font
from retro_chip8.arch.chip8.keypad import KEY_COUNT, Keypad

class TestKeypad:
    def test_press_release(self):
        keypad = Keypad()
        assert not any(keypad.is_pressed(key) for key in range(KEY_COUNT))

        keypad.press(0xF)
        assert keypad.is_pressed(0xF)
        keypad.release(0xF)
        assert not keypad.is_pressed(0xF)

    def test_first_pressed_returns_lowest_key(self):
        keypad = Keypad()
        assert keypad.first_pressed() is None
        keypad.press(0xC)
        keypad.press(0x3)
        assert keypad.first_pressed() == 0x3

    def test_clear(self):
        keypad = Keypad()
        keypad.press(1)
        keypad.clear()
        assert keypad.first_pressed() is None

    @pytest.mark.parametrize("key", [-1, 16, 0xFF])
    def test_invalid_keys(self, key):
        keypad = Keypad()
        with pytest.raises(ValueError):
            keypad.press(key)
        with pytest.raises(ValueError):
            keypad.is_pressed(key)


class TestFonts:
    def test_font_table_shape(self):
        assert len(FONT_DATA) == 80
        assert FONT_END_ADDRESS == 0x4F
        assert FONT_DATA[:GLYPH_HEIGHT] == bytes([0xF0, 0x90, 0x90, 0x90, 0xF0])

    def test_glyph_address(self):
        assert glyph_address(0x0) == 0
        assert glyph_address(0xF) == 75
        assert glyph_address(0x1F) == 75

    def test_load_font_into_read_only_area(self):
        bus = create_bus()
        load_font(bus)
        assert bus.dump(0, len(FONT_DATA)) == FONT_DATA
        bus.write(0x00, 0x00)
        assert bus.peek(0x00) == 0xF0

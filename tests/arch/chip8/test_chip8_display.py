# tests/arch/chip8/test_chip8_display.py
"""
retro_chip8.arch.chip8.displayモジュールの単体テスト。
"""
import pytest

from retro_chip8.arch.chip8.display import (
    BYTES_PER_PIXEL, SCREEN_HEIGHT, SCREEN_WIDTH, Framebuffer, parse_color, render_rgba
)

# @intent:test_suite フレームバッファのXOR描画、衝突検出、クリップ、色変換を検証します。

@pytest.fixture
def fb():
    return Framebuffer()

def test_initial_framebuffer(fb):
    assert (fb.width, fb.height) == (SCREEN_WIDTH, SCREEN_HEIGHT)
    assert fb.is_blank()
    assert not fb.needs_redraw
    assert len(fb.pixels) == 64 * 32

# @intent:test_case_xor 同じスプライトを2回描画すると元の状態に戻り、2回目のみ衝突となることを検証します。
def test_draw_twice_restores_and_reports_collision(fb):
    sprite = [0x3C, 0x42, 0x81]
    fb.draw_sprite(10, 5, [0xFF])
    before = fb.pixels

    assert fb.draw_sprite(20, 7, sprite) is False
    assert fb.draw_sprite(20, 7, sprite) is True
    assert fb.pixels == before

def test_collision_only_where_pixels_overlap(fb):
    fb.draw_sprite(0, 0, [0xF0])
    assert fb.draw_sprite(4, 0, [0xF0]) is False
    assert fb.draw_sprite(3, 0, [0x80]) is True
    assert fb.get_pixel(3, 0) == 0

def test_msb_is_leftmost_pixel(fb):
    fb.draw_sprite(0, 0, [0b10000001])
    assert fb.rows()[0][:8] == [1, 0, 0, 0, 0, 0, 0, 1]

def test_clip_at_bottom_edge(fb):
    fb.draw_sprite(0, 31, [0x80, 0x80])
    assert fb.get_pixel(0, 31) == 1
    assert fb.get_pixel(0, 0) == 0

def test_wrap_option(fb):
    fb.draw_sprite(63, 31, [0xC0, 0xC0], wrap=True)
    assert fb.get_pixel(63, 31) == 1
    assert fb.get_pixel(0, 31) == 1
    assert fb.get_pixel(63, 0) == 1
    assert fb.get_pixel(0, 0) == 1

def test_start_coordinate_wraps_without_wrap_option(fb):
    fb.draw_sprite(SCREEN_WIDTH + 1, SCREEN_HEIGHT * 2 + 2, [0x80])
    assert fb.get_pixel(1, 2) == 1

# @intent:test_case_redraw 見た目が変化しない描画でも再描画要求がセットされることを検証します。
def test_draw_always_marks_redraw(fb):
    assert fb.draw_sprite(0, 0, []) is False
    assert fb.needs_redraw
    fb.mark_presented()
    assert not fb.needs_redraw
    fb.draw_sprite(0, 0, [0x00])
    assert fb.needs_redraw

def test_clear_after_draws(fb):
    fb.draw_sprite(0, 0, [0xFF] * 15)
    fb.mark_presented()
    fb.clear()
    assert fb.is_blank()
    assert fb.rows() == [[0] * 64 for _ in range(32)]
    assert fb.needs_redraw

def test_get_pixel_out_of_range(fb):
    with pytest.raises(IndexError):
        fb.get_pixel(64, 0)
    with pytest.raises(IndexError):
        fb.get_pixel(0, -1)

def test_pixels_is_a_copy(fb):
    snapshot = fb.pixels
    fb.draw_sprite(0, 0, [0x80])
    assert snapshot[0] == 0
    assert fb.pixels[0] == 1

def test_parse_color():
    assert parse_color("#102030") == (0x10, 0x20, 0x30, 0xFF)
    assert parse_color("#10203040") == (0x10, 0x20, 0x30, 0x40)
    with pytest.raises(ValueError):
        parse_color("#12345")
    with pytest.raises(ValueError):
        parse_color("#GGGGGG")

# @intent:test_case_render 各ピクセルが4バイトの点灯色/消灯色に変換されることを検証します。
def test_render_rgba(fb):
    fb.draw_sprite(1, 0, [0x80])
    frame = bytearray(SCREEN_WIDTH * SCREEN_HEIGHT * BYTES_PER_PIXEL)
    on, off = (255, 255, 255, 255), (0, 0, 0, 255)

    render_rgba(fb, frame, on, off)

    assert frame[0:4] == bytes(off)
    assert frame[4:8] == bytes(on)
    assert frame[-4:] == bytes(off)

def test_render_rgba_rejects_wrong_size(fb):
    with pytest.raises(ValueError, match="Frame buffer must be"):
        render_rgba(fb, bytearray(10), (0, 0, 0, 0), (0, 0, 0, 0))

# tests/transport/test_bus.py
"""
retro_chip8.transport.busモジュールの単体テスト。
"""
import logging

import pytest

from retro_chip8.transport.bus import RAM, ROM, Bus, BusAccess, BusAccessType

# @intent:test_suite 共通バスとデバイスの基本的な機能とエラーハンドリングを検証します。

class TestRAM:
    # @intent:test_case_init RAMクラスが正しいサイズでゼロ初期化されることを検証します。
    def test_ram_init_valid_size(self):
        ram = RAM(16)
        assert ram.get_size() == 16
        assert all(ram.read(address) == 0 for address in range(16))

    def test_ram_init_invalid_size(self):
        with pytest.raises(ValueError, match="RAM size must be a positive integer."):
            RAM(0)
        with pytest.raises(ValueError, match="RAM size must be a positive integer."):
            RAM(1.5)

    def test_ram_read_write_out_of_bounds(self):
        ram = RAM(4)
        with pytest.raises(IndexError, match="Address 4 out of bounds for RAM of size 4."):
            ram.read(4)
        with pytest.raises(IndexError):
            ram.write(-1, 0x00)

    # @intent:test_case_data 8bitを超える値の書き込みはValueErrorとなることを検証します。
    def test_ram_write_invalid_data(self):
        ram = RAM(1)
        with pytest.raises(ValueError, match="Data 256 is not an 8-bit value."):
            ram.write(0, 0x100)

    def test_ram_clear(self):
        ram = RAM(4)
        ram.write(2, 0xAB)
        ram.clear()
        assert ram.read(2) == 0


class TestROM:
    # @intent:test_case_rom_write プログラムからの書き込みは無視され、警告が記録されることを検証します。
    def test_write_is_ignored(self, caplog):
        rom = ROM(4)
        rom.load_data(0, 0xF0)
        with caplog.at_level(logging.WARNING, logger="retro_chip8.transport.bus"):
            rom.write(0, 0x12)
        assert rom.read(0) == 0xF0
        assert "Ignored write" in caplog.text

    def test_clear_keeps_contents(self):
        rom = ROM(2)
        rom.load_data(1, 0x90)
        rom.clear()
        assert rom.read(1) == 0x90


class TestBus:
    @pytest.fixture
    def bus(self):
        bus = Bus()
        bus.register_device(0x10, 0x1F, RAM(0x10))
        bus.register_device(0x00, 0x0F, ROM(0x10))
        return bus

    def test_register_device_size_mismatch(self):
        bus = Bus()
        with pytest.raises(ValueError, match="does not match"):
            bus.register_device(0x0000, 0x00FF, RAM(0x10))

    def test_register_device_invalid_range(self):
        bus = Bus()
        with pytest.raises(ValueError):
            bus.register_device(0x10, 0x0F, RAM(1))

    def test_register_device_rejects_non_device(self):
        with pytest.raises(TypeError):
            Bus().register_device(0, 0, object())

    # @intent:test_case_size 登録済みデバイスの最上位アドレスからアドレス空間のサイズが決まることを検証します。
    def test_get_size(self, bus):
        assert bus.get_size() == 0x20
        assert Bus().get_size() == 0

    def test_devices_sorted_by_start_address(self, bus):
        starts = [start for start, _, _ in bus.get_devices()]
        assert starts == [0x00, 0x10]

    def test_unmapped_address_raises(self, bus):
        with pytest.raises(IndexError, match="not mapped"):
            bus.read(0x20)

    # @intent:test_case_log read/writeはログに記録され、peekは記録されないことを検証します。
    def test_activity_log(self, bus):
        bus.write(0x12, 0x34)
        assert bus.read(0x12) == 0x34
        assert bus.peek(0x12) == 0x34

        log = bus.get_and_clear_activity_log()
        assert log == [
            BusAccess(0x12, 0x34, BusAccessType.WRITE, previous_data=0x00),
            BusAccess(0x12, 0x34, BusAccessType.READ),
        ]
        assert bus.get_and_clear_activity_log() == []

    def test_write_records_previous_data(self, bus):
        bus.write(0x11, 0x01)
        bus.write(0x11, 0x02)
        last = bus.get_and_clear_activity_log()[-1]
        assert last.previous_data == 0x01
        assert last.data == 0x02

    # @intent:test_case_rom_protection 実行時のwriteはROMを変更せず、ローダー用のloadは書き込めることを検証します。
    def test_write_to_rom_ignored_but_load_succeeds(self, bus):
        bus.write(0x03, 0xAA)
        assert bus.peek(0x03) == 0x00
        bus.load(0x03, 0xAA)
        assert bus.peek(0x03) == 0xAA

    def test_load_does_not_log(self, bus):
        bus.load(0x15, 0x77)
        assert bus.get_and_clear_activity_log() == []
        assert bus.peek(0x15) == 0x77

    def test_dump(self, bus):
        for offset, value in enumerate([1, 2, 3]):
            bus.load(0x0E + offset, value)
        assert bus.dump(0x0E, 3) == bytes([1, 2, 3])
        assert bus.get_and_clear_activity_log() == []

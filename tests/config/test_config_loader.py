# tests/config/test_config_loader.py
"""
retro_chip8.config の ConfigLoader と SystemBuilder の単体テスト。
"""
import random

import pytest

from retro_chip8.arch.chip8.cpu import Chip8Cpu
from retro_chip8.config.builder import SystemBuilder
from retro_chip8.config.loader import ConfigLoader
from retro_chip8.config.models import DEFAULT_KEY_MAP, Quirks, SystemConfig

# @intent:test_suite YAML設定の解析と、設定に基づくシステム構築を検証します。

YAML_CONFIG = """
cpu_hz: 1000
timer_hz: "0x3C"
quirks:
  sprite_wrap: true
  stack_depth: 12
  shift_uses_vy: true
display:
  on_color: "#33FF66"
  scale: 8
key_map:
  x: 0x0
  "1": 1
"""

class TestConfigLoader:
    def test_load_from_string(self):
        config = ConfigLoader().load_from_string(YAML_CONFIG)

        assert config.cpu_hz == 1000
        assert config.timer_hz == 60
        assert config.quirks.sprite_wrap is True
        assert config.quirks.stack_depth == 12
        assert config.quirks.shift_uses_vy is True
        assert config.quirks.jump_uses_vx is False
        assert config.display.on_color == "#33FF66"
        assert config.display.off_color == "#101010"
        assert config.display.scale == 8
        assert config.key_map == {"X": 0x0, "1": 0x1}
        assert config.rom_path is None

    # @intent:test_case_defaults 空のドキュメントはデフォルト設定になることを検証します。
    def test_empty_document_yields_defaults(self):
        config = ConfigLoader().load_from_string("")
        assert config == SystemConfig()
        assert config.key_map == DEFAULT_KEY_MAP
        assert config.quirks == Quirks()
        assert config.quirks.sys_is_fatal is True

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "system.yaml"
        path.write_text("cpu_hz: 500\nrom_path: games/pong.ch8\n", encoding="utf-8")

        config = ConfigLoader().load_from_file(str(path))

        assert config.cpu_hz == 500
        assert config.rom_path == "games/pong.ch8"

    @pytest.mark.parametrize("text, message", [
        ("- 1\n- 2\n", "must be a mapping"),
        ("cpu_hz: 0\n", "must be positive"),
        ("quirks:\n  no_such_quirk: true\n", "Unknown quirk"),
        ("quirks:\n  sprite_wrap: 1\n", "must be a boolean"),
        ("quirks:\n  stack_depth: 0\n", "stack_depth must be positive"),
        ("display:\n  scale: 0\n", "scale must be positive"),
        ("display:\n  on_color: 'green'\n", "Invalid color format"),
        ("key_map:\n  Q: 16\n", "must be in 0x0-0xF"),
        ("key_map: [1, 2]\n", "key_map must be a mapping"),
        ("cpu_hz: true\n", "Invalid integer format"),
    ])
    def test_invalid_configs(self, text, message):
        with pytest.raises(ValueError, match=message):
            ConfigLoader().load_from_string(text)


class TestSystemBuilder:
    def test_build_default_system(self):
        cpu, bus = SystemBuilder().build_system(SystemConfig())

        assert isinstance(cpu, Chip8Cpu)
        assert cpu.get_bus() is bus
        assert bus.get_size() == 0x1000
        assert not cpu.rom_loaded

    def test_build_applies_quirks_and_rng(self):
        config = SystemConfig(quirks=Quirks(stack_depth=1))
        cpu, _ = SystemBuilder().build_system(config, rng=random.Random(3))
        assert cpu.quirks.stack_depth == 1

        cpu.load_rom(bytes([0xC0, 0xFF]))
        cpu.step()
        assert cpu.get_state().v[0] == random.Random(3).randrange(256)

    def test_build_loads_rom_path(self, tmp_path):
        rom_path = tmp_path / "prog.ch8"
        rom_path.write_bytes(bytes([0x00, 0xE0]))

        cpu, bus = SystemBuilder().build_system(SystemConfig(rom_path=str(rom_path)))

        assert cpu.rom_loaded
        assert bus.dump(0x200, 2) == bytes([0x00, 0xE0])

    def test_build_with_missing_rom(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            SystemBuilder().build_system(SystemConfig(rom_path=str(tmp_path / "missing.ch8")))

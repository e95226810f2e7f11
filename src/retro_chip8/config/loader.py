import logging
from dataclasses import fields
from typing import Any, Dict

import yaml

from retro_chip8.arch.chip8.display import parse_color
from .models import DEFAULT_KEY_MAP, DisplayConfig, Quirks, SystemConfig

logger = logging.getLogger(__name__)

class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        with open(path, 'r', encoding="utf-8") as f:
            data = yaml.safe_load(f)
        logger.info("Loaded system config from %s.", path)
        return self._parse_config(data or {})

    def load_from_string(self, text: str) -> SystemConfig:
        return self._parse_config(yaml.safe_load(text) or {})

    def _parse_config(self, data: Dict[str, Any]) -> SystemConfig:
        if not isinstance(data, dict):
            raise ValueError(f"System config must be a mapping, got {type(data).__name__}.")

        cpu_hz = self._parse_int(data.get("cpu_hz", 700))
        timer_hz = self._parse_int(data.get("timer_hz", 60))
        if cpu_hz <= 0 or timer_hz <= 0:
            raise ValueError("cpu_hz and timer_hz must be positive.")

        return SystemConfig(
            cpu_hz=cpu_hz,
            timer_hz=timer_hz,
            quirks=self._parse_quirks(data.get("quirks", {}) or {}),
            display=self._parse_display(data.get("display", {}) or {}),
            key_map=self._parse_key_map(data.get("key_map")),
            rom_path=data.get("rom_path"),
        )

    # @intent:responsibility 未知のQuirk名は設定ミスとしてエラーにします。
    def _parse_quirks(self, quirks_data: Dict[str, Any]) -> Quirks:
        known = {f.name for f in fields(Quirks)}
        unknown = set(quirks_data) - known
        if unknown:
            raise ValueError(f"Unknown quirk(s): {', '.join(sorted(unknown))}")

        quirks = Quirks()
        for name, value in quirks_data.items():
            if name == "stack_depth":
                value = self._parse_int(value)
                if value <= 0:
                    raise ValueError("stack_depth must be positive.")
            elif not isinstance(value, bool):
                raise ValueError(f"Quirk '{name}' must be a boolean, got {value!r}.")
            setattr(quirks, name, value)
        return quirks

    def _parse_display(self, display_data: Dict[str, Any]) -> DisplayConfig:
        display = DisplayConfig()
        for name in ("on_color", "off_color"):
            if name in display_data:
                color = str(display_data[name])
                parse_color(color)
                setattr(display, name, color)
        if "scale" in display_data:
            display.scale = self._parse_int(display_data["scale"])
            if display.scale <= 0:
                raise ValueError("display.scale must be positive.")
        return display

    def _parse_key_map(self, key_map_data: Any) -> Dict[str, int]:
        if key_map_data is None:
            return dict(DEFAULT_KEY_MAP)
        if not isinstance(key_map_data, dict):
            raise ValueError("key_map must be a mapping of key names to 0x0-0xF.")
        key_map = {}
        for name, value in key_map_data.items():
            key = self._parse_int(value)
            if not 0 <= key <= 0xF:
                raise ValueError(f"Key map entry '{name}' must be in 0x0-0xF, got {value!r}.")
            key_map[str(name).upper()] = key
        return key_map

    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            if value.lower().startswith("0x"):
                return int(value, 16)
            return int(value)
        raise ValueError(f"Invalid integer format: {value}")

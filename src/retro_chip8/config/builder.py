import logging
import random
from typing import Optional, Tuple

from retro_chip8.arch.chip8.cpu import Chip8Cpu, create_bus
from retro_chip8.arch.chip8.display import Framebuffer
from retro_chip8.arch.chip8.keypad import Keypad
from retro_chip8.transport.bus import Bus
from .models import SystemConfig

logger = logging.getLogger(__name__)

# @intent:responsibility システム構成（Config）に基づいて、Bus、周辺機器、CPUを生成・接続します。
class SystemBuilder:
    def build_system(self, config: SystemConfig, rng: Optional[random.Random] = None) -> Tuple[Chip8Cpu, Bus]:
        bus = create_bus()
        cpu = Chip8Cpu(
            bus,
            framebuffer=Framebuffer(),
            keypad=Keypad(),
            quirks=config.quirks,
            rng=rng,
        )

        if config.rom_path:
            cpu.load_rom_file(config.rom_path)

        logger.debug("Built CHIP-8 system (cpu_hz=%d, timer_hz=%d, quirks=%s).",
                     config.cpu_hz, config.timer_hz, config.quirks)
        return cpu, bus

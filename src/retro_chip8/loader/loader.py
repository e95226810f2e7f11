# src/retro_chip8/loader/loader.py
"""
ROMローダーモジュール。

CHIP-8のROMはヘッダもマジックナンバーも持たない生のバイナリであり、
その内容をそのまま 0x200 から配置します。
"""
import logging
from pathlib import Path
from typing import Union

from retro_chip8.common.errors import RomLoadError, RomTooLargeError
from retro_chip8.transport.bus import Bus

logger = logging.getLogger(__name__)

PROGRAM_START_ADDRESS = 0x200
MEMORY_END_ADDRESS = 0xFFF
PROGRAM_CAPACITY = MEMORY_END_ADDRESS - PROGRAM_START_ADDRESS + 1  # 0xE00

class RomLoader:
    """
    生のCHIP-8バイナリを検証し、バスのプログラム領域へロードするローダー。
    """
    def __init__(self, start_address: int = PROGRAM_START_ADDRESS, capacity: int = PROGRAM_CAPACITY):
        self._start_address = start_address
        self._capacity = capacity

    # @intent:responsibility バイト列をそのまま start_address 以降に書き込み、書き込んだバイト数を返します。
    # @intent:pre-condition データはプログラム領域(0x200-0xFFF)に収まる必要があります。
    def load_bytes(self, data: bytes, bus: Bus) -> int:
        if not data:
            raise RomLoadError("ROM image is empty.")
        if len(data) > self._capacity:
            raise RomTooLargeError(len(data), self._capacity)

        for offset, value in enumerate(data):
            bus.load(self._start_address + offset, value)

        logger.info("Loaded %d bytes at %#05x.", len(data), self._start_address)
        return len(data)

    # @intent:responsibility ROMファイル(.ch8)をバイナリモードで読み込み、ロードします。
    def load_file(self, file_path: Union[str, Path], bus: Bus) -> int:
        path = Path(file_path)
        with open(path, "rb") as f:
            data = f.read()
        logger.info("Reading ROM image %s.", path)
        return self.load_bytes(data, bus)

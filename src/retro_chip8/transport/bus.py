# src/retro_chip8/transport/bus.py
"""
メモリバス

CHIP-8の4KBアドレス空間 (0x000-0xFFF) を表します。
フォントグリフを置く読み込み専用領域と、ROMイメージと作業データを置くRAM領域を
1本のバスにまとめ、命令からのアクセスを記録します。
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, NamedTuple, Optional, Tuple

logger = logging.getLogger(__name__)

class BusAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"

# @intent:responsibility 1命令の実行中に発生したメモリアクセス1件分です。
@dataclass(frozen=True)
class BusAccess:
    address: int
    data: int
    access_type: BusAccessType
    # 上書き前のバイト。WRITEのみ。ステップバックで書き戻す値
    previous_data: Optional[int] = None

# @intent:responsibility バス上の領域が満たすべき最小限の口です。offsetは領域先頭からの相対位置。
class Device(ABC):
    @abstractmethod
    def read(self, offset: int) -> int:
        ...

    @abstractmethod
    def write(self, offset: int, data: int) -> None:
        ...

    @abstractmethod
    def get_size(self) -> int:
        ...

class RAM(Device):
    """
    バイト配列で裏打ちされた読み書き可能な領域。
    """
    kind = "RAM"

    def __init__(self, size: int):
        if not isinstance(size, int) or size <= 0:
            raise ValueError(f"{self.kind} size must be a positive integer.")
        self._size = size
        self._cells = bytearray(size)

    def _check_offset(self, offset: int) -> None:
        if offset < 0 or offset >= self._size:
            raise IndexError(f"Address {offset} out of bounds for {self.kind} of size {self._size}.")

    def _store(self, offset: int, data: int) -> None:
        self._check_offset(offset)
        if data < 0 or data > 0xFF:
            raise ValueError(f"Data {data} is not an 8-bit value.")
        self._cells[offset] = data

    def read(self, offset: int) -> int:
        self._check_offset(offset)
        return self._cells[offset]

    def write(self, offset: int, data: int) -> None:
        self._store(offset, data)

    # 電源断で内容は消える
    def clear(self) -> None:
        self._cells[:] = bytes(self._size)

    def get_size(self) -> int:
        return self._size

class ROM(RAM):
    """
    フォント領域。命令からの書き込みは警告を出して捨て、
    中身を入れられるのは load_data (ローダー用の裏口) だけです。
    """
    kind = "ROM"

    # @intent:rationale FX55やFX33がフォント領域を指しても実行は止めません。
    def write(self, offset: int, data: int) -> None:
        self._check_offset(offset)
        logger.warning("Ignored write of %#04x to read-only offset %#05x.", data, offset)

    def load_data(self, offset: int, data: int) -> None:
        self._store(offset, data)

    def clear(self) -> None:
        return None

class MappedRegion(NamedTuple):
    start: int
    end: int
    device: Device

    def contains(self, address: int) -> bool:
        return self.start <= address <= self.end

# @intent:responsibility アドレスを領域へ振り分け、命令によるread/writeを記録します。
class Bus:
    """
    CHIP-8のメモリバス。

    read/write は実行中の命令が使う経路で、アクセスログに残ります。
    peek/dump/load はデバッガやローダーが使う経路で、ログに残りません。
    """
    def __init__(self):
        self._regions: List[MappedRegion] = []
        self._accesses: List[BusAccess] = []

    # @intent:pre-condition 範囲の長さはデバイスのサイズと等しいこと。重なりの検査はSystemBuilder側で行います。
    def register_device(self, start_address: int, end_address: int, device: Device) -> None:
        if start_address < 0 or end_address < start_address:
            raise ValueError(f"Invalid address range {start_address:#06x}-{end_address:#06x}.")
        if not isinstance(device, Device):
            raise TypeError(f"{type(device).__name__} is not a bus Device.")
        span = end_address - start_address + 1
        if span != device.get_size():
            raise ValueError(
                f"{type(device).__name__} of {device.get_size()} bytes does not match "
                f"a {span}-byte range at {start_address:#06x}."
            )
        self._regions.append(MappedRegion(start_address, end_address, device))
        self._regions.sort(key=lambda region: region.start)

    def get_devices(self) -> List[MappedRegion]:
        return list(self._regions)

    def get_size(self) -> int:
        return max((region.end + 1 for region in self._regions), default=0)

    # @intent:responsibility 直前のステップ分のアクセス記録を取り出して空にします。
    def get_and_clear_activity_log(self) -> List[BusAccess]:
        accesses, self._accesses = self._accesses, []
        return accesses

    def _resolve(self, address: int) -> Tuple[Device, int]:
        for region in self._regions:
            if region.contains(address):
                return region.device, address - region.start
        raise IndexError(f"Address {address:#06x} not mapped to any device.")

    def read(self, address: int) -> int:
        device, offset = self._resolve(address)
        value = device.read(offset)
        self._accesses.append(BusAccess(address, value, BusAccessType.READ))
        return value

    def write(self, address: int, data: int) -> None:
        device, offset = self._resolve(address)
        before = device.read(offset)
        device.write(offset, data)
        self._accesses.append(BusAccess(address, data, BusAccessType.WRITE, before))

    def peek(self, address: int) -> int:
        device, offset = self._resolve(address)
        return device.read(offset)

    # @intent:responsibility ロード時専用の書き込み。フォント領域にも書けます。
    def load(self, address: int, data: int) -> None:
        device, offset = self._resolve(address)
        if isinstance(device, ROM):
            device.load_data(offset, data)
        else:
            device.write(offset, data)

    def dump(self, start: int, length: int) -> bytes:
        return bytes(self.peek(address) for address in range(start, start + length))

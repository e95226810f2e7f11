# src/retro_chip8/core/shared.py
"""
インタプリタ状態への排他アクセスハンドル。

コア自身はロックを持たず、単一の書き手を前提とします。UIスレッドと実行スレッドのように
複数のスレッドで同じCPUを共有するホストは、このハンドルを介して全てのアクセスを直列化します。
"""
import threading
from contextlib import contextmanager
from typing import Generic, Iterator, TypeVar

CpuT = TypeVar("CpuT")

# @intent:responsibility 1つのCPUインスタンスを1つのロックで保護し、排他的なアクセス手段を提供します。
# @intent:rationale プロセス全体のグローバル状態にせず、明示的なハンドルとして持ち回すことで、
#                  コアをライフサイクルの前提から切り離し、単体でテスト可能に保ちます。
class SharedMachine(Generic[CpuT]):
    def __init__(self, cpu: CpuT):
        self._cpu = cpu
        self._lock = threading.Lock()

    # @intent:responsibility ロックを取得した状態でCPUを貸し出します。
    @contextmanager
    def access(self) -> Iterator[CpuT]:
        with self._lock:
            yield self._cpu

    # @intent:responsibility 保護対象のCPUを差し替えます（ROM/設定の再ロード時）。
    def replace(self, cpu: CpuT) -> None:
        with self._lock:
            self._cpu = cpu

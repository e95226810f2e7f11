# tests/core/test_shared_machine.py
"""
retro_chip8.core の排他アクセスハンドルと状態コピーの単体テスト。
"""
import threading

from retro_chip8.arch.chip8.cpu import Chip8Cpu
from retro_chip8.arch.chip8.state import Chip8CpuState
from retro_chip8.core.shared import SharedMachine

# @intent:test_suite 複数スレッドからのアクセスが直列化されることと、状態コピーの独立性を検証します。

def test_access_yields_the_cpu():
    cpu = Chip8Cpu()
    shared = SharedMachine(cpu)
    with shared.access() as borrowed:
        assert borrowed is cpu

def test_access_is_exclusive():
    shared = SharedMachine(Chip8Cpu())
    entered = threading.Event()
    release = threading.Event()
    acquired_by_other = []

    def holder():
        with shared.access():
            entered.set()
            release.wait(timeout=5)

    def contender():
        with shared.access():
            acquired_by_other.append(release.is_set())

    first = threading.Thread(target=holder)
    first.start()
    entered.wait(timeout=5)
    second = threading.Thread(target=contender)
    second.start()
    second.join(timeout=0.1)
    assert acquired_by_other == []

    release.set()
    first.join(timeout=5)
    second.join(timeout=5)
    assert acquired_by_other == [True]

# @intent:test_case_concurrency 2つのスレッドが命令とタイマを同時に駆動しても状態が壊れないことを検証します。
def test_concurrent_step_and_timers():
    cpu = Chip8Cpu()
    # 0x200: ADD V0, #$01 / 0x202: JP $200
    cpu.load_rom(bytes([0x70, 0x01, 0x12, 0x00]))
    cpu.get_state().delay_timer = 0xFF
    shared = SharedMachine(cpu)

    def run_cpu():
        for _ in range(1000):
            with shared.access() as machine:
                machine.step()

    def run_timers():
        for _ in range(100):
            with shared.access() as machine:
                machine.tick_timers()

    threads = [threading.Thread(target=run_cpu), threading.Thread(target=run_timers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    with shared.access() as machine:
        assert machine.cycle_count == 1000
        assert machine.get_state().v[0] == 500 & 0xFF
        assert machine.get_state().delay_timer == 0xFF - 100

def test_replace():
    shared = SharedMachine(Chip8Cpu())
    replacement = Chip8Cpu()
    shared.replace(replacement)
    with shared.access() as cpu:
        assert cpu is replacement

def test_state_copy_is_deep():
    state = Chip8CpuState()
    state.stack.append(0x202)
    clone = state.copy()
    clone.stack.append(0x300)
    clone.v[0] = 1
    assert state.stack == [0x202]
    assert state.v[0] == 0
    assert clone.sp == 2

def test_vf_property_masks_to_byte():
    state = Chip8CpuState()
    state.vf = 0x1FF
    assert state.v[0xF] == 0xFF

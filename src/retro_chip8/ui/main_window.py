# src/retro_chip8/ui/main_window.py
"""
CHIP-8 のメインウィンドウ。
フレームバッファ表示、レジスタ表示、実行制御を保持し、レイアウトを管理します。
"""
import dataclasses
import time
from typing import Optional

from PySide6.QtCore import Qt, QThread, QTimer, Signal, Slot
from PySide6.QtGui import QAction, QCloseEvent, QColor, QKeyEvent, QKeySequence, QPalette
from PySide6.QtWidgets import (
    QApplication, QDockWidget, QFileDialog, QLabel, QMainWindow, QMessageBox
)

from retro_chip8.arch.chip8.cpu import Chip8Cpu
from retro_chip8.common.errors import Chip8Error
from retro_chip8.config.builder import SystemBuilder
from retro_chip8.config.loader import ConfigLoader
from retro_chip8.config.models import SystemConfig
from retro_chip8.core.shared import SharedMachine
from retro_chip8.debugger.debugger import Debugger
from .display_view import DisplayView
from .register_view import RegisterView

PRESENT_INTERVAL_MS = 16 # 約60Hzで表示を更新
MAX_CATCH_UP_SECONDS = 0.25

_DARK_PALETTE = (
    (QPalette.Window, (29, 29, 29)),
    (QPalette.WindowText, (224, 224, 224)),
    (QPalette.Base, (30, 30, 30)),
    (QPalette.Text, (224, 224, 224)),
    (QPalette.Button, (53, 53, 53)),
    (QPalette.ButtonText, (224, 224, 224)),
    (QPalette.Highlight, (42, 130, 218)),
)

# @intent:responsibility 命令クロックとタイマクロックを独立したスケジュールで駆動するバックグラウンドスレッド。
class EmulatorThread(QThread):
    """
    cpu_hz で Debugger.step_instruction() を、timer_hz で tick_timers() を呼び出します。
    命令はデバッガ経由で進めるため、停止後の Step Back は実行中の命令も巻き戻せます。
    全てのアクセスは SharedMachine.access() を介して直列化されます。
    """
    fatal_error = Signal(str)

    def __init__(self, shared: SharedMachine, debugger: Debugger, cpu_hz: int, timer_hz: int):
        super().__init__()
        self._shared = shared
        self._debugger = debugger
        self._cpu_interval = 1.0 / cpu_hz
        self._timer_interval = 1.0 / timer_hz
        self._running = False

    def run(self):
        self._running = True
        next_cpu = next_timer = time.perf_counter()

        while self._running:
            now = time.perf_counter()
            # 長時間止まっていた場合に命令をまとめて実行しないよう、遅れを切り捨てる
            if now - next_cpu > MAX_CATCH_UP_SECONDS:
                next_cpu = now
            if now - next_timer > MAX_CATCH_UP_SECONDS:
                next_timer = now

            try:
                with self._shared.access() as cpu:
                    while next_timer <= now:
                        cpu.tick_timers()
                        next_timer += self._timer_interval
                    while next_cpu <= now:
                        self._debugger.step_instruction()
                        next_cpu += self._cpu_interval
            except Chip8Error as e:
                self._running = False
                self.fatal_error.emit(str(e))
                return

            delay = min(next_cpu, next_timer) - time.perf_counter()
            if delay > 0:
                time.sleep(delay)

    def stop(self) -> None:
        self._running = False

# @intent:responsibility 画面、レジスタパネル、実行制御をまとめるトップレベルウィンドウ。
class MainWindow(QMainWindow):
    def __init__(self, config: Optional[SystemConfig] = None, cpu: Optional[Chip8Cpu] = None, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Retro CHIP-8")

        self._config = config or SystemConfig()
        if cpu is None:
            cpu, _ = SystemBuilder().build_system(self._config)
        self.shared = SharedMachine(cpu)
        self.debugger = Debugger(cpu)
        self.emulator_thread: Optional[EmulatorThread] = None

        self._apply_dark_palette()
        self.display_view = DisplayView(self._config.display)
        self.setCentralWidget(self.display_view)
        self._create_register_dock()
        self._create_toolbar()
        self._create_menus()
        self.status_label = QLabel("Ready")
        self.statusBar().addWidget(self.status_label)

        self.present_timer = QTimer(self)
        self.present_timer.timeout.connect(self._present_frame)
        self.present_timer.start(PRESENT_INTERVAL_MS)

        self._refresh_views(force=True)
        self._update_ui_state(False)

    def _create_menus(self):
        file_menu = self.menuBar().addMenu("File")
        self.load_rom_action = self._make_action("Load ROM...", self._load_rom_dialog, "Ctrl+O")
        self.load_config_action = self._make_action("Load System Config...", self._load_config_dialog)
        for action in (self.load_rom_action, self.load_config_action):
            file_menu.addAction(action)

    def _make_action(self, text: str, slot, shortcut: Optional[str] = None) -> QAction:
        action = QAction(text, self)
        if shortcut:
            action.setShortcut(shortcut)
        action.triggered.connect(slot)
        return action

    def _create_toolbar(self):
        controls = self.addToolBar("Execution")
        self.run_action = self._make_action("Run", self._run, "F5")
        self.stop_action = self._make_action("Stop", self._stop, "Shift+F5")
        self.step_action = self._make_action("Step", self._step, "F10")
        self.step_back_action = self._make_action("Step Back", self._step_back, "Shift+F10")
        self.reset_action = self._make_action("Reset", self._reset)
        controls.addActions([self.run_action, self.stop_action, self.step_action,
                             self.step_back_action, self.reset_action])

    def _create_register_dock(self):
        dock = QDockWidget("Registers", self)
        dock.setAllowedAreas(Qt.LeftDockWidgetArea | Qt.RightDockWidgetArea)
        self.register_view = RegisterView()
        with self.shared.access() as cpu:
            self.register_view.set_layout_info(cpu.get_register_layout())
        dock.setWidget(self.register_view)
        self.addDockWidget(Qt.RightDockWidgetArea, dock)

    def is_running(self) -> bool:
        return self.emulator_thread is not None and self.emulator_thread.isRunning()

    # 実行中に触れるのは Stop と Reset だけ
    def _update_ui_state(self, running: bool):
        for action in (self.load_rom_action, self.load_config_action, self.run_action,
                       self.step_action, self.step_back_action):
            action.setEnabled(not running)
        self.stop_action.setEnabled(running)

    # @intent:responsibility フレームバッファに変更があれば表示し、再描画要求を下ろします（フラグのリセットはホストの責務）。
    def _refresh_views(self, force: bool = False):
        with self.shared.access() as cpu:
            if force or cpu.framebuffer.needs_redraw:
                self.display_view.update_frame(cpu.framebuffer)
                cpu.framebuffer.mark_presented()
            register_map = cpu.get_register_map()
            sound_active = cpu.sound_active
        self.register_view.update_registers(register_map)
        if self.is_running():
            self.status_label.setText("Running  BEEP" if sound_active else "Running")

    @Slot()
    def _present_frame(self):
        self._refresh_views()

    @Slot()
    def _run(self):
        with self.shared.access() as cpu:
            if not cpu.rom_loaded:
                QMessageBox.warning(self, "Run", "Load a ROM before running.")
                return
        self.emulator_thread = EmulatorThread(
            self.shared, self.debugger, self._config.cpu_hz, self._config.timer_hz)
        self.emulator_thread.fatal_error.connect(self._on_fatal_error)
        self.emulator_thread.finished.connect(self._on_thread_finished)
        self._update_ui_state(True)
        self.emulator_thread.start()

    @Slot()
    def _on_thread_finished(self):
        self._update_ui_state(False)

    @Slot()
    def _stop(self):
        if self.emulator_thread is not None:
            self.emulator_thread.stop()
            self.emulator_thread.wait()
        self.status_label.setText("Stopped")
        self._update_ui_state(False)

    @Slot()
    def _step(self):
        try:
            with self.shared.access():
                snapshot = self.debugger.step_instruction()
        except Chip8Error as e:
            self._on_fatal_error(str(e))
            return
        self.status_label.setText(snapshot.metadata.trace or "")
        self._refresh_views()

    @Slot()
    def _step_back(self):
        with self.shared.access():
            snapshot = self.debugger.step_back()
        self.status_label.setText(snapshot.metadata.trace if snapshot else "Start of history")
        self._refresh_views(force=True)

    @Slot()
    def _reset(self):
        self._stop()
        with self.shared.access() as cpu:
            cpu.reset()
            self.debugger = Debugger(cpu)
        self.status_label.setText("Reset")
        self._refresh_views(force=True)

    @Slot(str)
    def _on_fatal_error(self, message: str):
        self.status_label.setText("Halted")
        self._update_ui_state(False)
        QMessageBox.critical(self, "Fatal Error", message)

    # @intent:responsibility ROMファイルをロードします。以前のプログラムの残りを消すため電源再投入してからロードします。
    def load_rom(self, file_name: str) -> None:
        with self.shared.access() as cpu:
            cpu.power_cycle()
            cpu.load_rom_file(file_name)
            self.debugger = Debugger(cpu)
        self._config.rom_path = file_name
        self._refresh_views(force=True)

    @Slot()
    def _load_rom_dialog(self):
        file_name, _ = QFileDialog.getOpenFileName(self, "Open CHIP-8 ROM", "", "CHIP-8 ROMs (*.ch8 *.c8);;All Files (*)")
        if not file_name:
            return
        try:
            self.load_rom(file_name)
            self.status_label.setText(f"Loaded {file_name}")
        except (OSError, Chip8Error) as e:
            QMessageBox.critical(self, "Error", f"Failed to load ROM: {e}")

    @Slot()
    def _load_config_dialog(self):
        file_name, _ = QFileDialog.getOpenFileName(self, "Open System Config", "", "System config (*.yaml *.yml)")
        if not file_name:
            return
        try:
            self.apply_config(ConfigLoader().load_from_file(file_name))
        except (OSError, ValueError, Chip8Error) as e:
            QMessageBox.critical(self, "Error", f"Could not apply {file_name}: {e}")
            return
        self.status_label.setText(f"Loaded config {file_name}")

    # @intent:responsibility 設定からマシンを作り直します。rom_path が無い設定では、ロード中のROMを引き継ぎます。
    def apply_config(self, config: SystemConfig) -> None:
        if not config.rom_path and self._config.rom_path:
            config = dataclasses.replace(config, rom_path=self._config.rom_path)
        cpu, _ = SystemBuilder().build_system(config)
        self._config = config
        self.shared.replace(cpu)
        self.debugger = Debugger(cpu)
        self.display_view.apply_config(config.display)
        self._refresh_views(force=True)

    # @intent:responsibility 物理キーを設定のキーマップで論理キーへ変換します。
    def _map_key(self, event: QKeyEvent) -> Optional[int]:
        name = QKeySequence(event.key()).toString().upper()
        return self._config.key_map.get(name)

    def keyPressEvent(self, event: QKeyEvent):
        if event.key() == Qt.Key_Escape:
            self.close()
            return
        key = self._map_key(event)
        if key is None or event.isAutoRepeat():
            super().keyPressEvent(event)
            return
        with self.shared.access() as cpu:
            cpu.keypad.press(key)

    def keyReleaseEvent(self, event: QKeyEvent):
        key = self._map_key(event)
        if key is None or event.isAutoRepeat():
            super().keyReleaseEvent(event)
            return
        with self.shared.access() as cpu:
            cpu.keypad.release(key)

    def _apply_dark_palette(self):
        palette = QPalette()
        for role, rgb in _DARK_PALETTE:
            palette.setColor(role, QColor(*rgb))
        QApplication.setPalette(palette)

    # @intent:responsibility 閉じる前に実行スレッドを止め、終了を待ちます。
    def closeEvent(self, event: QCloseEvent):
        self.present_timer.stop()
        if self.is_running():
            self.emulator_thread.stop()
            self.emulator_thread.wait()
        event.accept()

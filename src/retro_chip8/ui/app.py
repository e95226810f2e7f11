# src/retro_chip8/ui/app.py
"""
Qtアプリケーションのエントリポイント。
設定とROMを読み込み、メインウィンドウを起動します。
"""
import argparse
import logging
import sys
from typing import List, Optional

from PySide6.QtWidgets import QApplication

from retro_chip8.common.errors import Chip8Error
from retro_chip8.config.builder import SystemBuilder
from retro_chip8.config.loader import ConfigLoader
from retro_chip8.config.models import SystemConfig
from .main_window import MainWindow

logger = logging.getLogger(__name__)

def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="retro-chip8", description="CHIP-8 interpreter")
    parser.add_argument("rom", nargs="?", help="CHIP-8 ROM image to load at 0x200")
    parser.add_argument("--config", help="YAML system configuration file")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="logging level (DEBUG traces every instruction)")
    return parser.parse_args(argv)

# @intent:responsibility アプリケーションを起動し、メインウィンドウを表示します。
def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    try:
        config = ConfigLoader().load_from_file(args.config) if args.config else SystemConfig()
        if args.rom:
            config.rom_path = args.rom
        cpu, _ = SystemBuilder().build_system(config)
    except (OSError, ValueError, Chip8Error) as e:
        logger.error("Failed to start: %s", e)
        return 1

    app = QApplication(sys.argv[:1])
    main_win = MainWindow(config, cpu)
    main_win.show()
    return app.exec()

if __name__ == '__main__':
    sys.exit(main())

"""Desktop app bootstrap for the constellation background."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace

from PySide6.QtWidgets import QApplication

from configs.loader import DEFAULT_CONFIG_PATH, ConfigLoader
from core.device_capabilities import detect_capabilities
from ui_desktop.main_window import MainWindow

LOGGER = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="constellation-desktop")
    parser.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="YAML or JSON config path")
    parser.add_argument("--overlay", action="store_true", help="show the FPS overlay")
    parser.add_argument("--reduced-motion", action="store_true", help="draw a static background")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    config = ConfigLoader.load(args.config)
    if args.overlay:
        config = replace(config, governor=replace(config.governor, show_overlay=True))

    app = QApplication.instance() or QApplication(sys.argv)
    screen = app.primaryScreen()
    screen_width = screen.size().width() if screen is not None else None
    capabilities = detect_capabilities(screen_width=screen_width, reduced_motion=args.reduced_motion)
    LOGGER.info("Device capabilities: %s", capabilities.to_dict())

    window = MainWindow(config=config, capabilities=capabilities)
    window.show()
    window.start()

    code = app.exec()
    window.stop()
    return int(code)


if __name__ == "__main__":
    raise SystemExit(main())

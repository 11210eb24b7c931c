"""
gridbeat.py

Real entrypoint that launches the GridBeat harness window.

Integration
- Loads config (file, environment overrides, command line overrides)
- Applies the configured log level
- Creates QApplication and the gameplay harness window
- Starts the Qt event loop
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from PyQt6.QtWidgets import QApplication

import config
import sample_track
from gameplay_harness import GameplayHarnessWindow
from logging_utils import log_event, set_log_level


def build_argument_parser() -> argparse.ArgumentParser:
    argument_parser = argparse.ArgumentParser(description="GridBeat rhythm grid")
    argument_parser.add_argument("--fullscreen", action="store_true", help="Start in fullscreen.")
    argument_parser.add_argument("--bpm", type=float, default=None, help="Tempo of the built-in sample track.")
    argument_parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override the configured log level.",
    )
    return argument_parser


def main(argv: Optional[List[str]] = None) -> int:
    parsed_args = build_argument_parser().parse_args(argv)

    try:
        app_config, config_path = config.get_config()
    except (OSError, ValueError) as exception:
        error_payload = {"ok": False, "error": str(exception)}
        print(json.dumps(error_payload, ensure_ascii=False, indent=2))
        return 2

    set_log_level(parsed_args.log_level or app_config.logging.level)
    log_event("INFO", "App", "Config loaded", path=str(config_path) if config_path is not None else "(defaults)")

    bpm = float(parsed_args.bpm) if parsed_args.bpm is not None else float(app_config.harness.sample_bpm)
    if bpm <= 0.0:
        log_event("ERROR", "App", "BPM must be positive", bpm=bpm)
        return 2
    track = sample_track.build_sample_track(bpm=bpm)

    qt_application = QApplication(sys.argv)

    main_window = GameplayHarnessWindow(app_config=app_config, track=track)
    main_window.resize(int(app_config.harness.window_width), int(app_config.harness.window_height))
    main_window.show()

    if parsed_args.fullscreen:
        main_window.showFullScreen()

    return int(qt_application.exec())


if __name__ == "__main__":
    raise SystemExit(main())

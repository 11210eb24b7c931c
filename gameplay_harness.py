# -*- coding: utf-8 -*-
########################
# gameplay_harness.py
########################
# Purpose:
# - Gameplay harness window for local play and iteration.
# - Integrates GameClock + InputRouter + SessionController + GridOverlayWidget.
#
# Design notes:
# - The harness is the driver loop. It owns two timers on the Qt thread:
#   - frame timer (about 16ms): SessionController.tick
#   - completion timer (100ms): SessionController.check_completion
# - Key presses and taps are delivered on the same thread, so no locking is needed.
# - Provides a reusable controller (GameplayHarnessController) so other UIs can reuse the same
#   pipeline, event filter and timer loop.
#
########################
# Interfaces:
# Public dataclasses:
# - HarnessState(track_name: str, last_status: str, last_error: str, runs_completed: int)
#
# Public classes:
# - class GameplayHarnessController(PyQt6.QtCore.QObject)
#   - start_track() -> None
#   - stop_track() -> None
#   - set_track(track: Track, track_name: str) -> None
# - class GameplayHarnessWindow(PyQt6.QtWidgets.QMainWindow)
#
# Public functions:
# - main() -> int
#
# Inputs:
# - Keyboard direction input (InputRouter handles QKeyEvent).
# - Mouse taps on grid cells (GridOverlayWidget.cellTapped).
#
# Outputs:
# - Visible grid, circles, judgement feedback and run statistics.
#
########################

from __future__ import annotations

from dataclasses import dataclass
import argparse
from typing import Optional


@dataclass
class HarnessState:
    track_name: str = "sample"
    last_status: str = ""
    last_error: str = ""
    runs_completed: int = 0


class GameplayHarnessControllerSignals:
    """Namespace for signal names used by the harness and embedding code."""

    TRACK_FINISHED = "trackFinished"
    STRAY_PRESS = "strayPress"


class GameplayHarnessController:  # QObject subclass, defined lazily inside Qt import block
    pass


def _create_controller_class():
    from PyQt6.QtCore import QObject, QEvent, QTimer, pyqtSignal
    from PyQt6.QtGui import QKeyEvent

    import config
    import game_clock
    import gameplay_models
    import input_resolver
    import input_router
    import overlay_renderer
    import session_controller
    from logging_utils import log_event

    class _Signals(QObject):
        trackFinished = pyqtSignal()
        strayPress = pyqtSignal(int)

    class _GameplayHarnessController(QObject):
        """Reusable gameplay pipeline controller."""

        def __init__(
            self,
            *,
            track: gameplay_models.Track,
            overlay_widget: overlay_renderer.GridOverlayWidget,
            app_config: Optional[config.AppConfig] = None,
            parent: Optional[QObject] = None,
        ) -> None:
            super().__init__(parent)
            self._signals = _Signals(self)
            self._state = HarnessState()
            self._config = app_config if app_config is not None else config.AppConfig()

            self._clock = game_clock.GameClock()
            self._session = session_controller.SessionController(
                track,
                timing=self._config.timing,
                clock=self._clock,
            )

            self._overlay = overlay_widget
            self._overlay.set_session_controller(self._session)
            self._overlay.cellTapped.connect(self._on_cell_tapped)

            self._router = input_router.InputRouter(parent=self)
            self._router.directionPressed.connect(self._on_direction_pressed)
            self._router.directionReleased.connect(self._on_direction_released)

            self._frame_timer = QTimer(self)
            self._frame_timer.setInterval(int(self._config.harness.tick_interval_ms))
            self._frame_timer.timeout.connect(self._on_frame)

            self._completion_timer = QTimer(self)
            self._completion_timer.setInterval(int(self._config.harness.completion_check_interval_ms))
            self._completion_timer.timeout.connect(self._on_completion_check)

            self._set_status("Press Start")

        @property
        def signals(self) -> _Signals:
            return self._signals

        @property
        def state(self) -> HarnessState:
            return self._state

        @property
        def session_controller(self) -> session_controller.SessionController:
            return self._session

        # -----------------
        # Event filter (shared)
        # -----------------

        def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # noqa: N802
            if event.type() == QEvent.Type.KeyPress and isinstance(event, QKeyEvent):
                if self._router.handle_key_press(event):
                    return True
            if event.type() == QEvent.Type.KeyRelease and isinstance(event, QKeyEvent):
                if self._router.handle_key_release(event):
                    return True
            if event.type() in (QEvent.Type.WindowDeactivate, QEvent.Type.FocusOut):
                self._router.clear_pressed_keys()
            return super().eventFilter(watched, event)

        # -----------------
        # Core operations
        # -----------------

        def set_track(self, track: gameplay_models.Track, track_name: str) -> None:
            self.stop_track()
            self._session = session_controller.SessionController(
                track,
                timing=self._config.timing,
                clock=self._clock,
            )
            self._overlay.set_session_controller(self._session)
            self._state.track_name = str(track_name or "custom")
            self._set_status(f"Loaded track '{self._state.track_name}' ({len(track)} events)")

        def start_track(self) -> None:
            self._session.start()
            self._frame_timer.start()
            self._completion_timer.start()
            self._state.last_error = ""
            self._set_status("Playing")

        def stop_track(self) -> None:
            self._frame_timer.stop()
            self._completion_timer.stop()
            if self._session.is_running():
                self._session.stop()
                self._set_status("Stopped")

        # -----------------
        # Timer callbacks
        # -----------------

        def _on_frame(self) -> None:
            self._session.tick()

        def _on_completion_check(self) -> None:
            if not self._session.check_completion():
                return
            self._frame_timer.stop()
            self._completion_timer.stop()
            self._state.runs_completed += 1
            stats = self._session.score_state()
            self._set_status(
                f"Track complete: {stats.hit_count} hits, {stats.miss_count} misses, max combo {stats.max_combo}"
            )
            self._signals.trackFinished.emit()

        # -----------------
        # Input path
        # -----------------

        def _on_direction_pressed(self, direction: input_resolver.Direction) -> None:
            resolver = self._session.input_resolver()
            presses_before = resolver.fired_presses
            judgement_event = self._session.key_down(direction)
            if judgement_event is None and resolver.fired_presses > presses_before:
                self._report_stray(resolver.selected_cell())

        def _on_direction_released(self, direction: input_resolver.Direction) -> None:
            self._session.key_up(direction)

        def _on_cell_tapped(self, cell_index: int) -> None:
            resolver = self._session.input_resolver()
            presses_before = resolver.fired_presses
            judgement_event = self._session.tap(cell_index)
            if judgement_event is None and resolver.fired_presses > presses_before:
                self._report_stray(cell_index)

        def _report_stray(self, cell_index: Optional[int]) -> None:
            if cell_index is None:
                return
            log_event("DEBUG", "Harness", "Stray press", cell=cell_index)
            self._signals.strayPress.emit(int(cell_index))

        def _set_status(self, text: str) -> None:
            status_text = str(text)
            self._state.last_status = status_text
            self._overlay.set_state_text(status_text)

    return _GameplayHarnessController


# Instantiate the Qt-backed controller class.
GameplayHarnessController = _create_controller_class()


class GameplayHarnessWindow:
    pass


def _create_window_class():
    from PyQt6.QtCore import Qt
    from PyQt6.QtWidgets import (
        QHBoxLayout,
        QMainWindow,
        QPushButton,
        QVBoxLayout,
        QWidget,
    )

    import config
    import gameplay_models
    import overlay_renderer
    import sample_track

    class _GameplayHarnessWindow(QMainWindow):
        def __init__(
            self,
            *,
            app_config: Optional[config.AppConfig] = None,
            track: Optional[gameplay_models.Track] = None,
        ) -> None:
            super().__init__()
            self.setWindowTitle("GridBeat")

            resolved_config = app_config if app_config is not None else config.AppConfig()
            resolved_track = (
                track if track is not None else sample_track.build_sample_track(bpm=resolved_config.harness.sample_bpm)
            )

            root_widget = QWidget(self)
            root_layout = QVBoxLayout(root_widget)

            controls = QWidget(root_widget)
            controls_layout = QHBoxLayout(controls)
            self._start_button = QPushButton("Start Track", controls)
            self._stop_button = QPushButton("Stop", controls)
            controls_layout.addWidget(self._start_button)
            controls_layout.addWidget(self._stop_button)

            self._overlay = overlay_renderer.GridOverlayWidget(parent=root_widget)

            root_layout.addWidget(controls)
            root_layout.addWidget(self._overlay, stretch=1)
            self.setCentralWidget(root_widget)

            self._controller = GameplayHarnessController(
                track=resolved_track,
                overlay_widget=self._overlay,
                app_config=resolved_config,
                parent=self,
            )

            self._start_button.clicked.connect(self._controller.start_track)
            self._stop_button.clicked.connect(self._controller.stop_track)

            # Buttons must not steal arrow keys from the grid.
            self._start_button.setFocusPolicy(Qt.FocusPolicy.NoFocus)
            self._stop_button.setFocusPolicy(Qt.FocusPolicy.NoFocus)

            # Install the shared event filter. Key events land on the focused grid widget.
            self._overlay.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
            self._overlay.installEventFilter(self._controller)
            self.installEventFilter(self._controller)
            self._overlay.setFocus()

        @property
        def controller(self) -> GameplayHarnessController:
            return self._controller

    return _GameplayHarnessWindow


GameplayHarnessWindow = _create_window_class()


def _run_chunk_tests() -> None:
    import game_clock
    import gameplay_models
    import input_resolver
    import sample_track
    import session_controller

    track = sample_track.build_sample_track(bpm=100.0)
    assert len(track) == 56
    offsets = [event.spawn_offset_ms for event in track]
    assert offsets == sorted(offsets)
    assert all(gameplay_models.is_playable_cell(event.cell_index) for event in track)

    clock = game_clock.ManualClock()
    controller = session_controller.SessionController(track, clock=clock)
    controller.start()

    # Drive the whole track at 16ms frames, pressing each target at its perfect time.
    pending = {}
    end_time_ms = controller.end_time_ms()
    assert end_time_ms is not None
    while controller.is_running():
        report = controller.tick()
        for target in report.spawned:
            pending[target.target_id] = target
        for target_id, target in list(pending.items()):
            if clock.now_ms() >= target.perfect_time_ms:
                assert controller.tap(target.cell_index) is not None
                del pending[target_id]
        if int(clock.now_ms()) % 96 == 0:
            controller.check_completion()
        clock.advance_ms(16.0)
        assert clock.now_ms() < end_time_ms + 1000.0

    stats = controller.score_state()
    assert stats.miss_count == 0
    assert stats.hit_count == len(track)

    # Direction path: Up+Left resolves cell 0 only once per hold.
    resolver = input_resolver.InputResolver()
    assert resolver.key_down(input_resolver.Direction.UP) == 1
    assert resolver.key_down(input_resolver.Direction.LEFT) == 0
    assert resolver.key_down(input_resolver.Direction.LEFT) is None


def _run_gui() -> int:
    from PyQt6.QtWidgets import QApplication
    import sys

    app = QApplication(sys.argv)
    window = GameplayHarnessWindow()
    window.resize(600, 720)
    window.show()
    return int(app.exec())


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--run-tests",
        action="store_true",
        help="Run pure logic tests (no Qt).",
    )
    return parser


def main() -> int:
    args = build_argument_parser().parse_args()
    if args.run_tests:
        _run_chunk_tests()
        print("Chunk tests passed.")
        return 0
    return _run_gui()


if __name__ == "__main__":
    raise SystemExit(main())

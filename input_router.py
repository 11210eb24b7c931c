# -*- coding: utf-8 -*-
########################
# input_router.py
########################
# Purpose:
# - Single keyboard listener for gameplay direction input.
# - Translates QKeyEvent into input_resolver.Direction press/release signals.
#
# Design notes:
# - This must be the only direction input source. No duplicate key mapping elsewhere.
# - Debounce rules:
#   - Ignore auto repeat.
#   - Track pressed keys to avoid duplicate presses.
#   - Two keys bound to one direction (Left and A) release it only when both are up.
# - Cell selection and press edges are decided by input_resolver.InputResolver, not here.
#
########################
# Interfaces:
# Public classes:
# - class InputRouter(PyQt6.QtCore.QObject)
#   - Signals:
#     - directionPressed(input_resolver.Direction)
#     - directionReleased(input_resolver.Direction)
#   - Methods:
#     - handle_key_press(event: QKeyEvent) -> bool
#     - handle_key_release(event: QKeyEvent) -> bool
#     - clear_pressed_keys() -> None
#     - reset_stats() -> None
#
# Inputs:
# - Raw QKeyEvent from the Qt event loop.
#
# Outputs:
# - Direction signals consumed by SessionController.key_down / key_up.
#
########################

from __future__ import annotations

from typing import Dict, List, Optional, Set

from PyQt6.QtCore import QObject, Qt, pyqtSignal
from PyQt6.QtGui import QKeyEvent

from input_resolver import Direction


def _build_default_key_to_direction_map() -> Dict[int, Direction]:
    """
    Default direction mapping.

    Accepted keys:
      - Arrow keys: Up, Down, Left, Right
      - WASD keys: W, S, A, D
    """
    key_to_direction: Dict[int, Direction] = {}

    def bind(key_constant: int, direction: Direction) -> None:
        key_to_direction[int(key_constant)] = direction

    # Arrow keys
    bind(Qt.Key.Key_Up, Direction.UP)
    bind(Qt.Key.Key_Down, Direction.DOWN)
    bind(Qt.Key.Key_Left, Direction.LEFT)
    bind(Qt.Key.Key_Right, Direction.RIGHT)

    # WASD
    bind(Qt.Key.Key_W, Direction.UP)
    bind(Qt.Key.Key_S, Direction.DOWN)
    bind(Qt.Key.Key_A, Direction.LEFT)
    bind(Qt.Key.Key_D, Direction.RIGHT)

    return key_to_direction


class InputRouter(QObject):
    """
    Central keyboard router for gameplay direction input.

    This object never judges timing and never picks cells. Its only job is to:
      - map keys to directions
      - emit directionPressed for each new physical press
      - emit directionReleased once no held key maps to that direction
    """

    directionPressed = pyqtSignal(object)
    directionReleased = pyqtSignal(object)

    def __init__(
        self,
        parent: Optional[QObject] = None,
        key_to_direction_map: Optional[Dict[int, Direction]] = None,
    ) -> None:
        super().__init__(parent)

        self._key_to_direction: Dict[int, Direction] = (
            dict(key_to_direction_map) if key_to_direction_map is not None else _build_default_key_to_direction_map()
        )

        # Press tracking for debounce and focus loss handling.
        self._pressed_keys: Set[int] = set()

        self._total_presses: int = 0
        self._ignored_presses: int = 0

    # ------------------------------------------------------------------
    # Public API used by gameplay_harness
    # ------------------------------------------------------------------

    def handle_key_press(self, event: QKeyEvent) -> bool:
        """
        Handle a Qt key press.

        Returns True if this router consumed the event, False otherwise.
        """
        key_code = int(event.key())
        direction = self._key_to_direction.get(key_code)
        if direction is None:
            # Not a gameplay key.
            return False

        # Ignore auto repeat so holding a key does not spam presses.
        if event.isAutoRepeat() or key_code in self._pressed_keys:
            self._ignored_presses += 1
            return True

        self._pressed_keys.add(key_code)
        self._total_presses += 1
        self.directionPressed.emit(direction)
        return True

    def handle_key_release(self, event: QKeyEvent) -> bool:
        """
        Handle a Qt key release.

        Returns True if this router consumed the event, False otherwise.
        """
        key_code = int(event.key())
        direction = self._key_to_direction.get(key_code)
        if direction is None:
            return False

        if event.isAutoRepeat() or key_code not in self._pressed_keys:
            return True

        self._pressed_keys.discard(key_code)
        if direction not in self.held_directions():
            self.directionReleased.emit(direction)
        return True

    def held_directions(self) -> List[Direction]:
        held: List[Direction] = []
        for key_code in self._pressed_keys:
            direction = self._key_to_direction.get(key_code)
            if direction is not None and direction not in held:
                held.append(direction)
        return held

    def clear_pressed_keys(self) -> None:
        """
        Clear pressed state for all keys and release every held direction.

        Called by the harness on focus loss or window deactivation.
        """
        released = self.held_directions()
        self._pressed_keys.clear()
        for direction in released:
            self.directionReleased.emit(direction)

    def reset_stats(self) -> None:
        """
        Reset debugging counters. Does not change pressed key state.
        """
        self._total_presses = 0
        self._ignored_presses = 0

    @property
    def key_to_direction_map(self) -> Dict[int, Direction]:
        return dict(self._key_to_direction)

    @property
    def total_presses(self) -> int:
        return self._total_presses

    @property
    def ignored_presses(self) -> int:
        return self._ignored_presses


def _run_unit_tests() -> None:
    """
    Small self test for the default key map.

    Key events need a QApplication, so this is intentionally minimal.
    """
    router = InputRouter()

    assert router.key_to_direction_map[int(Qt.Key.Key_A)] == Direction.LEFT
    assert router.key_to_direction_map[int(Qt.Key.Key_Left)] == Direction.LEFT
    assert router.key_to_direction_map[int(Qt.Key.Key_S)] == Direction.DOWN
    assert router.key_to_direction_map[int(Qt.Key.Key_D)] == Direction.RIGHT
    assert router.key_to_direction_map[int(Qt.Key.Key_Up)] == Direction.UP
    assert router.held_directions() == []


if __name__ == "__main__":
    _run_unit_tests()
    print("input_router.py: ok")

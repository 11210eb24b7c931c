# -*- coding: utf-8 -*-
########################
# input_resolver.py
########################
# Purpose:
# - Map the set of held directional inputs to a single grid cell.
# - Decide when a change of the held set is a new "press" that should trigger judgement.
#
# Design notes:
# - No Qt usage. Pure gameplay logic. Keyboard translation lives in input_router.py.
# - HeldInputs is an immutable value type with a canonical (sorted) signature.
# - Debounce rules:
#   - A press fires only when a cell is mapped and the held signature differs from the
#     signature recorded at the last fired press.
#   - A release that empties the held set clears the recorded signature.
#   - A partial release re-records the remaining signature, so pressing the released
#     key again fires a fresh press.
# - Taps bypass the resolver debounce entirely. Each tap is a discrete press.
#
########################
# Interfaces:
# Public enums:
# - class Direction(str, enum.Enum): UP | DOWN | LEFT | RIGHT
#
# Public dataclasses:
# - HeldInputs(directions: frozenset[Direction])
#   - with_pressed(direction) -> HeldInputs
#   - with_released(direction) -> HeldInputs
#   - signature() -> tuple[str, ...]
#
# Public functions:
# - cell_for_inputs(held: HeldInputs) -> Optional[int]
#
# Public classes:
# - class InputResolver
#   - held() -> HeldInputs
#   - key_down(direction: Direction) -> Optional[int]
#   - key_up(direction: Direction) -> None
#   - tap(cell_index: int) -> Optional[int]
#   - reset() -> None
#
# Inputs:
# - Direction press/release events and cell taps from the input collaborator.
#
# Outputs:
# - Cell indexes for press edges, consumed by SessionController.press_cell.
#
########################

from __future__ import annotations

from dataclasses import dataclass
import enum
from typing import Dict, FrozenSet, Optional, Tuple

import gameplay_models


class Direction(str, enum.Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


SINGLE_DIRECTION_CELLS: Dict[Direction, int] = {
    Direction.UP: 1,
    Direction.DOWN: 7,
    Direction.LEFT: 3,
    Direction.RIGHT: 5,
}

CORNER_CELLS: Dict[FrozenSet[Direction], int] = {
    frozenset({Direction.UP, Direction.LEFT}): 0,
    frozenset({Direction.UP, Direction.RIGHT}): 2,
    frozenset({Direction.DOWN, Direction.LEFT}): 6,
    frozenset({Direction.DOWN, Direction.RIGHT}): 8,
}


@dataclass(frozen=True)
class HeldInputs:
    directions: FrozenSet[Direction] = frozenset()

    def with_pressed(self, direction: Direction) -> "HeldInputs":
        return HeldInputs(directions=self.directions | {Direction(direction)})

    def with_released(self, direction: Direction) -> "HeldInputs":
        return HeldInputs(directions=self.directions - {Direction(direction)})

    def is_empty(self) -> bool:
        return not self.directions

    def signature(self) -> Tuple[str, ...]:
        return tuple(sorted(direction.value for direction in self.directions))


def cell_for_inputs(held: HeldInputs) -> Optional[int]:
    """
    Resolve a held set to a cell.

    Corner pairs win over single directions. Opposite pairs, empty sets and sets that
    satisfy more than one corner have no mapping.
    """
    satisfied_corners = [
        cell_index for corner, cell_index in CORNER_CELLS.items() if corner <= held.directions
    ]
    if len(satisfied_corners) == 1:
        return satisfied_corners[0]
    if satisfied_corners:
        return None

    if len(held.directions) == 1:
        (direction,) = tuple(held.directions)
        return SINGLE_DIRECTION_CELLS[direction]
    return None


class InputResolver:
    def __init__(self) -> None:
        self._held = HeldInputs()
        self._last_fired_signature: Optional[Tuple[str, ...]] = None

        # Simple stats for overlays and debugging.
        self._fired_presses: int = 0
        self._ignored_presses: int = 0

    def held(self) -> HeldInputs:
        return self._held

    def selected_cell(self) -> Optional[int]:
        return cell_for_inputs(self._held)

    def key_down(self, direction: Direction) -> Optional[int]:
        """
        Register a direction press. Returns the cell index when this is a new press edge.
        """
        self._held = self._held.with_pressed(direction)

        cell_index = cell_for_inputs(self._held)
        if cell_index is None:
            self._ignored_presses += 1
            return None

        signature = self._held.signature()
        if signature == self._last_fired_signature:
            # Same physical hold (auto repeat or a duplicate key down).
            self._ignored_presses += 1
            return None

        self._last_fired_signature = signature
        self._fired_presses += 1
        return cell_index

    def key_up(self, direction: Direction) -> None:
        self._held = self._held.with_released(direction)

        if self._held.is_empty():
            self._last_fired_signature = None
            return

        signature = self._held.signature()
        if signature != self._last_fired_signature:
            self._last_fired_signature = signature

    def tap(self, cell_index: int) -> Optional[int]:
        if not gameplay_models.is_playable_cell(cell_index):
            return None
        self._fired_presses += 1
        return int(cell_index)

    def reset(self) -> None:
        self._held = HeldInputs()
        self._last_fired_signature = None

    @property
    def fired_presses(self) -> int:
        return self._fired_presses

    @property
    def ignored_presses(self) -> int:
        return self._ignored_presses


def _run_unit_tests() -> None:
    assert cell_for_inputs(HeldInputs(frozenset({Direction.UP, Direction.LEFT}))) == 0
    assert cell_for_inputs(HeldInputs(frozenset({Direction.UP, Direction.DOWN}))) is None
    assert cell_for_inputs(HeldInputs()) is None

    resolver = InputResolver()
    assert resolver.key_down(Direction.UP) == 1
    assert resolver.key_down(Direction.UP) is None
    assert resolver.key_down(Direction.LEFT) == 0
    resolver.key_up(Direction.UP)
    resolver.key_up(Direction.LEFT)
    assert resolver.key_down(Direction.UP) == 1

    assert resolver.tap(4) is None
    assert resolver.tap(8) == 8
    assert resolver.tap(8) == 8


if __name__ == "__main__":
    _run_unit_tests()
    print("input_resolver.py: ok")

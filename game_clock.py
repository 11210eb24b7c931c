# -*- coding: utf-8 -*-
########################
# game_clock.py
########################
# Purpose:
# - Single source of "now" for the gameplay engine, in milliseconds.
#
# Design notes:
# - No Qt usage. Keep this module pure and deterministic.
# - GameClock reads a monotonic wall clock; it never goes backwards.
# - ManualClock is driven explicitly and is used by tests and offline simulation.
#
########################
# Interfaces:
# Public classes:
# - class GameClock
#   - now_ms() -> float
# - class ManualClock(GameClock)
#   - now_ms() -> float
#   - set_now_ms(now_ms: float) -> None
#   - advance_ms(delta_ms: float) -> float
#
# Inputs:
# - time.monotonic() (GameClock) or explicit values (ManualClock).
#
# Outputs:
# - Absolute times used by SessionController, TargetLifecycle and JudgeEngine.
#
########################

from __future__ import annotations

import time
from typing import Callable, Optional


class GameClock:
    def __init__(self, time_source: Optional[Callable[[], float]] = None) -> None:
        self._time_source: Callable[[], float] = time_source if time_source is not None else time.monotonic

    def now_ms(self) -> float:
        return float(self._time_source()) * 1000.0


class ManualClock(GameClock):
    def __init__(self, start_ms: float = 0.0) -> None:
        super().__init__(time_source=lambda: 0.0)
        self._now_ms = float(start_ms)

    def now_ms(self) -> float:
        return float(self._now_ms)

    def set_now_ms(self, now_ms: float) -> None:
        value = float(now_ms)
        # Contract choice: time never moves backwards, like the monotonic clock.
        if value < self._now_ms:
            value = self._now_ms
        self._now_ms = value

    def advance_ms(self, delta_ms: float) -> float:
        self.set_now_ms(self._now_ms + max(0.0, float(delta_ms)))
        return self._now_ms


def _run_unit_tests() -> None:
    clock = ManualClock(start_ms=100.0)
    assert clock.now_ms() == 100.0
    assert clock.advance_ms(16.0) == 116.0
    clock.set_now_ms(50.0)
    assert clock.now_ms() == 116.0

    samples = iter([1.0, 1.5])
    wall = GameClock(time_source=lambda: next(samples))
    assert wall.now_ms() == 1000.0
    assert wall.now_ms() == 1500.0


if __name__ == "__main__":
    _run_unit_tests()
    print("game_clock.py: ok")

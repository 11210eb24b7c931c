# -*- coding: utf-8 -*-
########################
# target_lifecycle.py
########################
# Purpose:
# - Owns each Target's timing state: spawn, growth, miss expiry and eviction from its Cell.
#
# Design notes:
# - No Qt usage. Pure gameplay logic.
# - Resolved targets are frozen. advance() never touches their growth or resolution.
# - A target is marked missed only after hit_window_end + miss_grace. The grace buffer lets a
#   press that lands just after the window close reach JudgeEngine first.
# - advance_cell() is the only code path that removes a Target from a Cell.
#
########################
# Interfaces:
# Public dataclasses:
# - CellAdvance(missed: list[JudgementEvent], evicted: list[Target])
#
# Public classes:
# - class TargetLifecycle
#   - __init__(timing: config.TimingConfig)
#   - spawn(fired: FiredSpawn, now_ms: float) -> Optional[Target]
#   - advance(target: Target, now_ms: float) -> Target
#   - should_evict(target: Target, now_ms: float) -> bool
#   - advance_cell(cell: Cell, now_ms: float) -> CellAdvance
#
# Inputs:
# - FiredSpawn instructions from SpawnScheduler and the current time (ms).
#
# Outputs:
# - New Target objects, miss JudgementEvents and evicted targets for SessionController.
#
########################

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import config
import gameplay_models
import spawn_scheduler


@dataclass
class CellAdvance:
    missed: List[gameplay_models.JudgementEvent] = field(default_factory=list)
    evicted: List[gameplay_models.Target] = field(default_factory=list)


class TargetLifecycle:
    def __init__(self, timing: Optional[config.TimingConfig] = None) -> None:
        self._timing = timing if timing is not None else config.TimingConfig()

    def timing(self) -> config.TimingConfig:
        return self._timing

    def spawn(self, fired: spawn_scheduler.FiredSpawn, now_ms: float) -> Optional[gameplay_models.Target]:
        if not fired.produces_target:
            return None
        event = fired.event
        target_id = f"{int(event.cell_index)}-{int(event.spawn_offset_ms)}-{int(fired.event_index)}"
        return gameplay_models.Target(
            target_id=target_id,
            cell_index=int(event.cell_index),
            event_index=int(fired.event_index),
            spawn_time_ms=float(now_ms),
            growth_duration_ms=float(self._timing.growth_duration_ms),
            hit_window_early_ms=float(self._timing.hit_window_early_ms),
            hit_window_late_ms=float(self._timing.hit_window_late_ms),
        )

    def miss_deadline_ms(self, target: gameplay_models.Target) -> float:
        return target.hit_window_end_ms + float(self._timing.miss_grace_ms)

    def advance(self, target: gameplay_models.Target, now_ms: float) -> gameplay_models.Target:
        if target.is_resolved:
            return target

        now_value = float(now_ms)
        if now_value > self.miss_deadline_ms(target):
            target.resolve(gameplay_models.Missed(time_ms=now_value), growth=target.growth_at(now_value))
            return target

        target.growth = target.growth_at(now_value)
        return target

    def should_evict(self, target: gameplay_models.Target, now_ms: float) -> bool:
        resolution_time_ms = target.resolution_time_ms
        if resolution_time_ms is None:
            # Safety net only. The miss deadline resolves targets long before this.
            return float(target.growth) > float(self._timing.overshoot_growth)
        return float(now_ms) - resolution_time_ms >= float(self._timing.feedback_grace_ms)

    def advance_cell(self, cell: gameplay_models.Cell, now_ms: float) -> CellAdvance:
        result = CellAdvance()
        kept: List[gameplay_models.Target] = []
        for target in cell.targets:
            was_resolved = target.is_resolved
            self.advance(target, now_ms)
            if not was_resolved and isinstance(target.resolution, gameplay_models.Missed):
                result.missed.append(
                    gameplay_models.JudgementEvent(
                        time_ms=float(target.resolution.time_ms),
                        cell_index=int(target.cell_index),
                        target_id=str(target.target_id),
                        perfect_time_ms=target.perfect_time_ms,
                        delta_ms=float(target.resolution.time_ms) - target.perfect_time_ms,
                        kind="miss",
                    )
                )
            if self.should_evict(target, now_ms):
                result.evicted.append(target)
            else:
                kept.append(target)
        cell.targets[:] = kept
        return result


def _run_unit_tests() -> None:
    lifecycle = TargetLifecycle()
    fired = spawn_scheduler.FiredSpawn(
        event_index=0,
        event=gameplay_models.SpawnEvent(cell_index=3, spawn_offset_ms=0),
    )
    target = lifecycle.spawn(fired, now_ms=0.0)
    assert target is not None
    assert target.perfect_time_ms == 1000.0
    assert target.hit_window_start_ms == 850.0
    assert target.hit_window_end_ms == 1200.0

    cell = gameplay_models.Cell(index=3, targets=[target])
    lifecycle.advance_cell(cell, 500.0)
    assert abs(target.growth - 0.5) < 1e-9

    assert lifecycle.advance_cell(cell, 1250.0).missed == []
    advanced = lifecycle.advance_cell(cell, 1251.0)
    assert len(advanced.missed) == 1
    assert isinstance(target.resolution, gameplay_models.Missed)
    assert cell.targets == [target]

    assert lifecycle.advance_cell(cell, 1351.0).evicted == [target]
    assert cell.targets == []

    center = spawn_scheduler.FiredSpawn(
        event_index=1,
        event=gameplay_models.SpawnEvent(cell_index=4, spawn_offset_ms=0),
    )
    assert lifecycle.spawn(center, now_ms=0.0) is None


if __name__ == "__main__":
    _run_unit_tests()
    print("target_lifecycle.py: ok")

# -*- coding: utf-8 -*-
########################
# judge.py
########################
# Purpose:
# - Hit judgement and run statistics.
# - Resolves a cell activation against the live targets of that cell and rates the timing.
#
# Design notes:
# - No Qt usage. Pure gameplay logic.
# - Two stage filter: candidates still inside or before their window, then candidates whose
#   window is open. An activation that is too early for every target resolves nothing.
# - Among open targets the biggest one wins (closest to full size). Ties go to the earliest spawn.
# - Targets past their window end are never judged here. TargetLifecycle marks them missed.
# - Stray activations are absorbed and never penalize.
#
########################
# Interfaces:
# Public dataclasses:
# - RatingWindows(perfect_ms: float, great_ms: float, good_ms: float)
#   - classify_delta(delta_ms: float) -> HitRating
# - ScoreState(perfect_count, great_count, good_count, ok_count, miss_count, combo, max_combo)
#   - apply_judgement(event: JudgementEvent) -> None
#
# Public classes:
# - class JudgeEngine
#   - __init__(timing: config.TimingConfig)
#   - rating_windows() -> RatingWindows
#   - select_winner(cell: Cell, now_ms: float) -> Optional[Target]
#   - resolve(session: Session, cell_index: int, now_ms: float) -> Optional[JudgementEvent]
#
# Inputs:
# - Session grid state, a cell index and the activation time (ms).
#
# Outputs:
# - Hit JudgementEvent objects for UI and stats. Mutates the winning Target's resolution.
#
########################

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import config
import gameplay_models


@dataclass(frozen=True)
class RatingWindows:
    perfect_ms: float
    great_ms: float
    good_ms: float

    @classmethod
    def from_timing(cls, timing: config.TimingConfig) -> "RatingWindows":
        return cls(
            perfect_ms=float(timing.perfect_window_ms),
            great_ms=float(timing.great_window_ms),
            good_ms=float(timing.good_window_ms),
        )

    def classify_delta(self, delta_ms: float) -> gameplay_models.HitRating:
        abs_delta = abs(float(delta_ms))
        if abs_delta <= float(self.perfect_ms):
            return gameplay_models.HitRating.PERFECT
        if abs_delta <= float(self.great_ms):
            return gameplay_models.HitRating.GREAT
        if abs_delta <= float(self.good_ms):
            return gameplay_models.HitRating.GOOD
        # The rest of the open hit window.
        return gameplay_models.HitRating.OK


@dataclass
class ScoreState:
    perfect_count: int = 0
    great_count: int = 0
    good_count: int = 0
    ok_count: int = 0
    miss_count: int = 0
    combo: int = 0
    max_combo: int = 0

    def apply_judgement(self, event: gameplay_models.JudgementEvent) -> None:
        if not event.is_hit:
            self.miss_count += 1
            self.combo = 0
            return

        rating = event.rating
        if rating == gameplay_models.HitRating.PERFECT:
            self.perfect_count += 1
        elif rating == gameplay_models.HitRating.GREAT:
            self.great_count += 1
        elif rating == gameplay_models.HitRating.GOOD:
            self.good_count += 1
        elif rating == gameplay_models.HitRating.OK:
            self.ok_count += 1
        else:
            return

        self.combo += 1
        if self.combo > self.max_combo:
            self.max_combo = self.combo

    @property
    def hit_count(self) -> int:
        return self.perfect_count + self.great_count + self.good_count + self.ok_count


class JudgeEngine:
    def __init__(self, timing: Optional[config.TimingConfig] = None) -> None:
        self._timing = timing if timing is not None else config.TimingConfig()
        self._rating_windows = RatingWindows.from_timing(self._timing)

    def rating_windows(self) -> RatingWindows:
        return self._rating_windows

    def select_winner(self, cell: gameplay_models.Cell, now_ms: float) -> Optional[gameplay_models.Target]:
        now_value = float(now_ms)

        candidates: List[gameplay_models.Target] = [
            target
            for target in cell.targets
            if not target.is_resolved and now_value <= target.hit_window_end_ms
        ]
        if not candidates:
            return None

        in_window = [target for target in candidates if now_value >= target.hit_window_start_ms]
        if not in_window:
            return None

        best_target: Optional[gameplay_models.Target] = None
        best_growth = -1.0
        for target in in_window:
            growth = target.growth_at(now_value)
            if growth > best_growth:
                best_target = target
                best_growth = growth
            elif growth == best_growth and best_target is not None:
                # Tie break default:
                # - choose the earlier spawn, then spawn order (first seen).
                if float(target.spawn_time_ms) < float(best_target.spawn_time_ms):
                    best_target = target
        return best_target

    def resolve(
        self,
        session: gameplay_models.Session,
        cell_index: int,
        now_ms: float,
    ) -> Optional[gameplay_models.JudgementEvent]:
        cell = session.cell(cell_index)
        if cell is None or not gameplay_models.is_playable_cell(cell.index):
            return None

        winner = self.select_winner(cell, now_ms)
        if winner is None:
            return None

        now_value = float(now_ms)
        delta = now_value - winner.perfect_time_ms
        rating = self._rating_windows.classify_delta(delta)
        winner.resolve(
            gameplay_models.Hit(rating=rating, time_ms=now_value),
            growth=winner.growth_at(now_value),
        )

        return gameplay_models.JudgementEvent(
            time_ms=now_value,
            cell_index=int(winner.cell_index),
            target_id=str(winner.target_id),
            perfect_time_ms=winner.perfect_time_ms,
            delta_ms=delta,
            kind="hit",
            rating=rating,
        )


def _make_target(target_id: str, spawn_time_ms: float) -> gameplay_models.Target:
    return gameplay_models.Target(
        target_id=target_id,
        cell_index=3,
        event_index=0,
        spawn_time_ms=spawn_time_ms,
        growth_duration_ms=1000.0,
        hit_window_early_ms=150.0,
        hit_window_late_ms=200.0,
    )


def _run_unit_tests() -> None:
    engine = JudgeEngine()
    session = gameplay_models.Session(track=gameplay_models.Track())

    target = _make_target("a", 0.0)
    session.cells[3].targets.append(target)

    assert engine.resolve(session, 3, 800.0) is None
    assert not target.is_resolved

    hit = engine.resolve(session, 3, 1030.0)
    assert hit is not None
    assert hit.rating == gameplay_models.HitRating.GREAT
    assert engine.resolve(session, 3, 1031.0) is None

    bigger = _make_target("big", 0.0)
    smaller = _make_target("small", 300.0)
    session.cells[5].targets.extend([smaller, bigger])
    for item in (bigger, smaller):
        item.cell_index = 5
    event = engine.resolve(session, 5, 900.0)
    assert event is not None and event.target_id == "big"
    assert not smaller.is_resolved

    stats = ScoreState()
    stats.apply_judgement(hit)
    stats.apply_judgement(event)
    assert stats.combo == 2 and stats.great_count == 1 and stats.good_count == 1


if __name__ == "__main__":
    _run_unit_tests()
    print("judge.py: ok")

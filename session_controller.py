# -*- coding: utf-8 -*-
########################
# session_controller.py
########################
# Purpose:
# - Orchestrates one run of a Track: start, per tick spawning and expiry, judgement on
#   presses, completion detection and stop.
# - Owns the Session (grid cells, fired event indexes, start time).
#
# Design notes:
# - No Qt usage. The driver loop (gameplay_harness.py or a test) calls tick() at frame cadence
#   and check_completion() at a coarser cadence (about 100ms).
# - Single threaded. Ticks and presses arrive on the same thread in wall clock order. When a miss
#   and a press race for the same target, whichever call runs first wins.
# - Components take the Session explicitly. Only SpawnScheduler, TargetLifecycle and JudgeEngine
#   mutate targets.
# - Every timed method accepts an optional now_ms. When omitted the injected GameClock is read.
#
########################
# Interfaces:
# Public enums:
# - class RunState(str, enum.Enum): STOPPED | RUNNING
#
# Public dataclasses:
# - TickReport(spawned: list[Target], missed: list[JudgementEvent], evicted: list[Target])
#
# Public classes:
# - class SessionController
#   - __init__(track: Track, *, timing: Optional[TimingConfig] = None, clock: Optional[GameClock] = None)
#   - session() -> Session
#   - run_state() -> RunState
#   - is_running() -> bool
#   - start(now_ms: Optional[float] = None) -> None
#   - stop() -> None
#   - elapsed_ms(now_ms: Optional[float] = None) -> Optional[float]
#   - tick(now_ms: Optional[float] = None) -> TickReport
#   - end_time_ms() -> Optional[int]
#   - check_completion(now_ms: Optional[float] = None) -> bool
#   - press_cell(cell_index: int, now_ms: Optional[float] = None) -> Optional[JudgementEvent]
#   - key_down(direction: Direction, now_ms: Optional[float] = None) -> Optional[JudgementEvent]
#   - key_up(direction: Direction) -> None
#   - tap(cell_index: int, now_ms: Optional[float] = None) -> Optional[JudgementEvent]
#   - target_views() -> list[TargetView]
#   - score_state() -> ScoreState
#   - recent_judgements() -> list[JudgementEvent]
#
# Inputs:
# - Track from the track source, times from GameClock, input events from the harness.
#
# Outputs:
# - TargetView snapshots for rendering, JudgementEvents and ScoreState for stats.
#
########################

from __future__ import annotations

from dataclasses import dataclass, field
import enum
from typing import List, Optional

import config
import game_clock
import gameplay_models
import input_resolver
import judge
import spawn_scheduler
import target_lifecycle
from logging_utils import log_event


class RunState(str, enum.Enum):
    STOPPED = "STOPPED"
    RUNNING = "RUNNING"


@dataclass
class TickReport:
    spawned: List[gameplay_models.Target] = field(default_factory=list)
    missed: List[gameplay_models.JudgementEvent] = field(default_factory=list)
    evicted: List[gameplay_models.Target] = field(default_factory=list)


class SessionController:
    def __init__(
        self,
        track: gameplay_models.Track,
        *,
        timing: Optional[config.TimingConfig] = None,
        clock: Optional[game_clock.GameClock] = None,
    ) -> None:
        self._timing = timing if timing is not None else config.TimingConfig()
        self._clock = clock if clock is not None else game_clock.GameClock()

        self._session = gameplay_models.Session(track=track)
        self._scheduler = spawn_scheduler.SpawnScheduler(lookahead_ms=float(self._timing.spawn_lookahead_ms))
        self._lifecycle = target_lifecycle.TargetLifecycle(self._timing)
        self._judge = judge.JudgeEngine(self._timing)
        self._resolver = input_resolver.InputResolver()

        self._score_state = judge.ScoreState()
        self._recent_judgements: List[gameplay_models.JudgementEvent] = []

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def session(self) -> gameplay_models.Session:
        return self._session

    def track(self) -> gameplay_models.Track:
        return self._session.track

    def timing(self) -> config.TimingConfig:
        return self._timing

    def run_state(self) -> RunState:
        return RunState.RUNNING if self._session.is_running else RunState.STOPPED

    def is_running(self) -> bool:
        return self._session.is_running

    def input_resolver(self) -> input_resolver.InputResolver:
        return self._resolver

    def score_state(self) -> judge.ScoreState:
        return self._score_state

    def recent_judgements(self) -> List[gameplay_models.JudgementEvent]:
        return list(self._recent_judgements)

    def clear_recent_judgements(self) -> None:
        self._recent_judgements.clear()

    def target_views(self) -> List[gameplay_models.TargetView]:
        return [gameplay_models.TargetView.from_target(target) for target in self._session.all_targets()]

    def _now(self, now_ms: Optional[float]) -> float:
        return float(now_ms) if now_ms is not None else self._clock.now_ms()

    def elapsed_ms(self, now_ms: Optional[float] = None) -> Optional[float]:
        start_time_ms = self._session.start_time_ms
        if start_time_ms is None:
            return None
        return self._now(now_ms) - start_time_ms

    # ------------------------------------------------------------------
    # Run control
    # ------------------------------------------------------------------

    def start(self, now_ms: Optional[float] = None) -> None:
        start_time_ms = self._now(now_ms)
        self._session.reset(start_time_ms=start_time_ms)
        self._resolver.reset()
        self._score_state = judge.ScoreState()
        self._recent_judgements.clear()
        log_event(
            "INFO",
            "Session",
            "Track started",
            events=len(self._session.track),
            end_time_ms=self.end_time_ms(),
        )

    def stop(self) -> None:
        was_running = self._session.is_running
        # Cells keep their last contents for display until the next start.
        self._session.fired_indices.clear()
        self._session.start_time_ms = None
        self._resolver.reset()
        if was_running:
            stats = self._score_state
            log_event(
                "INFO",
                "Session",
                "Track stopped",
                hits=stats.hit_count,
                misses=stats.miss_count,
                max_combo=stats.max_combo,
            )

    def end_time_ms(self) -> Optional[int]:
        last_offset_ms = self._session.track.last_offset_ms()
        if last_offset_ms is None:
            return None
        return (
            int(last_offset_ms)
            + int(self._timing.growth_duration_ms)
            + int(self._timing.hit_window_late_ms)
            + int(self._timing.feedback_grace_ms)
        )

    def check_completion(self, now_ms: Optional[float] = None) -> bool:
        elapsed = self.elapsed_ms(now_ms)
        if elapsed is None:
            return False

        end_time_ms = self.end_time_ms()
        if end_time_ms is None or elapsed > float(end_time_ms):
            log_event("INFO", "Session", "Track complete", elapsed_ms=round(elapsed, 1))
            self.stop()
            return True
        return False

    # ------------------------------------------------------------------
    # Frame tick
    # ------------------------------------------------------------------

    def tick(self, now_ms: Optional[float] = None) -> TickReport:
        report = TickReport()
        elapsed = self.elapsed_ms(now_ms)
        if elapsed is None:
            return report

        now_value = self._now(now_ms)
        session = self._session

        for fired in self._scheduler.tick(elapsed, session.track, session.fired_indices):
            target = self._lifecycle.spawn(fired, now_value)
            if target is None:
                log_event("DEBUG", "Scheduler", "Skipped spawn for unplayable cell", index=fired.event_index, cell=fired.event.cell_index)
                continue
            session.cells[target.cell_index].targets.append(target)
            report.spawned.append(target)
            log_event("DEBUG", "Scheduler", "Spawned target", target=target.target_id, time_ms=round(now_value, 1))

        for cell in session.cells:
            advanced = self._lifecycle.advance_cell(cell, now_value)
            report.missed.extend(advanced.missed)
            report.evicted.extend(advanced.evicted)

        for miss_event in report.missed:
            self._record_judgement(miss_event)

        return report

    # ------------------------------------------------------------------
    # Activation path
    # ------------------------------------------------------------------

    def press_cell(self, cell_index: int, now_ms: Optional[float] = None) -> Optional[gameplay_models.JudgementEvent]:
        if not self._session.is_running:
            return None
        event = self._judge.resolve(self._session, int(cell_index), self._now(now_ms))
        if event is not None:
            self._record_judgement(event)
        return event

    def key_down(
        self,
        direction: input_resolver.Direction,
        now_ms: Optional[float] = None,
    ) -> Optional[gameplay_models.JudgementEvent]:
        cell_index = self._resolver.key_down(direction)
        if cell_index is None:
            return None
        return self.press_cell(cell_index, now_ms)

    def key_up(self, direction: input_resolver.Direction) -> None:
        self._resolver.key_up(direction)

    def tap(self, cell_index: int, now_ms: Optional[float] = None) -> Optional[gameplay_models.JudgementEvent]:
        pressed_cell = self._resolver.tap(cell_index)
        if pressed_cell is None:
            return None
        return self.press_cell(pressed_cell, now_ms)

    def _record_judgement(self, event: gameplay_models.JudgementEvent) -> None:
        self._score_state.apply_judgement(event)
        self._recent_judgements.append(event)
        log_event(
            "DEBUG",
            "Judge",
            "Judgement",
            target=event.target_id,
            kind=event.kind,
            rating=event.rating,
            delta_ms=float(event.delta_ms),
        )


def _run_unit_tests() -> None:
    clock = game_clock.ManualClock()
    track = gameplay_models.Track.from_events([gameplay_models.SpawnEvent(cell_index=3, spawn_offset_ms=0)])
    controller = SessionController(track, clock=clock)

    controller.start()
    assert len(controller.tick().spawned) == 1
    clock.set_now_ms(1000.0)
    controller.tick()
    hit = controller.key_down(input_resolver.Direction.LEFT)
    assert hit is not None and hit.rating == gameplay_models.HitRating.PERFECT

    controller.start(now_ms=2000.0)
    controller.tick(now_ms=2000.0)
    report = controller.tick(now_ms=3400.0)
    assert len(report.missed) == 1
    assert len(controller.tick(now_ms=3500.0).evicted) == 1

    assert not controller.check_completion(now_ms=3300.0)
    assert controller.check_completion(now_ms=3301.0)
    assert controller.run_state() == RunState.STOPPED


if __name__ == "__main__":
    _run_unit_tests()
    print("session_controller.py: ok")

# -*- coding: utf-8 -*-
########################
# gameplay_models.py
########################
# Purpose:
# - Core gameplay data models for the grid timing engine.
# - Defines the Track representation, per-target timing state and gameplay events.
#
# Design notes:
# - Keep these models stable. Prefer extending with new optional fields rather than breaking changes.
# - No Qt usage. These are plain dataclasses.
# - Resolution is a tagged variant (Unresolved | Hit | Missed). A Target resolves once only.
# - Times are milliseconds. Absolute times come from GameClock, offsets come from the Track.
#
########################
# Interfaces:
# Public constants:
# - GRID_SIZE, CELL_COUNT, CENTER_INDEX
#
# Public functions:
# - is_playable_cell(cell_index: int) -> bool
#
# Public enums:
# - class HitRating(str, enum.Enum): PERFECT | GREAT | GOOD | OK
#
# Public dataclasses:
# - SpawnEvent(cell_index: int, spawn_offset_ms: int)
# - Track(events: tuple[SpawnEvent, ...])
# - Unresolved(), Hit(rating: HitRating, time_ms: float), Missed(time_ms: float)
# - Target(target_id, cell_index, event_index, spawn_time_ms, growth_duration_ms, ...)
# - Cell(index: int, targets: list[Target])
# - Session(track: Track, cells: list[Cell], start_time_ms: Optional[float], fired_indices: set[int])
# - TargetView(target_id, cell_index, growth, resolution, rating)
# - JudgementEvent(time_ms, cell_index, target_id, perfect_time_ms, delta_ms, kind, rating)
#
# Inputs/Outputs:
# - These types are exchanged between SpawnScheduler, TargetLifecycle, JudgeEngine,
#   SessionController and the harness renderer.
#
########################

from __future__ import annotations

from dataclasses import dataclass, field
import enum
from typing import Iterable, Iterator, List, Optional, Set, Tuple, Union


GRID_SIZE = 3
CELL_COUNT = GRID_SIZE * GRID_SIZE
CENTER_INDEX = 4


def is_playable_cell(cell_index: int) -> bool:
    index = int(cell_index)
    return 0 <= index < CELL_COUNT and index != CENTER_INDEX


class HitRating(str, enum.Enum):
    PERFECT = "perfect"
    GREAT = "great"
    GOOD = "good"
    OK = "ok"


class TargetAlreadyResolvedError(RuntimeError):
    pass


@dataclass(frozen=True)
class SpawnEvent:
    cell_index: int
    spawn_offset_ms: int


@dataclass(frozen=True)
class Track:
    events: Tuple[SpawnEvent, ...] = ()

    def __post_init__(self) -> None:
        # Stable sort: events sharing an offset keep their authored order.
        ordered = tuple(sorted(self.events, key=lambda item: int(item.spawn_offset_ms)))
        object.__setattr__(self, "events", ordered)

    @classmethod
    def from_events(cls, events: Iterable[SpawnEvent]) -> "Track":
        return cls(events=tuple(events))

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self) -> Iterator[SpawnEvent]:
        return iter(self.events)

    def is_empty(self) -> bool:
        return not self.events

    def last_offset_ms(self) -> Optional[int]:
        if not self.events:
            return None
        return max(int(event.spawn_offset_ms) for event in self.events)


@dataclass(frozen=True)
class Unresolved:
    @property
    def is_resolved(self) -> bool:
        return False


@dataclass(frozen=True)
class Hit:
    rating: HitRating
    time_ms: float

    @property
    def is_resolved(self) -> bool:
        return True


@dataclass(frozen=True)
class Missed:
    time_ms: float

    @property
    def is_resolved(self) -> bool:
        return True


Resolution = Union[Unresolved, Hit, Missed]

UNRESOLVED = Unresolved()


@dataclass(eq=False)
class Target:
    target_id: str
    cell_index: int
    event_index: int
    spawn_time_ms: float
    growth_duration_ms: float
    hit_window_early_ms: float
    hit_window_late_ms: float
    growth: float = 0.0
    resolution: Resolution = UNRESOLVED

    @property
    def perfect_time_ms(self) -> float:
        return float(self.spawn_time_ms) + float(self.growth_duration_ms)

    @property
    def hit_window_start_ms(self) -> float:
        return self.perfect_time_ms - float(self.hit_window_early_ms)

    @property
    def hit_window_end_ms(self) -> float:
        return self.perfect_time_ms + float(self.hit_window_late_ms)

    @property
    def is_resolved(self) -> bool:
        return self.resolution.is_resolved

    @property
    def resolution_time_ms(self) -> Optional[float]:
        if isinstance(self.resolution, (Hit, Missed)):
            return float(self.resolution.time_ms)
        return None

    @property
    def rating(self) -> Optional[HitRating]:
        if isinstance(self.resolution, Hit):
            return self.resolution.rating
        return None

    def growth_at(self, now_ms: float) -> float:
        duration = float(self.growth_duration_ms)
        if duration <= 0.0:
            return 1.0
        progress = (float(now_ms) - float(self.spawn_time_ms)) / duration
        return min(max(progress, 0.0), 1.0)

    def resolve(self, resolution: Resolution, *, growth: float) -> None:
        if self.is_resolved:
            raise TargetAlreadyResolvedError(f"Target {self.target_id} is already resolved: {self.resolution}")
        if not resolution.is_resolved:
            raise ValueError("A target can only transition to Hit or Missed")
        self.growth = float(growth)
        self.resolution = resolution


@dataclass
class Cell:
    index: int
    targets: List[Target] = field(default_factory=list)

    def unresolved_targets(self) -> List[Target]:
        return [target for target in self.targets if not target.is_resolved]


def build_empty_cells() -> List[Cell]:
    return [Cell(index=index) for index in range(CELL_COUNT)]


@dataclass
class Session:
    track: Track
    cells: List[Cell] = field(default_factory=build_empty_cells)
    start_time_ms: Optional[float] = None
    fired_indices: Set[int] = field(default_factory=set)

    @property
    def is_running(self) -> bool:
        return self.start_time_ms is not None

    def cell(self, cell_index: int) -> Optional[Cell]:
        index = int(cell_index)
        if 0 <= index < len(self.cells):
            return self.cells[index]
        return None

    def all_targets(self) -> List[Target]:
        return [target for cell in self.cells for target in cell.targets]

    def reset(self, start_time_ms: Optional[float]) -> None:
        self.cells = build_empty_cells()
        self.fired_indices.clear()
        self.start_time_ms = None if start_time_ms is None else float(start_time_ms)


@dataclass(frozen=True)
class TargetView:
    target_id: str
    cell_index: int
    growth: float
    resolution: Resolution
    rating: Optional[HitRating]

    @classmethod
    def from_target(cls, target: Target) -> "TargetView":
        return cls(
            target_id=str(target.target_id),
            cell_index=int(target.cell_index),
            growth=float(target.growth),
            resolution=target.resolution,
            rating=target.rating,
        )


@dataclass(frozen=True)
class JudgementEvent:
    time_ms: float
    cell_index: int
    target_id: str
    perfect_time_ms: float
    delta_ms: float
    kind: str
    rating: Optional[HitRating] = None

    @property
    def is_hit(self) -> bool:
        return self.kind == "hit"

# -*- coding: utf-8 -*-
########################
# spawn_scheduler.py
########################
# Purpose:
# - Convert Track spawn events into spawn instructions as run time elapses.
# - Each event index fires at most once per run.
#
# Design notes:
# - No Qt usage. Pure gameplay logic.
# - The fired index set belongs to the Session; the scheduler only reads and extends it.
# - The fired set is checked before anything else, including cell validity.
# - Events for the center cell or out of range cells are consumed but produce no target.
#
########################
# Interfaces:
# Public dataclasses:
# - FiredSpawn(event_index: int, event: SpawnEvent)
#   - produces_target -> bool
#
# Public classes:
# - class SpawnScheduler
#   - __init__(lookahead_ms: float = 10.0)
#   - tick(elapsed_ms: float, track: Track, fired_indices: set[int]) -> list[FiredSpawn]
#   - pending_count(track: Track, fired_indices: set[int]) -> int
#
# Inputs:
# - Elapsed run time (ms), the Track and the Session fired index set.
#
# Outputs:
# - FiredSpawn instructions consumed by SessionController and TargetLifecycle.spawn.
#
########################

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Set

import gameplay_models


@dataclass(frozen=True)
class FiredSpawn:
    event_index: int
    event: gameplay_models.SpawnEvent

    @property
    def produces_target(self) -> bool:
        return gameplay_models.is_playable_cell(int(self.event.cell_index))


class SpawnScheduler:
    def __init__(self, lookahead_ms: float = 10.0) -> None:
        self._lookahead_ms = float(lookahead_ms)

    def lookahead_ms(self) -> float:
        return self._lookahead_ms

    def tick(
        self,
        elapsed_ms: float,
        track: gameplay_models.Track,
        fired_indices: Set[int],
    ) -> List[FiredSpawn]:
        horizon_ms = float(elapsed_ms) + self._lookahead_ms
        fired: List[FiredSpawn] = []
        for event_index, event in enumerate(track.events):
            if event_index in fired_indices:
                continue
            if float(event.spawn_offset_ms) > horizon_ms:
                # Track events are sorted by offset, nothing later is due either.
                break
            fired_indices.add(event_index)
            fired.append(FiredSpawn(event_index=event_index, event=event))
        return fired

    def pending_count(self, track: gameplay_models.Track, fired_indices: Set[int]) -> int:
        return sum(1 for event_index in range(len(track)) if event_index not in fired_indices)


def _run_unit_tests() -> None:
    track = gameplay_models.Track.from_events(
        [
            gameplay_models.SpawnEvent(cell_index=1, spawn_offset_ms=500),
            gameplay_models.SpawnEvent(cell_index=4, spawn_offset_ms=0),
            gameplay_models.SpawnEvent(cell_index=3, spawn_offset_ms=0),
        ]
    )
    scheduler = SpawnScheduler()
    fired_indices: Set[int] = set()

    first = scheduler.tick(0.0, track, fired_indices)
    assert [item.event.cell_index for item in first] == [4, 3]
    assert [item.produces_target for item in first] == [False, True]

    assert scheduler.tick(0.0, track, fired_indices) == []

    second = scheduler.tick(490.0, track, fired_indices)
    assert [item.event_index for item in second] == [2]
    assert scheduler.pending_count(track, fired_indices) == 0


if __name__ == "__main__":
    _run_unit_tests()
    print("spawn_scheduler.py: ok")

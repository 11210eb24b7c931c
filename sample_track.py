# sample_track.py
from __future__ import annotations

from typing import List

from gameplay_models import SpawnEvent, Track

# Corners and directions in reading order. The center cell never appears.
ALL_CELLS = [0, 1, 2, 3, 5, 6, 7, 8]
CORNER_CELLS = [0, 2, 6, 8]
DIRECTION_CELLS = [1, 3, 5, 7]
FINAL_PATTERN = [0, 1, 2, 3, 5, 6, 7, 8, 0, 2, 6, 8, 1, 3, 5, 7]


def build_sample_track(*, bpm: float = 100.0) -> Track:
    """Deterministic practice track that visits every playable cell several times."""
    beat_ms = (60.0 / float(bpm)) * 1000.0
    step_ms = beat_ms * 1.5
    rapid_step_ms = beat_ms * 0.8

    rounds = [
        (ALL_CELLS, step_ms),
        (list(reversed(ALL_CELLS)), step_ms),
        (ALL_CELLS, step_ms),
        (CORNER_CELLS, step_ms),
        (DIRECTION_CELLS, step_ms),
        (ALL_CELLS, rapid_step_ms),
        (FINAL_PATTERN, step_ms),
    ]

    events: List[SpawnEvent] = []
    current_time_ms = 0.0
    for cells, interval_ms in rounds:
        for cell_index in cells:
            events.append(SpawnEvent(cell_index=cell_index, spawn_offset_ms=int(round(current_time_ms))))
            current_time_ms += interval_ms

    return Track.from_events(events)

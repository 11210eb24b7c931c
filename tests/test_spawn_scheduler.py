import unittest

from gameplay_models import SpawnEvent, Track
from spawn_scheduler import SpawnScheduler


def _track(*pairs):
    return Track.from_events(SpawnEvent(cell_index=cell, spawn_offset_ms=offset) for cell, offset in pairs)


class TestSpawnScheduler(unittest.TestCase):
    def test_fires_events_within_lookahead(self):
        track = _track((1, 0), (2, 100), (3, 200))
        fired_indices = set()
        scheduler = SpawnScheduler(lookahead_ms=10.0)

        fired = scheduler.tick(90.0, track, fired_indices)

        self.assertEqual([item.event.cell_index for item in fired], [1, 2])
        self.assertEqual(fired_indices, {0, 1})

    def test_event_just_past_lookahead_waits(self):
        track = _track((1, 100))
        scheduler = SpawnScheduler(lookahead_ms=10.0)

        self.assertEqual(scheduler.tick(89.0, track, set()), [])

    def test_each_index_fires_once_across_ticks(self):
        track = _track((0, 0), (2, 50), (6, 50), (8, 400))
        fired_indices = set()
        scheduler = SpawnScheduler()

        seen = []
        for elapsed in [0.0, 0.0, 16.0, 45.0, 60.0, 60.0, 500.0, 1000.0]:
            seen.extend(item.event_index for item in scheduler.tick(elapsed, track, fired_indices))

        self.assertEqual(sorted(seen), [0, 1, 2, 3])
        self.assertEqual(len(seen), len(set(seen)))

    def test_unsorted_input_fires_in_offset_order(self):
        track = Track.from_events(
            [
                SpawnEvent(cell_index=8, spawn_offset_ms=300),
                SpawnEvent(cell_index=0, spawn_offset_ms=0),
                SpawnEvent(cell_index=5, spawn_offset_ms=150),
            ]
        )
        fired = SpawnScheduler().tick(1000.0, track, set())

        self.assertEqual([item.event.spawn_offset_ms for item in fired], [0, 150, 300])

    def test_direct_construction_orders_events(self):
        track = Track(events=(SpawnEvent(cell_index=1, spawn_offset_ms=500), SpawnEvent(cell_index=3, spawn_offset_ms=0)))
        fired_indices = set()
        scheduler = SpawnScheduler()

        fired = scheduler.tick(0.0, track, fired_indices)

        self.assertEqual([event.spawn_offset_ms for event in track], [0, 500])
        self.assertEqual([item.event.cell_index for item in fired], [3])
        self.assertEqual(fired_indices, {0})

    def test_direct_construction_keeps_order_of_equal_offsets(self):
        track = Track(
            events=(
                SpawnEvent(cell_index=7, spawn_offset_ms=200),
                SpawnEvent(cell_index=2, spawn_offset_ms=100),
                SpawnEvent(cell_index=6, spawn_offset_ms=100),
            )
        )

        self.assertEqual([event.cell_index for event in track], [2, 6, 7])

    def test_invalid_cells_are_consumed_without_target(self):
        track = _track((4, 0), (9, 0), (-1, 0), (3, 0))
        fired_indices = set()
        scheduler = SpawnScheduler()

        fired = scheduler.tick(0.0, track, fired_indices)

        self.assertEqual([item.produces_target for item in fired], [False, False, False, True])
        self.assertEqual(fired_indices, {0, 1, 2, 3})
        self.assertEqual(scheduler.tick(100.0, track, fired_indices), [])

    def test_already_fired_index_is_skipped_first(self):
        track = _track((4, 0), (1, 0))
        fired_indices = {0}

        fired = SpawnScheduler().tick(0.0, track, fired_indices)

        self.assertEqual([item.event_index for item in fired], [1])

    def test_pending_count(self):
        track = _track((1, 0), (2, 500))
        fired_indices = set()
        scheduler = SpawnScheduler()
        scheduler.tick(0.0, track, fired_indices)

        self.assertEqual(scheduler.pending_count(track, fired_indices), 1)


if __name__ == "__main__":
    unittest.main()

import unittest

from config import TimingConfig
from game_clock import ManualClock
from gameplay_models import HitRating, Missed, SpawnEvent, Track
from input_resolver import Direction
from session_controller import RunState, SessionController


def _track(*pairs):
    return Track.from_events(SpawnEvent(cell_index=cell, spawn_offset_ms=offset) for cell, offset in pairs)


class TestSessionController(unittest.TestCase):
    def setUp(self):
        self.clock = ManualClock()

    def _run_frames(self, controller, until_ms, step_ms=16.0):
        reports = []
        while self.clock.now_ms() <= until_ms:
            reports.append(controller.tick())
            self.clock.advance_ms(step_ms)
        return reports

    def test_end_to_end_perfect_on_cell_three(self):
        controller = SessionController(_track((3, 0)), clock=self.clock)
        controller.start()
        controller.tick()

        self.clock.set_now_ms(1000.0)
        controller.tick()
        event = controller.tap(3)

        self.assertIsNotNone(event)
        self.assertEqual(event.rating, HitRating.PERFECT)
        self.assertEqual(controller.score_state().perfect_count, 1)

    def test_end_to_end_miss_then_eviction(self):
        controller = SessionController(_track((3, 0)), clock=self.clock)
        controller.start()

        self._run_frames(controller, 1300.0)
        targets = controller.session().cells[3].targets
        self.assertEqual(len(targets), 1)
        self.assertIsInstance(targets[0].resolution, Missed)

        self._run_frames(controller, 1500.0)
        self.assertEqual(controller.session().cells[3].targets, [])
        self.assertEqual(controller.score_state().miss_count, 1)

    def test_spawn_idempotence_over_many_ticks(self):
        track = _track((0, 0), (1, 0), (2, 30), (4, 40), (5, 500), (9, 600))
        controller = SessionController(track, clock=self.clock)
        controller.start()

        spawned_ids = []
        for report in self._run_frames(controller, 2500.0, step_ms=7.0):
            spawned_ids.extend(target.target_id for target in report.spawned)

        self.assertEqual(len(spawned_ids), 4)
        self.assertEqual(len(set(spawned_ids)), 4)
        self.assertEqual(controller.session().fired_indices, set(range(len(track))))

    def test_unsorted_track_spawns_due_event_on_first_tick(self):
        track = Track(events=(SpawnEvent(cell_index=1, spawn_offset_ms=500), SpawnEvent(cell_index=3, spawn_offset_ms=0)))
        controller = SessionController(track, clock=self.clock)
        controller.start(0.0)

        report = controller.tick(0.0)

        self.assertEqual([target.cell_index for target in report.spawned], [3])

    def test_key_press_on_empty_cell_counts_as_fired_without_judgement(self):
        controller = SessionController(_track((3, 0)), clock=self.clock)
        controller.start()
        controller.tick()
        resolver = controller.input_resolver()

        self.assertIsNone(controller.key_down(Direction.RIGHT))
        self.assertEqual(resolver.fired_presses, 1)
        self.assertIsNone(controller.key_down(Direction.RIGHT))
        self.assertEqual(resolver.fired_presses, 1)
        self.assertIsNone(controller.tap(5))
        self.assertEqual(resolver.fired_presses, 2)
        self.assertEqual(controller.score_state().hit_count, 0)

    def test_tap_on_center_is_not_a_press(self):
        controller = SessionController(_track((3, 0)), clock=self.clock)
        controller.start()

        self.assertIsNone(controller.tap(4))
        self.assertEqual(controller.input_resolver().fired_presses, 0)

    def test_center_cell_never_receives_targets(self):
        controller = SessionController(_track((4, 0)), clock=self.clock)
        controller.start()

        self._run_frames(controller, 200.0)

        self.assertEqual(controller.session().cells[4].targets, [])

    def test_key_combination_judges_corner(self):
        controller = SessionController(_track((0, 0), (1, 0)), clock=self.clock)
        controller.start()
        controller.tick()
        self.clock.set_now_ms(1000.0)
        controller.tick()

        first = controller.key_down(Direction.UP)
        second = controller.key_down(Direction.LEFT)

        self.assertEqual(first.cell_index, 1)
        self.assertEqual(second.cell_index, 0)
        self.assertIsNone(controller.key_down(Direction.LEFT))

    def test_presses_are_ignored_while_stopped(self):
        controller = SessionController(_track((3, 0)), clock=self.clock)

        self.assertEqual(controller.run_state(), RunState.STOPPED)
        self.assertIsNone(controller.tap(3))
        self.assertEqual(controller.tick().spawned, [])

    def test_completion_end_time(self):
        controller = SessionController(_track((1, 0), (2, 2000)), clock=self.clock)
        self.assertEqual(controller.end_time_ms(), 3300)

        controller.start()
        self.assertFalse(controller.check_completion(now_ms=3300.0))
        self.assertTrue(controller.check_completion(now_ms=3300.5))
        self.assertFalse(controller.is_running())
        self.assertEqual(controller.session().fired_indices, set())
        self.assertIsNone(controller.session().start_time_ms)

    def test_empty_track_completes_immediately(self):
        controller = SessionController(Track(), clock=self.clock)
        controller.start()

        self.assertIsNone(controller.end_time_ms())
        self.assertTrue(controller.check_completion())
        self.assertEqual(controller.run_state(), RunState.STOPPED)

    def test_completion_check_is_noop_when_stopped(self):
        controller = SessionController(_track((1, 0)), clock=self.clock)

        self.assertFalse(controller.check_completion(now_ms=100000.0))

    def test_restart_resets_grid_and_stats(self):
        controller = SessionController(_track((3, 0)), clock=self.clock)
        controller.start()
        self._run_frames(controller, 1300.0)
        self.assertEqual(controller.score_state().miss_count, 1)

        controller.start()

        self.assertEqual(controller.session().all_targets(), [])
        self.assertEqual(controller.score_state().miss_count, 0)
        self.assertEqual(len(controller.tick().spawned), 1)

    def test_target_views_follow_resolution(self):
        controller = SessionController(_track((5, 0)), clock=self.clock)
        controller.start()
        controller.tick()
        self.clock.set_now_ms(1040.0)
        controller.tick()
        controller.tap(5)

        views = controller.target_views()

        self.assertEqual(len(views), 1)
        self.assertEqual(views[0].cell_index, 5)
        self.assertEqual(views[0].rating, HitRating.GREAT)
        self.assertEqual(views[0].growth, 1.0)

    def test_custom_timing_is_applied(self):
        timing = TimingConfig(growth_duration_ms=500)
        controller = SessionController(_track((7, 0)), timing=timing, clock=self.clock)
        controller.start()
        controller.tick()

        event = controller.press_cell(7, now_ms=500.0)

        self.assertEqual(event.rating, HitRating.PERFECT)
        self.assertEqual(controller.end_time_ms(), 800)


if __name__ == "__main__":
    unittest.main()

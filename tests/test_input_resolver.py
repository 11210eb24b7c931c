import unittest

from input_resolver import Direction, HeldInputs, InputResolver, cell_for_inputs

UP = Direction.UP
DOWN = Direction.DOWN
LEFT = Direction.LEFT
RIGHT = Direction.RIGHT


def _held(*directions):
    return HeldInputs(frozenset(directions))


class TestCellMapping(unittest.TestCase):
    def test_single_directions(self):
        self.assertEqual(cell_for_inputs(_held(UP)), 1)
        self.assertEqual(cell_for_inputs(_held(DOWN)), 7)
        self.assertEqual(cell_for_inputs(_held(LEFT)), 3)
        self.assertEqual(cell_for_inputs(_held(RIGHT)), 5)

    def test_corners(self):
        self.assertEqual(cell_for_inputs(_held(UP, LEFT)), 0)
        self.assertEqual(cell_for_inputs(_held(UP, RIGHT)), 2)
        self.assertEqual(cell_for_inputs(_held(DOWN, LEFT)), 6)
        self.assertEqual(cell_for_inputs(_held(DOWN, RIGHT)), 8)

    def test_unmapped_sets(self):
        self.assertIsNone(cell_for_inputs(_held()))
        self.assertIsNone(cell_for_inputs(_held(UP, DOWN)))
        self.assertIsNone(cell_for_inputs(_held(LEFT, RIGHT)))
        self.assertIsNone(cell_for_inputs(_held(UP, LEFT, RIGHT)))
        self.assertIsNone(cell_for_inputs(_held(UP, DOWN, LEFT, RIGHT)))

    def test_signature_is_order_independent(self):
        first = _held().with_pressed(LEFT).with_pressed(UP)
        second = _held().with_pressed(UP).with_pressed(LEFT)

        self.assertEqual(first.signature(), ("left", "up"))
        self.assertEqual(first.signature(), second.signature())
        self.assertEqual(first, second)


class TestInputResolver(unittest.TestCase):
    def setUp(self):
        self.resolver = InputResolver()

    def test_corner_press_after_single_fires_once(self):
        presses = []
        for direction in (UP, LEFT):
            presses.append(self.resolver.key_down(direction))

        self.assertEqual(presses, [1, 0])

        # Auto repeat key downs for the same hold.
        self.assertIsNone(self.resolver.key_down(UP))
        self.assertIsNone(self.resolver.key_down(LEFT))

    def test_corner_never_maps_to_single_cell(self):
        self.resolver.key_down(LEFT)
        self.assertEqual(self.resolver.key_down(UP), 0)
        self.assertEqual(self.resolver.selected_cell(), 0)

    def test_release_all_allows_retrigger(self):
        self.assertEqual(self.resolver.key_down(UP), 1)
        self.assertEqual(self.resolver.key_down(LEFT), 0)
        self.resolver.key_up(UP)
        self.resolver.key_up(LEFT)

        self.assertTrue(self.resolver.held().is_empty())
        self.assertEqual(self.resolver.key_down(UP), 1)

    def test_held_key_repeat_does_not_fire(self):
        self.assertEqual(self.resolver.key_down(RIGHT), 5)
        for _ in range(5):
            self.assertIsNone(self.resolver.key_down(RIGHT))
        self.assertEqual(self.resolver.fired_presses, 1)

    def test_partial_release_then_repress_fires(self):
        self.resolver.key_down(DOWN)
        self.assertEqual(self.resolver.key_down(RIGHT), 8)
        self.resolver.key_up(RIGHT)

        self.assertIsNone(self.resolver.key_down(DOWN))
        self.assertEqual(self.resolver.key_down(RIGHT), 8)

    def test_opposite_pair_does_not_fire(self):
        self.assertEqual(self.resolver.key_down(UP), 1)
        self.assertIsNone(self.resolver.key_down(DOWN))
        self.resolver.key_up(DOWN)
        self.assertIsNone(self.resolver.key_down(UP))

    def test_tap_bypasses_debounce(self):
        self.assertEqual(self.resolver.tap(2), 2)
        self.assertEqual(self.resolver.tap(2), 2)
        self.assertIsNone(self.resolver.tap(4))
        self.assertIsNone(self.resolver.tap(9))

    def test_reset_clears_signature(self):
        self.resolver.key_down(UP)
        self.resolver.reset()

        self.assertEqual(self.resolver.key_down(UP), 1)


if __name__ == "__main__":
    unittest.main()

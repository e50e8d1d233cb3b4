import unittest

from collapsi_engine.coord import Coordinate, Direction
from collapsi_engine.errors import IncompatibleBoardSize


class TestCoordinate(unittest.TestCase):
    def test_given_every_coordinate_when_stepping_there_and_back_then_returns_to_start(self):
        for n in (4, 5, 6):
            for x in range(n):
                for y in range(n):
                    c = Coordinate(x, y, n)
                    self.assertEqual(c.left.right, c)
                    self.assertEqual(c.right.left, c)
                    self.assertEqual(c.up.down, c)
                    self.assertEqual(c.down.up, c)
                    for nb in c.neighbours():
                        self.assertTrue(0 <= nb.x < n and 0 <= nb.y < n)
                        self.assertEqual(nb.board_size, n)

    def test_given_negative_components_when_wrapping_then_floored_modulo(self):
        self.assertEqual(Coordinate.wrapped(-1, -1, 4), Coordinate(3, 3, 4))
        self.assertEqual(Coordinate.wrapped(9, -6, 5), Coordinate(4, 4, 5))

    def test_given_corner_when_listing_neighbours_then_left_right_up_down_wrapped(self):
        c = Coordinate(0, 0, 4)
        self.assertEqual(
            c.neighbours(),
            [Coordinate(3, 0, 4), Coordinate(1, 0, 4), Coordinate(0, 3, 4), Coordinate(0, 1, 4)],
        )
        self.assertEqual(c.step(Direction.UP), Coordinate(0, 3, 4))

    def test_given_edge_positions_when_checking_adjacency_then_wraparound_counts(self):
        c = Coordinate(0, 0, 4)
        self.assertTrue(c.is_adjacent_to(Coordinate(3, 0, 4)))
        self.assertTrue(c.is_adjacent_to(Coordinate(0, 3, 4)))
        self.assertFalse(c.is_adjacent_to(Coordinate(2, 0, 4)))
        self.assertFalse(c.is_adjacent_to(Coordinate(1, 1, 4)))
        self.assertFalse(c.is_adjacent_to(c))

    def test_given_different_board_sizes_when_comparing_then_raises(self):
        with self.assertRaises(IncompatibleBoardSize):
            Coordinate(0, 0, 4).is_adjacent_to(Coordinate(1, 0, 5))

    def test_given_out_of_range_components_when_constructing_then_raises(self):
        with self.assertRaises(IncompatibleBoardSize):
            Coordinate(4, 0, 4)
        with self.assertRaises(ValueError):
            Coordinate(0, -1, 4)

    def test_given_coordinate_when_str_then_readable(self):
        self.assertEqual(str(Coordinate(2, 3, 4)), "(2, 3)")


if __name__ == '__main__':
    unittest.main()

import os
import random
import unittest
from unittest.mock import patch

from collapsi_engine.cli import parse_ints, parse_kinds, parse_move, simulate
from collapsi_engine.config import Settings
from collapsi_engine.coord import Coordinate
from collapsi_engine.engine import Collapsi
from collapsi_engine.state import PlayerKind


class TestSettings(unittest.TestCase):
    def test_given_clean_environment_when_loading_then_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            self.assertEqual(Settings.from_env(), Settings())

    def test_given_environment_when_loading_then_values_parsed(self):
        env = {
            "COLLAPSI_DEBUG": "true",
            "COLLAPSI_BOT_TIME_SCALE": "0.5",
            "COLLAPSI_SIMULATION_SPEED": "-1",
            "PORT": "8080",
            "DEBUG": "1",
        }
        with patch.dict(os.environ, env, clear=True):
            s = Settings.from_env()
        self.assertTrue(s.debug)
        self.assertEqual(s.bot_time_scale, 0.5)
        self.assertEqual(s.simulation_speed, -1.0)
        self.assertEqual(s.port, 8080)
        self.assertTrue(s.flask_debug)

    def test_given_non_numeric_scale_when_loading_then_value_error(self):
        with patch.dict(os.environ, {"COLLAPSI_BOT_TIME_SCALE": "fast"}, clear=True):
            with self.assertRaises(ValueError):
                Settings.from_env()


class TestCli(unittest.TestCase):
    def test_given_lists_when_parsing_then_kinds_and_ints(self):
        self.assertEqual(parse_kinds("local, BOT"), [PlayerKind.LOCAL, PlayerKind.BOT])
        self.assertEqual(parse_ints("0,3"), [0, 3])

    def test_given_move_text_when_parsing_then_coordinate_or_none(self):
        engine = Collapsi()
        engine.start_new_game([PlayerKind.LOCAL, PlayerKind.LOCAL], [0, 0], 4, rng=random.Random(0))
        here = engine.state.current_player.position
        self.assertEqual(parse_move("1,2", engine), Coordinate(1, 2, 4))
        self.assertEqual(parse_move("5 -1", engine), Coordinate(1, 3, 4))
        self.assertEqual(parse_move("l", engine), here.left)
        self.assertIsNone(parse_move("somewhere", engine))

    def test_given_random_bots_when_simulating_then_every_game_has_a_winner(self):
        wins = simulate([1, 1], 4, 3, seed=5, time_scale=0.01)
        self.assertEqual(sum(wins), 3)


if __name__ == '__main__':
    unittest.main()

import random
import time
import unittest

from boards import ONES_4, c, make_session, make_state
from collapsi_engine import rules
from collapsi_engine.board import PlayerColor
from collapsi_engine.bot import EVAL_LOSS, EVAL_WIN, TIERS, Bot, BotTier
from collapsi_engine.coord import Coordinate
from collapsi_engine.driver import TurnDriver
from collapsi_engine.engine import Collapsi
from collapsi_engine.errors import InvalidState
from collapsi_engine.paths import apply_path, possible_paths
from collapsi_engine.state import PlayerKind

OPEN = {(2, 0), (2, 1), (2, 2), (1, 0)}
ENDGAME_COLLAPSED = [(x, y) for x in range(4) for y in range(4) if (x, y) not in OPEN]
VALID = [(2, 4), (2, 5), (3, 5), (2, 6), (3, 6), (4, 6)]


def _endgame(kinds=None, difficulties=None):
    # Green at (2, 0) can step onto (2, 1), Orange's only exit, and win on the spot.
    return make_state(ONES_4, [(2, 0), (2, 2)], collapsed=ENDGAME_COLLAPSED,
                      kinds=kinds, difficulties=difficulties)


class TestTiers(unittest.TestCase):
    def test_given_tier_table_when_reading_then_budgets_match(self):
        self.assertTrue(TIERS[1].per_step)
        self.assertEqual(TIERS[2], BotTier(0.33, 6, 400))
        self.assertEqual(TIERS[3], BotTier(0.67, 7, 600))
        self.assertEqual(TIERS[4], BotTier(1.0, None, 3000))


class TestSearch(unittest.TestCase):
    def test_given_winning_step_when_searching_one_turn_deep_then_it_is_chosen(self):
        session = make_session(ONES_4, [(2, 0), (2, 2)], collapsed=ENDGAME_COLLAPSED)
        result = Bot().search(session, 1, 5000)
        self.assertEqual(result.path, [c(2, 1)])
        self.assertEqual(result.score, EVAL_WIN)
        self.assertEqual(result.depth, 1)
        self.assertTrue(result.depth_limited)
        self.assertFalse(result.timed_out)
        self.assertTrue(result.degraded)

    def test_given_small_tree_when_searching_unbounded_then_exact_result(self):
        session = make_session(ONES_4, [(2, 0), (2, 2)], collapsed=ENDGAME_COLLAPSED)
        before = session.state.clone()
        result = Bot().search(session, None, 5000)
        self.assertEqual(result.path, [c(2, 1)])
        self.assertEqual(result.evaluation, [EVAL_WIN, EVAL_LOSS])
        self.assertEqual(result.depth, 2)
        self.assertFalse(result.degraded)
        self.assertGreater(result.nodes, 0)
        self.assertEqual(session.state, before)
        self.assertEqual(session.undo_stack, [])

    def test_given_deadline_in_the_past_when_searching_then_timed_out_but_legal(self):
        session = rules.start_new_game([PlayerKind.BOT, PlayerKind.BOT], [4, 4], 4, random.Random(3))
        result = Bot().search(session, None, 3000, deadline=time.monotonic() - 1)
        self.assertTrue(result.timed_out)
        self.assertTrue(result.degraded)
        self.assertIn(result.path, possible_paths(session))

    def test_given_dealt_board_when_searching_then_session_is_left_as_found(self):
        session = rules.start_new_game([PlayerKind.BOT] * 3, [4] * 3, 5, random.Random(9))
        before = session.state.clone()
        result = Bot().search(session, 2, 2000)
        self.assertEqual(session.state, before)
        self.assertIn(result.path, possible_paths(session))
        self.assertLessEqual(result.depth, 2)

    def test_given_dead_and_winning_players_when_evaluating_then_fixed_scores(self):
        session = make_session(ONES_4, [(2, 0), (2, 2)], collapsed=ENDGAME_COLLAPSED)
        rules.move_to(session, c(2, 1))
        self.assertEqual(Bot().evaluate(session), [EVAL_WIN, EVAL_LOSS])

    def test_given_open_position_when_evaluating_then_counts_reachable_ends(self):
        session = make_session(ONES_4, [(0, 0), (2, 2)])
        self.assertEqual(Bot().evaluate(session), [4.0, 4.0])

    def test_given_dead_end_and_full_turn_to_same_tile_when_searching_then_bot_survives(self):
        rows = ["31111"] + ["11111"] * 4
        collapsed = [(x, y) for x in range(5) for y in range(1, 5)]
        session = make_session(rows, [(0, 0), (2, 0)], collapsed=collapsed)
        result = Bot().search(session, None, 2000)
        n5 = lambda x, y: Coordinate(x, y, 5)
        self.assertEqual(result.path, [n5(1, 0), n5(2, 0), n5(3, 0)])
        self.assertNotEqual(result.score, EVAL_LOSS)
        apply_path(session, result.path)
        self.assertTrue(session.state.players[0].alive)


class TestPlanning(unittest.TestCase):
    def test_given_non_bot_player_when_planning_then_invalid_state(self):
        session = make_session(ONES_4, [(0, 0), (2, 2)])
        with self.assertRaises(InvalidState):
            Bot().plan_turn(session)

    def test_given_no_plan_when_making_a_move_then_invalid_state(self):
        session = make_session(ONES_4, [(0, 0), (2, 2)], kinds=[PlayerKind.BOT, PlayerKind.LOCAL],
                               difficulties=[2, 0])
        with self.assertRaises(InvalidState):
            Bot().make_one_move(session)

    def test_given_top_tier_when_planning_then_search_runs_on_a_private_copy(self):
        session = make_session(ONES_4, [(2, 0), (2, 2)], collapsed=ENDGAME_COLLAPSED,
                               kinds=[PlayerKind.BOT, PlayerKind.LOCAL], difficulties=[4, 0])
        before = session.state.clone()
        bot = Bot(rng=random.Random(0))
        result = bot.plan_turn(session)
        self.assertIsNotNone(result)
        self.assertEqual(bot.intended, [c(2, 1)])
        self.assertEqual(session.state, before)
        self.assertEqual(bot.make_one_move(session), c(2, 1))
        self.assertTrue(session.state.is_game_over())
        self.assertEqual(bot.intended, [])

    def test_given_random_tier_when_planning_then_steps_are_chosen_one_at_a_time(self):
        session = make_session(["3111", "1111", "1111", "1111"], [(0, 0), (2, 2)],
                               kinds=[PlayerKind.BOT, PlayerKind.LOCAL], difficulties=[1, 0])
        bot = Bot(rng=random.Random(1))
        self.assertIsNone(bot.plan_turn(session))
        self.assertEqual(bot.intended, [])
        while session.state.current_player_index == 0 and not session.state.is_game_over():
            legal = rules.legal_steps(session.state)
            self.assertIn(bot.make_one_move(session), legal)
        self.assertEqual(len(session.undo_stack), 3)

    def test_given_never_smart_tier_when_planning_then_a_whole_enumerated_path_is_kept(self):
        session = make_session(["2111", "1111", "1111", "1111"], [(0, 0), (2, 2)],
                               kinds=[PlayerKind.BOT, PlayerKind.LOCAL], difficulties=[2, 0])
        bot = Bot(rng=random.Random(2), tiers={2: BotTier(0.0, 6, 400)})
        self.assertIsNone(bot.plan_turn(session))
        self.assertIn(bot.intended, possible_paths(session))


class TestFullGames(unittest.TestCase):
    def test_given_every_tier_and_setup_when_bots_play_then_games_finish_legally(self):
        for players, size in VALID:
            for tier in (1, 2, 3, 4):
                with self.subTest(players=players, size=size, tier=tier):
                    seed = players * 100 + size * 10 + tier
                    engine = Collapsi(bot=Bot(rng=random.Random(seed), time_scale=0.02))
                    engine.start_new_game([PlayerKind.BOT] * players, [tier] * players, size,
                                          rng=random.Random(seed))
                    with TurnDriver(engine) as driver:
                        winner = driver.run(max_turns=500)
                    self.assertIsNotNone(winner)
                    self.assertIsNone(engine.session)
                    ranks = sorted(p.rank for p in engine.final_state.players)
                    self.assertEqual(ranks, list(range(players)))

    def test_given_mixed_tiers_when_bots_play_then_winner_is_last_alive(self):
        engine = Collapsi(bot=Bot(rng=random.Random(4), time_scale=0.02))
        engine.start_new_game([PlayerKind.BOT] * 4, [1, 2, 3, 4], 6, rng=random.Random(4))
        with TurnDriver(engine) as driver:
            winner = driver.run(max_turns=500)
        self.assertIsNotNone(winner)
        self.assertEqual([p for p in engine.final_state.players if p.alive], [winner])

    def test_given_bot_endgame_when_playing_turn_through_engine_then_bot_wins(self):
        engine = Collapsi(bot=Bot(rng=random.Random(0)))
        engine.adopt(_endgame([PlayerKind.BOT, PlayerKind.LOCAL], [4, 0]))
        result = engine.play_bot_turn()
        self.assertFalse(result.degraded)
        self.assertIsNone(engine.session)
        self.assertEqual(engine.winner.color, PlayerColor.GREEN_SQUARE)


if __name__ == '__main__':
    unittest.main()

from __future__ import annotations

import argparse
import random
from typing import List, Optional, Sequence

from .bot import Bot
from .config import Settings, configure_logging
from .coord import Coordinate, Direction
from .driver import TurnDriver
from .engine import Collapsi
from .errors import InvalidSetup
from .events import GameListener, LoggingListener
from .state import Player, PlayerKind

_DIRECTION_KEYS = {'l': Direction.LEFT, 'r': Direction.RIGHT, 'u': Direction.UP, 'd': Direction.DOWN}


def parse_kinds(text: str) -> List[PlayerKind]:
    try:
        return [PlayerKind(t.strip().lower()) for t in text.split(',') if t.strip()]
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def parse_ints(text: str) -> List[int]:
    try:
        return [int(t) for t in text.split(',') if t.strip()]
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def parse_move(text: str, engine: Collapsi) -> Optional[Coordinate]:
    """Accepts 'x,y', 'x y' or a direction letter l/r/u/d."""
    text = text.strip().lower()
    if text in _DIRECTION_KEYS:
        return engine.state.current_player.position.step(_DIRECTION_KEYS[text])
    sep = ',' if ',' in text else ' '
    try:
        x_s, y_s = [t for t in text.split(sep) if t != '']
        return engine.state.coordinate(int(x_s), int(y_s))
    except ValueError:
        return None


def prompt_human_move(engine: Collapsi) -> Coordinate:
    player = engine.state.current_player
    print(engine.state.pretty())
    print(f"{player.color.name}: {player.remaining_steps} steps left, legal: {[str(c) for c in engine.legal_steps()]}")
    while True:
        move = parse_move(input('Enter your move as x,y or l/r/u/d: '), engine)
        if move is not None:
            return move
        print('Could not parse. Try again.')


class _BoardPrinter(GameListener):
    def __init__(self, engine: Collapsi) -> None:
        self.engine = engine

    def on_turn_ended(self, player: Player) -> None:
        if self.engine.session is not None:
            print(self.engine.session.state.pretty())
            print()


def simulate(difficulties: Sequence[int], board_size: int, iterations: int, seed: Optional[int],
             time_scale: float) -> List[int]:
    """Plays all-bot games and returns the number of wins per seat."""
    rng = random.Random(seed)
    wins = [0] * len(difficulties)
    for _ in range(iterations):
        engine = Collapsi(bot=Bot(rng=random.Random(rng.random()), time_scale=time_scale))
        engine.start_new_game([PlayerKind.BOT] * len(difficulties), list(difficulties), board_size,
                              rng=random.Random(rng.random()))
        seats = {p.color: i for i, p in enumerate(engine.state.players)}
        with TurnDriver(engine) as driver:
            winner = driver.run()
        if winner is not None:
            wins[seats[winner.color]] += 1

    print()
    print('Matches concluded!')
    print(f'- {iterations} matches fought.')
    print(f'- {board_size}x{board_size} board.')
    for i, difficulty in enumerate(difficulties):
        share = wins[i] / iterations if iterations else 0.0
        print(f'- Seat {i + 1} (lvl. {difficulty} bot) won {wins[i]} ({share * 100:.1f}%)')
    print()
    return wins


def main(argv: Optional[Sequence[str]] = None) -> None:
    settings = Settings.from_env()
    parser = argparse.ArgumentParser(description='Collapsi on a wrap-around board, against humans or bots')
    parser.add_argument('--size', type=int, choices=[4, 5, 6], default=4, help='Board size (NxN)')
    parser.add_argument('--players', type=parse_kinds, default=[PlayerKind.LOCAL, PlayerKind.BOT],
                        help='Comma separated player kinds in turn order: local,bot')
    parser.add_argument('--difficulty', type=parse_ints, default=None,
                        help='Comma separated bot difficulties (1-4) per player; 0 for humans')
    parser.add_argument('--seed', type=int, default=None, help='RNG seed for the deal and the bots')
    parser.add_argument('--simulate', type=int, default=0, metavar='N',
                        help='Play N all-bot games with the given difficulties and report win rates')
    parser.add_argument('--time-scale', type=float, default=settings.bot_time_scale,
                        help='Multiplier on every bot time budget')
    parser.add_argument('--verbose', action='store_true', help='Log every game event')
    args = parser.parse_args(argv)

    configure_logging(settings.debug)

    if args.simulate:
        difficulties = args.difficulty or [1, 2]
        simulate(difficulties, args.size, args.simulate, args.seed, args.time_scale)
        return

    kinds = args.players
    difficulties = args.difficulty or [3 if k == PlayerKind.BOT else 0 for k in kinds]
    rng = random.Random(args.seed)
    engine = Collapsi(bot=Bot(rng=random.Random(rng.random()), time_scale=args.time_scale))
    engine.add_listener(_BoardPrinter(engine))
    if args.verbose:
        engine.add_listener(LoggingListener())
    try:
        engine.start_new_game(kinds, difficulties, args.size, rng=rng, simulation_speed=settings.simulation_speed)
    except InvalidSetup as e:
        parser.error(str(e))
    print('Initial board:')
    print(engine.state.pretty())

    with TurnDriver(engine, local_source=prompt_human_move) as driver:
        winner = driver.run()
    if winner is not None:
        print(f"{winner.color.name} wins!")


if __name__ == '__main__':
    main()

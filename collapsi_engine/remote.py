from __future__ import annotations

import math
from enum import Enum
from typing import Dict, List, Optional, Sequence

from .board import START_STEPS, STEP_DISTRIBUTION, PlayerColor, Tile
from .coord import Coordinate, Direction
from .deal import check_setup
from .engine import Collapsi
from .errors import IllegalMove, InvalidSetup
from .state import GameState, Player, PlayerKind


class TileType(Enum):
    """Wire encoding of one dealt tile: a start tile of some color, a step value,
    or a blank slot that was dealt already collapsed."""
    START_GREEN = 'START_GREEN'
    START_ORANGE = 'START_ORANGE'
    START_YELLOW = 'START_YELLOW'
    START_RED = 'START_RED'
    ONE = 'ONE'
    TWO = 'TWO'
    THREE = 'THREE'
    FOUR = 'FOUR'
    BLOCKED = 'BLOCKED'

    @property
    def steps(self) -> int:
        return _STEPS.get(self, START_STEPS)

    @property
    def color(self) -> Optional[PlayerColor]:
        return _START_COLORS.get(self)


_STEPS = {TileType.ONE: 1, TileType.TWO: 2, TileType.THREE: 3, TileType.FOUR: 4}
_START_COLORS = {
    TileType.START_GREEN: PlayerColor.GREEN_SQUARE,
    TileType.START_ORANGE: PlayerColor.ORANGE_HEXAGON,
    TileType.START_YELLOW: PlayerColor.YELLOW_CIRCLE,
    TileType.START_RED: PlayerColor.RED_TRIANGLE,
}
_BY_STEPS = {steps: t for t, steps in _STEPS.items()}
_BY_COLOR = {color: t for t, color in _START_COLORS.items()}


def direction_between(origin: Coordinate, dest: Coordinate) -> Direction:
    """The direction of a single wrapped step from `origin` to `dest`."""
    if not origin.is_adjacent_to(dest):
        raise IllegalMove(f"{dest} is not one step away from {origin}.")
    for d in Direction:
        if origin.step(d) == dest:
            return d
    raise IllegalMove(f"{dest} is not one step away from {origin}.")


def apply_remote_direction(engine: Collapsi, direction: Direction) -> Coordinate:
    """Turns a peer's direction into a destination and plays it like a local step."""
    dest = engine.state.current_player.position.step(direction)
    engine.move_to(dest)
    return dest


def tile_type(tile: Tile) -> TileType:
    if tile.start_color is not None:
        return _BY_COLOR[tile.start_color]
    if tile.collapsed:
        return TileType.BLOCKED
    return _BY_STEPS[tile.steps]


def encode_layout(state: GameState) -> List[TileType]:
    """Row-major layout of the board, index = x + y * size."""
    n = state.board_size
    return [tile_type(state.board[Coordinate(i % n, i // n, n)]) for i in range(n * n)]


def decode_layout(layout: Sequence[TileType], colors: Sequence[PlayerColor],
                  kinds: Sequence[PlayerKind], bot_difficulties: Sequence[int] = ()) -> GameState:
    """Builds the state of a joined game from a received layout. `colors` is the
    turn order; `kinds` / `bot_difficulties` run parallel to it."""
    n = math.isqrt(len(layout))
    if n * n != len(layout) or n not in STEP_DISTRIBUTION:
        raise InvalidSetup(f"A layout of {len(layout)} tiles is not a supported square board.")
    if len(kinds) != len(colors):
        raise InvalidSetup("Every player color needs a player kind.")
    check_setup(len(colors), n)
    difficulties = list(bot_difficulties) or [0] * len(colors)

    board = {}
    starts: Dict[PlayerColor, Coordinate] = {}
    for i, t in enumerate(layout):
        pos = Coordinate(i % n, i // n, n)
        board[pos] = Tile(pos, t.steps, t.color, collapsed=(t == TileType.BLOCKED))
        if t.color is not None:
            starts[t.color] = pos

    players = []
    for color, kind, difficulty in zip(colors, kinds, difficulties):
        if color not in starts:
            raise InvalidSetup(f"The layout has no start tile for {color.name}.")
        players.append(Player(color, starts[color], kind, difficulty if kind == PlayerKind.BOT else 0))
    state = GameState(players=players, board=board, board_size=n)
    state.current_player.remaining_steps = state.tile_at(state.current_player.position).steps
    return state

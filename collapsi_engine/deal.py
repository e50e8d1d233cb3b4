from __future__ import annotations

import random
from typing import List, Optional, Tuple

from .board import START_STEPS, STEP_DISTRIBUTION, Board, PlayerColor, Tile
from .coord import Coordinate
from .errors import InvalidSetup

MIN_PLAYERS = 2
MAX_PLAYERS = 4
BOARD_SIZES = tuple(sorted(STEP_DISTRIBUTION))


def check_setup(player_count: int, board_size: int) -> None:
    """Raises InvalidSetup unless the player count / board size pairing is allowed."""
    if not MIN_PLAYERS <= player_count <= MAX_PLAYERS:
        raise InvalidSetup(f"The number of players must be between {MIN_PLAYERS} and {MAX_PLAYERS}, got {player_count}.")
    if board_size not in STEP_DISTRIBUTION:
        raise InvalidSetup(f"The board size must be one of {BOARD_SIZES}, got {board_size}.")
    # Provisional pairing rule.
    if board_size < player_count + 2:
        raise InvalidSetup(f"{player_count} players require a board size of at least {player_count + 2}.")


def deal_board(player_count: int, board_size: int,
               rng: Optional[random.Random] = None) -> Tuple[Board, List[Coordinate]]:
    """Deals a shuffled board and returns it with the start positions in player order."""
    check_setup(player_count, board_size)
    rng = rng or random.Random()

    positions = [Coordinate(i % board_size, i // board_size, board_size) for i in range(board_size * board_size)]
    rng.shuffle(positions)
    board: Board = {}

    # One start slot per possible seat; seats nobody takes are dealt already collapsed.
    starts: List[Coordinate] = []
    colors = list(PlayerColor)
    for i in range(board_size - 2):
        pos = positions.pop(0)
        if i < player_count:
            board[pos] = Tile(pos, START_STEPS, colors[i])
            starts.append(pos)
        else:
            board[pos] = Tile(pos, START_STEPS, None, collapsed=True)

    deck = [steps for steps, count in STEP_DISTRIBUTION[board_size].items() for _ in range(count)]
    for steps in deck:
        if not positions:
            break
        pos = positions.pop(0)
        board[pos] = Tile(pos, steps)

    if positions or len(board) != board_size * board_size:
        raise InvalidSetup(f"{len(positions)} positions on the {board_size}x{board_size} board were left without a tile.")
    return board, starts

from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence

from .board import PlayerColor
from .coord import Coordinate
from .deal import check_setup, deal_board
from .errors import IllegalMove, IncompatibleBoardSize, InvalidSetup, InvalidState
from .history import recorded
from .state import GameState, Player, PlayerKind, Session

logger = logging.getLogger(__name__)


def new_game_state(player_kinds: Sequence[PlayerKind], bot_difficulties: Sequence[int], board_size: int,
                   rng: Optional[random.Random] = None) -> GameState:
    """Validates the setup and deals a fresh state. Player i gets the i-th color and start tile."""
    check_setup(len(player_kinds), board_size)
    if len(bot_difficulties) != len(player_kinds):
        raise InvalidSetup("Difficulty needs to be defined for all players (even non-bot players).")
    for kind, difficulty in zip(player_kinds, bot_difficulties):
        if kind == PlayerKind.BOT and not 1 <= difficulty <= 4:
            raise InvalidSetup(f"Bot difficulty must be between 1 and 4, got {difficulty}.")

    board, starts = deal_board(len(player_kinds), board_size, rng)
    colors = list(PlayerColor)
    players = [
        Player(colors[i], starts[i], kind, difficulty if kind == PlayerKind.BOT else 0)
        for i, (kind, difficulty) in enumerate(zip(player_kinds, bot_difficulties))
    ]
    state = GameState(players=players, board=board, board_size=board_size)
    state.current_player.remaining_steps = state.tile_at(state.current_player.position).steps
    return state


def start_new_game(player_kinds: Sequence[PlayerKind], bot_difficulties: Sequence[int], board_size: int,
                   rng: Optional[random.Random] = None, listeners: Sequence = ()) -> Session:
    session = Session(state=new_game_state(player_kinds, bot_difficulties, board_size, rng), listeners=list(listeners))
    session.emit('on_game_started', session.state)
    session.emit('on_turn_started', session.state.current_player)
    return session


def can_move_to(state: GameState, dest: Coordinate) -> bool:
    """Whether the current player may step onto `dest` now. Fails closed.

    A player may pass through a tile held by another living player, but may not
    finish the turn on it. Whether every onward step from such a tile is blocked
    is not looked at.
    """
    if dest.board_size != state.board_size:
        raise IncompatibleBoardSize(f"{dest} does not belong to a {state.board_size}x{state.board_size} board")
    if state.is_game_over():
        return False
    player = state.current_player
    if not player.alive or player.remaining_steps <= 0:
        return False
    if not player.position.is_adjacent_to(dest):
        return False
    tile = state.tile_at(dest)
    if tile.collapsed or tile.visited:
        return False
    if player.remaining_steps == 1 and state.is_occupied(dest, ignore=player):
        return False
    return True


def legal_steps(state: GameState) -> List[Coordinate]:
    """Neighbours of the current player that pass `can_move_to`."""
    return [c for c in state.current_player.position.neighbours() if can_move_to(state, c)]


def has_legal_step(state: GameState) -> bool:
    return any(can_move_to(state, c) for c in state.current_player.position.neighbours())


def move_to(session: Session, dest: Coordinate) -> None:
    """Moves the current player one step. Ends the turn when the steps run out,
    and eliminates the player when the new position leaves no legal step."""
    state = session.state
    if not can_move_to(state, dest):
        raise IllegalMove(f"Tried to perform an illegal move to {dest}.")

    with recorded(session):
        player = state.current_player
        origin = player.position
        left = state.tile_at(origin)

        # Only the tile a turn starts from collapses; later ones are just blocked until turn end.
        if not player.visited:
            left.collapsed = True
        left.visited = True
        player.visited.append(origin)

        player.position = dest
        player.remaining_steps -= 1
        session.emit('on_step_taken', player, origin, dest)

        if player.remaining_steps > 0 and not has_legal_step(state):
            _eliminate(session, player)
            _finish_turn(session)
        elif player.remaining_steps == 0:
            _finish_turn(session)


def end_turn(session: Session) -> None:
    """Explicit turn end. Only allowed once the current player has nothing legal left to do;
    a player who is stuck with steps remaining is eliminated."""
    state = session.state
    if not state.alive_players():
        raise InvalidState("Can't end the turn: no player is alive.")
    if state.is_game_over():
        raise InvalidState("The game is already over.")
    player = state.current_player
    stuck = player.alive and player.remaining_steps > 0
    if stuck and has_legal_step(state):
        raise InvalidState(f"{player.color.name} still has {player.remaining_steps} steps and a legal move.")
    with recorded(session):
        if stuck:
            _eliminate(session, player)
        _finish_turn(session)


def _eliminate(session: Session, player: Player) -> None:
    state = session.state
    player.alive = False
    state.tile_at(player.position).collapsed = True
    # First eliminated finishes last.
    player.rank = len(state.alive_players())
    session.emit('on_player_eliminated', player)


def _finish_turn(session: Session) -> None:
    state = session.state
    player = state.current_player
    for c in player.visited:
        state.tile_at(c).visited = False
    player.visited.clear()
    player.remaining_steps = 0
    session.emit('on_turn_ended', player)

    if state.is_game_over():
        _end_game(session)
        return

    nxt = state.advance_to_next_living()
    nxt.remaining_steps = state.tile_at(nxt.position).steps
    session.emit('on_turn_started', nxt)

    if not has_legal_step(state):
        _eliminate(session, nxt)
        _finish_turn(session)


def _end_game(session: Session) -> None:
    winner = session.state.winner()
    if winner is None:
        raise InvalidState("Game should end with exactly 1 alive player.")
    winner.rank = 0
    logger.debug("game over, %s wins", winner.color.name)
    session.emit('on_game_ended', winner)

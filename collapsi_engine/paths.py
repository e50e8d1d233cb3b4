from __future__ import annotations

from typing import Dict, List, Set

from .board import PlayerColor
from .coord import Coordinate
from .history import checkpoint
from .rules import legal_steps, move_to
from .state import Session

# One turn's ordered step destinations, not including the starting position.
Path = List[Coordinate]


def possible_moves(session: Session) -> List[Coordinate]:
    """All coordinates the current player could step to right now."""
    return legal_steps(session.state)


def possible_paths(session: Session) -> List[Path]:
    """One path per distinct end position the current player can reach this turn.

    Walks the tree with real moves and rolls each one back, so the collapse and
    visited bookkeeping match what an actual turn would do. A path that strands
    the player is only kept when no full turn ends on the same tile. Must not run
    concurrently with any other mutation of the same session.
    """
    found: Dict[Coordinate, Path] = {}
    stranded: Set[Coordinate] = set()
    _complete(session, [], found, stranded)
    return list(found.values())


def _complete(session: Session, prefix: Path, found: Dict[Coordinate, Path], stranded: Set[Coordinate]) -> None:
    state = session.state
    mover = state.current_player_index
    if state.current_player.remaining_steps <= 1:
        for dest in possible_moves(session):
            if dest not in found or dest in stranded:
                found[dest] = prefix + [dest]
                stranded.discard(dest)
        return

    for dest in possible_moves(session):
        with checkpoint(session):
            move_to(session, dest)
            after = session.state
            if after.current_player_index == mover and after.current_player.alive and not after.is_game_over():
                _complete(session, prefix + [dest], found, stranded)
            elif dest not in found:
                # The step left no way on; the turn ends here in elimination.
                found[dest] = prefix + [dest]
                stranded.add(dest)


def paths_for_player(session: Session, color: PlayerColor) -> List[Path]:
    """Enumerates as if it were `color`'s turn, starting from a full set of steps.
    The turn pointer and step counter are restored afterwards."""
    state = session.state
    if state.current_player.color == color:
        return possible_paths(session)
    old_index = state.current_player_index
    index = state.index_of(color)
    player = state.players[index]
    old_steps = player.remaining_steps
    state.current_player_index = index
    player.remaining_steps = state.tile_at(player.position).steps
    try:
        return possible_paths(session)
    finally:
        # Rolled-back moves replace the Player objects, so look the player up again.
        state.current_player_index = old_index
        state.players[index].remaining_steps = old_steps


def apply_path(session: Session, path: Path) -> None:
    """Walks the current player along `path`. The last step ends the turn, which
    passes play to the next living player (or ends the game)."""
    for dest in path:
        move_to(session, dest)

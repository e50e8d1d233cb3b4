from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional

from .board import Board, PlayerColor, Tile, pretty
from .coord import Coordinate
from .errors import IncompatibleBoardSize, InvalidState

if TYPE_CHECKING:
    from .events import GameListener


class PlayerKind(Enum):
    LOCAL = 'local'
    BOT = 'bot'
    REMOTE = 'remote'


class TurnPhase(Enum):
    AWAITING_MOVE = 'awaiting_move'
    TURN_COMPLETE = 'turn_complete'
    GAME_OVER = 'game_over'


@dataclass
class Player:
    """A pawn and the bookkeeping of its current turn."""
    color: PlayerColor
    position: Coordinate
    kind: PlayerKind = PlayerKind.LOCAL
    bot_difficulty: int = 0
    remaining_steps: int = 0
    visited: List[Coordinate] = field(default_factory=list)  # tiles left this turn, in order
    alive: bool = True
    rank: Optional[int] = None  # 0 = winner

    def clone(self) -> 'Player':
        return Player(
            color=self.color,
            position=self.position,
            kind=self.kind,
            bot_difficulty=self.bot_difficulty,
            remaining_steps=self.remaining_steps,
            visited=list(self.visited),
            alive=self.alive,
            rank=self.rank,
        )


@dataclass
class GameState:
    """Full snapshot of a game: players in turn order, the board and whose turn it is."""
    players: List[Player]
    board: Board
    board_size: int
    current_player_index: int = 0

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    def tile_at(self, position: Coordinate) -> Tile:
        if position.board_size != self.board_size:
            raise IncompatibleBoardSize(f"{position} does not belong to a {self.board_size}x{self.board_size} board")
        return self.board[position]

    def coordinate(self, x: int, y: int) -> Coordinate:
        return Coordinate.wrapped(x, y, self.board_size)

    def alive_players(self) -> List[Player]:
        return [p for p in self.players if p.alive]

    def player_by_color(self, color: PlayerColor) -> Player:
        for p in self.players:
            if p.color == color:
                return p
        raise KeyError(color)

    def index_of(self, color: PlayerColor) -> int:
        for i, p in enumerate(self.players):
            if p.color == color:
                return i
        raise KeyError(color)

    def is_occupied(self, position: Coordinate, ignore: Optional[Player] = None) -> bool:
        """True when a living player other than `ignore` stands on `position`."""
        return any(p.alive and p is not ignore and p.position == position for p in self.players)

    def is_game_over(self) -> bool:
        return len(self.alive_players()) <= 1

    def winner(self) -> Optional[Player]:
        alive = self.alive_players()
        return alive[0] if len(alive) == 1 else None

    @property
    def phase(self) -> TurnPhase:
        if self.is_game_over():
            return TurnPhase.GAME_OVER
        player = self.current_player
        if player.alive and player.remaining_steps > 0:
            return TurnPhase.AWAITING_MOVE
        return TurnPhase.TURN_COMPLETE

    def advance_to_next_living(self) -> Player:
        """Moves the turn pointer to the next living player, wrapping around the list."""
        if not self.alive_players():
            raise InvalidState("Can't advance the turn: no player is alive.")
        while True:
            self.current_player_index = (self.current_player_index + 1) % len(self.players)
            if self.current_player.alive:
                return self.current_player

    def clone(self) -> 'GameState':
        """Deep copy; the clone shares no mutable child with this state."""
        return GameState(
            players=[p.clone() for p in self.players],
            board={pos: tile.clone() for pos, tile in self.board.items()},
            board_size=self.board_size,
            current_player_index=self.current_player_index,
        )

    def restore_from(self, snapshot: 'GameState') -> None:
        """Takes over the contents of `snapshot`, which must not be used afterwards."""
        self.players = snapshot.players
        self.board = snapshot.board
        self.board_size = snapshot.board_size
        self.current_player_index = snapshot.current_player_index

    def pretty(self) -> str:
        pawns: Dict[Coordinate, str] = {}
        for p in self.players:
            if p.alive:
                pawns[p.position] = p.color.symbol
        return pretty(self.board, self.board_size, pawns)


@dataclass
class Session:
    """The running game: current state, undo/redo stacks and listeners."""
    state: GameState
    undo_stack: List[GameState] = field(default_factory=list)
    redo_stack: List[GameState] = field(default_factory=list)
    simulation_speed: float = 0.0
    listeners: List['GameListener'] = field(default_factory=list, compare=False, repr=False)

    @property
    def is_over(self) -> bool:
        return self.state.is_game_over()

    @property
    def is_online(self) -> bool:
        return any(p.kind == PlayerKind.REMOTE for p in self.state.players)

    def fork(self) -> 'Session':
        """A silent private copy of the state for speculative search, without history or listeners."""
        return Session(state=self.state.clone(), simulation_speed=self.simulation_speed)

    def emit(self, event: str, *args) -> None:
        for listener in list(self.listeners):
            getattr(listener, event)(*args)

"""
Collapsi rules engine and bots for the wrap-around, 2-4 player variant.

Modules:
- coord.py: Coordinate, Direction (torus geometry)
- board.py / deal.py: Tile, PlayerColor, board generation
- state.py: Player, GameState, Session
- rules.py: legality, moves, turn end, elimination, game over
- history.py: undo / redo / checkpoint
- paths.py: enumeration of a player's distinct turn paths
- bot.py: difficulty tiers and anytime minimax search
- engine.py: Collapsi facade owning the running session
- driver.py, remote.py, serialize.py, cli.py: outer collaborators
"""
from .board import PlayerColor, Tile
from .bot import Bot, BotTier, SearchResult, TIERS
from .coord import Coordinate, Direction
from .engine import Collapsi
from .errors import (
    CollapsiError,
    IllegalMove,
    IncompatibleBoardSize,
    InvalidSetup,
    InvalidState,
    NoHistory,
)
from .events import GameListener, LoggingListener
from .state import GameState, Player, PlayerKind, Session, TurnPhase

__all__ = [
    'Bot', 'BotTier', 'Collapsi', 'CollapsiError', 'Coordinate', 'Direction', 'GameListener',
    'GameState', 'IllegalMove', 'IncompatibleBoardSize', 'InvalidSetup', 'InvalidState',
    'LoggingListener', 'NoHistory', 'Player', 'PlayerColor', 'PlayerKind', 'SearchResult',
    'Session', 'TIERS', 'Tile', 'TurnPhase',
]

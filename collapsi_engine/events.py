from __future__ import annotations

import logging

from .coord import Coordinate
from .state import GameState, Player, PlayerKind

logger = logging.getLogger(__name__)


class GameListener:
    """Observer for engine notifications. Every hook is a no-op by default;
    subclasses override only the events they care about."""

    def on_game_started(self, state: GameState) -> None:
        pass

    def on_turn_started(self, player: Player) -> None:
        pass

    def on_step_taken(self, player: Player, origin: Coordinate, dest: Coordinate) -> None:
        """A single step, not a whole turn."""

    def on_turn_ended(self, player: Player) -> None:
        pass

    def on_player_eliminated(self, player: Player) -> None:
        pass

    def on_game_ended(self, winner: Player) -> None:
        pass

    def on_undo(self, state: GameState) -> None:
        pass

    def on_redo(self, state: GameState) -> None:
        pass


def describe(player: Player) -> str:
    if player.kind == PlayerKind.BOT:
        return f"{player.color.name} (lvl. {player.bot_difficulty} bot)"
    return f"{player.color.name} ({player.kind.value})"


class LoggingListener(GameListener):
    """Logs every notification; handy for headless runs and debugging."""

    def on_game_started(self, state: GameState) -> None:
        logger.info("new game: %dx%d board, %d players", state.board_size, state.board_size, len(state.players))
        for p in state.players:
            logger.info("- %s starts on %s", describe(p), p.position)

    def on_turn_started(self, player: Player) -> None:
        logger.info("%s to move, %d steps", describe(player), player.remaining_steps)

    def on_step_taken(self, player: Player, origin: Coordinate, dest: Coordinate) -> None:
        logger.info("%s moved %s -> %s, %d remaining", player.color.name, origin, dest, player.remaining_steps)

    def on_turn_ended(self, player: Player) -> None:
        logger.info("%s ended the turn", player.color.name)

    def on_player_eliminated(self, player: Player) -> None:
        logger.info("%s couldn't move and the tile below collapsed (rank %s)", player.color.name, player.rank)

    def on_game_ended(self, winner: Player) -> None:
        logger.info("%s has won", winner.color.name)

    def on_undo(self, state: GameState) -> None:
        logger.info("undo: %s to move", state.current_player.color.name)

    def on_redo(self, state: GameState) -> None:
        logger.info("redo: %s to move", state.current_player.color.name)

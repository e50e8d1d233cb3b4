from __future__ import annotations

import logging
import random
import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence

from . import history, rules
from .bot import Bot, SearchResult
from .coord import Coordinate
from .errors import InvalidState
from .events import GameListener
from .state import GameState, Player, PlayerKind, Session

logger = logging.getLogger(__name__)


class Collapsi:
    """Owns the running session and is the surface for GUI, bots and network.

    Only one writer may touch the session at a time: while a bot is planning,
    every other mutating call is rejected with InvalidState.
    """

    def __init__(self, bot: Optional[Bot] = None, listeners: Sequence[GameListener] = ()) -> None:
        self.session: Optional[Session] = None
        self.bot = bot or Bot()
        self.listeners: List[GameListener] = list(listeners)
        self.winner: Optional[Player] = None
        self.final_state: Optional[GameState] = None
        self._writer = threading.Lock()

    def add_listener(self, listener: GameListener) -> None:
        self.listeners.append(listener)
        if self.session is not None:
            self.session.listeners.append(listener)

    # ---------- session lifecycle ----------

    def start_new_game(self, player_kinds: Sequence[PlayerKind], bot_difficulties: Sequence[int], board_size: int,
                       rng: Optional[random.Random] = None, simulation_speed: float = 0.0) -> Session:
        if self.session is not None:
            raise InvalidState("Tried to start a game, while one was already in progress.")
        self.winner = None
        self.final_state = None
        self.bot.reset()
        session = rules.start_new_game(player_kinds, bot_difficulties, board_size, rng, listeners=self.listeners)
        session.simulation_speed = simulation_speed
        self.session = session
        return session

    def adopt(self, state: GameState) -> Session:
        """Starts a session from an already built state (joined online game, loaded save)."""
        if self.session is not None:
            raise InvalidState("Tried to start a game, while one was already in progress.")
        self.winner = None
        self.final_state = None
        self.bot.reset()
        self.session = Session(state=state, listeners=list(self.listeners))
        self.session.emit('on_game_started', state)
        self.session.emit('on_turn_started', state.current_player)
        return self.session

    def abandon(self) -> None:
        self.session = None
        self.bot.reset()

    @property
    def state(self) -> GameState:
        return self._require().state

    def _require(self) -> Session:
        if self.session is None:
            raise InvalidState("No game is currently running.")
        return self.session

    @contextmanager
    def _exclusive(self, blocking: bool = False) -> Iterator[Session]:
        session = self._require()
        if not self._writer.acquire(blocking=blocking):
            raise InvalidState("The game state is owned by a running bot search.")
        try:
            yield session
        finally:
            self._writer.release()
            self._teardown_if_over()

    def _teardown_if_over(self) -> None:
        if self.session is not None and self.session.is_over:
            self.winner = self.session.state.winner()
            self.final_state = self.session.state
            logger.debug("session closed")
            self.session = None
            self.bot.reset()

    # ---------- human / network surface ----------

    def can_move_to(self, dest: Coordinate) -> bool:
        return rules.can_move_to(self._require().state, dest)

    def legal_steps(self) -> List[Coordinate]:
        return rules.legal_steps(self._require().state)

    def move_to(self, dest: Coordinate) -> None:
        with self._exclusive() as session:
            rules.move_to(session, dest)

    def end_turn(self) -> None:
        with self._exclusive() as session:
            rules.end_turn(session)

    def undo(self) -> None:
        with self._exclusive() as session:
            if session.is_online:
                raise InvalidState("Can't undo in an online game.")
            history.undo(session)
            self.bot.reset()

    def redo(self) -> None:
        with self._exclusive() as session:
            if session.is_online:
                raise InvalidState("Can't redo in an online game.")
            history.redo(session)
            self.bot.reset()

    # ---------- bot surface ----------

    def plan_turn(self, deadline: Optional[float] = None) -> Optional[SearchResult]:
        with self._exclusive() as session:
            return self.bot.plan_turn(session, deadline)

    def make_one_move(self) -> Coordinate:
        with self._exclusive() as session:
            return self.bot.make_one_move(session)

    def play_bot_turn(self, deadline: Optional[float] = None) -> Optional[SearchResult]:
        """Plans and plays a whole bot turn."""
        index = self._require().state.current_player_index
        result = self.plan_turn(deadline)
        while self.session is not None and self.session.state.current_player_index == index:
            self.make_one_move()
        return result

    @property
    def is_bot_turn(self) -> bool:
        return self.session is not None and self.session.state.current_player.kind == PlayerKind.BOT

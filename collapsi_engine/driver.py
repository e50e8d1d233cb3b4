from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Callable, Optional

from .bot import SearchResult
from .coord import Coordinate
from .engine import Collapsi
from .errors import IllegalMove, InvalidState
from .state import Player, PlayerKind

logger = logging.getLogger(__name__)

# Supplies the next step for a non-bot player (console prompt, network message, ...).
MoveSource = Callable[[Collapsi], Coordinate]

# Pause between single bot steps, relative to the session's simulation speed.
STEP_DELAY_FACTOR = 0.35

# Extra time granted to a bot search on top of its deadline before giving up on it.
DEADLINE_GRACE = 1.0


def wait_for(future: Future, timeout: Optional[float]):
    """Waits for a bot plan; a search that overruns is reported as InvalidState."""
    try:
        return future.result(timeout=timeout)
    except FutureTimeout:
        raise InvalidState("The bot did not finish its turn in time.") from None


class TurnDriver:
    """Turn-dispatch loop. Bot turns are handed to a worker thread and awaited with a
    bounded wait; other turns pull steps from a move source. The driver is the only
    writer while a turn is in progress."""

    def __init__(self, engine: Collapsi, local_source: Optional[MoveSource] = None,
                 remote_source: Optional[MoveSource] = None, bot_timeout: Optional[float] = None,
                 sleep: Callable[[float], None] = time.sleep) -> None:
        self.engine = engine
        self.sources = {PlayerKind.LOCAL: local_source, PlayerKind.REMOTE: remote_source}
        self.bot_timeout = bot_timeout
        self.sleep = sleep
        self._executor: Optional[ThreadPoolExecutor] = None

    def __enter__(self) -> 'TurnDriver':
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def run(self, max_turns: Optional[int] = None) -> Optional[Player]:
        """Plays turns until the game ends (returns the winner) or `max_turns` have been played."""
        turns = 0
        while self.engine.session is not None:
            if max_turns is not None and turns >= max_turns:
                return None
            if not self.play_turn():
                return None
            turns += 1
        return self.engine.winner

    def play_turn(self) -> bool:
        """Plays the current player's whole turn. False if bot play is paused."""
        session = self.engine.session
        if session is None:
            raise InvalidState("No game is currently running.")
        player = session.state.current_player
        if player.kind == PlayerKind.BOT:
            if session.simulation_speed < 0:
                return False
            self._bot_turn(session.simulation_speed)
        else:
            self._sourced_turn(player)
        return True

    def _bot_turn(self, speed: float) -> Optional[SearchResult]:
        index = self.engine.state.current_player_index
        result = wait_for(self.request_plan(), self._wait_limit())
        while self.engine.session is not None and self.engine.state.current_player_index == index:
            if speed > 0:
                self.sleep(speed * STEP_DELAY_FACTOR)
            self.engine.make_one_move()
        if speed > 0:
            self.sleep(speed)
        return result

    def request_plan(self) -> 'Future[Optional[SearchResult]]':
        """Signals the bot that it is its turn; the search runs on the worker thread."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='collapsi-bot')
        deadline = None if self.bot_timeout is None else time.monotonic() + self.bot_timeout
        return self._executor.submit(self.engine.plan_turn, deadline)

    def _wait_limit(self) -> Optional[float]:
        if self.bot_timeout is None:
            return None
        return self.bot_timeout + DEADLINE_GRACE

    def _sourced_turn(self, player: Player) -> None:
        source = self.sources.get(player.kind)
        if source is None:
            raise InvalidState(f"No move source for {player.kind.value} players.")
        index = self.engine.state.current_player_index
        while self.engine.session is not None and self.engine.state.current_player_index == index:
            dest = source(self.engine)
            try:
                self.engine.move_to(dest)
            except IllegalMove as e:
                logger.warning("%s", e)

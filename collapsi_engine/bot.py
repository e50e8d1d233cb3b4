from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .coord import Coordinate
from .errors import InvalidState
from .history import checkpoint
from .paths import Path, apply_path, paths_for_player, possible_moves, possible_paths
from .rules import has_legal_step, move_to
from .state import PlayerKind, Session

logger = logging.getLogger(__name__)

# Assigned when a player wins / loses.
EVAL_WIN = 500.0
EVAL_LOSS = -499.0

# One score per player, indexed like GameState.players (max^n search).
Evaluation = List[float]


@dataclass(frozen=True)
class BotTier:
    smart_chance: float  # probability of running the search instead of playing randomly
    max_depth: Optional[int]  # in whole turns; None = unbounded
    max_duration_ms: int
    per_step: bool = False  # choose each step at random without planning the turn


TIERS: Dict[int, BotTier] = {
    1: BotTier(smart_chance=0.0, max_depth=0, max_duration_ms=0, per_step=True),
    2: BotTier(smart_chance=0.33, max_depth=6, max_duration_ms=400),
    3: BotTier(smart_chance=0.67, max_depth=7, max_duration_ms=600),
    4: BotTier(smart_chance=1.0, max_depth=None, max_duration_ms=3000),
}


@dataclass
class SearchResult:
    """Outcome of an anytime search. `depth_limited` / `timed_out` say whether the
    score is a heuristic guess rather than a proven result."""
    path: Path
    score: float
    evaluation: Evaluation
    depth: int
    depth_limited: bool
    timed_out: bool
    nodes: int = 0

    @property
    def degraded(self) -> bool:
        return self.depth_limited or self.timed_out


@dataclass
class _Budget:
    deadline: float
    nodes: int = 0
    timed_out: bool = False
    depth_limited: bool = False


@dataclass
class Bot:
    """Move selection for bot-controlled players.

    `plan_turn` decides the whole turn up front (on a private copy of the session);
    `make_one_move` then plays it back one step at a time on the real session.
    """
    rng: random.Random = field(default_factory=random.Random)
    tiers: Dict[int, BotTier] = field(default_factory=lambda: dict(TIERS))
    time_scale: float = 1.0
    intended: List[Coordinate] = field(default_factory=list)
    last_result: Optional[SearchResult] = None
    _owner: Optional[int] = field(default=None, init=False, repr=False)  # player index the plan belongs to

    def plan_turn(self, session: Session, deadline: Optional[float] = None) -> Optional[SearchResult]:
        """Precalculates the current bot player's turn.

        `deadline` is an absolute time.monotonic() value; the search stops at the
        earlier of it and the tier's own budget. Returns the search result, or None
        when this turn is played at random.
        """
        state = session.state
        if state.is_game_over():
            raise InvalidState("The game is already over.")
        player = state.current_player
        if player.kind != PlayerKind.BOT:
            raise InvalidState(f"Tried to plan a bot turn for {player.kind.value} player {player.color.name}.")
        tier = self.tiers.get(player.bot_difficulty)
        if tier is None:
            raise InvalidState(f"Unsupported bot difficulty: {player.bot_difficulty}")
        if not has_legal_step(state):
            raise InvalidState(f"Bot {player.color.name} has no legal move.")

        self.intended = []
        self.last_result = None
        self._owner = state.current_player_index
        if tier.per_step:
            return None

        work = session.fork()
        if self.rng.random() < tier.smart_chance:
            budget_ms = tier.max_duration_ms * self.time_scale
            result = self.search(work, tier.max_depth, budget_ms, deadline)
            self.intended = list(result.path)
            self.last_result = result
            return result

        paths = possible_paths(work)
        if not paths:
            raise InvalidState("Possible paths was empty.")
        self.intended = list(self.rng.choice(paths))
        return None

    def make_one_move(self, session: Session) -> Coordinate:
        """Plays the next step of the planned turn and returns its destination."""
        state = session.state
        if self._owner != state.current_player_index or state.is_game_over():
            raise InvalidState("Tried to make a bot move without planning the turn first.")
        if self.intended:
            dest = self.intended.pop(0)
        elif self.tiers[state.current_player.bot_difficulty].per_step:
            moves = possible_moves(session)
            if not moves:
                raise InvalidState("Bot has no legal step.")
            dest = self.rng.choice(moves)
        else:
            raise InvalidState("The planned turn has no steps left.")

        move_to(session, dest)
        after = session.state
        if after.is_game_over() or after.current_player_index != self._owner:
            self.reset()
        return dest

    def reset(self) -> None:
        self.intended = []
        self._owner = None

    def search(self, session: Session, max_depth: Optional[int], budget_ms: float,
               deadline: Optional[float] = None) -> SearchResult:
        """Iterative deepening over whole turns until the tree is exhausted, `max_depth`
        is reached or time runs out. Runs on `session` in place and leaves it as found."""
        end = time.monotonic() + budget_ms / 1000.0
        if deadline is not None:
            end = min(end, deadline)
        mover = session.state.current_player_index

        result: Optional[SearchResult] = None
        depth = 0
        while max_depth is None or depth < max_depth:
            depth += 1
            logger.debug("searching at depth %d", depth)
            budget = _Budget(deadline=end)
            path, evaluation = self._minimax(session, depth, budget)
            if budget.timed_out:
                logger.debug("ran out of time at depth %d after %d nodes", depth, budget.nodes)
                if result is not None:
                    result.timed_out = True
                elif path is not None:
                    result = SearchResult(path, evaluation[mover], evaluation, depth, True, True, budget.nodes)
                break
            result = SearchResult(path, evaluation[mover], evaluation, depth,
                                  budget.depth_limited, False, budget.nodes)
            if not budget.depth_limited:
                logger.debug("fully evaluated all paths at depth %d", depth)
                break

        if result is None:
            # Not even the first turn could be looked at in time.
            paths = possible_paths(session)
            if not paths:
                raise InvalidState("Bot could not find any possible paths.")
            evaluation = self.evaluate(session)
            result = SearchResult(paths[0], evaluation[mover], evaluation, 0, True, True, 0)

        logger.debug("evaluation %.1f (depth %d, degraded=%s)", result.score, result.depth, result.degraded)
        return result

    def _minimax(self, session: Session, depth: int, budget: _Budget) -> Tuple[Optional[Path], Evaluation]:
        """Each level is one player's whole turn; that player keeps the child whose
        evaluation is best for them. Ties go to the first enumerated path."""
        budget.nodes += 1
        state = session.state
        if state.is_game_over():
            return None, self.evaluate(session)
        if time.monotonic() >= budget.deadline:
            budget.timed_out = True
            return None, self.evaluate(session)
        if depth <= 0:
            budget.depth_limited = True
            return None, self.evaluate(session)

        mover = state.current_player_index
        paths = possible_paths(session)
        if not paths:
            raise InvalidState("Bot could not find any possible paths.")

        best_path: Path = paths[0]
        best_eval: Evaluation = []
        for i, path in enumerate(paths):
            with checkpoint(session):
                apply_path(session, path)
                _, evaluation = self._minimax(session, depth - 1, budget)
            if i == 0 or evaluation[mover] > best_eval[mover]:
                best_path, best_eval = path, evaluation
            if budget.timed_out:
                break

        return best_path, best_eval

    def evaluate(self, session: Session) -> Evaluation:
        """Static evaluation: a win or loss overrides everything, otherwise more
        reachable end positions next turn is better."""
        state = session.state
        over = state.is_game_over()
        colors = [(p.color, p.alive) for p in state.players]
        scores: Evaluation = []
        for color, alive in colors:
            if not alive:
                scores.append(EVAL_LOSS)
            elif over:
                scores.append(EVAL_WIN)
            else:
                scores.append(float(len(paths_for_player(session, color))))
        return scores

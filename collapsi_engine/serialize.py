from __future__ import annotations

from typing import Any, Dict, List

from .board import PlayerColor, Tile
from .coord import Coordinate
from .state import GameState, Player, PlayerKind


def _coord_to_json(c: Coordinate) -> List[int]:
    return [int(c.x), int(c.y)]


def state_to_dict(state: GameState) -> Dict[str, Any]:
    """JSON-compatible snapshot carrying everything needed to rebuild the state."""
    n = state.board_size
    tiles = []
    for y in range(n):
        for x in range(n):
            t = state.board[Coordinate(x, y, n)]
            tiles.append({
                "pos": [x, y],
                "steps": t.steps,
                "collapsed": t.collapsed,
                "visited": t.visited,
                "startColor": t.start_color.name if t.start_color else None,
            })
    return {
        "boardSize": n,
        "currentPlayer": state.current_player_index,
        "tiles": tiles,
        "players": [
            {
                "color": p.color.name,
                "kind": p.kind.value,
                "botDifficulty": p.bot_difficulty,
                "position": _coord_to_json(p.position),
                "remainingSteps": p.remaining_steps,
                "visited": [_coord_to_json(c) for c in p.visited],
                "alive": p.alive,
                "rank": p.rank,
            }
            for p in state.players
        ],
    }


def state_from_dict(obj: Dict[str, Any]) -> GameState:
    n = int(obj["boardSize"])

    def coord(pair) -> Coordinate:
        x, y = pair
        return Coordinate(int(x), int(y), n)

    board = {}
    for t in obj["tiles"]:
        pos = coord(t["pos"])
        color = t.get("startColor")
        board[pos] = Tile(
            pos,
            int(t["steps"]),
            PlayerColor[color] if color else None,
            collapsed=bool(t.get("collapsed", False)),
            visited=bool(t.get("visited", False)),
        )
    if len(board) != n * n:
        raise ValueError(f"expected {n * n} tiles, got {len(board)}")

    players = []
    for p in obj["players"]:
        rank = p.get("rank")
        players.append(Player(
            color=PlayerColor[p["color"]],
            position=coord(p["position"]),
            kind=PlayerKind(p.get("kind", PlayerKind.LOCAL.value)),
            bot_difficulty=int(p.get("botDifficulty", 0)),
            remaining_steps=int(p.get("remainingSteps", 0)),
            visited=[coord(c) for c in p.get("visited", [])],
            alive=bool(p.get("alive", True)),
            rank=int(rank) if rank is not None else None,
        ))
    return GameState(players=players, board=board, board_size=n, current_player_index=int(obj.get("currentPlayer", 0)))

from __future__ import annotations

import random
import threading
import uuid
from typing import Any, Dict, List, Optional, Tuple

from flask import Flask, jsonify, request

from collapsi_engine.bot import Bot
from collapsi_engine.config import Settings, configure_logging
from collapsi_engine.coord import Coordinate
from collapsi_engine.engine import Collapsi
from collapsi_engine.errors import CollapsiError, IllegalMove, IncompatibleBoardSize, InvalidSetup
from collapsi_engine.serialize import state_to_dict
from collapsi_engine.state import PlayerKind

SETTINGS = Settings.from_env()

app = Flask(__name__)

# In-process games keyed by id. Each engine enforces its own single-writer rule.
GAMES: Dict[str, Collapsi] = {}
_GAMES_LOCK = threading.Lock()


def _error(message: str, status: int, **extra: Any) -> Tuple[Any, int]:
    body: Dict[str, Any] = {"ok": False, "error": message}
    body.update(extra)
    return jsonify(body), status


def _status_for(e: CollapsiError) -> int:
    if isinstance(e, (IllegalMove, InvalidSetup, IncompatibleBoardSize)):
        return 400
    return 409


def _game_json(game_id: str, engine: Collapsi, **extra: Any) -> Dict[str, Any]:
    session = engine.session
    state = session.state if session is not None else engine.final_state
    body: Dict[str, Any] = {
        "ok": True,
        "gameId": game_id,
        "state": state_to_dict(state) if state is not None else None,
        "phase": state.phase.value if state is not None else None,
        "legalMoves": [[c.x, c.y] for c in engine.legal_steps()] if session is not None else [],
        "canUndo": bool(session and session.undo_stack),
        "canRedo": bool(session and session.redo_stack),
        "winner": engine.winner.color.name if engine.winner is not None else None,
    }
    body.update(extra)
    return body


def _lookup(body: Dict[str, Any]) -> Tuple[Optional[str], Optional[Collapsi]]:
    game_id = body.get("gameId")
    if not isinstance(game_id, str):
        return None, None
    with _GAMES_LOCK:
        return game_id, GAMES.get(game_id)


def _parse_kinds(raw: Any) -> List[PlayerKind]:
    if not isinstance(raw, list):
        raise InvalidSetup("players must be a list of player kinds")
    try:
        return [PlayerKind(str(k).lower()) for k in raw]
    except ValueError as e:
        raise InvalidSetup(str(e)) from None


# ---------- Core Game API ----------

@app.post("/api/new")
def api_new() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    seed = body.get("seed", None)
    rng = random.Random(seed)
    try:
        kinds = _parse_kinds(body.get("players", ["local", "bot"]))
        difficulties = [int(d) for d in body.get("difficulties", [0 if k != PlayerKind.BOT else 2 for k in kinds])]
        size = int(body.get("size", 4))
        engine = Collapsi(bot=Bot(rng=random.Random(rng.random()), time_scale=SETTINGS.bot_time_scale))
        engine.start_new_game(kinds, difficulties, size, rng=rng, simulation_speed=SETTINGS.simulation_speed)
    except (CollapsiError, ValueError, TypeError) as e:
        return _error(f"bad setup: {e}", 400)
    game_id = uuid.uuid4().hex
    with _GAMES_LOCK:
        GAMES[game_id] = engine
    return jsonify(_game_json(game_id, engine))


@app.get("/api/state/<game_id>")
def api_state(game_id: str) -> Any:
    with _GAMES_LOCK:
        engine = GAMES.get(game_id)
    if engine is None:
        return _error("unknown game", 404)
    return jsonify(_game_json(game_id, engine))


@app.post("/api/move")
def api_move() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    game_id, engine = _lookup(body)
    if engine is None:
        return _error("unknown game", 404)
    if engine.session is None:
        return _error("game is over", 409, winner=engine.winner.color.name if engine.winner else None)
    try:
        x, y = body["move"]
        dest = Coordinate(int(x), int(y), engine.state.board_size)
        engine.move_to(dest)
    except CollapsiError as e:
        legal = [[c.x, c.y] for c in engine.legal_steps()] if engine.session is not None else []
        return _error(str(e), _status_for(e), legalMoves=legal)
    except (KeyError, TypeError, ValueError) as e:
        return _error(f"bad move: {e}", 400)
    return jsonify(_game_json(game_id, engine))


def _engine_action(action: str) -> Any:
    body = request.get_json(force=True, silent=True) or {}
    game_id, engine = _lookup(body)
    if engine is None:
        return _error("unknown game", 404)
    try:
        getattr(engine, action)()
    except CollapsiError as e:
        return _error(str(e), _status_for(e))
    return jsonify(_game_json(game_id, engine))


@app.post("/api/undo")
def api_undo() -> Any:
    return _engine_action("undo")


@app.post("/api/redo")
def api_redo() -> Any:
    return _engine_action("redo")


@app.post("/api/end_turn")
def api_end_turn() -> Any:
    return _engine_action("end_turn")


@app.post("/api/bot")
def api_bot() -> Any:
    """Plays the current bot player's whole turn."""
    body = request.get_json(force=True, silent=True) or {}
    game_id, engine = _lookup(body)
    if engine is None:
        return _error("unknown game", 404)
    if not engine.is_bot_turn:
        return _error("it is not a bot's turn", 409)
    try:
        result = engine.play_bot_turn()
    except CollapsiError as e:
        return _error(str(e), _status_for(e))
    search = None
    if result is not None:
        search = {
            "path": [[c.x, c.y] for c in result.path],
            "score": result.score,
            "depth": result.depth,
            "degraded": result.degraded,
            "timedOut": result.timed_out,
        }
    return jsonify(_game_json(game_id, engine, search=search))


@app.delete("/api/game/<game_id>")
def api_delete(game_id: str) -> Any:
    with _GAMES_LOCK:
        engine = GAMES.pop(game_id, None)
    if engine is None:
        return _error("unknown game", 404)
    return jsonify({"ok": True})


# Entrypoint for "python app.py"
if __name__ == "__main__":
    configure_logging(SETTINGS.debug)
    app.run(host="0.0.0.0", port=SETTINGS.port, debug=SETTINGS.flask_debug)

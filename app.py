import random
import sys
import threading
import traceback

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from loguru import logger

import counter
from ai_player import ai_place_piece, apply_ai_move, is_current, request_ai_turn, search_ai_turn
from config import GameConfig
from game import PLACEMENT, PVP, Game

# Load environment variables from .env file
load_dotenv()

config = GameConfig.from_env()

logger.remove()
logger.add(sys.stderr, level=config.log_level)

app = Flask(__name__)

game = Game(
    player_count=2,
    mode=PVP,
    board_size=config.board_size,
    turn_time_limit=config.turn_time_limit,
)
# Commands are applied one at a time; the AI search itself runs unlocked
# on its own board copy.
game_lock = threading.Lock()


def _response(success, message, status=200, **extra):
    payload = {
        "success": success,
        "message": message,
        "state": game.get_state_serializable(),
    }
    payload.update(extra)
    return jsonify(payload), status


def _error(where, e):
    tb = traceback.format_exc()
    logger.error(f"Server error during {where}: {e}")
    return (
        jsonify(
            {
                "success": False,
                "message": f"Server error during {where}: {str(e)}",
                "traceback": tb,
            }
        ),
        500,
    )


def _coords(data):
    return int(data["x"]), int(data["y"])


def _human_command(where, command):
    """Run a player command unless it is an AI seat's turn."""
    try:
        with game_lock:
            if game.is_ai_turn():
                return _response(False, "Waiting for the AI.")
            success, message = command()
        return _response(success, message)
    except (KeyError, TypeError, ValueError):
        return _response(False, "Missing or invalid parameters.", status=400)
    except Exception as e:
        return _error(where, e)


@app.route("/state", methods=["GET"])
def state_route():
    return _response(True, "Current state.")


# --- Match lifecycle ---
@app.route("/start", methods=["POST"])
def start_route():
    try:
        data = request.get_json(silent=True) or {}
        mode = data.get("mode", PVP)
        player_count = data.get("player_count", 2)
        names = data.get("names")

        with game_lock:
            success, message = game.start_game(mode, player_count, names)
        if not success:
            return _response(False, message)

        # best effort; never affects the match
        global_count = counter.increment_match_count(
            config.counter_api_url, config.counter_local_file, config.counter_timeouts
        )
        return _response(True, message, match_count=global_count)
    except Exception as e:
        return _error("start", e)


@app.route("/reset", methods=["POST"])
def reset_route():
    try:
        with game_lock:
            success, message = game.reset()
        return _response(success, message)
    except Exception as e:
        return _error("reset", e)


@app.route("/match_count", methods=["GET"])
def match_count_route():
    try:
        result = counter.get_match_count(
            config.counter_api_url, config.counter_local_file, config.counter_timeouts
        )
        return jsonify({"success": True, "count": result.count, "source": result.source})
    except Exception as e:
        return _error("match_count", e)


# --- Placement Phase ---
@app.route("/place", methods=["POST"])
def place_route():
    data = request.get_json(silent=True) or {}
    return _human_command("place", lambda: game.place_piece(*_coords(data)))


# --- Action Phase ---
@app.route("/select", methods=["POST"])
def select_route():
    data = request.get_json(silent=True) or {}
    return _human_command("select", lambda: game.select_piece(*_coords(data)))


@app.route("/unselect", methods=["POST"])
def unselect_route():
    return _human_command("unselect", game.unselect)


@app.route("/move", methods=["POST"])
def move_route():
    data = request.get_json(silent=True) or {}
    return _human_command("move", lambda: game.move_piece_to(*_coords(data)))


@app.route("/wall", methods=["POST"])
def wall_route():
    data = request.get_json(silent=True) or {}
    return _human_command(
        "wall", lambda: game.place_wall(*_coords(data), str(data["side"]).lower())
    )


@app.route("/tick", methods=["POST"])
def tick_route():
    try:
        data = request.get_json(silent=True) or {}
        seconds = int(data.get("seconds", 1))
        if seconds < 0:
            return _response(False, "Invalid seconds.", status=400)
        with game_lock:
            expired = game.tick(seconds)
        return _response(True, "Turn timed out." if expired else "Tick.", expired=expired)
    except (TypeError, ValueError):
        return _response(False, "Invalid seconds.", status=400)
    except Exception as e:
        return _error("tick", e)


@app.route("/ai_move", methods=["POST"])
def ai_move_route():
    """Let the AI act for the current seat, if that seat is AI-controlled."""
    try:
        with game_lock:
            if game.phase == PLACEMENT:
                success, message = ai_place_piece(game)
                return _response(success, message)
            turn = request_ai_turn(game)
            if turn is None:
                return _response(False, "Not AI's turn", status=400)
            # unlocked search draws from its own stream, seeded from game.rng
            search_rng = random.Random(game.rng.random())

        try:
            move = search_ai_turn(
                turn,
                rng=search_rng,
                aggression=config.ai_aggression,
                random_bias=config.ai_random_bias,
            )
        except Exception:
            logger.exception(f"AI: search crashed for {turn.player}")
            with game_lock:
                if is_current(game, turn):
                    game.force_end_turn()
            return _response(False, "AI failed; turn forced to end.")

        with game_lock:
            success, message = apply_ai_move(game, turn, move)
        return _response(success, message)
    except Exception as e:
        return _error("ai_move", e)


if __name__ == "__main__":
    app.run(debug=True)

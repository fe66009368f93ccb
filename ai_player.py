"""
AI Player for Stitched Territory

Exhaustive one-ply search over every (piece, destination, wall side) triple
of the AI's turn. Each candidate is applied to a single working copy of the
board, scored, and undone again before the next one is tried.
"""

import random
from typing import List, NamedTuple, Optional, Tuple

from loguru import logger

from board import SIDES
from game import ACTION_SELECT, PLACEMENT
from territory import reachable_area, valid_moves

AGGRESSION_FACTOR = 1.2
RANDOM_BIAS = 0.5

Coord = Tuple[int, int]


class AiMove(NamedTuple):
    origin: Coord
    destination: Coord
    wall_side: str
    score: float


class AiTurnRequest(NamedTuple):
    """Everything the search needs, captured before it runs."""

    match_id: int
    turn_number: int
    player: str
    opponents: List[str]
    board: object


# ==============================================================
#   HEURISTIC
# ==============================================================

def evaluate_board_state(board, ai_player, opponents, aggression=AGGRESSION_FACTOR):
    """
    Own reachable area minus the opponents' combined reachable area, the
    latter weighted by `aggression` so blocking counts slightly more than
    expanding.
    """
    ai_reach = len(reachable_area(board, ai_player))
    op_reach = sum(len(reachable_area(board, op)) for op in opponents)
    return ai_reach - op_reach * aggression


# ==============================================================
#   SEARCH
# ==============================================================

def calculate_best_move(
    original_board,
    ai_player,
    opponents,
    rng=None,
    aggression=AGGRESSION_FACTOR,
    random_bias=RANDOM_BIAS,
) -> Optional[AiMove]:
    """
    Return the highest scoring move for `ai_player`, or None when no piece
    has any destination with an open wall side.

    A uniform perturbation in [0, random_bias) is added to every score so
    equal candidates are broken at random.
    """
    if isinstance(opponents, str):
        opponents = [opponents]
    rng = rng or random.Random()

    board = original_board.clone()
    best_move = None
    max_score = float("-inf")
    evaluations = 0

    for piece in board.pieces_of(ai_player):
        px, py = piece
        for move in valid_moves(board, piece):
            mx, my = move

            # do move
            board.set_occupant(px, py, None)
            board.set_occupant(mx, my, ai_player)

            for side in SIDES:
                if board.has_wall(mx, my, side):
                    continue

                board.place_wall(mx, my, side, ai_player)

                score = evaluate_board_state(board, ai_player, opponents, aggression)
                evaluations += 1

                perturbed = score + rng.random() * random_bias
                if perturbed > max_score:
                    max_score = perturbed
                    best_move = AiMove(piece, move, side, perturbed)

                board.remove_wall(mx, my, side)

            # undo move
            board.set_occupant(mx, my, None)
            board.set_occupant(px, py, ai_player)

    if best_move is None:
        logger.info(f"AI: {ai_player} has no legal move ({evaluations} evaluations)")
    else:
        logger.info(
            f"AI: {ai_player} evaluated {evaluations} states, best {best_move.origin}"
            f" -> {best_move.destination} wall={best_move.wall_side} score={max_score:.2f}"
        )
    return best_move


# ==============================================================
#   DRIVING A LIVE GAME
# ==============================================================

def ai_place_piece(game):
    """Place the AI's next piece on a random empty cell."""
    if game.phase != PLACEMENT or not game.is_ai_turn():
        return False, "Not the AI's placement."

    empties = game.board.empty_cells()
    if not empties:
        return False, "No empty cell left."

    x, y = game.rng.choice(empties)
    logger.info(f"AI: {game.current_player} places at ({x},{y})")
    return game.place_piece(x, y)


def request_ai_turn(game) -> Optional[AiTurnRequest]:
    if game.phase != ACTION_SELECT or not game.is_ai_turn():
        return None
    player = game.current_player
    return AiTurnRequest(
        match_id=game.match_id,
        turn_number=game.turn_number,
        player=player,
        opponents=game.opponents_of(player),
        board=game.board.clone(),
    )


def search_ai_turn(request, rng=None, aggression=AGGRESSION_FACTOR, random_bias=RANDOM_BIAS):
    """Run the search on the request's private board. Safe to call off-thread."""
    return calculate_best_move(
        request.board,
        request.player,
        request.opponents,
        rng=rng,
        aggression=aggression,
        random_bias=random_bias,
    )


def is_current(game, request):
    return (
        game.phase == ACTION_SELECT
        and game.match_id == request.match_id
        and game.turn_number == request.turn_number
        and game.current_player == request.player
    )


def apply_ai_move(game, request, move):
    """
    Apply a search result through the ordinary commands. Results for a turn
    that is no longer in progress are discarded.
    """
    if not is_current(game, request):
        logger.info(f"AI: discarding stale move for {request.player}")
        return False, "Stale AI move discarded."

    if move is None:
        game.force_end_turn()
        return True, "AI has no legal move; turn passed."

    steps = (
        lambda: game.select_piece(*move.origin),
        lambda: game.move_piece_to(*move.destination),
        lambda: game.place_wall(*move.destination, move.wall_side),
    )
    for step in steps:
        success, message = step()
        if not success:
            logger.error(f"AI: chosen move rejected ({message}), forcing end of turn")
            game.force_end_turn()
            return False, f"AI move rejected: {message}"

    return True, "AI moved."


def play_ai_turn(game, aggression=AGGRESSION_FACTOR, random_bias=RANDOM_BIAS):
    """
    Take one full AI action on `game`: a placement during setup, otherwise
    search and apply a move. Any failure forces the turn to end so the match
    never stalls.
    """
    if game.phase == PLACEMENT:
        return ai_place_piece(game)

    request = request_ai_turn(game)
    if request is None:
        return False, "Not the AI's turn."

    try:
        move = search_ai_turn(request, rng=game.rng, aggression=aggression, random_bias=random_bias)
    except Exception:
        logger.exception(f"AI: search crashed for {request.player}")
        if is_current(game, request):
            game.force_end_turn()
        return False, "AI failed; turn forced to end."

    return apply_ai_move(game, request, move)

"""Turn countdown and the automatic wall on timeout"""

import random

from board import BLUE, RED, SIDES
from conftest import place_all
from game import ACTION_SELECT, PLACEMENT, Game
from turn_timer import TurnTimer


def owned_walls(board, player):
    return [
        (cell.coord, side)
        for cell in board.cells()
        for side in SIDES
        if cell.walls[side] == player
    ]


# ==============================================================
#   TurnTimer
# ==============================================================

def test_timer_expires_once():
    calls = []
    timer = TurnTimer(limit=3, on_expire=lambda: calls.append("expired"))

    assert not timer.tick()
    timer.reset()
    assert not timer.tick()
    assert not timer.tick()
    assert timer.tick()
    assert timer.remaining == 0
    assert not timer.tick()
    assert calls == ["expired"]


def test_timer_reset_and_stop():
    timer = TurnTimer(limit=10)
    timer.reset()
    timer.tick(4)
    assert timer.remaining == 6
    timer.reset()
    assert timer.remaining == 10
    timer.stop()
    assert not timer.tick(20)
    assert timer.remaining == 10


def test_big_tick_clamps_at_zero():
    timer = TurnTimer(limit=5)
    timer.reset()
    assert timer.tick(50)
    assert timer.remaining == 0


def test_negative_tick_cannot_extend_the_turn():
    timer = TurnTimer(limit=90)
    timer.reset()
    timer.tick(10)
    assert not timer.tick(-500)
    assert not timer.tick(0)
    assert timer.remaining == 80


# ==============================================================
#   Game timeout fallback
# ==============================================================

def test_no_countdown_during_placement(game):
    assert not game.tick(1000)
    assert game.phase == PLACEMENT
    assert game.turn_timer == game.timer.limit


def test_timeout_walls_the_moved_piece(placed_game):
    placed_game.select_piece(0, 0)
    placed_game.move_piece_to(1, 0)

    assert placed_game.tick(placed_game.timer.limit)

    walls = owned_walls(placed_game.board, RED)
    assert walls
    assert all(coord in ((1, 0), (0, 0), (2, 0), (1, 1)) for coord, _ in walls)
    assert any(coord == (1, 0) for coord, _ in walls)
    assert placed_game.current_player == BLUE
    assert placed_game.phase == ACTION_SELECT
    assert placed_game.turn_timer == placed_game.timer.limit


def test_timeout_before_moving_walls_a_random_piece(placed_game):
    placed_game.tick(placed_game.timer.limit - 1)
    assert placed_game.current_player == RED

    assert placed_game.tick()
    walls = owned_walls(placed_game.board, RED)
    pieces = {(0, 0), (2, 5)}
    assert any(coord in pieces for coord, _ in walls)
    assert placed_game.current_player == BLUE


def test_timeout_on_fully_walled_piece_is_tolerated(placed_game):
    for side in SIDES:
        placed_game.board.place_wall(0, 0, side, BLUE)
    placed_game.select_piece(0, 0)
    placed_game.move_piece_to(0, 0)
    before = placed_game.board.clone()

    assert placed_game.tick(placed_game.timer.limit)

    assert placed_game.board == before
    assert placed_game.current_player == BLUE
    assert placed_game.phase == ACTION_SELECT


def test_timeout_is_deterministic_with_seeded_rng():
    walls = []
    for _ in range(2):
        game = Game(rng=random.Random(99), event_sink=None)
        place_all(game, [(0, 0), (6, 6), (3, 3), (6, 5)])
        game.tick(game.timer.limit)
        walls.append(owned_walls(game.board, RED))
    assert walls[0] == walls[1]
    assert walls[0]

#!/usr/bin/env python3
"""Test AI setup phase"""

import random

from ai_player import ai_place_piece, play_ai_turn
from board import BLUE, GREEN, RED
from game import ACTION_SELECT, PLACEMENT, PVAI, PVP, Game


def new_ai_game(players=2, seed=11):
    game = Game(mode=PVP, rng=random.Random(seed), event_sink=None)
    game.start_game(PVAI, players, ["Human"])
    return game


def place_human(game, *candidates):
    """Place on the first candidate cell the AI has not already taken."""
    x, y = next(c for c in candidates if game.board.occupant(*c) is None)
    assert game.place_piece(x, y)[0]


def test_ai_places_its_own_pieces():
    game = new_ai_game()
    assert game.ai_players == [BLUE]

    # Human places first; the AI may not place for the human
    assert not ai_place_piece(game)[0]
    assert game.place_piece(4, 3)[0]
    assert game.current_player == BLUE

    success, _ = ai_place_piece(game)
    assert success
    assert len(game.board.pieces_of(BLUE)) == 1
    assert game.current_player == RED


def test_full_setup_against_ai_reaches_action_phase():
    game = new_ai_game()
    game.place_piece(4, 3)
    play_ai_turn(game)
    place_human(game, (1, 1), (2, 2))
    play_ai_turn(game)

    assert game.phase == ACTION_SELECT
    assert game.current_player == RED
    assert len(game.board.pieces_of(RED)) == 2
    assert len(game.board.pieces_of(BLUE)) == 2


def test_seeded_placement_is_repeatable():
    spots = []
    for _ in range(2):
        game = new_ai_game(seed=5)
        game.place_piece(0, 0)
        ai_place_piece(game)
        spots.append(game.board.pieces_of(BLUE))
    assert spots[0] == spots[1]


def test_three_player_ai_setup():
    game = new_ai_game(players=3)
    assert game.ai_players == [BLUE, GREEN]
    assert game.placement_queue == [RED, BLUE, GREEN, RED, BLUE, GREEN]

    game.place_piece(3, 3)
    while game.phase == PLACEMENT and game.is_ai_turn():
        assert play_ai_turn(game)[0]
    assert game.current_player == RED
    assert game.phase == PLACEMENT

    place_human(game, (5, 5), (5, 6))
    while game.phase == PLACEMENT and game.is_ai_turn():
        play_ai_turn(game)
    assert game.phase == ACTION_SELECT
    assert len(game.board.pieces_of(GREEN)) == 2

"""
Shared pytest fixtures.

Game fixtures are function-scoped and seeded so every test sees the same
random choices.
"""

import random

import pytest

from board import BLUE, RED
from game import PVP, Game


def place_all(game, coords):
    """Feed placement commands in queue order."""
    for x, y in coords:
        success, message = game.place_piece(x, y)
        assert success, message


@pytest.fixture
def events():
    recorded = []

    def sink(name, **params):
        recorded.append((name, params))

    sink.recorded = recorded
    return sink


@pytest.fixture
def game(events):
    return Game(player_count=2, mode=PVP, rng=random.Random(1234), event_sink=events)


@pytest.fixture
def placed_game(game):
    # queue is RED, BLUE, RED, BLUE
    place_all(game, [(0, 0), (6, 6), (2, 5), (6, 5)])
    assert game.current_player == RED
    assert game.board.pieces_of(BLUE) == [(6, 5), (6, 6)]
    return game

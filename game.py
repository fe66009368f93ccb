# ==============================================================
# game.py - Turn state machine, scoring and winner resolution
# ==============================================================

import random

from loguru import logger

from analytics import log_event
from board import BOARD_SIZE, PLAYERS, SIDES, Board
from territory import (
    calculate_scores,
    is_game_over,
    largest_territory,
    valid_moves,
)
from turn_timer import TURN_TIME_LIMIT, TurnTimer

PLACEMENT = "placement"
ACTION_SELECT = "action_select"
ACTION_MOVE = "action_move"
ACTION_WALL = "action_wall"
GAME_OVER = "game_over"

PVP = "PVP"
PVAI = "PVAI"
MODES = (PVP, PVAI)

DRAW = "draw"

MIN_PLAYERS = 2
MAX_PLAYERS = len(PLAYERS)
PIECES_PER_PLAYER = 2


def build_placement_queue(players, pieces_per_player=PIECES_PER_PLAYER):
    """Round-robin placement obligations: each player once per round."""
    queue = []
    for _ in range(pieces_per_player):
        queue.extend(players)
    return queue


def default_names(players):
    return {player: f"Player {i + 1:02d}" for i, player in enumerate(players)}


def resolve_winner(scores, largest_of):
    """
    Pick the winner from final reachable-area scores.

    Highest score wins outright. Players tied on the top score are compared
    on `largest_of(player)` (largest contiguous territory); a tie at the top
    of that comparison, between any number of players, is a draw.
    """
    if not scores:
        return DRAW

    max_score = max(scores.values())
    candidates = [player for player, score in scores.items() if score == max_score]
    if len(candidates) == 1:
        return candidates[0]

    largest = {player: largest_of(player) for player in candidates}
    best = max(largest.values())
    leaders = [player for player in candidates if largest[player] == best]
    if len(leaders) == 1:
        return leaders[0]
    return DRAW


# ==============================================================
#   GAME
# ==============================================================

class Game:
    """
    One live match. Every command returns (success, message); a rejected
    command leaves the state untouched.
    """

    def __init__(
        self,
        player_count=2,
        mode=PVP,
        names=None,
        board_size=BOARD_SIZE,
        turn_time_limit=TURN_TIME_LIMIT,
        rng=None,
        event_sink=log_event,
    ):
        if mode not in MODES:
            raise ValueError(f"Unknown game mode {mode!r}")
        if not MIN_PLAYERS <= player_count <= MAX_PLAYERS:
            raise ValueError(f"Player count must be {MIN_PLAYERS}-{MAX_PLAYERS}, got {player_count}")

        self.board_size = board_size
        self.rng = rng or random.Random()
        self.event_sink = event_sink
        self.timer = TurnTimer(turn_time_limit, on_expire=self._handle_timeout)
        self.match_id = 0

        self._configure(mode, player_count, names)
        self._new_match()

    # --------------------------------------------------------------
    #   Setup
    # --------------------------------------------------------------

    def _configure(self, mode, player_count, names):
        self.mode = mode
        self.active_players = list(PLAYERS[:player_count])
        self.names = default_names(self.active_players)
        if isinstance(names, dict):
            self.names.update({p: n for p, n in names.items() if p in self.active_players and n})
        elif names:
            for player, name in zip(self.active_players, names):
                if name:
                    self.names[player] = name
        # PVAI: the first seat is human, everyone else is driven by the AI
        self.ai_players = list(self.active_players[1:]) if mode == PVAI else []

    def _new_match(self):
        self.match_id += 1
        self.board = Board(self.board_size)
        self.phase = PLACEMENT
        self.placement_queue = build_placement_queue(self.active_players)
        self.current_player = self.placement_queue[0]
        self.scores = {player: 0 for player in self.active_players}
        self.winner = None
        self.turn_number = 0
        self._clear_selection()
        self.timer.stop()
        self.timer.remaining = self.timer.limit

    def _clear_selection(self):
        self.selected_piece = None
        self.valid_moves = []
        self.moved_to = None

    def start_game(self, mode, player_count, names=None):
        if mode not in MODES:
            return self._reject(f"Unknown game mode {mode!r}.")
        try:
            player_count = int(player_count)
        except (TypeError, ValueError):
            return self._reject(f"Invalid player count {player_count!r}.")
        if not MIN_PLAYERS <= player_count <= MAX_PLAYERS:
            return self._reject(f"Player count must be {MIN_PLAYERS}-{MAX_PLAYERS}.")

        self._configure(mode, player_count, names)
        self._new_match()
        logger.info(f"Match {self.match_id} started: mode={mode}, players={self.active_players}")
        self._emit("game_start", mode=mode, players=len(self.active_players), **{
            f"name_{player.lower()}": self.names[player] for player in self.active_players
        })
        return True, "Game started."

    def reset(self):
        self._new_match()
        logger.info(f"Match {self.match_id} reset")
        self._emit("game_reset")
        return True, "Game reset."

    # --------------------------------------------------------------
    #   Queries
    # --------------------------------------------------------------

    @property
    def turn_timer(self):
        return self.timer.remaining

    def is_ai_turn(self):
        return self.phase != GAME_OVER and self.current_player in self.ai_players

    def opponents_of(self, player):
        return [p for p in self.active_players if p != player]

    # --------------------------------------------------------------
    #   Commands
    # --------------------------------------------------------------

    def place_piece(self, x, y):
        if self.phase != PLACEMENT:
            return self._reject("Pieces can only be placed during placement.")
        if not self.board.in_bounds(x, y):
            return self._reject("Out of bounds.")
        if self.board.occupant(x, y) is not None:
            return self._reject("Cell already occupied.")

        player = self.placement_queue.pop(0)
        self.board.set_occupant(x, y, player)
        logger.debug(f"{player} placed a piece at ({x},{y})")

        if self.placement_queue:
            self.current_player = self.placement_queue[0]
            return True, "Piece placed."

        self.current_player = self.active_players[0]
        self.phase = ACTION_SELECT
        self._start_turn()
        logger.info("Placement complete, action phase begins")
        return True, "Placement complete."

    def select_piece(self, x, y):
        if self.phase not in (ACTION_SELECT, ACTION_MOVE):
            return self._reject("Cannot select a piece now.")
        if not self.board.in_bounds(x, y):
            return self._reject("Out of bounds.")
        if self.board.occupant(x, y) != self.current_player:
            return self._reject("That is not your piece.")

        self.selected_piece = (x, y)
        self.valid_moves = valid_moves(self.board, (x, y))
        self.phase = ACTION_MOVE
        return True, "Piece selected."

    def unselect(self):
        if self.phase != ACTION_MOVE:
            return self._reject("Nothing selected.")
        self._clear_selection()
        self.phase = ACTION_SELECT
        return True, "Selection cleared."

    def move_piece_to(self, x, y):
        if self.phase != ACTION_MOVE or self.selected_piece is None:
            return self._reject("Select a piece first.")
        if (x, y) not in self.valid_moves:
            return self._reject("Illegal destination.")

        sx, sy = self.selected_piece
        self.board.set_occupant(sx, sy, None)
        self.board.set_occupant(x, y, self.current_player)
        self.moved_to = (x, y)
        self.phase = ACTION_WALL
        logger.debug(f"{self.current_player} moved ({sx},{sy}) -> ({x},{y})")
        return True, "Piece moved."

    def place_wall(self, x, y, side):
        if self.phase != ACTION_WALL or self.moved_to is None:
            return self._reject("No wall owed right now.")
        if (x, y) != self.moved_to:
            return self._reject("Walls go on the piece that just moved.")
        if side not in SIDES:
            return self._reject(f"Unknown side {side!r}.")
        if self.board.has_wall(x, y, side):
            return self._reject("That side is already walled.")

        self.board.place_wall(x, y, side, self.current_player)
        logger.debug(f"{self.current_player} walled {side} of ({x},{y})")
        self._end_turn()
        return True, "Wall placed."

    def force_end_turn(self):
        """End the current turn without a wall (stuck or failed AI)."""
        if self.phase in (PLACEMENT, GAME_OVER):
            return self._reject("No turn in progress.")
        if self.phase == ACTION_WALL:
            logger.warning(f"{self.current_player} turn ended without a wall")
        self._end_turn()
        return True, "Turn ended."

    def tick(self, seconds=1):
        """External clock hook; returns True when this tick expired the turn."""
        if self.phase in (PLACEMENT, GAME_OVER):
            return False
        return self.timer.tick(seconds)

    # --------------------------------------------------------------
    #   Turn flow
    # --------------------------------------------------------------

    def _start_turn(self):
        self.turn_number += 1
        self._clear_selection()
        self.timer.reset()

    def _end_turn(self):
        if is_game_over(self.board, self.active_players):
            self._finish()
            return

        index = self.active_players.index(self.current_player)
        self.current_player = self.active_players[(index + 1) % len(self.active_players)]
        self.phase = ACTION_SELECT
        self._start_turn()

    def _finish(self, reason="separated"):
        self.scores = calculate_scores(self.board, self.active_players)
        self.winner = resolve_winner(
            self.scores, lambda player: largest_territory(self.board, player)
        )
        self.phase = GAME_OVER
        self.timer.stop()
        self._clear_selection()
        logger.info(f"Game over: winner={self.winner}, scores={self.scores}")
        self._emit(
            "game_complete",
            winner=self.winner,
            mode=self.mode,
            reason=reason,
            **{f"score_{player.lower()}": score for player, score in self.scores.items()},
        )

    def _handle_timeout(self):
        if self.phase in (PLACEMENT, GAME_OVER):
            return

        target = None
        if self.phase == ACTION_WALL and self.moved_to is not None:
            target = self.moved_to
        else:
            pieces = self.board.pieces_of(self.current_player)
            if pieces:
                target = self.rng.choice(pieces)

        if target is not None:
            x, y = target
            sides = list(SIDES)
            self.rng.shuffle(sides)
            for side in sides:
                if not self.board.has_wall(x, y, side):
                    self.board.place_wall(x, y, side, self.current_player)
                    logger.info(f"Timeout: auto wall {side} of ({x},{y}) for {self.current_player}")
                    break
            else:
                logger.info(f"Timeout: ({x},{y}) fully walled, no wall placed")

        self._end_turn()

    # --------------------------------------------------------------
    #   Helpers
    # --------------------------------------------------------------

    def _reject(self, message):
        logger.debug(f"Rejected command in {self.phase}: {message}")
        return False, message

    def _emit(self, name, **params):
        if self.event_sink is None:
            return
        try:
            self.event_sink(name, **params)
        except Exception as e:
            logger.warning(f"Event sink failed for {name}: {e}")

    def get_state_serializable(self):
        return {
            "board": self.board.to_list(),
            "board_size": self.board.size,
            "current_player": self.current_player,
            "active_players": list(self.active_players),
            "phase": self.phase,
            "scores": dict(self.scores),
            "placement_queue": list(self.placement_queue),
            "selected_piece": list(self.selected_piece) if self.selected_piece else None,
            "valid_moves": [list(m) for m in self.valid_moves],
            "moved_to": list(self.moved_to) if self.moved_to else None,
            "turn_timer": self.turn_timer,
            "winner": self.winner,
            "mode": self.mode,
            "names": dict(self.names),
            "ai_players": list(self.ai_players),
            "turn_number": self.turn_number,
            "match_id": self.match_id,
        }

# ==============================================================
# territory.py - Flood fills over the walled grid
# ==============================================================

from collections import deque

from board import SIDES, SIDE_OFFSETS

MAX_MOVE_STEPS = 2


def _open_neighbors(board, x, y):
    """Yield in-bounds neighbours of (x, y) not separated from it by a wall."""
    cell = board.rows[y][x]
    for side in SIDES:
        if cell.walls[side] is not None:
            continue
        dx, dy = SIDE_OFFSETS[side]
        nx, ny = x + dx, y + dy
        if 0 <= nx < board.size and 0 <= ny < board.size:
            yield nx, ny


def is_blocked(board, a, b):
    """
    True unless `a` and `b` are orthogonally adjacent cells whose shared edge
    has no wall. Non-adjacent or off-board pairs are always blocked.
    """
    ax, ay = a
    bx, by = b
    if not (board.in_bounds(ax, ay) and board.in_bounds(bx, by)):
        return True
    for side, (dx, dy) in SIDE_OFFSETS.items():
        if (ax + dx, ay + dy) == (bx, by):
            return board.rows[ay][ax].walls[side] is not None
    return True


# ==============================================================
#   MOVE GENERATION
# ==============================================================

def valid_moves(board, origin, max_steps=MAX_MOVE_STEPS):
    """
    Every destination reachable from `origin` in 0..max_steps orthogonal
    steps through empty, unwalled cells. The origin itself (a pass) is
    always included and listed first.
    """
    ox, oy = origin
    board.cell(ox, oy)  # raises OutOfBoundsError

    moves = [(ox, oy)]
    visited = {(ox, oy)}
    queue = deque([((ox, oy), 0)])

    while queue:
        (x, y), dist = queue.popleft()
        if dist >= max_steps:
            continue
        for nx, ny in _open_neighbors(board, x, y):
            if (nx, ny) in visited:
                continue
            if board.rows[ny][nx].occupant is not None:
                continue
            visited.add((nx, ny))
            moves.append((nx, ny))
            queue.append(((nx, ny), dist + 1))

    return moves


# ==============================================================
#   TERRITORY
# ==============================================================

def reachable_area(board, player):
    """
    Cells reachable from any of `player`'s pieces through unwalled empty
    cells. The pieces themselves are included; occupied cells beyond the
    seeds are never entered.
    """
    seeds = board.pieces_of(player)
    visited = set(seeds)
    queue = deque(seeds)

    while queue:
        x, y = queue.popleft()
        for nx, ny in _open_neighbors(board, x, y):
            if (nx, ny) in visited:
                continue
            if board.rows[ny][nx].occupant is not None:
                continue
            visited.add((nx, ny))
            queue.append((nx, ny))

    return visited


def largest_territory(board, player):
    """
    Size of the largest contiguous region owned by `player`.

    A region is one of the player's pieces plus the empty cells its flood
    fill reaches. Cells are visited at most once across all regions, so two
    pieces sharing empty space are never counted twice.
    """
    best = 0
    visited_global = set()

    for seed in board.pieces_of(player):
        if seed in visited_global:
            continue

        visited_global.add(seed)
        queue = deque([seed])
        size = 1

        while queue:
            x, y = queue.popleft()
            for nx, ny in _open_neighbors(board, x, y):
                if (nx, ny) in visited_global:
                    continue
                if board.rows[ny][nx].occupant is not None:
                    continue
                visited_global.add((nx, ny))
                queue.append((nx, ny))
                size += 1

        best = max(best, size)

    return best


def calculate_scores(board, players):
    return {player: len(reachable_area(board, player)) for player in players}


# ==============================================================
#   END CONDITION
# ==============================================================

def _touches_rival(board, player, rivals):
    """BFS from `player`'s pieces through empty cells; stop at the first rival piece."""
    seeds = board.pieces_of(player)
    visited = set(seeds)
    queue = deque(seeds)

    while queue:
        x, y = queue.popleft()
        for nx, ny in _open_neighbors(board, x, y):
            occupant = board.rows[ny][nx].occupant
            if occupant in rivals:
                return True
            if occupant is None and (nx, ny) not in visited:
                visited.add((nx, ny))
                queue.append((nx, ny))

    return False


def is_game_over(board, active_players):
    """
    True once every pair of active players is separated: no player's pieces
    can reach another player's piece through unwalled empty cells.
    """
    players = list(active_players)
    for i, player in enumerate(players[:-1]):
        # separation is symmetric, each pair checked once
        rivals = set(players[i + 1:])
        if _touches_rival(board, player, rivals):
            return False
    return True

# ==============================================================
# board.py - Grid of cells with occupants and shared wall edges
# ==============================================================

BOARD_SIZE = 7

RED = "RED"
BLUE = "BLUE"
GREEN = "GREEN"
YELLOW = "YELLOW"

# Turn order for every match; a game uses the first N of these.
PLAYERS = (RED, BLUE, GREEN, YELLOW)

TOP = "top"
RIGHT = "right"
BOTTOM = "bottom"
LEFT = "left"

SIDES = (TOP, RIGHT, BOTTOM, LEFT)

# side -> (dx, dy) step across that edge
SIDE_OFFSETS = {
    TOP: (0, -1),
    RIGHT: (1, 0),
    BOTTOM: (0, 1),
    LEFT: (-1, 0),
}

OPPOSITE_SIDE = {
    TOP: BOTTOM,
    RIGHT: LEFT,
    BOTTOM: TOP,
    LEFT: RIGHT,
}


class OutOfBoundsError(IndexError):
    """Raised when a coordinate falls outside the board."""

    def __init__(self, x, y, size):
        super().__init__(f"({x},{y}) is outside a {size}x{size} board")
        self.x = x
        self.y = y
        self.size = size


# ==============================================================
#   CELL
# ==============================================================

class Cell:
    __slots__ = ("x", "y", "occupant", "walls")

    def __init__(self, x, y):
        self.x = x
        self.y = y
        self.occupant = None
        self.walls = {side: None for side in SIDES}

    @property
    def coord(self):
        return (self.x, self.y)

    def open_sides(self):
        return [side for side in SIDES if self.walls[side] is None]

    def to_dict(self):
        return {
            "x": self.x,
            "y": self.y,
            "occupant": self.occupant,
            "walls": dict(self.walls),
        }

    def __eq__(self, other):
        if not isinstance(other, Cell):
            return NotImplemented
        return (
            self.coord == other.coord
            and self.occupant == other.occupant
            and self.walls == other.walls
        )

    def __repr__(self):
        return f"Cell({self.x}, {self.y}, occupant={self.occupant!r})"


# ==============================================================
#   BOARD
# ==============================================================

class Board:
    """
    Square grid of cells indexed as rows[y][x].

    A wall between two cells is stored on both of them (mirrored). Sides that
    face the board edge may still hold a wall record, but the edge itself is
    always impassable.
    """

    def __init__(self, size=BOARD_SIZE):
        if size < 1:
            raise ValueError(f"Board size must be positive, got {size}")
        self.size = size
        self.rows = [[Cell(x, y) for x in range(size)] for y in range(size)]

    def in_bounds(self, x, y):
        return 0 <= x < self.size and 0 <= y < self.size

    def cell(self, x, y):
        if not self.in_bounds(x, y):
            raise OutOfBoundsError(x, y, self.size)
        return self.rows[y][x]

    def cells(self):
        for row in self.rows:
            yield from row

    def neighbor(self, x, y, side):
        """Coordinate across `side` of (x, y), or None at the board edge."""
        dx, dy = SIDE_OFFSETS[_check_side(side)]
        nx, ny = x + dx, y + dy
        if not self.in_bounds(nx, ny):
            return None
        return (nx, ny)

    # --------------------------------------------------------------
    #   Occupants
    # --------------------------------------------------------------

    def set_occupant(self, x, y, player):
        self.cell(x, y).occupant = player

    def occupant(self, x, y):
        return self.cell(x, y).occupant

    def pieces_of(self, player):
        return [cell.coord for cell in self.cells() if cell.occupant == player]

    def empty_cells(self):
        return [cell.coord for cell in self.cells() if cell.occupant is None]

    # --------------------------------------------------------------
    #   Walls
    # --------------------------------------------------------------

    def place_wall(self, x, y, side, player):
        """
        Record `player` as owner of `side` of (x, y) and mirror it onto the
        neighbouring cell. Always overwrites; callers check the side is open.
        """
        cell = self.cell(x, y)
        cell.walls[_check_side(side)] = player
        across = self.neighbor(x, y, side)
        if across is not None:
            nx, ny = across
            self.rows[ny][nx].walls[OPPOSITE_SIDE[side]] = player

    def remove_wall(self, x, y, side):
        self.place_wall(x, y, side, None)

    def wall(self, x, y, side):
        return self.cell(x, y).walls[_check_side(side)]

    def has_wall(self, x, y, side):
        return self.wall(x, y, side) is not None

    # --------------------------------------------------------------
    #   Copies and snapshots
    # --------------------------------------------------------------

    def clone(self):
        copy = Board.__new__(Board)
        copy.size = self.size
        copy.rows = []
        for row in self.rows:
            new_row = []
            for cell in row:
                c = Cell(cell.x, cell.y)
                c.occupant = cell.occupant
                c.walls = dict(cell.walls)
                new_row.append(c)
            copy.rows.append(new_row)
        return copy

    def to_list(self):
        return [[cell.to_dict() for cell in row] for row in self.rows]

    def __eq__(self, other):
        if not isinstance(other, Board):
            return NotImplemented
        return self.size == other.size and self.rows == other.rows

    def __repr__(self):
        return f"Board(size={self.size})"


def _check_side(side):
    if side not in SIDE_OFFSETS:
        raise ValueError(f"Unknown wall side {side!r}")
    return side

"""
3x3 board value and the rules on top of it.

Cells are indexed 0-8 row-major (index = row*3 + col). A Board is never
mutated: place() hands back a new one, so search can branch freely off the
live game board.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .errors import IllegalMoveError, ProtocolError

BOARD_SIZE = 3
CELL_COUNT = BOARD_SIZE * BOARD_SIZE

# check order matters: first winning line decides
COLUMNS = ((0, 3, 6), (1, 4, 7), (2, 5, 8))
ROWS = ((0, 1, 2), (3, 4, 5), (6, 7, 8))
DIAGONALS = ((0, 4, 8), (2, 4, 6))
WIN_LINES = COLUMNS + ROWS + DIAGONALS


class Cell(Enum):
    """one grid square; value is its wire character"""
    EMPTY = "-"
    PLAYER = "1"
    COMPUTER = "2"


class Turn(Enum):
    """whose move is pending"""
    NONE = 0
    PLAYER = 1
    COMPUTER = -1

    def opponent(self) -> "Turn":
        if self is Turn.PLAYER:
            return Turn.COMPUTER
        if self is Turn.COMPUTER:
            return Turn.PLAYER
        return Turn.NONE

    @property
    def mark(self) -> Cell:
        if self is Turn.NONE:
            raise IllegalMoveError("nobody's turn, no mark to place")
        return Cell.PLAYER if self is Turn.PLAYER else Cell.COMPUTER


class GameOutcome(Enum):
    ONGOING = 0
    PLAYER_WIN = 1
    COMPUTER_WIN = 2
    DRAW = 3


# judge score: higher is better for the computer
SCORES = {
    GameOutcome.ONGOING: 50,
    GameOutcome.PLAYER_WIN: 0,
    GameOutcome.COMPUTER_WIN: 100,
    GameOutcome.DRAW: 50,
}


@dataclass(frozen=True)
class Board:
    """
    nine cells plus how many of them are marked
    """
    cells: Tuple[Cell, ...] = (Cell.EMPTY,) * CELL_COUNT
    move_count: int = field(default=-1, compare=False)

    def __post_init__(self):
        cells = tuple(self.cells)
        if len(cells) != CELL_COUNT:
            raise ValueError(f"board needs {CELL_COUNT} cells, got {len(cells)}")
        marked = sum(1 for c in cells if c is not Cell.EMPTY)
        if self.move_count not in (-1, marked):
            raise ValueError(f"move_count {self.move_count} != {marked} marked cells")
        object.__setattr__(self, "cells", cells)
        object.__setattr__(self, "move_count", marked)

    @classmethod
    def empty(cls) -> "Board":
        return cls()

    def __getitem__(self, index: int) -> Cell:
        return self.cells[index]

    def __str__(self) -> str:
        return render(self)


def new_board() -> Board:
    """fresh empty grid"""
    return Board.empty()


def legal_moves(board: Board) -> Tuple[int, ...]:
    """
    every empty index, ascending; this is the order search tries moves in
    """
    return tuple(i for i, cell in enumerate(board.cells) if cell is Cell.EMPTY)


def is_legal(board: Board, index) -> bool:
    """
    true if index names an empty cell; never raises
    """
    # bool is an int subclass, don't let True sneak in as cell 1
    if not isinstance(index, int) or isinstance(index, bool):
        return False
    if not 0 <= index < CELL_COUNT:
        return False
    return board.cells[index] is Cell.EMPTY


def place(board: Board, turn: Turn, index: int) -> Board:
    """
    copy of board with turn's mark at index
    """
    if not is_legal(board, index):
        raise IllegalMoveError(f"cell {index!r} is not playable on {render(board)}")
    cells = list(board.cells)
    cells[index] = turn.mark
    return Board(tuple(cells), board.move_count + 1)


def _line_owner(board: Board, line) -> Optional[Cell]:
    a, b, c = (board.cells[i] for i in line)
    if a is not Cell.EMPTY and a is b is c:
        return a
    return None


def winning_line(board: Board) -> Optional[Tuple[int, int, int]]:
    """first three-in-a-row, in columns/rows/diagonals order"""
    for line in WIN_LINES:
        if _line_owner(board, line) is not None:
            return line
    return None


def outcome(board: Board) -> GameOutcome:
    """
    judge the board: a win on any of the 8 lines, else draw when full
    """
    for line in WIN_LINES:
        owner = _line_owner(board, line)
        if owner is Cell.PLAYER:
            return GameOutcome.PLAYER_WIN
        if owner is Cell.COMPUTER:
            return GameOutcome.COMPUTER_WIN
    if board.move_count == CELL_COUNT:
        return GameOutcome.DRAW
    return GameOutcome.ONGOING


def score(result: GameOutcome) -> int:
    return SCORES[result]


def render(board: Board) -> str:
    """one char per cell: '-' empty, '1' player, '2' computer"""
    return "".join(cell.value for cell in board.cells)


def parse_render(text: str) -> Board:
    """
    rebuild a board from its 9-char render
    """
    text = text.strip()
    if len(text) != CELL_COUNT:
        raise ProtocolError(f"board snapshot must be {CELL_COUNT} chars: {text!r}")
    try:
        return Board(tuple(Cell(ch) for ch in text))
    except ValueError as e:
        raise ProtocolError(f"bad board snapshot {text!r}: {e}") from e

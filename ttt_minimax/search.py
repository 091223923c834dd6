"""
Exhaustive minimax for the computer opponent.

Scores come from board.score(): 100 computer win, 50 draw (or unresolved at
the depth cutoff), 0 player win. The computer maximizes, the player
minimizes. There is no pruning; every legal move is explored in ascending
index order, which also fixes the tie-break (lowest index wins a tie).
"""

import logging
from functools import lru_cache
from typing import List, Tuple

from .board import Board, GameOutcome, Turn, legal_moves, outcome, place, score
from .errors import SearchError

log = logging.getLogger(__name__)

# plies searched below each candidate move; 8 covers the whole game
SEARCH_DEPTH = 8


def _prefers(turn: Turn, candidate: int, best: int) -> bool:
    # strict compare so an equal later move never displaces an earlier one
    if turn is Turn.COMPUTER:
        return candidate > best
    return candidate < best


@lru_cache(maxsize=None)
def _guess(board: Board, depth: int, turn: Turn) -> int:
    result = outcome(board)
    if depth == 0 or result is not GameOutcome.ONGOING:
        return score(result)

    best = None
    for move in legal_moves(board):
        value = _guess(place(board, turn, move), depth - 1, turn.opponent())
        if best is None or _prefers(turn, value, best):
            best = value
    return best


def best_guess(board: Board, depth: int, turn: Turn) -> int:
    """
    Minimax value of board with `turn` to move and `depth` plies left.

    Args:
        board: position to evaluate.
        depth: plies still allowed; 0 means judge the board as it stands.
        turn: side to move at this ply.

    Returns:
        Score in [0, 100] from the computer's point of view.
    """
    if depth < 0:
        raise SearchError(f"negative search depth {depth}")
    if turn is Turn.NONE:
        raise SearchError("search needs a side to move")
    return _guess(board, depth, turn)


def best_move(board: Board, turn: Turn = Turn.COMPUTER, depth: int = SEARCH_DEPTH) -> int:
    """
    Pick the move `turn` should play on board.

    Every legal move is tried on a copy and scored with best_guess for the
    reply; the computer keeps the highest score, the player the lowest.

    Raises:
        SearchError: board is already finished (nothing to search).
    """
    if outcome(board) is not GameOutcome.ONGOING:
        raise SearchError(f"no move to search on finished board {board}")
    if turn is Turn.NONE:
        raise SearchError("search needs a side to move")

    best = best_value = None
    for move in legal_moves(board):
        value = best_guess(place(board, turn, move), depth, turn.opponent())
        if best is None or _prefers(turn, value, best_value):
            best, best_value = move, value

    log.debug("best move for %s on %s: %d (score %d, %s)",
              turn.name.lower(), board, best, best_value, _guess.cache_info())
    return best


def principal_variation(board: Board, turn: Turn = Turn.COMPUTER,
                        depth: int = SEARCH_DEPTH) -> Tuple[List[int], Board]:
    """
    play the game out with both sides using best_move
    returns: (moves played, final board)
    """
    moves = []
    while outcome(board) is GameOutcome.ONGOING:
        move = best_move(board, turn, depth)
        moves.append(move)
        board = place(board, turn, move)
        turn = turn.opponent()
    return moves, board


def clear_cache():
    """drop memoised positions"""
    _guess.cache_clear()

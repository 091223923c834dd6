"""
One player's session against the computer: whose turn it is, when the
computer searches, game over, and the new-game / close decision.

The session knows nothing about sockets or widgets. Callers hand it the
lines a client sent and write back whatever lines it returns.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from . import protocol
from .board import Board, GameOutcome, Turn, is_legal, new_board, outcome, place, render
from .errors import SessionClosedError, SessionStateError
from .search import SEARCH_DEPTH, best_move, principal_variation

log = logging.getLogger(__name__)


class SessionState(Enum):
    CHOOSING_FIRST_PLAYER = "choosing_first_player"
    COMPUTER_TURN = "computer_turn"
    PLAYER_TURN = "player_turn"
    GAME_OVER = "game_over"
    AWAITING_RESTART_DECISION = "awaiting_restart_decision"
    CLOSED = "closed"


@dataclass
class Tally:
    """results across the games of one session"""
    player_wins: int = 0
    computer_wins: int = 0
    draws: int = 0

    def record(self, result: GameOutcome):
        if result is GameOutcome.PLAYER_WIN:
            self.player_wins += 1
        elif result is GameOutcome.COMPUTER_WIN:
            self.computer_wins += 1
        elif result is GameOutcome.DRAW:
            self.draws += 1

    @property
    def games(self) -> int:
        return self.player_wins + self.computer_wins + self.draws


class Session:
    """
    turn sequencing for one remote player vs the computer
    """

    def __init__(self, rng: Optional[random.Random] = None, depth: int = SEARCH_DEPTH):
        """
        rng: coin for who starts; anything with randrange() (seed it in tests)
        depth: search depth for the computer's moves
        """
        self._rng = rng if rng is not None else random.Random()
        self.depth = depth
        self.board: Board = new_board()
        self.state = SessionState.CHOOSING_FIRST_PLAYER
        self.first_turn = Turn.NONE
        self.whose_turn = Turn.NONE
        self.tally = Tally()

    # ---------------- state ----------------

    @property
    def closed(self) -> bool:
        return self.state is SessionState.CLOSED

    @property
    def outcome(self) -> GameOutcome:
        return outcome(self.board)

    def _require(self, *states: SessionState):
        if self.state is SessionState.CLOSED:
            raise SessionClosedError("session already closed")
        if self.state not in states:
            wanted = ", ".join(s.value for s in states)
            raise SessionStateError(f"expected {wanted}, session is {self.state.value}")

    # ---------------- game flow ----------------

    def start(self) -> List[str]:
        """
        fresh board, flip for first move; returns the first prompt
        """
        if self.closed:
            raise SessionClosedError("session already closed")
        self.state = SessionState.CHOOSING_FIRST_PLAYER
        self.board = new_board()
        # fair coin: 0 -> player starts
        self.first_turn = Turn.PLAYER if self._rng.randrange(2) == 0 else Turn.COMPUTER
        log.info("new game, %s moves first", self.first_turn.name.lower())

        if self.first_turn is Turn.COMPUTER:
            return self._computer_turn()
        return self._prompt_player()

    def submit_move(self, token) -> List[str]:
        """
        player's move; anything unplayable just gets the board again
        """
        self._require(SessionState.PLAYER_TURN)
        index = token if isinstance(token, int) else protocol.parse_move(str(token))
        if index is None or not is_legal(self.board, index):
            log.debug("rejected move %r on %s", token, render(self.board))
            return [render(self.board)]

        self.board = place(self.board, Turn.PLAYER, index)
        log.debug("player took %d -> %s", index, render(self.board))
        if self.outcome is not GameOutcome.ONGOING:
            return self._game_over()
        return self._computer_turn()

    def submit_restart_decision(self, token: str) -> List[str]:
        """
        #NG starts over, #CG closes; anything else is dropped
        """
        self._require(SessionState.AWAITING_RESTART_DECISION)
        decision = token.strip()
        if decision == protocol.NEW_GAME:
            log.info("player asked for a new game")
            return self.start()
        if decision == protocol.CLOSE_GAME:
            log.info("player closed the session (%s)", self.describe_tally())
            self.state = SessionState.CLOSED
            self.whose_turn = Turn.NONE
            return []
        log.debug("ignoring %r while waiting for a restart decision", decision)
        return []

    def handle_line(self, line: str) -> List[str]:
        """
        route one client line by state; returns lines to send back
        """
        if self.closed:
            raise SessionClosedError("session already closed")
        if not line.strip():
            return []
        if self.state is SessionState.PLAYER_TURN:
            return self.submit_move(line)
        if self.state is SessionState.AWAITING_RESTART_DECISION:
            return self.submit_restart_decision(line)
        raise SessionStateError(f"not expecting input in state {self.state.value}")

    def _prompt_player(self) -> List[str]:
        self.state = SessionState.PLAYER_TURN
        self.whose_turn = Turn.PLAYER
        return [render(self.board)]

    def _computer_turn(self) -> List[str]:
        self.state = SessionState.COMPUTER_TURN
        self.whose_turn = Turn.COMPUTER
        move = best_move(self.board, Turn.COMPUTER, self.depth)
        self.board = place(self.board, Turn.COMPUTER, move)
        log.debug("computer took %d -> %s", move, render(self.board))
        if self.outcome is not GameOutcome.ONGOING:
            return self._game_over()
        if log.isEnabledFor(logging.DEBUG):
            line, _ = principal_variation(self.board, Turn.PLAYER, self.depth)
            log.debug("expected line from here: %s", line)
        return self._prompt_player()

    def _game_over(self) -> List[str]:
        self.state = SessionState.GAME_OVER
        self.whose_turn = Turn.NONE
        result = self.outcome
        self.tally.record(result)
        log.info("game over: %s on %s (%s)",
                 result.name.lower(), render(self.board), self.describe_tally())
        lines = [protocol.status_for(result)]
        self.state = SessionState.AWAITING_RESTART_DECISION
        return lines

    def describe_tally(self) -> str:
        t = self.tally
        return f"wins: {t.player_wins}, ties: {t.draws}, losses: {t.computer_wins}"

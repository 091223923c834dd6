"""
Line protocol between the game server and a client.

server -> client: 9-char board render (your move), or a game-over code
client -> server: cell index 0-8, or a restart decision
"""

from typing import Optional

from .board import CELL_COUNT, GameOutcome
from .errors import ProtocolError

STATUS_PREFIX = "#"
PLAYER_WON = STATUS_PREFIX + "P"
COMPUTER_WON = STATUS_PREFIX + "C"
TIE = STATUS_PREFIX + "T"

NEW_GAME = STATUS_PREFIX + "NG"
CLOSE_GAME = STATUS_PREFIX + "CG"

STATUS_FOR_OUTCOME = {
    GameOutcome.PLAYER_WIN: PLAYER_WON,
    GameOutcome.COMPUTER_WIN: COMPUTER_WON,
    GameOutcome.DRAW: TIE,
}
OUTCOME_FOR_STATUS = {code: result for result, code in STATUS_FOR_OUTCOME.items()}

ENCODING = "utf-8"

# longest client line worth reading; anything longer is junk
MAX_LINE = 64
# stands in for a line that was too long to read; never a legal token
UNREADABLE = STATUS_PREFIX + "?"


def status_for(result: GameOutcome) -> str:
    """game-over code for a finished game"""
    try:
        return STATUS_FOR_OUTCOME[result]
    except KeyError:
        raise ProtocolError(f"no status code for {result.name}") from None


def is_status(line: str) -> bool:
    return line.strip().startswith(STATUS_PREFIX)


def outcome_for_status(line: str) -> GameOutcome:
    """
    map #P / #C / #T back to the outcome
    """
    code = line.strip()
    try:
        return OUTCOME_FOR_STATUS[code]
    except KeyError:
        raise ProtocolError(f"unknown status line {code!r}") from None


def is_board(line: str) -> bool:
    line = line.strip()
    return len(line) == CELL_COUNT and not line.startswith(STATUS_PREFIX)


def parse_move(token: str) -> Optional[int]:
    """
    decimal cell index, or None when token isn't an integer
    range/occupancy is the board's call, not ours
    """
    try:
        return int(token.strip())
    except (ValueError, AttributeError):
        return None


def encode_line(text: str) -> bytes:
    return (text + "\n").encode(ENCODING)


def decode_line(raw: bytes) -> str:
    """bytes from the socket, minus the line ending"""
    return raw.decode(ENCODING, errors="replace").rstrip("\r\n")

class TicTacToeError(Exception):
    """
    base for every error raised by this package
    """


class IllegalMoveError(TicTacToeError, ValueError):
    """
    place() called with an occupied / out of range cell or no mover
    """


class SearchError(TicTacToeError):
    """
    search asked to move on a finished board
    """


class ProtocolError(TicTacToeError, ValueError):
    """
    line from the other side doesn't parse
    """


class SessionStateError(TicTacToeError):
    """
    session call made in the wrong state
    """


class SessionClosedError(SessionStateError):
    """
    input after #CG
    """

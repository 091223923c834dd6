"""
TCP front end for the game: listens on a port, and plays one Session per
connection, one connection at a time.

    python -m ttt_minimax.server --port 9999
"""

import argparse
import logging
import socket
import sys
from typing import Callable, Iterable, Optional, TextIO, Tuple

from . import protocol
from .config import LOG_LEVELS, SETTINGS
from .errors import TicTacToeError
from .session import Session

log = logging.getLogger(__name__)


def _send(writer: TextIO, lines: Iterable[str]):
    for line in lines:
        writer.write(line + "\n")
    writer.flush()


def run_session(session: Session, reader: TextIO, writer: TextIO) -> bool:
    """
    pump lines between a client and its session until #CG or EOF
    returns: True if the client closed cleanly, False on disconnect
    """
    _send(writer, session.start())
    while not session.closed:
        line = reader.readline(protocol.MAX_LINE)
        if not line:
            return False  # peer went away mid-session
        if len(line) >= protocol.MAX_LINE and not line.endswith("\n"):
            if not _skip_rest_of_line(reader):
                return False
            line = protocol.UNREADABLE
        _send(writer, session.handle_line(line))
    return True


def _skip_rest_of_line(reader: TextIO) -> bool:
    # False if the peer hung up before finishing the line
    while True:
        chunk = reader.readline(protocol.MAX_LINE)
        if not chunk:
            return False
        if chunk.endswith("\n"):
            return True


class GameServer:
    """
    single-connection-at-a-time listener
    """

    def __init__(self, host: str = SETTINGS.host, port: int = SETTINGS.port,
                 session_factory: Callable[[], Session] = Session,
                 accept_timeout: float = SETTINGS.accept_timeout_s):
        self.host = host
        self.port = port
        self.session_factory = session_factory
        self.accept_timeout = accept_timeout
        self.server_socket = None
        self.address: Optional[Tuple[str, int]] = None
        self.sessions_served = 0
        self._running = False

    def open(self) -> Tuple[str, int]:
        """
        bind + listen; port 0 picks a free one
        """
        if self.server_socket is not None:
            return self.address
        serv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            serv.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            serv.bind((self.host, self.port))
            serv.listen(1)
            serv.settimeout(self.accept_timeout)
        except OSError:
            serv.close()
            raise
        self.server_socket = serv
        self.address = serv.getsockname()[:2]
        self._running = True
        log.info("listening on %s:%d", *self.address)
        return self.address

    def serve_forever(self):
        """
        accept and play connections until stop()
        """
        self.open()
        serv = self.server_socket
        try:
            while self._running:
                try:
                    conn, addr = serv.accept()
                except socket.timeout:
                    continue
                except OSError as e:
                    # socket closed under us by stop()
                    if self._running:
                        log.error("accept error: %s", e)
                        raise
                    break
                self.serve_connection(conn, addr)
        finally:
            self._close_listener()

    def serve_connection(self, conn: socket.socket, addr=None):
        """
        play one session over conn, then close it
        """
        peer = "%s:%d" % addr[:2] if addr else "?"
        log.info("player connected from %s", peer)
        conn.settimeout(None)
        session = self.session_factory()
        with conn:
            reader = conn.makefile("r", encoding=protocol.ENCODING, errors="replace", newline="")
            writer = conn.makefile("w", encoding=protocol.ENCODING, newline="")
            try:
                if run_session(session, reader, writer):
                    log.info("player at %s closed the game", peer)
                else:
                    log.warning("player at %s disconnected", peer)
            except OSError as e:
                log.warning("connection to %s lost: %s", peer, e)
            except TicTacToeError:
                log.exception("session with %s failed", peer)
            except Exception:
                # a broken session costs one connection, not the listener
                log.exception("unexpected error in session with %s", peer)
            finally:
                self.sessions_served += 1
                for f in (reader, writer):
                    try:
                        f.close()
                    except OSError:
                        pass  # peer already gone, nothing left to flush
        log.info("session with %s over (%s), %d served",
                 peer, session.describe_tally(), self.sessions_served)

    def stop(self):
        """stop accepting; safe from another thread"""
        self._running = False
        self._close_listener()

    def _close_listener(self):
        serv, self.server_socket = self.server_socket, None
        if serv is not None:
            serv.close()


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Tic-tac-toe server: play the computer over TCP")
    ap.add_argument("--host", default=SETTINGS.host, help="interface to listen on")
    ap.add_argument("--port", type=int, default=SETTINGS.port, help="port to listen on")
    ap.add_argument("--log-level", default=SETTINGS.log_level, type=str.upper,
                    choices=LOG_LEVELS, help="logging verbosity")
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    server = GameServer(args.host, args.port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        log.info("shutting down")
    except OSError as e:
        log.error("server failed: %s", e)
        return 1
    finally:
        server.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())

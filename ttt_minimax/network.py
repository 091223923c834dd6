import logging
import socket
import threading

from PySide6.QtCore import QObject, Signal, Slot

from . import protocol
from .config import SETTINGS

log = logging.getLogger(__name__)


class ServerConnection(QObject):
    """
    qt worker for the client side of the game server connection
    """
    connected = Signal()
    disconnected = Signal(str)
    status_update = Signal(str)
    error_occurred = Signal(str)
    board_received = Signal(str)   # 9-char render, our move
    game_over = Signal(str)        # #P / #C / #T

    def __init__(self, connect_timeout=SETTINGS.connect_timeout_s):
        """
        init socket and control flags
        """
        super().__init__()
        self.socket = None
        self.host = ""
        self.port = 0
        self.connect_timeout = connect_timeout
        self._running = False   # thread control flag
        self.connection_thread = None

    @Slot(str, int)
    def connect_to(self, host, port):
        """
        spawn daemon thread that connects then reads server lines
        """
        # only one thread at a time
        if self.connection_thread and self.connection_thread.is_alive():
            return
        self.host = host; self.port = port
        self._running = True
        self.connection_thread = threading.Thread(target=self._connect_thread_func, daemon=True)
        self.connection_thread.start()

    def _connect_thread_func(self):
        """
        client socket setup, then hand off to the read loop
        """
        try:
            client_socket = socket.create_connection((self.host, self.port),
                                                     timeout=self.connect_timeout)
            client_socket.settimeout(None)

            if not self._running:
                client_socket.close()
                return

            self.socket = client_socket
            self.status_update.emit(f"connected to {self.host}:{self.port}")
            self.connected.emit()
            self._handle_connection()

        except socket.timeout:
            if self._running:
                self.error_occurred.emit(f"connection timed out to {self.host}:{self.port}.")
        except socket.gaierror:
            if self._running:
                self.error_occurred.emit(f"address error connecting to {self.host}")
        except OSError as e:
            if self._running:
                self.error_occurred.emit(f"connection error: {e}")
        finally:
            self._running = False
            self._close_socket()

    def _handle_connection(self):
        """
        main loop: read lines, emit signals
        """
        reader = self.socket.makefile("r", encoding=protocol.ENCODING, errors="replace", newline="")
        try:
            while self._running:
                line = reader.readline()
                if not line:
                    if self._running: self.disconnected.emit("server closed the connection")
                    break
                line = line.strip()
                if not line:
                    continue
                if protocol.is_status(line):
                    self.game_over.emit(line)
                elif protocol.is_board(line):
                    self.board_received.emit(line)
                else:
                    log.warning("unexpected line from server: %r", line)
        except OSError as e:
            if self._running: self.disconnected.emit(f"connection lost: {e}")
        finally:
            reader.close()

    def _send_message(self, message):
        """
        send one protocol line, drop the connection on failure
        """
        if not (self.socket and self._running):
            return False
        try:
            self.socket.sendall(protocol.encode_line(message))
            return True
        except OSError as e:
            if self._running: self.disconnected.emit(f"send error: {e}")
            self._running = False
            self._close_socket()
        return False

    @Slot(int)
    def send_move(self, index):
        self._send_message(str(index))

    @Slot()
    def send_new_game(self): self._send_message(protocol.NEW_GAME)

    @Slot()
    def send_close_game(self):
        # server ends the session after this, so do we
        self._send_message(protocol.CLOSE_GAME)
        self.stop()

    @Slot()
    def stop(self):
        """
        stop read thread, close socket
        """
        if not self._running: return
        self._running = False
        if self.socket:
            try: self.socket.shutdown(socket.SHUT_RDWR)
            except OSError: pass  # already disconnected
        self._close_socket()

    def _close_socket(self):
        s, self.socket = self.socket, None
        if s:
            s.close()

import logging

from ..board import GameOutcome, Turn, is_legal, new_board, parse_render, place
from ..config import SETTINGS
from ..errors import ProtocolError
from ..network import ServerConnection
from .. import protocol
from .board_widget import BoardWidget

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QPushButton, QLabel, QMenuBar, QMenu, QLineEdit,
    QGroupBox, QMessageBox, QSizePolicy, QSpinBox
)
from PySide6.QtGui import QAction, QFont
from PySide6.QtCore import Qt, Slot

log = logging.getLogger(__name__)

RESULT_TEXT = {
    GameOutcome.PLAYER_WIN: ("You win!", True),
    GameOutcome.COMPUTER_WIN: ("The computer wins.", False),
    GameOutcome.DRAW: ("It's a draw.", True),
}


class TicTacToeWindow(QMainWindow):
    """
    client window: connect to a game server and play the computer
    """
    def __init__(self, host=SETTINGS.host, port=SETTINGS.port):
        """
        init state, ui widgets, signals
        """
        super().__init__()
        self.board_widget = BoardWidget(parent=self)
        self.connection = None
        # running score for this window, like the server's tally
        self.wins = self.ties = self.losses = 0
        self.game_is_over = False

        self._setup_ui(host, port)
        self._update_message("Connect to a game server to play.")

    def _setup_ui(self, host, port):
        '''window look + layout'''
        self.setWindowTitle("Tic-Tac-Toe vs Computer")
        self.setStyleSheet("""
            QMainWindow { background-color: #222; }
            QMenuBar { background-color: #333; color: #eee; }
            QMenu { background-color: #333; color: #eee; border: 1px solid #555; }
            QPushButton { background-color: #444; color: #eee; border: 1px solid #555; padding: 8px 15px; border-radius: 5px; }
            QPushButton:hover { background-color: #555; }
            QLabel { color: #eee; }
        """)
        self.central_widget = QWidget()
        self.setCentralWidget(self.central_widget)
        self.main_layout = QVBoxLayout(self.central_widget)

        self._create_menu_bar()                 # top menu
        self._create_network_controls(host, port)
        self.main_layout.addWidget(self.network_controls_group)
        self.main_layout.addWidget(self.board_widget, 1)
        self.board_widget.cell_clicked.connect(self._on_cell_clicked)

        self._create_bottom_controls()          # status + buttons
        self.main_layout.addWidget(self.controls_bottom_widget)
        self._update_game_over_buttons()

    def _create_menu_bar(self):
        '''game menu actions'''
        menu_bar = QMenuBar()
        game_menu = QMenu("Game", self)
        connect_action = QAction("Connect", self)
        connect_action.triggered.connect(self._connect)
        quit_action = QAction("Quit", self)
        quit_action.triggered.connect(self.close)
        game_menu.addAction(connect_action)
        game_menu.addSeparator(); game_menu.addAction(quit_action)
        menu_bar.addMenu(game_menu)
        self.setMenuBar(menu_bar)

    def _create_network_controls(self, host, port):
        '''server address group'''
        self.network_controls_group = QGroupBox("Game Server")
        layout = QHBoxLayout()
        layout.addWidget(QLabel("Host:"))
        self.host_input = QLineEdit(host)
        layout.addWidget(self.host_input)
        layout.addWidget(QLabel("Port:"))
        self.port_input = QSpinBox()
        self.port_input.setRange(1, 65535)
        self.port_input.setValue(port)
        layout.addWidget(self.port_input)
        self.connect_button = QPushButton("Connect")
        self.connect_button.clicked.connect(self._connect)
        layout.addWidget(self.connect_button)
        self.network_controls_group.setLayout(layout)

    def _create_bottom_controls(self):
        # status label + tally + new/close buttons
        self.controls_bottom_widget = QWidget()
        hl = QHBoxLayout(self.controls_bottom_widget)
        self.controls_bottom_widget.setStyleSheet("background: transparent;")
        self.message_label = QLabel("")
        f = QFont(); f.setPointSize(12); self.message_label.setFont(f)
        self.message_label.setAlignment(Qt.AlignLeft | Qt.AlignVCenter)
        self.message_label.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Preferred)
        self.message_label.setWordWrap(True)
        self.tally_label = QLabel(self._tally_text())
        self.new_game_button = QPushButton("New Game"); self.new_game_button.clicked.connect(self._new_game)
        self.close_game_button = QPushButton("Close Game"); self.close_game_button.clicked.connect(self._close_game)
        for w in (self.message_label, None, self.tally_label,
                  self.new_game_button, self.close_game_button):
            if w: hl.addWidget(w)
            else: hl.addStretch(1)

    def _tally_text(self):
        return f"wins: {self.wins}  ties: {self.ties}  losses: {self.losses}"

    def _update_game_over_buttons(self):
        # new/close only make sense once the server awaits a decision
        show = self.game_is_over and self.connection is not None
        for b in (self.new_game_button, self.close_game_button):
            b.setVisible(show); b.setEnabled(show)

    @Slot(str)
    def _update_message(self, text, is_error=False,
                         is_success=False, is_turn=False):
        # set message text + style
        style = "color: #eee;"
        if is_error:   style = "color: #ff8a8a; font-weight: bold;"
        elif is_success: style = "color: lime; font-weight: bold;"
        elif is_turn:    style = "color: #8acaff; font-weight: bold;"
        self.message_label.setStyleSheet(style)
        self.message_label.setText(text)

    @Slot()
    def _connect(self):
        # start the connection worker
        if self.connection is not None:
            self._update_message("already connected.", is_error=True)
            return
        host = self.host_input.text().strip()
        if not host:
            QMessageBox.warning(self, "Network Error", "Enter the server host")
            return
        port = self.port_input.value()
        self.connection = ServerConnection()
        self.connection.connected.connect(self._on_connected)
        self.connection.disconnected.connect(self._on_disconnected)
        self.connection.status_update.connect(self._update_message)
        self.connection.error_occurred.connect(self._on_network_error)
        self.connection.board_received.connect(self._on_board_received)
        self.connection.game_over.connect(self._on_game_over)
        self.network_controls_group.setEnabled(False)
        self._update_message(f"connecting to {host}:{port}...")
        log.info("connecting to %s:%d", host, port)
        self.connection.connect_to(host, port)

    @Slot()
    def _on_connected(self):
        self.game_is_over = False
        self.board_widget.set_board(new_board())

    @Slot(str)
    def _on_board_received(self, line):
        # server wants our move
        try:
            board = parse_render(line)
        except ProtocolError as e:
            log.warning("%s", e)
            return
        self.game_is_over = False
        self.board_widget.set_board(board)
        self.board_widget.set_accept_clicks(True)
        self._update_message("Your (X) turn.", is_turn=True)
        self._update_game_over_buttons()

    @Slot(int)
    def _on_cell_clicked(self, index):
        board = self.board_widget.board
        if not is_legal(board, index):
            self._update_message("cell taken", is_error=True)
            return
        # show our mark right away; server answers with the next board
        self.board_widget.set_board(place(board, Turn.PLAYER, index))
        self.board_widget.set_accept_clicks(False)
        self._update_message("computer is thinking...")
        self.connection.send_move(index)

    @Slot(str)
    def _on_game_over(self, line):
        try:
            result = protocol.outcome_for_status(line)
        except ProtocolError as e:
            log.warning("%s", e)
            return
        if result is GameOutcome.PLAYER_WIN: self.wins += 1
        elif result is GameOutcome.COMPUTER_WIN: self.losses += 1
        else: self.ties += 1
        text, ok = RESULT_TEXT[result]
        self.game_is_over = True
        self.board_widget.set_accept_clicks(False)
        self.tally_label.setText(self._tally_text())
        self._update_message(text, is_success=ok, is_error=not ok)
        self._update_game_over_buttons()

    @Slot()
    def _new_game(self):
        self.game_is_over = False
        self._update_game_over_buttons()
        self.board_widget.set_board(new_board())
        self._update_message("new game...")
        self.connection.send_new_game()

    @Slot()
    def _close_game(self):
        self.connection.send_close_game()
        self.close()

    @Slot(str)
    def _on_disconnected(self, reason):
        # server or network dropped us
        self._drop_connection()
        self._update_message(f"Disconnected: {reason}", is_error=True)
        QMessageBox.information(self, "Disconnected", reason)

    @Slot(str)
    def _on_network_error(self, err):
        self._drop_connection()
        self._update_message(f"Network error: {err}", is_error=True)
        QMessageBox.critical(self, "Network Error", err)

    def _drop_connection(self):
        conn, self.connection = self.connection, None
        if conn is not None:
            conn.stop()
        self.game_is_over = False
        self.board_widget.set_accept_clicks(False)
        self.network_controls_group.setEnabled(True)
        self._update_game_over_buttons()

    def closeEvent(self, event):
        # ensure cleanup on close
        if self.connection is not None:
            self.connection.stop()
        event.accept()

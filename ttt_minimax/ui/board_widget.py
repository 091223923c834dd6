from PySide6.QtWidgets import QWidget, QSizePolicy
from PySide6.QtCore import Qt, QSize, Signal, QPointF
from PySide6.QtGui import QPainter, QColor, QPen

from ..board import BOARD_SIZE, Board, Cell, new_board, winning_line

PLAYER_COLOR = QColor("#8acaff")
COMPUTER_COLOR = QColor("#ff8a8a")
WIN_LINE_COLOR = QColor("#eeeeee")


class BoardWidget(QWidget):
    """
    draws the latest board snapshot from the server and reports clicks
    """
    cell_clicked = Signal(int)  # emits cell index 0-8

    def __init__(self, parent=None):
        super().__init__(parent)
        self.board = new_board()        # last snapshot received
        self.setSizePolicy(QSizePolicy.Ignored, QSizePolicy.Ignored)
        self.setMinimumSize(QSize(150, 150))
        self._accept_clicks = False     # only while the server awaits a move

    def set_board(self, board: Board):
        self.board = board
        self.update()

    def set_accept_clicks(self, accept):
        # enable/disable user input
        self._accept_clicks = accept

    def heightForWidth(self, width):
        # keep square shape
        return width

    def hasHeightForWidth(self):
        return True

    def _geometry(self):
        w, h = self.width(), self.height()
        side = min(w, h)
        return (w - side) / 2, (h - side) / 2, side, side / BOARD_SIZE

    def _cell_center(self, index, ox, oy, cell):
        r, c = divmod(index, BOARD_SIZE)
        return QPointF(ox + c*cell + cell/2, oy + r*cell + cell/2)

    def paintEvent(self, event):
        """
        draw grid, X (you) / O (computer), and the winning line
        """
        painter = QPainter(self)
        try:
            painter.setRenderHint(QPainter.Antialiasing, True)
            ox, oy, side, cell = self._geometry()
            painter.fillRect(self.rect(), QColor("#333"))
            # grid lines
            painter.setPen(QPen(QColor("#555"), 2))
            for i in range(1, BOARD_SIZE):
                x = ox + i*cell
                painter.drawLine(int(x), int(oy), int(x), int(oy+side))
                y = oy + i*cell
                painter.drawLine(int(ox), int(y), int(ox+side), int(y))
            # marks
            rad = cell/2 * 0.7
            for index, mark in enumerate(self.board.cells):
                if mark is Cell.EMPTY: continue
                center = self._cell_center(index, ox, oy, cell)
                cx, cy = center.x(), center.y()
                if mark is Cell.PLAYER:
                    painter.setPen(QPen(PLAYER_COLOR, 4))
                    painter.drawLine(QPointF(cx-rad, cy-rad), QPointF(cx+rad, cy+rad))
                    painter.drawLine(QPointF(cx+rad, cy-rad), QPointF(cx-rad, cy+rad))
                else:
                    painter.setPen(QPen(COMPUTER_COLOR, 4))
                    painter.drawEllipse(center, rad, rad)
            # strike through three in a row
            line = winning_line(self.board)
            if line:
                painter.setPen(QPen(WIN_LINE_COLOR, 8, Qt.SolidLine, Qt.RoundCap, Qt.RoundJoin))
                painter.drawLine(self._cell_center(line[0], ox, oy, cell),
                                 self._cell_center(line[-1], ox, oy, cell))
        finally:
            painter.end()

    def mouseReleaseEvent(self, event):
        """
        map click to a cell index and emit it
        """
        if not self._accept_clicks:
            return
        ox, oy, side, cell = self._geometry()
        x, y = event.position().x(), event.position().y()
        # only inside grid
        if not (ox <= x < ox+side and oy <= y < oy+side):
            return
        if cell <= 0: return
        col = int((x-ox)//cell); row = int((y-oy)//cell)
        # clamp to valid range
        row = max(0, min(row, BOARD_SIZE-1)); col = max(0, min(col, BOARD_SIZE-1))
        self.cell_clicked.emit(row*BOARD_SIZE + col)  # notify main window

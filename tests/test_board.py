import random
import unittest

from ttt_minimax.board import (
    WIN_LINES, Board, Cell, GameOutcome, Turn, is_legal, legal_moves, new_board,
    outcome, parse_render, place, render, score, winning_line,
)
from ttt_minimax.errors import IllegalMoveError, ProtocolError


class BoardBasicsTests(unittest.TestCase):
    def test_new_board_is_empty(self):
        board = new_board()
        self.assertEqual(board.move_count, 0)
        self.assertEqual(legal_moves(board), tuple(range(9)))
        self.assertEqual(outcome(board), GameOutcome.ONGOING)
        self.assertEqual(render(board), "---------")

    def test_place_returns_new_board(self):
        board = new_board()
        after = place(board, Turn.PLAYER, 4)
        self.assertEqual(render(board), "---------")
        self.assertEqual(render(after), "----1----")
        self.assertEqual(after.move_count, 1)
        after = place(after, Turn.COMPUTER, 0)
        self.assertEqual(render(after), "2---1----")
        self.assertEqual(after.move_count, 2)
        self.assertEqual(legal_moves(after), (1, 2, 3, 5, 6, 7, 8))

    def test_place_fails_loudly_on_bad_moves(self):
        board = place(new_board(), Turn.PLAYER, 4)
        with self.assertRaises(IllegalMoveError):
            place(board, Turn.COMPUTER, 4)
        with self.assertRaises(IllegalMoveError):
            place(board, Turn.COMPUTER, 9)
        with self.assertRaises(IllegalMoveError):
            place(board, Turn.COMPUTER, -1)
        with self.assertRaises(IllegalMoveError):
            place(board, Turn.NONE, 0)
        # still a ValueError for callers that only know builtins
        with self.assertRaises(ValueError):
            place(board, Turn.PLAYER, 4)

    def test_is_legal(self):
        board = place(new_board(), Turn.PLAYER, 4)
        self.assertTrue(is_legal(board, 0))
        self.assertTrue(is_legal(board, 8))
        self.assertFalse(is_legal(board, 4))
        self.assertFalse(is_legal(board, -1))
        self.assertFalse(is_legal(board, 9))
        self.assertFalse(is_legal(board, "3"))
        self.assertFalse(is_legal(board, None))
        self.assertFalse(is_legal(board, True))

    def test_move_count_must_match_cells(self):
        cells = (Cell.PLAYER,) + (Cell.EMPTY,) * 8
        self.assertEqual(Board(cells).move_count, 1)
        with self.assertRaises(ValueError):
            Board(cells, 3)
        with self.assertRaises(ValueError):
            Board((Cell.EMPTY,) * 8)

    def test_boards_compare_by_cells(self):
        a = place(new_board(), Turn.PLAYER, 2)
        b = parse_render("--1------")
        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))

    def test_turn_opponent(self):
        self.assertIs(Turn.PLAYER.opponent(), Turn.COMPUTER)
        self.assertIs(Turn.COMPUTER.opponent(), Turn.PLAYER)
        self.assertIs(Turn.NONE.opponent(), Turn.NONE)


class OutcomeTests(unittest.TestCase):
    def _with_line(self, line, mark):
        text = ["-"] * 9
        for i in line:
            text[i] = mark
        return parse_render("".join(text))

    def test_every_line_wins_for_both_sides(self):
        self.assertEqual(len(WIN_LINES), 8)
        for line in WIN_LINES:
            with self.subTest(line=line):
                self.assertEqual(outcome(self._with_line(line, "1")), GameOutcome.PLAYER_WIN)
                self.assertEqual(outcome(self._with_line(line, "2")), GameOutcome.COMPUTER_WIN)
                self.assertEqual(winning_line(self._with_line(line, "1")), line)

    def test_two_in_a_row_is_not_a_win(self):
        self.assertEqual(outcome(parse_render("11-22----")), GameOutcome.ONGOING)
        self.assertIsNone(winning_line(parse_render("11-22----")))

    def test_mixed_line_is_not_a_win(self):
        self.assertEqual(outcome(parse_render("112------")), GameOutcome.ONGOING)

    def test_first_winning_line_decides(self):
        # rows are checked top to bottom
        self.assertEqual(outcome(parse_render("111---222")), GameOutcome.PLAYER_WIN)
        self.assertEqual(outcome(parse_render("222---111")), GameOutcome.COMPUTER_WIN)

    def test_full_board_without_line_is_draw(self):
        board = parse_render("121121212")
        self.assertEqual(board.move_count, 9)
        self.assertEqual(outcome(board), GameOutcome.DRAW)
        self.assertEqual(score(outcome(board)), 50)
        self.assertEqual(legal_moves(board), ())

    def test_win_on_last_move_beats_draw(self):
        board = parse_render("222112121")
        self.assertEqual(board.move_count, 9)
        self.assertEqual(outcome(board), GameOutcome.COMPUTER_WIN)

    def test_scores(self):
        self.assertEqual(score(GameOutcome.ONGOING), 50)
        self.assertEqual(score(GameOutcome.DRAW), 50)
        self.assertEqual(score(GameOutcome.PLAYER_WIN), 0)
        self.assertEqual(score(GameOutcome.COMPUTER_WIN), 100)


class RenderTests(unittest.TestCase):
    def test_render_reads_back_cell_by_cell(self):
        board = new_board()
        for turn, index in ((Turn.PLAYER, 0), (Turn.COMPUTER, 4), (Turn.PLAYER, 8)):
            board = place(board, turn, index)
        text = render(board)
        self.assertEqual(text, "1---2---1")
        for index, ch in enumerate(text):
            self.assertEqual(board[index].value, ch)
        self.assertEqual(parse_render(text), board)
        self.assertEqual(str(board), text)

    def test_parse_render_rejects_garbage(self):
        for bad in ("", "----", "12x------", "----------", "#P"):
            with self.subTest(bad=bad):
                with self.assertRaises(ProtocolError):
                    parse_render(bad)

    def test_parse_render_ignores_line_ending(self):
        self.assertEqual(render(parse_render("--1--2---\n")), "--1--2---")


class RandomPlayoutTests(unittest.TestCase):
    def test_move_count_tracks_marks_through_playouts(self):
        rng = random.Random(7)
        for _ in range(200):
            board, turn = new_board(), Turn.PLAYER
            while outcome(board) is GameOutcome.ONGOING:
                before = board
                board = place(board, turn, rng.choice(legal_moves(board)))
                marked = sum(1 for c in board.cells if c is not Cell.EMPTY)
                self.assertEqual(board.move_count, marked)
                self.assertEqual(board.move_count, before.move_count + 1)
                # marks never come back off
                for old, new in zip(before.cells, board.cells):
                    if old is not Cell.EMPTY:
                        self.assertIs(old, new)
                turn = turn.opponent()
            self.assertLessEqual(board.move_count, 9)


if __name__ == "__main__":
    unittest.main()

import random
import unittest

from ttt_minimax.board import (
    GameOutcome, Turn, legal_moves, new_board, outcome, parse_render, place,
)
from ttt_minimax.errors import SearchError
from ttt_minimax.search import (
    SEARCH_DEPTH, _guess, best_guess, best_move, clear_cache, principal_variation,
)


def _all_games_vs_computer(board, turn, results):
    """
    every player reply is explored; the computer always answers with best_move
    """
    result = outcome(board)
    if result is not GameOutcome.ONGOING:
        results.append((result, board))
        return
    if turn is Turn.COMPUTER:
        move = best_move(board, Turn.COMPUTER)
        _all_games_vs_computer(place(board, Turn.COMPUTER, move), Turn.PLAYER, results)
    else:
        for move in legal_moves(board):
            _all_games_vs_computer(place(board, Turn.PLAYER, move), Turn.COMPUTER, results)


class BestMoveTests(unittest.TestCase):
    def test_search_depth_covers_whole_game(self):
        self.assertEqual(SEARCH_DEPTH, 8)

    def test_takes_immediate_win(self):
        # computer on 0,1; player on 3,4 threatens 5
        self.assertEqual(best_move(parse_render("22-11----")), 2)

    def test_blocks_immediate_player_win(self):
        # player on 0,1 threatens 2
        self.assertEqual(best_move(parse_render("11--2----")), 2)

    def test_lowest_index_breaks_tie_between_win_and_winning_block(self):
        # computer can win at once on 8, blocking at 6 also forces a win;
        # both score 100 so the lower index is played
        board = parse_render("1-21-2---")
        self.assertEqual(best_guess(place(board, Turn.COMPUTER, 8), SEARCH_DEPTH, Turn.PLAYER), 100)
        self.assertEqual(best_guess(place(board, Turn.COMPUTER, 6), SEARCH_DEPTH, Turn.PLAYER), 100)
        self.assertEqual(best_move(board), 6)

    def test_forced_block_with_no_win_available(self):
        # player on 0,4 threatens 8; every other move loses
        board = parse_render("1---1-2--")
        self.assertEqual(best_move(board), 8)
        for move in legal_moves(board):
            if move != 8:
                with self.subTest(move=move):
                    self.assertEqual(
                        best_guess(place(board, Turn.COMPUTER, move), SEARCH_DEPTH, Turn.PLAYER), 0)

    def test_only_move_left(self):
        board = parse_render("12121221-")
        self.assertEqual(best_move(board), 8)

    def test_ties_go_to_lowest_index(self):
        # every opening draws under perfect play
        self.assertEqual(best_move(new_board()), 0)
        self.assertEqual(best_move(new_board(), Turn.PLAYER), 0)

    def test_player_side_minimizes(self):
        self.assertEqual(best_move(parse_render("11-22----"), Turn.PLAYER), 2)

    def test_finished_board_is_a_contract_violation(self):
        with self.assertRaises(SearchError):
            best_move(parse_render("111-22---"))
        with self.assertRaises(SearchError):
            best_move(parse_render("121121212"))

    def test_needs_a_side_to_move(self):
        with self.assertRaises(SearchError):
            best_move(new_board(), Turn.NONE)

    def test_live_board_untouched(self):
        board = parse_render("1---2----")
        best_move(board)
        self.assertEqual(str(board), "1---2----")
        self.assertEqual(board.move_count, 2)


class BestGuessTests(unittest.TestCase):
    def test_terminal_boards_are_judged(self):
        self.assertEqual(best_guess(parse_render("111-22---"), 5, Turn.COMPUTER), 0)
        self.assertEqual(best_guess(parse_render("222-11---"), 5, Turn.PLAYER), 100)
        self.assertEqual(best_guess(parse_render("121121212"), 5, Turn.PLAYER), 50)

    def test_depth_zero_judges_as_is(self):
        # player would win next move, but no plies are left to see it
        self.assertEqual(best_guess(parse_render("11--2----"), 0, Turn.PLAYER), 50)
        self.assertEqual(best_guess(parse_render("11--2----"), 1, Turn.PLAYER), 0)

    def test_perfect_play_from_empty_is_draw(self):
        self.assertEqual(best_guess(new_board(), 9, Turn.PLAYER), 50)
        self.assertEqual(best_guess(new_board(), 9, Turn.COMPUTER), 50)

    def test_forced_win_found(self):
        # computer to move has two ways to finish
        self.assertEqual(best_guess(parse_render("2-2-1-1--"), 3, Turn.COMPUTER), 100)

    def test_bad_arguments(self):
        with self.assertRaises(SearchError):
            best_guess(new_board(), -1, Turn.COMPUTER)
        with self.assertRaises(SearchError):
            best_guess(new_board(), 3, Turn.NONE)


class NeverLosesTests(unittest.TestCase):
    def test_computer_first_never_loses_to_any_reply(self):
        results = []
        _all_games_vs_computer(new_board(), Turn.COMPUTER, results)
        self.assertTrue(results)
        for result, board in results:
            self.assertNotEqual(result, GameOutcome.PLAYER_WIN, str(board))

    def test_player_first_never_beats_computer(self):
        results = []
        _all_games_vs_computer(new_board(), Turn.PLAYER, results)
        self.assertTrue(results)
        for result, board in results:
            self.assertNotEqual(result, GameOutcome.PLAYER_WIN, str(board))

    def test_center_opening_against_random_player(self):
        rng = random.Random(1234)
        for _ in range(100):
            board, turn = place(new_board(), Turn.COMPUTER, 4), Turn.PLAYER
            while outcome(board) is GameOutcome.ONGOING:
                if turn is Turn.PLAYER:
                    move = rng.choice(legal_moves(board))
                else:
                    move = best_move(board)
                board = place(board, turn, move)
                turn = turn.opponent()
            self.assertIn(outcome(board), (GameOutcome.COMPUTER_WIN, GameOutcome.DRAW), str(board))

    def test_principal_variation_from_empty_is_a_draw(self):
        moves, final = principal_variation(new_board())
        self.assertEqual(len(moves), 9)
        self.assertEqual(outcome(final), GameOutcome.DRAW)
        self.assertEqual(moves[0], 0)

    def test_principal_variation_on_won_position(self):
        moves, final = principal_variation(parse_render("22-11----"))
        self.assertEqual(moves, [2])
        self.assertEqual(outcome(final), GameOutcome.COMPUTER_WIN)


class CacheTests(unittest.TestCase):
    def test_clear_cache_drops_positions_not_answers(self):
        clear_cache()
        self.assertEqual(_guess.cache_info().currsize, 0)
        first = best_move(parse_render("1---2----"))
        self.assertGreater(_guess.cache_info().currsize, 0)
        clear_cache()
        self.assertEqual(_guess.cache_info().currsize, 0)
        self.assertEqual(best_move(parse_render("1---2----")), first)


if __name__ == "__main__":
    unittest.main()

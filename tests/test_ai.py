"""Tests for the minimax search and the computer opponent."""

import pytest

from tictactoe.ai import MinimaxAI, PreconditionViolation, best_move, score
from tictactoe.game import InvalidBoard, Player, TicTacToeGame

X, O = Player.X, Player.O


def test_empty_board_is_a_draw_with_best_play():
    assert score([0] * 9, X) == 0


def test_score_of_decided_board():
    board = [X, X, X, O, O, 0, 0, 0, 0]
    assert score(board, O) == -1
    assert score(board, X) == 1


def test_score_of_full_board_is_draw():
    assert score([X, O, X, X, O, O, O, X, X], O) == 0


def test_score_forced_win_and_forced_loss():
    # X to move completes the top row.
    assert score([X, X, 0, O, O, 0, 0, 0, 0], X) == 1
    # X threatens both 2 and 6; O can only stop one of them.
    assert score([X, X, 0, X, O, 0, 0, 0, O], O) == -1


def test_ai_takes_immediate_win():
    board = [X, X, 0, O, O, 0, 0, 0, 0]
    assert best_move(board, X) == 2


def test_ai_blocks_open_line():
    # X holds 2 and 4; only cell 6 stops the anti-diagonal.
    board = [O, 0, X, 0, X, 0, 0, 0, 0]
    assert best_move(board, O) == 6
    assert score(board, O) == 0


def test_ties_go_to_lowest_index():
    # Every reply to a center opening draws except the edges, which lose.
    board = [0, 0, 0, 0, X, 0, 0, 0, 0]
    assert best_move(board, O) == 0


def test_search_leaves_board_untouched():
    board = [X, 0, 0, 0, O, 0, 0, 0, X]
    before = list(board)
    move = best_move(board, O)
    score(board, O)
    assert board == before
    assert board[move] == 0


def test_search_rejects_finished_board():
    with pytest.raises(PreconditionViolation):
        best_move([X, X, X, O, O, 0, 0, 0, 0], O)
    with pytest.raises(PreconditionViolation):
        best_move([X, O, X, X, O, O, O, X, X], O)


def test_search_rejects_malformed_board():
    with pytest.raises(InvalidBoard):
        best_move([0] * 8, X)


def test_self_play_ends_in_draw():
    game = TicTacToeGame()
    while not game.finished:
        move = best_move(game.board, game.current_player)
        assert game.board[move] == 0
        game.play_move(move)
    assert game.drawn


def _explore(game, ai, results):
    if game.finished:
        results.append(game.winner)
        return
    if game.current_player == ai.player:
        game.play_move(ai.choose(game))
        _explore(game, ai, results)
        return
    for cell in game.available_moves():
        child = game.clone()
        child.play_move(cell)
        _explore(child, ai, results)


def test_computer_never_loses():
    ai = MinimaxAI(player=O)
    results = []
    _explore(TicTacToeGame(), ai, results)
    assert results
    assert X not in results


def test_ai_refuses_to_move_out_of_turn():
    game = TicTacToeGame()
    with pytest.raises(ValueError):
        MinimaxAI(player=O).choose(game)


def test_ai_refuses_finished_game():
    game = TicTacToeGame()
    for cell in (0, 3, 1, 4, 2):
        game.play_move(cell)
    with pytest.raises(PreconditionViolation):
        MinimaxAI(player=O).choose(game)

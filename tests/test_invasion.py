import random

import pytest

from freedboards.board import Board, BoardState
from freedboards.invasion import (
    COLOR_NAMES,
    NUM_COLORS,
    InvasionAI,
    InvasionError,
    InvasionGame,
)
from freedboards.shapes import standard


def line_board(n):
    board = Board(start_p0=0, start_p1=n - 1)
    board.reset(n)
    for i in range(n - 1):
        board[i].add_neighbor(i + 1)
        board[i + 1].add_neighbor(i)
    return board


def grid_game(two_player=False):
    board = standard(3, 3)
    state = BoardState(board, states=bytes([0, 1, 2, 3, 4, 5, 0, 1, 2]))
    return InvasionGame(board, two_player=two_player, state=state)


def test_new_game_colors_all_have_names():
    game = InvasionGame(standard(3, 3), rng=random.Random(3))
    assert len(COLOR_NAMES) == NUM_COLORS
    assert all(0 <= s < len(COLOR_NAMES) for s in game.state)


def test_two_player_capture_ends_game():
    board = line_board(5)
    game = InvasionGame(
        board, two_player=True, state=BoardState(board, states=bytes([0, 1, 1, 1, 2]))
    )
    assert game.game_over is False
    assert game.result_message() is None
    assert game.choose(1) is None
    assert list(game.state) == [1, 1, 1, 1, 2]
    assert game.turn == 1
    assert (game.score_zero, game.score_one) == (4, 1)
    assert game.game_over is True
    expected = (
        f"Player 1 ({COLOR_NAMES[1]}) had 4 nodes and\n"
        f"Player 2 ({COLOR_NAMES[2]}) had 1 nodes\n\n{COLOR_NAMES[1]} Wins!"
    )
    assert game.result_message() == expected


def test_tie_message():
    board = line_board(4)
    game = InvasionGame(
        board, two_player=True, state=BoardState(board, states=bytes([0, 1, 2, 3]))
    )
    game.choose(1)
    assert game.game_over is False
    game.choose(2)
    assert list(game.state) == [1, 1, 2, 2]
    assert game.game_over is True
    assert game.result_message().endswith("\n\nA Tie!")


def test_choose_after_game_over_raises():
    board = line_board(3)
    game = InvasionGame(
        board, two_player=True, state=BoardState(board, states=bytes([0, 1, 2]))
    )
    game.choose(1)
    assert game.game_over
    with pytest.raises(InvasionError):
        game.choose(3)


def test_choose_taken_color_raises():
    game = grid_game(two_player=True)
    with pytest.raises(InvasionError):
        game.choose(game.state[game.board.start_p1])
    with pytest.raises(InvasionError):
        game.choose(game.state[game.board.start_p0])


def test_choose_out_of_range_raises():
    game = grid_game(two_player=True)
    with pytest.raises(ValueError):
        game.choose(NUM_COLORS)


def test_undo_restores_state_and_turn():
    game = grid_game(two_player=True)
    before = list(game.state)
    game.choose(3)
    assert list(game.state) != before
    assert game.undo() is True
    assert list(game.state) == before
    assert game.turn == 0
    assert game.history == []


def test_undo_with_no_history():
    game = grid_game()
    assert game.undo() is False


def test_single_player_gets_ai_reply():
    game = grid_game()
    board = game.board
    old_p1 = game.state[board.start_p1]
    reply = game.choose(3)
    assert reply not in (3, old_p1)
    assert 0 <= reply < NUM_COLORS
    assert game.state[board.start_p0] == 3
    assert game.state[board.start_p1] == reply
    assert game.turn == 0
    assert len(game.history) == 1
    assert game.undo()
    assert list(game.state) == [0, 1, 2, 3, 4, 5, 0, 1, 2]


def test_ai_returns_legal_color_and_keeps_state():
    board = standard(4, 4)
    game = InvasionGame(board, rng=random.Random(7))
    snapshot = list(game.state)
    ai = InvasionAI()
    color = ai.think(game.state, 1)
    assert list(game.state) == snapshot
    assert 0 <= color < NUM_COLORS
    assert color not in (game.state[board.start_p0], game.state[board.start_p1])
    assert InvasionAI().think(game.state, 1) == color


def test_new_game_is_reproducible_and_valid():
    board = standard(5, 5)
    a = InvasionGame(board, rng=random.Random(11))
    b = InvasionGame(standard(5, 5), rng=random.Random(11))
    assert list(a.state) == list(b.state)
    assert all(0 <= s < NUM_COLORS for s in a.state)
    assert a.state[board.start_p0] != a.state[board.start_p1]
    assert a.history == [] and a.turn == 0


def test_scores_cover_player_regions():
    game = grid_game(two_player=True)
    game.choose(3)
    assert game.score_zero >= 1 and game.score_one >= 1
    assert game.score_zero + game.score_one <= len(game.board)


def test_state_from_other_board_rejected():
    board = line_board(3)
    other = line_board(3)
    with pytest.raises(ValueError):
        InvasionGame(board, state=BoardState(other, states=bytes([0, 1, 2])))
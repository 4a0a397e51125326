"""A territory game: each turn a player recolours their region to absorb neighbours."""

from __future__ import annotations

import random
from typing import Optional

from freedboards.board import Board, BoardDelta, BoardState

NUM_COLORS = 6
GAME_COLORS: tuple[tuple[float, float, float, float], ...] = (
    (1.0, 0.0, 0.0, 1.0),
    (0.0, 1.0, 0.0, 1.0),
    (0.0, 0.0, 1.0, 1.0),
    (1.0, 0.0, 1.0, 1.0),
    (1.0, 1.0, 0.0, 1.0),
    (0.0, 1.0, 1.0, 1.0),
)
COLOR_NAMES: tuple[str, ...] = (
    "Red",
    "Green",
    "Dark Blue",
    "Purple",
    "Yellow",
    "Light Blue",
)
THINK_DEPTH = 4


class InvasionError(Exception):
    """Raised for a move the rules do not allow."""


def other_turn(turn: int) -> int:
    return (turn + 1) % 2


def _start_of(board: Board, turn: int) -> int:
    return board.start_p0 if turn == 0 else board.start_p1


def _flood_fill(board: Board, state: BoardState, start: int, color: int) -> None:
    """Recolour the connected single-colour region containing `start`."""
    previous = state[start]
    if previous == color:
        return
    state[start] = color
    stack = [start]
    while stack:
        at = stack.pop()
        for n in board[at].neighbors:
            if state[n] == previous:
                state[n] = color
                stack.append(n)


def _region_size(board: Board, state: BoardState, start: int, seen: set[int]) -> int:
    if start in seen:
        return 0
    color = state[start]
    seen.add(start)
    count = 0
    stack = [start]
    while stack:
        at = stack.pop()
        count += 1
        for n in board[at].neighbors:
            if n not in seen and state[n] == color:
                seen.add(n)
                stack.append(n)
    return count


def _region_sizes(board: Board, state: BoardState, perspective: int) -> tuple[int, int]:
    """Sizes of the regions held by `perspective` and by the other player."""
    seen: set[int] = set()
    mine = _region_size(board, state, _start_of(board, perspective), seen)
    theirs = _region_size(board, state, _start_of(board, other_turn(perspective)), seen)
    return mine, theirs


class InvasionAI:
    """A fixed-depth look-ahead that picks the colour to play next."""

    def think(self, state: BoardState, turn: int) -> int:
        """Choose a colour for `turn` to play; `state` is left unchanged."""
        self._board = state.board
        self._initial = state
        self._favorite = turn
        self._best_score = -len(self._board) * 10
        self._best_color: Optional[int] = None
        self._base_color: Optional[int] = None
        self._search(state, 0, turn, THINK_DEPTH == 1)
        if self._best_color is None:
            raise InvasionError("no legal colour to play")
        return self._best_color

    def _move(self, state: BoardState, turn: int, color: int) -> bool:
        board = self._board
        if color in (state[board.start_p0], state[board.start_p1]):
            return False
        _flood_fill(board, state, _start_of(board, turn), color)
        return True

    def _search(self, previous: BoardState, level: int, turn: int, chosen: bool) -> int:
        board = self._board
        current = previous.copy()
        base = self._initial if chosen else previous
        last_me, last_other = _region_sizes(board, base, turn)

        best_color: Optional[int] = None
        best_score = -len(board) * 10

        if level == THINK_DEPTH - 1:
            for color in range(NUM_COLORS):
                if self._move(current, turn, color):
                    me, other = _region_sizes(board, current, turn)
                    score = (me - last_me) - (other - last_other)
                    if score > best_score:
                        best_score, best_color = score, color
                    current = previous.copy()
            if chosen:
                if turn != self._favorite:
                    best_score = -best_score
                if best_score > self._best_score:
                    self._best_score = best_score
                    self._best_color = self._base_color
            if best_color is None:
                raise InvasionError("no legal colour to play")
            return best_color

        for color in range(NUM_COLORS):
            if level == 0:
                self._base_color = color
            if self._move(current, turn, color):
                reply = self._search(current, level + 1, other_turn(turn), False)
                self._move(current, other_turn(turn), reply)
                me, other = _region_sizes(board, current, turn)
                score = (me - last_me) - (other - last_other)
                if score > best_score:
                    best_score, best_color = score, color
                current = previous.copy()

        if best_color is None:
            raise InvasionError("no legal colour to play")
        if chosen or level == 1:
            self._move(current, turn, best_color)
            self._search(current, level + 1, other_turn(turn), True)
        return best_color


class InvasionGame:
    """Two players grow their regions from opposite start nodes."""

    def __init__(
        self,
        board: Board,
        *,
        two_player: bool = False,
        rng: Optional[random.Random] = None,
        state: Optional[BoardState] = None,
    ) -> None:
        self.board = board
        self.two_player = two_player
        self.rng = rng if rng is not None else random.Random()
        self.ai = InvasionAI()
        self.history: list[BoardDelta] = []
        self.turn = 0
        self.game_over = False
        self.score_zero = 0
        self.score_one = 0
        if state is None:
            self.state = BoardState(board)
            self.new_game()
        else:
            if state.board is not board:
                raise ValueError("state belongs to a different board")
            self.state = state
            self._update_scores()

    def new_game(self) -> None:
        """Colour the board at random, keeping the two start nodes apart."""
        self.game_over = False
        self.turn = 0
        self.history.clear()
        last = 0
        for i in range(len(self.board)):
            color = self.rng.randrange(NUM_COLORS + 1)
            if color >= NUM_COLORS:
                color = last
            last = color
            self.state[i] = color
        p0, p1 = self.board.start_p0, self.board.start_p1
        while self.state[p0] == self.state[p1]:
            self.state[p0] = self.rng.randrange(NUM_COLORS)
        self._update_scores()

    def choose(self, color: int) -> Optional[int]:
        """Play `color` for the current player; returns the computer's reply, if any."""
        if not 0 <= color < NUM_COLORS:
            raise ValueError(f"colour {color} out of range")
        if self.game_over:
            raise InvasionError("Game over\nPress 'N' for a new game")
        p0, p1 = self.board.start_p0, self.board.start_p1
        if color in (self.state[p0], self.state[p1]):
            raise InvasionError("Already taken")

        before = self.state.copy()
        turn_from = self.turn
        _flood_fill(self.board, self.state, _start_of(self.board, self.turn), color)

        reply = None
        if self.two_player:
            self.turn = other_turn(self.turn)
        else:
            opponent = other_turn(self.turn)
            reply = self.ai.think(self.state, opponent)
            _flood_fill(self.board, self.state, _start_of(self.board, opponent), reply)

        self.history.append(BoardDelta.between(turn_from, before, self.turn, self.state))
        self._update_scores()
        return reply

    def undo(self) -> bool:
        """Take back the last turn; False if there is nothing to undo."""
        if not self.history:
            return False
        delta = self.history.pop()
        self.game_over = False
        self.turn = delta.undo(self.state)
        self._update_scores()
        return True

    def result_message(self) -> Optional[str]:
        """The final score text, or None while the game is still going."""
        if not self.game_over:
            return None
        name0 = COLOR_NAMES[self.state[self.board.start_p0]]
        name1 = COLOR_NAMES[self.state[self.board.start_p1]]
        text = (
            f"Player 1 ({name0}) had {self.score_zero} nodes and\n"
            f"Player 2 ({name1}) had {self.score_one} nodes"
        )
        if self.score_zero == self.score_one:
            return f"{text}\n\nA Tie!"
        winner = name0 if self.score_zero > self.score_one else name1
        return f"{text}\n\n{winner} Wins!"

    def _update_scores(self) -> None:
        self.score_zero, self.score_one = _region_sizes(self.board, self.state, 0)
        if self.score_zero + self.score_one == len(self.board):
            self.game_over = True
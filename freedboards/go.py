"""Go on arbitrary board topologies: rules, scoring, undo history and network play."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Optional

from freedboards.board import Board, BoardDelta, BoardState
from freedboards.net import NetError
from freedboards.shapes import board_exists, board_from_name

STRING_LIMIT = 400


class Stone(IntEnum):
    WHITE = 0
    BLACK = 1
    EMPTY = 2


HOST_PLAYER = Stone.BLACK
COLOR_NAMES = {Stone.WHITE: "White", Stone.BLACK: "Black", Stone.EMPTY: "Empty"}


class PacketType(IntEnum):
    MOVE = 10
    UNDO = 11
    PASS = 12
    REQUEST_UNDO = 13
    NEW_GAME = 14
    REQUEST_NEW = 15
    BUSY = 16
    NEW_BOARD = 17
    REQUEST_BOARD = 18
    REMOVE = 19


class Request(IntEnum):
    PLEASE = 20
    DENIED = 21
    SYSPLEASE = 22
    UNSUPPORTED = 23
    SYSUNSUPPORTED = 24


class GoError(Exception):
    """Raised for a move or action the game does not allow."""


def other_turn(turn: int) -> int:
    return (turn + 1) % 2


_PACKET = struct.Struct("<ii")


@dataclass(frozen=True)
class Packet:
    """A fixed-size message: a type code and one integer argument."""

    packet_type: int
    extra: int = 0

    SIZE = _PACKET.size

    def encode(self) -> bytes:
        return _PACKET.pack(int(self.packet_type), int(self.extra))

    @classmethod
    def decode(cls, data: bytes) -> Packet:
        if len(data) != _PACKET.size:
            raise ValueError("Packet not the correct size")
        packet_type, extra = _PACKET.unpack(data)
        return cls(packet_type, extra)


def _group(board: Board, state: BoardState, at: int) -> tuple[list[int], int]:
    """Stones connected to `at` and the number of distinct empty nodes touching them."""
    color = state[at]
    if color == Stone.EMPTY:
        return [], 0
    enemy = other_turn(color)
    seen = {at}
    stack = [at]
    stones: list[int] = []
    liberties = 0
    while stack:
        node = stack.pop()
        if state[node] == Stone.EMPTY:
            liberties += 1
            continue
        stones.append(node)
        for n in board[node].neighbors:
            if n not in seen and state[n] != enemy:
                seen.add(n)
                stack.append(n)
    return stones, liberties


class GoRules:
    """Stone placement with captures and suicide detection, and area counting."""

    def make_move(self, state: BoardState, at: int, turn: int) -> None:
        """Place a stone for `turn` at `at`, removing captured groups."""
        if state[at] != Stone.EMPTY:
            raise GoError("Spot already taken")
        board = state.board
        backup = state.copy()
        state[at] = turn
        for n in board[at].neighbors:
            if state[n] == other_turn(turn):
                stones, liberties = _group(board, state, n)
                if liberties == 0:
                    for s in stones:
                        state[s] = Stone.EMPTY
        _, liberties = _group(board, state, at)
        if liberties == 0:
            state.states[:] = backup.states
            raise GoError("Going there would be suicide")

    def land_stats(self, state: BoardState) -> tuple[int, int, int]:
        """Count empty areas enclosed by white only, black only, and the rest."""
        board = state.board
        white = black = free = 0
        seen: set[int] = set()
        for start in range(len(board)):
            if start in seen or state[start] != Stone.EMPTY:
                continue
            hit = set()
            size = 0
            seen.add(start)
            stack = [start]
            while stack:
                node = stack.pop()
                size += 1
                for n in board[node].neighbors:
                    value = state[n]
                    if value == Stone.EMPTY:
                        if n not in seen:
                            seen.add(n)
                            stack.append(n)
                    elif value in (Stone.WHITE, Stone.BLACK):
                        hit.add(value)
            if hit == {Stone.WHITE}:
                white += size
            elif hit == {Stone.BLACK}:
                black += size
            else:
                free += size
        return white, black, free


Notify = Callable[[str, str], None]
Confirm = Callable[[str, str], bool]


class GoGame:
    """A game of Go with undo, dead-stone removal and optional remote opponent."""

    def __init__(
        self,
        board: Board,
        *,
        notify: Optional[Notify] = None,
        confirm: Optional[Confirm] = None,
    ) -> None:
        self.messages: list[tuple[str, str]] = []
        self.notify: Notify = notify if notify is not None else self._record
        self.confirm: Confirm = confirm if confirm is not None else (lambda text, title: False)
        self.rules = GoRules()
        self.board = board
        self.state = BoardState(board, fill=Stone.EMPTY)
        self.history: list[BoardDelta] = []
        self.turn = Stone.BLACK
        self.scores = [0, 0]
        self.game_over = False
        self.remove_dead_mode = False
        self.transport = None
        self.is_net_game = False
        self.net_player = HOST_PLAYER
        self.new_game(False)

    def _record(self, text: str, title: str) -> None:
        self.messages.append((title, text))

    def _check_turn(self, user: bool) -> None:
        if self.is_net_game and user and self.turn != self.net_player:
            raise GoError("Not your turn")

    def new_game(self, user: bool = True) -> None:
        if self.is_net_game and user:
            self.send_packet(PacketType.REQUEST_NEW, Request.PLEASE)
            self.notify("New game request sent", "Sent")
            return
        self.game_over = False
        self.turn = Stone.BLACK
        self.remove_dead_mode = False
        self.scores = [0, 0]
        self.history.clear()
        self.state = BoardState(self.board, fill=Stone.EMPTY)

    def click(self, at: int, user: bool = True) -> None:
        """Play at `at`, or remove the stone there when in dead-stone removal mode."""
        if self.remove_dead_mode:
            if self.is_net_game and user and self.state[at] == other_turn(self.net_player):
                raise GoError("Can't remove other players stones")
        else:
            self._check_turn(user)

        turn_from = self.turn
        backup = self.state.copy()
        if not self.remove_dead_mode:
            self.rules.make_move(self.state, at, self.turn)
            delta = BoardDelta.between(turn_from, backup, self.turn, self.state)
            if self.history and delta.cancels(self.history[-1]):
                self.state.states[:] = backup.states
                raise GoError("KO Violation")
            self.history.append(delta)
            self.turn = Stone(other_turn(self.turn))
        else:
            if self.state[at] == Stone.EMPTY:
                raise GoError("Can't remove empty stones.")
            self.state[at] = Stone.EMPTY
            delta = BoardDelta.between(turn_from, backup, self.turn, self.state)
            self.history.append(delta)

        for change in delta.deltas:
            if change.after == Stone.EMPTY:
                self.scores[other_turn(change.before)] += 1

        if self.is_net_game and user:
            kind = PacketType.REMOVE if self.remove_dead_mode else PacketType.MOVE
            self.send_packet(kind, at)

    def pass_turn(self, user: bool = True) -> None:
        self._check_turn(user)
        turn_from = self.turn
        self.turn = Stone(other_turn(self.turn))
        self.history.append(BoardDelta.between(turn_from, self.state, self.turn, self.state))
        if self.is_net_game and user:
            self.send_packet(PacketType.PASS, 0)

    def undo(self, user: bool = True, accepted: bool = False) -> bool:
        """Take back the last turn; False if nothing was undone here."""
        if self.is_net_game and user:
            if self.turn != self.net_player:
                self.send_packet(PacketType.REQUEST_UNDO, Request.PLEASE)
                self.notify("An Undo request was sent", "Undo")
                return False
            if not accepted:
                raise GoError("You cannot undo another players move")

        if not self.history:
            return False
        delta = self.history.pop()
        self.game_over = False
        self.turn = Stone(delta.undo(self.state))
        for change in delta.deltas:
            if change.after == Stone.EMPTY:
                self.scores[other_turn(change.before)] -= 1

        if self.is_net_game and user:
            self.send_packet(PacketType.UNDO, 0)
        return True

    def end_game(self) -> str:
        """Count territory and captures and return the result text."""
        white, black, free = self.rules.land_stats(self.state)
        total_white = self.scores[Stone.WHITE] + white
        total_black = self.scores[Stone.BLACK] + black
        text = (
            f"White: {white} Land + {self.scores[Stone.WHITE]} Dead = {total_white}\n"
            f"Black: {black} Land + {self.scores[Stone.BLACK]} Dead = {total_black}\n"
            f"Free Land: {free}\n"
        )
        if total_white != total_black:
            winner = Stone.WHITE if total_white > total_black else Stone.BLACK
            return f"{text}\n{COLOR_NAMES[winner]} Wins!"
        return f"{text}\nTie!"

    def switch_board(self, name: str, user: bool = True) -> None:
        if self.is_net_game and user:
            self.send_packet(PacketType.REQUEST_BOARD, Request.PLEASE, name)
            self.notify("New board request sent", "Requested")
            return
        try:
            board = board_from_name(name)
        except (OSError, ValueError) as exc:
            raise GoError("Couldn't create that board") from exc
        self.board = board
        self.new_game(False)

    def init_remote_game(self, transport) -> None:
        """Start playing against the peer on `transport`."""
        self.transport = transport
        self.is_net_game = True
        self.net_player = HOST_PLAYER if transport.is_host else Stone(other_turn(HOST_PLAYER))
        if transport.is_host:
            self.send_packet(PacketType.REQUEST_BOARD, Request.SYSPLEASE, self.board.name or "")

    def send_packet(self, packet_type: int, extra: int = 0, text: Optional[str] = None) -> None:
        if self.transport is None:
            raise GoError("no remote game")
        self.transport.send(Packet(int(packet_type), int(extra)).encode())
        if text is not None:
            self.transport.send_string(text)

    def check_network(self) -> bool:
        """Handle every pending packet; True if anything was received."""
        if not self.is_net_game or self.transport is None:
            return False
        received = False
        while True:
            try:
                if not self.transport.data_available():
                    break
                received = True
                packet = Packet.decode(self.transport.receive(Packet.SIZE))
                self._handle(packet)
            except NetError:
                self.notify("Connection Lost", "Game Over")
                self.transport.close()
                self.is_net_game = False
                return True
            except GoError as exc:
                self.notify(str(exc), "Invalid Move")
        return received

    def _handle(self, packet: Packet) -> None:
        kind, extra = packet.packet_type, packet.extra
        if kind == PacketType.BUSY:
            return
        if kind == PacketType.REMOVE:
            old = self.remove_dead_mode
            self.remove_dead_mode = True
            try:
                self.click(extra, False)
            finally:
                self.remove_dead_mode = old
        elif kind == PacketType.MOVE:
            self.click(extra, False)
        elif kind == PacketType.UNDO:
            self.undo(False, True)
        elif kind == PacketType.PASS:
            self.pass_turn(False)
            self.notify("Opponent Passed", "Passed")
        elif kind == PacketType.REQUEST_UNDO:
            self._handle_undo_request(extra)
        elif kind == PacketType.NEW_GAME:
            self.new_game(False)
        elif kind == PacketType.NEW_BOARD:
            self.switch_board(self.transport.receive_string(STRING_LIMIT), False)
        elif kind == PacketType.REQUEST_BOARD:
            self._handle_board_request(extra)
        elif kind == PacketType.REQUEST_NEW:
            self._handle_new_request(extra)
        else:
            self.notify("Unknown Packet Type", "Net Error")

    def _handle_undo_request(self, extra: int) -> None:
        if extra == Request.PLEASE:
            if self.confirm("Undo requested.\nDo you accept?", "Undo Request"):
                self.undo(True, True)
            else:
                self.send_packet(PacketType.REQUEST_UNDO, Request.DENIED)
        elif extra == Request.DENIED:
            self.notify("Undo request denied", "Denied")
        else:
            self.notify("Unknown request type", "Net Error")

    def _handle_board_request(self, extra: int) -> None:
        if extra == Request.DENIED:
            self.notify("New board request denied", "Denied")
        elif extra == Request.SYSUNSUPPORTED:
            self.send_packet(PacketType.REQUEST_BOARD, Request.SYSPLEASE, "mobius")
        elif extra == Request.UNSUPPORTED:
            self.notify("The other player doesn't support\nthat board type", "Board error")
        elif extra in (Request.PLEASE, Request.SYSPLEASE):
            name = self.transport.receive_string(STRING_LIMIT)
            if not board_exists(name):
                reply = Request.SYSUNSUPPORTED if extra == Request.SYSPLEASE else Request.UNSUPPORTED
                self.send_packet(PacketType.REQUEST_BOARD, reply)
                return
            accept = extra == Request.SYSPLEASE or self.confirm(
                f"Switch to {name} board requested.\nDo you accept?", "Board Request"
            )
            if accept:
                self.switch_board(name, False)
                self.send_packet(PacketType.NEW_BOARD, 0, name)
            else:
                self.send_packet(PacketType.REQUEST_BOARD, Request.DENIED)

    def _handle_new_request(self, extra: int) -> None:
        if extra == Request.SYSPLEASE:
            self.new_game(False)
        elif extra == Request.PLEASE:
            if self.confirm("An new game was requested,\ndo you accept?", "Undo Request"):
                self.new_game(False)
                self.send_packet(PacketType.NEW_GAME, 0)
            else:
                self.send_packet(PacketType.REQUEST_NEW, Request.DENIED)
        elif extra == Request.DENIED:
            self.notify("New game requst denied!", "Denied")
        else:
            self.notify("Unknown request type", "Net Error")
import struct

import pytest

from freedboards.board import BoardState
from freedboards.go import (
    GoError,
    GoGame,
    GoRules,
    Packet,
    PacketType,
    Request,
    Stone,
)
from freedboards.net import NetError
from freedboards.shapes import standard

W, B, E = Stone.WHITE, Stone.BLACK, Stone.EMPTY


class FakeTransport:
    def __init__(self, is_host=False):
        self.is_host = is_host
        self.incoming = bytearray()
        self.sent = []
        self.closed = False

    def feed(self, data):
        self.incoming.extend(data)

    def feed_string(self, text):
        raw = text.encode()
        self.feed(struct.pack("<i", len(raw) + 2) + raw + b"\0\0")

    def data_available(self):
        return bool(self.incoming)

    def receive(self, size):
        if len(self.incoming) < size:
            self.incoming.clear()
            raise NetError("Connection lost")
        data = bytes(self.incoming[:size])
        del self.incoming[:size]
        return data

    def receive_string(self, max_length=400):
        (length,) = struct.unpack("<i", self.receive(4))
        return self.receive(length).split(b"\0", 1)[0].decode()

    def send(self, data):
        self.sent.append(("bytes", bytes(data)))

    def send_string(self, text):
        self.sent.append(("string", text))

    def close(self):
        self.closed = True


def packets(transport):
    return [Packet.decode(d) for kind, d in transport.sent if kind == "bytes"]


def state_of(board, values):
    return BoardState(board, states=bytes(values))


def test_packet_wire_bytes():
    assert Packet(PacketType.MOVE, 5).encode() == b"\x0a\x00\x00\x00\x05\x00\x00\x00"


def test_packet_round_trip():
    packet = Packet(PacketType.REQUEST_BOARD, Request.SYSPLEASE)
    assert Packet.decode(packet.encode()) == packet
    assert Packet.SIZE == 8


def test_packet_decode_wrong_size():
    with pytest.raises(ValueError):
        Packet.decode(b"\x00\x01")


def test_make_move_on_taken_spot():
    board = standard(3, 3)
    state = state_of(board, [B] + [E] * 8)
    with pytest.raises(GoError, match="Spot already taken"):
        GoRules().make_move(state, 0, W)


def test_make_move_captures():
    board = standard(3, 3)
    values = [E] * 9
    values[4] = W
    values[1] = values[3] = values[5] = B
    state = state_of(board, values)
    GoRules().make_move(state, 7, B)
    assert state[4] == E
    assert state[7] == B


def test_suicide_restores_state():
    board = standard(3, 3)
    values = [E] * 9
    values[1] = values[3] = B
    state = state_of(board, values)
    before = bytes(state.states)
    with pytest.raises(GoError, match="suicide"):
        GoRules().make_move(state, 0, W)
    assert bytes(state.states) == before


def test_land_stats_empty_board_is_free():
    board = standard(3, 3)
    state = state_of(board, [E] * 9)
    assert GoRules().land_stats(state) == (0, 0, len(board))


def test_land_stats_single_owner_and_state_unchanged():
    board = standard(3, 3)
    values = [E] * 9
    values[4] = B
    state = state_of(board, values)
    white, black, free = GoRules().land_stats(state)
    assert (white, free) == (0, 0)
    assert black == len(board) - 1
    assert bytes(state.states) == bytes(values)


def test_new_game_defaults():
    game = GoGame(standard(3, 3))
    assert game.turn == B
    assert game.scores == [0, 0]
    assert all(v == E for v in game.state)


def test_click_and_undo():
    game = GoGame(standard(3, 3))
    game.click(4)
    assert game.state[4] == B
    assert game.turn == W
    assert game.undo() is True
    assert game.state[4] == E
    assert game.turn == B
    assert game.undo() is False


def test_pass_turn_records_history():
    game = GoGame(standard(3, 3))
    game.pass_turn()
    assert game.turn == W
    assert len(game.history) == 1
    game.undo()
    assert game.turn == B


def _ko_game():
    game = GoGame(standard(4, 3))
    layout = {1: B, 2: W, 4: B, 5: W, 7: W, 9: B, 10: W}
    for index, stone in layout.items():
        game.state[index] = stone
    game.turn = B
    return game


def test_capture_scores_and_ko():
    game = _ko_game()
    game.click(6)
    assert game.state[5] == E
    assert game.scores[B] == 1
    before = bytes(game.state.states)
    with pytest.raises(GoError, match="KO Violation"):
        game.click(5)
    assert bytes(game.state.states) == before
    assert game.turn == W


def test_undo_restores_capture_score():
    game = _ko_game()
    game.click(6)
    game.undo()
    assert game.scores == [0, 0]
    assert game.state[5] == W


def test_remove_dead_mode():
    game = GoGame(standard(3, 3))
    game.click(0)
    game.remove_dead_mode = True
    with pytest.raises(GoError, match="empty"):
        game.click(8)
    game.click(0)
    assert game.state[0] == E
    assert game.scores[W] == 1


def test_end_game_winner():
    game = GoGame(standard(3, 3))
    game.click(4)
    text = game.end_game()
    assert text.endswith("Black Wins!")
    assert "Free Land: 0" in text


def test_end_game_tie_on_empty_board():
    game = GoGame(standard(3, 3))
    assert game.end_game().endswith("\nTie!")


def test_switch_board_unknown_raises():
    game = GoGame(standard(3, 3))
    with pytest.raises(GoError):
        game.switch_board("no-such-board-name")


def test_switch_board_named():
    game = GoGame(standard(3, 3))
    game.switch_board("flat")
    assert game.board.name == "flat"
    assert len(game.state) == len(game.board)


def test_init_remote_game_as_host_requests_board():
    board = standard(3, 3)
    board.name = "flat"
    game = GoGame(board)
    transport = FakeTransport(is_host=True)
    game.init_remote_game(transport)
    assert game.net_player == B
    assert transport.sent[0] == (
        "bytes",
        Packet(PacketType.REQUEST_BOARD, Request.SYSPLEASE).encode(),
    )
    assert transport.sent[1] == ("string", "flat")


def test_not_your_turn_in_net_game():
    game = GoGame(standard(3, 3))
    game.init_remote_game(FakeTransport(is_host=False))
    assert game.net_player == W
    with pytest.raises(GoError, match="Not your turn"):
        game.click(0)


def test_remote_move_is_applied():
    game = GoGame(standard(3, 3))
    transport = FakeTransport(is_host=False)
    game.init_remote_game(transport)
    transport.feed(Packet(PacketType.MOVE, 3).encode())
    assert game.check_network() is True
    assert game.state[3] == B
    assert game.turn == W
    game.click(5)
    assert packets(transport)[-1] == Packet(PacketType.MOVE, 5)


def test_unsupported_board_request_is_answered():
    game = GoGame(standard(3, 3))
    transport = FakeTransport()
    game.init_remote_game(transport)
    transport.feed(Packet(PacketType.REQUEST_BOARD, Request.PLEASE).encode())
    transport.feed_string("no-such-board-name")
    game.check_network()
    assert packets(transport)[-1] == Packet(PacketType.REQUEST_BOARD, Request.UNSUPPORTED)


def test_system_board_request_switches_board():
    game = GoGame(standard(3, 3))
    transport = FakeTransport()
    game.init_remote_game(transport)
    transport.feed(Packet(PacketType.REQUEST_BOARD, Request.SYSPLEASE).encode())
    transport.feed_string("flat")
    game.check_network()
    assert game.board.name == "flat"
    assert transport.sent[-1] == ("string", "flat")


def test_new_game_request_declined_by_default():
    game = GoGame(standard(3, 3))
    transport = FakeTransport()
    game.init_remote_game(transport)
    transport.feed(Packet(PacketType.REQUEST_NEW, Request.PLEASE).encode())
    game.check_network()
    assert packets(transport)[-1] == Packet(PacketType.REQUEST_NEW, Request.DENIED)


def test_connection_lost():
    game = GoGame(standard(3, 3))
    transport = FakeTransport()
    game.init_remote_game(transport)
    transport.feed(b"\x01\x02")
    assert game.check_network() is True
    assert transport.closed
    assert game.is_net_game is False
    assert ("Game Over", "Connection Lost") in game.messages


def test_unknown_packet_type_notifies():
    game = GoGame(standard(3, 3))
    transport = FakeTransport()
    game.init_remote_game(transport)
    transport.feed(Packet(99, 0).encode())
    game.check_network()
    assert ("Net Error", "Unknown Packet Type") in game.messages


def test_send_packet_without_transport():
    game = GoGame(standard(3, 3))
    with pytest.raises(GoError):
        game.send_packet(PacketType.BUSY, 0)
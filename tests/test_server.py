import pytest

from xqengine.ucci import START_FEN
from xqengine.server import EngineServer, encode_packet


@pytest.fixture
def server():
    srv = EngineServer("127.0.0.1", 0)
    srv.handle_cmd("position startpos")
    return srv


def test_encode_packet_wire_format():
    assert encode_packet("ucci") == b"\x04\x00\x00\x00\x00\x00\x00\x00ucci"


def test_encode_empty_text_gives_nothing():
    assert encode_packet("") == b""


def test_handshake_replies():
    srv = EngineServer()
    assert srv.handle_cmd("ucci") == "ucci fighting!!!"
    assert srv.handle_cmd("isready") == "isready ready"
    assert srv.handle_cmd("quit") == "quit"


def test_commands_without_reply():
    srv = EngineServer()
    assert srv.handle_cmd("go") == ""
    assert srv.handle_cmd("stop") == ""
    assert srv.handle_cmd("nonsense") == ""


def test_getpos_after_startpos(server):
    assert server.handle_cmd("getpos") == "getpos " + START_FEN


def test_makemv_moves_the_piece(server):
    assert server.handle_cmd("makemv h2e2") == "makemv ok"
    assert server.position.side == 1
    assert server.handle_cmd("getpos") == (
        "getpos rnbakabnr/9/1c5c1/p1p1p1p1p/9/9/P1P1P1P1P/1C2C4/9/RNBAKABNR"
    )


def test_position_with_moves_matches_makemv(server):
    server.handle_cmd("makemv h2e2")
    after_makemv = server.handle_cmd("getpos")
    other = EngineServer()
    other.handle_cmd(f"position {START_FEN} r moves h2e2")
    assert other.handle_cmd("getpos") == after_makemv
    assert other.position.side == server.position.side


def test_makemv_from_empty_square_is_illegal(server):
    assert server.handle_cmd("makemv e5e4") == "makemv illegal"
    assert server.handle_cmd("getpos") == "getpos " + START_FEN
    assert server.position.side == 0


def test_getmv_lists_rook_moves(server):
    reply = server.handle_cmd("getmv a0")
    head, *moves = reply.split()
    assert head == "getmv"
    assert set(moves) == {"a0a1", "a0a2"}


def test_getmv_moves_all_start_on_the_square(server):
    reply = server.handle_cmd("getmv b2")
    moves = reply.split()[1:]
    assert moves
    assert all(mv.startswith("b2") for mv in moves)


def test_getmv_on_empty_square(server):
    assert server.handle_cmd("getmv e5") == "getmv "


def test_position_black_to_move():
    srv = EngineServer()
    srv.handle_cmd(f"position {START_FEN} b")
    assert srv.position.side == 1
    assert srv.handle_cmd("getpos") == "getpos " + START_FEN


def test_bad_fen_raises():
    srv = EngineServer()
    with pytest.raises(ValueError):
        srv.handle_cmd("position rnbakabnr/9 r")


def test_feed_handles_split_packets():
    srv = EngineServer()
    data = encode_packet("ucci") + encode_packet("isready")
    assert srv.feed(data[:3]) == []
    assert srv.feed(data[3:14]) == ["ucci fighting!!!"]
    assert srv.feed(data[14:]) == ["isready ready"]


def test_feed_skips_empty_replies():
    srv = EngineServer()
    data = encode_packet("position startpos") + encode_packet("getpos")
    assert srv.feed(data) == ["getpos " + START_FEN]


def test_feed_rejects_negative_length():
    srv = EngineServer()
    with pytest.raises(ValueError):
        srv.feed(b"\xff" * 8 + b"ucci")